"""Tests for the sync orchestrator.

Uses a scripted in-memory destination so step ordering, absorption of probe
404s, settle behavior and retry decisions can be checked without HTTP.
"""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from remotesync.core.shared_models import FailureKind, ProviderKind, SyncStep
from remotesync.platform.destinations._base import BaseDestination
from remotesync.platform.sync.exceptions import SyncContractError
from remotesync.platform.sync.orchestrator import SyncOrchestrator
from remotesync.schemas.sync import CredentialContext, RemoteResourceHandle, SyncRequest


def status_error(status_code: int, headers: Optional[Dict[str, str]] = None) -> httpx.HTTPStatusError:
    """Build the error an adapter raises for a non-2xx response."""
    request = httpx.Request("GET", "https://store.example.com/resource")
    response = httpx.Response(status_code, headers=headers, request=request)
    return httpx.HTTPStatusError(f"HTTP {status_code}", request=request, response=response)


class Script:
    """Queued results per step plus a log of the calls made."""

    def __init__(self, **results: List[Any]):
        self.results = {name: list(values) for name, values in results.items()}
        self.calls: List[str] = []
        self.write_handles: List[RemoteResourceHandle] = []

    async def run(self, name: str) -> Any:
        self.calls.append(name)
        queue = self.results.get(name)
        if not queue:
            raise AssertionError(f"unexpected call to {name}")
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, BaseException):
            raise result
        return result


class ScriptedDestination(BaseDestination):
    """Destination that creates resources and needs revision tokens."""

    _name = "Scripted"
    _short_name = "scripted"
    _supports_create = True
    _requires_revision = True

    def __init__(self, client: httpx.AsyncClient, script: Script):
        super().__init__(client)
        self.script = script

    def auth_headers(self, credentials):
        return {}

    async def resolve_identity(self, credentials):
        return await self.script.run("identity")

    async def probe(self, credentials, request, identity):
        return await self.script.run("probe")

    async def create_resource(self, credentials, request, identity):
        return await self.script.run("create")

    async def fetch_revision(self, credentials, request, identity):
        return await self.script.run("fetch_revision")

    async def write(self, credentials, request, identity, handle):
        self.script.write_handles.append(handle)
        return await self.script.run("write")


class ScriptedSearchDestination(ScriptedDestination):
    """Destination without create or revision support (search-and-upload stores)."""

    _short_name = "scripted_search"
    _supports_create = False
    _requires_revision = False


def _unused_client_factory():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("destinations must not use the client in these tests")

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def credentials():
    """Valid credential context."""
    return CredentialContext(token="tok", provider=ProviderKind.GITHUB, resource_key="repo")


@pytest.fixture
def sync_request():
    """Request with a multi-byte text payload."""
    return SyncRequest(
        content="print('héllo')".encode("utf-8"),
        content_type="text/x-python",
        destination_name="main.py",
    )


def _orchestrator(script: Script, destination_class=ScriptedDestination, **kwargs):
    return SyncOrchestrator(
        destination_class,
        client_factory=kwargs.pop("client_factory", _unused_client_factory),
        settle_delay=kwargs.pop("settle_delay", 1.0),
        destination_options={"script": script},
        **kwargs,
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, "", "   "])
async def test_missing_credential_short_circuits_before_io(token, sync_request):
    """An empty credential fails as unauthorized without opening a client."""
    script = Script()
    client_factory = MagicMock()
    orchestrator = _orchestrator(script, client_factory=client_factory)

    outcome = await orchestrator.synchronize(
        CredentialContext(token=token, provider=ProviderKind.GITHUB, resource_key="repo"),
        sync_request,
    )

    assert not outcome.success
    assert outcome.error_kind is FailureKind.UNAUTHORIZED
    client_factory.assert_not_called()
    assert script.calls == []


@pytest.mark.asyncio
async def test_missing_destination_name_rejected_before_io(credentials):
    """A blank destination name is a contract violation, rejected before I/O."""
    script = Script()
    client_factory = MagicMock()
    orchestrator = _orchestrator(script, client_factory=client_factory)

    outcome = await orchestrator.synchronize(
        credentials, SyncRequest(content=b"x", destination_name="  ")
    )

    assert outcome.error_kind is FailureKind.INVALID_REQUEST
    client_factory.assert_not_called()
    assert script.calls == []


@pytest.mark.asyncio
async def test_absent_resource_probe_create_write(credentials, sync_request):
    """Probe 404 → create → settle → write without a revision token."""
    script = Script(
        identity=["octocat"],
        probe=[status_error(404)],
        create=[None],
        fetch_revision=[None],
        write=["https://store.example.com/octocat/repo/main.py"],
    )

    with patch(
        "remotesync.platform.sync.orchestrator.asyncio.sleep", new_callable=AsyncMock
    ) as mock_sleep:
        outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.success
    assert outcome.url == "https://store.example.com/octocat/repo/main.py"
    assert script.calls == [
        "identity",
        "probe",
        "create",
        "fetch_revision",
        "fetch_revision",
        "write",
    ]
    assert script.write_handles[0].revision_token is None
    # Exactly one bounded settle wait between the two revision fetches
    mock_sleep.assert_awaited_once_with(1.0)


@pytest.mark.asyncio
async def test_created_resource_visible_immediately_skips_settle(credentials, sync_request):
    """When the first post-create fetch finds a revision, no settle wait happens."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle.absent()],
        create=[None],
        fetch_revision=["readme-sha"],
        write=["https://store.example.com/README.md"],
    )

    with patch(
        "remotesync.platform.sync.orchestrator.asyncio.sleep", new_callable=AsyncMock
    ) as mock_sleep:
        outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.success
    mock_sleep.assert_not_awaited()
    assert script.write_handles[0].revision_token == "readme-sha"


@pytest.mark.asyncio
async def test_existing_resource_skips_create_and_passes_revision(credentials, sync_request):
    """An existing resource with revision R goes probe → write with exactly R."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("R")],
        write=["https://store.example.com/main.py"],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.success
    assert script.calls == ["identity", "probe", "write"]
    assert script.write_handles[0].revision_token == "R"


@pytest.mark.asyncio
async def test_existing_resource_without_token_fetches_revision(credentials, sync_request):
    """An existing container with an unresolved revision fetches it before writing."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True)],
        fetch_revision=["abc123"],
        write=["https://store.example.com/main.py"],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.success
    assert script.calls == ["identity", "probe", "fetch_revision", "write"]
    assert script.write_handles[0].revision_token == "abc123"


@pytest.mark.asyncio
async def test_probe_unauthorized_aborts(credentials, sync_request):
    """Probe 401 fails immediately; nothing is created or written."""
    script = Script(identity=["octocat"], probe=[status_error(401)])

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.UNAUTHORIZED
    assert outcome.status_code == 401
    assert outcome.step is SyncStep.PROBE
    assert script.calls == ["identity", "probe"]


@pytest.mark.asyncio
async def test_identity_failure_is_fatal_and_not_retried(credentials, sync_request):
    """A server error while resolving identity is fatal and not re-run."""
    script = Script(identity=[status_error(500)])

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.FATAL
    assert outcome.step is SyncStep.IDENTITY
    assert script.calls == ["identity"]


@pytest.mark.asyncio
async def test_transient_write_failure_reruns_workflow_once(credentials, sync_request):
    """A 503 on write re-runs the whole workflow, which then succeeds."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("R")],
        write=[status_error(503), "https://store.example.com/main.py"],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.success
    assert script.calls == ["identity", "probe", "write", "identity", "probe", "write"]


@pytest.mark.asyncio
async def test_transient_failure_is_retried_at_most_once(credentials, sync_request):
    """A write that keeps failing with 5xx is attempted exactly twice."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("R")],
        write=[status_error(503)],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.TRANSIENT
    assert outcome.status_code == 503
    assert script.calls.count("write") == 2


@pytest.mark.asyncio
async def test_write_not_found_after_probe_is_transient(credentials, sync_request):
    """The resource vanishing between probe and write is re-run once, then surfaced."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("R")],
        write=[status_error(404)],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.NOT_FOUND_TRANSIENT
    assert outcome.step is SyncStep.WRITE
    assert script.calls.count("write") == 2


@pytest.mark.asyncio
async def test_rate_limit_is_not_retried(credentials, sync_request):
    """429 is surfaced immediately with the provider's Retry-After."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("R")],
        write=[status_error(429, {"Retry-After": "30"})],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.RATE_LIMITED
    assert outcome.retry_after == 30.0
    assert script.calls.count("write") == 1


@pytest.mark.asyncio
async def test_network_fault_retried_once(credentials, sync_request):
    """Connection errors count as transient and are re-run once."""
    script = Script(identity=["octocat"], probe=[httpx.ConnectError("connection refused")])

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.NETWORK_FAULT
    assert outcome.status_code is None
    assert script.calls == ["identity", "probe", "identity", "probe"]


@pytest.mark.asyncio
async def test_conflicting_write_is_fatal(credentials, sync_request):
    """A rejected write (stale revision) is fatal and not retried with the same token."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("stale")],
        write=[status_error(409)],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.FATAL
    assert outcome.status_code == 409
    assert script.calls.count("write") == 1


@pytest.mark.asyncio
async def test_unexpected_exception_becomes_fatal(credentials, sync_request):
    """Non-HTTP exceptions are caught at the boundary and reported as fatal."""
    script = Script(
        identity=["octocat"],
        probe=[RemoteResourceHandle(exists=True).with_revision("R")],
        write=[KeyError("content")],
    )

    outcome = await _orchestrator(script).synchronize(credentials, sync_request)

    assert outcome.error_kind is FailureKind.FATAL
    assert outcome.error_detail == "Internal error during sync"


@pytest.mark.asyncio
async def test_search_store_goes_straight_to_write(sync_request):
    """Stores without create support write directly when the probe finds nothing."""
    script = Script(
        identity=[None],
        probe=[RemoteResourceHandle.absent()],
        write=["https://drive.example.com/file/1"],
    )
    credentials = CredentialContext(token="tok", provider=ProviderKind.GOOGLE_DRIVE)

    outcome = await _orchestrator(script, ScriptedSearchDestination).synchronize(
        credentials, sync_request
    )

    assert outcome.success
    assert script.calls == ["identity", "probe", "write"]
    assert not script.write_handles[0].exists


def test_write_requires_resolved_revision():
    """Writing an existing resource before resolving its revision is a logic error."""
    orchestrator = _orchestrator(Script())
    destination = ScriptedDestination(MagicMock(), Script())

    with pytest.raises(SyncContractError):
        orchestrator._ensure_writable(destination, RemoteResourceHandle(exists=True))

    orchestrator._ensure_writable(destination, RemoteResourceHandle.absent())
    orchestrator._ensure_writable(
        destination, RemoteResourceHandle(exists=True).with_revision(None)
    )
