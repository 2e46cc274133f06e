"""Sync orchestrator.

Drives a destination adapter through identity → probe → create-if-missing →
revision resolution → write, one awaited call at a time.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_none

from remotesync.core.config import settings
from remotesync.core.logging import ContextualLogger, LoggerConfigurator
from remotesync.core.shared_models import FailureKind, SyncStep
from remotesync.platform.destinations._base import BaseDestination
from remotesync.platform.sync.classifier import (
    classify_exception,
    is_retryable_failure,
    retry_after_seconds,
)
from remotesync.platform.sync.exceptions import SyncContractError, SyncStepError
from remotesync.schemas.sync import (
    CredentialContext,
    RemoteResourceHandle,
    SyncOutcome,
    SyncRequest,
)

T = TypeVar("T")

# One run plus one re-run for transient failures
WORKFLOW_MAX_ATTEMPTS = 2


def default_client_factory() -> httpx.AsyncClient:
    """HTTP client used for one sync call."""
    return httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        headers={"User-Agent": settings.USER_AGENT},
    )


def _log_workflow_retry(retry_state) -> None:
    exc = retry_state.outcome.exception()
    orchestrator = retry_state.args[0] if retry_state.args else None
    log = getattr(orchestrator, "logger", None) or LoggerConfigurator.configure_logger(__name__)
    log.warning(f"Sync attempt {retry_state.attempt_number} failed, re-running once: {exc}")


class SyncOrchestrator:
    """Runs the create-or-update workflow against one destination.

    The orchestrator is provider-agnostic: adapters translate steps into HTTP
    calls, the orchestrator orders them and decides what each failure means.
    It holds no state between calls; build one per sync or reuse it freely.
    """

    def __init__(
        self,
        destination_class: Type[BaseDestination],
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
        settle_delay: Optional[float] = None,
        destination_options: Optional[Dict[str, Any]] = None,
        logger: Optional[ContextualLogger] = None,
    ):
        """Initialize the orchestrator.

        Args:
            destination_class: Adapter class for the target store
            client_factory: Builds the HTTP client for one call
            settle_delay: Seconds to wait once after creating a resource
            destination_options: Keyword options passed to the adapter
            logger: Contextual logger; one is configured when omitted
        """
        self.destination_class = destination_class
        self.client_factory = client_factory or default_client_factory
        self.settle_delay = settings.SETTLE_DELAY_SECONDS if settle_delay is None else settle_delay
        self.destination_options = destination_options or {}
        self.logger = logger or LoggerConfigurator.configure_logger(
            "remotesync.platform.sync",
            dimensions={"destination": destination_class._short_name},
        )

    # =========================================================================
    # Main Entry Point
    # =========================================================================

    async def synchronize(
        self, credentials: CredentialContext, request: SyncRequest
    ) -> SyncOutcome:
        """Reconcile the request's content with the remote store.

        Never raises: every failure comes back as a failed SyncOutcome.

        Args:
            credentials: Caller's credential and target selection
            request: Content and destination to write

        Returns:
            Success with the resource URL, or a typed failure
        """
        log = self.logger.with_context(
            resource_key=credentials.resource_key or "",
            destination_name=request.destination_name,
        )

        if not credentials.has_token:
            log.warning("Sync rejected: missing credential")
            return SyncOutcome.failed(FailureKind.UNAUTHORIZED, "Missing credential")

        problem = self.destination_class.validate_request(credentials, request)
        if problem:
            log.warning(f"Sync rejected: {problem}")
            return SyncOutcome.failed(FailureKind.INVALID_REQUEST, problem)

        try:
            async with self.client_factory() as client:
                destination = await self.destination_class.create(
                    client, logger=log, **self.destination_options
                )
                url = await self._run_workflow(destination, credentials, request, log)
        except SyncStepError as e:
            self._log_failure(log, e)
            return SyncOutcome.failed(
                e.kind,
                e.detail,
                status_code=e.status_code,
                step=e.step,
                retry_after=e.retry_after,
            )
        except SyncContractError as e:
            log.error(f"Sync workflow contract violated: {e}")
            return SyncOutcome.failed(FailureKind.FATAL, str(e))
        except Exception as e:
            log.exception(f"Unexpected error during sync: {e}")
            return SyncOutcome.failed(FailureKind.FATAL, "Internal error during sync")

        log.info(f"Synced {request.destination_name} ({len(request.content)} bytes)")
        return SyncOutcome.succeeded(url)

    # =========================================================================
    # Workflow
    # =========================================================================

    @retry(
        stop=stop_after_attempt(WORKFLOW_MAX_ATTEMPTS),
        retry=retry_if_exception(is_retryable_failure),
        wait=wait_none(),
        before_sleep=_log_workflow_retry,
        reraise=True,
    )
    async def _run_workflow(
        self,
        destination: BaseDestination,
        credentials: CredentialContext,
        request: SyncRequest,
        log: ContextualLogger,
    ) -> Optional[str]:
        """One full pass of the workflow. Re-run once on retryable failures."""
        # Step 1: identity
        identity = await self._step(
            SyncStep.IDENTITY, lambda: destination.resolve_identity(credentials)
        )

        # Step 2: existence probe
        handle = await self._probe(destination, credentials, request, identity)

        # Step 3: conditional creation
        if not handle.exists and destination.supports_create:
            await self._step(
                SyncStep.CREATE,
                lambda: destination.create_resource(credentials, request, identity),
            )
            handle = await self._resolve_revision_after_create(
                destination, credentials, request, identity, log
            )

        # Step 4: revision resolution
        elif handle.exists and destination.requires_revision and not handle.revision_resolved:
            revision = await self._step(
                SyncStep.FETCH_REVISION,
                lambda: destination.fetch_revision(credentials, request, identity),
            )
            handle = handle.with_revision(revision)

        # Step 5: write
        self._ensure_writable(destination, handle)
        log.with_context(
            exists=handle.exists, has_revision=bool(handle.revision_token)
        ).debug("Writing content")
        return await self._step(
            SyncStep.WRITE, lambda: destination.write(credentials, request, identity, handle)
        )

    async def _probe(
        self,
        destination: BaseDestination,
        credentials: CredentialContext,
        request: SyncRequest,
        identity: Optional[str],
    ) -> RemoteResourceHandle:
        """Probe the store; a not-found answer means "absent", not failure."""
        try:
            return await self._step(
                SyncStep.PROBE, lambda: destination.probe(credentials, request, identity)
            )
        except SyncStepError as e:
            if e.kind is FailureKind.NOT_FOUND:
                return RemoteResourceHandle.absent()
            raise

    async def _resolve_revision_after_create(
        self,
        destination: BaseDestination,
        credentials: CredentialContext,
        request: SyncRequest,
        identity: Optional[str],
        log: ContextualLogger,
    ) -> RemoteResourceHandle:
        """Fetch the revision of a just-created resource.

        Creation may not be visible yet. If the first fetch finds nothing, wait
        the settle delay once and fetch exactly once more; an absent token is
        then accepted as a brand-new resource.
        """
        handle = RemoteResourceHandle(exists=True)
        if not destination.requires_revision:
            return handle.with_revision(None)

        async def fetch() -> Optional[str]:
            return await self._step(
                SyncStep.FETCH_REVISION,
                lambda: destination.fetch_revision(credentials, request, identity),
            )

        revision = await fetch()
        if revision is None:
            log.debug(f"Revision not visible yet, settling for {self.settle_delay}s")
            await asyncio.sleep(self.settle_delay)
            revision = await fetch()
        return handle.with_revision(revision)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _step(self, step: SyncStep, call: Callable[[], Awaitable[T]]) -> T:
        """Run one step, converting provider errors into SyncStepError."""
        try:
            return await call()
        except httpx.HTTPStatusError as e:
            raise SyncStepError(
                step,
                classify_exception(e, step),
                f"{e.request.method} {e.request.url.path} returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                retry_after=retry_after_seconds(e.response),
            ) from e
        except httpx.RequestError as e:
            raise SyncStepError(
                step,
                classify_exception(e, step),
                f"{type(e).__name__}: {e}" if str(e) else type(e).__name__,
            ) from e

    def _ensure_writable(self, destination: BaseDestination, handle: RemoteResourceHandle) -> None:
        if destination.requires_revision and handle.exists and not handle.revision_resolved:
            raise SyncContractError("write attempted without a resolved revision token")

    def _log_failure(self, log: ContextualLogger, error: SyncStepError) -> None:
        log = log.with_context(
            step=error.step.value, kind=error.kind.value, status_code=error.status_code
        )
        if error.kind in (
            FailureKind.RATE_LIMITED,
            FailureKind.TRANSIENT,
            FailureKind.NOT_FOUND_TRANSIENT,
            FailureKind.NETWORK_FAULT,
        ):
            log.warning(f"Sync failed: {error.detail}")
        else:
            log.error(f"Sync failed: {error.detail}")
