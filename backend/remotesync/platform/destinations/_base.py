"""Base destination class."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional

import httpx

from remotesync.core.logging import ContextualLogger
from remotesync.core.logging import logger as default_logger
from remotesync.core.shared_models import ProviderKind
from remotesync.schemas.sync import CredentialContext, RemoteResourceHandle, SyncRequest


class BaseDestination(ABC):
    """Common base for remote stores the sync workflow writes into.

    An adapter only translates workflow steps into provider HTTP calls. It
    raises ``httpx.HTTPStatusError`` / ``httpx.RequestError`` and leaves
    classification and sequencing to the orchestrator.
    """

    # Set by the @destination decorator
    _name: ClassVar[str] = ""
    _short_name: ClassVar[str] = ""
    _provider: ClassVar[Optional[ProviderKind]] = None
    _supports_create: ClassVar[bool] = False
    _requires_revision: ClassVar[bool] = False

    def __init__(self, client: httpx.AsyncClient):
        """Initialize the base destination.

        Args:
            client: HTTP client shared by every step of one sync call
        """
        self._client = client
        self._logger: Optional[ContextualLogger] = None

    @property
    def logger(self):
        """Get the logger for this destination, falling back to default if not set."""
        if self._logger is not None:
            return self._logger
        return default_logger

    def set_logger(self, logger: ContextualLogger) -> None:
        """Set a contextual logger for this destination."""
        self._logger = logger

    @property
    def supports_create(self) -> bool:
        """Whether absent resources are created before the write."""
        return self._supports_create

    @property
    def requires_revision(self) -> bool:
        """Whether writes to existing resources need a revision token."""
        return self._requires_revision

    @classmethod
    async def create(
        cls,
        client: httpx.AsyncClient,
        logger: Optional[ContextualLogger] = None,
        **options: Any,
    ) -> "BaseDestination":
        """Create a destination bound to an HTTP client.

        Args:
            client: HTTP client used for every provider call
            logger: Contextual logger with sync metadata
            **options: Adapter-specific options
        """
        instance = cls(client, **options)
        if logger is not None:
            instance.set_logger(logger)
        return instance

    @classmethod
    def validate_request(
        cls, credentials: CredentialContext, request: SyncRequest
    ) -> Optional[str]:
        """Return a problem description if the request cannot be served, else None."""
        if not request.destination_name or not request.destination_name.strip():
            return "destination name is required"
        return None

    @abstractmethod
    def auth_headers(self, credentials: CredentialContext) -> Dict[str, str]:
        """Headers authenticating a request with the caller's credential."""
        pass

    async def _request(
        self,
        method: str,
        url: str,
        credentials: CredentialContext,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send an authenticated request and raise for non-2xx statuses."""
        headers = {**self.auth_headers(credentials), **kwargs.pop("headers", {})}
        response = await self._client.request(method, url, headers=headers, **kwargs)
        if response.is_error:
            self.logger.with_context(status_code=response.status_code).debug(
                f"{method} {url} returned {response.status_code}"
            )
        response.raise_for_status()
        return response

    @abstractmethod
    async def resolve_identity(self, credentials: CredentialContext) -> Optional[str]:
        """Resolve the owning account, or None when the provider needs none."""
        pass

    @abstractmethod
    async def probe(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> RemoteResourceHandle:
        """Check whether the target exists.

        A 404 may be raised as ``httpx.HTTPStatusError``; the orchestrator reads
        it as "absent".
        """
        pass

    async def create_resource(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> None:
        """Create the missing resource. Only called when ``supports_create``."""
        raise NotImplementedError(f"{self._name} does not create resources")

    async def fetch_revision(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> Optional[str]:
        """Fetch the current revision token, None when the target has no content yet."""
        raise NotImplementedError(f"{self._name} does not use revision tokens")

    @abstractmethod
    async def write(
        self,
        credentials: CredentialContext,
        request: SyncRequest,
        identity: Optional[str],
        handle: RemoteResourceHandle,
    ) -> Optional[str]:
        """Create or update the content and return its canonical URL."""
        pass
