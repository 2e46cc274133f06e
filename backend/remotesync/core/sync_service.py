"""Service entry points for syncing content into remote stores."""

import json
from typing import Any, Callable, Dict, Optional

import httpx

from remotesync.core.config import settings
from remotesync.core.logging import LoggerConfigurator
from remotesync.core.shared_models import ProviderKind
from remotesync.platform.decorators import get_destination_class
from remotesync.platform.sync.orchestrator import SyncOrchestrator
from remotesync.schemas.sync import CredentialContext, SyncOutcome, SyncRequest


class SyncService:
    """Builds an orchestrator per call and runs the sync workflow."""

    def __init__(self, client_factory: Optional[Callable[[], httpx.AsyncClient]] = None):
        """Initialize the service.

        Args:
            client_factory: Builds the HTTP client for each sync call
        """
        self.client_factory = client_factory

    async def synchronize(
        self,
        credentials: CredentialContext,
        request: SyncRequest,
        destination_options: Optional[Dict[str, Any]] = None,
    ) -> SyncOutcome:
        """Sync one payload into the provider named by the credentials.

        Raises:
            ProviderNotFoundException: If no adapter serves the provider
        """
        destination_class = get_destination_class(credentials.provider)
        orchestrator = SyncOrchestrator(
            destination_class,
            client_factory=self.client_factory,
            destination_options=destination_options,
            logger=LoggerConfigurator.configure_logger(
                "remotesync.platform.sync",
                dimensions={"provider": credentials.provider.value},
            ),
        )
        return await orchestrator.synchronize(credentials, request)

    async def push_code_to_github(
        self,
        token: Optional[str],
        repo_name: str,
        file_name: str,
        code: str,
        description: Optional[str] = None,
        private: Optional[bool] = None,
    ) -> SyncOutcome:
        """Push a source file into a repository, creating the repository if needed."""
        credentials = CredentialContext(
            token=token, provider=ProviderKind.GITHUB, resource_key=repo_name
        )
        request = SyncRequest(
            content=code.encode("utf-8"),
            content_type="text/plain; charset=utf-8",
            destination_name=file_name,
            description=description,
        )
        options = {"private": private} if private is not None else None
        return await self.synchronize(credentials, request, destination_options=options)

    async def sync_history_to_drive(
        self,
        history: Any,
        token: Optional[str],
        file_name: Optional[str] = None,
        parent_folder_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> SyncOutcome:
        """Back up a history snapshot to Drive as pretty-printed JSON."""
        credentials = CredentialContext(
            token=token,
            provider=ProviderKind.GOOGLE_DRIVE,
            resource_key=parent_folder_id or settings.DRIVE_PARENT_FOLDER_ID,
        )
        request = SyncRequest(
            content=json.dumps(history, indent=2, ensure_ascii=False).encode("utf-8"),
            content_type="application/json",
            destination_name=file_name or settings.DRIVE_HISTORY_FILE_NAME,
            description=description or settings.DRIVE_HISTORY_DESCRIPTION,
        )
        return await self.synchronize(credentials, request)


sync_service = SyncService()
