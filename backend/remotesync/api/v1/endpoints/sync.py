"""Sync API endpoints."""

import math

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from remotesync import schemas
from remotesync.api import deps
from remotesync.core.config import settings
from remotesync.core.exceptions import ProviderNotFoundException
from remotesync.core.logging import ContextualLogger
from remotesync.core.shared_models import FailureKind, ProviderKind
from remotesync.core.sync_service import SyncService

router = APIRouter()

_STATUS_BY_KIND = {
    FailureKind.INVALID_REQUEST: 400,
    FailureKind.UNAUTHORIZED: 401,
    FailureKind.NETWORK_FAULT: 502,
}


def status_code_for(outcome: schemas.SyncOutcome) -> int:
    """HTTP status for a sync outcome.

    Upstream rejections are forwarded verbatim; everything unclassified is a 500.
    """
    if outcome.success:
        return 200
    if outcome.status_code is not None and outcome.status_code >= 400:
        return outcome.status_code
    return _STATUS_BY_KIND.get(outcome.error_kind, 500)


def to_response(outcome: schemas.SyncOutcome) -> JSONResponse:
    """Render an outcome as the endpoint's JSON response."""
    body = schemas.SyncResponse(
        success=outcome.success,
        url=outcome.url,
        error_kind=outcome.error_kind,
        error_detail=outcome.error_detail,
    )
    headers = {}
    if outcome.retry_after is not None:
        headers["Retry-After"] = str(math.ceil(outcome.retry_after))
    return JSONResponse(
        status_code=status_code_for(outcome),
        content=body.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


@router.post("/github", response_model=schemas.SyncResponse)
async def sync_github(
    *,
    request: schemas.GitHubSyncRequest,
    service: SyncService = Depends(deps.get_sync_service),
) -> JSONResponse:
    """Create or update a file in a GitHub repository.

    The repository is created under the token's user when it does not exist.
    """
    outcome = await service.push_code_to_github(
        token=request.token,
        repo_name=request.repo_name,
        file_name=request.file_name,
        code=request.content,
        description=request.description,
        private=request.private,
    )
    return to_response(outcome)


@router.post("/google-drive", response_model=schemas.SyncResponse)
async def sync_google_drive(
    *,
    request: schemas.DriveSyncRequest,
    service: SyncService = Depends(deps.get_sync_service),
) -> JSONResponse:
    """Create or update a file in Google Drive.

    A ``history`` snapshot is stored as pretty-printed JSON; otherwise the raw
    ``content`` is uploaded with the given MIME type.
    """
    if request.history is not None:
        outcome = await service.sync_history_to_drive(
            history=request.history,
            token=request.token,
            file_name=request.file_name,
            parent_folder_id=request.parent_folder_id,
            description=request.description,
        )
        return to_response(outcome)

    credentials = schemas.CredentialContext(
        token=request.token,
        provider=ProviderKind.GOOGLE_DRIVE,
        resource_key=request.parent_folder_id or settings.DRIVE_PARENT_FOLDER_ID,
    )
    sync_request = schemas.SyncRequest(
        content=request.content.encode("utf-8"),
        content_type=request.mime_type,
        destination_name=request.file_name or settings.DRIVE_HISTORY_FILE_NAME,
        description=request.description,
    )
    return to_response(await service.synchronize(credentials, sync_request))


@router.post("/providers/{provider}", response_model=schemas.SyncResponse)
async def sync_generic(
    *,
    provider: str,
    request: schemas.GenericSyncRequest,
    service: SyncService = Depends(deps.get_sync_service),
    logger: ContextualLogger = Depends(deps.get_logger),
) -> JSONResponse:
    """Sync a payload into any registered provider."""
    try:
        kind = ProviderKind(provider)
    except ValueError:
        logger.with_context(provider=provider).warning("Unknown sync provider requested")
        return to_response(
            schemas.SyncOutcome.failed(
                FailureKind.INVALID_REQUEST, f"Unknown provider '{provider}'"
            )
        )

    credentials = schemas.CredentialContext(
        token=request.credential, provider=kind, resource_key=request.resource_key
    )
    sync_request = schemas.SyncRequest(
        content=request.payload.to_bytes(),
        content_type=request.payload.mime_type,
        destination_name=request.destination.name,
        description=request.destination.description,
    )
    try:
        outcome = await service.synchronize(credentials, sync_request)
    except ProviderNotFoundException as e:
        outcome = schemas.SyncOutcome.failed(FailureKind.INVALID_REQUEST, str(e))
    return to_response(outcome)
