"""Google Drive destination.

Finds a file by name and uploads content with a multipart (metadata + media)
request: PATCH when a file was found, POST otherwise.

References:
    https://developers.google.com/drive/api/guides/search-files
    https://developers.google.com/drive/api/guides/manage-uploads#multipart
"""

from typing import Any, Dict, Optional

import httpx

from remotesync.core.config import settings
from remotesync.core.shared_models import ProviderKind
from remotesync.platform.decorators import destination
from remotesync.platform.destinations._base import BaseDestination
from remotesync.platform.utils.multipart import (
    build_multipart_related,
    choose_boundary,
    serialize_metadata,
)
from remotesync.schemas.sync import CredentialContext, RemoteResourceHandle, SyncRequest

_FILE_FIELDS = "id,name,webViewLink"


def _escape_query_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_search_query(name: str, parent_id: Optional[str] = None) -> str:
    """Drive search query matching non-trashed files with exactly this name."""
    query = f"name='{_escape_query_value(name)}' and trashed=false"
    if parent_id:
        query += f" and '{_escape_query_value(parent_id)}' in parents"
    return query


@destination(
    name="Google Drive",
    short_name="google_drive",
    provider=ProviderKind.GOOGLE_DRIVE,
)
class GoogleDriveDestination(BaseDestination):
    """Google Drive destination.

    The destination name is the Drive file name; the optional resource key is
    a parent folder id that scopes both the search and new uploads. When
    several files share the name, the first search result is updated.
    """

    def __init__(self, client: httpx.AsyncClient, boundary: Optional[str] = None):
        """Initialize the Google Drive destination.

        Args:
            client: HTTP client shared by every step of one sync call
            boundary: Preferred multipart boundary
        """
        super().__init__(client)
        self.api_url = settings.GOOGLE_DRIVE_API_URL
        self.upload_url = settings.GOOGLE_DRIVE_UPLOAD_URL
        self.boundary = boundary or settings.DRIVE_MULTIPART_BOUNDARY

    def auth_headers(self, credentials: CredentialContext) -> Dict[str, str]:
        """OAuth bearer token."""
        return {"Authorization": f"Bearer {credentials.token}"}

    async def resolve_identity(self, credentials: CredentialContext) -> Optional[str]:
        """Drive scopes everything to the token's user; nothing to resolve."""
        return None

    async def probe(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> RemoteResourceHandle:
        """Search for the file by name; first match wins."""
        params = {
            "q": build_search_query(request.destination_name, credentials.resource_key),
            "fields": f"files({_FILE_FIELDS})",
        }
        response = await self._request("GET", self.api_url, credentials, params=params)
        files = response.json().get("files") or []
        if not files:
            return RemoteResourceHandle.absent()

        if len(files) > 1:
            self.logger.warning(
                f"{len(files)} Drive files named '{request.destination_name}', "
                f"updating the first ({files[0].get('id')})"
            )
        match = files[0]
        return RemoteResourceHandle(
            exists=True,
            resource_id=match.get("id"),
            canonical_url=match.get("webViewLink"),
        )

    def build_metadata(
        self, credentials: CredentialContext, request: SyncRequest, is_new: bool
    ) -> Dict[str, Any]:
        """Metadata part of the upload."""
        metadata: Dict[str, Any] = {
            "name": request.destination_name,
            "mimeType": request.content_type,
            "description": request.description or "",
        }
        # Drive rejects ``parents`` on update; moving files needs addParents
        if is_new and credentials.resource_key:
            metadata["parents"] = [credentials.resource_key]
        return metadata

    async def write(
        self,
        credentials: CredentialContext,
        request: SyncRequest,
        identity: Optional[str],
        handle: RemoteResourceHandle,
    ) -> Optional[str]:
        """Upload the content, updating the matched file or creating a new one."""
        is_new = not (handle.exists and handle.resource_id)
        metadata = self.build_metadata(credentials, request, is_new)
        boundary = choose_boundary(self.boundary, serialize_metadata(metadata), request.content)
        body = build_multipart_related(metadata, request.content, request.content_type, boundary)

        headers = {"Content-Type": f"multipart/related; boundary={boundary}"}
        params = {"uploadType": "multipart", "fields": _FILE_FIELDS}
        if is_new:
            method, url = "POST", self.upload_url
        else:
            method, url = "PATCH", f"{self.upload_url}/{handle.resource_id}"

        response = await self._request(
            method, url, credentials, params=params, headers=headers, content=body
        )
        uploaded = response.json()
        self.logger.info(
            f"{'Created' if is_new else 'Updated'} Drive file {uploaded.get('id')}"
        )
        return uploaded.get("webViewLink") or handle.canonical_url or uploaded.get("id")
