"""GitHub destination.

Writes a single file into a repository owned by the token's user through the
contents API, creating the repository first when it does not exist.

References:
    https://docs.github.com/en/rest/repos/contents#create-or-update-file-contents
    https://docs.github.com/en/rest/repos/repos#create-a-repository-for-the-authenticated-user
"""

import base64
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import httpx

from remotesync.core.config import settings
from remotesync.core.shared_models import ProviderKind
from remotesync.platform.decorators import destination
from remotesync.platform.destinations._base import BaseDestination
from remotesync.schemas.sync import CredentialContext, RemoteResourceHandle, SyncRequest


def encode_content(payload: Union[str, bytes]) -> str:
    """Encode a payload for the contents API.

    Text is encoded as UTF-8 before base64 so multi-byte characters survive.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return base64.b64encode(payload).decode("ascii")


@destination(
    name="GitHub",
    short_name="github",
    provider=ProviderKind.GITHUB,
    supports_create=True,
    requires_revision=True,
)
class GitHubDestination(BaseDestination):
    """GitHub destination backed by the repository contents API.

    The resource key is the repository name; the destination name is the file
    path inside it. Updates carry the file's current blob ``sha``.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        private: Optional[bool] = None,
        auto_init: Optional[bool] = None,
        commit_message_template: Optional[str] = None,
    ):
        """Initialize the GitHub destination.

        Args:
            client: HTTP client shared by every step of one sync call
            private: Create missing repositories as private
            auto_init: Initialize missing repositories with a README
            commit_message_template: Commit message, ``{path}`` is substituted
        """
        super().__init__(client)
        self.api_url = settings.GITHUB_API_URL
        self.private = settings.GITHUB_REPO_PRIVATE if private is None else private
        self.auto_init = settings.GITHUB_REPO_AUTO_INIT if auto_init is None else auto_init
        self.commit_message_template = (
            commit_message_template or settings.GITHUB_COMMIT_MESSAGE_TEMPLATE
        )

    @classmethod
    def validate_request(
        cls, credentials: CredentialContext, request: SyncRequest
    ) -> Optional[str]:
        """GitHub also needs the repository name."""
        problem = super().validate_request(credentials, request)
        if problem:
            return problem
        if not credentials.resource_key or not credentials.resource_key.strip():
            return "repository name is required"
        return None

    def auth_headers(self, credentials: CredentialContext) -> Dict[str, str]:
        """Bearer token plus the versioned GitHub media type."""
        return {
            "Authorization": f"Bearer {credentials.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": settings.GITHUB_API_VERSION,
        }

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self.api_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        return f"{self._repo_url(owner, repo)}/contents/{quote(path.lstrip('/'), safe='/')}"

    async def resolve_identity(self, credentials: CredentialContext) -> Optional[str]:
        """Resolve the login of the token's user."""
        response = await self._request("GET", f"{self.api_url}/user", credentials)
        login = response.json().get("login")
        self.logger.debug(f"Resolved GitHub owner {login}")
        return login

    async def probe(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> RemoteResourceHandle:
        """Check that the repository exists. A missing repo raises a 404."""
        response = await self._request(
            "GET", self._repo_url(identity, credentials.resource_key), credentials
        )
        repo = response.json()
        return RemoteResourceHandle(
            exists=True,
            resource_id=repo.get("full_name"),
            canonical_url=repo.get("html_url"),
        )

    async def create_resource(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> None:
        """Create the repository under the token's user."""
        body = {
            "name": credentials.resource_key,
            "description": request.description or settings.GITHUB_DEFAULT_REPO_DESCRIPTION,
            "private": self.private,
            "auto_init": self.auto_init,
        }
        await self._request("POST", f"{self.api_url}/user/repos", credentials, json=body)
        self.logger.info(f"Created repository {identity}/{credentials.resource_key}")

    async def fetch_revision(
        self, credentials: CredentialContext, request: SyncRequest, identity: Optional[str]
    ) -> Optional[str]:
        """Return the file's blob sha, or None when the file does not exist yet."""
        url = self._contents_url(identity, credentials.resource_key, request.destination_name)
        try:
            response = await self._request("GET", url, credentials)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        data: Any = response.json()
        # A directory listing comes back as a list and has no single sha
        if not isinstance(data, dict):
            return None
        return data.get("sha")

    async def write(
        self,
        credentials: CredentialContext,
        request: SyncRequest,
        identity: Optional[str],
        handle: RemoteResourceHandle,
    ) -> Optional[str]:
        """Create or update the file, passing the resolved sha when there is one."""
        body: Dict[str, Any] = {
            "message": self.commit_message_template.format(path=request.destination_name),
            "content": encode_content(request.content),
        }
        if handle.revision_token:
            body["sha"] = handle.revision_token

        url = self._contents_url(identity, credentials.resource_key, request.destination_name)
        response = await self._request("PUT", url, credentials, json=body)
        content = response.json().get("content") or {}
        return content.get("html_url")
