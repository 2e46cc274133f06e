"""Request and response bodies for the sync HTTP endpoints."""

import base64
import binascii
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from remotesync.core.shared_models import FailureKind


class GitHubSyncRequest(BaseModel):
    """Push one file into a GitHub repository, creating the repository if needed."""

    token: Optional[str] = Field(None, description="GitHub token")
    repo_name: str = Field(..., min_length=1, description="Repository name under the token owner")
    file_name: str = Field(..., min_length=1, description="Path of the file inside the repository")
    content: str = Field(..., description="File content")
    description: Optional[str] = Field(None, description="Description for a newly created repo")
    private: Optional[bool] = Field(None, description="Create the repository as private")


class DriveSyncRequest(BaseModel):
    """Upload a history snapshot (or raw content) to Google Drive."""

    token: Optional[str] = Field(None, description="Google OAuth access token")
    history: Optional[Any] = Field(None, description="JSON-serializable history snapshot")
    content: Optional[str] = Field(None, description="Raw content, used when history is absent")
    file_name: Optional[str] = Field(None, description="Drive file name")
    mime_type: str = Field("application/json", description="MIME type of the uploaded content")
    description: Optional[str] = Field(None, description="Drive file description")
    parent_folder_id: Optional[str] = Field(None, description="Restrict search/upload to a folder")

    @model_validator(mode="after")
    def require_payload(self):
        """Either a history snapshot or raw content must be supplied."""
        if self.history is None and self.content is None:
            raise ValueError("Either 'history' or 'content' is required")
        return self


class DestinationSpec(BaseModel):
    """Where the payload goes."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class PayloadSpec(BaseModel):
    """Payload as text or base64-encoded bytes."""

    data: str
    encoding: Literal["text", "base64"] = "text"
    mime_type: str = "application/octet-stream"

    def to_bytes(self) -> bytes:
        """Decode the payload into raw bytes."""
        if self.encoding == "base64":
            return base64.b64decode(self.data, validate=True)
        return self.data.encode("utf-8")

    @model_validator(mode="after")
    def check_base64(self):
        """Reject malformed base64 up front."""
        if self.encoding == "base64":
            try:
                base64.b64decode(self.data, validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValueError(f"payload.data is not valid base64: {e}") from e
        return self


class GenericSyncRequest(BaseModel):
    """Provider-agnostic sync request."""

    credential: Optional[str] = Field(None, description="Bearer credential for the provider")
    resource_key: Optional[str] = Field(None, description="Repository name or parent folder id")
    destination: DestinationSpec
    payload: PayloadSpec


class SyncResponse(BaseModel):
    """Body returned by every sync endpoint."""

    success: bool
    url: Optional[str] = None
    error_kind: Optional[FailureKind] = None
    error_detail: Optional[str] = None
