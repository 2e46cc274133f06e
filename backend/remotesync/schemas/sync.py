"""Sync workflow schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from remotesync.core.shared_models import FailureKind, ProviderKind, SyncStep


class CredentialContext(BaseModel):
    """Caller-supplied credential and target selection for one sync call.

    The token is kept as given (possibly empty) so the orchestrator can reject
    it before any network call instead of failing validation.
    """

    model_config = ConfigDict(frozen=True)

    token: Optional[str] = Field(None, repr=False, description="Bearer credential")
    provider: ProviderKind = Field(..., description="Remote store to sync into")
    resource_key: Optional[str] = Field(
        None,
        description="Repository name (github) or parent folder id (google_drive)",
    )

    @property
    def has_token(self) -> bool:
        """Whether a non-blank token was supplied."""
        return bool(self.token and self.token.strip())


class SyncRequest(BaseModel):
    """Content to reconcile with the remote store.

    ``content`` accepts text, which is stored as UTF-8 bytes.
    """

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., description="Payload bytes")
    content_type: str = Field("application/octet-stream", description="Payload MIME type")
    destination_name: str = Field(..., description="File path (github) or file name (drive)")
    description: Optional[str] = Field(None, description="Resource description")


class RemoteResourceHandle(BaseModel):
    """Result of probing the remote store; recomputed on every call."""

    model_config = ConfigDict(frozen=True)

    exists: bool
    revision_token: Optional[str] = None
    revision_resolved: bool = False
    resource_id: Optional[str] = None
    canonical_url: Optional[str] = None

    @classmethod
    def absent(cls) -> "RemoteResourceHandle":
        """Handle for a resource the store does not have."""
        return cls(exists=False)

    def with_revision(self, revision_token: Optional[str]) -> "RemoteResourceHandle":
        """Return a copy with the revision token resolved."""
        return self.model_copy(
            update={"revision_token": revision_token or None, "revision_resolved": True}
        )


class SyncOutcome(BaseModel):
    """Terminal result of a sync call."""

    success: bool
    url: Optional[str] = None
    error_kind: Optional[FailureKind] = None
    error_detail: Optional[str] = None
    status_code: Optional[int] = Field(
        None, description="Upstream HTTP status when the remote store rejected a step"
    )
    step: Optional[SyncStep] = None
    retry_after: Optional[float] = None

    @classmethod
    def succeeded(cls, url: Optional[str]) -> "SyncOutcome":
        """Build a success outcome."""
        return cls(success=True, url=url)

    @classmethod
    def failed(
        cls,
        kind: FailureKind,
        detail: str,
        status_code: Optional[int] = None,
        step: Optional[SyncStep] = None,
        retry_after: Optional[float] = None,
    ) -> "SyncOutcome":
        """Build a failure outcome."""
        return cls(
            success=False,
            error_kind=kind,
            error_detail=detail,
            status_code=status_code,
            step=step,
            retry_after=retry_after,
        )
