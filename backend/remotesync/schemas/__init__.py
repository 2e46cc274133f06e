"""Pydantic schemas for remotesync."""

from .api import (
    DestinationSpec,
    DriveSyncRequest,
    GenericSyncRequest,
    GitHubSyncRequest,
    PayloadSpec,
    SyncResponse,
)
from .sync import CredentialContext, RemoteResourceHandle, SyncOutcome, SyncRequest

__all__ = [
    "CredentialContext",
    "DestinationSpec",
    "DriveSyncRequest",
    "GenericSyncRequest",
    "GitHubSyncRequest",
    "PayloadSpec",
    "RemoteResourceHandle",
    "SyncOutcome",
    "SyncRequest",
    "SyncResponse",
]
