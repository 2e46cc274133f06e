"""Shared enums used across schemas, platform and API layers."""

from enum import Enum


class ProviderKind(str, Enum):
    """Remote stores that remotesync can write to."""

    GITHUB = "github"
    GOOGLE_DRIVE = "google_drive"


class SyncStep(str, Enum):
    """Steps of the sync workflow, in execution order."""

    IDENTITY = "identity"
    PROBE = "probe"
    CREATE = "create"
    FETCH_REVISION = "fetch_revision"
    WRITE = "write"


class FailureKind(str, Enum):
    """Closed set of failure kinds a sync can end with.

    ``not_found`` only occurs for probes and never leaves the orchestrator.
    ``invalid_request`` is produced before any I/O when the caller breaks the
    request contract.
    """

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    NOT_FOUND_TRANSIENT = "not_found_transient"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    NETWORK_FAULT = "network_fault"
    FATAL = "fatal"
    INVALID_REQUEST = "invalid_request"
