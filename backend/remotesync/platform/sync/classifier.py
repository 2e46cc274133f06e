"""Failure classification for provider responses and I/O errors.

Maps an HTTP status (plus the workflow step it happened in) to a FailureKind.
The orchestrator uses the kind to decide between absorbing the failure,
re-running the workflow once, or returning it to the caller.
"""

from typing import Mapping, Optional

import httpx

from remotesync.core.shared_models import FailureKind, SyncStep
from remotesync.platform.sync.exceptions import SyncStepError

RETRYABLE_KINDS = frozenset(
    {FailureKind.TRANSIENT, FailureKind.NOT_FOUND_TRANSIENT, FailureKind.NETWORK_FAULT}
)

_REVISION_SENSITIVE_STEPS = (SyncStep.WRITE, SyncStep.FETCH_REVISION)


def _is_exhausted_quota(status_code: int, headers: Optional[Mapping[str, str]]) -> bool:
    # GitHub reports primary rate limits as 403 with a zero remaining quota
    if status_code != 403 or not headers:
        return False
    return headers.get("x-ratelimit-remaining", headers.get("X-RateLimit-Remaining")) == "0"


def classify_status(
    status_code: int,
    step: SyncStep,
    headers: Optional[Mapping[str, str]] = None,
) -> FailureKind:
    """Classify a non-success HTTP status.

    Args:
        status_code: HTTP status returned by the provider
        step: Workflow step the response belongs to
        headers: Response headers, used to spot quota exhaustion

    Returns:
        The failure kind for this status
    """
    if status_code == 401:
        return FailureKind.UNAUTHORIZED

    # Anything but 401 while resolving identity means the credential is unusable
    if step is SyncStep.IDENTITY:
        return FailureKind.FATAL

    if status_code == 404:
        if step is SyncStep.PROBE:
            return FailureKind.NOT_FOUND
        if step in _REVISION_SENSITIVE_STEPS:
            return FailureKind.NOT_FOUND_TRANSIENT
        return FailureKind.FATAL

    if status_code == 429 or _is_exhausted_quota(status_code, headers):
        return FailureKind.RATE_LIMITED

    if status_code >= 500:
        return FailureKind.TRANSIENT

    return FailureKind.FATAL


def classify_exception(exc: BaseException, step: SyncStep) -> FailureKind:
    """Classify an exception raised while running a workflow step."""
    if isinstance(exc, httpx.HTTPStatusError):
        return classify_status(exc.response.status_code, step, exc.response.headers)
    if isinstance(exc, httpx.RequestError):
        return FailureKind.FATAL if step is SyncStep.IDENTITY else FailureKind.NETWORK_FAULT
    return FailureKind.FATAL


def retry_after_seconds(response: httpx.Response) -> Optional[float]:
    """Read the Retry-After header as seconds, if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if not retry_after:
        return None
    try:
        return max(float(retry_after), 0.0)
    except (ValueError, TypeError):
        return None


def is_retryable_failure(exception: BaseException) -> bool:
    """Whether a failed workflow run may be repeated.

    Use this as the tenacity retry condition around a full workflow run.
    """
    return isinstance(exception, SyncStepError) and exception.kind in RETRYABLE_KINDS
