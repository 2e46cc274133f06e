"""Sync-specific exceptions for error handling."""

from typing import Optional

from remotesync.core.shared_models import FailureKind, SyncStep


class SyncStepError(Exception):
    """Raised when a workflow step fails with a classified failure kind.

    The orchestrator turns this into a failed SyncOutcome. Kinds listed in
    ``classifier.RETRYABLE_KINDS`` cause one re-run of the whole workflow.

    Usage:
        raise SyncStepError(SyncStep.WRITE, FailureKind.TRANSIENT, "HTTP 503", status_code=503)
    """

    def __init__(
        self,
        step: SyncStep,
        kind: FailureKind,
        detail: str,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ):
        """Initialize sync step error.

        Args:
            step: Workflow step that failed
            kind: Classified failure kind
            detail: Human-readable failure detail
            status_code: Upstream HTTP status, if the provider answered
            retry_after: Seconds the provider asked callers to wait
        """
        self.step = step
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        self.retry_after = retry_after
        super().__init__(f"{step.value} failed ({kind.value}): {detail}")


class SyncContractError(Exception):
    """Raised when the workflow is driven out of order.

    This is a logic error, never retried. Examples:
    - Write attempted before the resource was probed
    - Write attempted on an existing resource without a resolved revision

    Usage:
        raise SyncContractError("write attempted before probe")
    """

    pass
