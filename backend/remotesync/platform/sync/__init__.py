"""Sync module for remotesync.

Provides:
- SyncOrchestrator: Runs identity → probe → create → revision → write
- classify_status / classify_exception: Map provider failures to FailureKind
- SyncStepError / SyncContractError: Workflow failure types
"""

from .classifier import RETRYABLE_KINDS, classify_exception, classify_status
from .exceptions import SyncContractError, SyncStepError
from .orchestrator import SyncOrchestrator

__all__ = [
    "RETRYABLE_KINDS",
    "SyncContractError",
    "SyncOrchestrator",
    "SyncStepError",
    "classify_exception",
    "classify_status",
]
