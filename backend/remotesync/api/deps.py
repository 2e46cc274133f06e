"""Dependencies that are used in the API endpoints."""

from remotesync.core.logging import ContextualLogger, LoggerConfigurator
from remotesync.core.sync_service import SyncService, sync_service


def get_sync_service() -> SyncService:
    """Sync service used by the endpoints; overridden in tests."""
    return sync_service


def get_logger() -> ContextualLogger:
    """Logger for request handling."""
    return LoggerConfigurator.configure_logger("remotesync.api")
