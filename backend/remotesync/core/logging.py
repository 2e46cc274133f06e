"""Logging setup with contextual dimensions.

Every log record can carry a set of key/value dimensions (provider, resource,
step, ...). In local development the dimensions are appended to a readable
line; elsewhere each record is emitted as one JSON object per line.
"""

import json
import logging
import sys
from typing import Any, Dict, MutableMapping, Optional, Tuple

from remotesync.core.config import settings

_ROOT_LOGGER_NAME = "remotesync"
_RESERVED_ATTRS = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class _TextFormatter(logging.Formatter):
    """Readable single-line formatter with trailing ``key=value`` dimensions."""

    def __init__(self):
        super().__init__("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        dimensions = getattr(record, "dimensions", None)
        if dimensions:
            line += " | " + " ".join(f"{k}={v}" for k, v in dimensions.items())
        return line


class _JsonFormatter(logging.Formatter):
    """One JSON object per record, dimensions flattened into the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "environment": settings.ENVIRONMENT,
        }
        payload.update(getattr(record, "dimensions", None) or {})
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key != "dimensions":
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that attaches dimensions to every record."""

    def __init__(
        self,
        logger: logging.Logger,
        prefix: str = "",
        dimensions: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the contextual logger.

        Args:
            logger: Underlying stdlib logger
            prefix: Text prepended to every message
            dimensions: Key/value pairs attached to every record
        """
        super().__init__(logger, {})
        self.prefix = prefix
        self.dimensions: Dict[str, Any] = dict(dimensions or {})

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        """Merge the adapter's dimensions into the record's ``extra``."""
        extra = dict(kwargs.get("extra") or {})
        extra["dimensions"] = {**self.dimensions, **extra.get("dimensions", {})}
        kwargs["extra"] = extra
        if self.prefix:
            msg = f"{self.prefix} {msg}"
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions."""
        return ContextualLogger(
            self.logger, prefix=self.prefix, dimensions={**self.dimensions, **dimensions}
        )

    def with_prefix(self, prefix: str) -> "ContextualLogger":
        """Return a new logger with a different message prefix."""
        return ContextualLogger(self.logger, prefix=prefix, dimensions=self.dimensions)


class LoggerConfigurator:
    """Builds contextual loggers on top of a single configured handler."""

    _configured = False

    @classmethod
    def _configure_root(cls) -> None:
        if cls._configured:
            return
        root = logging.getLogger(_ROOT_LOGGER_NAME)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_TextFormatter() if settings.LOCAL_DEVELOPMENT else _JsonFormatter())
        root.addHandler(handler)
        root.setLevel(settings.LOG_LEVEL)
        root.propagate = False
        cls._configured = True

    @classmethod
    def configure_logger(
        cls,
        name: str,
        prefix: str = "",
        dimensions: Optional[Dict[str, Any]] = None,
    ) -> ContextualLogger:
        """Configure and return a contextual logger.

        Args:
            name: Logger name, normally below ``remotesync``
            prefix: Text prepended to every message
            dimensions: Key/value pairs attached to every record

        Returns:
            ContextualLogger bound to the named stdlib logger
        """
        cls._configure_root()
        return ContextualLogger(logging.getLogger(name), prefix=prefix, dimensions=dimensions)


logger = LoggerConfigurator.configure_logger(_ROOT_LOGGER_NAME)
