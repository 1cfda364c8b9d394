"""
Structured logging configuration for dep-catalog.

Provides consistent, machine-readable logging for registry construction,
configuration loading and repository checks.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

_RESERVED_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "getMessage",
    "exc_info",
    "exc_text",
    "stack_info",
}


class StructuredFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", record.name),
        }
        message = record.getMessage()
        if message:
            log_entry["message"] = message

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and key not in log_entry:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class CatalogLogger:
    """Structured logger emitting one JSON event per call."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(f"dep_catalog.{name}")
        self.component = name
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Setup logger with structured formatting."""
        if not self.logger.handlers:
            # stderr keeps stdout clean for exported output
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.propagate = False
            self.logger.setLevel(logging.WARNING)

    def _log(self, level: int, event_type: str, **kwargs) -> None:
        self.logger.log(
            level, "", extra={"event_type": event_type, "component": self.component, **kwargs}
        )

    def info(self, event_type: str, **kwargs) -> None:
        """Log info level event."""
        self._log(logging.INFO, event_type, **kwargs)

    def warning(self, event_type: str, **kwargs) -> None:
        """Log warning level event."""
        self._log(logging.WARNING, event_type, **kwargs)

    def error(self, event_type: str, **kwargs) -> None:
        """Log error level event."""
        self._log(logging.ERROR, event_type, **kwargs)

    def debug(self, event_type: str, **kwargs) -> None:
        """Log debug level event."""
        self._log(logging.DEBUG, event_type, **kwargs)


# Global logger instances
_registry_logger = CatalogLogger("registry")
_config_logger = CatalogLogger("config")
_repository_logger = CatalogLogger("repository")


def get_registry_logger() -> CatalogLogger:
    """Get registry construction logger."""
    return _registry_logger


def get_config_logger() -> CatalogLogger:
    """Get configuration loading logger."""
    return _config_logger


def get_repository_logger() -> CatalogLogger:
    """Get repository operations logger."""
    return _repository_logger


def log_registry_built(count: int, source: str) -> None:
    """Log a successfully constructed registry."""
    get_registry_logger().info("registry_built", entries=count, version_source=source)


def log_unresolved_versions(identifiers: Iterable[str], source: str) -> None:
    """Log identifiers whose versions could not be resolved."""
    get_registry_logger().error(
        "unresolved_version_reference",
        identifiers=list(identifiers),
        version_source=source,
    )


def log_config_loaded(path: Optional[str]) -> None:
    """Log which config file, if any, was applied."""
    get_config_logger().debug("config_loaded", config_file=path)


def log_repository_check(
    coordinate: str,
    repository: Optional[str],
    exists: bool,
    response_time_ms: Optional[float] = None,
) -> None:
    """Log repository check result."""
    log_data: Dict[str, Any] = {
        "coordinate": coordinate,
        "repository": repository,
        "coordinate_exists": exists,
    }
    if response_time_ms is not None:
        log_data["response_time_ms"] = response_time_ms

    if not exists:
        get_repository_logger().warning("coordinate_not_found_in_repository", **log_data)
    else:
        get_repository_logger().debug("repository_check_completed", **log_data)


def configure_logging(log_level: str = "WARNING") -> None:
    """Configure logging for the application."""
    level = getattr(logging, log_level.upper(), logging.WARNING)

    for logger in [_registry_logger, _config_logger, _repository_logger]:
        logger.logger.setLevel(level)
