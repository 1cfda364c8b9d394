"""
Error handling for dep-catalog.

Defines the exception hierarchy raised by the registry and provides a
centralised handler that records structured error context, runs callbacks
and keeps error statistics before exceptions propagate.
"""

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional


class CatalogError(Exception):
    """Base class for all dep-catalog errors."""


class ConfigurationError(CatalogError):
    """Static configuration defect detected while building a registry."""


class UnresolvedVersionError(ConfigurationError):
    """One or more coordinates reference identifiers missing from the version table."""

    def __init__(self, identifiers: Iterable[str]):
        self.identifiers = tuple(identifiers)
        names = ", ".join(self.identifiers)
        noun = "identifier" if len(self.identifiers) == 1 else "identifiers"
        super().__init__(
            f"Unresolved version reference for {noun}: {names}. "
            f"Add {'it' if len(self.identifiers) == 1 else 'them'} to the version table."
        )


class InvalidVersionError(ConfigurationError):
    """A version table entry is not a usable version string."""

    def __init__(self, identifier: str, version: Any):
        self.identifier = identifier
        self.version = version
        super().__init__(
            f"Invalid version for '{identifier}': {version!r} "
            "(must be non-empty text without whitespace or ':')"
        )


class UnknownDependencyError(CatalogError, KeyError):
    """Lookup of an identifier that is not part of the registry."""

    def __init__(self, name: str, known: Iterable[str] = ()):
        self.name = name
        self.known = tuple(known)
        message = f"Unknown dependency '{name}'"
        if self.known:
            message += f" (known: {', '.join(self.known)})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class CoordinateFormatError(CatalogError, ValueError):
    """Text that is not a well-formed group:artifact:version coordinate."""


class ErrorLevel(Enum):
    """Error severity levels."""

    WARNING = "WARNING"
    ERROR = "ERROR"


class ErrorCategory(Enum):
    """Error categories for better classification."""

    CONFIGURATION = "CONFIGURATION"
    PARSING = "PARSING"
    NETWORK = "NETWORK"


@dataclass
class ErrorContext:
    """Structured error context information."""

    level: ErrorLevel
    category: ErrorCategory
    message: str
    module: str
    function: str
    details: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = None
    suggestions: List[str] = field(default_factory=list)


# Error callback type
ErrorCallback = Callable[[ErrorContext], None]

_LEVELS = {
    ErrorLevel.WARNING: logging.WARNING,
    ErrorLevel.ERROR: logging.ERROR,
}


class ErrorHandler:
    """
    Centralized error handler for consistent error management.

    Provides logging, callbacks, and structured error handling
    for library components.
    """

    def __init__(
        self,
        logger_name: str = "dep_catalog",
        log_level: int = logging.WARNING,
        enable_callbacks: bool = True,
    ):
        """
        Initialize error handler.

        Args:
            logger_name: Name for the logger
            log_level: Logging level
            enable_callbacks: Whether to enable error callbacks
        """
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(log_level)
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            self.logger.addHandler(handler)

        self.enable_callbacks = enable_callbacks
        self.error_callbacks: Dict[ErrorCategory, List[ErrorCallback]] = {}
        self.global_callbacks: List[ErrorCallback] = []
        self.error_stats: Dict[str, int] = {}

    def register_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ):
        """
        Register error callback.

        Args:
            callback: Function to call on errors
            category: Error category to filter, None for all errors
        """
        if not self.enable_callbacks:
            return

        if category is None:
            self.global_callbacks.append(callback)
        else:
            self.error_callbacks.setdefault(category, []).append(callback)

    def unregister_callback(
        self, callback: ErrorCallback, category: Optional[ErrorCategory] = None
    ):
        """Remove a callback added with register_callback, if present."""
        callbacks = (
            self.global_callbacks if category is None else self.error_callbacks.get(category, [])
        )
        if callback in callbacks:
            callbacks.remove(callback)

    def handle_error(
        self,
        level: ErrorLevel,
        category: ErrorCategory,
        message: str,
        module: str,
        function: str,
        exception: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ) -> ErrorContext:
        """
        Handle an error with structured logging and callbacks.

        Returns:
            ErrorContext: The created error context
        """
        context = ErrorContext(
            level=level,
            category=category,
            message=message,
            module=module,
            function=function,
            details=details or {},
            exception=exception,
            suggestions=suggestions or [],
        )

        stat_key = f"{category.value}_{level.value}"
        self.error_stats[stat_key] = self.error_stats.get(stat_key, 0) + 1

        log_data = {
            "category": category.value,
            "module": module,
            "function": function,
            "details": context.details,
        }
        if exception:
            log_data["exception"] = type(exception).__name__
        if context.suggestions:
            log_data["suggestions"] = context.suggestions
        self.logger.log(_LEVELS[level], f"{message} | {log_data}")

        if self.enable_callbacks:
            for callback in self.error_callbacks.get(category, []):
                try:
                    callback(context)
                except Exception as cb_error:
                    # Don't let callback errors break the main flow
                    self.logger.error(f"Error in callback: {cb_error}")

            for callback in self.global_callbacks:
                try:
                    callback(context)
                except Exception as cb_error:
                    self.logger.error(f"Error in global callback: {cb_error}")

        return context

    def warning(
        self, category: ErrorCategory, message: str, module: str, function: str, **kwargs
    ) -> ErrorContext:
        """Handle warning level error."""
        return self.handle_error(
            ErrorLevel.WARNING, category, message, module, function, **kwargs
        )

    def error(
        self, category: ErrorCategory, message: str, module: str, function: str, **kwargs
    ) -> ErrorContext:
        """Handle error level error."""
        return self.handle_error(
            ErrorLevel.ERROR, category, message, module, function, **kwargs
        )

    def get_error_stats(self) -> Dict[str, int]:
        """Get error statistics."""
        return self.error_stats.copy()


# Global error handler instance
_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def setup_error_handling(
    log_level: int = logging.WARNING,
    enable_callbacks: bool = True,
    logger_name: str = "dep_catalog",
) -> ErrorHandler:
    """
    Setup global error handling configuration.

    Args:
        log_level: Logging level
        enable_callbacks: Whether to enable callbacks
        logger_name: Logger name

    Returns:
        ErrorHandler: Configured error handler
    """
    global _global_error_handler
    _global_error_handler = ErrorHandler(logger_name, log_level, enable_callbacks)
    return _global_error_handler


def log_configuration_error(
    message: str,
    module: str,
    function: str,
    identifiers: Optional[Iterable[str]] = None,
    source: Optional[str] = None,
    exception: Optional[Exception] = None,
) -> ErrorContext:
    """
    Convenience function for logging configuration defects.

    Args:
        message: Error message
        module: Module name
        function: Function name
        identifiers: Identifiers involved in the defect
        source: Where the version table came from
        exception: Optional exception
    """
    details: Dict[str, Any] = {}
    if identifiers is not None:
        details["identifiers"] = list(identifiers)
    if source is not None:
        details["source"] = source

    return get_error_handler().error(
        ErrorCategory.CONFIGURATION,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=[
            "Add the missing identifiers to the version table",
            "Check the versions file passed with --versions or DEP_CATALOG_VERSIONS_FILE",
        ],
    )


def log_network_error(
    message: str,
    module: str,
    function: str,
    url: Optional[str] = None,
    status_code: Optional[int] = None,
    exception: Optional[Exception] = None,
) -> ErrorContext:
    """
    Convenience function for logging repository network errors.

    Args:
        message: Error message
        module: Module name
        function: Function name
        url: URL that failed (query string is dropped)
        status_code: HTTP status code
        exception: Optional exception
    """
    details: Dict[str, Any] = {}
    if url is not None:
        details["url"] = url.split("?", 1)[0]
    if status_code is not None:
        details["status_code"] = status_code

    return get_error_handler().warning(
        ErrorCategory.NETWORK,
        message,
        module,
        function,
        details=details,
        exception=exception,
        suggestions=[
            "Check network connectivity",
            "Verify the repository URL is correct",
        ],
    )
