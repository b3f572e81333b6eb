# utils/error_handler.py
"""
Centralized error handling for the version sync tooling.
This module provides a standardized way to log and report errors at
operation boundaries without swallowing them.
"""

import logging
from typing import Callable, Any, Dict, Optional, Type

from .exceptions import VersionSyncError, BatchApplyError, ManifestError

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[BaseException], Any]


class ErrorHandlingContext:
    """Context manager that logs and reports a failed operation, then re-raises."""

    def __init__(
        self,
        operation_name: str,
        error_handlers: Optional[Dict[Type[BaseException], ErrorHandler]] = None
    ):
        """
        Initialize error handling context.

        Args:
            operation_name: Name of the operation for logging
            error_handlers: Dictionary mapping exception types to handler functions;
                the first matching type wins
        """
        self.operation_name = operation_name
        self.error_handlers = error_handlers or {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return False

        logger.error(
            f"Error in {self.operation_name}: {exc_val}",
            exc_info=(exc_type, exc_val, exc_tb)
        )

        for exception_type, handler in self.error_handlers.items():
            if issubclass(exc_type, exception_type):
                handler(exc_val)
                break

        return False


def describe_error(error: BaseException) -> str:
    """
    Render an error for the error stream.

    Aggregate batch errors are expanded one line per failure, other errors
    are prefixed with their type name.
    """
    if isinstance(error, BatchApplyError):
        return str(error)
    error_type = type(error).__name__
    message = str(error)
    if isinstance(error, VersionSyncError) and error.__cause__ is not None:
        message = f"{message} ({error.__cause__})"
    return f"{error_type}: {message}"


def _log_batch_failures(error: BatchApplyError) -> None:
    for failure in error.errors:
        path = getattr(failure, 'package_path', None)
        logger.error(f"  {path or '?'}: {failure}")


def _log_manifest_failure(error: ManifestError) -> None:
    if error.package_path is not None:
        logger.error(f"  Manifest left unchanged in {error.package_path}")


standard_error_handlers = {
    BatchApplyError: _log_batch_failures,
    ManifestError: _log_manifest_failure,
}
