# utils/__init__.py
"""
Common utilities for the version sync tooling.

Provides the exception hierarchy, error handling helpers and logging setup.
"""
from .exceptions import (
    VersionSyncError, ConfigurationError, RegistryError, ManifestError,
    ManifestWriteError, PlatformVersionError, BatchApplyError
)
from .error_handler import ErrorHandlingContext, describe_error
from .logging_config import setup_logging

__all__ = [
    "VersionSyncError",
    "ConfigurationError",
    "RegistryError",
    "ManifestError",
    "ManifestWriteError",
    "PlatformVersionError",
    "BatchApplyError",
    "ErrorHandlingContext",
    "describe_error",
    "setup_logging",
]
