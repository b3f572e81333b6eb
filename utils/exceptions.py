# utils/exceptions.py
"""
Custom exceptions for the monorepo version sync tooling
"""
from pathlib import Path
from typing import List, Optional, Union


class VersionSyncError(Exception):
    """Base exception for all version sync errors"""
    pass


class ConfigurationError(VersionSyncError):
    """Raised when there are configuration issues"""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.details = details or {}


class RegistryError(VersionSyncError):
    """Raised when the package registry cannot enumerate the tree"""
    pass


class ManifestError(VersionSyncError):
    """Raised when a package manifest is malformed"""

    def __init__(self, message: str, package_path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.package_path = Path(package_path) if package_path is not None else None


class ManifestWriteError(ManifestError):
    """Raised when a manifest cannot be written back to disk"""
    pass


class PlatformVersionError(VersionSyncError):
    """Raised when the distinguished package's artifacts cannot be stamped"""
    pass


class BatchApplyError(VersionSyncError):
    """Raised when one or more manifest rewrites in a batch failed"""

    def __init__(self, errors: List[BaseException]):
        self.errors = list(errors)
        lines = [f"{len(self.errors)} manifest update(s) failed:"]
        lines.extend(f"  - {err}" for err in self.errors)
        super().__init__("\n".join(lines))
