# versioning/resolver.py
"""Version assignment for a release."""

from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from config.config_models import SENTINEL_VERSION
from utils.exceptions import VersionSyncError


def resolve_versions(
    packages: Iterable,
    version: str,
    *,
    distinguished_name: Optional[str] = None,
    skip_distinguished: bool = False,
    sentinel_version: str = SENTINEL_VERSION
) -> Mapping[str, str]:
    """
    Map every package name to ``version``.

    When ``skip_distinguished`` is set the distinguished package keeps the
    sentinel version instead. The version string is not validated. The
    returned mapping is read-only.
    """
    if not isinstance(version, str) or not version:
        raise VersionSyncError("Target version must be a non-empty string")

    mapping = {}
    for package in packages:
        name = package.name
        if name is None:
            continue
        if skip_distinguished and name == distinguished_name:
            mapping[name] = sentinel_version
        else:
            mapping[name] = version
    return MappingProxyType(mapping)
