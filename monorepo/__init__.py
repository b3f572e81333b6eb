# monorepo/__init__.py
"""
Collaborators that know the layout of the monorepo: package discovery and
version stamping for the distinguished package.
"""
from .registry import Package, PackageRegistry, parse_manifest
from .platform_version import PlatformVersionSetter, version_code

__all__ = [
    "Package",
    "PackageRegistry",
    "parse_manifest",
    "PlatformVersionSetter",
    "version_code",
]
