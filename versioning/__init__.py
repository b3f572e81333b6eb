# versioning/__init__.py
"""
Version synchronization engine.

Import the batch driver from versioning.set_version; it depends on the
monorepo collaborators, which in turn use the rewriter exported here.
"""
from .resolver import resolve_versions
from .manifest_rewriter import (
    DEPENDENCY_FIELDS,
    ManifestUpdate,
    rewrite_manifest,
    serialize_manifest,
    update_manifest,
    write_manifest,
)

__all__ = [
    "resolve_versions",
    "DEPENDENCY_FIELDS",
    "ManifestUpdate",
    "rewrite_manifest",
    "serialize_manifest",
    "update_manifest",
    "write_manifest",
]
