# versioning/manifest_rewriter.py
"""
Manifest rewriting.

A rewrite sets the package's own version when the package is in the version
mapping and overwrites every dependency entry that names a mapped package.
Everything else in the manifest, key order included, is left as it was.
"""

import asyncio
import contextlib
import copy
import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import aiofiles
import aiofiles.os

from utils.exceptions import ManifestError, ManifestWriteError

logger = logging.getLogger(__name__)

DEPENDENCY_FIELDS = ('dependencies', 'devDependencies')

Manifest = Dict[str, Any]


@dataclass
class ManifestUpdate:
    """Outcome of rewriting one manifest."""
    name: str
    manifest_path: Path
    changes: List[str] = field(default_factory=list)
    written: bool = False

    @property
    def changed(self) -> bool:
        return bool(self.changes)


def update_manifest(
    manifest: Mapping[str, Any],
    mapping: Mapping[str, str],
    package_path: Optional[Union[str, Path]] = None
) -> Tuple[Manifest, List[str]]:
    """
    Apply a version mapping to a manifest.

    Args:
        manifest: Parsed manifest. Not modified.
        mapping: Package name -> version
        package_path: Used in error messages only

    Returns:
        The updated deep copy and the dotted paths of the fields whose value changed
    """
    name = manifest.get('name')
    if not isinstance(name, str) or not name:
        where = f" in {package_path}" if package_path is not None else ""
        raise ManifestError(f"Manifest{where} has no 'name' field", package_path=package_path)

    updated = copy.deepcopy(dict(manifest))
    changes: List[str] = []

    if name in mapping:
        if updated.get('version') != mapping[name]:
            changes.append('version')
        updated['version'] = mapping[name]

    for dependency_field in DEPENDENCY_FIELDS:
        deps = updated.get(dependency_field)
        if deps is None:
            continue
        if not isinstance(deps, dict):
            raise ManifestError(
                f"'{dependency_field}' of {name} must be an object",
                package_path=package_path
            )

        for dependency, version in mapping.items():
            if dependency in deps:
                if deps[dependency] != version:
                    changes.append(f"{dependency_field}.{dependency}")
                deps[dependency] = version

    return updated, changes


def serialize_manifest(manifest: Mapping[str, Any]) -> str:
    """Render a manifest the way package managers write it: 2-space indent, trailing newline."""
    return json.dumps(manifest, indent=2, ensure_ascii=False) + '\n'


async def write_manifest(manifest_path: Path, content: str) -> None:
    """Replace the content of ``manifest_path`` with ``content``.

    The content goes to a temporary file beside the real manifest first, so a
    failed write never leaves a truncated manifest behind. A symlinked
    manifest stays a symlink and its target is updated. The manifest keeps
    its permission bits, and a manifest that cannot be written fails the same
    way an in-place write would.
    """
    target = manifest_path.resolve()
    tmp_path = target.with_name(f".{target.name}.tmp")
    try:
        exists = await aiofiles.os.path.isfile(target)
        if exists:
            # opening for append raises EACCES/EROFS without touching the content
            async with aiofiles.open(target, 'a', encoding='utf-8'):
                pass
        async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
            await f.write(content)
        if exists:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, shutil.copymode, target, tmp_path)
        await aiofiles.os.replace(tmp_path, target)
    except OSError as e:
        with contextlib.suppress(OSError):
            await aiofiles.os.remove(tmp_path)
        raise ManifestWriteError(
            f"Failed to write {manifest_path}: {e.strerror or e}",
            package_path=manifest_path.parent
        ) from e


async def rewrite_manifest(
    package_path: Union[str, Path],
    manifest: Mapping[str, Any],
    mapping: Mapping[str, str],
    *,
    manifest_filename: str = 'package.json',
    dry_run: bool = False
) -> ManifestUpdate:
    """Rewrite one package's manifest according to ``mapping`` and persist it."""
    package_path = Path(package_path)
    updated, changes = update_manifest(manifest, mapping, package_path)
    manifest_path = package_path / manifest_filename

    result = ManifestUpdate(name=updated['name'], manifest_path=manifest_path, changes=changes)
    if dry_run:
        return result

    await write_manifest(manifest_path, serialize_manifest(updated))
    result.written = True
    logger.debug(f"Wrote {manifest_path} ({len(changes)} change(s))")
    return result
