# monorepo/registry.py
"""
Package registry for a multi-package source tree.

Packages live one per directory under ``<root>/<packages_dir>``; each
directory holding a manifest file is a package. Manifests are read
concurrently and parsed with key order preserved.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
import aiofiles.os

from utils.exceptions import ManifestError, RegistryError

logger = logging.getLogger(__name__)

Manifest = Dict[str, Any]


@dataclass(frozen=True)
class Package:
    """A package discovered in the tree.

    ``manifest`` is the parsed manifest as read from disk. The version sync
    engine never mutates it; rewrites operate on a deep copy.
    """
    path: Path
    manifest: Manifest
    key: str

    @property
    def name(self) -> Optional[str]:
        name = self.manifest.get('name')
        return name if isinstance(name, str) and name else None

    @property
    def version(self) -> Optional[str]:
        return self.manifest.get('version')

    @property
    def is_private(self) -> bool:
        return self.manifest.get('private') is True


def parse_manifest(text: str, manifest_path: Union[str, Path]) -> Manifest:
    """Parse manifest text into an insertion-ordered dict."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(
            f"Invalid JSON in {manifest_path}: {e}",
            package_path=Path(manifest_path).parent
        ) from e
    if not isinstance(data, dict):
        raise ManifestError(
            f"Manifest {manifest_path} must contain a JSON object",
            package_path=Path(manifest_path).parent
        )
    return data


class PackageRegistry:
    """Enumerates the packages of a monorepo."""

    def __init__(
        self,
        root_dir: Union[str, Path],
        packages_dir: str = 'packages',
        manifest_filename: str = 'package.json',
        distinguished_name: str = 'react-native'
    ):
        self.root_dir = Path(root_dir)
        self.packages_dir = self.root_dir / packages_dir
        self.manifest_filename = manifest_filename
        self.distinguished_name = distinguished_name

    @classmethod
    def from_config(cls, config) -> "PackageRegistry":
        return cls(
            config.root,
            packages_dir=config.registry.packages_dir,
            manifest_filename=config.registry.manifest_filename,
            distinguished_name=config.platform.distinguished_name,
        )

    async def _package_dirs(self) -> List[Path]:
        if not await aiofiles.os.path.isdir(self.packages_dir):
            raise RegistryError(f"Packages directory not found: {self.packages_dir}")
        try:
            names = await aiofiles.os.listdir(self.packages_dir)
        except OSError as e:
            raise RegistryError(f"Failed to list {self.packages_dir}: {e}") from e
        candidates = [self.packages_dir / name for name in sorted(names)]
        has_manifest = await asyncio.gather(
            *(aiofiles.os.path.isfile(d / self.manifest_filename) for d in candidates)
        )
        return [d for d, found in zip(candidates, has_manifest) if found]

    async def _read_package(self, package_dir: Path) -> Package:
        manifest_path = package_dir / self.manifest_filename
        try:
            async with aiofiles.open(manifest_path, 'r', encoding='utf-8') as f:
                text = await f.read()
        except OSError as e:
            raise RegistryError(f"Failed to read {manifest_path}: {e}") from e

        manifest = parse_manifest(text, manifest_path)
        name = manifest.get('name')
        # Nameless manifests are kept so the rewrite step can report them
        key = name if isinstance(name, str) and name else package_dir.name
        return Package(path=package_dir, manifest=manifest, key=key)

    async def get_packages(
        self,
        *,
        include_private: bool = False,
        include_distinguished: bool = False
    ) -> Dict[str, Package]:
        """Return packages keyed by name, in directory order."""
        package_dirs = await self._package_dirs()
        packages = await asyncio.gather(*(self._read_package(d) for d in package_dirs))

        result: Dict[str, Package] = {}
        for package in packages:
            if package.is_private and not include_private:
                logger.debug(f"Skipping private package {package.key}")
                continue
            if package.name == self.distinguished_name and not include_distinguished:
                continue
            if package.key in result:
                raise RegistryError(
                    f"Duplicate package name '{package.key}': "
                    f"{result[package.key].path} and {package.path}"
                )
            result[package.key] = package

        logger.debug(f"Registry found {len(result)} package(s) under {self.packages_dir}")
        return result
