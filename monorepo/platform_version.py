# monorepo/platform_version.py
"""
Version stamping for the distinguished package.

The distinguished package owns files the generic manifest rewrite does not
know about: the template app manifest it ships and its native build files.
This module stamps all of them, and the package's own manifest, for a
release.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Union

import aiofiles
import aiofiles.os
import semver

from monorepo.registry import parse_manifest
from utils.exceptions import ManifestError, PlatformVersionError
from versioning.manifest_rewriter import rewrite_manifest, update_manifest, serialize_manifest, write_manifest

logger = logging.getLogger(__name__)

GRADLE_VERSION_NAME = re.compile(r'versionName\s+"[^"]*"')
GRADLE_VERSION_CODE = re.compile(r'versionCode\s+\d+')
PODSPEC_VERSION = re.compile(r"s\.version\s*=\s*['\"][^'\"]*['\"]")


def version_code(version: str) -> int:
    """Convert a version to an Android version code (1.2.3 -> 10203)."""
    try:
        v = semver.Version.parse(version)
    except ValueError as e:
        raise PlatformVersionError(f"Cannot derive a version code from '{version}': {e}") from e
    return v.major * 10000 + v.minor * 100 + v.patch


class PlatformVersionSetter:
    """Stamps a version into the distinguished package and its artifacts."""

    def __init__(self, root_dir: Union[str, Path], platform_config, manifest_filename: str = 'package.json'):
        self.root_dir = Path(root_dir)
        self.config = platform_config
        self.manifest_filename = manifest_filename
        self.package_dir = self.root_dir / platform_config.distinguished_path

    @property
    def distinguished_name(self) -> str:
        return self.config.distinguished_name

    async def exists(self) -> bool:
        return await aiofiles.os.path.isfile(self.package_dir / self.manifest_filename)

    async def _read_text(self, path: Path) -> str:
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                return await f.read()
        except OSError as e:
            raise PlatformVersionError(f"Failed to read {path}: {e}") from e

    async def _write_text(self, path: Path, content: str) -> None:
        try:
            async with aiofiles.open(path, 'w', encoding='utf-8') as f:
                await f.write(content)
        except OSError as e:
            raise PlatformVersionError(f"Failed to write {path}: {e}") from e
        logger.debug(f"Stamped {path}")

    async def _update_own_manifest(self, version: str, mapping: Mapping[str, str]) -> None:
        manifest_path = self.package_dir / self.manifest_filename
        manifest = parse_manifest(await self._read_text(manifest_path), manifest_path)
        if manifest.get('name') != self.distinguished_name:
            raise PlatformVersionError(
                f"{manifest_path} declares '{manifest.get('name')}', "
                f"expected '{self.distinguished_name}'"
            )
        own_mapping = dict(mapping)
        own_mapping[self.distinguished_name] = version
        await rewrite_manifest(
            self.package_dir, manifest, own_mapping, manifest_filename=self.manifest_filename
        )

    async def _update_template_manifest(self, version: str, mapping: Mapping[str, str]) -> None:
        if not self.config.template_path:
            return
        manifest_path = self.package_dir / self.config.template_path / self.manifest_filename
        if not await aiofiles.os.path.isfile(manifest_path):
            logger.warning(f"Template manifest not found, skipping: {manifest_path}")
            return

        manifest = parse_manifest(await self._read_text(manifest_path), manifest_path)
        template_mapping = dict(mapping)
        template_mapping[self.distinguished_name] = version
        # The template app is never itself part of the release
        template_mapping.pop(manifest.get('name'), None)
        updated, _ = update_manifest(manifest, template_mapping, manifest_path.parent)
        await write_manifest(manifest_path, serialize_manifest(updated))

    async def _update_gradle(self, path: Path, version: str) -> None:
        content = await self._read_text(path)
        content = GRADLE_VERSION_NAME.sub(f'versionName "{version}"', content)
        if GRADLE_VERSION_CODE.search(content):
            content = GRADLE_VERSION_CODE.sub(f'versionCode {version_code(version)}', content)
        await self._write_text(path, content)

    async def _update_podspec(self, path: Path, version: str) -> None:
        content = await self._read_text(path)
        content = PODSPEC_VERSION.sub(f"s.version = '{version}'", content)
        await self._write_text(path, content)

    async def _existing(self, relative_paths: List[str]) -> List[Path]:
        found = []
        for relative in relative_paths:
            path = self.package_dir / relative
            if await aiofiles.os.path.isfile(path):
                found.append(path)
            else:
                logger.warning(f"Native build file not found, skipping: {path}")
        return found

    async def set_distinguished_version(self, version: str, mapping: Mapping[str, str]) -> None:
        """
        Stamp ``version`` into the distinguished package.

        Args:
            version: Version for the distinguished package (the sentinel when it is not released)
            mapping: Version mapping of the whole release; applied to the
                package's and the template's dependency fields
        """
        if not await self.exists():
            raise PlatformVersionError(
                f"Distinguished package manifest not found: {self.package_dir / self.manifest_filename}"
            )
        logger.info(f"Setting {self.distinguished_name} version to {version}")

        tasks = [
            self._update_own_manifest(version, mapping),
            self._update_template_manifest(version, mapping),
        ]
        gradle_files = await self._existing(self.config.gradle_files)
        podspec_files = await self._existing(self.config.podspec_files)
        tasks.extend(self._update_gradle(p, version) for p in gradle_files)
        tasks.extend(self._update_podspec(p, version) for p in podspec_files)

        results = await asyncio.gather(*tasks, return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            first = errors[0]
            if isinstance(first, (PlatformVersionError, ManifestError)):
                raise first
            raise PlatformVersionError(f"Failed to set {self.distinguished_name} version: {first}") from first

    async def stamped_files(self) -> Dict[str, Path]:
        """Files this setter writes, keyed by role; only those present on disk."""
        files = {'manifest': self.package_dir / self.manifest_filename}
        if self.config.template_path:
            template = self.package_dir / self.config.template_path / self.manifest_filename
            if await aiofiles.os.path.isfile(template):
                files['template'] = template
        for relative in self.config.gradle_files + self.config.podspec_files:
            path = self.package_dir / relative
            if await aiofiles.os.path.isfile(path):
                files[relative] = path
        return files
