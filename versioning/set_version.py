# versioning/set_version.py
"""
Sets a single version for the entire monorepo.

- Every public package under ``<root>/<packages_dir>`` gets the version
- Every dependency/devDependency on one of those packages is pinned to it
- The distinguished package, its template app and its native build files
  are stamped by ``PlatformVersionSetter``

With ``skip_distinguished`` the distinguished package keeps the sentinel
version. The use case is bumping ``main`` after a release cut.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from config.config_models import SyncConfig, load_config
from monorepo.platform_version import PlatformVersionSetter
from monorepo.registry import Package, PackageRegistry
from utils.error_handler import ErrorHandlingContext, standard_error_handlers
from utils.exceptions import BatchApplyError
from versioning.manifest_rewriter import ManifestUpdate, rewrite_manifest, update_manifest
from versioning.resolver import resolve_versions

logger = logging.getLogger(__name__)


@dataclass
class SetVersionResult:
    """What a run resolved and wrote."""
    version: str
    mapping: Mapping[str, str]
    distinguished_version: Optional[str]
    updates: List[ManifestUpdate] = field(default_factory=list)
    platform_files: List[Path] = field(default_factory=list)
    dry_run: bool = False

    @property
    def changed(self) -> List[ManifestUpdate]:
        return [u for u in self.updates if u.changed]


@dataclass
class VersionMismatch:
    """A manifest field that disagrees with the release mapping."""
    package: str
    field: str
    expected: str
    found: Optional[str]

    def __str__(self):
        return f"{self.package} {self.field}: {self.found} != {self.expected}"


def _config(config: Optional[SyncConfig]) -> SyncConfig:
    return config if config is not None else load_config()


async def _resolve(version: str, skip_distinguished: bool, config: SyncConfig):
    registry = PackageRegistry.from_config(config)
    packages = await registry.get_packages(include_private=False, include_distinguished=True)
    mapping = resolve_versions(
        packages.values(),
        version,
        distinguished_name=config.platform.distinguished_name,
        skip_distinguished=skip_distinguished,
        sentinel_version=config.platform.sentinel_version,
    )
    return packages, mapping


async def _apply_all(
    packages: List[Package],
    mapping: Mapping[str, str],
    manifest_filename: str,
    dry_run: bool
) -> List[ManifestUpdate]:
    results = await asyncio.gather(
        *(
            rewrite_manifest(
                package.path,
                package.manifest,
                mapping,
                manifest_filename=manifest_filename,
                dry_run=dry_run,
            )
            for package in packages
        ),
        return_exceptions=True,
    )
    errors = [r for r in results if isinstance(r, BaseException)]
    if errors:
        raise BatchApplyError(errors)
    return list(results)


async def set_version(
    version: str,
    skip_distinguished: bool = False,
    *,
    config: Optional[SyncConfig] = None,
    dry_run: bool = False
) -> SetVersionResult:
    """
    Set ``version`` on every public package of the monorepo.

    Args:
        version: Target version; not validated
        skip_distinguished: Keep the distinguished package at the sentinel version
        config: Settings; loaded from the environment when omitted
        dry_run: Compute the updates without writing anything

    Raises:
        RegistryError, PlatformVersionError: collaborator failures
        BatchApplyError: one or more manifest rewrites failed; the others were still written
    """
    config = _config(config)
    distinguished_name = config.platform.distinguished_name

    with ErrorHandlingContext(f"set_version({version})", standard_error_handlers):
        packages, mapping = await _resolve(version, skip_distinguished, config)
        logger.info(
            f"Setting version {version} on {len(mapping)} package(s)"
            + (" (dry run)" if dry_run else "")
        )

        result = SetVersionResult(
            version=version,
            mapping=mapping,
            distinguished_version=mapping.get(distinguished_name),
            dry_run=dry_run,
        )

        setter = PlatformVersionSetter(config.root, config.platform, config.registry.manifest_filename)
        if distinguished_name not in packages:
            logger.warning(f"Distinguished package '{distinguished_name}' not found, skipping platform files")
        elif dry_run:
            result.platform_files = list((await setter.stamped_files()).values())
        else:
            await setter.set_distinguished_version(result.distinguished_version, mapping)
            result.platform_files = list((await setter.stamped_files()).values())

        # The distinguished manifest is written by the platform setter
        to_update = [p for p in packages.values() if p.name != distinguished_name]
        result.updates = await _apply_all(
            to_update, mapping, config.registry.manifest_filename, dry_run
        )

    logger.info(
        f"{'Would update' if dry_run else 'Updated'} {len(result.changed)} of "
        f"{len(result.updates)} manifest(s)"
    )
    return result


async def check_versions(
    version: str,
    skip_distinguished: bool = False,
    *,
    config: Optional[SyncConfig] = None
) -> List[VersionMismatch]:
    """Report every manifest field that is not yet in sync with ``version``."""
    config = _config(config)

    with ErrorHandlingContext(f"check_versions({version})", standard_error_handlers):
        packages, mapping = await _resolve(version, skip_distinguished, config)

        mismatches: List[VersionMismatch] = []
        for package in packages.values():
            updated, changes = update_manifest(package.manifest, mapping, package.path)
            for change in changes:
                if change == 'version':
                    found = package.manifest.get('version')
                    expected = updated['version']
                else:
                    dependency_field, dependency = change.split('.', 1)
                    found = package.manifest[dependency_field][dependency]
                    expected = updated[dependency_field][dependency]
                mismatches.append(VersionMismatch(updated['name'], change, expected, found))

    logger.info(f"{len(mismatches)} field(s) out of sync with {version}")
    return mismatches
