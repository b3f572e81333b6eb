"""
Shared fixtures: a throwaway monorepo on disk.
"""
import json
from pathlib import Path

import pytest

from config.config_models import LoggingConfig, PlatformConfig, RegistryConfig, SyncConfig


def write_package(root: Path, directory: str, manifest: dict, filename: str = "package.json") -> Path:
    package_dir = root / directory
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / filename).write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    return package_dir


def read_manifest(package_dir: Path, filename: str = "package.json") -> dict:
    return json.loads((package_dir / filename).read_text(encoding="utf-8"))


@pytest.fixture
def repo(tmp_path):
    """
    packages/
      core      distinguished, devDepends on tool-a
      tool-a    depends on core (caret range) and an external package
      tool-b    devDepends on tool-a
      internal  private, depends on tool-a
    """
    packages = tmp_path / "packages"
    write_package(packages, "core", {
        "name": "core",
        "version": "0.1.0",
        "description": "Core runtime",
        "devDependencies": {"tool-a": "0.1.0"},
    })
    write_package(packages, "tool-a", {
        "name": "tool-a",
        "version": "0.1.0",
        "dependencies": {"core": "^0.1.0", "left-pad": "^1.3.0"},
    })
    write_package(packages, "tool-b", {
        "name": "tool-b",
        "version": "0.1.0",
        "license": "MIT",
        "devDependencies": {"tool-a": "0.1.0", "jest": "^29.0.0"},
    })
    write_package(packages, "internal", {
        "name": "internal",
        "version": "0.0.1",
        "private": True,
        "dependencies": {"tool-a": "0.1.0"},
    })
    return tmp_path


@pytest.fixture
def config(repo):
    return SyncConfig(
        root_dir=str(repo),
        registry=RegistryConfig(packages_dir="packages", manifest_filename="package.json"),
        platform=PlatformConfig(
            distinguished_name="core",
            distinguished_path="packages/core",
            template_path=None,
            gradle_files=[],
        ),
        logging=LoggingConfig(level="INFO", dir=None),
    )
