"""
Configuration models for the monorepo version sync tooling.
Uses Pydantic for validation and environment variable support.
"""

import os
from pathlib import Path, PurePosixPath
from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv
import yaml
import json

from utils.exceptions import ConfigurationError
from utils.logging_config import VALID_LOG_LEVELS

# Load environment variables from .env file if present
load_dotenv()

SENTINEL_VERSION = "1000.0.0"


def _env(name: str, default: str):
    return lambda: os.environ.get(name, default)


def _relative_path(v: str) -> str:
    if not v:
        raise ValueError("Path must not be empty")
    if Path(v).is_absolute() or PurePosixPath(v).is_absolute():
        raise ValueError(f"Path must be relative to the repository root. Got: {v}")
    return v


class RegistryConfig(BaseModel):
    """Configuration for package discovery."""
    packages_dir: str = Field(
        default_factory=_env("VERSION_SYNC_PACKAGES_DIR", "packages"),
        description="Directory (relative to the root) whose children are packages"
    )
    manifest_filename: str = Field(
        default_factory=_env("VERSION_SYNC_MANIFEST_FILENAME", "package.json"),
        description="File name of each package's manifest"
    )

    @field_validator("packages_dir")
    @classmethod
    def validate_packages_dir(cls, v):
        """Validate packages directory."""
        return _relative_path(v)

    @field_validator("manifest_filename")
    @classmethod
    def validate_manifest_filename(cls, v):
        """Validate manifest file name."""
        if not v or "/" in v or "\\" in v:
            raise ValueError(f"Manifest filename must be a bare file name. Got: {v!r}")
        return v


class PlatformConfig(BaseModel):
    """Configuration for the distinguished package and its native artifacts."""
    distinguished_name: str = Field(
        default_factory=_env("VERSION_SYNC_DISTINGUISHED_NAME", "react-native"),
        description="Name of the package whose artifacts are stamped separately"
    )
    distinguished_path: str = Field(
        default_factory=_env("VERSION_SYNC_DISTINGUISHED_PATH", "packages/react-native"),
        description="Directory of the distinguished package, relative to the root"
    )
    template_path: Optional[str] = Field(
        default="template",
        description="Template app directory, relative to the distinguished package"
    )
    gradle_files: List[str] = Field(
        default_factory=lambda: ["ReactAndroid/build.gradle"],
        description="Gradle build files stamped with versionName/versionCode"
    )
    podspec_files: List[str] = Field(
        default_factory=list,
        description="Podspec files stamped with s.version"
    )
    sentinel_version: str = Field(
        default=SENTINEL_VERSION,
        description="Placeholder version used when the distinguished package is not released"
    )

    @field_validator("distinguished_name", "sentinel_version")
    @classmethod
    def validate_not_empty(cls, v):
        """Reject empty names and versions."""
        if not v:
            raise ValueError("Value must not be empty")
        return v

    @field_validator("distinguished_path", "template_path")
    @classmethod
    def validate_relative(cls, v):
        """Validate package-relative paths."""
        if v is None:
            return v
        return _relative_path(v)

    @field_validator("gradle_files", "podspec_files")
    @classmethod
    def validate_relative_list(cls, v):
        """Validate package-relative artifact paths."""
        return [_relative_path(p) for p in v]


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = Field(
        default_factory=_env("VERSION_SYNC_LOG_LEVEL", "INFO"),
        description="Console log level"
    )
    dir: Optional[str] = Field(
        default_factory=lambda: os.environ.get("VERSION_SYNC_LOG_DIR") or None,
        description="Directory for the rotating log file; disabled when unset"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Validate log level."""
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {', '.join(VALID_LOG_LEVELS)}. Got: {v}")
        return v


class SyncConfig(BaseModel):
    """Complete version sync configuration."""
    root_dir: str = Field(
        default_factory=_env("VERSION_SYNC_ROOT", "."),
        description="Repository root"
    )
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def root(self) -> Path:
        return Path(self.root_dir)

    @classmethod
    def from_yaml(cls, file_path: Union[str, Path]) -> "SyncConfig":
        """Load configuration from YAML file."""
        with open(file_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.model_validate(config_dict)

    @classmethod
    def from_json(cls, file_path: Union[str, Path]) -> "SyncConfig":
        """Load configuration from JSON file."""
        with open(file_path, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
        return cls.model_validate(config_dict)

    def to_yaml(self, file_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        with open(file_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def to_json(self, file_path: Union[str, Path]) -> None:
        """Save configuration to JSON file."""
        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2)


def load_config(config_path: Optional[Union[str, Path]] = None) -> SyncConfig:
    """
    Load version sync configuration from file or environment variables.

    Args:
        config_path: Path to configuration file (YAML or JSON)

    Returns:
        SyncConfig: Complete configuration
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        if path.suffix.lower() in [".yaml", ".yml"]:
            return SyncConfig.from_yaml(path)
        elif path.suffix.lower() == ".json":
            return SyncConfig.from_json(path)
        else:
            raise ConfigurationError(
                f"Unsupported configuration file format: {path.suffix}",
                details={"path": str(path)}
            )

    return SyncConfig()
