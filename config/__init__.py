# config/__init__.py
"""
Config package for the version sync settings.

Import from config.config_models for SyncConfig and load_config.
"""
from .config_models import (
    RegistryConfig,
    PlatformConfig,
    LoggingConfig,
    SyncConfig,
    SENTINEL_VERSION,
    load_config,
)

__all__ = [
    "RegistryConfig",
    "PlatformConfig",
    "LoggingConfig",
    "SyncConfig",
    "SENTINEL_VERSION",
    "load_config",
]
