"""
Configuration module for lingora.

Exports the main components for convenient imports.
"""

from .loader import deep_merge, load_config
from .schema import (
    AppConfig,
    CacheConfig,
    LoggingConfig,
    NamespaceSourceConfig,
    RemoteSourceConfig,
)

__all__ = [
    "deep_merge",
    "load_config",
    "AppConfig",
    "CacheConfig",
    "LoggingConfig",
    "NamespaceSourceConfig",
    "RemoteSourceConfig",
]
