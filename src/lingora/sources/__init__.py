"""
Message sources: static, file, remote (HTTP) and the offline caching decorator.
"""

from .base import MessageSource, NamespaceSource
from .cached import DEFAULT_TTL_MS, CachedSource
from .files import FileSource
from .remote import RemoteNamespaceSource, RemoteSource
from .static import StaticNamespaceSource, StaticSource
from .storage import CacheEntry, CacheStorage, FileStorage, MemoryStorage

__all__ = [
    "MessageSource",
    "NamespaceSource",
    "StaticSource",
    "StaticNamespaceSource",
    "FileSource",
    "RemoteSource",
    "RemoteNamespaceSource",
    "CachedSource",
    "DEFAULT_TTL_MS",
    "CacheEntry",
    "CacheStorage",
    "FileStorage",
    "MemoryStorage",
]
