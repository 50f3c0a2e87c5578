"""
Build sources and runtimes from a validated AppConfig.
"""

from collections.abc import Mapping
from typing import Any

import structlog

from .config.schema import AppConfig
from .hooks import RuntimeHooks
from .runtime import Runtime
from .sources import (
    CachedSource,
    FileSource,
    FileStorage,
    MessageSource,
    NamespaceSource,
    RemoteNamespaceSource,
    RemoteSource,
)

logger = structlog.get_logger()


def build_source(config: AppConfig) -> MessageSource | None:
    """Configured message source, wrapped in the offline cache if enabled."""
    source: MessageSource | None = None
    if config.messages_dir is not None:
        source = FileSource(config.messages_dir)
    elif config.remote is not None:
        source = RemoteSource(
            config.remote.base_url,
            extension=config.remote.extension,
            headers=config.remote.headers,
            timeout=config.remote.timeout,
            retries=config.remote.retries,
        )

    if source is not None and config.cache.enabled:
        storage = FileStorage(config.cache.directory, prefix=config.cache.prefix)
        source = CachedSource(source, ttl_ms=config.cache.ttl_ms, storage=storage)

    logger.debug(
        "factory.source_built",
        source=type(source).__name__ if source else None,
        cached=config.cache.enabled,
    )
    return source


def build_namespace_source(config: AppConfig) -> NamespaceSource | None:
    if config.namespaces is None:
        return None
    return RemoteNamespaceSource(
        config.namespaces.base_url,
        extension=config.namespaces.extension,
        headers=config.namespaces.headers,
        timeout=config.namespaces.timeout,
        retries=config.namespaces.retries,
    )


def build_runtime(
    config: AppConfig,
    messages: Mapping[str, Mapping[str, Any]] | None = None,
    hooks: RuntimeHooks | None = None,
) -> Runtime:
    """Construct a Runtime wired to the configured sources."""
    return Runtime(
        locale=config.locale,
        fallback=config.fallback,
        messages=messages,
        source=build_source(config),
        namespace_source=build_namespace_source(config),
        hooks=hooks,
        cache_size=config.cache_size,
    )
