"""
Tests for building sources and runtimes from configuration.
"""

import json

import pytest

from lingora.config import AppConfig
from lingora.factory import build_namespace_source, build_runtime, build_source
from lingora.logging.setup import _console_level
from lingora.config.schema import LoggingConfig
from lingora.sources import CachedSource, FileSource, FileStorage, RemoteNamespaceSource, RemoteSource


class TestBuildSource:
    def test_no_source(self):
        assert build_source(AppConfig()) is None

    def test_messages_dir(self, tmp_path):
        assert isinstance(build_source(AppConfig(messages_dir=tmp_path)), FileSource)

    def test_remote(self):
        source = build_source(AppConfig(remote={"base_url": "https://cdn.test/i18n/", "retries": 2}))
        assert isinstance(source, RemoteSource)
        assert source.url_for("tr") == "https://cdn.test/i18n/tr.json"

    def test_cache_wraps_source(self, tmp_path):
        config = AppConfig(
            remote={"base_url": "https://cdn.test/i18n"},
            cache={"enabled": True, "ttl_ms": 1000, "prefix": "app", "directory": tmp_path},
        )
        source = build_source(config)
        assert isinstance(source, CachedSource)
        assert isinstance(source.source, RemoteSource)
        assert source.ttl_ms == 1000
        assert isinstance(source.storage, FileStorage)
        assert source.storage.cache_dir == tmp_path
        assert source.storage.prefix == "app"

    def test_namespace_source(self):
        assert build_namespace_source(AppConfig()) is None
        source = build_namespace_source(AppConfig(namespaces={"base_url": "https://cdn.test/ns"}))
        assert isinstance(source, RemoteNamespaceSource)
        assert source.url_for("admin", "tr") == "https://cdn.test/ns/tr/admin.json"


class TestBuildRuntime:
    @pytest.mark.asyncio
    async def test_runtime_from_config(self, tmp_path):
        (tmp_path / "tr.json").write_text(json.dumps({"hi": "Merhaba"}), encoding="utf-8")
        runtime = build_runtime(AppConfig(locale="tr", fallback="en", messages_dir=tmp_path, cache_size=5))

        assert runtime.formatter.cache.max_size == 5
        await runtime.load_locale()
        assert runtime.t("hi") == "Merhaba"

    def test_static_messages(self):
        runtime = build_runtime(AppConfig(), messages={"en": {"hi": "Hello"}})
        assert runtime.t("hi") == "Hello"


class TestConsoleLevel:
    @pytest.mark.parametrize(
        "level,verbose,expected",
        [("warn", 0, 30), ("warn", 1, 20), ("error", 1, 20), ("debug", 1, 10), ("error", 2, 10)],
    )
    def test_levels(self, level, verbose, expected):
        assert _console_level(LoggingConfig(level=level, verbose=verbose)) == expected
