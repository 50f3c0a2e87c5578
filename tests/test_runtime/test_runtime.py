"""
Tests for the Runtime instance.

Covers:
- translate: fallback chain, key paths, interpolation, plural, missing keys
- hooks: missing key, load timing tags, error context, failing hooks
- load_locale / load_namespace lifecycle and ConfigurationError
- in-flight de-duplication of concurrent loads
- format_date / format_number
"""

import asyncio
from datetime import date

import pytest

from lingora.core.keypath import flatten_messages, get_by_path
from lingora.errors import ConfigurationError, LocaleUnavailable, SourceError
from lingora.hooks import RuntimeHooks
from lingora.runtime import Runtime
from lingora.sources import MessageSource, NamespaceSource, StaticNamespaceSource, StaticSource

MESSAGES = {
    "en": {
        "greeting": "Hello {name}!",
        "items": "{count, plural, one {# item} other {# items}}",
        "common": {"buttons": {"submit": "Submit"}},
        "only_en": "English only",
    },
    "tr": {
        "greeting": "Merhaba {name}!",
        "items": "{count, plural, one {# öğe} other {# öğe}}",
        "common": {"buttons": {"submit": "Gönder"}},
    },
}


class Recorder:
    """Collects hook invocations."""

    def __init__(self) -> None:
        self.missing: list[tuple[str, str]] = []
        self.loads: list[str] = []
        self.errors: list[tuple[BaseException, dict]] = []

    def hooks(self) -> RuntimeHooks:
        return RuntimeHooks(
            on_missing_key=lambda key, locale: self.missing.append((key, locale)),
            on_load=lambda tag, ms: self.loads.append(tag),
            on_error=lambda error, context: self.errors.append((error, context)),
        )


class CountingNamespaceSource(NamespaceSource):
    def __init__(self, fragments: dict, delay: float = 0.0) -> None:
        self.fragments = fragments
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def load(self, namespace: str, locale: str):
        self.calls.append((namespace, locale))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.fragments[namespace][locale]


class SlowSource(MessageSource):
    def __init__(self, messages: dict, delay: float = 0.01, error: Exception | None = None) -> None:
        self.messages = messages
        self.delay = delay
        self.error = error
        self.calls: list[str] = []

    async def load(self, locale: str):
        self.calls.append(locale)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.messages[locale]

    def has_locale(self, locale: str) -> bool:
        return locale in self.messages

    def available_locales(self) -> list[str]:
        return list(self.messages)


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def runtime(recorder) -> Runtime:
    return Runtime(locale="tr-TR", fallback="en", messages=MESSAGES, hooks=recorder.hooks())


# ── Construction and locale state ───────────────────────────────────────


class TestLocaleState:
    def test_requires_locale_and_fallback(self):
        with pytest.raises(ConfigurationError):
            Runtime(locale="", fallback="en")
        with pytest.raises(ConfigurationError):
            Runtime(locale="en", fallback="")

    def test_get_and_set_locale(self, runtime):
        assert runtime.get_locale() == "tr-TR"
        runtime.set_locale("en")
        assert runtime.locale == "en"
        runtime.locale = "tr"
        assert runtime.get_locale() == "tr"

    def test_set_empty_locale(self, runtime):
        with pytest.raises(ValueError):
            runtime.set_locale("")

    def test_fallback(self, runtime):
        assert runtime.get_fallback() == "en"
        assert runtime.fallback == "en"
        assert runtime.fallback_chain == ["tr-TR", "tr", "en"]


# ── translate ───────────────────────────────────────────────────────────


class TestTranslate:
    def test_interpolation(self):
        runtime = Runtime(locale="en", fallback="en", messages={"en": {"greeting": "Hello {name}!"}})
        assert runtime.translate("greeting", {"name": "Ann"}) == "Hello Ann!"

    def test_kwargs_params(self, runtime):
        assert runtime.t("greeting", name="Ali") == "Merhaba Ali!"

    def test_kwargs_override_params(self, runtime):
        assert runtime.t("greeting", {"name": "A"}, name="B") == "Merhaba B!"

    def test_plural(self):
        runtime = Runtime(locale="en", fallback="en", messages={"en": {"items": MESSAGES["en"]["items"]}})
        assert runtime.t("items", {"count": 1}) == "1 item"
        assert runtime.t("items", {"count": 5}) == "5 items"

    def test_region_falls_back_to_base(self, runtime):
        assert runtime.t("common.buttons.submit") == "Gönder"

    def test_falls_back_to_fallback_locale(self, runtime):
        assert runtime.t("only_en") == "English only"

    def test_plural_rules_follow_message_language(self):
        runtime = Runtime(locale="ru", fallback="en", messages={"en": {"items": MESSAGES["en"]["items"]}})
        # 21 is "one" in Russian but "other" in English
        assert runtime.t("items", {"count": 21}) == "21 items"

    def test_no_params_returns_message_unchanged(self, runtime):
        runtime.set_locale("en")
        assert runtime.t("greeting") == "Hello {name}!"
        assert runtime.t("items") == MESSAGES["en"]["items"]

    def test_unmatched_placeholder_is_not_a_missing_key(self, runtime, recorder):
        assert runtime.t("greeting", {"other": 1}) == "Merhaba {name}!"
        assert recorder.missing == []

    def test_missing_key_returns_key_and_calls_hook(self, runtime, recorder):
        assert runtime.t("missing.key") == "missing.key"
        assert recorder.missing == [("missing.key", "tr-TR")]

    def test_subtree_is_missing(self, runtime, recorder):
        assert runtime.t("common.buttons") == "common.buttons"
        assert recorder.missing == [("common.buttons", "tr-TR")]

    def test_flat_key_wins_over_nested(self):
        runtime = Runtime(
            locale="en",
            fallback="en",
            messages={"en": {"a.b": "flat", "a": {"b": "nested"}}},
        )
        assert runtime.t("a.b") == "flat"

    def test_broken_template_returns_raw_text(self, recorder):
        broken = "{count, plural, one {# item}}"
        runtime = Runtime(
            locale="en",
            fallback="en",
            messages={"en": {"items": broken}},
            hooks=recorder.hooks(),
        )
        assert runtime.t("items", {"count": 2}) == broken
        assert len(recorder.errors) == 1
        error, context = recorder.errors[0]
        assert context == {"operation": "translate", "key": "items", "locale": "en", "template": broken}

    def test_missing_template_param_returns_raw_text(self, recorder):
        runtime = Runtime(
            locale="en",
            fallback="en",
            messages={"en": {"items": MESSAGES["en"]["items"]}},
            hooks=recorder.hooks(),
        )
        assert runtime.t("items", {"total": 2}) == MESSAGES["en"]["items"]
        assert len(recorder.errors) == 1

    def test_failing_hook_does_not_break_translate(self):
        def explode(key, locale):
            raise RuntimeError("hook bug")

        runtime = Runtime(locale="en", fallback="en", hooks=RuntimeHooks(on_missing_key=explode))
        assert runtime.t("nope") == "nope"

    def test_runtimes_do_not_share_formatter_cache(self):
        first = Runtime(locale="en", fallback="en", messages={"en": {"items": MESSAGES["en"]["items"]}})
        second = Runtime(locale="en", fallback="en")
        first.t("items", {"count": 2})
        assert first.formatter.cache.size() == 1
        assert second.formatter.cache.size() == 0


# ── load_locale ─────────────────────────────────────────────────────────


class TestLoadLocale:
    @pytest.mark.asyncio
    async def test_without_source(self, runtime):
        with pytest.raises(ConfigurationError, match="No message source configured"):
            await runtime.load_locale()

    @pytest.mark.asyncio
    async def test_load_current_locale(self, recorder):
        source = StaticSource({"de": {"greeting": "Hallo {name}!"}})
        runtime = Runtime(locale="de", fallback="en", source=source, hooks=recorder.hooks())

        assert not runtime.is_locale_loaded()
        await runtime.load_locale()
        assert runtime.is_locale_loaded()
        assert runtime.t("greeting", name="Ann") == "Hallo Ann!"
        assert recorder.loads == ["de"]

    @pytest.mark.asyncio
    async def test_load_explicit_locale(self):
        source = StaticSource({"en": {"hi": "Hello"}, "tr": {"hi": "Merhaba"}})
        runtime = Runtime(locale="tr", fallback="en", source=source)
        await runtime.load_locale("en")
        assert runtime.is_locale_loaded("en")
        assert not runtime.is_locale_loaded("tr")
        assert runtime.t("hi") == "Hello"

    @pytest.mark.asyncio
    async def test_unavailable_locale_raises_and_reports(self, recorder):
        runtime = Runtime(locale="fr", fallback="en", source=StaticSource({}), hooks=recorder.hooks())
        with pytest.raises(LocaleUnavailable):
            await runtime.load_locale()
        error, context = recorder.errors[0]
        assert isinstance(error, LocaleUnavailable)
        assert context == {"operation": "load_locale", "locale": "fr"}
        assert not runtime.is_locale_loaded()

    @pytest.mark.asyncio
    async def test_reload_replaces_dictionary(self):
        source = StaticSource({"en": {"fresh": "Fresh"}})
        runtime = Runtime(locale="en", fallback="en", messages={"en": {"stale": "Stale"}}, source=source)
        await runtime.load_locale()
        assert runtime.t("fresh") == "Fresh"
        assert runtime.t("stale") == "stale"

    @pytest.mark.asyncio
    async def test_loaded_data_is_isolated_from_source(self):
        shared = {"en": {"hi": "Hello"}}
        runtime = Runtime(locale="en", fallback="en", source=StaticSource(shared))
        await runtime.load_locale()
        runtime.get_messages()["en"]["hi"] = "changed"
        assert runtime.t("hi") == "Hello"

    def test_available_locales(self):
        runtime = Runtime(
            locale="en",
            fallback="en",
            messages={"en": {}},
            source=StaticSource({"en": {}, "tr": {}}),
        )
        assert runtime.available_locales() == ["en", "tr"]


# ── load_namespace ──────────────────────────────────────────────────────


class TestLoadNamespace:
    FRAGMENTS = {
        "admin": {
            "en": {"admin": {"title": "Administration", "users": {"empty": "No users"}}},
            "tr": {"admin": {"title": "Yönetim", "users": {"empty": "Kullanıcı yok"}}},
        }
    }

    @pytest.mark.asyncio
    async def test_without_namespace_source(self, runtime):
        with pytest.raises(ConfigurationError, match="No namespace source configured"):
            await runtime.load_namespace("admin")

    @pytest.mark.asyncio
    async def test_merges_into_current_locale(self, recorder):
        source = CountingNamespaceSource(self.FRAGMENTS)
        runtime = Runtime(
            locale="en",
            fallback="en",
            messages={"en": {"hi": "Hello"}},
            namespace_source=source,
            hooks=recorder.hooks(),
        )
        await runtime.load_namespace("admin")

        assert runtime.is_namespace_loaded("admin")
        assert runtime.t("admin.title") == "Administration"
        assert runtime.t("hi") == "Hello"
        assert recorder.loads == ["en:admin"]

    @pytest.mark.asyncio
    async def test_second_load_is_a_no_op(self):
        source = CountingNamespaceSource(self.FRAGMENTS)
        runtime = Runtime(locale="en", fallback="en", namespace_source=source)
        await runtime.load_namespace("admin")
        await runtime.load_namespace("admin")
        assert source.calls == [("admin", "en")]

    @pytest.mark.asyncio
    async def test_tracking_is_per_locale(self):
        source = CountingNamespaceSource(self.FRAGMENTS)
        runtime = Runtime(locale="en", fallback="en", namespace_source=source)
        await runtime.load_namespace("admin")

        runtime.set_locale("tr")
        assert not runtime.is_namespace_loaded("admin")
        await runtime.load_namespace("admin")
        assert runtime.t("admin.title") == "Yönetim"
        assert source.calls == [("admin", "en"), ("admin", "tr")]

    @pytest.mark.asyncio
    async def test_merged_leaves_resolve_by_path(self):
        runtime = Runtime(
            locale="en",
            fallback="en",
            messages={"en": {"common": {"ok": "OK"}}},
            namespace_source=StaticNamespaceSource(self.FRAGMENTS),
        )
        await runtime.load_namespace("admin")

        tree = runtime.get_messages()["en"]
        flat = flatten_messages(tree)
        assert set(flat) == {"common.ok", "admin.title", "admin.users.empty"}
        for key, value in flat.items():
            assert get_by_path(tree, key) == value
            assert runtime.t(key) == value

    @pytest.mark.asyncio
    async def test_reloading_locale_forgets_namespaces(self):
        source = CountingNamespaceSource(self.FRAGMENTS)
        runtime = Runtime(
            locale="en",
            fallback="en",
            source=StaticSource({"en": {"hi": "Hello"}}),
            namespace_source=source,
        )
        await runtime.load_namespace("admin")
        await runtime.load_locale()
        assert not runtime.is_namespace_loaded("admin")
        await runtime.load_namespace("admin")
        assert len(source.calls) == 2

    @pytest.mark.asyncio
    async def test_missing_fragment_reports_error(self, recorder):
        runtime = Runtime(
            locale="de",
            fallback="en",
            namespace_source=StaticNamespaceSource(self.FRAGMENTS),
            hooks=recorder.hooks(),
        )
        with pytest.raises(LocaleUnavailable):
            await runtime.load_namespace("admin")
        _, context = recorder.errors[0]
        assert context == {"operation": "load_namespace", "locale": "de", "namespace": "admin"}
        assert not runtime.is_namespace_loaded("admin")


# ── Concurrent loads ────────────────────────────────────────────────────


class TestInflightDedupe:
    @pytest.mark.asyncio
    async def test_concurrent_locale_loads_share_one_call(self):
        source = SlowSource({"en": {"hi": "Hello"}})
        runtime = Runtime(locale="en", fallback="en", source=source)

        await asyncio.gather(runtime.load_locale(), runtime.load_locale(), runtime.load_locale("en"))
        assert source.calls == ["en"]
        assert runtime.t("hi") == "Hello"

    @pytest.mark.asyncio
    async def test_different_locales_load_independently(self):
        source = SlowSource({"en": {}, "tr": {}})
        runtime = Runtime(locale="en", fallback="en", source=source)
        await asyncio.gather(runtime.load_locale("en"), runtime.load_locale("tr"))
        assert sorted(source.calls) == ["en", "tr"]

    @pytest.mark.asyncio
    async def test_sequential_loads_call_again(self):
        source = SlowSource({"en": {}}, delay=0)
        runtime = Runtime(locale="en", fallback="en", source=source)
        await runtime.load_locale()
        await runtime.load_locale()
        assert source.calls == ["en", "en"]

    @pytest.mark.asyncio
    async def test_concurrent_failure_reaches_every_caller(self):
        source = SlowSource({}, error=SourceError("down", locale="en"))
        runtime = Runtime(locale="en", fallback="en", source=source)

        results = await asyncio.gather(
            runtime.load_locale(), runtime.load_locale(), return_exceptions=True
        )
        assert all(isinstance(r, SourceError) for r in results)
        assert source.calls == ["en"]

        # Nothing is left in flight; a later call tries again
        with pytest.raises(SourceError):
            await runtime.load_locale()
        assert source.calls == ["en", "en"]

    @pytest.mark.asyncio
    async def test_concurrent_namespace_loads_share_one_call(self):
        source = CountingNamespaceSource({"admin": {"en": {"admin": {"t": "T"}}}}, delay=0.01)
        runtime = Runtime(locale="en", fallback="en", namespace_source=source)
        await asyncio.gather(runtime.load_namespace("admin"), runtime.load_namespace("admin"))
        assert source.calls == [("admin", "en")]

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_load(self):
        source = SlowSource({"en": {"hi": "Hello"}}, delay=0.05)
        runtime = Runtime(locale="en", fallback="en", source=source)

        first = asyncio.ensure_future(runtime.load_locale())
        second = asyncio.ensure_future(runtime.load_locale())
        await asyncio.sleep(0)
        first.cancel()
        await second
        assert runtime.t("hi") == "Hello"
        assert source.calls == ["en"]


# ── Value formatting ────────────────────────────────────────────────────


class TestValueFormatting:
    def test_format_date(self):
        runtime = Runtime(locale="en", fallback="en")
        assert runtime.format_date(date(2024, 1, 15)) == "Jan 15, 2024"
        assert runtime.format_date(date(2024, 1, 15), "long") == "January 15, 2024"

    def test_format_date_follows_current_locale(self):
        runtime = Runtime(locale="en", fallback="en")
        runtime.set_locale("de")
        assert runtime.format_date(date(2024, 1, 15)) == "15.01.2024"

    def test_format_date_unknown_style(self):
        with pytest.raises(ValueError):
            Runtime(locale="en", fallback="en").format_date(date(2024, 1, 15), "tiny")

    def test_format_number(self):
        runtime = Runtime(locale="en-US", fallback="en")
        assert runtime.format_number(1234.5) == "1,234.5"
        assert runtime.format_number(0.25, "percent") == "25%"
        assert runtime.format_number(1234.5, "currency") == "$1,234.50"

    def test_currency_derived_from_locale(self):
        runtime = Runtime(locale="de", fallback="en")
        assert "€" in runtime.format_number(1234.5, "currency")
        assert "1.234,50" in runtime.format_number(1234.5, "currency")

    def test_explicit_currency(self):
        runtime = Runtime(locale="en", fallback="en")
        assert runtime.format_number(10, "currency", currency="EUR") == "€10.00"
