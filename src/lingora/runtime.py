"""
Runtime instance: the translate entry point and the loading lifecycle.

Resolution (synchronous, never raises):
    fallback chain -> first locale in the store whose dictionary has the key
    -> missing: on_missing_key hook, return the key itself
    -> grammar message + params: template formatter (raw text + on_error on failure)
    -> plain message + params: literal {name} interpolation
    -> otherwise: the message unchanged

Loading (asynchronous, the only operations allowed to fail outward):
    load_locale(locale)    source -> store (replaces that locale's dictionary)
    load_namespace(name)   namespace source -> merged into the current locale

Concurrent loads of the same locale, or the same (locale, namespace), share
a single in-flight task instead of hitting the source twice.

Usage:
    runtime = Runtime(
        locale="tr",
        fallback="en",
        messages={"en": {"greeting": "Hello {name}!"}, "tr": {"greeting": "Merhaba {name}!"}},
    )
    runtime.t("greeting", {"name": "Ann"})  # "Merhaba Ann!"
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Mapping
from decimal import Decimal
from typing import Any

import structlog

from .core.fallback import build_fallback_chain
from .core.keypath import MessageTree
from .core.store import MessageStore
from .errors import ConfigurationError
from .formatting import locale_data
from .formatting.formatter import TemplateFormatter
from .formatting.grammar import is_grammar_message
from .formatting.interpolate import interpolate
from .formatting.lru import DEFAULT_CACHE_SIZE
from .hooks import RuntimeHooks
from .sources.base import MessageSource, NamespaceSource

logger = structlog.get_logger()

__all__ = ["Runtime"]


class Runtime:
    """Owns the current locale, the message store and the template cache.

    Not thread-safe: one instance per thread or request, or serialize access.
    """

    def __init__(
        self,
        locale: str,
        fallback: str,
        messages: Mapping[str, Mapping[str, Any]] | None = None,
        source: MessageSource | None = None,
        namespace_source: NamespaceSource | None = None,
        hooks: RuntimeHooks | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        """Initialize the runtime.

        Args:
            locale: Initial current locale (e.g. "tr", "en-US").
            fallback: Fixed fallback locale, tried last.
            messages: Static ``{locale: dictionary}`` preloaded into the store.
            source: Source used by ``load_locale``.
            namespace_source: Source used by ``load_namespace``.
            hooks: Missing-key / load / error callbacks.
            cache_size: Capacity of the compiled-template cache.

        Raises:
            ConfigurationError: If locale or fallback is empty.
        """
        if not locale or not fallback:
            raise ConfigurationError("Both locale and fallback are required")

        self._locale = locale
        self._fallback = fallback
        self.store = MessageStore(messages)
        self.formatter = TemplateFormatter(cache_size=cache_size)
        self.source = source
        self.namespace_source = namespace_source
        self.hooks = hooks or RuntimeHooks()
        self._inflight: dict[tuple[str, ...], asyncio.Task[None]] = {}
        self.log = logger.bind(component="runtime")

    # ── Locale state ──────────────────────────────────────────────────

    @property
    def locale(self) -> str:
        """Current locale."""
        return self._locale

    @locale.setter
    def locale(self, value: str) -> None:
        self.set_locale(value)

    @property
    def fallback(self) -> str:
        """Fallback locale (fixed at construction)."""
        return self._fallback

    def get_locale(self) -> str:
        return self._locale

    def set_locale(self, locale: str) -> None:
        """Switch the current locale. Does not load anything."""
        if not locale:
            raise ValueError("Locale must be a non-empty string")
        if locale != self._locale:
            self.log.info("runtime.locale_changed", previous=self._locale, locale=locale)
        self._locale = locale

    def get_fallback(self) -> str:
        return self._fallback

    @property
    def fallback_chain(self) -> list[str]:
        return build_fallback_chain(self._locale, self._fallback)

    # ── Translation ───────────────────────────────────────────────────

    def translate(self, key: str, params: Mapping[str, Any] | None = None, **kwargs: Any) -> str:
        """Resolve ``key`` for the current locale and render it.

        Keyword arguments are merged over ``params``. Always returns a string.
        """
        if kwargs:
            params = {**(params or {}), **kwargs}

        locale = self._locale
        found = self.store.find(build_fallback_chain(locale, self._fallback), key)
        if found is None:
            self.log.debug("runtime.missing_key", key=key, locale=locale)
            self.hooks.missing_key(key, locale)
            return key

        found_locale, message = found
        if not params:
            return message

        try:
            if is_grammar_message(message):
                # Plural rules follow the language the message is written in
                return self.formatter.format_strict(message, found_locale, params)
            return interpolate(message, params)
        except Exception as e:
            self.log.warning(
                "runtime.format_failed",
                key=key,
                locale=found_locale,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.hooks.error(
                e,
                {"operation": "translate", "key": key, "locale": found_locale, "template": message},
            )
            return message

    t = translate

    # ── Loading ───────────────────────────────────────────────────────

    async def load_locale(self, locale: str | None = None) -> None:
        """Load ``locale`` (default: current) from the source into the store.

        Raises:
            ConfigurationError: No source configured.
            LocaleUnavailable: The source has no such locale.
            SourceError: The source failed to deliver.
        """
        if self.source is None:
            raise ConfigurationError("No message source configured")
        target = locale or self._locale
        await self._dedupe(("locale", target), lambda: self._load_locale(target))

    def is_locale_loaded(self, locale: str | None = None) -> bool:
        return self.store.has_locale(locale or self._locale)

    async def load_namespace(self, namespace: str) -> None:
        """Merge ``namespace`` into the current locale, once per (locale, namespace).

        Raises:
            ConfigurationError: No namespace source configured.
            NamespaceUnavailable: The source has no such fragment.
            SourceError: The source failed to deliver.
        """
        if self.namespace_source is None:
            raise ConfigurationError("No namespace source configured")
        locale = self._locale
        if self.store.is_namespace_loaded(locale, namespace):
            return
        await self._dedupe(
            ("namespace", locale, namespace),
            lambda: self._load_namespace(namespace, locale),
        )

    def is_namespace_loaded(self, namespace: str) -> bool:
        """True if ``namespace`` has been merged into the current locale."""
        return self.store.is_namespace_loaded(self._locale, namespace)

    def get_messages(self) -> dict[str, MessageTree]:
        """Snapshot (deep copy) of every loaded dictionary."""
        return self.store.snapshot()

    def available_locales(self) -> list[str]:
        """Locales in the store plus those the source advertises."""
        locales = self.store.locales
        if self.source is not None:
            locales += [loc for loc in self.source.available_locales() if loc not in locales]
        return locales

    async def _load_locale(self, locale: str) -> None:
        start = time.perf_counter()
        try:
            messages = await self.source.load(locale)
        except Exception as e:
            self.log.warning("runtime.load_failed", locale=locale, error=str(e), error_type=type(e).__name__)
            self.hooks.error(e, {"operation": "load_locale", "locale": locale})
            raise

        self.store.replace(locale, messages)
        duration_ms = (time.perf_counter() - start) * 1000
        self.log.info("runtime.locale_loaded", locale=locale, duration_ms=round(duration_ms, 1))
        self.hooks.loaded(locale, duration_ms)

    async def _load_namespace(self, namespace: str, locale: str) -> None:
        start = time.perf_counter()
        try:
            fragment = await self.namespace_source.load(namespace, locale)
        except Exception as e:
            self.log.warning(
                "runtime.namespace_load_failed",
                locale=locale,
                namespace=namespace,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.hooks.error(
                e, {"operation": "load_namespace", "locale": locale, "namespace": namespace}
            )
            raise

        self.store.merge(locale, fragment, namespace=namespace)
        duration_ms = (time.perf_counter() - start) * 1000
        self.log.info(
            "runtime.namespace_loaded",
            locale=locale,
            namespace=namespace,
            duration_ms=round(duration_ms, 1),
        )
        self.hooks.loaded(f"{locale}:{namespace}", duration_ms)

    async def _dedupe(self, key: tuple[str, ...], factory: Callable[[], Awaitable[None]]) -> None:
        """Run ``factory`` once per key at a time; concurrent callers share the task."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._inflight[key] = task

            def _done(finished: asyncio.Task[None], key: tuple[str, ...] = key) -> None:
                if self._inflight.get(key) is finished:
                    del self._inflight[key]

            task.add_done_callback(_done)
        else:
            self.log.debug("runtime.load_joined", key=":".join(key))
        # shield: one cancelled caller must not cancel the load for the others
        await asyncio.shield(task)

    # ── Locale-aware value formatting ─────────────────────────────────

    def format_date(self, value: Any, style: str = "medium") -> str:
        """Format a date (or epoch milliseconds) for the current locale.

        Args:
            value: date, datetime or epoch milliseconds.
            style: "short", "medium", "long" or "full".
        """
        if style not in locale_data.DATE_STYLES:
            raise ValueError(f"Unknown date style: {style}. Available: {list(locale_data.DATE_STYLES)}")
        return locale_data.format_date(value, locale_data.resolve_locale(self._locale), style)

    def format_number(
        self,
        value: int | float | Decimal,
        style: str = "decimal",
        currency: str | None = None,
    ) -> str:
        """Format a number for the current locale.

        Args:
            value: Number to format.
            style: "decimal", "currency" or "percent".
            currency: ISO 4217 code; derived from the locale when omitted.
        """
        return locale_data.format_number(
            value,
            locale_data.resolve_locale(self._locale),
            style=style,
            currency=currency or locale_data.default_currency(self._locale),
        )
