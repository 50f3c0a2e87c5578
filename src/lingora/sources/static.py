"""
In-memory sources for bundled translations, tests and server-side rendering.
"""

from collections.abc import Mapping
from typing import Any

from ..core.keypath import MessageTree
from ..errors import LocaleUnavailable, NamespaceUnavailable
from .base import MessageSource, NamespaceSource


class StaticSource(MessageSource):
    """Serves a fixed ``{locale: dictionary}`` mapping.

    Usage:
        source = StaticSource({"en": {"greeting": "Hello"}, "tr": {"greeting": "Merhaba"}})
        await source.load("tr")  # {"greeting": "Merhaba"}
    """

    def __init__(self, messages: Mapping[str, Mapping[str, Any]]) -> None:
        self._messages = {locale: dict(tree) for locale, tree in messages.items()}

    async def load(self, locale: str) -> MessageTree:
        if locale not in self._messages:
            raise LocaleUnavailable(locale)
        return self._messages[locale]

    def has_locale(self, locale: str) -> bool:
        return locale in self._messages

    def available_locales(self) -> list[str]:
        return list(self._messages)


class StaticNamespaceSource(NamespaceSource):
    """Serves fragments from ``{namespace: {locale: dictionary}}``."""

    def __init__(self, namespaces: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> None:
        self._namespaces = {
            name: {locale: dict(tree) for locale, tree in per_locale.items()}
            for name, per_locale in namespaces.items()
        }

    async def load(self, namespace: str, locale: str) -> MessageTree:
        try:
            return self._namespaces[namespace][locale]
        except KeyError:
            raise NamespaceUnavailable(namespace, locale) from None

    @property
    def namespaces(self) -> list[str]:
        return list(self._namespaces)
