"""
Message store: locale code -> message dictionary, plus loaded namespaces.

The store owns its dictionaries. Everything handed in is deep-copied, so
callers (and sources that serve shared data) can never mutate a live
dictionary behind the runtime's back. A locale's dictionary is either
replaced wholesale (``replace``) or grown additively (``merge``).
"""

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from .keypath import MessageTree, find_message, merge_messages


class MessageStore:
    """Per-runtime mapping of locale codes to message dictionaries.

    Namespace tracking is per locale: a namespace marked for ``en`` says
    nothing about ``tr``. A locale present in the marker set for a namespace
    always has that fragment merged into its dictionary.
    """

    def __init__(self, messages: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._messages: dict[str, MessageTree] = {}
        self._namespaces: dict[str, set[str]] = {}
        for locale, tree in (messages or {}).items():
            self._messages[locale] = copy.deepcopy(dict(tree))

    def get(self, locale: str) -> MessageTree | None:
        return self._messages.get(locale)

    def has_locale(self, locale: str) -> bool:
        return locale in self._messages

    @property
    def locales(self) -> list[str]:
        return list(self._messages)

    def replace(self, locale: str, messages: Mapping[str, Any]) -> None:
        """Install a freshly loaded dictionary for ``locale``.

        Namespace markers for the locale are dropped along with the old
        dictionary, so namespaces load again on next request.
        """
        self._messages[locale] = copy.deepcopy(dict(messages))
        self._namespaces.pop(locale, None)

    def merge(self, locale: str, fragment: Mapping[str, Any], namespace: str | None = None) -> None:
        """Merge ``fragment`` into ``locale``; optionally mark ``namespace`` loaded."""
        current = self._messages.get(locale, {})
        self._messages[locale] = merge_messages(current, copy.deepcopy(dict(fragment)))
        if namespace is not None:
            self._namespaces.setdefault(locale, set()).add(namespace)

    def is_namespace_loaded(self, locale: str, namespace: str) -> bool:
        return namespace in self._namespaces.get(locale, ())

    def namespaces(self, locale: str) -> set[str]:
        return set(self._namespaces.get(locale, ()))

    def find(self, chain: Iterable[str], key: str) -> tuple[str, str] | None:
        """Return ``(locale, message)`` for the first candidate that has ``key``."""
        for locale in chain:
            tree = self._messages.get(locale)
            if tree is None:
                continue
            message = find_message(tree, key)
            if message is not None:
                return locale, message
        return None

    def snapshot(self) -> dict[str, MessageTree]:
        """Deep copy of every loaded dictionary."""
        return copy.deepcopy(self._messages)
