"""
Message source contracts.

A MessageSource supplies one locale's message dictionary on demand. A
NamespaceSource supplies a named fragment of a locale's dictionary, merged
into the runtime's store on request.

Loading is asynchronous; ``has_locale`` and ``available_locales`` are
best-effort and never load anything.
"""

from abc import ABC, abstractmethod

from ..core.keypath import MessageTree


class MessageSource(ABC):
    """Supplies message dictionaries per locale."""

    @abstractmethod
    async def load(self, locale: str) -> MessageTree:
        """Load the dictionary for ``locale``.

        Raises:
            LocaleUnavailable: The source has no data for ``locale``.
            SourceError: Transport or payload failure.
        """

    @abstractmethod
    def has_locale(self, locale: str) -> bool:
        """Best-effort availability check. Never triggers a load."""

    @abstractmethod
    def available_locales(self) -> list[str]:
        """Locales this source is known to serve."""


class NamespaceSource(ABC):
    """Supplies namespace-scoped fragments of a locale's dictionary."""

    @abstractmethod
    async def load(self, namespace: str, locale: str) -> MessageTree:
        """Load the ``namespace`` fragment for ``locale``.

        Raises:
            NamespaceUnavailable: No such fragment.
            SourceError: Transport or payload failure.
        """
