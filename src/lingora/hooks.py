"""
Runtime lifecycle hooks.

Hooks are plain callables supplied at construction:

    on_missing_key(key, locale)       a key resolved in no candidate locale
    on_load(tag, duration_ms)         a locale ("tr") or namespace ("tr:admin") loaded
    on_error(error, context)          template or load failure; context is a dict
                                      with "operation" and the locale/key involved

Invariant: a hook never breaks the caller. Exceptions raised by a hook are
logged as ``hooks.failed`` and dropped, so ``translate`` keeps returning a
string no matter what user code does.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

logger = structlog.get_logger()

__all__ = ["RuntimeHooks"]


@dataclass
class RuntimeHooks:
    """Optional callbacks observed by a Runtime."""

    on_missing_key: Callable[[str, str], Any] | None = None
    on_load: Callable[[str, float], Any] | None = None
    on_error: Callable[[BaseException, dict[str, Any]], Any] | None = None

    def missing_key(self, key: str, locale: str) -> None:
        self._call("on_missing_key", self.on_missing_key, key, locale)

    def loaded(self, tag: str, duration_ms: float) -> None:
        self._call("on_load", self.on_load, tag, duration_ms)

    def error(self, error: BaseException, context: dict[str, Any]) -> None:
        self._call("on_error", self.on_error, error, context)

    def _call(self, name: str, hook: Callable[..., Any] | None, *args: Any) -> None:
        if hook is None:
            return
        try:
            hook(*args)
        except Exception as e:
            logger.warning(
                "hooks.failed",
                hook=name,
                error=str(e),
                error_type=type(e).__name__,
            )
