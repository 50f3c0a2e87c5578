"""
Template formatter with an instance-owned compiled-template cache.

Compiling a template parses it once and binds the CLDR locale data it
needs; the result is cached per ``(locale, template)`` in a bounded LRU
cache. A cache miss simply recompiles, so results never depend on what
happens to be cached.

Each runtime constructs its own formatter. There is deliberately no
module-level default instance.

Usage:
    formatter = TemplateFormatter(cache_size=500)
    formatter.format("{count, plural, one {# item} other {# items}}", "en", {"count": 5})
    # -> "5 items"
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from babel import Locale

from ..errors import TemplateFormatError
from . import locale_data
from .grammar import (
    ArgumentNode,
    FormattedNode,
    Node,
    PluralNode,
    PoundNode,
    SelectNode,
    TextNode,
    parse_template,
)
from .lru import DEFAULT_CACHE_SIZE, LRUCache

logger = structlog.get_logger()

__all__ = ["CompiledTemplate", "TemplateFormatter"]


class CompiledTemplate:
    """A parsed template bound to one locale, ready to evaluate."""

    def __init__(self, template: str, locale: str) -> None:
        self.template = template
        self.locale = locale
        self.nodes: tuple[Node, ...] = parse_template(template)
        self._babel_locale: Locale = locale_data.resolve_locale(locale)

    def format(self, params: Mapping[str, Any] | None = None) -> str:
        """Evaluate against ``params``.

        Raises:
            TemplateFormatError: a referenced parameter is missing or has a
                value the expression cannot use. Failures inside Babel (a
                date pattern applied to a time, an out-of-range timestamp)
                are raised as this error too.
        """
        try:
            return self._render(self.nodes, params or {}, None)
        except TemplateFormatError:
            raise
        except Exception as e:
            raise TemplateFormatError(
                f"{type(e).__name__}: {e}", template=self.template
            ) from e

    def _render(
        self,
        nodes: tuple[Node, ...],
        params: Mapping[str, Any],
        pound: Decimal | None,
    ) -> str:
        parts: list[str] = []
        for node in nodes:
            if isinstance(node, TextNode):
                parts.append(node.text)
            elif isinstance(node, PoundNode):
                parts.append(
                    "#" if pound is None else locale_data.format_decimal(pound, self._babel_locale)
                )
            elif isinstance(node, ArgumentNode):
                value = self._value(params, node.name)
                parts.append("" if value is None else _stringify(value))
            elif isinstance(node, FormattedNode):
                parts.append(self._formatted(node, self._value(params, node.name)))
            elif isinstance(node, SelectNode):
                key = _stringify(self._value(params, node.name))
                branch = node.options.get(key, node.options["other"])
                parts.append(self._render(branch, params, pound))
            elif isinstance(node, PluralNode):
                parts.append(self._plural(node, params))
        return "".join(parts)

    def _value(self, params: Mapping[str, Any], name: str) -> Any:
        if name not in params:
            raise TemplateFormatError(
                f"Parameter '{name}' was not provided", template=self.template
            )
        return params[name]

    def _formatted(self, node: FormattedNode, value: Any) -> str:
        if node.kind == "number":
            return locale_data.format_decimal(_to_number(value), self._babel_locale, node.style)
        if node.kind == "date":
            return locale_data.format_date(value, self._babel_locale, node.style)
        return locale_data.format_time(value, self._babel_locale, node.style)

    def _plural(self, node: PluralNode, params: Mapping[str, Any]) -> str:
        number = _to_number(self._value(params, node.name))

        for selector, branch in node.options.items():
            if selector.startswith("=") and Decimal(selector[1:]) == number:
                return self._render(branch, params, number - node.offset)

        adjusted = number - node.offset
        if node.ordinal:
            category = locale_data.ordinal_category(self._babel_locale, adjusted)
        else:
            category = locale_data.plural_category(self._babel_locale, adjusted)
        branch = node.options.get(category, node.options["other"])
        return self._render(branch, params, adjusted)


class TemplateFormatter:
    """Formats template-grammar strings, caching compiled forms per locale.

    ``format`` never raises; a template that cannot be compiled or
    evaluated comes back unchanged. ``format_strict`` raises
    TemplateFormatError instead, for callers that want to report it.
    """

    def __init__(self, cache_size: int = DEFAULT_CACHE_SIZE) -> None:
        self._cache: LRUCache[tuple[str, str], CompiledTemplate] = LRUCache(cache_size)
        self.log = logger.bind(component="formatter")

    @property
    def cache(self) -> LRUCache[tuple[str, str], CompiledTemplate]:
        return self._cache

    def compile(self, template: str, locale: str) -> CompiledTemplate:
        """Return the compiled form of ``template`` for ``locale`` (cached)."""
        key = (locale, template)
        compiled = self._cache.get(key)
        if compiled is None:
            compiled = CompiledTemplate(template, locale)
            self._cache.set(key, compiled)
            self.log.debug("formatter.compiled", locale=locale, cache_size=self._cache.size())
        return compiled

    def format_strict(
        self,
        template: str,
        locale: str,
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Format, raising TemplateFormatError on any grammar problem."""
        return self.compile(template, locale).format(params)

    def format(
        self,
        template: str,
        locale: str,
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Format, returning ``template`` unchanged on any grammar problem."""
        try:
            return self.format_strict(template, locale, params)
        except TemplateFormatError as e:
            self.log.debug("formatter.failed", locale=locale, error=str(e))
            return template

    def clear_cache(self) -> None:
        self._cache.clear()


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _to_number(value: Any) -> Decimal:
    """Coerce a parameter to Decimal for plural selection and number output."""
    if isinstance(value, bool):
        raise TypeError(f"Expected a number, got {value!r}")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # 1.0 selects like 1, not like a number with a visible fraction
        return Decimal(int(value)) if value.is_integer() else Decimal(repr(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            raise TypeError(f"Expected a number, got {value!r}") from None
    raise TypeError(f"Expected a number, got {value!r}")
