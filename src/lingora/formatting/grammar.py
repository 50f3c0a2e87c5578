"""
Parser for the pluralization / selection template grammar.

Supported syntax (ICU MessageFormat subset):

    {name}                                   plain argument
    {n, number}  {n, number, percent}        number (integer | percent | pattern)
    {d, date, short}  {d, time}              date / time (CLDR style or pattern)
    {n, plural, =0 {none} one {# item} other {# items}}
    {n, plural, offset:1 one {...} other {...}}
    {n, selectordinal, one {#st} two {#nd} few {#rd} other {#th}}
    {g, select, male {He} female {She} other {They}}

``#`` inside a plural branch stands for the (offset) number; elsewhere it is
literal. Branches nest freely. An apostrophe before ``{``, ``}`` (or ``#``
inside a plural) starts a quoted literal; ``''`` is a literal apostrophe.

Every plural/select expression must carry an ``other`` branch. Parse errors
raise TemplateFormatError.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ..errors import TemplateFormatError

__all__ = [
    "TextNode",
    "PoundNode",
    "ArgumentNode",
    "FormattedNode",
    "SelectNode",
    "PluralNode",
    "Node",
    "is_grammar_message",
    "parse_template",
]

# {name, plural|select|selectordinal, ...
_GRAMMAR_PATTERN = re.compile(r"\{[^}]+,\s*(plural|select|selectordinal)\s*,")

PLURAL_CATEGORIES = frozenset({"zero", "one", "two", "few", "many", "other"})
FORMATTED_TYPES = frozenset({"number", "date", "time"})

_WHITESPACE = " \t\r\n"
_IDENTIFIER_STOP = _WHITESPACE + ",{}"


@dataclass(frozen=True)
class TextNode:
    text: str


@dataclass(frozen=True)
class PoundNode:
    pass


@dataclass(frozen=True)
class ArgumentNode:
    name: str


@dataclass(frozen=True)
class FormattedNode:
    name: str
    kind: str
    style: str | None = None


@dataclass(frozen=True)
class SelectNode:
    name: str
    options: dict[str, tuple["Node", ...]]


@dataclass(frozen=True)
class PluralNode:
    name: str
    options: dict[str, tuple["Node", ...]]
    offset: int = 0
    ordinal: bool = False


Node = TextNode | PoundNode | ArgumentNode | FormattedNode | SelectNode | PluralNode


def is_grammar_message(message: str) -> bool:
    """True when ``message`` contains a plural/select/selectordinal expression.

    Plain ``{name}`` placeholders do not count; those go through literal
    interpolation instead of the formatter.
    """
    return _GRAMMAR_PATTERN.search(message) is not None


def parse_template(template: str) -> tuple[Node, ...]:
    """Parse ``template`` into a tuple of nodes."""
    return _Parser(template).parse()


class _Parser:
    """Recursive-descent parser over a single template string."""

    def __init__(self, template: str) -> None:
        self.src = template
        self.pos = 0
        self.depth = 0

    def parse(self) -> tuple[Node, ...]:
        nodes = self._message(in_plural=False)
        return tuple(nodes)

    # ── helpers ───────────────────────────────────────────────────────

    def _error(self, message: str) -> TemplateFormatError:
        return TemplateFormatError(f"{message} at position {self.pos}", template=self.src)

    def _eof(self) -> bool:
        return self.pos >= len(self.src)

    def _peek(self) -> str:
        return self.src[self.pos] if self.pos < len(self.src) else ""

    def _skip_ws(self) -> None:
        while self.pos < len(self.src) and self.src[self.pos] in _WHITESPACE:
            self.pos += 1

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            if self._eof():
                raise self._error(f"Unexpected end of template, expected '{char}'")
            raise self._error(f"Expected '{char}', found '{self._peek()}'")
        self.pos += 1

    def _identifier(self) -> str:
        start = self.pos
        while self.pos < len(self.src) and self.src[self.pos] not in _IDENTIFIER_STOP:
            self.pos += 1
        return self.src[start:self.pos]

    # ── grammar ───────────────────────────────────────────────────────

    def _message(self, in_plural: bool) -> list[Node]:
        nodes: list[Node] = []
        buf: list[str] = []

        def flush() -> None:
            if buf:
                nodes.append(TextNode("".join(buf)))
                buf.clear()

        while not self._eof():
            char = self.src[self.pos]
            if char == "{":
                flush()
                nodes.append(self._argument(in_plural))
            elif char == "}":
                if self.depth == 0:
                    raise self._error("Unmatched '}'")
                break
            elif char == "#" and in_plural:
                flush()
                nodes.append(PoundNode())
                self.pos += 1
            elif char == "'":
                buf.append(self._quoted(in_plural))
            else:
                buf.append(char)
                self.pos += 1

        flush()
        return nodes

    def _quoted(self, in_plural: bool) -> str:
        nxt = self.src[self.pos + 1] if self.pos + 1 < len(self.src) else ""
        if nxt == "'":
            self.pos += 2
            return "'"
        if nxt not in ("{", "}") and not (nxt == "#" and in_plural):
            self.pos += 1
            return "'"

        # Quoted literal: runs to the next single apostrophe (or the end)
        self.pos += 1
        out: list[str] = []
        while not self._eof():
            char = self.src[self.pos]
            if char == "'":
                if self.src[self.pos + 1:self.pos + 2] == "'":
                    out.append("'")
                    self.pos += 2
                    continue
                self.pos += 1
                break
            out.append(char)
            self.pos += 1
        return "".join(out)

    def _argument(self, in_plural: bool) -> Node:
        self._expect("{")
        self._skip_ws()
        name = self._identifier()
        if not name:
            raise self._error("Expected argument name")
        self._skip_ws()

        if self._peek() == "}":
            self.pos += 1
            return ArgumentNode(name)

        self._expect(",")
        self._skip_ws()
        kind = self._identifier()
        self._skip_ws()

        if kind in FORMATTED_TYPES:
            style = None
            if self._peek() == ",":
                self.pos += 1
                start = self.pos
                while not self._eof() and self.src[self.pos] not in "{}":
                    self.pos += 1
                style = self.src[start:self.pos].strip() or None
            self._expect("}")
            return FormattedNode(name, kind, style)

        if kind == "select":
            self._expect(",")
            options = self._options(in_plural=in_plural, plural=False)
            return SelectNode(name, options)

        if kind in ("plural", "selectordinal"):
            self._expect(",")
            self._skip_ws()
            offset = self._offset()
            options = self._options(in_plural=True, plural=True)
            return PluralNode(name, options, offset=offset, ordinal=kind == "selectordinal")

        if not kind:
            raise self._error("Expected argument type")
        raise self._error(f"Unknown argument type '{kind}'")

    def _offset(self) -> int:
        if not self.src.startswith("offset:", self.pos):
            return 0
        self.pos += len("offset:")
        self._skip_ws()
        start = self.pos
        while not self._eof() and self.src[self.pos].isdigit():
            self.pos += 1
        if start == self.pos:
            raise self._error("Expected number after 'offset:'")
        return int(self.src[start:self.pos])

    def _options(self, in_plural: bool, plural: bool) -> dict[str, tuple[Node, ...]]:
        options: dict[str, tuple[Node, ...]] = {}
        self._skip_ws()

        while self._peek() != "}":
            if self._eof():
                raise self._error("Unclosed argument")
            selector = self._identifier()
            if not selector:
                raise self._error("Expected selector")
            if plural:
                self._check_plural_selector(selector)
            if selector in options:
                raise self._error(f"Duplicate selector '{selector}'")

            self._skip_ws()
            self._expect("{")
            self.depth += 1
            body = self._message(in_plural)
            self.depth -= 1
            self._expect("}")
            options[selector] = tuple(body)
            self._skip_ws()

        self.pos += 1
        if "other" not in options:
            raise self._error("Missing 'other' branch")
        return options

    def _check_plural_selector(self, selector: str) -> None:
        if selector.startswith("="):
            try:
                Decimal(selector[1:])
            except InvalidOperation:
                raise self._error(f"Invalid plural selector '{selector}'") from None
            return
        if selector not in PLURAL_CATEGORIES:
            raise self._error(f"Invalid plural selector '{selector}'")
