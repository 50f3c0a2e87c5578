"""
Literal ``{name}`` substitution for plain (non-grammar) messages.

    interpolate("Hello {name}!", {"name": "Ann"})  # "Hello Ann!"

Placeholders without a matching parameter stay verbatim; a parameter whose
value is None renders as an empty string. Values are not escaped.
"""

import re
from collections.abc import Mapping
from typing import Any

_PLACEHOLDER = re.compile(r"\{(\w+)\}", re.ASCII)


def interpolate(template: str, params: Mapping[str, Any] | None) -> str:
    """Replace every ``{identifier}`` that has a parameter."""
    if not params:
        return template

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in params:
            return match.group(0)
        value = params[name]
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_replace, template)
