"""
Locale fallback chains.

A locale code is an opaque token, conventionally ``language`` or
``language-REGION``. The only structure assumed is the split on the first
separator into a base language and a region part.

    build_fallback_chain("tr-TR", "en")  # ["tr-TR", "tr", "en"]
    build_fallback_chain("en", "en")     # ["en"]
    build_fallback_chain("en-US", "en")  # ["en-US", "en"]
"""

import re

_SEPARATOR = re.compile(r"[-_]")


def parse_locale(locale: str) -> tuple[str, str | None]:
    """Split a locale code into ``(base, region)``.

    The region is everything after the first separator, or None.
    """
    parts = _SEPARATOR.split(locale, maxsplit=1)
    if len(parts) == 2 and parts[1]:
        return parts[0], parts[1]
    return parts[0], None


def build_fallback_chain(locale: str, fallback: str) -> list[str]:
    """Return the ordered, de-duplicated candidate locales for a lookup.

    Most specific first: the full locale (only when it carries a region),
    then its base language, then ``fallback`` if not already present.
    """
    chain: list[str] = []
    base, region = parse_locale(locale)

    if region:
        chain.append(locale)

    if base not in chain:
        chain.append(base)

    if fallback not in chain:
        chain.append(fallback)

    return chain
