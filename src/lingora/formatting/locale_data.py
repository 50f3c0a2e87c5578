"""
CLDR locale data through Babel.

Plural and ordinal categories, and locale-aware number, currency, date and
time rendering. Locale codes that Babel cannot resolve degrade to their base
language and then to English rather than failing.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

from babel import Locale, UnknownLocaleError
from babel import dates as babel_dates
from babel import numbers as babel_numbers

DEFAULT_LOCALE = "en"

DATE_STYLES = ("short", "medium", "long", "full")
NUMBER_STYLES = ("decimal", "currency", "percent")

# Locale -> currency used when format_number is asked for a currency
# without one. Locales not listed fall back to their territory's currency.
DEFAULT_CURRENCIES: dict[str, str] = {
    "tr": "TRY",
    "en": "USD",
    "en-US": "USD",
    "en-GB": "GBP",
    "de": "EUR",
    "fr": "EUR",
}

DEFAULT_CURRENCY = "USD"


def resolve_locale(code: str) -> Locale:
    """Map a locale code to a Babel ``Locale``, degrading base -> English."""
    base = _base_language(code or DEFAULT_LOCALE)
    for candidate in (code, base, DEFAULT_LOCALE):
        if not candidate:
            continue
        try:
            return Locale.parse(candidate.replace("_", "-"), sep="-")
        except (ValueError, TypeError, UnknownLocaleError):
            continue
    return Locale(DEFAULT_LOCALE)


def _base_language(code: str) -> str:
    return code.replace("_", "-").split("-", 1)[0]


def plural_category(locale: Locale, number: int | float | Decimal) -> str:
    """Cardinal CLDR category (``one``, ``few``, ``other``...) for ``number``."""
    return locale.plural_form(number)


def ordinal_category(locale: Locale, number: int | float | Decimal) -> str:
    """Ordinal CLDR category (``one`` for 1st, ``two`` for 2nd...)."""
    return locale.ordinal_form(number)


def format_decimal(number: Any, locale: Locale, style: str | None = None) -> str:
    """Render a number for ``{n, number[, style]}`` and for ``#``.

    ``style`` is None, ``integer``, ``percent`` or a CLDR number pattern.
    """
    if style is None or style == "decimal":
        return babel_numbers.format_decimal(number, locale=locale)
    if style == "integer":
        return babel_numbers.format_decimal(number, format="#,##0", locale=locale)
    if style == "percent":
        return babel_numbers.format_percent(number, locale=locale)
    return babel_numbers.format_decimal(number, format=style, locale=locale)


def default_currency(code: str) -> str:
    """Currency code for a locale: explicit map, then territory, then USD."""
    if code in DEFAULT_CURRENCIES:
        return DEFAULT_CURRENCIES[code]

    territory = resolve_locale(code).territory
    if territory:
        currencies = babel_numbers.get_territory_currencies(territory)
        if currencies:
            return currencies[0]

    base = _base_language(code)
    return DEFAULT_CURRENCIES.get(base, DEFAULT_CURRENCY)


def format_number(
    value: int | float | Decimal,
    locale: Locale,
    style: str = "decimal",
    currency: str = DEFAULT_CURRENCY,
) -> str:
    """Locale-aware number rendering for the ``decimal|currency|percent`` styles."""
    if style not in NUMBER_STYLES:
        raise ValueError(f"Unknown number style: {style}. Available: {list(NUMBER_STYLES)}")
    if style == "currency":
        return babel_numbers.format_currency(value, currency, locale=locale)
    if style == "percent":
        return babel_numbers.format_percent(value, locale=locale)
    return babel_numbers.format_decimal(value, locale=locale)


def to_datetime(value: Any) -> date | datetime | time:
    """Accept date/datetime/time objects or epoch milliseconds."""
    if isinstance(value, (date, datetime, time)):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
    raise TypeError(f"Not a date value: {value!r}")


def format_date(value: Any, locale: Locale, style: str | None = "medium") -> str:
    """Render a date; ``style`` is a CLDR style name or a date pattern."""
    moment = to_datetime(value)
    if isinstance(moment, time):
        raise TypeError(f"Not a date value: {value!r}")
    return babel_dates.format_date(moment, format=style or "medium", locale=locale)


def format_time(value: Any, locale: Locale, style: str | None = "medium") -> str:
    """Render a time of day; ``style`` is a CLDR style name or a time pattern."""
    moment = to_datetime(value)
    if isinstance(moment, date) and not isinstance(moment, datetime):
        raise TypeError(f"Not a time value: {value!r}")
    return babel_dates.format_time(moment, format=style or "medium", locale=locale)
