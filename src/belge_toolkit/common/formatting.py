"""Locale-independent number, currency and date formatting.

Output never depends on the process locale: separators, symbol placement
and month names come from the explicit tables below, so the same record
renders the same bytes on every machine.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class NumberStyle:
    """Digit grouping and decimal separators."""

    group: str
    decimal: str


TURKISH = NumberStyle(group=".", decimal=",")
ENGLISH = NumberStyle(group=",", decimal=".")


@dataclass(frozen=True)
class CurrencyStyle:
    """How one currency is written."""

    symbol: str
    number: NumberStyle
    symbol_first: bool
    space: bool = False


CURRENCIES: Dict[str, CurrencyStyle] = {
    "TRY": CurrencyStyle("₺", TURKISH, symbol_first=False, space=True),
    "USD": CurrencyStyle("$", ENGLISH, symbol_first=True),
    "EUR": CurrencyStyle("€", TURKISH, symbol_first=False, space=True),
    "GBP": CurrencyStyle("£", ENGLISH, symbol_first=True),
}

TURKISH_MONTHS = (
    "Ocak", "Şubat", "Mart", "Nisan", "Mayıs", "Haziran",
    "Temmuz", "Ağustos", "Eylül", "Ekim", "Kasım", "Aralık",
)

DEFAULT_DATE_FORMAT = "DD.MM.YYYY"

# Token -> strftime-free renderer
_DATE_PATTERNS = {
    "DD.MM.YYYY": lambda d: f"{d.day:02d}.{d.month:02d}.{d.year:04d}",
    "YYYY-MM-DD": lambda d: f"{d.year:04d}-{d.month:02d}-{d.day:02d}",
    "DD/MM/YYYY": lambda d: f"{d.day:02d}/{d.month:02d}/{d.year:04d}",
    "MM/DD/YYYY": lambda d: f"{d.month:02d}/{d.day:02d}/{d.year:04d}",
    "long": lambda d: f"{d.day} {TURKISH_MONTHS[d.month - 1]} {d.year}",
}

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
_DOTTED_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")

Number = Union[int, float, Decimal, str]


def to_decimal(value: Any) -> Optional[Decimal]:
    """Convert a number or numeric string to Decimal; None if not numeric."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr round-trips, so 0.1 stays 0.1
        value = repr(value)
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return result if result.is_finite() else None


def format_number(
    value: Number,
    decimals: int = 0,
    style: NumberStyle = TURKISH,
) -> str:
    """
    Format a number with fixed decimals and digit grouping.

    Rounds half away from zero (1.005 -> "1,01" with 2 decimals).

    Raises:
        ValueError: If value is not numeric or decimals is negative
    """
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0: {decimals}")
    amount = to_decimal(value)
    if amount is None:
        raise ValueError(f"Not a number: {value!r}")

    quantum = Decimal(1).scaleb(-decimals)
    with localcontext() as ctx:
        # quantize needs every integer digit plus the requested decimals
        ctx.prec = max(ctx.prec, amount.adjusted() + decimals + 2)
        rounded = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    negative = rounded < 0
    text = f"{rounded.copy_abs():.{decimals}f}"
    whole, _, fraction = text.partition(".")

    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    result = style.group.join(groups)
    if fraction:
        result += style.decimal + fraction
    return f"-{result}" if negative else result


def format_currency(value: Number, currency: str = "TRY", decimals: int = 2) -> str:
    """
    Format a monetary amount.

    Example:
        >>> format_currency(8260, "TRY")
        '8.260,00 ₺'
        >>> format_currency(8260, "USD")
        '$8,260.00'

    Unknown currency codes fall back to Turkish separators followed by
    the code itself ("8.260,00 CHF").
    """
    code = currency.upper()
    style = CURRENCIES.get(code)
    if style is None:
        return f"{format_number(value, decimals, TURKISH)} {code}"

    number = format_number(value, decimals, style.number)
    negative = number.startswith("-")
    digits = number.lstrip("-")
    gap = " " if style.space else ""
    if style.symbol_first:
        body = f"{style.symbol}{gap}{digits}"
    else:
        body = f"{digits}{gap}{style.symbol}"
    return f"-{body}" if negative else body


def format_percent(value: Number, decimals: int = 0) -> str:
    """Format a percentage the Turkish way ("%18")."""
    return f"%{format_number(value, decimals, TURKISH)}"


def parse_date(value: Any) -> Optional[date]:
    """
    Interpret a date-like value.

    Accepts date/datetime objects, ISO strings ("2024-03-05",
    "2024-03-05T10:00:00Z") and dotted Turkish dates ("05.03.2024").
    Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if _ISO_DATE.match(text):
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return None
    match = _DOTTED_DATE.match(text)
    if match:
        day, month, year = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None
    return None


def format_date(value: Any, pattern: str = DEFAULT_DATE_FORMAT) -> str:
    """
    Format a date.

    Args:
        value: date, datetime or parseable string
        pattern: One of DD.MM.YYYY, YYYY-MM-DD, DD/MM/YYYY, MM/DD/YYYY, long

    Raises:
        ValueError: If the value is not a date or the pattern is unknown
    """
    renderer = _DATE_PATTERNS.get(pattern)
    if renderer is None:
        raise ValueError(f"Unknown date format {pattern!r}; expected one of {sorted(_DATE_PATTERNS)}")
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Not a date: {value!r}")
    return renderer(parsed)


def format_datetime(value: Any, pattern: str = DEFAULT_DATE_FORMAT) -> str:
    """Format a date followed by HH:MM when a time is available."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return format_date(value, pattern)
    day = format_date(value, pattern)
    if isinstance(value, datetime):
        return f"{day} {value.hour:02d}:{value.minute:02d}"
    return day


DATE_FORMATS = tuple(_DATE_PATTERNS)
