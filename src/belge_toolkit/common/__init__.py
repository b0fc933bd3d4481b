"""Common utilities shared across the toolkit."""

from __future__ import annotations

from .formatting import (
    CURRENCIES,
    DATE_FORMATS,
    DEFAULT_DATE_FORMAT,
    ENGLISH,
    TURKISH,
    NumberStyle,
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_percent,
    parse_date,
    to_decimal,
)

__all__ = [
    "CURRENCIES",
    "DATE_FORMATS",
    "DEFAULT_DATE_FORMAT",
    "ENGLISH",
    "TURKISH",
    "NumberStyle",
    "format_currency",
    "format_date",
    "format_datetime",
    "format_number",
    "format_percent",
    "parse_date",
    "to_decimal",
]
