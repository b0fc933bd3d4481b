"""
Module: render.resolving.transforms

Purpose:
    Named value transforms used by computed mappings. A transform is a
    pure function ``(args, options, context) -> value``; anything
    time-dependent reads ``context.as_of`` instead of the clock.

Key Classes:
    - TransformContext: Per-render (and per-row) evaluation context
    - TransformRegistry: Explicit name -> transform lookup

Key Functions:
    - default_transforms(): Fresh registry with the built-in transforms

Built-ins:
    currency, number, percent, date, datetime, concat, sum, count,
    upper, today, row_number

Used By:
    - render.resolving.resolver
    - render.validation: Unknown names are rejected before resolving
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from belge_toolkit.common.formatting import (
    DATE_FORMATS,
    DEFAULT_DATE_FORMAT,
    format_currency,
    format_date,
    format_datetime,
    format_number,
    format_percent,
    parse_date,
    to_decimal,
)
from belge_toolkit.core.models import ABSENT, is_absent
from belge_toolkit.render.errors import UnknownTransformError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformContext:
    """
    Evaluation context shared by every transform of one render.

    Attributes:
        as_of: Render timestamp, captured once
        date_format: Default date pattern
        default_currency: Currency when neither options nor inputs name one
        row_index: 0-based row while evaluating table cells, else None
    """

    as_of: datetime
    date_format: str = DEFAULT_DATE_FORMAT
    default_currency: str = "TRY"
    row_index: Optional[int] = None

    def for_row(self, row_index: int) -> TransformContext:
        return replace(self, row_index=row_index)


Transform = Callable[[Sequence[Any], Mapping[str, Any], TransformContext], Any]


class TransformRegistry:
    """
    Name -> transform lookup, owned by whoever builds the pipeline.

    Example:
        >>> registry = default_transforms()
        >>> registry.register("reverse", lambda args, opts, ctx: str(args[0])[::-1])
        >>> "reverse" in registry
        True
    """

    def __init__(self, transforms: Optional[Mapping[str, Transform]] = None):
        self._transforms: Dict[str, Transform] = dict(transforms or {})

    def register(self, name: str, transform: Transform) -> None:
        if not name:
            raise ValueError("Transform name must be non-empty")
        self._transforms[name] = transform

    def get(self, name: str) -> Transform:
        try:
            return self._transforms[name]
        except KeyError:
            raise UnknownTransformError([name]) from None

    def copy(self) -> TransformRegistry:
        return TransformRegistry(self._transforms)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._transforms))

    def __contains__(self, name: object) -> bool:
        return name in self._transforms

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __len__(self) -> int:
        return len(self._transforms)

    def apply(
        self,
        name: str,
        args: Sequence[Any],
        options: Mapping[str, Any],
        context: TransformContext,
    ) -> Any:
        """
        Run a transform.

        When the rule has inputs and every one of them is absent, the
        transform is not called and ABSENT is returned.

        Raises:
            UnknownTransformError: If name is not registered
        """
        transform = self.get(name)
        if args and all(is_absent(a) for a in args):
            return ABSENT
        return transform(args, options, context)

    def option_problems(self, name: str, options: Mapping[str, Any]) -> List[str]:
        """
        Check the options of a built-in transform without running it.

        Custom transforms registered under any name are not inspected.

        Example:
            >>> default_transforms().option_problems("number", {"decimals": -1})
            ['decimals must be a non-negative integer: -1']
        """
        if name not in BUILTIN_TRANSFORMS or self._transforms.get(name) is not BUILTIN_TRANSFORMS[name]:
            return []
        problems = []
        if name in _DATE_FORMAT_TRANSFORMS and "format" in options:
            if options["format"] not in DATE_FORMATS:
                problems.append(f"format must be one of {list(DATE_FORMATS)}: {options['format']!r}")
        for key in _INTEGER_OPTIONS.get(name, ()):
            value = options.get(key)
            if key in options and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                problems.append(f"{key} must be a non-negative integer: {value!r}")
        return problems


# ─────────────────────────────────────────────────────────────────────────────
# Built-in transforms
# ─────────────────────────────────────────────────────────────────────────────

def _flatten(args: Iterable[Any]) -> List[Any]:
    flat: List[Any] = []
    for arg in args:
        if isinstance(arg, (list, tuple)):
            flat.extend(_flatten(arg))
        elif not is_absent(arg):
            flat.append(arg)
    return flat


def _first(args: Sequence[Any]) -> Any:
    return args[0] if args else ABSENT


def _plain_number(value: Decimal) -> Any:
    return int(value) if value == value.to_integral_value() else value


def _currency(args, options, context):
    amount = _first(args)
    if is_absent(amount):
        return ABSENT
    code = options.get("currency")
    if code is None and len(args) > 1 and isinstance(args[1], str) and args[1]:
        code = args[1]
    if to_decimal(amount) is None:
        return str(amount)
    return format_currency(amount, code or context.default_currency, int(options.get("decimals", 2)))


def _number(args, options, context):
    value = _first(args)
    if is_absent(value):
        return ABSENT
    if to_decimal(value) is None:
        return str(value)
    return format_number(value, int(options.get("decimals", 0)))


def _percent(args, options, context):
    value = _first(args)
    if is_absent(value):
        return ABSENT
    if to_decimal(value) is None:
        return str(value)
    return format_percent(value, int(options.get("decimals", 0)))


def _date(args, options, context):
    value = _first(args)
    if is_absent(value):
        return ABSENT
    if parse_date(value) is None:
        return str(value)
    return format_date(value, options.get("format", context.date_format))


def _datetime(args, options, context):
    value = _first(args)
    if is_absent(value):
        return ABSENT
    if parse_date(value) is None:
        return str(value)
    return format_datetime(value, options.get("format", context.date_format))


def _concat(args, options, context):
    parts = [str(v) for v in _flatten(args) if str(v) != ""]
    if not parts:
        return ABSENT
    return str(options.get("separator", " ")).join(parts)


def _sum(args, options, context):
    total = Decimal(0)
    for value in _flatten(args):
        number = to_decimal(value)
        if number is not None:
            total += number
    if "currency" in options:
        return format_currency(total, options["currency"], int(options.get("decimals", 2)))
    if "decimals" in options:
        return format_number(total, int(options["decimals"]))
    return _plain_number(total)


def _count(args, options, context):
    return len(_flatten(args))


_TURKISH_UPPER = str.maketrans({"i": "İ", "ı": "I"})


def _upper(args, options, context):
    value = _first(args)
    if is_absent(value):
        return ABSENT
    text = str(value)
    if options.get("locale", "tr") == "tr":
        text = text.translate(_TURKISH_UPPER)
    return text.upper()


def _today(args, options, context):
    return format_date(context.as_of, options.get("format", context.date_format))


def _row_number(args, options, context):
    if context.row_index is None:
        return ABSENT
    return str(context.row_index + int(options.get("start", 1)))


# Built-ins reading a date pattern from options["format"]
_DATE_FORMAT_TRANSFORMS = frozenset({"date", "datetime", "today"})

# Built-in name -> options that must be non-negative integers
_INTEGER_OPTIONS = {
    "currency": ("decimals",),
    "number": ("decimals",),
    "percent": ("decimals",),
    "sum": ("decimals",),
    "row_number": ("start",),
}

BUILTIN_TRANSFORMS: Mapping[str, Transform] = {
    "currency": _currency,
    "number": _number,
    "percent": _percent,
    "date": _date,
    "datetime": _datetime,
    "concat": _concat,
    "sum": _sum,
    "count": _count,
    "upper": _upper,
    "today": _today,
    "row_number": _row_number,
}


def default_transforms() -> TransformRegistry:
    """Return a new registry holding the built-in transforms."""
    return TransformRegistry(BUILTIN_TRANSFORMS)
