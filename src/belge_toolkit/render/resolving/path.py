"""
Module: render.resolving.path

Purpose:
    Parses and evaluates path expressions against business records.

    Grammar:
        path     := segment ("." segment)*
        segment  := key ("[" "]" | "[" digits "]")*
        key      := any characters except "." "[" "]"

    Examples: ``customer.name``, ``items[].unit_price``, ``items[0].price``

Key Classes:
    - KeySegment / IndexSegment / WildcardSegment: Typed path segments
    - PathExpression: Parsed path with resolve()

Used By:
    - render.resolving.resolver
    - render.validation: Paths are parsed before any record is touched
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, List, Tuple, Union

from belge_toolkit.core.models import ABSENT
from belge_toolkit.render.errors import InvalidPathError

_SEGMENT = re.compile(r"^(?P<key>[^.\[\]]+)(?P<brackets>(?:\[\d*\])*)$")
_BRACKET = re.compile(r"\[(\d*)\]")


@dataclass(frozen=True)
class KeySegment:
    key: str

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class IndexSegment:
    index: int

    def __str__(self) -> str:
        return f"[{self.index}]"


@dataclass(frozen=True)
class WildcardSegment:
    """Maps the rest of the path over every element of a collection."""

    def __str__(self) -> str:
        return "[]"


Segment = Union[KeySegment, IndexSegment, WildcardSegment]


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _step(value: Any, segment: Segment) -> Any:
    if value is None or value is ABSENT:
        return ABSENT
    if isinstance(segment, KeySegment):
        if isinstance(value, Mapping):
            return value.get(segment.key, ABSENT)
        return ABSENT
    if isinstance(segment, IndexSegment):
        if _is_sequence(value) and segment.index < len(value):
            return value[segment.index]
        return ABSENT
    return ABSENT


@dataclass(frozen=True)
class PathExpression:
    """
    Parsed path expression (immutable).

    Example:
        >>> expr = PathExpression.parse("items[].unit_price")
        >>> expr.resolve({"items": [{"unit_price": 10}, {"unit_price": 5}]})
        [10, 5]
    """

    text: str
    segments: Tuple[Segment, ...]

    @classmethod
    def parse(cls, text: str) -> PathExpression:
        """
        Parse a path expression.

        Raises:
            InvalidPathError: If the text is empty or malformed
        """
        return _parse(text)

    @property
    def has_wildcard(self) -> bool:
        return any(isinstance(s, WildcardSegment) for s in self.segments)

    def resolve(self, record: Any) -> Any:
        """
        Evaluate against ``record``.

        A missing key, out-of-range index, non-container intermediate or
        None value yields ABSENT. A wildcard yields a list with one entry
        per element, empty when the collection or any key leading to it is
        absent. Elements where the remainder does not resolve are dropped.
        """
        return _resolve(record, self.segments)

    def __str__(self) -> str:
        return self.text


def _resolve(value: Any, segments: Tuple[Segment, ...]) -> Any:
    for position, segment in enumerate(segments):
        if isinstance(segment, WildcardSegment):
            if not _is_sequence(value):
                return []
            rest = segments[position + 1:]
            collected = (_resolve(item, rest) for item in value)
            return [item for item in collected if item is not ABSENT]
        value = _step(value, segment)
        if value is ABSENT:
            rest = segments[position + 1:]
            return [] if any(isinstance(s, WildcardSegment) for s in rest) else ABSENT
    return ABSENT if value is None else value


@lru_cache(maxsize=512)
def _parse(text: str) -> PathExpression:
    if not isinstance(text, str) or not text.strip():
        raise InvalidPathError(str(text), "empty path")

    segments: List[Segment] = []
    for part in text.split("."):
        match = _SEGMENT.match(part)
        if match is None:
            raise InvalidPathError(text, f"malformed segment {part!r}")
        segments.append(KeySegment(match.group("key")))
        for index in _BRACKET.findall(match.group("brackets")):
            segments.append(IndexSegment(int(index)) if index else WildcardSegment())
    return PathExpression(text=text, segments=tuple(segments))
