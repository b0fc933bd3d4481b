"""
Module: values

Purpose:
    Render-scoped value types produced by the resolver and consumed by the
    layout engine and renderer. Nothing here is persisted.

Key Classes:
    - ABSENT: Marker for a path that did not resolve
    - ImageRef: Image reference (URL, file path or data URI)
    - TableValue: Formatted table cells plus authoritative row count
    - ResolvedValues: Read-only field name -> value map

Used By:
    - render.resolving.resolver
    - render.layout.flow (row counts)
    - render.output.pdf_renderer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple


class _Absent:
    """Singleton marker for values that could not be resolved."""

    _instance = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self):
        return (_Absent, ())


ABSENT = _Absent()


def is_absent(value: Any) -> bool:
    """True for ABSENT and for the image placeholder."""
    return value is ABSENT or (isinstance(value, ImageRef) and value.is_placeholder)


@dataclass(frozen=True, slots=True)
class ImageRef:
    """
    Reference to an image.

    ``uri`` is a ``data:`` URI, an http(s) URL or a local file path. An
    empty uri is the placeholder used when the mapping did not resolve.
    """

    uri: str

    @property
    def is_placeholder(self) -> bool:
        return not self.uri

    @property
    def is_inline(self) -> bool:
        return self.uri.startswith("data:")

    @property
    def is_remote(self) -> bool:
        return self.uri.startswith(("http://", "https://"))


IMAGE_PLACEHOLDER = ImageRef("")


@dataclass(frozen=True)
class TableValue:
    """
    Resolved table content.

    Attributes:
        rows: One tuple of formatted cell strings per row
        row_count: Number of rows; drives the layout engine

    Example:
        >>> table = TableValue.from_rows([["Ürün A", "2"], ["Ürün B", "1"]])
        >>> table.row_count
        2
    """

    rows: Tuple[Tuple[str, ...], ...] = ()
    row_count: int = 0

    def __post_init__(self) -> None:
        if self.row_count != len(self.rows):
            raise ValueError(
                f"row_count {self.row_count} does not match {len(self.rows)} rows"
            )

    @classmethod
    def from_rows(cls, rows) -> TableValue:
        frozen = tuple(tuple(str(c) for c in row) for row in rows)
        return cls(rows=frozen, row_count=len(frozen))

    @property
    def column_count(self) -> int:
        return max((len(r) for r in self.rows), default=0)


@dataclass(frozen=True)
class ResolvedValues:
    """
    Read-only map of field name to resolved value for one render.

    Fields that were skipped or unmapped are simply not present.
    """

    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copy so callers cannot mutate the map after resolution
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def get(self, name: str, default: Any = ABSENT) -> Any:
        return self.values.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def row_counts(self) -> Dict[str, int]:
        """Row count of every resolved table, keyed by field name."""
        return {
            name: value.row_count
            for name, value in self.values.items()
            if isinstance(value, TableValue)
        }

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.values)
