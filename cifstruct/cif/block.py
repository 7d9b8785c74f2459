"""Read-only access to the tables of one CIF data block.

Cells keep their raw text (quotes included) so that ``?`` and ``.`` can be
told apart from quoted ``'?'`` and ``'.'``. The helpers below turn raw cells
into Python values.

Hierarchy:
    Document
    └── blocks: list[Block]
        ├── items: single tag -> value pairs
        └── loops: list[Loop]
    Block.find(prefix, fields) -> TableView -> Row
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Iterator, Optional, Sequence

from cifstruct.exceptions import CIFError, MalformedNumericError

NULL_MARKERS = ("?", ".")

# sentinel default: a null cell is an error
REQUIRED = object()

_NUMBER_RE = re.compile(r"^([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)(?:\(\d+\))?$")


# ======================================================================
# Cell decoding
# ======================================================================

def is_null(raw: Optional[str]) -> bool:
    return raw is None or raw in NULL_MARKERS


def as_string(raw: Optional[str]) -> str:
    """Cell text without quotes; null cells give an empty string."""
    if is_null(raw):
        return ""
    if raw.startswith(";"):
        return raw[1:].strip("\n")
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in ("'", '"'):
        return raw[1:-1]
    return raw


def as_number(raw: Optional[str], default=math.nan) -> float:
    """Parse a CIF number, dropping a trailing standard uncertainty like ``(3)``."""
    if is_null(raw):
        if default is REQUIRED:
            raise MalformedNumericError("" if raw is None else raw)
        return default
    m = _NUMBER_RE.match(as_string(raw))
    if not m:
        raise MalformedNumericError(raw)
    return float(m.group(1))


def as_int(raw: Optional[str], default=REQUIRED):
    if is_null(raw):
        if default is REQUIRED:
            raise MalformedNumericError("" if raw is None else raw, "integer")
        return default
    try:
        return int(as_string(raw))
    except ValueError:
        raise MalformedNumericError(raw, "integer") from None


# ======================================================================
# Tables
# ======================================================================

@dataclass
class Loop:
    """One ``loop_`` construct: lower-cased tags and rows of raw values."""

    tags: list[str]
    rows: list[list[str]] = field(default_factory=list)

    def index(self, tag: str) -> Optional[int]:
        try:
            return self.tags.index(tag)
        except ValueError:
            return None


class Row:
    """One row of a TableView, indexed by the position of the requested field.

    An optional field whose column is missing reads as ``?``.
    """

    __slots__ = ("_values", "_columns")

    def __init__(self, values: Sequence[str], columns: Sequence[Optional[int]]):
        self._values = values
        self._columns = columns

    def __getitem__(self, n: int) -> str:
        col = self._columns[n]
        return "?" if col is None else self._values[col]

    def __len__(self) -> int:
        return len(self._columns)

    def __iter__(self) -> Iterator[str]:
        for n in range(len(self._columns)):
            yield self[n]

    def has(self, n: int) -> bool:
        return self._columns[n] is not None

    def is_null(self, n: int) -> bool:
        return is_null(self[n])

    def as_str(self, n: int) -> str:
        return as_string(self[n])

    def as_num(self, n: int, default=math.nan) -> float:
        return as_number(self[n], default)

    def as_int(self, n: int, default=REQUIRED):
        return as_int(self[n], default)

    def __repr__(self) -> str:
        return f"<Row {list(self)}>"


class TableView:
    """Selected columns of a loop (or of the single items) of a block.

    A view whose required fields are not all present is empty: ``ok()`` is
    False and iteration yields nothing.
    """

    def __init__(self, columns: Sequence[Optional[int]] = (), rows: Sequence[Sequence[str]] = ()):
        self._columns = list(columns)
        self._rows = rows if self._columns else []

    def ok(self) -> bool:
        return bool(self._columns)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        for values in self._rows:
            yield Row(values, self._columns)

    def __getitem__(self, n: int) -> Row:
        return Row(self._rows[n], self._columns)

    def one(self) -> Row:
        if len(self._rows) != 1:
            raise CIFError(f"expected a single row, got {len(self._rows)}")
        return self[0]

    def find_row(self, value: str) -> Optional[Row]:
        """First row whose first field equals ``value``, or None."""
        for row in self:
            if row.as_str(0) == value:
                return row
        return None


# ======================================================================
# Block / Document
# ======================================================================

@dataclass
class Block:
    """One ``data_`` block: single items plus loops, tags lower-cased."""

    name: str
    items: dict[str, str] = field(default_factory=dict)
    loops: list[Loop] = field(default_factory=list)

    def find(self, prefix: str, fields: Sequence[str]) -> TableView:
        """Columns ``prefix + field`` for each field.

        A field starting with ``?`` is optional. Lookups are case-insensitive.
        """
        optional = [f.startswith("?") for f in fields]
        tags = [(prefix + f.lstrip("?")).lower() for f in fields]

        for loop in self.loops:
            columns = [loop.index(t) for t in tags]
            if any(c is not None for c in columns):
                return _view(columns, optional, loop.rows)

        columns = [n if t in self.items else None for n, t in enumerate(tags)]
        if any(c is not None for c in columns):
            values = [self.items.get(t, "?") for t in tags]
            return _view(columns, optional, [values])
        return TableView()

    def find_values(self, tag: str) -> list[str]:
        """All raw values of a tag, from a loop column or a single item."""
        tag = tag.lower()
        if tag in self.items:
            return [self.items[tag]]
        for loop in self.loops:
            col = loop.index(tag)
            if col is not None:
                return [row[col] for row in loop.rows]
        return []

    def find_string(self, tag: str) -> str:
        values = self.find_values(tag)
        return as_string(values[0]) if values else ""

    def has_tag(self, tag: str) -> bool:
        tag = tag.lower()
        return tag in self.items or any(loop.index(tag) is not None for loop in self.loops)


def _view(columns: list[Optional[int]], optional: list[bool], rows) -> TableView:
    for col, opt in zip(columns, optional):
        if col is None and not opt:
            return TableView()
    return TableView(columns, rows)


@dataclass
class Document:
    """Parsed CIF file: an ordered list of blocks."""

    blocks: list[Block] = field(default_factory=list)
    source: Optional[str] = None

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    def find_block(self, name: str) -> Optional[Block]:
        for b in self.blocks:
            if b.name.lower() == name.lower():
                return b
        return None

    def sole_block(self) -> Block:
        if len(self.blocks) != 1:
            raise CIFError(f"expected a single block, found {len(self.blocks)} in {self.source or 'document'}")
        return self.blocks[0]
