"""cifstruct.cif: CIF tokenizer and read-only table access.

Usage::

    from cifstruct.cif import read_document

    doc = read_document("1abc.cif.gz")
    block = doc.sole_block()
    for row in block.find("_entity.", ["id", "type"]):
        print(row.as_str(0), row.as_str(1))
"""

from cifstruct.cif.block import (
    NULL_MARKERS,
    REQUIRED,
    Block,
    Document,
    Loop,
    Row,
    TableView,
    as_int,
    as_number,
    as_string,
    is_null,
)
from cifstruct.cif.reader import parse_lines, read_document, read_string

__all__ = [
    "Block",
    "Document",
    "Loop",
    "Row",
    "TableView",
    "NULL_MARKERS",
    "REQUIRED",
    "as_int",
    "as_number",
    "as_string",
    "is_null",
    "parse_lines",
    "read_document",
    "read_string",
]
