"""CIF 1.1 tokenizer: text (plain or gzipped) -> Document of Blocks."""

from __future__ import annotations

import gzip
import re
from pathlib import Path
from typing import Iterable, Iterator

from cifstruct.cif.block import Block, Document, Loop
from cifstruct.core.logging_utils import get_logger
from cifstruct.exceptions import CIFSyntaxError

logger = get_logger(__name__)

# a quote closes only when followed by whitespace or end of line
_TOKEN_RE = re.compile(
    r"""'.*?'(?=\s|$)|".*?"(?=\s|$)|\#.*|\S+"""
)


def _tokens(lines: Iterable[str]) -> Iterator[tuple[int, str, bool]]:
    """Yield (line number, raw token, is_value_only).

    Quoted strings and text fields are values even when they look like
    keywords or tags.
    """
    text_field: list[str] = []
    text_start = 0
    for num, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")
        if text_field:
            if line.startswith(";"):
                yield text_start, "\n".join(text_field), True
                text_field = []
                line = line[1:]
            else:
                text_field.append(line)
                continue
        elif line.startswith(";"):
            text_field = [line]
            text_start = num
            continue
        for m in _TOKEN_RE.finditer(line):
            tok = m.group(0)
            if tok.startswith("#"):
                break
            yield num, tok, tok[0] in ("'", '"')
    if text_field:
        raise CIFSyntaxError(text_start, "unterminated text field")


def _is_keyword(tok: str, quoted: bool) -> bool:
    if quoted:
        return False
    low = tok.lower()
    return (tok.startswith("_") or low == "loop_" or low.startswith("data_")
            or low.startswith("save_") or low == "global_" or low == "stop_")


def parse_lines(lines: Iterable[str], source: str = "") -> Document:
    """Build a Document from lines of CIF text."""
    doc = Document(source=source or None)
    block: Block | None = None
    tokens = list(_tokens(lines))
    i = 0
    n = len(tokens)

    def need_block(num: int) -> Block:
        if block is None:
            raise CIFSyntaxError(num, "data outside of a data_ block")
        return block

    while i < n:
        num, tok, quoted = tokens[i]
        low = tok.lower()
        if not quoted and low.startswith("data_"):
            block = Block(name=tok[5:])
            doc.blocks.append(block)
            i += 1
        elif not quoted and low == "loop_":
            b = need_block(num)
            i += 1
            loop = Loop(tags=[])
            while i < n and not tokens[i][2] and tokens[i][1].startswith("_"):
                loop.tags.append(tokens[i][1].lower())
                i += 1
            if not loop.tags:
                raise CIFSyntaxError(num, "loop_ without tags")
            values: list[str] = []
            while i < n and not _is_keyword(tokens[i][1], tokens[i][2]):
                values.append(tokens[i][1])
                i += 1
            width = len(loop.tags)
            if len(values) % width:
                raise CIFSyntaxError(num, f"loop of {width} tags has {len(values)} values")
            loop.rows = [values[k:k + width] for k in range(0, len(values), width)]
            b.loops.append(loop)
        elif not quoted and tok.startswith("_"):
            b = need_block(num)
            if i + 1 >= n or _is_keyword(tokens[i + 1][1], tokens[i + 1][2]):
                raise CIFSyntaxError(num, f"tag {tok} has no value")
            b.items[low] = tokens[i + 1][1]
            i += 2
        elif not quoted and (low.startswith("save_") or low == "global_"):
            logger.debug("Skipping %s at line %d", tok, num)
            i += 1
        else:
            raise CIFSyntaxError(num, f"unexpected token {tok!r}")
    return doc


def read_string(text: str, source: str = "") -> Document:
    return parse_lines(text.splitlines(), source=source)


def read_document(path: Path | str) -> Document:
    """Read a .cif or .cif.gz file."""
    path = Path(path)
    opener = gzip.open if path.suffix == ".gz" else open
    with opener(path, "rt", encoding="utf-8", errors="ignore") as f:
        doc = parse_lines(f, source=str(path))
    logger.debug("Read %d block(s) from %s", len(doc), path)
    return doc
