"""
import_engine.csv_parser - Low-level CSV reading and cleaning.

Responsibilities:
  • Decoding (UTF-8 BOM, UTF-8, latin-1 fallback for spreadsheet exports)
  • Blank-line removal
  • Quote-aware splitting of each line into cells
  • Lower-cased / trimmed headers for case-insensitive lookup
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass
class CsvGrid:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def index(self, name: str) -> Optional[int]:
        try:
            return self.headers.index(name)
        except ValueError:
            return None

    def cell(self, row: list[str], name: str) -> str:
        """Cell text for a column; short rows and unknown columns read as ""."""
        idx = self.index(name)
        if idx is None or idx >= len(row):
            return ""
        return row[idx]


_LINE_SPLIT = re.compile(r"\r?\n")


def parse(raw: str | bytes) -> CsvGrid:
    """
    Accept raw file content (bytes or str) and return a CsvGrid.
    Empty content yields an empty grid; the caller decides whether
    that is fatal.
    """
    text = _decode(raw)
    lines = [ln for ln in _LINE_SPLIT.split(text) if ln.strip()]
    if not lines:
        return CsvGrid()

    parsed = [_split_line(ln) for ln in lines]
    headers = [h.strip().lower() for h in parsed[0]]
    rows = [[c.strip() for c in r] for r in parsed[1:]]
    return CsvGrid(headers=headers, rows=rows)


def missing_columns(grid: CsvGrid, required: Iterable[str]) -> list[str]:
    """Required column names absent from the header, in the order given."""
    present = set(grid.headers)
    return [name for name in required if name not in present]


def _split_line(line: str) -> list[str]:
    # A '"' opens or closes quote mode wherever it appears; inside quotes
    # '""' is a literal quote and ',' is text.  An unterminated quote runs
    # to the end of its own line only.
    cells: list[str] = []
    cur: list[str] = []
    in_quotes = False
    i, n = 0, len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                cur.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            cells.append("".join(cur))
            cur = []
        else:
            cur.append(ch)
        i += 1
    cells.append("".join(cur))
    return cells


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        # Strip UTF-8 BOM
        if raw.startswith(b"\xef\xbb\xbf"):
            return raw[3:].decode("utf-8", errors="replace")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw.decode("latin-1")
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw
