"""Tolerant CSV tokenizer for the capacity snapshot and monthly history files."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

_LINE_SPLIT = re.compile(r"\r?\n")


@dataclass(frozen=True)
class CsvTable:
    """Header plus data rows, each an ordered list of trimmed field values.

    Rows are not padded to the header width; use :meth:`cell` to read a field
    that may be missing.
    """

    header: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.header or not self.rows

    def column_index(self, name: str, *, case_sensitive: bool = True) -> Optional[int]:
        """Return the first header position matching ``name`` or ``None``."""

        wanted = name.strip() if case_sensitive else name.strip().lower()
        for idx, column in enumerate(self.header):
            candidate = column.strip() if case_sensitive else column.strip().lower()
            if candidate == wanted:
                return idx
        return None

    @staticmethod
    def cell(row: Sequence[str], index: Optional[int]) -> Optional[str]:
        if index is None or index < 0 or index >= len(row):
            return None
        return row[index]


def split_csv_line(line: str) -> List[str]:
    """Split one CSV line, honoring double quotes and ``""`` escapes."""

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    idx = 0
    while idx < len(line):
        ch = line[idx]
        if ch == '"' and in_quotes and idx + 1 < len(line) and line[idx + 1] == '"':
            current.append('"')
            idx += 2
            continue
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        idx += 1
    fields.append("".join(current).strip())
    return fields


def parse_csv_text(text: str) -> CsvTable:
    """Parse ``text`` into a :class:`CsvTable`.

    Blank lines are skipped wherever they occur. The first remaining line is
    the header. Empty input yields an empty table, which callers treat as a
    failed load.
    """

    lines = [line.strip() for line in _LINE_SPLIT.split(text or "")]
    lines = [line for line in lines if line]
    if not lines:
        return CsvTable()
    return CsvTable(
        header=split_csv_line(lines[0]),
        rows=[split_csv_line(line) for line in lines[1:]],
    )
