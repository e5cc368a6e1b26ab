from __future__ import annotations

from stockboard.history.normalizer import normalize, resolve_timezone
from stockboard.history.parser import HistoryParser, parse_row, parse_rows, read_rows

__all__ = [
    "HistoryParser",
    "normalize",
    "parse_row",
    "parse_rows",
    "read_rows",
    "resolve_timezone",
]
