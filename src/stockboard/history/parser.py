"""Reader for per-ticker daily bar files (``<TICKER>_D1.csv``).

The files are exported by a trading terminal and are not always clean, so
parsing is permissive and works row by row. Each row yields a
:class:`RecordOutcome`:

* fewer than 8 fields, a bad timestamp or a bad close price drops the row;
* a bad or negative volume keeps the row with ``volume=0``.

Only I/O failures on the file itself are raised to the caller.
"""

from __future__ import annotations

import csv
import logging
import math
import re
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from stockboard.errors import HistoryNotFoundError, SourceUnavailableError
from stockboard.models.price import BarRecord, DropReason, ParseReport, RecordOutcome

logger = logging.getLogger(__name__)

HISTORY_FILE_SUFFIX = "_D1.csv"
TIMESTAMP_FORMAT = "%Y.%m.%d %H:%M:%S"
HEADER_MARKER = "Time"

MIN_FIELDS = 8
TIMESTAMP_COL = 0
CLOSE_COL = 4
REAL_VOLUME_COL = 7

# strptime accepts unpadded fields and float()/int() accept "_" separators
# and padding; the export format allows neither.
TIMESTAMP_RE = re.compile(r"[0-9]{4}\.[0-9]{2}\.[0-9]{2} [0-9]{2}:[0-9]{2}:[0-9]{2}")
INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def _parse_price(raw: str) -> float | None:
    if "_" in raw or raw != raw.strip():
        return None
    try:
        price = float(raw)
    except ValueError:
        return None
    if not math.isfinite(price) or price < 0:
        return None
    return price


def _parse_volume(raw: str) -> int | None:
    if not INTEGER_RE.fullmatch(raw):
        return None
    volume = int(raw)
    return volume if volume >= 0 else None


def parse_row(fields: list[str], line_number: int) -> RecordOutcome:
    """Convert one CSV row into a record, or say why it was dropped."""
    if len(fields) < MIN_FIELDS:
        return RecordOutcome(line_number, reason=DropReason.TOO_FEW_FIELDS)

    raw_ts = fields[TIMESTAMP_COL]
    if not TIMESTAMP_RE.fullmatch(raw_ts):
        return RecordOutcome(line_number, reason=DropReason.BAD_TIMESTAMP)
    try:
        timestamp = datetime.strptime(raw_ts, TIMESTAMP_FORMAT)
    except ValueError:
        return RecordOutcome(line_number, reason=DropReason.BAD_TIMESTAMP)

    price = _parse_price(fields[CLOSE_COL])
    if price is None:
        return RecordOutcome(line_number, reason=DropReason.BAD_PRICE)

    # Volume is supplementary: a bad value defaults to 0 instead of dropping the row.
    volume = _parse_volume(fields[REAL_VOLUME_COL])
    volume_defaulted = volume is None

    record = BarRecord(
        timestamp=timestamp, price=price, volume=volume or 0, line_number=line_number,
    )
    return RecordOutcome(line_number, record=record, volume_defaulted=volume_defaulted)


def read_rows(lines: Iterable[str]) -> list[tuple[int, list[str]]]:
    """Split CSV text into rows, each paired with the physical line it starts on."""
    reader = csv.reader(lines)
    rows = []
    start = 1
    for fields in reader:
        rows.append((start, fields))
        start = reader.line_num + 1
    return rows


def parse_rows(
    rows: Iterable[tuple[int, list[str]]], source: Path,
) -> tuple[list[BarRecord], ParseReport]:
    """Parse numbered rows. The first row is skipped if it looks like a header."""
    report = ParseReport(source=source)
    records: list[BarRecord] = []

    for index, (line_number, fields) in enumerate(rows):
        if index == 0 and fields and HEADER_MARKER in fields[TIMESTAMP_COL]:
            report.header_skipped = True
            continue

        outcome = parse_row(fields, line_number)
        report.add(outcome)
        if outcome.record is None:
            logger.debug("%s:%d dropped (%s)", source.name, line_number, outcome.reason)
            continue
        records.append(outcome.record)

    return records, report


class HistoryParser:
    """Locates and parses history files under a fixed data directory."""

    def __init__(self, data_dir: Path | str) -> None:
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, ticker: str) -> Path:
        return self._data_dir / f"{ticker}{HISTORY_FILE_SUFFIX}"

    def _is_contained(self, path: Path) -> bool:
        # Resolve only the directory so a symlinked history file is still found.
        return path.parent.resolve() == self._data_dir.resolve()

    def parse_with_report(self, ticker: str) -> tuple[list[BarRecord], ParseReport]:
        """Read the ticker's file fully and return surviving records plus a report.

        Raises:
            HistoryNotFoundError: no file exists for the ticker.
            SourceUnavailableError: the file exists but cannot be read.
        """
        path = self.path_for(ticker)
        if not self._is_contained(path):
            raise HistoryNotFoundError(ticker, path)

        try:
            with path.open(newline="", encoding="utf-8-sig") as f:
                rows = read_rows(f)
        except FileNotFoundError as e:
            raise HistoryNotFoundError(ticker, path) from e
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise SourceUnavailableError("reading price history file", str(e), ticker=ticker) from e

        records, report = parse_rows(rows, path)
        if report.total_dropped or report.volume_defaulted:
            logger.info(
                "Parsed %s: %d accepted, %d dropped %s, %d volume defaulted",
                path.name, report.accepted, report.total_dropped,
                {r.value: n for r, n in report.dropped.items()}, report.volume_defaulted,
            )
        else:
            logger.debug("Parsed %s: %d accepted", path.name, report.accepted)
        return records, report

    def parse(self, ticker: str) -> list[BarRecord]:
        records, _ = self.parse_with_report(ticker)
        return records
