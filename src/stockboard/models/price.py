from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path


class DropReason(StrEnum):
    TOO_FEW_FIELDS = "too_few_fields"
    BAD_TIMESTAMP = "bad_timestamp"
    BAD_PRICE = "bad_price"


@dataclass(frozen=True)
class BarRecord:
    """One parsed row of a history file, timestamp still in source time."""

    timestamp: datetime
    price: float
    volume: int = 0
    line_number: int = 0


@dataclass(frozen=True)
class RecordOutcome:
    """Result of parsing a single row: a record, or the reason it was dropped."""

    line_number: int
    record: BarRecord | None = None
    reason: DropReason | None = None
    volume_defaulted: bool = False

    @property
    def accepted(self) -> bool:
        return self.record is not None


@dataclass
class ParseReport:
    source: Path
    accepted: int = 0
    dropped: dict[DropReason, int] = field(default_factory=dict)
    volume_defaulted: int = 0
    header_skipped: bool = False

    @property
    def total_dropped(self) -> int:
        return sum(self.dropped.values())

    def add(self, outcome: RecordOutcome) -> None:
        if outcome.reason is not None:
            self.dropped[outcome.reason] = self.dropped.get(outcome.reason, 0) + 1
            return
        self.accepted += 1
        if outcome.volume_defaulted:
            self.volume_defaulted += 1

    def to_dict(self) -> dict:
        return {
            "source": str(self.source),
            "accepted": self.accepted,
            "dropped": {reason.value: n for reason, n in self.dropped.items()},
            "volumeDefaulted": self.volume_defaulted,
            "headerSkipped": self.header_skipped,
        }


@dataclass(frozen=True)
class PricePoint:
    stock_id: int
    timestamp: datetime
    price: float
    volume: int = 0

    @property
    def iso_timestamp(self) -> str:
        """RFC 3339 form in UTC, e.g. ``2025-09-15T00:00:00Z``."""
        ts = self.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=UTC)
        return ts.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
