from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, tzinfo
from zoneinfo import ZoneInfo

from stockboard.models.price import BarRecord, PricePoint


def resolve_timezone(name: str) -> tzinfo:
    """Map a configured zone name to a tzinfo. ``UTC`` short-circuits zoneinfo."""
    if name.upper() in ("UTC", "Z"):
        return UTC
    return ZoneInfo(name)


def normalize(
    records: Iterable[BarRecord],
    stock_id: int,
    source_tz: tzinfo = UTC,
) -> list[PricePoint]:
    """Convert parsed bars to UTC price points in ascending time order.

    Naive timestamps are read in ``source_tz``; aware ones are only converted.
    The sort is stable, so bars sharing an instant keep their input order and
    duplicates are not merged.
    """
    points = []
    for record in records:
        ts = record.timestamp
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=source_tz)
        points.append(
            PricePoint(
                stock_id=stock_id,
                timestamp=ts.astimezone(UTC),
                price=record.price,
                volume=record.volume,
            )
        )
    return sorted(points, key=lambda p: p.timestamp)
