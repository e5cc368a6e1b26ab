from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal


@dataclass(frozen=True)
class Prediction:
    """An analyst prediction joined with the text of its source message.

    ``id`` is the storage key. Display numbering is applied by the view layer
    and never written back here.
    """

    id: int
    stock_id: int
    predicted_at: datetime
    message_id: int | None = None
    prediction_type: str | None = None
    target_price: Decimal | None = None
    target_change_percent: Decimal | None = None
    period: str | None = None
    recommendation: str | None = None
    direction: str | None = None
    justification_text: str | None = None
    message_text: str | None = None

    @property
    def predicted_at_epoch(self) -> int:
        """Seconds since the epoch; naive timestamps are taken as UTC."""
        ts = self.predicted_at
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=UTC)
        return int(ts.timestamp())
