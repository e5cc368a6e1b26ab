"""Read-side facade combining the stock registry and the history files.

One ``StockDataService`` is built at startup from an explicit registry and
parser and shared by all requests. It holds no mutable state, so concurrent
calls need no coordination.
"""

from __future__ import annotations

import logging
from datetime import UTC, tzinfo

from stockboard.config import AppConfig
from stockboard.history.normalizer import normalize, resolve_timezone
from stockboard.history.parser import HistoryParser
from stockboard.models.prediction import Prediction
from stockboard.models.price import ParseReport, PricePoint
from stockboard.models.stock import Stock
from stockboard.registry.queries import Registry

logger = logging.getLogger(__name__)


class StockDataService:
    def __init__(
        self,
        registry: Registry,
        history: HistoryParser,
        source_tz: tzinfo = UTC,
    ) -> None:
        self._registry = registry
        self._history = history
        self._source_tz = source_tz

    @classmethod
    def from_config(cls, registry: Registry, config: AppConfig) -> StockDataService:
        return cls(
            registry,
            HistoryParser(config.data_dir),
            resolve_timezone(config.history_timezone),
        )

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def history(self) -> HistoryParser:
        return self._history

    def list_stocks(self) -> list[Stock]:
        return self._registry.list_stocks()

    def get_stock(self, ticker: str) -> Stock:
        return self._registry.get_stock(ticker)

    def get_predictions(self, ticker: str) -> list[Prediction]:
        """Predictions for a ticker, newest first."""
        stock_id = self._registry.resolve_stock_id(ticker)
        predictions = self._registry.get_predictions(stock_id)
        logger.debug("Found %d predictions for %s", len(predictions), ticker)
        return predictions

    def get_history_with_report(self, ticker: str) -> tuple[list[PricePoint], ParseReport]:
        stock_id = self._registry.resolve_stock_id(ticker)
        records, report = self._history.parse_with_report(ticker)
        return normalize(records, stock_id, self._source_tz), report

    def get_history(self, ticker: str) -> list[PricePoint]:
        """Price history for a ticker in ascending time order, timestamps in UTC.

        Raises NotFoundError when the ticker is unknown or has no history file.
        """
        points, _ = self.get_history_with_report(ticker)
        return points
