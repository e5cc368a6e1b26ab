"""Typed failures raised by the aggregation layer.

Each error carries a short machine-readable ``code`` alongside the message so
the HTTP boundary can map it to a status and a JSON body without inspecting
the text.
"""

from __future__ import annotations

from pathlib import Path


class StockboardError(Exception):
    def __init__(self, message: str, code: str = "INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(StockboardError):
    """The ticker has no data: either no stock row or no history file."""

    def __init__(self, message: str, ticker: str) -> None:
        self.ticker = ticker
        super().__init__(message, code="NOT_FOUND")


class StockNotFoundError(NotFoundError):
    def __init__(self, ticker: str) -> None:
        super().__init__(f"stock not found for ticker {ticker}", ticker)


class HistoryNotFoundError(NotFoundError):
    def __init__(self, ticker: str, path: Path) -> None:
        self.path = path
        super().__init__(f"price history file not found for ticker {ticker}", ticker)


class SourceUnavailableError(StockboardError):
    """The database or the filesystem failed; may be transient."""

    def __init__(self, operation: str, detail: str, ticker: str | None = None) -> None:
        self.operation = operation
        self.ticker = ticker
        where = f" for ticker {ticker}" if ticker is not None else ""
        super().__init__(f"error {operation}{where}: {detail}", code="SOURCE_UNAVAILABLE")
