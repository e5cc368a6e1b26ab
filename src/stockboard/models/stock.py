from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Stock:
    id: int
    ticker: str
    name: str
