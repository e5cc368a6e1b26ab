"""Tests for the FastAPI REST API layer.

Uses FastAPI TestClient with a StockDataService built on a mocked Database
and a temporary history directory. Every endpoint has at least one test.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock, patch
from zoneinfo import ZoneInfoNotFoundError

import psycopg
import pytest
from fastapi.testclient import TestClient

from stockboard.api.app import create_app
from stockboard.config import AppConfig
from stockboard.history.parser import HistoryParser
from stockboard.registry.db import Database
from stockboard.registry.queries import Registry
from stockboard.service import StockDataService


@pytest.fixture
def mock_db() -> MagicMock:
    return MagicMock(spec=Database)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "AAA_D1.csv").write_text(
        "<Time>,<Open>,<High>,<Low>,<Close>,<TickVolume>,<Spread>,<RealVolume>\n"
        "2025.09.16 00:00:00,1,1,1,124.00,1,1,abc\n"
        "2025.09.15 00:00:00,1,1,1,123.45,1,1,1000\n"
        "2025.09.17 00:00:00,1,1,1,125\n"
    )
    return tmp_path


@pytest.fixture
def client(mock_db: MagicMock, data_dir: Path) -> TestClient:
    service = StockDataService(Registry(mock_db), HistoryParser(data_dir))
    app = create_app(service, use_lifespan=False)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def _prediction_row(id: int, day: int, **overrides) -> dict:
    row = {
        "id": id, "message_id": 9000 + id, "stock_id": 1, "prediction_type": "target",
        "target_price": Decimal("150.25"), "target_change_percent": None, "period": "6m",
        "recommendation": "buy", "direction": "up", "justification_text": None,
        "message_text": f"post {id}",
        "predicted_at": datetime(2025, 9, day, tzinfo=UTC),
    }
    row.update(overrides)
    return row


# ------------------------------------------------------------------
# Stocks
# ------------------------------------------------------------------


class TestStocks:
    def test_list_stocks(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = [
            {"id": 1, "ticker": "AAA", "name": "Alpha"},
            {"id": 2, "ticker": "BBB", "name": "Beta"},
        ]
        resp = client.get("/stocks")
        assert resp.status_code == 200
        assert resp.json() == [
            {"id": 1, "ticker": "AAA", "name": "Alpha"},
            {"id": 2, "ticker": "BBB", "name": "Beta"},
        ]

    def test_list_stocks_empty(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = []
        resp = client.get("/stocks")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_list_stocks_db_down(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.side_effect = psycopg.OperationalError("connection refused")
        resp = client.get("/stocks")
        assert resp.status_code == 503
        assert resp.json()["error"] == "SOURCE_UNAVAILABLE"

    def test_get_stock(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = [{"id": 1, "ticker": "AAA", "name": "Alpha"}]
        resp = client.get("/stocks/AAA")
        assert resp.status_code == 200
        assert resp.json()["name"] == "Alpha"

    def test_get_stock_not_found(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = []
        resp = client.get("/stocks/ZZZ")
        assert resp.status_code == 404


# ------------------------------------------------------------------
# History
# ------------------------------------------------------------------


class TestHistory:
    def test_history(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = [{"id": 1}]
        resp = client.get("/stocks/AAA/history")
        assert resp.status_code == 200
        assert resp.json() == [
            {"stockId": 1, "timestamp": "2025-09-15T00:00:00Z", "price": 123.45, "volume": 1000},
            {"stockId": 1, "timestamp": "2025-09-16T00:00:00Z", "price": 124.0, "volume": 0},
        ]

    def test_unknown_ticker(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = []
        resp = client.get("/stocks/UNKNOWN/history")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "NOT_FOUND"
        assert "stock not found" in body["message"]

    def test_missing_file(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = [{"id": 2}]
        resp = client.get("/stocks/BBB/history")
        assert resp.status_code == 404
        body = resp.json()
        assert body["error"] == "NOT_FOUND"
        assert "price history file not found" in body["message"]


# ------------------------------------------------------------------
# Predictions
# ------------------------------------------------------------------


class TestPredictions:
    def test_numbered_newest_first(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.side_effect = [
            [{"id": 1}],
            [_prediction_row(71, 10), _prediction_row(45, 14), _prediction_row(88, 12)],
        ]
        resp = client.get("/predictions/AAA")
        assert resp.status_code == 200
        data = resp.json()
        assert [p["id"] for p in data] == [1, 2, 3]
        assert [p["message"] for p in data] == ["post 45", "post 88", "post 71"]
        times = [p["predictedAt"] for p in data]
        assert times == sorted(times, reverse=True)
        assert isinstance(times[0], int)

    def test_fields(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.side_effect = [[{"id": 1}], [_prediction_row(3, 15)]]
        [p] = client.get("/predictions/AAA").json()
        assert p == {
            "id": 1,
            "stockId": 1,
            "messageId": 9003,
            "predictionType": "target",
            "targetPrice": 150.25,
            "targetChangePercent": None,
            "period": "6m",
            "recommendation": "buy",
            "direction": "up",
            "justificationText": None,
            "message": "post 3",
            "predictedAt": 1757894400,
        }

    def test_no_predictions(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.side_effect = [[{"id": 1}], []]
        resp = client.get("/predictions/AAA")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_unknown_ticker(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.execute.return_value = []
        resp = client.get("/predictions/ZZZ")
        assert resp.status_code == 404
        assert "ZZZ" in resp.json()["message"]


# ------------------------------------------------------------------
# System
# ------------------------------------------------------------------


class TestSystem:
    def test_health_ok(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.health_check.return_value = True
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "database": True, "dataDir": True}

    def test_health_degraded(self, client: TestClient, mock_db: MagicMock) -> None:
        mock_db.health_check.return_value = False
        assert client.get("/health").json()["status"] == "degraded"

    def test_cors_preflight(self, client: TestClient) -> None:
        resp = client.options(
            "/stocks",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_service_not_initialised(self) -> None:
        app = create_app(use_lifespan=False)
        with TestClient(app, raise_server_exceptions=False) as c:
            assert c.get("/stocks").status_code == 500


class TestLifespan:
    def test_closes_database_on_shutdown(self, tmp_path: Path) -> None:
        config = AppConfig(db_dsn="postgresql://test", data_dir=tmp_path)
        with patch("stockboard.api.app.load_config", return_value=config), \
                patch("stockboard.api.app.Database") as db_cls:
            app = create_app(use_lifespan=True)
            with TestClient(app):
                db_cls.return_value.connect.assert_called_once()
                assert app.state.service is not None
            db_cls.return_value.close.assert_called_once()
            assert app.state.service is None

    def test_bad_timezone_fails_before_connecting(self, tmp_path: Path) -> None:
        config = AppConfig(db_dsn="postgresql://test", data_dir=tmp_path, history_timezone="Not/AZone")
        with patch("stockboard.api.app.load_config", return_value=config), \
                patch("stockboard.api.app.Database") as db_cls:
            app = create_app(use_lifespan=True)
            with pytest.raises(ZoneInfoNotFoundError):
                with TestClient(app):
                    pass
            db_cls.return_value.connect.assert_not_called()
