"""CLI entry point for Stockboard.

Provides commands for serving and inspecting the data layer:
  - serve: Run the HTTP API
  - stocks: List all stocks
  - predictions: Show predictions for a ticker
  - history: Show normalized price history for a ticker
  - check: Check database and data directory health
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from stockboard.config import AppConfig, load_config
from stockboard.errors import SourceUnavailableError, StockboardError
from stockboard.registry.db import Database
from stockboard.registry.queries import Registry
from stockboard.service import StockDataService
from stockboard.views import format_predictions, format_price_point, format_stock


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _open_database(config: AppConfig) -> Database:
    return Database(
        config.db_dsn,
        min_size=config.db_pool_min,
        max_size=config.db_pool_max,
        timeout=config.db_pool_timeout,
    )


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    from stockboard.api.app import create_app

    config = load_config()
    uvicorn.run(
        create_app(),
        host=args.host or config.host,
        port=args.port or config.port,
    )


def cmd_stocks(args: argparse.Namespace) -> None:
    """Print all stocks as JSON."""
    config = load_config()
    with _open_database(config) as db:
        service = StockDataService.from_config(Registry(db), config)
        _print_json([format_stock(s) for s in service.list_stocks()])


def cmd_predictions(args: argparse.Namespace) -> None:
    """Print predictions for a ticker as JSON, newest first."""
    config = load_config()
    with _open_database(config) as db:
        service = StockDataService.from_config(Registry(db), config)
        _print_json(format_predictions(service.get_predictions(args.ticker)))


def cmd_history(args: argparse.Namespace) -> None:
    """Print normalized history for a ticker, optionally with the parse report."""
    config = load_config()
    with _open_database(config) as db:
        service = StockDataService.from_config(Registry(db), config)
        points, report = service.get_history_with_report(args.ticker)
        history = [format_price_point(p) for p in points]
        if args.report:
            _print_json({"report": report.to_dict(), "history": history})
        else:
            _print_json(history)


def cmd_check(args: argparse.Namespace) -> None:
    """Check database connectivity and the history data directory."""
    config = load_config()
    try:
        with _open_database(config) as db:
            database = db.health_check()
    except SourceUnavailableError as e:
        logging.error("%s", e.message)
        database = False
    data_dir = config.data_dir.is_dir()
    _print_json({"database": database, "dataDir": data_dir, "dataDirPath": str(config.data_dir)})
    if not (database and data_dir):
        sys.exit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="stockboard",
        description="Read-only stock, prediction and price history service",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subs = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subs.add_parser("serve", help="Run the HTTP API")
    p_serve.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=None, help="Port (default: PORT or 8080)")

    # stocks
    subs.add_parser("stocks", help="List all stocks")

    # predictions
    p_pred = subs.add_parser("predictions", help="Show predictions for a ticker")
    p_pred.add_argument("ticker", help="Exact, case-sensitive ticker")

    # history
    p_hist = subs.add_parser("history", help="Show price history for a ticker")
    p_hist.add_argument("ticker", help="Exact, case-sensitive ticker")
    p_hist.add_argument("--report", action="store_true", help="Include the parse report")

    # check
    subs.add_parser("check", help="Check database and data directory health")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    commands = {
        "serve": cmd_serve,
        "stocks": cmd_stocks,
        "predictions": cmd_predictions,
        "history": cmd_history,
        "check": cmd_check,
    }
    try:
        commands[args.command](args)
    except StockboardError as e:
        logging.error("%s", e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
