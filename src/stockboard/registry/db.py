from __future__ import annotations

import logging
from types import TracebackType

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from stockboard.errors import SourceUnavailableError

logger = logging.getLogger(__name__)


def _configure_readonly(conn: psycopg.Connection) -> None:
    conn.read_only = True


class Database:
    """Read-only PostgreSQL wrapper around a psycopg3 connection pool."""

    def __init__(
        self,
        dsn: str,
        *,
        min_size: int = 1,
        max_size: int = 10,
        timeout: float = 30.0,
    ) -> None:
        self._dsn = dsn
        self._min_size = min_size
        self._max_size = max_size
        self._timeout = timeout
        self._pool: ConnectionPool | None = None

    def connect(self) -> None:
        """Open the connection pool and wait until it holds min_size connections.

        Raises SourceUnavailableError if the pool cannot fill in time; the
        half-open pool is closed first.
        """
        pool: ConnectionPool | None = None
        try:
            pool = ConnectionPool(
                self._dsn,
                min_size=self._min_size,
                max_size=self._max_size,
                timeout=self._timeout,
                kwargs={"row_factory": dict_row},
                configure=_configure_readonly,
                open=True,
            )
            pool.wait(timeout=self._timeout)
        except psycopg.Error as e:
            if pool is not None:
                pool.close()
            raise SourceUnavailableError("connecting to database", str(e)) from e
        self._pool = pool
        logger.info("Connection pool established (max_size=%d)", self._max_size)

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    def execute(self, query: str, params: tuple | None = None) -> list[dict]:
        """Execute a query and return rows as dicts."""
        if self._pool is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        with self._pool.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                if cur.description is None:
                    return []
                return [dict(row) for row in cur.fetchall()]

    def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            result = self.execute("SELECT 1 AS ok")
            return len(result) > 0 and result[0].get("ok") == 1
        except Exception:
            logger.exception("Health check failed")
            return False

    def __enter__(self) -> Database:
        self.connect()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
