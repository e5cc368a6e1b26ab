from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = ("http://localhost:5173",)


@dataclass(frozen=True)
class DatabaseConfig:
    host: str
    port: int
    database: str
    user: str
    password: str
    sslmode: str = "disable"

    @property
    def dsn(self) -> str:
        return (
            f"postgresql://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
            f"?sslmode={self.sslmode}"
        )


@dataclass(frozen=True)
class AppConfig:
    db_dsn: str
    data_dir: Path = Path("data")
    history_timezone: str = "UTC"
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    host: str = "0.0.0.0"
    port: int = 8080
    db_pool_min: int = 1
    db_pool_max: int = 10
    db_pool_timeout: float = 30.0


def _database_from_env() -> DatabaseConfig | None:
    """Build a DatabaseConfig from DB_* variables, or None if DB_HOST is unset."""
    host = os.environ.get("DB_HOST", "")
    if not host:
        return None
    return DatabaseConfig(
        host=host,
        port=int(os.environ.get("DB_PORT", "5432")),
        database=os.environ.get("DB_NAME", ""),
        user=os.environ.get("DB_USER", ""),
        password=os.environ.get("DB_PASSWORD", ""),
        sslmode=os.environ.get("DB_SSLMODE", "disable"),
    )


def _split_origins(raw: str) -> tuple[str, ...]:
    origins = tuple(o.strip() for o in raw.split(",") if o.strip())
    return origins or DEFAULT_CORS_ORIGINS


def load_config() -> AppConfig:
    """Load application config from environment variables.

    Loads .env file if present in the current directory. DATABASE_URL wins
    over the individual DB_* variables.
    """
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(env_path)

    dsn = os.environ.get("DATABASE_URL", "")
    if not dsn:
        db_config = _database_from_env()
        if db_config is not None:
            dsn = db_config.dsn

    return AppConfig(
        db_dsn=dsn,
        data_dir=Path(os.environ.get("DATA_DIR", "data")),
        history_timezone=os.environ.get("HISTORY_TIMEZONE", "UTC"),
        cors_origins=_split_origins(os.environ.get("CORS_ORIGINS", "")),
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "8080")),
        db_pool_min=int(os.environ.get("DB_POOL_MIN", "1")),
        db_pool_max=int(os.environ.get("DB_POOL_MAX", "10")),
        db_pool_timeout=float(os.environ.get("DB_POOL_TIMEOUT", "30")),
    )
