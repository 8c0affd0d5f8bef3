"""Engine configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "Habyss"
    DB_FILENAME = "habyss.db"
    DEFAULT_HEATMAP_DAYS = 90
    WEEKLY_TREND_DAYS = 7

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABYSS_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABYSS_DATABASE_URL", self._build_sqlite_url())
        self.TIMEZONE = os.getenv("HABYSS_TIMEZONE") or None
        self.HEATMAP_DAYS = _env_int("HABYSS_HEATMAP_DAYS", self.DEFAULT_HEATMAP_DAYS)
        if self.HEATMAP_DAYS < 1:
            raise ValueError("HABYSS_HEATMAP_DAYS must be a positive number of days.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABYSS_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {}

    def today(self) -> date:
        """Return the current calendar day in the configured timezone."""

        if self.TIMEZONE:
            return datetime.now(ZoneInfo(self.TIMEZONE)).date()
        return date.today()


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration backed by an in-memory SQLite database."""

    __test__ = False
    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.DATABASE_URL = "sqlite://"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        from sqlalchemy.pool import StaticPool

        # A single shared connection keeps the in-memory schema alive across sessions.
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
