"""Tests for environment-driven configuration."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from habyss.config import BaseConfig, DevConfig, TestConfig


@pytest.fixture
def clean_env(tmp_path, monkeypatch):
    monkeypatch.setenv("HABYSS_DATA_DIR", str(tmp_path / "data"))
    for name in ("HABYSS_DATABASE_URL", "HABYSS_DEV_MODE", "HABYSS_TIMEZONE", "HABYSS_HEATMAP_DAYS"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path / "data"


def test_defaults(clean_env):
    config = BaseConfig()

    assert config.DATA_DIR == clean_env.resolve()
    assert config.DATA_DIR.is_dir()
    assert config.DATABASE_URL == f"sqlite:///{clean_env.resolve() / 'habyss.db'}"
    assert config.HEATMAP_DAYS == 90
    assert config.DEV_MODE is True
    assert config.TIMEZONE is None


def test_environment_overrides(clean_env, monkeypatch):
    monkeypatch.setenv("HABYSS_DATABASE_URL", "sqlite:////tmp/other.db")
    monkeypatch.setenv("HABYSS_DEV_MODE", "off")
    monkeypatch.setenv("HABYSS_HEATMAP_DAYS", "30")

    config = DevConfig()

    assert config.DATABASE_URL == "sqlite:////tmp/other.db"
    assert config.DEV_MODE is False
    assert config.HEATMAP_DAYS == 30


@pytest.mark.parametrize("value", ["0", "-5", "ninety"])
def test_invalid_heatmap_days(clean_env, monkeypatch, value):
    monkeypatch.setenv("HABYSS_HEATMAP_DAYS", value)

    with pytest.raises(ValueError):
        BaseConfig()


def test_today_uses_configured_timezone(clean_env, monkeypatch):
    monkeypatch.setenv("HABYSS_TIMEZONE", "UTC")

    config = BaseConfig()

    assert config.TIMEZONE == "UTC"
    assert config.today() == datetime.now(timezone.utc).date()


def test_sqlite_engine_options(clean_env):
    assert BaseConfig().sqlalchemy_engine_options() == {"connect_args": {"check_same_thread": False}}


def test_test_config_uses_in_memory_database(clean_env):
    config = TestConfig()

    assert config.DATABASE_URL == "sqlite://"
    assert "poolclass" in config.sqlalchemy_engine_options()


def test_test_config_is_not_collected_as_a_test():
    assert TestConfig.__test__ is False
