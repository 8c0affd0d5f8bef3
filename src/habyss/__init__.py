"""Habyss completion and progress engine."""

from __future__ import annotations

from .config import BaseConfig, DevConfig, TestConfig
from .engine import HabitEngine, create_engine_context

__all__ = ["BaseConfig", "DevConfig", "TestConfig", "HabitEngine", "create_engine_context"]
