"""FinPath personal finance planner package."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services.debts import compare_strategies, simulate_debts

__all__ = ["BaseConfig", "DevConfig", "compare_strategies", "simulate_debts"]
