"""Pytest configuration and shared fixtures for FinPath tests.

Provides debt and plan factories plus helper utilities for testing the
payoff simulator and the planning services without touching the user's data
directory.
"""

from __future__ import annotations

import logging
from datetime import date

import pytest

from finpath.models import (
    Debt,
    FinancialState,
    Income,
    LineItem,
    Outgoings,
    Savings,
)

START = date(2025, 1, 1)


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path, monkeypatch):
    """Point FINPATH_DATA_DIR at a temporary directory for every test."""

    monkeypatch.setenv("FINPATH_DATA_DIR", str(tmp_path / "instance"))
    monkeypatch.delenv("FINPATH_CURRENCY", raising=False)
    monkeypatch.delenv("FINPATH_FX_RATE", raising=False)
    monkeypatch.delenv("FINPATH_DEFAULT_EXTRA_PAYMENT", raising=False)
    return tmp_path / "instance"


@pytest.fixture(autouse=True)
def reset_finpath_logger():
    """Drop handlers installed by setup_logging so streams don't leak between tests."""

    yield
    logger = logging.getLogger("finpath")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def debt_factory():
    """Factory for building validated Debt instances.

    Returns:
        Callable: Function that creates Debt instances with sensible defaults
    """

    counter = {"next": 1}

    def _create_debt(**overrides) -> Debt:
        """Create a test debt; any field may be overridden."""
        debt_id = overrides.pop("id", None) or str(counter["next"])
        counter["next"] += 1
        values = {
            "id": debt_id,
            "name": f"Debt {debt_id}",
            "type": "credit_card",
            "balance": 1000.0,
            "apr": 20.0,
            "minimum_payment": 25.0,
        }
        values.update(overrides)
        return Debt(**values)

    return _create_debt


@pytest.fixture
def two_cards(debt_factory) -> list[Debt]:
    """A 24% card with the larger balance and a 12% card with the smaller one."""

    return [
        debt_factory(id="1", name="High APR Card", balance=2000.0, apr=24.0, minimum_payment=50.0),
        debt_factory(id="2", name="Low APR Card", balance=1000.0, apr=12.0, minimum_payment=25.0),
    ]


@pytest.fixture
def state_factory():
    """Factory for FinancialState instances with a simple monthly budget."""

    def _create_state(
        *,
        income: float = 2000.0,
        essential: float = 800.0,
        discretionary: float = 0.0,
        cash: float = 0.0,
        debts: list[Debt] | None = None,
        **overrides,
    ) -> FinancialState:
        items = []
        if essential:
            items.append(LineItem(id="rent", name="Rent", amount=essential, is_essential=True))
        if discretionary:
            items.append(LineItem(id="fun", name="Fun", amount=discretionary, is_essential=False))
        return FinancialState(
            income=Income(primary_net=income),
            outgoings=Outgoings(items=items),
            savings=Savings(current_cash=cash),
            debts=debts or [],
            **overrides,
        )

    return _create_state


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 penny)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"


def payments_for_month(summary, month: int) -> dict[str, float]:
    """Map debt id to payment for one simulated month."""
    return {e.debt_id: e.payment for e in summary.schedule if e.month == month}
