"""Schema exports."""

from .debt import NON_PAYOFF_TYPES, Debt, DebtType, PaymentMode, PayoffStrategy
from .plan import (
    Currency,
    DebtSnapshot,
    FinancialState,
    Goal,
    HouseholdType,
    Income,
    LineItem,
    MonthlySnapshot,
    Outgoings,
    Pension,
    Savings,
    StudentLoanPlan,
    TaxConfig,
    TaxSystem,
)

__all__ = [
    "Currency",
    "Debt",
    "DebtSnapshot",
    "DebtType",
    "FinancialState",
    "Goal",
    "HouseholdType",
    "Income",
    "LineItem",
    "MonthlySnapshot",
    "NON_PAYOFF_TYPES",
    "Outgoings",
    "PaymentMode",
    "PayoffStrategy",
    "Pension",
    "Savings",
    "StudentLoanPlan",
    "TaxConfig",
    "TaxSystem",
]
