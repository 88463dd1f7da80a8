"""Debt entities validated at the schema boundary."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class DebtType(str, Enum):
    """Kinds of debt a household can record."""

    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    OVERDRAFT = "overdraft"
    BNPL = "bnpl"
    MORTGAGE = "mortgage"
    STUDENT_LOAN = "student_loan"
    OTHER = "other"


class PaymentMode(str, Enum):
    """How the monthly payment for a debt is determined."""

    MINIMUM_PAYMENT = "minimum_payment"
    FIXED_TERM = "fixed_term"


class PayoffStrategy(str, Enum):
    """Policy deciding which debt receives the extra payment each month."""

    AVALANCHE = "avalanche"
    SNOWBALL = "snowball"


# Mortgages and student loans are planned elsewhere in the flowchart.
NON_PAYOFF_TYPES = frozenset({DebtType.MORTGAGE, DebtType.STUDENT_LOAN})


class Debt(SQLModel):
    """A single liability as entered by the user.

    Instances are treated as read-only input by the payoff simulator; every
    simulation run works on its own copy of the mutable figures.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=80)
    type: DebtType = Field(default=DebtType.OTHER)
    balance: float = Field(ge=0)
    apr: float = Field(default=0.0, ge=0, le=100)
    payment_mode: PaymentMode = Field(default=PaymentMode.MINIMUM_PAYMENT)
    minimum_payment: float = Field(default=0.0, ge=0)
    fixed_term_months: Optional[int] = Field(default=None, ge=0)
    # Principal plus all interest, as quoted by the lender
    total_repayable: Optional[float] = Field(default=None, ge=0)
    has_promo: bool = Field(default=False)
    promo_months_remaining: int = Field(default=0, ge=0)
    post_promo_apr: Optional[float] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = Field(default=None)

    @property
    def in_promo(self) -> bool:
        """True while a 0% promotional window is still running."""
        return self.has_promo and self.promo_months_remaining > 0

    @property
    def is_payoff_candidate(self) -> bool:
        return self.type not in NON_PAYOFF_TYPES
