"""Household financial plan entities."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from .debt import Debt


class Currency(str, Enum):
    GBP = "GBP"
    EUR = "EUR"
    USD = "USD"
    CUSTOM = "CUSTOM"


class HouseholdType(str, Enum):
    SINGLE = "single"
    COUPLE = "couple"


class TaxSystem(str, Enum):
    ENGLAND_NI = "england_ni"
    SCOTLAND = "scotland"
    WALES = "wales"


class StudentLoanPlan(str, Enum):
    NONE = "none"
    PLAN_1 = "plan_1"
    PLAN_2 = "plan_2"
    PLAN_4 = "plan_4"
    PLAN_5 = "plan_5"
    POSTGRAD = "postgrad"


class TaxConfig(SQLModel):
    """Settings used to derive net pay from gross salary."""

    enabled: bool = False
    tax_code: str = Field(default="1257L")  # 2024/25 standard personal allowance
    tax_system: TaxSystem = TaxSystem.ENGLAND_NI
    student_loan_plan: StudentLoanPlan = StudentLoanPlan.NONE
    postgraduate_loan: bool = False
    is_self_employed: bool = False
    has_other_income: bool = False
    needs_self_assessment: bool = False


class Income(SQLModel):
    """Monthly net income; gross figures are annual and optional."""

    primary_net: float = Field(ge=0)
    primary_gross: Optional[float] = Field(default=None, ge=0)
    secondary_net: float = Field(default=0.0, ge=0)
    secondary_gross: Optional[float] = Field(default=None, ge=0)
    other: float = Field(default=0.0, ge=0)

    @property
    def total(self) -> float:
        return self.primary_net + self.secondary_net + self.other


class LineItem(SQLModel):
    id: str
    name: str = Field(min_length=1)
    amount: float = Field(ge=0)
    is_essential: bool = True


class Outgoings(SQLModel):
    items: list[LineItem] = Field(default_factory=list)
    annual_costs: list[LineItem] = Field(default_factory=list)


class Pension(SQLModel):
    is_enrolled: bool = False
    has_employer_match: bool = False
    employee_contribution_percent: float = Field(default=0.0, ge=0, le=100)
    employer_match_percent: float = Field(default=0.0, ge=0, le=100)
    can_afford_max_match: bool = False


class Savings(SQLModel):
    current_cash: float = Field(default=0.0, ge=0)
    emergency_fund_months: int = Field(default=3, ge=1, le=12)
    initial_ef_months: int = Field(default=1, ge=1, le=3)


class Goal(SQLModel):
    id: str
    name: str = Field(min_length=1)
    target_amount: float = Field(ge=0)
    target_date: date
    is_short_term: bool = True  # under five years


class DebtSnapshot(SQLModel):
    id: str
    name: str
    balance: float


class MonthlySnapshot(SQLModel):
    """Point-in-time totals used for month-over-month reporting."""

    id: str
    snapshot_date: date
    total_debt: float
    total_savings: float
    total_income: float
    total_outgoings: float
    surplus: float
    debts: list[DebtSnapshot] = Field(default_factory=list)


class FinancialState(SQLModel):
    """Everything the flowchart and reports need to know about a household."""

    currency: Currency = Currency.GBP
    custom_fx_rate: float = Field(default=1.0, gt=0)
    household_type: HouseholdType = HouseholdType.SINGLE
    income: Income
    outgoings: Outgoings = Field(default_factory=Outgoings)
    savings: Savings = Field(default_factory=Savings)
    debts: list[Debt] = Field(default_factory=list)
    pension: Pension = Field(default_factory=Pension)
    goals: list[Goal] = Field(default_factory=list)
    relies_on_credit_for_essentials: bool = False
    tax_config: TaxConfig = Field(default_factory=TaxConfig)
    monthly_snapshots: list[MonthlySnapshot] = Field(default_factory=list)
    last_snapshot_date: Optional[date] = None
