"""Financial priorities flowchart rules.

Each step answers two questions about a :class:`FinancialState`: is the step
complete, and what should the household do next while it is not. The
current step is the first incomplete one, except that problem debt (relying
on credit for essentials, or a negative surplus) always takes over.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable

from ..models.debt import DebtType
from ..models.plan import Currency, FinancialState
from .debts import (
    calculate_minimum_payments,
    has_high_interest_debt,
    has_non_mortgage_student_loan_debt,
    high_interest_debts,
)
from .formatting import CURRENCY_SYMBOLS


@dataclass(slots=True, frozen=True)
class MonthlyTotals:
    total_income: float
    essential_outgoings: float
    discretionary_outgoings: float
    annual_costs_monthly: float
    total_outgoings: float
    minimum_debt_payments: float
    surplus: float


@dataclass(slots=True, frozen=True)
class HelpLink:
    text: str
    url: str


@dataclass(slots=True, frozen=True)
class FlowchartStep:
    id: str
    title: str
    description: str
    help_links: tuple[HelpLink, ...]
    is_complete: Callable[[FinancialState], bool]
    next_actions: Callable[[FinancialState], list[str]]


@dataclass(slots=True)
class FlowchartEvaluation:
    current_step_id: str
    completed_step_ids: list[str] = field(default_factory=list)
    next_actions: list[str] = field(default_factory=list)
    all_steps: tuple[FlowchartStep, ...] = ()


def monthly_totals(state: FinancialState) -> MonthlyTotals:
    """Income, outgoings, debt commitments and the surplus left over."""

    total_income = state.income.total
    essential = sum((i.amount for i in state.outgoings.items if i.is_essential), 0.0)
    discretionary = sum((i.amount for i in state.outgoings.items if not i.is_essential), 0.0)
    annual_monthly = sum((i.amount for i in state.outgoings.annual_costs), 0.0) / 12
    total_outgoings = essential + discretionary + annual_monthly
    minimum_debt_payments = calculate_minimum_payments(state.debts)

    return MonthlyTotals(
        total_income=total_income,
        essential_outgoings=essential,
        discretionary_outgoings=discretionary,
        annual_costs_monthly=annual_monthly,
        total_outgoings=total_outgoings,
        minimum_debt_payments=minimum_debt_payments,
        surplus=total_income - total_outgoings - minimum_debt_payments,
    )


def _whole_amount(state: FinancialState, amount: float) -> str:
    if state.currency is Currency.CUSTOM:
        amount *= state.custom_fx_rate
    return f"{CURRENCY_SYMBOLS[state.currency]}{amount:,.0f}"


def _in_problem_debt(state: FinancialState, totals: MonthlyTotals | None = None) -> bool:
    totals = totals or monthly_totals(state)
    return state.relies_on_credit_for_essentials or totals.surplus < 0


# ---------------------------------------------------------------------------
# Step rules


def _budget_complete(state: FinancialState) -> bool:
    return monthly_totals(state).total_income > 0 and bool(state.outgoings.items)


def _budget_actions(state: FinancialState) -> list[str]:
    actions = []
    if monthly_totals(state).total_income == 0:
        actions.append("Enter your household income in the Budget section")
    if not state.outgoings.items:
        actions.append("List your essential and discretionary outgoings")
    actions.append("Review eligibility for benefits and state support")
    actions.append("Check you have adequate insurance (home, life, income protection)")
    actions.append("Ensure essential bills are prioritised")
    return actions


def _problem_debt_complete(state: FinancialState) -> bool:
    return not _in_problem_debt(state)


def _problem_debt_actions(state: FinancialState) -> list[str]:
    if not _in_problem_debt(state):
        return []
    return [
        "Consider contacting StepChange, National Debtline, or Citizens Advice for free debt support",
        "Review your budget to identify areas to reduce spending",
        "Contact creditors to discuss payment arrangements if struggling",
    ]


def _emergency_fund_complete(months_attr: str) -> Callable[[FinancialState], bool]:
    def _complete(state: FinancialState) -> bool:
        target = monthly_totals(state).essential_outgoings * getattr(state.savings, months_attr)
        return state.savings.current_cash >= target

    return _complete


def _initial_fund_actions(state: FinancialState) -> list[str]:
    totals = monthly_totals(state)
    months = state.savings.initial_ef_months
    needed = totals.essential_outgoings * months - state.savings.current_cash
    actions: list[str] = []
    if needed > 0:
        plural = "s" if months > 1 else ""
        actions.append(
            f"Save {_whole_amount(state, needed)} to reach your initial emergency fund "
            f"target ({months} month{plural})"
        )
        if totals.surplus > 0:
            actions.append(
                "At your current surplus, this would take approximately "
                f"{math.ceil(needed / totals.surplus)} months"
            )
    return actions


def _full_fund_actions(state: FinancialState) -> list[str]:
    totals = monthly_totals(state)
    months = state.savings.emergency_fund_months
    needed = totals.essential_outgoings * months - state.savings.current_cash
    actions: list[str] = []
    if needed > 0:
        actions.append(
            f"Save {_whole_amount(state, needed)} to reach your {months}-month emergency fund target"
        )
        if totals.surplus > 0:
            actions.append(
                f"This would take approximately {math.ceil(needed / totals.surplus)} months "
                "at your current surplus"
            )
    return actions


def _high_interest_complete(state: FinancialState) -> bool:
    return not has_high_interest_debt(state.debts)


def _high_interest_actions(state: FinancialState) -> list[str]:
    if not high_interest_debts(state.debts):
        return []
    return [
        "Use the Debts section to model paying down high-interest debts (>10% APR)",
        "Consider the avalanche method to minimize interest",
        "Look into balance transfer or consolidation options if available",
    ]


def _pension_complete(state: FinancialState) -> bool:
    if not state.pension.has_employer_match:
        return True  # nothing to claim
    return state.pension.can_afford_max_match


def _pension_actions(state: FinancialState) -> list[str]:
    pension = state.pension
    actions = []
    if not pension.is_enrolled:
        actions.append("Check if you are enrolled in your workplace pension")
    if pension.has_employer_match and not pension.can_afford_max_match:
        match = f"{pension.employer_match_percent:g}%"
        actions.append(f"Consider contributing {match} to get the full {match} employer match")
    return actions


def _remaining_debt_complete(state: FinancialState) -> bool:
    return not has_non_mortgage_student_loan_debt(state.debts)


def _remaining_debt_actions(state: FinancialState) -> list[str]:
    if not has_non_mortgage_student_loan_debt(state.debts):
        return []
    return [
        "Use the Debts section to plan payoff of remaining debts",
        "Compare avalanche (lowest interest) vs snowball (smallest balance first) strategies",
    ]


def _short_term_goals_complete(state: FinancialState) -> bool:
    return not any(goal.is_short_term for goal in state.goals)


def _short_term_goals_actions(state: FinancialState) -> list[str]:
    if any(goal.is_short_term for goal in state.goals):
        return [
            "Review your short-term goals and track progress",
            "Consider a Lifetime ISA for first-time home buyers (25% bonus)",
        ]
    return ["Define any short-term savings goals (<5 years) if applicable"]


def _investing_actions(state: FinancialState) -> list[str]:
    if monthly_totals(state).surplus <= 0:
        return []
    return [
        "Research stocks & shares ISAs for tax-efficient investing",
        "Consider increasing pension contributions beyond employer match",
        "Review the UKPF investing guide to understand risk and diversification",
    ]


def _mortgage_actions(state: FinancialState) -> list[str]:
    actions = []
    if any(d.type is DebtType.MORTGAGE for d in state.debts):
        actions.append("Review your mortgage rate and consider overpayment benefits vs investing")
    if any(d.type is DebtType.STUDENT_LOAN for d in state.debts):
        actions.append(
            "Understand student loan repayment terms (Plan 1/2/4/5) before considering overpayment"
        )
    return actions


def _ongoing(_state: FinancialState) -> bool:
    return False


FLOWCHART_STEPS: tuple[FlowchartStep, ...] = (
    FlowchartStep(
        id="budget",
        title="Create a budget and prioritise essentials",
        description=(
            "Understand your income and outgoings. Prioritise important bills, ensure you "
            "have adequate insurance, and check eligibility for state support."
        ),
        help_links=(
            HelpLink("UKPF Budgeting Guide", "https://ukpersonal.finance/budgeting/"),
            HelpLink("Benefits Calculator", "https://www.entitledto.co.uk/"),
        ),
        is_complete=_budget_complete,
        next_actions=_budget_actions,
    ),
    FlowchartStep(
        id="problem_debt",
        title="Deal with problem debt",
        description=(
            "If you rely on credit cards or loans to pay for essentials, or cannot afford "
            "minimum payments, seek free debt advice."
        ),
        help_links=(
            HelpLink("StepChange Debt Charity", "https://www.stepchange.org/"),
            HelpLink("National Debtline", "https://www.nationaldebtline.org/"),
            HelpLink("Citizens Advice", "https://www.citizensadvice.org.uk/"),
        ),
        is_complete=_problem_debt_complete,
        next_actions=_problem_debt_actions,
    ),
    FlowchartStep(
        id="initial_emergency_fund",
        title="Build initial emergency fund",
        description=(
            "Aim for 1-3 months of essential expenses in an accessible savings account. "
            "This provides a buffer against unexpected costs."
        ),
        help_links=(
            HelpLink("UKPF Emergency Fund Guide", "https://ukpersonal.finance/emergency-fund/"),
        ),
        is_complete=_emergency_fund_complete("initial_ef_months"),
        next_actions=_initial_fund_actions,
    ),
    FlowchartStep(
        id="high_interest_debt",
        title="Pay down expensive debt",
        description=(
            "Focus on clearing debts with interest rates above 10% APR while maintaining "
            "minimum payments on all debts."
        ),
        help_links=(HelpLink("UKPF Debt Guide", "https://ukpersonal.finance/debt/"),),
        is_complete=_high_interest_complete,
        next_actions=_high_interest_actions,
    ),
    FlowchartStep(
        id="pension_match",
        title="Contribute to pension to get employer match",
        description=(
            "If your employer offers pension matching, contribute enough to get the full "
            "match. This is essentially free money."
        ),
        help_links=(HelpLink("UKPF Pensions Guide", "https://ukpersonal.finance/pensions/"),),
        is_complete=_pension_complete,
        next_actions=_pension_actions,
    ),
    FlowchartStep(
        id="remaining_debt",
        title="Clear remaining non-mortgage debt",
        description=(
            "Pay off remaining debts (excluding mortgage and student loans) to free up "
            "monthly cashflow."
        ),
        help_links=(HelpLink("UKPF Debt Guide", "https://ukpersonal.finance/debt/"),),
        is_complete=_remaining_debt_complete,
        next_actions=_remaining_debt_actions,
    ),
    FlowchartStep(
        id="full_emergency_fund",
        title="Build full emergency fund",
        description=(
            "Aim for 3-12 months of essential expenses. The right amount depends on your "
            "job security and circumstances."
        ),
        help_links=(
            HelpLink("UKPF Emergency Fund Guide", "https://ukpersonal.finance/emergency-fund/"),
        ),
        is_complete=_emergency_fund_complete("emergency_fund_months"),
        next_actions=_full_fund_actions,
    ),
    FlowchartStep(
        id="short_term_goals",
        title="Save for short-term goals",
        description="Plan for goals within the next 5 years (house deposit, car, wedding, etc.).",
        help_links=(HelpLink("UKPF Saving Guide", "https://ukpersonal.finance/saving/"),),
        is_complete=_short_term_goals_complete,
        next_actions=_short_term_goals_actions,
    ),
    FlowchartStep(
        id="long_term_investing",
        title="Invest for the long term",
        description=(
            "Consider investing surplus funds for goals more than 5 years away. Research "
            "stocks & shares ISAs, pensions, and other tax-efficient accounts."
        ),
        help_links=(
            HelpLink("UKPF Investing Guide", "https://ukpersonal.finance/investing-101/"),
            HelpLink("UKPF ISA Guide", "https://ukpersonal.finance/isa/"),
        ),
        is_complete=_ongoing,
        next_actions=_investing_actions,
    ),
    FlowchartStep(
        id="review_mortgage",
        title="Consider mortgage overpayments or other debt",
        description=(
            "Assess whether overpaying your mortgage or student loan makes sense for your "
            "situation."
        ),
        help_links=(
            HelpLink("UKPF Mortgage Guide", "https://ukpersonal.finance/mortgage-overpayments/"),
        ),
        is_complete=_ongoing,
        next_actions=_mortgage_actions,
    ),
)

STEPS_BY_ID = {step.id: step for step in FLOWCHART_STEPS}


def evaluate_flowchart(state: FinancialState) -> FlowchartEvaluation:
    """Work out which steps are done and where the household should focus."""

    completed: list[str] = []
    current: FlowchartStep | None = None
    for step in FLOWCHART_STEPS:
        if step.is_complete(state):
            completed.append(step.id)
        elif current is None:
            current = step

    if _in_problem_debt(state):
        current = STEPS_BY_ID["problem_debt"]
    if current is None:
        current = FLOWCHART_STEPS[-1]

    return FlowchartEvaluation(
        current_step_id=current.id,
        completed_step_ids=completed,
        next_actions=current.next_actions(state),
        all_steps=FLOWCHART_STEPS,
    )


__all__ = [
    "FLOWCHART_STEPS",
    "FlowchartEvaluation",
    "FlowchartStep",
    "HelpLink",
    "MonthlyTotals",
    "evaluate_flowchart",
    "monthly_totals",
]
