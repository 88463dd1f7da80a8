"""Debt payoff simulation and strategy comparison.

Every run of :func:`simulate_debts` normalizes the input debts into fresh
:class:`DebtSimulationState` working copies, then steps month by month:
interest accrues on the opening balance, each debt receives its base
payment, and the single highest-priority debt for the chosen strategy also
receives the month's extra payment. Debts retire once their balance falls
to a cent or less. Runs that never pay off stop after
``MAX_SIMULATION_MONTHS`` and are reported through ``months_to_payoff``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Sequence, Union

from ..logging_config import get_logger
from ..models.debt import Debt, PaymentMode, PayoffStrategy
from .formatting import add_months

logger = get_logger(__name__)

MAX_SIMULATION_MONTHS = 600  # 50 years
PAID_OFF_EPSILON = 0.01
HIGH_INTEREST_APR = 10.0


@dataclass(slots=True)
class PromoActive:
    """A 0% window that still has ``months_remaining`` to run."""

    months_remaining: int
    post_promo_apr: float


@dataclass(slots=True, frozen=True)
class PostPromo:
    """The promo has expired and ``rate`` now applies permanently."""

    rate: float


PromoState = Union[PromoActive, PostPromo, None]


@dataclass(slots=True)
class DebtSimulationState:
    """Mutable per-run working copy of a debt."""

    id: str
    name: str
    balance: float
    apr: float
    minimum_payment: float
    payment_mode: PaymentMode = PaymentMode.MINIMUM_PAYMENT
    fixed_monthly_payment: float | None = None
    promo: PromoState = None

    @property
    def in_promo(self) -> bool:
        return isinstance(self.promo, PromoActive) and self.promo.months_remaining > 0

    @property
    def priority_rate(self) -> float:
        """APR used for avalanche ordering; a running promo counts as 0%."""
        return 0.0 if self.in_promo else self.apr

    @property
    def base_payment(self) -> float:
        if self.payment_mode is PaymentMode.FIXED_TERM and self.fixed_monthly_payment:
            return self.fixed_monthly_payment
        return self.minimum_payment

    def resolve_monthly_apr(self) -> float:
        """Return the APR charged this month, advancing the promo countdown."""

        promo = self.promo
        if isinstance(promo, PromoActive):
            if promo.months_remaining > 0:
                promo.months_remaining -= 1
                return 0.0
            self.apr = promo.post_promo_apr
            self.promo = PostPromo(rate=promo.post_promo_apr)
        return self.apr


@dataclass(slots=True, frozen=True)
class ScheduleEntry:
    """One debt's activity for one simulated month."""

    month: int
    date: date
    debt_id: str
    debt_name: str
    balance: float
    payment: float
    principal: float
    interest: float


@dataclass(slots=True)
class PayoffSummary:
    strategy: PayoffStrategy
    months_to_payoff: int
    total_interest: float
    payoff_date: date
    schedule: list[ScheduleEntry] = field(default_factory=list)

    @property
    def saturated(self) -> bool:
        """True when the run hit the month cap instead of paying everything off."""
        return self.months_to_payoff >= MAX_SIMULATION_MONTHS


@dataclass(slots=True)
class StrategyComparison:
    avalanche: PayoffSummary
    snowball: PayoffSummary
    interest_saved: float
    months_saved: int


# ---------------------------------------------------------------------------
# Rate/term normalization


def annuity_payment(*, principal: float, apr: float, months: int) -> float:
    """Standard amortizing payment ``r*PV / (1 - (1+r)^-n)``.

    Falls back to straight-line ``principal / months`` when the rate is zero
    or the denominator collapses.
    """

    if months <= 0:
        return 0.0
    rate = apr / 100 / 12
    if rate == 0:
        return principal / months
    denominator = 1 - (1 + rate) ** (-months)
    if denominator <= 0:
        return principal / months
    return (rate * principal) / denominator


def fixed_monthly_payment(debt: Debt) -> float | None:
    """Return the fixed payment for a fixed-term debt, or ``None``."""

    if debt.payment_mode is not PaymentMode.FIXED_TERM:
        return None
    months = debt.fixed_term_months or 0
    if months <= 0:
        return None
    if debt.total_repayable:
        # Lender-quoted total already includes every interest charge.
        return debt.total_repayable / months
    if debt.balance > 0:
        return annuity_payment(principal=debt.balance, apr=debt.apr, months=months)
    return None


def normalize_debt(debt: Debt) -> DebtSimulationState:
    """Build a fresh working copy of ``debt`` for one simulation run."""

    balance = float(debt.balance)
    apr = float(debt.apr)
    payment = fixed_monthly_payment(debt)
    if payment is not None and debt.total_repayable:
        balance = float(debt.total_repayable)
        apr = 0.0

    promo: PromoState = None
    if debt.has_promo:
        post_promo_apr = debt.post_promo_apr if debt.post_promo_apr is not None else debt.apr
        promo = PromoActive(
            months_remaining=debt.promo_months_remaining,
            post_promo_apr=float(post_promo_apr),
        )

    return DebtSimulationState(
        id=debt.id,
        name=debt.name,
        balance=balance,
        apr=apr,
        minimum_payment=float(debt.minimum_payment),
        payment_mode=debt.payment_mode,
        fixed_monthly_payment=payment,
        promo=promo,
    )


# ---------------------------------------------------------------------------
# Strategy ordering


def _coerce_strategy(strategy: PayoffStrategy | str) -> PayoffStrategy:
    try:
        return PayoffStrategy(strategy)
    except ValueError as exc:
        raise ValueError("Invalid debt payoff strategy.") from exc


def prioritize_debts(
    states: Iterable[DebtSimulationState], strategy: PayoffStrategy | str
) -> list[DebtSimulationState]:
    """Order active debts so index 0 is the one that gets the extra payment."""

    strategy = _coerce_strategy(strategy)
    if strategy is PayoffStrategy.AVALANCHE:
        # Highest APR first; sorted() is stable so ties keep input order.
        return sorted(states, key=lambda s: s.priority_rate, reverse=True)
    return sorted(states, key=lambda s: s.balance)


def monthly_interest(balance: float, apr: float) -> float:
    return balance * (apr / 100 / 12)


# ---------------------------------------------------------------------------
# Simulation


def simulate_debts(
    *,
    debts: Iterable[Debt],
    extra_payment: float,
    strategy: PayoffStrategy | str,
    start_date: date | None = None,
) -> PayoffSummary:
    """Simulate paying off ``debts`` month by month under ``strategy``."""

    strategy = _coerce_strategy(strategy)
    start = start_date or date.today()
    states = [normalize_debt(debt) for debt in debts]
    if not states:
        return PayoffSummary(
            strategy=strategy,
            months_to_payoff=0,
            total_interest=0.0,
            payoff_date=start,
            schedule=[],
        )

    budget = max(float(extra_payment), 0.0)
    schedule: list[ScheduleEntry] = []
    total_interest = 0.0
    month = 0
    active = [s for s in states if s.balance > PAID_OFF_EPSILON]

    while active and month < MAX_SIMULATION_MONTHS:
        month += 1
        entry_date = add_months(start, month)
        remaining_extra = budget
        target_id = prioritize_debts(active, strategy)[0].id

        # Input order, not priority order: priority only picks the extra's target.
        for state in active:
            apr = state.resolve_monthly_apr()
            interest = monthly_interest(state.balance, apr)
            total_interest += interest

            payment = state.base_payment
            if state.id == target_id and remaining_extra > 0:
                extra = max(0.0, min(remaining_extra, state.balance + interest - payment))
                payment += extra
                remaining_extra -= extra

            payment = min(payment, state.balance + interest)
            principal = payment - interest
            state.balance = max(0.0, state.balance - principal)

            schedule.append(
                ScheduleEntry(
                    month=month,
                    date=entry_date,
                    debt_id=state.id,
                    debt_name=state.name,
                    balance=state.balance,
                    payment=payment,
                    principal=principal,
                    interest=interest,
                )
            )

        active = [s for s in active if s.balance > PAID_OFF_EPSILON]

    if active:
        logger.warning(
            "Payoff simulation hit the month cap",
            extra={
                "strategy": strategy.value,
                "months": month,
                "unpaid_debts": [s.id for s in active],
            },
        )
    logger.debug(
        "Payoff simulation finished",
        extra={
            "strategy": strategy.value,
            "debts": len(states),
            "months": month,
            "total_interest": round(total_interest, 2),
        },
    )

    return PayoffSummary(
        strategy=strategy,
        months_to_payoff=month,
        total_interest=total_interest,
        payoff_date=add_months(start, month),
        schedule=schedule,
    )


def compare_strategies(
    *,
    debts: Iterable[Debt],
    extra_payment: float,
    start_date: date | None = None,
) -> StrategyComparison:
    """Run avalanche and snowball over the same inputs and diff the results.

    Positive ``interest_saved`` / ``months_saved`` mean avalanche is cheaper /
    faster than snowball.
    """

    debt_list = list(debts)
    start = start_date or date.today()
    avalanche = simulate_debts(
        debts=debt_list,
        extra_payment=extra_payment,
        strategy=PayoffStrategy.AVALANCHE,
        start_date=start,
    )
    snowball = simulate_debts(
        debts=debt_list,
        extra_payment=extra_payment,
        strategy=PayoffStrategy.SNOWBALL,
        start_date=start,
    )
    return StrategyComparison(
        avalanche=avalanche,
        snowball=snowball,
        interest_saved=snowball.total_interest - avalanche.total_interest,
        months_saved=snowball.months_to_payoff - avalanche.months_to_payoff,
    )


# ---------------------------------------------------------------------------
# Aggregate queries


def calculate_minimum_payments(debts: Iterable[Debt]) -> float:
    """Total monthly commitment: minimums plus fixed-term instalments."""

    total = 0.0
    for debt in debts:
        payment = fixed_monthly_payment(debt)
        total += payment if payment is not None else debt.minimum_payment
    return total


def calculate_total_debt(debts: Iterable[Debt]) -> float:
    return sum((debt.balance for debt in debts), 0.0)


def high_interest_debts(debts: Iterable[Debt]) -> list[Debt]:
    """Payoff-eligible debts above ``HIGH_INTEREST_APR`` outside a 0% promo."""

    return [
        debt
        for debt in debts
        if debt.is_payoff_candidate and not debt.in_promo and debt.apr > HIGH_INTEREST_APR
    ]


def has_high_interest_debt(debts: Iterable[Debt]) -> bool:
    return bool(high_interest_debts(debts))


def has_non_mortgage_student_loan_debt(debts: Iterable[Debt]) -> bool:
    return any(debt.is_payoff_candidate and debt.balance > 0 for debt in debts)


def filter_payoff_debts(debts: Iterable[Debt]) -> list[Debt]:
    """Drop mortgages and student loans, which the payoff plan does not cover."""
    return [debt for debt in debts if debt.is_payoff_candidate]


# ---------------------------------------------------------------------------
# Schedule views for charts and dashboards


def balance_series(summary: PayoffSummary) -> list[tuple[int, date, float]]:
    """Total remaining balance at the end of each simulated month."""

    totals: dict[int, tuple[date, float]] = {}
    for entry in summary.schedule:
        entry_date, running = totals.get(entry.month, (entry.date, 0.0))
        totals[entry.month] = (entry_date, running + entry.balance)
    return [(month, entry_date, total) for month, (entry_date, total) in sorted(totals.items())]


def cumulative_interest_series(summary: PayoffSummary) -> list[tuple[int, date, float]]:
    """Interest paid to date at the end of each simulated month."""

    per_month: dict[int, tuple[date, float]] = {}
    for entry in summary.schedule:
        entry_date, running = per_month.get(entry.month, (entry.date, 0.0))
        per_month[entry.month] = (entry_date, running + entry.interest)

    series: list[tuple[int, date, float]] = []
    cumulative = 0.0
    for month, (entry_date, interest) in sorted(per_month.items()):
        cumulative += interest
        series.append((month, entry_date, cumulative))
    return series


def debt_payoff_months(summary: PayoffSummary) -> dict[str, int]:
    """Month in which each debt was cleared; unpaid debts are omitted."""

    last_entries: dict[str, ScheduleEntry] = {}
    for entry in summary.schedule:
        last_entries[entry.debt_id] = entry
    return {
        debt_id: entry.month
        for debt_id, entry in last_entries.items()
        if entry.balance <= PAID_OFF_EPSILON
    }


def month_entries(summary: PayoffSummary, month: int) -> Sequence[ScheduleEntry]:
    return [entry for entry in summary.schedule if entry.month == month]


__all__ = [
    "DebtSimulationState",
    "HIGH_INTEREST_APR",
    "MAX_SIMULATION_MONTHS",
    "PAID_OFF_EPSILON",
    "PayoffSummary",
    "PostPromo",
    "PromoActive",
    "ScheduleEntry",
    "StrategyComparison",
    "annuity_payment",
    "balance_series",
    "calculate_minimum_payments",
    "calculate_total_debt",
    "compare_strategies",
    "cumulative_interest_series",
    "debt_payoff_months",
    "filter_payoff_debts",
    "fixed_monthly_payment",
    "has_high_interest_debt",
    "has_non_mortgage_student_loan_debt",
    "high_interest_debts",
    "month_entries",
    "monthly_interest",
    "normalize_debt",
    "prioritize_debts",
    "simulate_debts",
]
