"""Month-over-month progress snapshots and reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

from ..models.plan import DebtSnapshot, FinancialState, MonthlySnapshot
from .debts import calculate_total_debt
from .flowchart import monthly_totals

Trend = Literal["improving", "worsening", "stable"]

# Changes smaller than this are reported as stable.
TREND_THRESHOLD = 0.01


@dataclass(slots=True, frozen=True)
class SnapshotChanges:
    debt_change: float = 0.0
    debt_change_percent: float = 0.0
    savings_change: float = 0.0
    savings_change_percent: float = 0.0
    surplus_change: float = 0.0
    net_worth_change: float = 0.0


@dataclass(slots=True, frozen=True)
class SnapshotTrends:
    debt_trend: Trend
    savings_trend: Trend
    surplus_trend: Trend


@dataclass(slots=True)
class PerformanceReport:
    current_month: MonthlySnapshot
    previous_month: MonthlySnapshot | None
    changes: SnapshotChanges
    trends: SnapshotTrends
    achieved_milestones: list[str] = field(default_factory=list)
    upcoming_milestones: list[str] = field(default_factory=list)


def create_monthly_snapshot(state: FinancialState, on: date | None = None) -> MonthlySnapshot:
    """Capture today's totals for ``state``."""

    on = on or date.today()
    totals = monthly_totals(state)
    return MonthlySnapshot(
        id=on.isoformat(),
        snapshot_date=on,
        total_debt=calculate_total_debt(state.debts),
        total_savings=state.savings.current_cash,
        total_income=totals.total_income,
        total_outgoings=totals.total_outgoings,
        surplus=totals.surplus,
        debts=[DebtSnapshot(id=d.id, name=d.name, balance=d.balance) for d in state.debts],
    )


def should_create_snapshot(state: FinancialState, today: date | None = None) -> bool:
    """At most one snapshot per day."""

    if state.last_snapshot_date is None:
        return True
    today = today or date.today()
    return not any(s.snapshot_date == today for s in state.monthly_snapshots)


def _percent_change(current: float, previous: float) -> float:
    if previous <= 0:
        return 0.0
    return (current - previous) / previous * 100


def _trend(change: float, improving_sign: int) -> Trend:
    if abs(change) < TREND_THRESHOLD:
        return "stable"
    improving = change > 0 if improving_sign > 0 else change < 0
    return "improving" if improving else "worsening"


def _net_worth(snapshot: MonthlySnapshot) -> float:
    return snapshot.total_savings - snapshot.total_debt


def _achieved_milestones(current: MonthlySnapshot, previous: MonthlySnapshot | None) -> list[str]:
    if previous is None:
        return []

    milestones: list[str] = []
    if previous.total_debt > 0 and current.total_debt == 0:
        milestones.append("Became debt-free!")
    else:
        for threshold in (10000, 5000, 1000):
            if previous.total_debt >= threshold > current.total_debt:
                milestones.append(f"Debt dropped below £{threshold:,}")
                break

    if previous.total_savings < 1000 <= current.total_savings:
        milestones.append("Saved your first £1,000!")
    else:
        for threshold in (5000, 10000):
            if previous.total_savings < threshold <= current.total_savings:
                milestones.append(f"Reached £{threshold:,} in savings!")
                break

    current_balances = {d.id: d.balance for d in current.debts}
    for debt in previous.debts:
        if debt.balance > 0 and current_balances.get(debt.id, 0) == 0:
            milestones.append(f"Paid off {debt.name}!")

    if _net_worth(previous) < 0 <= _net_worth(current):
        milestones.append("Achieved positive net worth!")

    return milestones


def _upcoming_milestones(current: MonthlySnapshot) -> list[str]:
    milestones: list[str] = []
    debt = current.total_debt
    if debt > 0:
        if 1000 <= debt < 1100:
            milestones.append("Close to getting debt below £1,000")
        elif 5000 <= debt < 5500:
            milestones.append("Close to getting debt below £5,000")
        elif debt < 500:
            milestones.append("Almost debt-free!")

    savings = current.total_savings
    if 800 <= savings < 1000:
        milestones.append("Close to saving £1,000")
    elif 4500 <= savings < 5000:
        milestones.append("Close to £5,000 in savings")
    elif 9500 <= savings < 10000:
        milestones.append("Close to £10,000 in savings")

    return milestones


def generate_performance_report(
    current: MonthlySnapshot, previous: MonthlySnapshot | None = None
) -> PerformanceReport:
    """Compare ``current`` with ``previous`` and pick out trends and milestones."""

    if previous is None:
        changes = SnapshotChanges()
    else:
        changes = SnapshotChanges(
            debt_change=current.total_debt - previous.total_debt,
            debt_change_percent=_percent_change(current.total_debt, previous.total_debt),
            savings_change=current.total_savings - previous.total_savings,
            savings_change_percent=_percent_change(current.total_savings, previous.total_savings),
            surplus_change=current.surplus - previous.surplus,
            net_worth_change=_net_worth(current) - _net_worth(previous),
        )

    trends = SnapshotTrends(
        debt_trend=_trend(changes.debt_change, -1),
        savings_trend=_trend(changes.savings_change, 1),
        surplus_trend=_trend(changes.surplus_change, 1),
    )

    return PerformanceReport(
        current_month=current,
        previous_month=previous,
        changes=changes,
        trends=trends,
        achieved_milestones=_achieved_milestones(current, previous),
        upcoming_milestones=_upcoming_milestones(current),
    )


def generate_insights(report: PerformanceReport) -> list[str]:
    insights: list[str] = []
    changes = report.changes
    current = report.current_month

    if report.trends.debt_trend == "improving":
        insights.append(
            f"Great progress! Your debt decreased by {abs(changes.debt_change_percent):.1f}% this month."
        )
    elif report.trends.debt_trend == "worsening":
        insights.append(
            f"Your debt increased by {abs(changes.debt_change_percent):.1f}% this month. "
            "Review your budget to identify areas to cut back."
        )

    if report.trends.savings_trend == "improving":
        insights.append(
            f"Excellent saving! Your savings grew by {abs(changes.savings_change_percent):.1f}% this month."
        )
    elif report.trends.savings_trend == "worsening" and current.total_savings > 0:
        insights.append("Your savings decreased this month. Consider reviewing your budget priorities.")

    if report.trends.surplus_trend == "worsening" and current.surplus < 0:
        insights.append("Warning: Your expenses exceed your income. This is not sustainable long-term.")
    elif current.surplus > 500 and current.total_debt > 0:
        insights.append(
            f"You have a £{current.surplus:.0f} monthly surplus. "
            "Consider allocating more to debt payoff."
        )

    if _net_worth(current) > 0 and changes.net_worth_change > 0:
        insights.append(f"Your net worth increased by £{changes.net_worth_change:.0f} this month!")

    return insights


def calculate_growth_rate(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / abs(previous) * 100


def recent_snapshots(state: FinancialState, count: int = 6) -> list[MonthlySnapshot]:
    """The latest ``count`` snapshots, oldest first."""

    ordered = sorted(state.monthly_snapshots, key=lambda s: s.snapshot_date)
    return ordered[-count:] if count > 0 else []


__all__ = [
    "PerformanceReport",
    "SnapshotChanges",
    "SnapshotTrends",
    "calculate_growth_rate",
    "create_monthly_snapshot",
    "generate_insights",
    "generate_performance_report",
    "recent_snapshots",
    "should_create_snapshot",
]
