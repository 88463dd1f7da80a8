"""Payoff projection charts."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
from matplotlib.figure import Figure

from ..models.plan import Currency
from .debts import (
    PayoffSummary,
    StrategyComparison,
    balance_series,
    cumulative_interest_series,
)
from .formatting import CURRENCY_SYMBOLS, format_months

STRATEGY_COLORS = {"avalanche": "#4F46E5", "snowball": "#F59E0B"}


class ReportRenderer(Protocol):
    """Protocol describing renderer behavior."""

    def render(self, figure: Figure, *, output_path: Path) -> None:  # pragma: no cover - interface
        ...


def _money_axis(ax, currency: Currency) -> None:
    symbol = CURRENCY_SYMBOLS[Currency(currency)]
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda x, p: f"{symbol}{x:,.0f}"))


def build_payoff_chart(summary: PayoffSummary, *, currency: Currency = Currency.GBP) -> Figure:
    """Plot remaining balance and cumulative interest for one strategy."""

    balances = balance_series(summary)
    interest = cumulative_interest_series(summary)
    color = STRATEGY_COLORS.get(summary.strategy.value, "#4F46E5")

    fig, (balance_ax, interest_ax) = plt.subplots(2, 1, figsize=(10, 8), sharex=True)

    if balances:
        months = [month for month, _, _ in balances]
        balance_ax.plot(months, [total for _, _, total in balances], color=color, linewidth=2.5)
        balance_ax.fill_between(
            months, [total for _, _, total in balances], color=color, alpha=0.15
        )
        balance_ax.set_title(
            f"Debt Payoff Projection ({summary.strategy.value.title()})",
            fontsize=14,
            fontweight="bold",
            pad=15,
        )
        balance_ax.set_ylabel("Remaining Balance", fontsize=11)
        balance_ax.grid(True, linestyle="--", alpha=0.3)
        _money_axis(balance_ax, currency)

        if not summary.saturated:
            balance_ax.annotate(
                "DEBT FREE!",
                (months[-1], 0),
                xytext=(0, 25),
                textcoords="offset points",
                ha="center",
                fontsize=11,
                fontweight="bold",
                color="#16A34A",
            )

        interest_ax.plot(
            [month for month, _, _ in interest],
            [total for _, _, total in interest],
            color="#DC2626",
            linewidth=2,
        )
        interest_ax.set_ylabel("Cumulative Interest", fontsize=11)
        interest_ax.set_xlabel("Month", fontsize=11)
        interest_ax.grid(True, linestyle="--", alpha=0.3)
        _money_axis(interest_ax, currency)

        symbol = CURRENCY_SYMBOLS[Currency(currency)]
        textstr = (
            f"Time to payoff: {format_months(summary.months_to_payoff)}\n"
            f"Total interest: {symbol}{summary.total_interest:,.0f}"
        )
        props = dict(boxstyle="round", facecolor="lavender", alpha=0.8)
        balance_ax.text(
            0.98,
            0.95,
            textstr,
            transform=balance_ax.transAxes,
            fontsize=9,
            ha="right",
            va="top",
            bbox=props,
        )
    else:
        balance_ax.text(0.5, 0.5, "No payoff schedule", ha="center", va="center", fontsize=14, color="#666")
        balance_ax.axis("off")
        interest_ax.axis("off")

    fig.tight_layout()
    return fig


def build_comparison_chart(
    comparison: StrategyComparison, *, currency: Currency = Currency.GBP
) -> Figure:
    """Overlay avalanche and snowball balance curves."""

    fig, ax = plt.subplots(figsize=(10, 6))
    plotted = False
    for summary in (comparison.avalanche, comparison.snowball):
        series = balance_series(summary)
        if not series:
            continue
        plotted = True
        ax.plot(
            [month for month, _, _ in series],
            [total for _, _, total in series],
            label=f"{summary.strategy.value.title()} ({format_months(summary.months_to_payoff)})",
            color=STRATEGY_COLORS[summary.strategy.value],
            linewidth=2.5,
        )

    if plotted:
        ax.set_title("Avalanche vs Snowball", fontsize=14, fontweight="bold", pad=15)
        ax.set_xlabel("Month", fontsize=11)
        ax.set_ylabel("Remaining Balance", fontsize=11)
        ax.grid(True, linestyle="--", alpha=0.3)
        ax.legend(loc="upper right")
        _money_axis(ax, currency)
    else:
        ax.text(0.5, 0.5, "No payoff schedule", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    fig.tight_layout()
    return fig


def export_chart_png(
    figure: Figure, output_path: Path, renderer: ReportRenderer | None = None
) -> Path:
    """Write ``figure`` to ``output_path`` as PNG and release it."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    if renderer is not None:
        renderer.render(figure, output_path=output_path)
    else:
        figure.savefig(output_path, bbox_inches="tight", dpi=120)
    plt.close(figure)
    return output_path


def export_payoff_png(
    summary: PayoffSummary,
    output_path: Path,
    *,
    currency: Currency = Currency.GBP,
    renderer: ReportRenderer | None = None,
) -> Path:
    return export_chart_png(build_payoff_chart(summary, currency=currency), output_path, renderer)


__all__ = [
    "ReportRenderer",
    "build_comparison_chart",
    "build_payoff_chart",
    "export_chart_png",
    "export_payoff_png",
]
