"""Command line entry points for FinPath."""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path

import click
from pydantic import ValidationError

from .config import BaseConfig
from .logging_config import get_logger, setup_logging
from .models.debt import Debt, PayoffStrategy
from .services import debts as debt_service
from .services import reports
from .services.formatting import format_currency, format_date, format_months

logger = get_logger(__name__)


def load_debts(path: Path) -> list[Debt]:
    """Read and validate a JSON list of debts (or ``{"debts": [...]}``)."""

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"{path} is not valid JSON: {exc}") from exc

    if isinstance(raw, dict):
        raw = raw.get("debts", [])
    if not isinstance(raw, list):
        raise click.BadParameter(f"{path} must contain a list of debts.")

    try:
        return [Debt.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise click.BadParameter(f"{path} contains an invalid debt:\n{exc}") from exc


def _parse_start(value: str | None) -> date | None:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise click.BadParameter("Start date must be YYYY-MM-DD.") from exc


def _payoff_debts(path: Path, include_all: bool) -> list[Debt]:
    debts = load_debts(path)
    return debts if include_all else debt_service.filter_payoff_debts(debts)


def _money(amount: float, config: BaseConfig) -> str:
    return format_currency(amount, config.CURRENCY, config.CUSTOM_FX_RATE)


def _savings_line(comparison: debt_service.StrategyComparison, config: BaseConfig) -> str:
    """Name the cheaper strategy; interest decides, months break a tie."""

    interest = round(comparison.interest_saved, 2)
    months = comparison.months_saved
    if interest == 0 and months == 0:
        return "Both strategies cost the same."

    winner = "Avalanche"
    if interest < 0 or (interest == 0 and months < 0):
        winner = "Snowball"
        interest, months = -interest, -months

    line = f"{winner} saves {_money(interest, config)} in interest"
    if months > 0:
        return f"{line} and {months} month(s)."
    if months < 0:
        return f"{line} but takes {-months} month(s) longer."
    return f"{line}."


def _echo_summary(summary: debt_service.PayoffSummary, config: BaseConfig) -> None:
    click.echo(f"Strategy:       {summary.strategy.value}")
    if summary.saturated:
        click.echo(f"Time to payoff: not within {format_months(summary.months_to_payoff)}")
    else:
        click.echo(f"Time to payoff: {format_months(summary.months_to_payoff)}")
        click.echo(f"Debt-free date: {format_date(summary.payoff_date)}")
    click.echo(f"Total interest: {_money(summary.total_interest, config)}")


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Plan debt payoff with the avalanche and snowball strategies."""

    config = BaseConfig()
    setup_logging(config)
    ctx.obj = config


@cli.command("simulate")
@click.argument("debts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--extra", "extra_payment", type=float, default=None, help="Extra monthly payment")
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in PayoffStrategy]),
    default=PayoffStrategy.AVALANCHE.value,
    show_default=True,
)
@click.option("--start", "start", default=None, help="Start date (YYYY-MM-DD)")
@click.option("--include-all", is_flag=True, help="Include mortgages and student loans")
@click.option("--chart", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def simulate(
    config: BaseConfig,
    debts_file: Path,
    extra_payment: float | None,
    strategy: str,
    start: str | None,
    include_all: bool,
    chart: Path | None,
) -> None:
    """Simulate paying off the debts in DEBTS_FILE."""

    debts = _payoff_debts(debts_file, include_all)
    extra = config.DEFAULT_EXTRA_PAYMENT if extra_payment is None else extra_payment
    summary = debt_service.simulate_debts(
        debts=debts,
        extra_payment=extra,
        strategy=strategy,
        start_date=_parse_start(start),
    )
    logger.info(
        "Simulation requested",
        extra={"strategy": strategy, "debts": len(debts), "extra_payment": extra},
    )
    _echo_summary(summary, config)

    if chart is not None:
        reports.export_payoff_png(summary, chart, currency=config.CURRENCY)
        click.echo(f"Chart written: {chart}")


@cli.command("compare")
@click.argument("debts_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--extra", "extra_payment", type=float, default=None, help="Extra monthly payment")
@click.option("--start", "start", default=None, help="Start date (YYYY-MM-DD)")
@click.option("--include-all", is_flag=True, help="Include mortgages and student loans")
@click.option("--chart", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.pass_obj
def compare(
    config: BaseConfig,
    debts_file: Path,
    extra_payment: float | None,
    start: str | None,
    include_all: bool,
    chart: Path | None,
) -> None:
    """Compare avalanche and snowball for the debts in DEBTS_FILE."""

    debts = _payoff_debts(debts_file, include_all)
    extra = config.DEFAULT_EXTRA_PAYMENT if extra_payment is None else extra_payment
    comparison = debt_service.compare_strategies(
        debts=debts, extra_payment=extra, start_date=_parse_start(start)
    )

    _echo_summary(comparison.avalanche, config)
    click.echo("")
    _echo_summary(comparison.snowball, config)
    click.echo("")
    click.echo(_savings_line(comparison, config))

    if chart is not None:
        figure = reports.build_comparison_chart(comparison, currency=config.CURRENCY)
        reports.export_chart_png(figure, chart)
        click.echo(f"Chart written: {chart}")


def main() -> None:
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
