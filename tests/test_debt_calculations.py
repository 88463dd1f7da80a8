"""Tests for the month-by-month payoff simulator and strategy comparison.

These tests verify the core payoff logic, including:
- Avalanche method (highest effective APR gets the extra payment)
- Snowball method (smallest balance gets the extra payment)
- Promotional 0% windows and the switch to the post-promo rate
- Fixed-term loans (lender total repayable and annuity payments)
- Saturation at the 600-month cap
- Comparison deltas between the two strategies
"""

from __future__ import annotations

import logging
from datetime import date

import pytest

from finpath.models import PayoffStrategy
from finpath.services.debts import (
    MAX_SIMULATION_MONTHS,
    compare_strategies,
    normalize_debt,
    simulate_debts,
)
from tests.conftest import START, assert_float_equal, payments_for_month


class TestSimulateDebts:
    """Tests for simulate_debts."""

    def test_empty_debts_returns_zero_summary(self):
        """No debts should yield a zero-month, zero-interest summary."""
        summary = simulate_debts(debts=[], extra_payment=0, strategy="avalanche", start_date=START)

        assert summary.months_to_payoff == 0
        assert summary.total_interest == 0
        assert summary.schedule == []
        assert summary.payoff_date == START
        assert summary.strategy is PayoffStrategy.AVALANCHE

    def test_single_debt_pays_off(self, debt_factory):
        """1000 at 20% with a 25 minimum and 100 extra clears in under 20 months."""
        debt = debt_factory(balance=1000.0, apr=20.0, minimum_payment=25.0)

        summary = simulate_debts(
            debts=[debt], extra_payment=100, strategy="avalanche", start_date=START
        )

        assert 0 < summary.months_to_payoff < 20
        assert summary.total_interest > 0
        assert summary.schedule[-1].balance < 1

        first = summary.schedule[0]
        assert first.month == 1
        assert_float_equal(first.interest, 1000.0 * 0.20 / 12)
        assert_float_equal(first.payment, 125.0)
        assert_float_equal(first.principal, 125.0 - 1000.0 * 0.20 / 12)

    def test_avalanche_targets_highest_apr(self, two_cards):
        """Month 1 extra goes to the 24% card; the 12% card pays its minimum."""
        summary = simulate_debts(
            debts=two_cards, extra_payment=100, strategy="avalanche", start_date=START
        )
        payments = payments_for_month(summary, 1)

        assert payments["1"] > 50
        assert_float_equal(payments["1"], 150.0)
        assert_float_equal(payments["2"], 25.0)

    def test_snowball_targets_smallest_balance(self, two_cards):
        """Month 1 extra goes to the 1000 balance; the 2000 balance pays its minimum."""
        summary = simulate_debts(
            debts=two_cards, extra_payment=100, strategy="snowball", start_date=START
        )
        payments = payments_for_month(summary, 1)

        assert payments["2"] > 25
        assert_float_equal(payments["2"], 125.0)
        assert_float_equal(payments["1"], 50.0)

    def test_schedule_follows_input_order(self, two_cards):
        """Entries within a month follow input order, not priority order."""
        summary = simulate_debts(
            debts=two_cards, extra_payment=100, strategy="snowball", start_date=START
        )

        assert [e.debt_id for e in summary.schedule[:2]] == ["1", "2"]

    def test_extra_never_exceeds_budget(self, two_cards):
        """Payments above the base payment never add up to more than the budget."""
        extra = 100.0
        summary = simulate_debts(
            debts=two_cards, extra_payment=extra, strategy="avalanche", start_date=START
        )
        base = {"1": 50.0, "2": 25.0}

        for month in range(1, summary.months_to_payoff + 1):
            payments = payments_for_month(summary, month)
            above_base = sum(max(0.0, p - base[d]) for d, p in payments.items())
            assert above_base <= extra + 1e-9
            # Only one debt ever receives extra in a month
            assert sum(1 for d, p in payments.items() if p > base[d] + 1e-9) <= 1

    def test_extra_is_not_split_when_target_needs_less(self, debt_factory):
        """Unused extra is not passed on to the next debt in the same month."""
        small = debt_factory(id="small", balance=30.0, apr=0.0, minimum_payment=10.0)
        large = debt_factory(id="large", balance=5000.0, apr=0.0, minimum_payment=50.0)

        summary = simulate_debts(
            debts=[small, large], extra_payment=100, strategy="snowball", start_date=START
        )
        payments = payments_for_month(summary, 1)

        assert_float_equal(payments["small"], 30.0)
        assert_float_equal(payments["large"], 50.0)

    def test_paid_off_debt_emits_no_further_entries(self, two_cards):
        """A retired debt never appears in later months."""
        summary = simulate_debts(
            debts=two_cards, extra_payment=100, strategy="snowball", start_date=START
        )
        small_entries = [e for e in summary.schedule if e.debt_id == "2"]
        payoff_month = small_entries[-1].month

        assert small_entries[-1].balance <= 0.01
        assert [e.month for e in small_entries] == list(range(1, payoff_month + 1))
        assert payoff_month < summary.months_to_payoff

    def test_balances_never_increase_when_payments_cover_interest(self, two_cards):
        """Amortizing debts only ever go down."""
        summary = simulate_debts(
            debts=two_cards, extra_payment=100, strategy="avalanche", start_date=START
        )
        previous = {"1": 2000.0, "2": 1000.0}
        for entry in summary.schedule:
            assert entry.balance <= previous[entry.debt_id] + 1e-9
            previous[entry.debt_id] = entry.balance

    def test_total_interest_matches_schedule(self, two_cards):
        """Reported total interest is the sum of every ledger row."""
        summary = simulate_debts(
            debts=two_cards, extra_payment=100, strategy="avalanche", start_date=START
        )

        assert_float_equal(summary.total_interest, sum(e.interest for e in summary.schedule))
        assert summary.total_interest >= 0

    def test_payment_is_clamped_to_balance_plus_interest(self, debt_factory):
        """The final payment never takes a debt below zero."""
        debt = debt_factory(balance=100.0, apr=12.0, minimum_payment=500.0)

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="snowball", start_date=START)

        assert summary.months_to_payoff == 1
        assert_float_equal(summary.schedule[0].payment, 101.0)
        assert summary.schedule[0].balance == 0.0

    def test_negative_extra_is_ignored(self, debt_factory):
        """A negative extra payment budget behaves like zero."""
        debt = debt_factory(balance=1000.0, apr=12.0, minimum_payment=50.0)

        summary = simulate_debts(debts=[debt], extra_payment=-25, strategy="avalanche", start_date=START)

        assert_float_equal(summary.schedule[0].payment, 50.0)

    def test_dates_advance_by_calendar_month(self, debt_factory):
        """Entry dates and payoff date are start date plus N months."""
        debt = debt_factory(balance=300.0, apr=0.0, minimum_payment=100.0)

        summary = simulate_debts(
            debts=[debt], extra_payment=0, strategy="avalanche", start_date=date(2025, 1, 31)
        )

        assert [e.date for e in summary.schedule] == [
            date(2025, 2, 28),
            date(2025, 3, 31),
            date(2025, 4, 30),
        ]
        assert summary.payoff_date == date(2025, 4, 30)

    def test_default_start_date_is_today(self, debt_factory):
        debt = debt_factory(balance=100.0, apr=0.0, minimum_payment=100.0)

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="avalanche")

        assert summary.schedule[0].date > date.today()

    def test_invalid_strategy_raises_error(self, debt_factory):
        """Unknown strategies are rejected."""
        with pytest.raises(ValueError, match="Invalid debt payoff strategy"):
            simulate_debts(debts=[debt_factory()], extra_payment=0, strategy="tsunami")

    def test_negligible_balance_is_already_retired(self, debt_factory):
        """A debt at a penny or less never enters the simulation."""
        debt = debt_factory(balance=0.005, apr=20.0, minimum_payment=25.0)

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="avalanche", start_date=START)

        assert summary.months_to_payoff == 0
        assert summary.schedule == []


class TestPromotionalRates:
    """Tests for 0% promo windows."""

    def test_promo_months_are_interest_free(self, debt_factory):
        """Six promo months charge no interest; the post-promo rate applies after."""
        debt = debt_factory(
            balance=1000.0,
            apr=0.0,
            minimum_payment=50.0,
            has_promo=True,
            promo_months_remaining=6,
            post_promo_apr=24.0,
        )

        summary = simulate_debts(debts=[debt], extra_payment=50, strategy="avalanche", start_date=START)

        promo_interest = sum(e.interest for e in summary.schedule if e.month <= 6)
        assert promo_interest == 0
        assert summary.months_to_payoff > 6
        month_seven = summary.schedule[6]
        assert month_seven.month == 7
        assert_float_equal(month_seven.interest, 400.0 * 0.24 / 12)
        assert sum(e.interest for e in summary.schedule if e.month > 6) > 0

    def test_expired_promo_switches_in_first_month(self, debt_factory):
        """A promo flag with no months left charges the post-promo rate at once."""
        debt = debt_factory(
            balance=1000.0,
            apr=0.0,
            minimum_payment=50.0,
            has_promo=True,
            promo_months_remaining=0,
            post_promo_apr=12.0,
        )

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="avalanche", start_date=START)

        assert_float_equal(summary.schedule[0].interest, 10.0)

    def test_post_promo_rate_defaults_to_apr(self, debt_factory):
        """Without a post-promo APR the declared APR applies after the promo."""
        debt = debt_factory(
            balance=1000.0,
            apr=12.0,
            minimum_payment=100.0,
            has_promo=True,
            promo_months_remaining=1,
        )

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="avalanche", start_date=START)

        assert summary.schedule[0].interest == 0
        assert_float_equal(summary.schedule[1].interest, 900.0 * 0.12 / 12)

    def test_avalanche_treats_promo_debt_as_zero_rate(self, debt_factory):
        """A 30% card inside its promo ranks below a 15% card."""
        promo_card = debt_factory(
            id="promo",
            balance=1000.0,
            apr=30.0,
            minimum_payment=25.0,
            has_promo=True,
            promo_months_remaining=3,
        )
        plain_card = debt_factory(id="plain", balance=1000.0, apr=15.0, minimum_payment=25.0)

        summary = simulate_debts(
            debts=[promo_card, plain_card], extra_payment=100, strategy="avalanche", start_date=START
        )
        payments = payments_for_month(summary, 1)

        assert_float_equal(payments["plain"], 125.0)
        assert_float_equal(payments["promo"], 25.0)

    def test_simulation_does_not_mutate_inputs(self, debt_factory):
        """Promo countdowns and balances live only in the per-run working copies."""
        debt = debt_factory(
            balance=1000.0, apr=0.0, has_promo=True, promo_months_remaining=6, post_promo_apr=24.0
        )

        simulate_debts(debts=[debt], extra_payment=50, strategy="avalanche", start_date=START)

        assert debt.balance == 1000.0
        assert debt.promo_months_remaining == 6
        assert debt.has_promo is True
        assert debt.apr == 0.0


class TestFixedTermLoans:
    """Tests for fixed-term payment modes."""

    def test_total_repayable_loan(self, debt_factory):
        """Lender totals are paid in equal instalments with no extra interest."""
        loan = debt_factory(
            type="loan",
            balance=900.0,
            apr=18.0,
            payment_mode="fixed_term",
            fixed_term_months=12,
            total_repayable=1200.0,
            minimum_payment=0.0,
        )

        summary = simulate_debts(debts=[loan], extra_payment=0, strategy="avalanche", start_date=START)

        assert summary.months_to_payoff == 12
        assert summary.total_interest == 0
        assert all(e.payment == 100.0 for e in summary.schedule)

    def test_annuity_loan_pays_off_on_term(self, debt_factory):
        """An amortizing loan clears in its term with standard annuity interest."""
        loan = debt_factory(
            type="loan",
            balance=10000.0,
            apr=12.0,
            payment_mode="fixed_term",
            fixed_term_months=12,
            minimum_payment=0.0,
        )

        summary = simulate_debts(debts=[loan], extra_payment=0, strategy="avalanche", start_date=START)

        assert summary.months_to_payoff == 12
        assert_float_equal(summary.schedule[0].payment, 888.49)
        assert_float_equal(summary.total_interest, 888.4878867834 * 12 - 10000.0, tolerance=0.05)

    def test_fixed_term_loan_accepts_extra(self, debt_factory):
        """Extra payments on top of the instalment shorten the term."""
        loan = debt_factory(
            type="loan",
            balance=900.0,
            payment_mode="fixed_term",
            fixed_term_months=12,
            total_repayable=1200.0,
        )

        summary = simulate_debts(debts=[loan], extra_payment=100, strategy="snowball", start_date=START)

        assert summary.months_to_payoff == 6
        assert_float_equal(summary.schedule[0].payment, 200.0)

    def test_fixed_term_without_computable_payment_uses_minimum(self, debt_factory):
        """A zero-month term has no instalment, so the minimum payment applies."""
        loan = debt_factory(
            type="loan",
            balance=1000.0,
            apr=12.0,
            payment_mode="fixed_term",
            fixed_term_months=0,
            minimum_payment=60.0,
        )

        summary = simulate_debts(debts=[loan], extra_payment=0, strategy="avalanche", start_date=START)

        assert_float_equal(summary.schedule[0].payment, 60.0)


class TestSaturation:
    """Tests for runs that never pay off."""

    def test_minimum_below_interest_hits_month_cap(self, debt_factory, caplog):
        """A payment below the interest runs to 600 months without raising."""
        caplog.set_level(logging.WARNING, logger="finpath")
        debt = debt_factory(balance=1000.0, apr=24.0, minimum_payment=10.0)

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="avalanche", start_date=START)

        assert summary.months_to_payoff == MAX_SIMULATION_MONTHS
        assert summary.saturated
        assert len(summary.schedule) == MAX_SIMULATION_MONTHS
        assert summary.schedule[-1].balance > 1000.0

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].getMessage() == "Payoff simulation hit the month cap"
        assert warnings[0].unpaid_debts == [debt.id]
        assert warnings[0].months == MAX_SIMULATION_MONTHS

    def test_completed_run_logs_no_warning(self, debt_factory, caplog):
        caplog.set_level(logging.WARNING, logger="finpath")

        summary = simulate_debts(
            debts=[debt_factory()], extra_payment=100, strategy="avalanche", start_date=START
        )

        assert not summary.saturated
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]

    def test_zero_payment_zero_rate_hits_month_cap(self, debt_factory):
        debt = debt_factory(balance=500.0, apr=0.0, minimum_payment=0.0)

        summary = simulate_debts(debts=[debt], extra_payment=0, strategy="snowball", start_date=START)

        assert summary.saturated
        assert summary.total_interest == 0
        assert summary.schedule[-1].balance == 500.0


class TestCompareStrategies:
    """Tests for compare_strategies."""

    def test_avalanche_saves_interest(self, debt_factory):
        """Targeting the expensive debt costs less interest overall."""
        debts = [
            debt_factory(id="small", balance=500.0, apr=10.0, minimum_payment=25.0),
            debt_factory(id="large", balance=5000.0, apr=20.0, minimum_payment=100.0),
        ]

        comparison = compare_strategies(debts=debts, extra_payment=200, start_date=START)

        assert comparison.avalanche.total_interest < comparison.snowball.total_interest
        assert comparison.interest_saved > 0
        assert_float_equal(
            comparison.interest_saved,
            comparison.snowball.total_interest - comparison.avalanche.total_interest,
        )
        assert comparison.months_saved == (
            comparison.snowball.months_to_payoff - comparison.avalanche.months_to_payoff
        )

    def test_two_cards_avalanche_never_costs_more(self, two_cards):
        comparison = compare_strategies(debts=two_cards, extra_payment=100, start_date=START)

        assert comparison.avalanche.total_interest <= comparison.snowball.total_interest + 1e-6
        assert comparison.avalanche.strategy is PayoffStrategy.AVALANCHE
        assert comparison.snowball.strategy is PayoffStrategy.SNOWBALL

    def test_runs_do_not_share_state(self, debt_factory):
        """Each strategy starts from the original promo countdown and balances."""
        debts = [
            debt_factory(
                id="promo",
                balance=1500.0,
                apr=0.0,
                minimum_payment=40.0,
                has_promo=True,
                promo_months_remaining=4,
                post_promo_apr=22.0,
            ),
            debt_factory(id="card", balance=800.0, apr=18.0, minimum_payment=30.0),
        ]

        comparison = compare_strategies(debts=debts, extra_payment=75, start_date=START)
        alone = simulate_debts(debts=debts, extra_payment=75, strategy="snowball", start_date=START)

        assert comparison.snowball.months_to_payoff == alone.months_to_payoff
        assert_float_equal(comparison.snowball.total_interest, alone.total_interest)
        assert sum(e.interest for e in comparison.snowball.schedule if e.debt_id == "promo" and e.month <= 4) == 0

    def test_empty_comparison(self):
        comparison = compare_strategies(debts=[], extra_payment=100, start_date=START)

        assert comparison.interest_saved == 0
        assert comparison.months_saved == 0
        assert comparison.avalanche.payoff_date == START

    def test_normalize_creates_fresh_state_each_time(self, debt_factory):
        debt = debt_factory(has_promo=True, promo_months_remaining=2)

        first = normalize_debt(debt)
        second = normalize_debt(debt)

        assert first is not second
        assert first.promo is not second.promo
