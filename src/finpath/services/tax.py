"""UK income tax, National Insurance and student loan calculators.

Figures come from :mod:`finpath.constants.tax_rates` (2024/25). All amounts
are annual and rounded to pence.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from ..constants.tax_rates import (
    NATIONAL_INSURANCE_BANDS,
    SELF_ASSESSMENT_CRITERIA,
    STANDARD_PERSONAL_ALLOWANCE,
    STUDENT_LOAN_THRESHOLDS,
    TAX_BANDS_ENGLAND_NI,
    TAX_BANDS_SCOTLAND,
    TAX_BANDS_WALES,
)
from ..models.plan import Income, StudentLoanPlan, TaxConfig, TaxSystem

# Flat-rate codes charge every pound at a single rate.
FLAT_RATE_CODES = {"BR": 0.20, "D0": 0.40, "D1": 0.45}
NO_TAX_ALLOWANCE = 999999

_LEADING_DIGITS = re.compile(r"^\d+")


@dataclass(slots=True, frozen=True)
class TaxCode:
    """Parsed PAYE tax code."""

    code: str
    personal_allowance: int
    is_k: bool = False  # negative allowance, tax owed from earlier years
    is_nt: bool = False

    @property
    def flat_rate(self) -> float | None:
        return FLAT_RATE_CODES.get(self.code)


@dataclass(slots=True, frozen=True)
class TaxBreakdown:
    gross_annual: float
    income_tax: float
    national_insurance: float
    student_loan: float
    net_annual: float

    @property
    def net_monthly(self) -> float:
        return self.net_annual / 12

    @property
    def effective_tax_rate(self) -> float:
        if self.gross_annual <= 0:
            return 0.0
        return (self.gross_annual - self.net_annual) / self.gross_annual * 100


def _round_pence(amount: float) -> float:
    return round(amount + 1e-9, 2)


def _leading_number(text: str) -> int | None:
    match = _LEADING_DIGITS.match(text)
    return int(match.group()) if match else None


def parse_tax_code(tax_code: str) -> TaxCode:
    """Parse codes such as ``1257L``, ``K497``, ``BR``, ``NT``, ``D0``.

    Unrecognised codes fall back to the standard personal allowance.
    """

    code = tax_code.strip().upper()

    if code == "NT":
        return TaxCode(code=code, personal_allowance=NO_TAX_ALLOWANCE, is_nt=True)
    if code in FLAT_RATE_CODES:
        return TaxCode(code=code, personal_allowance=0)

    if code.startswith("K"):
        number = _leading_number(code[1:])
        if number is None:
            return TaxCode(code=code, personal_allowance=STANDARD_PERSONAL_ALLOWANCE)
        return TaxCode(code=code, personal_allowance=-number * 10, is_k=True)

    if code.endswith("L"):
        number = _leading_number(code[:-1])
        if number is None:
            return TaxCode(code=code, personal_allowance=STANDARD_PERSONAL_ALLOWANCE)
        return TaxCode(code=code, personal_allowance=number * 10)

    return TaxCode(code=code, personal_allowance=STANDARD_PERSONAL_ALLOWANCE)


def _tapered_allowance(gross_annual: float, personal_allowance: int, taper_threshold: int) -> float:
    """Reduce the allowance by £1 for every £2 earned over the taper threshold."""

    if gross_annual <= taper_threshold:
        return personal_allowance
    reduction = math.floor((gross_annual - taper_threshold) / 2)
    return max(0, personal_allowance - reduction)


def _income_tax_rest_of_uk(gross_annual: float, personal_allowance: int, bands: dict) -> float:
    adjusted_pa = _tapered_allowance(
        gross_annual, personal_allowance, bands["personal_allowance_taper_threshold"]
    )
    taxable = max(0.0, gross_annual - adjusted_pa)
    tax = 0.0

    basic_band = bands["basic_rate"]["threshold"] - bands["personal_allowance"]
    if taxable > 0:
        tax += min(taxable, basic_band) * bands["basic_rate"]["rate"]

    if taxable > basic_band:
        higher_band = bands["higher_rate"]["threshold"] - bands["basic_rate"]["threshold"]
        tax += min(taxable - basic_band, higher_band) * bands["higher_rate"]["rate"]

    additional_start = bands["higher_rate"]["threshold"] - adjusted_pa
    if taxable > additional_start:
        tax += (taxable - additional_start) * bands["additional_rate"]["rate"]

    return _round_pence(tax)


def _income_tax_scotland(gross_annual: float, personal_allowance: int) -> float:
    bands = TAX_BANDS_SCOTLAND
    pa = bands["personal_allowance"]
    adjusted_pa = _tapered_allowance(
        gross_annual, personal_allowance, bands["personal_allowance_taper_threshold"]
    )
    taxable = max(0.0, gross_annual - adjusted_pa)
    if taxable == 0:
        return 0.0

    tax = 0.0
    starter_band = bands["starter_rate"]["threshold"] - pa
    tax += min(taxable, starter_band) * bands["starter_rate"]["rate"]

    if taxable > starter_band:
        basic_band = bands["basic_rate"]["threshold"] - bands["starter_rate"]["threshold"]
        tax += min(taxable - starter_band, basic_band) * bands["basic_rate"]["rate"]

    intermediate_start = bands["basic_rate"]["threshold"] - pa
    if taxable > intermediate_start:
        intermediate_band = (
            bands["intermediate_rate"]["threshold"] - bands["basic_rate"]["threshold"]
        )
        tax += (
            min(taxable - intermediate_start, intermediate_band)
            * bands["intermediate_rate"]["rate"]
        )

    higher_start = bands["intermediate_rate"]["threshold"] - pa
    if taxable > higher_start:
        higher_band = bands["higher_rate"]["threshold"] - bands["intermediate_rate"]["threshold"]
        tax += min(taxable - higher_start, higher_band) * bands["higher_rate"]["rate"]

    top_start = bands["higher_rate"]["threshold"] - adjusted_pa
    if taxable > top_start:
        tax += (taxable - top_start) * bands["top_rate"]["rate"]

    return _round_pence(tax)


def calculate_income_tax(
    gross_annual: float, tax_code: str, tax_system: TaxSystem | str = TaxSystem.ENGLAND_NI
) -> float:
    """Annual income tax for ``gross_annual`` under ``tax_code``."""

    if gross_annual <= 0:
        return 0.0

    parsed = parse_tax_code(tax_code)
    if parsed.is_nt:
        return 0.0
    if parsed.flat_rate is not None:
        return _round_pence(gross_annual * parsed.flat_rate)

    tax_system = TaxSystem(tax_system)
    if tax_system is TaxSystem.SCOTLAND:
        return _income_tax_scotland(gross_annual, parsed.personal_allowance)
    if tax_system is TaxSystem.WALES:
        return _income_tax_rest_of_uk(gross_annual, parsed.personal_allowance, TAX_BANDS_WALES)
    return _income_tax_rest_of_uk(gross_annual, parsed.personal_allowance, TAX_BANDS_ENGLAND_NI)


def calculate_national_insurance(gross_annual: float) -> float:
    """Class 1 employee contributions."""

    if gross_annual <= 0:
        return 0.0

    bands = NATIONAL_INSURANCE_BANDS
    ni = 0.0
    if gross_annual > bands["primary_threshold"]:
        in_band = min(
            gross_annual - bands["primary_threshold"],
            bands["upper_earnings_limit"] - bands["primary_threshold"],
        )
        ni += in_band * bands["class1_rate"]
    if gross_annual > bands["upper_earnings_limit"]:
        ni += (gross_annual - bands["upper_earnings_limit"]) * bands["class1_rate_above"]
    return _round_pence(ni)


def calculate_student_loan_repayment(
    gross_annual: float, plan: StudentLoanPlan | str, has_postgrad: bool = False
) -> float:
    """Undergraduate plan repayment plus any postgraduate loan repayment."""

    if gross_annual <= 0:
        return 0.0

    plan = StudentLoanPlan(plan)
    total = 0.0
    if plan not in (StudentLoanPlan.NONE, StudentLoanPlan.POSTGRAD):
        terms = STUDENT_LOAN_THRESHOLDS[plan.value]
        if gross_annual > terms["threshold"]:
            total += (gross_annual - terms["threshold"]) * terms["rate"]

    if has_postgrad:
        terms = STUDENT_LOAN_THRESHOLDS["postgrad"]
        if gross_annual > terms["threshold"]:
            total += (gross_annual - terms["threshold"]) * terms["rate"]

    return _round_pence(total)


def tax_breakdown(gross_annual: float, tax_config: TaxConfig) -> TaxBreakdown:
    """Deductions and net pay for one salary under ``tax_config``."""

    if gross_annual <= 0:
        return TaxBreakdown(
            gross_annual=gross_annual,
            income_tax=0.0,
            national_insurance=0.0,
            student_loan=0.0,
            net_annual=0.0,
        )

    income_tax = calculate_income_tax(gross_annual, tax_config.tax_code, tax_config.tax_system)
    ni = calculate_national_insurance(gross_annual)
    student_loan = calculate_student_loan_repayment(
        gross_annual, tax_config.student_loan_plan, tax_config.postgraduate_loan
    )
    net_annual = max(0.0, _round_pence(gross_annual - income_tax - ni - student_loan))
    return TaxBreakdown(
        gross_annual=gross_annual,
        income_tax=income_tax,
        national_insurance=ni,
        student_loan=student_loan,
        net_annual=net_annual,
    )


def calculate_net_from_gross(gross_annual: float, tax_config: TaxConfig) -> float:
    return tax_breakdown(gross_annual, tax_config).net_annual


def needs_self_assessment(
    income: Income,
    tax_config: TaxConfig,
    *,
    rental_income: float = 0.0,
    savings_interest: float = 0.0,
    dividend_income: float = 0.0,
    capital_gains: float = 0.0,
    untaxed_income: float = 0.0,
    claims_child_benefit: bool = False,
) -> bool:
    """Whether the household probably has to file a self-assessment return.

    ``income`` holds monthly net figures; they are annualised before being
    compared with the annual thresholds.
    """

    criteria = SELF_ASSESSMENT_CRITERIA
    annual_income = income.total * 12

    if tax_config.is_self_employed:
        return True
    if annual_income >= criteria["high_income"]:
        return True

    other_sources = (
        (rental_income, criteria["rental_income"]),
        (savings_interest, criteria["savings_interest"]),
        (dividend_income, criteria["dividend_income"]),
        (capital_gains, criteria["capital_gains"]),
        (untaxed_income, criteria["untaxed_income"]),
    )
    if any(amount and amount >= threshold for amount, threshold in other_sources):
        return True

    if claims_child_benefit and annual_income >= criteria["child_benefit_income"]:
        return True

    return tax_config.has_other_income


__all__ = [
    "TaxBreakdown",
    "TaxCode",
    "calculate_income_tax",
    "calculate_national_insurance",
    "calculate_net_from_gross",
    "calculate_student_loan_repayment",
    "needs_self_assessment",
    "parse_tax_code",
    "tax_breakdown",
]
