"""PAYE income tax withholding calculations.

Applies the progressive monthly PAYE bands from the effective rule set to
taxable income, then subtracts personal relief and insurance relief. The
calculator never raises on business data: missing or negative taxable income
is treated as zero, because one malformed record must not stop a payroll run.
"""

import math
from typing import List, Optional

from ..schemas import InsurancePremiums, PayeBandLine, PayeResult
from .schemas import TaxRules


def round_cents(amount: float) -> float:
    """Round half-up to 2 decimal places (standard payroll rounding).

    Matches Math.round(x * 100) / 100, so .5 of a cent always rounds toward
    positive infinity. Python's round() would round half to even.
    Example: 1787.505 -> 1787.51, -2.505 -> -2.50
    """
    return math.floor(amount * 100 + 0.5) / 100


def _clamp(amount: Optional[float]) -> float:
    if amount is None:
        return 0.0
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or value < 0:
        return 0.0
    return value


def apply_tax_bands(taxable_income: float, rules: TaxRules) -> List[PayeBandLine]:
    """Split taxable income across the PAYE bands.

    Each band taxes only the slice of income between its lower and upper
    bound; the 'over' band takes everything above its lower bound.
    """
    income = _clamp(taxable_income)
    lines = []
    previous_bracket_max = 0.0

    for number, band in enumerate(rules.paye.bands, start=1):
        if band.up_to is not None:
            lower, upper = previous_bracket_max, band.up_to
            in_band = min(income, upper) - lower
            previous_bracket_max = upper
        else:
            lower, upper = band.over, None
            in_band = income - lower

        if in_band <= 0:
            continue

        lines.append(PayeBandLine(
            band=number,
            lower=lower,
            upper=upper,
            rate=band.rate,
            taxable_amount=round_cents(in_band),
            tax=round_cents(in_band * band.rate),
        ))

    return lines


def calc_gross_tax(taxable_income: float, rules: TaxRules) -> float:
    """Tax charged on taxable income before any relief."""
    income = _clamp(taxable_income)
    tax = 0.0
    previous_bracket_max = 0.0

    for band in rules.paye.bands:
        if band.up_to is not None:
            if income > previous_bracket_max:
                tax += (min(income, band.up_to) - previous_bracket_max) * band.rate
            previous_bracket_max = band.up_to
        elif income > band.over:
            tax += (income - band.over) * band.rate

    return round_cents(tax)


def calc_insurance_relief(premiums: Optional[InsurancePremiums], rules: TaxRules) -> float:
    """Insurance relief before it is limited by the tax it offsets.

    15% of qualifying monthly premiums, capped at the monthly maximum.
    """
    if premiums is None:
        return 0.0
    relief = premiums.total * rules.reliefs.insurance_relief_rate
    return round_cents(min(relief, rules.reliefs.insurance_relief_cap))


def calc_marginal_rate(taxable_income: float, rules: TaxRules) -> float:
    """Rate (as a percentage) applied to the next shilling of taxable income."""
    income = _clamp(taxable_income)
    if income <= 0:
        return 0.0

    for band in rules.paye.bands:
        if band.up_to is not None and income <= band.up_to:
            return round_cents(band.rate * 100)
    return round_cents(rules.paye.bands[-1].rate * 100)


def calc_paye(
    taxable_income: Optional[float],
    rules: TaxRules,
    insurance_premiums: Optional[InsurancePremiums] = None,
    is_disabled: bool = False,
) -> PayeResult:
    """Calculate monthly PAYE.

    Args:
        taxable_income: Income after allowable deductions (None/negative -> 0)
        rules: Effective tax rules
        insurance_premiums: Optional monthly premiums for insurance relief
        is_disabled: Apply the disability exemption before banding

    Returns:
        PayeResult with gross tax, reliefs, PAYE, effective rate and bands

    Note:
        Personal relief never exceeds gross tax, and insurance relief never
        exceeds what is left after personal relief, so PAYE is never negative.
    """
    income = round_cents(_clamp(taxable_income))

    exemption = 0.0
    if is_disabled:
        exemption = min(income, rules.reliefs.disability_exemption)
    chargeable = round_cents(income - exemption)

    gross_tax = calc_gross_tax(chargeable, rules)
    bands = apply_tax_bands(chargeable, rules)

    personal_relief = round_cents(min(rules.reliefs.personal_relief, gross_tax))
    remaining = round_cents(max(0.0, gross_tax - personal_relief))
    insurance_relief = round_cents(min(calc_insurance_relief(insurance_premiums, rules), remaining))
    paye = round_cents(max(0.0, gross_tax - personal_relief - insurance_relief))

    effective_rate = round_cents(paye / income * 100) if income > 0 else 0.0

    return PayeResult(
        taxable_income=income,
        disability_exemption=round_cents(exemption),
        gross_tax=gross_tax,
        personal_relief=personal_relief,
        insurance_relief=insurance_relief,
        paye=paye,
        effective_rate=effective_rate,
        bands=bands,
    )
