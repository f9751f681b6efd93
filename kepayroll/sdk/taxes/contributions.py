"""Statutory contribution calculations: NSSF, SHIF and Housing Levy.

All three are matched contributions: the employer pays alongside the
employee. Amounts are rounded to cents at each output.
"""

from ..schemas import HousingLevyResult, NssfResult, NssfTier, ShifResult
from .schemas import TaxRules
from .withholding import round_cents


def calc_nssf(pensionable_pay: float, rules: TaxRules) -> NssfResult:
    """Calculate NSSF contributions for a month.

    Tier I covers pensionable pay up to the Lower Earnings Limit, Tier II the
    slice between LEL and the Upper Earnings Limit. Pay above UEL is not
    pensionable, which caps the contribution at rate * UEL. Pay below LEL
    contributes on the actual amount with no minimum.

    Args:
        pensionable_pay: Monthly pensionable pay (negative is treated as 0)
        rules: Effective tax rules

    Returns:
        NssfResult with per-tier breakdown
    """
    nssf = rules.nssf
    pay = max(0.0, pensionable_pay or 0.0)
    capped = min(pay, nssf.upper_earnings_limit)

    tiers = []
    bounds = [
        (1, "Tier I", 0.0, nssf.lower_earnings_limit),
        (2, "Tier II", nssf.lower_earnings_limit, nssf.upper_earnings_limit),
    ]
    employee_total = 0.0
    employer_total = 0.0
    for number, name, lower, upper in bounds:
        in_tier = min(capped, upper) - lower
        if in_tier <= 0:
            continue
        employee = round_cents(in_tier * nssf.employee_rate)
        employer = round_cents(in_tier * nssf.employer_rate)
        employee_total += employee
        employer_total += employer
        tiers.append(NssfTier(
            tier=number,
            name=name,
            lower=lower,
            upper=upper,
            pensionable_amount=round_cents(in_tier),
            employee_contribution=employee,
            employer_contribution=employer,
        ))

    employee_total = round_cents(employee_total)
    employer_total = round_cents(employer_total)

    return NssfResult(
        pensionable_pay=round_cents(pay),
        employee_contribution=employee_total,
        employer_contribution=employer_total,
        total_contribution=round_cents(employee_total + employer_total),
        tiers=tiers,
        capped_at_maximum=pay > nssf.upper_earnings_limit,
    )


def calc_shif(gross_salary: float, rules: TaxRules) -> ShifResult:
    """Calculate SHIF contributions for a month.

    A flat percentage of gross with no ceiling. When gross is positive and
    the percentage falls below the statutory floor, the floor applies. Zero
    gross contributes nothing.
    """
    shif = rules.shif
    gross = max(0.0, gross_salary or 0.0)

    employee = gross * shif.employee_rate
    employer = gross * shif.employer_rate
    is_minimum_applied = False

    if gross > 0 and employee < shif.minimum_contribution:
        employee = shif.minimum_contribution
        is_minimum_applied = True
    if gross > 0 and employer < shif.minimum_contribution:
        employer = shif.minimum_contribution

    employee = round_cents(employee)
    employer = round_cents(employer)
    effective_rate = round_cents(employee / gross * 100) if gross > 0 else 0.0

    return ShifResult(
        gross_salary=round_cents(gross),
        employee_contribution=employee,
        employer_contribution=employer,
        total_contribution=round_cents(employee + employer),
        is_minimum_applied=is_minimum_applied,
        effective_rate=effective_rate,
    )


def calc_housing_levy(gross_pay: float, rules: TaxRules) -> HousingLevyResult:
    """Calculate the Affordable Housing Levy for a month (no ceiling)."""
    gross = max(0.0, gross_pay or 0.0)
    employee = round_cents(gross * rules.housing_levy.employee_rate)
    employer = round_cents(gross * rules.housing_levy.employer_rate)

    return HousingLevyResult(
        gross_pay=round_cents(gross),
        employee_contribution=employee,
        employer_contribution=employer,
        total_contribution=round_cents(employee + employer),
    )
