"""Variable period earnings: overtime pay and unpaid-day deductions.

Daily and hourly rates derive from the basic salary and the standard working
time in the rule set (22 days of 8 hours), not from calendar days.
"""

from typing import Union

from .schemas import OvertimeType, PeriodEarnings
from .taxes.schemas import TaxRules
from .taxes.withholding import round_cents

MAX_UNPAID_DAYS = 31


def calc_period_earnings(
    basic_salary: float,
    rules: TaxRules,
    overtime_hours: float = 0,
    overtime_type: Union[OvertimeType, str] = OvertimeType.WEEKDAY,
    unpaid_days: int = 0,
) -> PeriodEarnings:
    """Convert overtime hours and unpaid days into money.

    Args:
        basic_salary: Monthly basic salary
        rules: Effective tax rules (working time and overtime multipliers)
        overtime_hours: Hours of overtime worked in the period
        overtime_type: WEEKDAY or HOLIDAY, selects the multiplier
        unpaid_days: Days of unpaid leave, clamped to 0..31

    Returns:
        PeriodEarnings. unpaid_deduction never exceeds the basic salary.
    """
    working_time = rules.working_time
    basic = max(0.0, basic_salary or 0.0)
    hours = max(0.0, overtime_hours or 0.0)
    days = min(max(int(unpaid_days or 0), 0), MAX_UNPAID_DAYS)

    overtime_type = OvertimeType(overtime_type)
    multiplier = working_time.overtime_multipliers[overtime_type.value]

    daily_rate = basic / working_time.days_per_month
    hourly_rate = daily_rate / working_time.hours_per_day

    overtime_pay = hourly_rate * hours * multiplier
    unpaid_deduction = min(daily_rate * days, basic)

    return PeriodEarnings(
        working_days=working_time.days_per_month,
        daily_rate=round_cents(daily_rate),
        hourly_rate=round_cents(hourly_rate),
        overtime_hours=hours,
        overtime_multiplier=multiplier,
        overtime_pay=round_cents(overtime_pay),
        unpaid_days=days,
        unpaid_deduction=round_cents(unpaid_deduction),
    )
