"""Aggregates over payroll results: run summaries, year-to-date totals, P10.

All functions take a list of CalculationResult and return pydantic models.
Rendering (tables, CSV) is left to the caller.
"""

import logging
from datetime import date
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .employee import is_valid_kra_pin
from .schemas import CalculationResult
from .taxes import round_cents

logger = logging.getLogger(__name__)


class DeductionTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    paye: float = 0
    nssf: float = 0
    shif: float = 0
    housing_levy: float = 0
    custom: float = 0
    personal_relief: float = 0
    insurance_relief: float = 0
    total_allowable: float = Field(default=0, description="Deductions allowed before PAYE, incl. mortgage interest")
    total: float = 0


class EmployerTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    nssf: float = 0
    shif: float = 0
    housing_levy: float = 0
    total: float = 0


class PayrollSummary(BaseModel):
    """Totals and averages for one payroll run."""

    model_config = ConfigDict(frozen=True)

    employee_count: int = 0
    total_gross_pay: float = 0
    total_net_pay: float = 0
    total_deductions: float = 0
    total_unrecovered: float = 0
    average_gross_pay: float = 0
    average_net_pay: float = 0
    deductions: DeductionTotals = Field(default_factory=DeductionTotals)
    employer_contributions: EmployerTotals = Field(default_factory=EmployerTotals)
    total_employment_cost: float = Field(default=0, description="Gross pay plus employer contributions")


class YtdTotals(BaseModel):
    """Year-to-date sums for one employee (or any set of results)."""

    model_config = ConfigDict(frozen=True)

    months_covered: int = 0
    gross_pay: float = 0
    taxable_income: float = 0
    paye: float = 0
    nssf: float = 0
    shif: float = 0
    housing_levy: float = 0
    personal_relief: float = 0
    insurance_relief: float = 0
    custom_deductions: float = 0
    total_deductions: float = 0
    net_pay: float = 0


class P10Row(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_id: str
    name: Optional[str] = None
    kra_pin: Optional[str] = None
    basic_salary: float
    allowances: float
    gross_pay: float
    taxable_income: float
    paye: float
    nssf: float
    shif: float
    housing_levy: float
    other_deductions: float
    total_deductions: float
    net_pay: float


class P10Totals(BaseModel):
    model_config = ConfigDict(frozen=True)

    basic_salary: float = 0
    allowances: float = 0
    gross_pay: float = 0
    taxable_income: float = 0
    paye: float = 0
    nssf: float = 0
    shif: float = 0
    housing_levy: float = 0
    other_deductions: float = 0
    total_deductions: float = 0
    net_pay: float = 0


class P10Return(BaseModel):
    """Monthly employer PAYE return (KRA P10) as data."""

    model_config = ConfigDict(frozen=True)

    employer_name: str
    employer_pin: str
    period: str = Field(..., description="Tax period, YYYY-MM")
    rows: List[P10Row] = Field(default_factory=list)
    totals: P10Totals = Field(default_factory=P10Totals)
    employer_contributions: EmployerTotals = Field(default_factory=EmployerTotals)
    missing_kra_pins: List[str] = Field(
        default_factory=list, description="Employee ids with no KRA PIN on record"
    )

    @field_validator("period")
    @classmethod
    def check_period(cls, v: str) -> str:
        parts = v.split("-")
        if len(parts) != 2 or not all(p.isdigit() for p in parts) or not 1 <= int(parts[1]) <= 12:
            raise ValueError(f"period must be YYYY-MM, got '{v}'")
        return f"{int(parts[0]):04d}-{int(parts[1]):02d}"


def _total(values: Iterable[float]) -> float:
    return round_cents(sum(values))


def _employer_totals(results: List[CalculationResult]) -> EmployerTotals:
    nssf = _total(r.employer_contributions.nssf for r in results)
    shif = _total(r.employer_contributions.shif for r in results)
    housing_levy = _total(r.employer_contributions.housing_levy for r in results)
    return EmployerTotals(
        nssf=nssf,
        shif=shif,
        housing_levy=housing_levy,
        total=round_cents(nssf + shif + housing_levy),
    )


def summarize_payroll(results: Iterable[CalculationResult]) -> PayrollSummary:
    """Summarize a payroll run. An empty run gives an all-zero summary."""
    results = list(results)
    if not results:
        return PayrollSummary()

    count = len(results)
    gross = _total(r.earnings.gross_pay for r in results)
    net = _total(r.net_pay for r in results)

    deductions = DeductionTotals(
        paye=_total(r.deductions.paye for r in results),
        nssf=_total(r.deductions.nssf for r in results),
        shif=_total(r.deductions.shif for r in results),
        housing_levy=_total(r.deductions.housing_levy for r in results),
        custom=_total(r.deductions.custom_deductions for r in results),
        personal_relief=_total(r.deductions.personal_relief for r in results),
        insurance_relief=_total(r.deductions.insurance_relief for r in results),
        total_allowable=_total(r.deductions.total_allowable_deductions for r in results),
        total=_total(r.deductions.total_deductions for r in results),
    )
    employer = _employer_totals(results)

    return PayrollSummary(
        employee_count=count,
        total_gross_pay=gross,
        total_net_pay=net,
        total_deductions=deductions.total,
        total_unrecovered=_total(r.deductions.unrecovered_deductions for r in results),
        average_gross_pay=round_cents(gross / count),
        average_net_pay=round_cents(net / count),
        deductions=deductions,
        employer_contributions=employer,
        total_employment_cost=round_cents(gross + employer.total),
    )


def ytd_totals(
    results: Iterable[CalculationResult],
    year: Optional[int] = None,
    through: Optional[date] = None,
) -> YtdTotals:
    """Sum results into year-to-date totals.

    Args:
        results: Monthly results, typically for one employee
        year: Keep only results whose as_of falls in this year
        through: Keep only results dated on or before this date

    Results without an as_of date are kept only when no filter is given.
    months_covered counts distinct (year, month) periods, or results when
    they carry no dates.
    """
    selected = []
    for r in results:
        if year is not None or through is not None:
            if r.as_of is None:
                continue
            if year is not None and r.as_of.year != year:
                continue
            if through is not None and r.as_of > through:
                continue
        selected.append(r)

    if not selected:
        return YtdTotals()

    periods = {(r.as_of.year, r.as_of.month) for r in selected if r.as_of is not None}
    undated = sum(1 for r in selected if r.as_of is None)

    return YtdTotals(
        months_covered=len(periods) + undated,
        gross_pay=_total(r.earnings.gross_pay for r in selected),
        taxable_income=_total(r.deductions.taxable_income for r in selected),
        paye=_total(r.deductions.paye for r in selected),
        nssf=_total(r.deductions.nssf for r in selected),
        shif=_total(r.deductions.shif for r in selected),
        housing_levy=_total(r.deductions.housing_levy for r in selected),
        personal_relief=_total(r.deductions.personal_relief for r in selected),
        insurance_relief=_total(r.deductions.insurance_relief for r in selected),
        custom_deductions=_total(r.deductions.custom_deductions for r in selected),
        total_deductions=_total(r.deductions.total_deductions for r in selected),
        net_pay=_total(r.net_pay for r in selected),
    )


def build_p10_return(
    results: Iterable[CalculationResult],
    employer_name: str,
    employer_pin: str,
    period: str,
) -> P10Return:
    """Build P10 return data for one tax period.

    Args:
        results: One result per employee for the period
        employer_name: Registered employer name
        employer_pin: Employer KRA PIN
        period: Tax period as YYYY-MM

    Raises:
        ValueError: Invalid employer PIN or period
    """
    pin = employer_pin.strip().upper()
    if not is_valid_kra_pin(pin):
        raise ValueError(f"invalid employer KRA PIN '{employer_pin}'")

    results = list(results)
    rows = [
        P10Row(
            employee_id=r.employee_id,
            name=r.name,
            kra_pin=r.kra_pin,
            basic_salary=r.earnings.basic_salary,
            allowances=r.earnings.allowances,
            gross_pay=r.earnings.gross_pay,
            taxable_income=r.deductions.taxable_income,
            paye=r.deductions.paye,
            nssf=r.deductions.nssf,
            shif=r.deductions.shif,
            housing_levy=r.deductions.housing_levy,
            other_deductions=r.deductions.custom_deductions,
            total_deductions=r.deductions.total_deductions,
            net_pay=r.net_pay,
        )
        for r in results
    ]

    totals = P10Totals(**{
        field: _total(getattr(row, field) for row in rows)
        for field in P10Totals.model_fields
    })

    missing = [row.employee_id for row in rows if not row.kra_pin]
    if missing:
        logger.warning(f"P10 {period}: {len(missing)} employee(s) without a KRA PIN: {', '.join(missing)}")

    return P10Return(
        employer_name=employer_name,
        employer_pin=pin,
        period=period,
        rows=rows,
        totals=totals,
        employer_contributions=_employer_totals(results),
        missing_kra_pins=missing,
    )
