"""Payroll calculation: one employee-period, or a batch of them.

Order of calculation (Tax Laws (Amendment) Act, December 2024):

    1. Overtime pay and unpaid-day deduction from the basic salary
    2. Gross pay = basic + allowances + overtime + bonuses - unpaid deduction
    3. NSSF, SHIF and Housing Levy (employee and employer shares)
    4. Taxable income = gross - allowable contributions - mortgage interest relief
       (which contributions are allowable comes from the effective rule set)
    5. PAYE = band tax - personal relief - insurance relief
    6. Total deductions = NSSF + SHIF + Housing Levy + PAYE + custom deductions
    7. Net pay = gross - total deductions

Net pay is never negative. Deductions are withheld in the order above
(NSSF, SHIF, Housing Levy, PAYE, then custom deductions), each only up to
the pay still available, so total_deductions never exceeds gross pay. The
per-item amounts in `deductions` are what was withheld; the full calculated
contributions stay in `breakdown`, and whatever could not be withheld is
reported as unrecovered_deductions.

The calculation never reads the clock: the pay period is an explicit
`as_of` argument (or the caller passes the TaxRules directly).
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .earnings import calc_period_earnings
from .employee import build_compensation_profile, build_period_inputs, check_period_inputs
from .schemas import (
    BatchFailure,
    BatchResult,
    Breakdown,
    CalculationResult,
    Calculations,
    CompensationProfile,
    Deductions,
    Earnings,
    EmployerContributions,
    PeriodInputs,
)
from .taxes import (
    TaxRules,
    calc_housing_levy,
    calc_nssf,
    calc_paye,
    calc_shif,
    load_tax_rules,
    round_cents,
)
from .taxes.rules import parse_period_date

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

EmployeeRecord = Union[CompensationProfile, Dict[str, Any]]
PeriodRecord = Union[PeriodInputs, Dict[str, Any], None]


def resolve_rules(
    rules: Optional[TaxRules] = None,
    as_of: Union[date, str, None] = None,
) -> TaxRules:
    """Return the given rules, or load the set effective on as_of.

    Raises:
        ValueError: If neither rules nor as_of is given
        TaxRulesNotFoundError: If no rules are effective on as_of
    """
    if rules is not None:
        return rules
    if as_of is None:
        raise ValueError("either rules or as_of is required to calculate payroll")
    return load_tax_rules(as_of)


def calculate_payroll(
    profile: CompensationProfile,
    inputs: Optional[PeriodInputs] = None,
    rules: Optional[TaxRules] = None,
    as_of: Union[date, str, None] = None,
) -> CalculationResult:
    """Calculate pay, statutory deductions and net pay for one employee-period.

    Args:
        profile: Validated compensation profile
        inputs: Period inputs (None means no overtime, bonuses or deductions)
        rules: Tax rules to apply; loaded from as_of when omitted
        as_of: Pay period date ('YYYY-MM' or 'YYYY-MM-DD' accepted)

    Returns:
        CalculationResult. Same arguments always give an identical result.
    """
    rules = resolve_rules(rules, as_of)
    inputs = inputs or PeriodInputs()
    period_date = parse_period_date(as_of) if as_of is not None else None

    # 1. Overtime and unpaid days
    period = calc_period_earnings(
        profile.basic_salary,
        rules,
        overtime_hours=inputs.overtime_hours,
        overtime_type=inputs.overtime_type,
        unpaid_days=inputs.unpaid_days,
    )

    # 2. Gross pay
    basic = round_cents(profile.basic_salary)
    allowances = round_cents(profile.allowances)
    bonuses = round_cents(inputs.bonuses)
    gross = round_cents(max(0.0, basic + allowances + period.overtime_pay + bonuses - period.unpaid_deduction))

    # 3. Contributions
    if rules.nssf.pensionable_base == "basic":
        pensionable = round_cents(max(0.0, basic - period.unpaid_deduction))
    else:
        pensionable = gross
    nssf = calc_nssf(pensionable, rules)
    shif = calc_shif(gross, rules)
    housing_levy = calc_housing_levy(gross, rules)

    # 4. Taxable income
    employee_shares = {
        "nssf": nssf.employee_contribution,
        "shif": shif.employee_contribution,
        "housing_levy": housing_levy.employee_contribution,
    }
    allowable = sum(employee_shares[name] for name in rules.paye.allowable_deductions)
    mortgage_relief = round_cents(min(profile.mortgage_interest or 0.0, rules.reliefs.mortgage_interest_cap))
    total_allowable = round_cents(allowable + mortgage_relief)
    taxable_income = round_cents(max(0.0, gross - total_allowable))

    # 5. PAYE
    paye = calc_paye(
        taxable_income,
        rules,
        insurance_premiums=profile.insurance_premiums,
        is_disabled=profile.is_disabled,
    )

    # 6. Totals: withhold in calculation order, never more than gross pay
    owed = dict(employee_shares, paye=paye.paye, custom=round_cents(inputs.custom_deductions))
    withheld = {}
    available = gross
    for name, amount in owed.items():
        withheld[name] = round_cents(min(amount, available))
        available = round_cents(available - withheld[name])
    unrecovered = round_cents(sum(owed.values()) - sum(withheld.values()))
    custom = withheld.pop("custom")
    total_statutory = round_cents(sum(withheld.values()))
    total_deductions = round_cents(total_statutory + custom)

    # 7. Net pay
    net_pay = round_cents(gross - total_deductions)

    if unrecovered > 0:
        logger.warning(
            f"{profile.employee_id}: deductions exceed gross pay {gross:,.2f}; "
            f"{unrecovered:,.2f} could not be withheld"
        )
    logger.debug(
        f"{profile.employee_id}: gross={gross:.2f} taxable={taxable_income:.2f} "
        f"paye={paye.paye:.2f} total_deductions={total_deductions:.2f} net={net_pay:.2f}"
    )

    employer_total = round_cents(
        nssf.employer_contribution + shif.employer_contribution + housing_levy.employer_contribution
    )

    return CalculationResult(
        employee_id=profile.employee_id,
        name=profile.name,
        kra_pin=profile.kra_pin,
        as_of=period_date,
        rules_effective=rules.effective,
        earnings=Earnings(
            basic_salary=basic,
            allowances=allowances,
            overtime=period.overtime_pay,
            bonuses=bonuses,
            gross_pay=gross,
        ),
        deductions=Deductions(
            nssf=withheld["nssf"],
            shif=withheld["shif"],
            housing_levy=withheld["housing_levy"],
            mortgage_interest_relief=mortgage_relief,
            total_allowable_deductions=total_allowable,
            taxable_income=taxable_income,
            gross_tax=paye.gross_tax,
            personal_relief=paye.personal_relief,
            insurance_relief=paye.insurance_relief,
            disability_exemption=paye.disability_exemption,
            paye=withheld["paye"],
            custom_deductions=custom,
            unrecovered_deductions=unrecovered,
            total_statutory=total_statutory,
            total_deductions=total_deductions,
        ),
        employer_contributions=EmployerContributions(
            nssf=nssf.employer_contribution,
            shif=shif.employer_contribution,
            housing_levy=housing_levy.employer_contribution,
            total=employer_total,
        ),
        net_pay=net_pay,
        calculations=Calculations(
            working_days=period.working_days,
            daily_rate=period.daily_rate,
            hourly_rate=period.hourly_rate,
            unpaid_deduction=period.unpaid_deduction,
            effective_tax_rate=paye.effective_rate,
        ),
        breakdown=Breakdown(
            paye=paye,
            nssf=nssf,
            shif=shif,
            housing_levy=housing_levy,
            period=period,
        ),
    )


def _record_employee_id(record: Any) -> Optional[str]:
    if isinstance(record, CompensationProfile):
        return record.employee_id
    if isinstance(record, dict):
        for key in ("employee_id", "employeeId", "id"):
            if record.get(key) is not None:
                return str(record[key])
    return None


def _calculate_entry(
    entry: Tuple[EmployeeRecord, PeriodRecord],
    rules: TaxRules,
    as_of: Union[date, str, None],
) -> Union[CalculationResult, BatchFailure]:
    # A bare record means a period with no variable inputs
    if isinstance(entry, (tuple, list)) and len(entry) == 2:
        record, period = entry
    else:
        record, period = entry, None
    try:
        profile = build_compensation_profile(record, rules)
        inputs = build_period_inputs(period)
        for warning in check_period_inputs(profile, inputs, rules):
            logger.warning(f"{profile.employee_id}: {warning}")
        return calculate_payroll(profile, inputs, rules=rules, as_of=as_of)
    except Exception as e:
        employee_id = getattr(e, "employee_id", None) or _record_employee_id(record)
        logger.warning(f"payroll failed for {employee_id or '<unknown>'}: {e}")
        return BatchFailure(employee_id=employee_id, reason=str(e) or type(e).__name__)


def run_batch(
    entries: Iterable[Tuple[EmployeeRecord, PeriodRecord]],
    rules: Optional[TaxRules] = None,
    as_of: Union[date, str, None] = None,
    max_workers: Optional[int] = None,
) -> BatchResult:
    """Calculate payroll for many employees, isolating per-employee failures.

    Args:
        entries: (employee record, period inputs) pairs as tuples or lists
                 (as loaded from JSON/YAML), or bare records.
                 Records may be loose dicts; each is built through
                 build_compensation_profile().
        rules: Tax rules to apply; loaded from as_of when omitted
        as_of: Pay period date
        max_workers: Run employees on a thread pool of this size (None/1 = serial)

    Returns:
        BatchResult with successes and failures, each in input order.
        An invalid record lands in `failed`; it never aborts the batch.
    """
    rules = resolve_rules(rules, as_of)
    entries = list(entries)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes: List = list(pool.map(lambda e: _calculate_entry(e, rules, as_of), entries))
    else:
        outcomes = [_calculate_entry(e, rules, as_of) for e in entries]

    successful = [o for o in outcomes if isinstance(o, CalculationResult)]
    failed = [o for o in outcomes if isinstance(o, BatchFailure)]

    logger.info(f"payroll batch: {len(successful)} successful, {len(failed)} failed")
    return BatchResult(successful=successful, failed=failed)
