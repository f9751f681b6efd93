"""Payroll CLI commands: single-employee calculation and roster runs."""

import json
from datetime import date
from typing import Optional

import click
from rich.console import Console

from kepayroll.sdk import (
    ConfigNotFoundError,
    InvalidEmployeeError,
    InvalidPeriodInputsError,
    RosterNotFoundError,
    TaxRulesNotFoundError,
    build_compensation_profile,
    build_p10_return,
    build_period_inputs,
    calculate_payroll,
    check_period_inputs,
    get_setting,
    load_period_inputs,
    load_roster,
    load_tax_rules,
    roster_entries,
    run_batch,
    summarize_payroll,
)

from .renderers import render_batch, render_p10, render_payslip


def _load_rules(as_of: Optional[str]):
    """Resolve the pay period and its tax rules, converting errors for the CLI."""
    period = as_of or date.today().strftime("%Y-%m")
    try:
        return period, load_tax_rules(period)
    except TaxRulesNotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.BadParameter(f"Invalid --as-of '{period}'. Use YYYY-MM or YYYY-MM-DD. ({e})")


def _configured_workers() -> Optional[int]:
    """max_workers from settings.json, which may have been hand-edited."""
    value = get_setting("max_workers")
    if value is None:
        return None
    try:
        workers = int(value)
    except (TypeError, ValueError):
        raise click.ClickException(f"Setting max_workers must be a positive integer, got '{value}'")
    if workers < 1:
        raise click.ClickException(f"Setting max_workers must be a positive integer, got '{value}'")
    return workers


@click.command("calc")
@click.option("--basic", "basic_salary", type=float, required=True, help="Monthly basic salary (KES)")
@click.option("--allowances", type=float, default=0, help="Monthly allowances")
@click.option("--as-of", type=str, default=None, help="Pay period YYYY-MM or YYYY-MM-DD (default: current month)")
@click.option("--overtime-hours", type=float, default=0, help="Overtime hours worked this period")
@click.option("--overtime-type", type=click.Choice(["weekday", "holiday"]), default="weekday")
@click.option("--unpaid-days", type=int, default=0, help="Days of unpaid leave")
@click.option("--bonus", "bonuses", type=float, default=0, help="Bonuses paid this period")
@click.option("--deductions", "custom_deductions", type=float, default=0,
              help="Non-statutory deductions (loans, SACCO, etc.)")
@click.option("--life", type=float, default=0, help="Monthly life assurance premium")
@click.option("--education", type=float, default=0, help="Monthly education policy premium")
@click.option("--health", type=float, default=0, help="Monthly health insurance premium")
@click.option("--mortgage-interest", type=float, default=None, help="Monthly owner-occupier mortgage interest")
@click.option("--disabled", "is_disabled", is_flag=True, help="Employee holds a disability exemption certificate")
@click.option("--region", type=str, default=None, help="Minimum-wage region (e.g. nairobi)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def calc(
    basic_salary: float,
    allowances: float,
    as_of: Optional[str],
    overtime_hours: float,
    overtime_type: str,
    unpaid_days: int,
    bonuses: float,
    custom_deductions: float,
    life: float,
    education: float,
    health: float,
    mortgage_interest: Optional[float],
    is_disabled: bool,
    region: Optional[str],
    output_json: bool,
):
    """Calculate one month's pay and statutory deductions.

    \b
    Examples:
      ke-payroll calc --basic 50000 --allowances 15000 --as-of 2025-03
      ke-payroll calc --basic 80000 --life 5000 --overtime-hours 10 --json
    """
    period, rules = _load_rules(as_of)

    record = {
        "employee_id": "cli",
        "basic_salary": basic_salary,
        "allowances": allowances,
        "mortgage_interest": mortgage_interest,
        "is_disabled": is_disabled,
        "region": region or get_setting("default_region"),
    }
    if life or education or health:
        record["insurance_premiums"] = {"life": life, "education": education, "health": health}

    try:
        profile = build_compensation_profile(record, rules)
        inputs = build_period_inputs({
            "overtime_hours": overtime_hours,
            "overtime_type": overtime_type,
            "unpaid_days": unpaid_days,
            "bonuses": bonuses,
            "custom_deductions": custom_deductions,
        })
    except (InvalidEmployeeError, InvalidPeriodInputsError) as e:
        raise click.ClickException(str(e))

    result = calculate_payroll(profile, inputs, rules=rules, as_of=period)

    if output_json:
        click.echo(result.model_dump_json(indent=2))
    else:
        render_payslip(Console(), result, warnings=check_period_inputs(profile, inputs, rules))


@click.command("run")
@click.option("--as-of", type=str, default=None, help="Pay period YYYY-MM or YYYY-MM-DD (default: current month)")
@click.option("--roster", "roster_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="Roster YAML (default: configured roster)")
@click.option("--inputs", "inputs_path", type=click.Path(exists=True, dir_okay=False), default=None,
              help="YAML/JSON mapping employee id -> period inputs")
@click.option("--workers", type=int, default=None, help="Calculate on N threads")
@click.option("--p10", "show_p10", is_flag=True, help="Also produce the P10 return for the period")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def run(
    as_of: Optional[str],
    roster_path: Optional[str],
    inputs_path: Optional[str],
    workers: Optional[int],
    show_p10: bool,
    output_json: bool,
):
    """Run payroll for every employee on the roster.

    Employees that fail validation are reported and skipped; the rest are paid.

    \b
    Examples:
      ke-payroll run --as-of 2025-03
      ke-payroll run --roster staff.yaml --inputs march.yaml --p10
    """
    period, rules = _load_rules(as_of)

    try:
        roster = load_roster(roster_path)
        period_inputs = load_period_inputs(inputs_path) if inputs_path else {}
    except (RosterNotFoundError, ConfigNotFoundError) as e:
        raise click.ClickException(str(e))

    if not roster["employees"]:
        raise click.ClickException("Roster has no employees")

    batch = run_batch(
        roster_entries(roster, period_inputs),
        rules=rules,
        as_of=period,
        max_workers=workers or _configured_workers(),
    )
    summary = summarize_payroll(batch.successful)

    p10 = None
    if show_p10:
        employer = roster["employer"]
        try:
            p10 = build_p10_return(
                batch.successful,
                employer_name=employer.get("name", ""),
                employer_pin=str(employer.get("kra_pin", employer.get("kraPin", ""))),
                period=period[:7],
            )
        except ValueError as e:
            raise click.ClickException(f"Cannot build P10 return: {e}")

    if output_json:
        output = {
            "as_of": period,
            "rules_effective": rules.effective.isoformat(),
            "successful": [r.model_dump(mode="json") for r in batch.successful],
            "failed": [f.model_dump(mode="json") for f in batch.failed],
            "summary": summary.model_dump(mode="json"),
        }
        if p10 is not None:
            output["p10"] = p10.model_dump(mode="json")
        click.echo(json.dumps(output, indent=2))
        return

    console = Console(width=140)
    render_batch(console, batch, summary)
    if p10 is not None:
        render_p10(console, p10)
