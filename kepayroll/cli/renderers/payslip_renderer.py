"""Rich renderer for payroll results.

Transforms SDK models into formatted Rich tables.
"""

from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from kepayroll.sdk.reports import P10Return, PayrollSummary
from kepayroll.sdk.schemas import BatchResult, CalculationResult
from kepayroll.sdk.taxes import TaxRules


def render_payslip(console: Console, result: CalculationResult, warnings: Optional[List[str]] = None) -> None:
    """Render one employee's payslip.

    Args:
        console: Rich Console instance
        result: SDK output from calculate_payroll()
        warnings: Optional input warnings to show above the payslip
    """
    for warning in warnings or []:
        console.print(Panel(
            f"[yellow]{warning}[/yellow]",
            title="Note",
            border_style="yellow"
        ))

    title = f"Payslip: {result.name or result.employee_id}"
    if result.as_of:
        title += f" ({result.as_of.strftime('%Y-%m')})"

    table = Table(title=title, box=box.ROUNDED)
    table.add_column("", style="bold", min_width=28)
    table.add_column("KES", justify="right", min_width=14)

    e = result.earnings
    table.add_row("[bold]EARNINGS[/bold]", "")
    table.add_row("  Basic Salary", _fmt(e.basic_salary))
    table.add_row("  Allowances", _fmt(e.allowances))
    if e.overtime:
        table.add_row("  Overtime", _fmt(e.overtime))
    if e.bonuses:
        table.add_row("  Bonuses", _fmt(e.bonuses))
    if result.calculations.unpaid_deduction:
        table.add_row("  Unpaid Days", f"-{_fmt(result.calculations.unpaid_deduction)}")
    table.add_row("  [dim]Gross Pay[/dim]", f"[dim]{_fmt(e.gross_pay)}[/dim]")
    table.add_row("", "")

    d = result.deductions
    table.add_row("[bold]STATUTORY DEDUCTIONS[/bold]", "")
    table.add_row("  NSSF", _fmt(d.nssf))
    table.add_row("  SHIF", _fmt(d.shif))
    table.add_row("  Housing Levy", _fmt(d.housing_levy))
    table.add_row("", "")

    table.add_row("Taxable Income", _fmt(d.taxable_income), style="dim")
    table.add_row("[bold]PAYE[/bold]", "")
    table.add_row("  Tax Charged", _fmt(d.gross_tax))
    table.add_row("  Personal Relief", f"-{_fmt(d.personal_relief)}")
    if d.insurance_relief:
        table.add_row("  Insurance Relief", f"-{_fmt(d.insurance_relief)}")
    if d.disability_exemption:
        table.add_row("  [dim]Disability Exemption[/dim]", f"[dim]{_fmt(d.disability_exemption)}[/dim]")
    table.add_row("  PAYE", _fmt(d.paye))
    table.add_row("", "")

    if d.custom_deductions or d.unrecovered_deductions:
        table.add_row("Other Deductions", _fmt(d.custom_deductions))
    table.add_row("[dim]Total Deductions[/dim]", f"[dim]{_fmt(d.total_deductions)}[/dim]")
    table.add_row("", "")

    table.add_row(
        "[bold green]NET PAY[/bold green]",
        f"[bold green]{_fmt(result.net_pay)}[/bold green]",
    )

    console.print(table)

    if d.unrecovered_deductions:
        console.print(Panel(
            f"[red]{_fmt(d.unrecovered_deductions)} of deductions could not be withheld from this period's pay[/red]",
            title="Unrecovered",
            border_style="red"
        ))

    er = result.employer_contributions
    console.print(
        f"[dim]Employer: NSSF {_fmt(er.nssf)}, SHIF {_fmt(er.shif)}, "
        f"Housing Levy {_fmt(er.housing_levy)} (rules effective {result.rules_effective.isoformat()})[/dim]"
    )


def render_batch(console: Console, batch: BatchResult, summary: PayrollSummary) -> None:
    """Render a payroll run: one row per employee, then failures and totals."""
    table = Table(title="Payroll Run", box=box.ROUNDED)
    table.add_column("Employee")
    table.add_column("Gross", justify="right")
    table.add_column("NSSF", justify="right")
    table.add_column("SHIF", justify="right")
    table.add_column("Housing Levy", justify="right")
    table.add_column("PAYE", justify="right")
    table.add_column("Other", justify="right")
    table.add_column("Net Pay", justify="right")

    for r in batch.successful:
        d = r.deductions
        table.add_row(
            r.name or r.employee_id,
            _fmt(r.earnings.gross_pay),
            _fmt(d.nssf),
            _fmt(d.shif),
            _fmt(d.housing_levy),
            _fmt(d.paye),
            _fmt(d.custom_deductions),
            f"[green]{_fmt(r.net_pay)}[/green]",
        )

    sd = summary.deductions
    table.add_row(
        "[bold]TOTAL[/bold]",
        _fmt(summary.total_gross_pay),
        _fmt(sd.nssf),
        _fmt(sd.shif),
        _fmt(sd.housing_levy),
        _fmt(sd.paye),
        _fmt(sd.custom),
        f"[bold green]{_fmt(summary.total_net_pay)}[/bold green]",
        style="bold",
    )

    console.print(table)

    if batch.failed:
        failures = "\n".join(f"{f.employee_id or '<unknown>'}: {f.reason}" for f in batch.failed)
        console.print(Panel(
            f"[red]{failures}[/red]",
            title=f"Failed ({len(batch.failed)})",
            border_style="red"
        ))

    er = summary.employer_contributions
    console.print(
        f"{summary.employee_count} paid, {len(batch.failed)} failed. "
        f"Employer contributions {_fmt(er.total)}; total employment cost {_fmt(summary.total_employment_cost)}"
    )


def render_p10(console: Console, p10: P10Return) -> None:
    """Render P10 return rows and totals."""
    table = Table(
        title=f"P10 Return: {p10.employer_name} ({p10.employer_pin}) - {p10.period}",
        box=box.ROUNDED,
    )
    table.add_column("Employee")
    table.add_column("KRA PIN")
    table.add_column("Gross", justify="right")
    table.add_column("Taxable", justify="right")
    table.add_column("PAYE", justify="right")
    table.add_column("NSSF", justify="right")
    table.add_column("SHIF", justify="right")
    table.add_column("Housing Levy", justify="right")
    table.add_column("Net Pay", justify="right")

    for row in p10.rows:
        table.add_row(
            row.name or row.employee_id,
            row.kra_pin or "[red]missing[/red]",
            _fmt(row.gross_pay),
            _fmt(row.taxable_income),
            _fmt(row.paye),
            _fmt(row.nssf),
            _fmt(row.shif),
            _fmt(row.housing_levy),
            _fmt(row.net_pay),
        )

    t = p10.totals
    table.add_row(
        "[bold]TOTAL[/bold]", "",
        _fmt(t.gross_pay), _fmt(t.taxable_income), _fmt(t.paye),
        _fmt(t.nssf), _fmt(t.shif), _fmt(t.housing_levy), _fmt(t.net_pay),
        style="bold",
    )
    console.print(table)


def render_rules(console: Console, rules: TaxRules) -> None:
    """Render the effective rule set."""
    bands = Table(title=f"PAYE Bands (effective {rules.effective.isoformat()})", box=box.ROUNDED)
    bands.add_column("Monthly Income", min_width=24)
    bands.add_column("Rate", justify="right")

    lower = 0.0
    for band in rules.paye.bands:
        if band.up_to is not None:
            bands.add_row(f"{_fmt(lower)} - {_fmt(band.up_to)}", f"{band.rate * 100:g}%")
            lower = band.up_to
        else:
            bands.add_row(f"over {_fmt(band.over)}", f"{band.rate * 100:g}%")
    console.print(bands)

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim")
    table.add_column("value")
    table.add_row("Personal relief", _fmt(rules.reliefs.personal_relief))
    table.add_row(
        "Insurance relief",
        f"{rules.reliefs.insurance_relief_rate * 100:g}% (max {_fmt(rules.reliefs.insurance_relief_cap)})",
    )
    table.add_row(
        "NSSF",
        f"{rules.nssf.employee_rate * 100:g}% of {rules.nssf.pensionable_base} pay, "
        f"LEL {_fmt(rules.nssf.lower_earnings_limit)} / UEL {_fmt(rules.nssf.upper_earnings_limit)}",
    )
    table.add_row(
        "SHIF",
        f"{rules.shif.employee_rate * 100:g}% (min {_fmt(rules.shif.minimum_contribution)})",
    )
    table.add_row("Housing Levy", f"{rules.housing_levy.employee_rate * 100:g}%")
    table.add_row("Allowable before PAYE", ", ".join(rules.paye.allowable_deductions) or "none")
    console.print(Panel(table, title="Deductions and Reliefs", border_style="dim"))


def _fmt(amount: Optional[float]) -> str:
    """Format currency amount."""
    if amount is None:
        return "-"
    return f"{amount:,.2f}"
