"""Tax rules CLI commands."""

import json
from typing import Optional

import click
from rich.console import Console

from kepayroll.sdk import (
    TaxRulesNotFoundError,
    list_effective_dates,
    load_latest_tax_rules,
    load_tax_rules,
)

from .renderers import render_rules


@click.group()
def rules():
    """Inspect the statutory rule sets (PAYE bands, NSSF, SHIF, Housing Levy)."""
    pass


@rules.command("list")
def rules_list():
    """List available rule sets by effective date."""
    dates = list_effective_dates()
    if not dates:
        raise click.ClickException("No tax rules installed")
    for effective in dates:
        click.echo(effective.isoformat())


@rules.command("show")
@click.option("--as-of", type=str, default=None, help="Show rules effective on YYYY-MM or YYYY-MM-DD (default: latest)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def rules_show(as_of: Optional[str], output_json: bool):
    """Show the rule set effective on a date."""
    try:
        tax_rules = load_tax_rules(as_of) if as_of else load_latest_tax_rules()
    except TaxRulesNotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.BadParameter(f"Invalid --as-of '{as_of}'. Use YYYY-MM or YYYY-MM-DD. ({e})")

    if output_json:
        click.echo(json.dumps(tax_rules.model_dump(mode="json"), indent=2))
    else:
        render_rules(Console(), tax_rules)
