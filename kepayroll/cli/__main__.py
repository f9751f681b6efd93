"""ke-payroll CLI - Kenyan payroll and statutory deductions."""

import click

from kepayroll import __version__

from .payroll_commands import calc as calc_command
from .payroll_commands import run as run_command
from .rules_commands import rules as rules_group
from .settings_commands import settings as settings_group


@click.group()
@click.version_option(version=__version__, prog_name="ke-payroll")
def cli():
    """ke-payroll - Kenyan monthly payroll calculations.

    Computes gross pay, NSSF, SHIF, Housing Levy, PAYE and net pay using
    the statutory rules effective for the pay period.

    Configuration is loaded from (in order):

    \b
    1. KE_PAYROLL_CONFIG_PATH environment variable
    2. ~/.config/ke-payroll/ (XDG default)

    Set LOG_LEVEL=DEBUG to trace each calculation stage.
    """
    pass


cli.add_command(calc_command)
cli.add_command(run_command)
cli.add_command(rules_group)
cli.add_command(settings_group)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
