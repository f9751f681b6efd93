"""Settings CLI commands for ke-payroll.

Manages settings.json - roster path, default region, batch workers.
"""

from pathlib import Path

import click

from kepayroll.sdk import (
    ConfigNotFoundError,
    get_roster_path,
    get_settings_path,
    load_settings,
    save_settings,
    set_setting,
)

KNOWN_SETTINGS = ("roster", "default_region", "max_workers")


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - roster: path to roster.yaml
    - default_region: minimum-wage region for employees without one
    - max_workers: threads used by 'ke-payroll run'
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    try:
        current = load_settings()
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective paths:")
    click.echo(f"  roster: {get_roster_path()}")


@settings.command("set")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
@click.argument("value")
def settings_set(key: str, value: str):
    """Set a setting.

    \b
    Examples:
      ke-payroll settings set roster ~/payroll/roster.yaml
      ke-payroll settings set default_region nairobi
      ke-payroll settings set max_workers 4
    """
    stored = value
    if key == "roster":
        roster_path = Path(value).expanduser().resolve()
        if not roster_path.exists():
            raise click.ClickException(f"Roster not found: {roster_path}")
        stored = str(roster_path)
    elif key == "default_region":
        stored = value.strip().lower().replace(" ", "_")
    elif key == "max_workers":
        if not value.isdigit() or int(value) < 1:
            raise click.BadParameter(f"max_workers must be a positive integer, got '{value}'")
        stored = int(value)

    try:
        saved = set_setting(key, stored)
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))
    click.echo(f"Set {key}: {stored}")
    click.echo(f"Saved to: {saved}")


@settings.command("unset")
@click.argument("key", type=click.Choice(KNOWN_SETTINGS))
def settings_unset(key: str):
    """Clear a setting, reverting to its default."""
    try:
        current = load_settings()
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    if key not in current:
        click.echo(f"{key} was not set.")
        return

    del current[key]
    save_settings(current)
    click.echo(f"Cleared {key}.")
