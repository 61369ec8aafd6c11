"""AU Tax CLI - Command-line interface for tax and super calculations."""

import click

from autax import __version__
from autax.sdk.config import configure_logging

from .salary_commands import salary as salary_command
from .salary_commands import sacrifice as sacrifice_command
from .super_commands import super_group
from .tax_commands import medicare as medicare_command
from .tax_commands import payg as payg_command
from .tax_commands import position as position_command
from .tax_commands import tax as tax_command
from .tax_commands import years as years_command


@click.group()
@click.version_option(version=__version__, prog_name="autax")
def cli():
    """AU Tax - Australian income tax, PAYG and superannuation calculators.

    Tax rules are loaded per financial year (e.g. 2024-25) from:

    \b
    1. Bundled tax-rules YAML files
    2. AUTAX_TAX_RULES_PATH directory (adds or overrides years)

    Years without rules fall back to the latest available year with a warning.
    Set LOG_LEVEL=DEBUG to trace config loading and solver iterations.
    """
    pass


cli.add_command(years_command)
cli.add_command(tax_command)
cli.add_command(medicare_command)
cli.add_command(payg_command)
cli.add_command(position_command)
cli.add_command(salary_command)
cli.add_command(sacrifice_command)
cli.add_command(super_group)


def main():
    """Entry point for the CLI."""
    configure_logging()
    cli()


if __name__ == "__main__":
    main()
