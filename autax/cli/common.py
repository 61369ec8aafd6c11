"""Options and helpers shared by the CLI command modules."""

import json
import re
import warnings
from datetime import date

import click
from pydantic import BaseModel

from autax.sdk.config import (
    ConfigNotFoundError,
    ConfigNotFoundWarning,
    financial_year_for_date,
    lookup_config,
)
from autax.sdk.rules import TaxYearConfig

FREQUENCY_CHOICE = click.Choice(["WEEKLY", "FORTNIGHTLY", "MONTHLY", "QUARTERLY", "ANNUALLY"], case_sensitive=False)


def _validate_year(ctx, param, value):
    if value is None:
        return value
    if not re.match(r"^\d{4}-\d{2}$", value):
        raise click.BadParameter(f"Invalid financial year '{value}'. Use the form 2024-25.")
    return value


year_option = click.option(
    "--year", "-y", callback=_validate_year,
    help="Financial year, e.g. 2024-25 (default: current financial year)",
)
format_option = click.option(
    "--format", "output_format", type=click.Choice(["table", "json"]), default="table",
    help="Output format (default: table)",
)


def resolve_config(year: str = None) -> TaxYearConfig:
    """Load rules for a year, reporting any fallback on stderr."""
    year = year or financial_year_for_date(date.today())
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", ConfigNotFoundWarning)
            lookup = lookup_config(year)
    except ConfigNotFoundError as e:
        raise click.ClickException(str(e))

    if lookup.warning:
        click.echo(f"Warning: {lookup.warning}", err=True)
    return lookup.config


def echo_json(result: BaseModel) -> None:
    click.echo(json.dumps(result.model_dump(), indent=2))
