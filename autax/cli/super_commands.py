"""Superannuation contribution and cap commands."""

import click
from rich.console import Console
from rich.table import Table

from autax.sdk.superannuation import (
    build_carry_forward_records,
    get_super_contribution_summary,
    track_contribution_caps,
)
from autax.sdk.schemas import CapTrackingInput, SuperContributionInput

from .common import echo_json, format_option, resolve_config, year_option
from .renderers.steps_renderer import format_money, render_notes, render_steps


def _parse_prior_years(ctx, param, values):
    """Parse YEAR=AMOUNT pairs into {year: amount}."""
    parsed = {}
    for value in values:
        year, sep, amount = value.partition("=")
        if not sep:
            raise click.BadParameter(f"Expected YEAR=AMOUNT, got '{value}'")
        try:
            parsed[year.strip()] = float(amount)
        except ValueError:
            raise click.BadParameter(f"Invalid amount in '{value}'")
    return parsed


@click.group("super")
def super_group():
    """Superannuation contributions and caps."""
    pass


@super_group.command("contributions")
@click.argument("gross", type=float)
@click.option("--sacrifice", type=click.FloatRange(min=0), default=0, help="Annual salary sacrifice")
@click.option("--personal-deductible", type=click.FloatRange(min=0), default=0,
              help="Personal contributions claimed as a deduction")
@click.option("--personal-non-deductible", type=click.FloatRange(min=0), default=0,
              help="After-tax personal contributions")
@click.option("--spouse", type=click.FloatRange(min=0), default=0, help="Spouse contributions received")
@year_option
@format_option
def contributions(gross, sacrifice, personal_deductible, personal_non_deductible, spouse, year, output_format):
    """Contributions, contributions tax and cap usage for an annual GROSS salary.

    \b
    Examples:
      autax super contributions 120000 --sacrifice 10000
    """
    config = resolve_config(year)
    summary = get_super_contribution_summary(
        SuperContributionInput(
            gross_salary=gross,
            salary_sacrifice=sacrifice,
            personal_deductible=personal_deductible,
            personal_non_deductible=personal_non_deductible,
            spouse_contribution=spouse,
        ),
        config=config,
    )

    if output_format == "json":
        echo_json(summary)
        return

    console = Console()
    render_notes(console, summary.warnings)
    render_steps(console, f"Super Contributions {config.financial_year}", summary.contributions.steps)

    table = Table(title="Caps", show_header=True, header_style="bold")
    table.add_column("Cap")
    table.add_column("Used", justify="right")
    table.add_column("Limit", justify="right")
    table.add_column("Remaining", justify="right")
    table.add_column("%", justify="right")
    for label, usage in (("Concessional", summary.concessional), ("Non-concessional", summary.non_concessional)):
        table.add_row(label, format_money(usage.used), format_money(usage.cap),
                      format_money(usage.remaining), f"{usage.percentage:.1f}%")
    console.print(table)
    render_notes(console, summary.recommendations, title="Suggestion", style="cyan")


@super_group.command("caps")
@click.option("--concessional", type=click.FloatRange(min=0), default=0,
              help="Concessional contributions this year to date")
@click.option("--non-concessional", type=click.FloatRange(min=0), default=0,
              help="Non-concessional contributions this year to date")
@click.option("--balance", type=click.FloatRange(min=0), default=0, help="Total super balance at 30 June last year")
@click.option("--prior", multiple=True, callback=_parse_prior_years,
              help="Concessional contributions in a prior year, YEAR=AMOUNT (repeatable)")
@year_option
@format_option
def caps(concessional, non_concessional, balance, prior, year, output_format):
    """Track contribution caps with carry-forward and bring-forward.

    \b
    Examples:
      autax super caps --concessional 35000 --balance 300000 --prior 2022-23=15000
      autax super caps --non-concessional 200000 --balance 1200000
    """
    config = resolve_config(year)
    try:
        records = build_carry_forward_records(prior)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--prior")

    result = track_contribution_caps(
        CapTrackingInput(
            concessional_ytd=concessional,
            non_concessional_ytd=non_concessional,
            carry_forward_amounts=records,
            total_super_balance=balance,
        ),
        config,
    )

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    cc = result.concessional
    ncc = result.non_concessional

    table = Table(title=f"Contribution Caps {result.financial_year}", show_header=True, header_style="bold")
    table.add_column("")
    table.add_column("Concessional", justify="right")
    table.add_column("Non-concessional", justify="right")
    table.add_row("Standard cap", format_money(cc.cap), format_money(ncc.cap))
    table.add_row("Carry-forward / bring-forward", format_money(cc.carry_forward_available),
                  f"{ncc.bring_forward_years} year(s)")
    table.add_row("Total available", format_money(cc.total_available), format_money(ncc.total_available))
    table.add_row("Used", format_money(cc.used), format_money(ncc.used))
    table.add_row("Remaining", format_money(cc.remaining), format_money(ncc.remaining))
    table.add_row("Excess", f"[red]{format_money(cc.excess_amount)}[/red]" if cc.is_exceeded else "-",
                  f"[red]{format_money(ncc.excess_amount)}[/red]" if ncc.is_exceeded else "-")
    console.print(table)

    render_notes(console, result.warnings)
    if result.estimated_excess_contributions_tax:
        console.print(f"Estimated excess contributions tax: {format_money(result.estimated_excess_contributions_tax)}")
        console.print(f"[dim]{result.excess_tax_note}[/dim]")
