"""Salary and salary sacrifice commands."""

import click
from rich.console import Console
from rich.table import Table

from autax.sdk.salary import calculate_optimal_salary_sacrifice, process_salary
from autax.sdk.schemas import SalaryInput

from .common import FREQUENCY_CHOICE, echo_json, format_option, resolve_config, year_option
from .renderers.steps_renderer import format_money, render_figures, render_notes, render_steps


@click.command("salary")
@click.argument("amount", type=float)
@click.option("--net", "is_net", is_flag=True, help="AMOUNT is take-home pay; solve for gross")
@click.option("--frequency", "-f", type=FREQUENCY_CHOICE, default="ANNUALLY",
              help="Pay frequency of AMOUNT (default: ANNUALLY)")
@click.option("--sacrifice", type=click.FloatRange(min=0), default=0, help="Salary sacrifice per sacrifice period")
@click.option("--sacrifice-frequency", type=FREQUENCY_CHOICE, default=None,
              help="Frequency of --sacrifice (default: same as --frequency)")
@click.option("--no-tft", is_flag=True, help="Tax-free threshold not claimed")
@click.option("--hecs", is_flag=True, help="Has a HECS/HELP debt")
@year_option
@format_option
def salary(amount, is_net, frequency, sacrifice, sacrifice_frequency, no_tft, hecs, year, output_format):
    """Break a salary AMOUNT down into tax, super and take-home pay.

    \b
    Examples:
      autax salary 100000
      autax salary 80000 --net
      autax salary 3500 --frequency FORTNIGHTLY --sacrifice 200
    """
    config = resolve_config(year)
    result = process_salary(
        SalaryInput(
            amount=amount,
            salary_type="NET" if is_net else "GROSS",
            pay_frequency=frequency.upper(),
            salary_sacrifice=sacrifice,
            salary_sacrifice_frequency=sacrifice_frequency.upper() if sacrifice_frequency else None,
            has_tax_free_threshold=not no_tft,
            has_hecs_debt=hecs,
        ),
        config,
    )

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    render_notes(console, result.warnings)
    render_steps(console, f"Salary {config.financial_year}", result.steps)

    period = result.per_period
    table = Table(title="Per Period", show_header=True, header_style="bold")
    table.add_column("")
    table.add_column(period.frequency.title(), justify="right")
    table.add_column("Annual", justify="right")
    table.add_row("Gross", format_money(period.gross), format_money(result.gross_salary))
    table.add_row("Tax", format_money(period.tax), format_money(result.total_tax))
    table.add_row("Net", f"[green]{format_money(period.net)}[/green]", format_money(result.net_salary))
    table.add_row("Super", format_money(period.superannuation), format_money(result.total_super))
    console.print(table)


@click.command("sacrifice")
@click.argument("gross", type=float)
@year_option
@format_option
def sacrifice(gross, year, output_format):
    """Recommend a salary sacrifice amount for an annual GROSS salary."""
    config = resolve_config(year)
    result = calculate_optimal_salary_sacrifice(gross, config)

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    render_figures(console, f"Salary Sacrifice {config.financial_year}", [
        ("Recommended sacrifice", format_money(result.optimal_amount)),
        ("Tax saving", format_money(result.tax_savings)),
        ("Change in take-home pay", format_money(result.net_impact)),
        ("Marginal rate", f"{result.marginal_rate:g}%"),
    ])
    console.print(result.reason)
