"""Income tax, Medicare, PAYG and tax position commands."""

import click
from rich.console import Console
from rich.table import Table

from autax.sdk.config import get_available_years, get_bracket_info
from autax.sdk.schemas import MedicareLevyInput, PaygInput, TaxPositionInput
from autax.sdk.taxes import (
    calculate_income_tax,
    calculate_medicare_levy,
    calculate_payg,
    calculate_tax_position,
    get_tax_bracket_description,
)

from .common import FREQUENCY_CHOICE, echo_json, format_option, resolve_config, year_option
from .renderers.steps_renderer import format_money, render_figures, render_notes, render_steps


@click.command("years")
def years():
    """List financial years with bundled or configured tax rules."""
    available = get_available_years()
    if not available:
        raise click.ClickException("No tax rules files found")
    for year in available:
        click.echo(year)


@click.command("tax")
@click.argument("income", type=float)
@year_option
@format_option
def tax(income, year, output_format):
    """Income tax on an annual taxable INCOME.

    \b
    Examples:
      autax tax 100000
      autax tax 100000 --year 2023-24 --format json
    """
    config = resolve_config(year)
    result = calculate_income_tax(income, config)

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    render_steps(console, f"Income Tax {config.financial_year}", result.steps)
    if income > 0:
        info = get_bracket_info(income, config)
        console.print(f"Bracket {info.index + 1}: {get_tax_bracket_description(income, config)}")
    render_figures(console, "Summary", [
        ("Tax payable", format_money(result.tax_payable)),
        ("Effective rate", f"{result.effective_rate:.2f}%"),
        ("Marginal rate", f"{result.marginal_rate:g}%"),
    ])


@click.command("medicare")
@click.argument("income", type=float)
@click.option("--no-phi", is_flag=True, help="No private hospital cover (surcharge may apply)")
@click.option("--exempt", is_flag=True, help="Exempt from the Medicare levy")
@click.option("--family", is_flag=True, help="Use the family low-income threshold")
@click.option("--children", type=click.IntRange(min=0), default=0, help="Dependent children (family threshold)")
@year_option
@format_option
def medicare(income, no_phi, exempt, family, children, year, output_format):
    """Medicare levy and surcharge on an annual taxable INCOME."""
    config = resolve_config(year)
    result = calculate_medicare_levy(
        MedicareLevyInput(
            taxable_income=income,
            has_private_health_insurance=not no_phi,
            has_medicare_exemption=exempt,
            family_status="FAMILY" if family else "SINGLE",
            dependent_children=children,
        ),
        config,
    )

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    render_steps(console, f"Medicare {config.financial_year}", result.steps)
    if result.is_shade_in:
        render_notes(console, ["Income is in the shade-in range; a reduced levy applies."])


@click.command("payg")
@click.argument("amount", type=float)
@click.option("--frequency", "-f", type=FREQUENCY_CHOICE, default="FORTNIGHTLY",
              help="Pay frequency of AMOUNT (default: FORTNIGHTLY)")
@click.option("--no-tft", is_flag=True, help="Tax-free threshold not claimed")
@click.option("--hecs", is_flag=True, help="Has a HECS/HELP debt")
@year_option
@format_option
def payg(amount, frequency, no_tft, hecs, year, output_format):
    """PAYG withholding on a gross AMOUNT per pay period.

    \b
    Examples:
      autax payg 3846.15
      autax payg 2000 --frequency WEEKLY --no-tft
    """
    config = resolve_config(year)
    result = calculate_payg(
        PaygInput(
            gross_income=amount,
            frequency=frequency.upper(),
            has_tax_free_threshold=not no_tft,
            has_hecs_debt=hecs,
        ),
        config,
    )

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    render_steps(console, f"PAYG Withholding {config.financial_year}", result.steps)
    render_figures(console, "Withholding", [
        ("Weekly", format_money(result.weekly)),
        ("Fortnightly", format_money(result.fortnightly)),
        ("Monthly", format_money(result.monthly)),
        ("Annual", format_money(result.annual_withholding)),
    ])


@click.command("position")
@click.option("--salary", type=click.FloatRange(min=0), default=0, help="Salary and wages")
@click.option("--payg-withheld", type=click.FloatRange(min=0), default=0, help="Tax withheld during the year")
@click.option("--rental", type=float, default=0, help="Net rental income (negative if geared)")
@click.option("--franked", type=click.FloatRange(min=0), default=0, help="Franked dividends (cash)")
@click.option("--franking-pct", type=click.FloatRange(0, 100), default=100, help="Percent franked (default: 100)")
@click.option("--unfranked", type=click.FloatRange(min=0), default=0, help="Unfranked dividends")
@click.option("--interest", type=click.FloatRange(min=0), default=0, help="Interest income")
@click.option("--capital-gains", type=click.FloatRange(min=0), default=0, help="Gross capital gains")
@click.option("--capital-losses", type=click.FloatRange(min=0), default=0, help="Capital losses")
@click.option("--no-cgt-discount", is_flag=True, help="Assets held under 12 months")
@click.option("--deductions", type=click.FloatRange(min=0), default=0, help="Work-related deductions")
@click.option("--concessional-super", type=click.FloatRange(min=0), default=0,
              help="Concessional super contributions (for Division 293)")
@click.option("--no-phi", is_flag=True, help="No private hospital cover")
@click.option("--senior", is_flag=True, help="Eligible for SAPTO")
@year_option
@format_option
def position(salary, payg_withheld, rental, franked, franking_pct, unfranked, interest,
             capital_gains, capital_losses, no_cgt_discount, deductions, concessional_super,
             no_phi, senior, year, output_format):
    """Estimate the tax position and refund for a financial year.

    \b
    Examples:
      autax position --salary 95000 --payg-withheld 21000 --deductions 2500
      autax position --salary 120000 --rental -8000 --franked 700 --format json
    """
    config = resolve_config(year)
    result = calculate_tax_position(
        TaxPositionInput(
            salary=salary,
            payg_withheld=payg_withheld,
            rental_income=rental,
            franked_dividends=franked,
            franking_percentage=franking_pct,
            unfranked_dividends=unfranked,
            interest=interest,
            capital_gains=capital_gains,
            capital_losses=capital_losses,
            cgt_discount_eligible=not no_cgt_discount,
            work_deductions=deductions,
            concessional_super=concessional_super,
            has_private_health_insurance=not no_phi,
            is_senior=senior,
        ),
        config,
    )

    if output_format == "json":
        echo_json(result)
        return

    console = Console()
    render_notes(console, result.warnings)

    income_table = Table(title="Assessable Income", show_header=True, header_style="bold")
    income_table.add_column("Source")
    income_table.add_column("Amount", justify="right")
    for label, value in result.income.model_dump(exclude={"exempt", "total_assessable"}).items():
        if value:
            income_table.add_row(label.replace("_", " ").title(), format_money(value))
    income_table.add_row("[bold]Total[/bold]", f"[bold]{format_money(result.income.total_assessable)}[/bold]")
    console.print(income_table)

    render_steps(console, f"Tax Position {result.financial_year}", result.steps)

    outcome = "Refund" if result.estimated_refund >= 0 else "Owing"
    colour = "green" if result.estimated_refund >= 0 else "red"
    render_figures(console, "Summary", [
        ("Taxable income", format_money(result.taxable_income)),
        ("Net tax", format_money(result.net_tax)),
        ("Effective rate", f"{result.effective_rate:.2f}%"),
        (outcome, f"[{colour}]{format_money(abs(result.estimated_refund))}[/{colour}]"),
        ("Division 293", format_money(result.division_293_tax)),
    ])
    render_notes(console, result.recommendations, title="Suggestion", style="cyan")
