"""PAYG withholding using the Schedule 1 formula method.

Every pay frequency is converted to weekly earnings, the weekly amount is
computed from the scale coefficients and rounded to whole dollars, and the
other frequencies are projected from that weekly figure:

    weekly withholding = max(0, a * weekly_earnings - b)

Scale 2 applies when the tax-free threshold is claimed, scale 1 otherwise.
Projecting from a single rounded weekly amount keeps every frequency
consistent instead of drifting from separate roundings.
"""

from typing import Optional

from ..config import get_current_config
from ..rounding import format_currency, round_cents, round_dollars
from ..rules import PaygBand, TaxYearConfig
from ..schemas import (
    CalculationStep,
    Frequency,
    GrossFromNetResult,
    PaygInput,
    PaygResult,
    PaygSummary,
)
from ..solver import bisect_increasing

WEEKS_PER_YEAR = 52

# Pay periods by frequency
PERIODS_PER_YEAR = {
    "WEEKLY": 52,
    "FORTNIGHTLY": 26,
    "MONTHLY": 12,
    "QUARTERLY": 4,
    "ANNUALLY": 1,
}


def get_periods_per_year(frequency: Frequency) -> int:
    """Get number of pay periods in a year for a frequency."""
    return PERIODS_PER_YEAR[frequency]


def annualise(amount: float, frequency: Frequency) -> float:
    """Convert a per-period amount to an annual amount."""
    return amount * PERIODS_PER_YEAR[frequency]


def to_period(annual_amount: float, frequency: Frequency) -> float:
    """Convert an annual amount to a per-period amount."""
    return annual_amount / PERIODS_PER_YEAR[frequency]


def to_weekly(amount: float, frequency: Frequency) -> float:
    """Convert a per-period amount to weekly earnings.

    Example: 8,333.33 monthly -> 8,333.33 * 12 / 52 = 1,923.08 weekly
    """
    if frequency == "WEEKLY":
        return amount
    if frequency == "FORTNIGHTLY":
        return amount / 2
    return amount * PERIODS_PER_YEAR[frequency] / WEEKS_PER_YEAR


def from_weekly(weekly_withholding: float, frequency: Frequency) -> float:
    """Project a whole-dollar weekly withholding amount to another frequency."""
    if frequency == "WEEKLY":
        return weekly_withholding
    if frequency == "FORTNIGHTLY":
        return weekly_withholding * 2
    if frequency == "MONTHLY":
        return round_dollars(weekly_withholding * WEEKS_PER_YEAR / 12)
    if frequency == "QUARTERLY":
        return weekly_withholding * 13
    return weekly_withholding * WEEKS_PER_YEAR


def get_scale(has_tax_free_threshold: bool, config: TaxYearConfig) -> tuple[PaygBand, ...]:
    return config.payg.scale_2 if has_tax_free_threshold else config.payg.scale_1


def find_band(weekly_earnings: float, scale: tuple[PaygBand, ...]) -> PaygBand:
    """First band whose max (unbounded for the last) covers the earnings."""
    for band in scale:
        if band.weekly_earnings_max is None or weekly_earnings <= band.weekly_earnings_max:
            return band
    return scale[-1]


def calc_weekly_withholding(weekly_earnings: float, has_tax_free_threshold: bool, config: TaxYearConfig) -> float:
    """Whole-dollar weekly withholding for weekly earnings."""
    if weekly_earnings <= 0:
        return 0.0
    band = find_band(weekly_earnings, get_scale(has_tax_free_threshold, config))
    return round_dollars(band.withholding(weekly_earnings))


def calc_withholding_per_period(
    gross_per_period: float,
    frequency: Frequency,
    has_tax_free_threshold: bool,
    config: TaxYearConfig,
) -> float:
    """Withholding for one pay period of the given frequency."""
    weekly = calc_weekly_withholding(to_weekly(gross_per_period, frequency), has_tax_free_threshold, config)
    return from_weekly(weekly, frequency)


def calculate_payg(payg_input: PaygInput, config: Optional[TaxYearConfig] = None) -> PaygResult:
    """Calculate PAYG withholding for a pay amount.

    Args:
        payg_input: Gross pay for one period, its frequency, and TFT/HECS flags
        config: Tax year rules (default: current financial year)

    Returns:
        PaygResult with weekly, fortnightly, monthly and annual withholding.
        HECS-HELP is listed in the steps but never included.
    """
    config = config or get_current_config()
    frequency = payg_input.frequency
    weekly_earnings = to_weekly(payg_input.gross_income, frequency)
    scale_name = "Scale 2 (tax-free threshold claimed)" if payg_input.has_tax_free_threshold else "Scale 1 (no tax-free threshold)"

    steps = [
        CalculationStep(label=f"Gross pay ({frequency.lower()})", value=payg_input.gross_income),
        CalculationStep(
            label="Weekly earnings",
            value=round_cents(weekly_earnings),
            explanation=f"Converted from {frequency.lower()}",
        ),
    ]

    if weekly_earnings <= 0:
        weekly = 0.0
        steps.append(CalculationStep(label="Weekly withholding", value=0, explanation="No earnings"))
    else:
        band = find_band(weekly_earnings, get_scale(payg_input.has_tax_free_threshold, config))
        weekly = calc_weekly_withholding(weekly_earnings, payg_input.has_tax_free_threshold, config)
        steps.append(CalculationStep(
            label="Weekly withholding",
            value=weekly,
            explanation=f"{scale_name}: {band.a} x {format_currency(weekly_earnings, cents=True)} - {band.b}, rounded",
        ))

    if payg_input.has_hecs_debt:
        steps.append(CalculationStep(
            label="HECS-HELP withholding",
            value=0,
            operation="+",
            explanation="Not yet implemented - not included in withholding",
        ))

    annual = from_weekly(weekly, "ANNUALLY")
    steps.append(CalculationStep(label="Annual withholding", value=annual, operation="=", explanation="Weekly x 52"))

    return PaygResult(
        weekly=weekly,
        fortnightly=from_weekly(weekly, "FORTNIGHTLY"),
        monthly=from_weekly(weekly, "MONTHLY"),
        annual_withholding=annual,
        steps=steps,
    )


def calculate_gross_from_net(
    net_income: float,
    frequency: Frequency,
    has_tax_free_threshold: bool = True,
    config: Optional[TaxYearConfig] = None,
) -> GrossFromNetResult:
    """Find the per-period gross whose net after PAYG equals net_income.

    Searches [net, 2 x net]: withholding stays under 50% of gross, so the
    answer always lies in that range. Non-positive net returns zero without
    searching.
    """
    config = config or get_current_config()
    if net_income <= 0:
        return GrossFromNetResult(gross=0, tax=0, iterations=0)

    def net_for(gross: float) -> float:
        return gross - calc_withholding_per_period(gross, frequency, has_tax_free_threshold, config)

    solved = bisect_increasing(net_for, net_income, net_income, net_income * 2)
    tax = calc_withholding_per_period(solved.value, frequency, has_tax_free_threshold, config)
    return GrossFromNetResult(
        gross=solved.value,
        tax=tax,
        iterations=solved.iterations,
        converged=solved.converged,
    )


def get_payg_summary(
    annual_gross: float,
    has_tax_free_threshold: bool = True,
    config: Optional[TaxYearConfig] = None,
) -> PaygSummary:
    """Withholding on an annual salary at every common frequency."""
    result = calculate_payg(
        PaygInput(gross_income=annual_gross, frequency="ANNUALLY", has_tax_free_threshold=has_tax_free_threshold),
        config,
    )
    return PaygSummary(
        annual=result.annual_withholding,
        monthly=result.monthly,
        fortnightly=result.fortnightly,
        weekly=result.weekly,
        effective_rate=round_cents(result.annual_withholding / annual_gross * 100) if annual_gross > 0 else 0,
    )
