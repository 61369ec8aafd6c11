"""Medicare levy and Medicare levy surcharge.

Levy zones relative to the low-income threshold T:
- income <= T: no levy
- T < income < T * shade_out_multiplier: 10% of the excess over T (shade-in)
- income >= T * shade_out_multiplier: medicare_rate on the whole income

The shade-in rate makes the levy continuous at the shade-out bound, e.g.
with T = 26,000: (32,500 - 26,000) * 10% = 650 = 32,500 * 2%.

The surcharge applies only without private hospital cover and is income
times the rate of the first tier whose max covers the income.
"""

from ..rounding import format_currency, round_cents
from ..rules import TaxYearConfig
from ..schemas import CalculationStep, MedicareLevyInput, MedicareLevyResult, MedicareSummary

SHADE_IN_RATE = 0.10


def get_medicare_threshold(family_status: str, dependent_children: int, config: TaxYearConfig) -> float:
    """Low-income threshold for a single or family, raised per dependent child."""
    thresholds = config.medicare_thresholds
    if family_status == "FAMILY":
        return thresholds.family + dependent_children * thresholds.dependent_child_increase
    return thresholds.single


def _surcharge_rate(taxable_income: float, config: TaxYearConfig) -> float:
    for tier in config.medicare_surcharge_tiers:
        if tier.max is None or taxable_income <= tier.max:
            return tier.rate
    return config.medicare_surcharge_tiers[-1].rate


def calculate_medicare_levy(levy_input: MedicareLevyInput, config: TaxYearConfig) -> MedicareLevyResult:
    """Calculate Medicare levy and surcharge.

    Args:
        levy_input: Taxable income plus cover, exemption and family details
        config: Tax year rules

    Returns:
        MedicareLevyResult. Levy and surcharge are each rounded to cents and
        the total is the sum of the rounded parts.
    """
    income = levy_input.taxable_income

    if levy_input.has_medicare_exemption:
        return MedicareLevyResult(
            medicare_levy=0, medicare_surcharge=0, total=0, is_exempt=True,
            steps=[CalculationStep(label="Medicare levy", value=0, explanation="Exempt from Medicare levy")],
        )
    if income <= 0:
        return MedicareLevyResult(
            medicare_levy=0, medicare_surcharge=0, total=0,
            steps=[CalculationStep(label="Medicare levy", value=0, explanation="No levy on zero or negative income")],
        )

    threshold = get_medicare_threshold(levy_input.family_status, levy_input.dependent_children, config)
    shade_out = threshold * config.medicare_thresholds.shade_out_multiplier
    is_shade_in = False

    steps = [
        CalculationStep(label="Taxable income", value=income),
        CalculationStep(
            label="Medicare threshold",
            value=threshold,
            explanation=f"{levy_input.family_status.title()} threshold"
            + (f" with {levy_input.dependent_children} dependent children"
               if levy_input.family_status == "FAMILY" and levy_input.dependent_children else ""),
        ),
    ]

    if income <= threshold:
        levy = 0.0
        explanation = f"Income at or below {format_currency(threshold)}"
    elif income < shade_out:
        is_shade_in = True
        levy = round_cents((income - threshold) * SHADE_IN_RATE)
        explanation = (
            f"Shade-in: {SHADE_IN_RATE * 100:g}% of {format_currency(income - threshold, cents=True)} "
            f"over threshold (shade-out at {format_currency(shade_out)})"
        )
    else:
        levy = round_cents(income * config.medicare_rate)
        explanation = f"{config.medicare_rate * 100:g}% of taxable income"
    steps.append(CalculationStep(label="Medicare levy", value=levy, operation="+", explanation=explanation))

    surcharge = 0.0
    if not levy_input.has_private_health_insurance:
        rate = _surcharge_rate(income, config)
        surcharge = round_cents(income * rate)
        steps.append(CalculationStep(
            label="Medicare levy surcharge",
            value=surcharge,
            operation="+",
            explanation=f"No private hospital cover: {rate * 100:g}% of taxable income",
        ))

    total = round_cents(levy + surcharge)
    steps.append(CalculationStep(label="Total Medicare", value=total, operation="="))

    return MedicareLevyResult(
        medicare_levy=levy,
        medicare_surcharge=surcharge,
        total=total,
        is_shade_in=is_shade_in,
        threshold=threshold,
        steps=steps,
    )


def get_medicare_summary(
    taxable_income: float,
    has_private_health_insurance: bool,
    config: TaxYearConfig,
) -> MedicareSummary:
    """Single-person Medicare summary including the surcharge private cover would avoid."""
    result = calculate_medicare_levy(
        MedicareLevyInput(
            taxable_income=taxable_income,
            has_private_health_insurance=has_private_health_insurance,
        ),
        config,
    )
    saving = 0.0 if has_private_health_insurance else result.medicare_surcharge

    return MedicareSummary(
        levy=result.medicare_levy,
        surcharge=result.medicare_surcharge,
        total=result.total,
        as_percentage=round_cents(result.total / taxable_income * 100) if taxable_income > 0 else 0,
        could_save_with_phi=saving,
    )
