"""Tax position for a financial year.

Aggregates income and deductions into taxable income, then applies income
tax, Medicare, and offsets to reach net tax and the estimated refund
(positive) or amount owing (negative) against PAYG already withheld.

Division 293 tax is reported separately; it is assessed to the taxpayer
but usually paid from super, so it does not change the refund.
"""

import logging
from typing import Optional

from ..config import get_current_config
from ..rounding import format_currency, round_cents
from ..rules import TaxYearConfig
from ..schemas import (
    CalculationStep,
    DeductionBreakdown,
    IncomeBreakdown,
    MedicareLevyInput,
    TaxOffsetsInput,
    TaxPositionComparison,
    TaxPositionInput,
    TaxPositionResult,
)
from ..superannuation.contributions import UNUSED_CAP_PROMPT, calculate_division_293_tax
from .income_tax import calculate_income_tax
from .income_types import calculate_franking_credits
from .medicare import calculate_medicare_levy
from .offsets import BUCKET_LABELS, NON_REFUNDABLE_ORDER, apply_offsets, calculate_all_offsets

logger = logging.getLogger(__name__)

# Recommendation triggers
SACRIFICE_PROMPT_SALARY = 100000
HIGH_EFFECTIVE_RATE = 30


def _net_capital_gain(position_input: TaxPositionInput, config: TaxYearConfig) -> tuple[float, float]:
    """Return (net capital gain, capital loss carried forward).

    Losses are applied before the discount; unused losses carry forward.
    """
    gains = position_input.capital_gains
    losses = position_input.capital_losses
    if losses >= gains:
        return 0.0, round_cents(losses - gains)

    net = gains - losses
    if position_input.cgt_discount_eligible:
        net -= net * config.cgt.discount
    return round_cents(net), 0.0


def _income_breakdown(position_input: TaxPositionInput, config: TaxYearConfig) -> tuple[IncomeBreakdown, float]:
    franking_credits = calculate_franking_credits(
        position_input.franked_dividends, position_input.franking_percentage
    )
    dividends = round_cents(position_input.franked_dividends + position_input.unfranked_dividends)
    net_gain, loss_carried = _net_capital_gain(position_input, config)

    total = round_cents(
        position_input.salary
        + position_input.rental_income
        + dividends
        + franking_credits
        + position_input.interest
        + net_gain
        + position_input.foreign_income
        + position_input.other_income
    )
    income = IncomeBreakdown(
        salary=position_input.salary,
        rental=position_input.rental_income,
        dividends=dividends,
        franking_credits=franking_credits,
        interest=position_input.interest,
        net_capital_gain=net_gain,
        foreign=position_input.foreign_income,
        other=position_input.other_income,
        exempt=position_input.exempt_income,
        total_assessable=total,
    )
    return income, loss_carried


def _deduction_breakdown(position_input: TaxPositionInput) -> DeductionBreakdown:
    parts = {
        "work": position_input.work_deductions,
        "investment": position_input.investment_deductions,
        "donations": position_input.donations,
        "personal_super": position_input.personal_super_deduction,
        "other": position_input.other_deductions,
    }
    return DeductionBreakdown(**parts, total=round_cents(sum(parts.values())))


def _foreign_tax_limit(foreign_income: float, taxable_income: float, income_tax: float) -> Optional[float]:
    """Australian tax attributable to foreign income, at the average rate."""
    if foreign_income <= 0:
        return None
    if taxable_income <= 0:
        return 0.0
    return round_cents(income_tax * min(1.0, foreign_income / taxable_income))


def calculate_tax_position(
    position_input: TaxPositionInput,
    config: Optional[TaxYearConfig] = None,
) -> TaxPositionResult:
    """Calculate the full tax position for a financial year.

    Args:
        position_input: Annual income, deductions, PAYG withheld and offset eligibility
        config: Tax year rules (default: current financial year)

    Returns:
        TaxPositionResult with breakdowns, net tax and the estimated refund.
    """
    config = config or get_current_config()
    super_rules = config.superannuation
    warnings = []
    recommendations = []

    income, loss_carried = _income_breakdown(position_input, config)
    deductions = _deduction_breakdown(position_input)
    taxable_income = round_cents(max(0.0, income.total_assessable - deductions.total))

    income_tax = calculate_income_tax(taxable_income, config)
    medicare = calculate_medicare_levy(
        MedicareLevyInput(
            taxable_income=taxable_income,
            has_private_health_insurance=position_input.has_private_health_insurance,
            family_status=position_input.family_status,
            dependent_children=position_input.dependent_children,
        ),
        config,
    )
    gross_tax = round_cents(income_tax.tax_payable + medicare.total)

    offsets = calculate_all_offsets(
        TaxOffsetsInput(
            taxable_income=taxable_income,
            franking_credits=income.franking_credits,
            foreign_tax_paid=position_input.foreign_tax_paid,
            australian_tax_on_foreign_income=_foreign_tax_limit(
                position_input.foreign_income, taxable_income, income_tax.tax_payable
            ),
            is_senior=position_input.is_senior,
            has_spouse=position_input.has_spouse,
            other_offsets=position_input.other_offsets,
        ),
        config,
    ).offsets
    application = apply_offsets(gross_tax, offsets)
    net_tax = application.net_tax

    estimated_refund = round_cents(position_input.payg_withheld - net_tax)
    division_293 = calculate_division_293_tax(taxable_income, position_input.concessional_super, config)
    effective_rate = round_cents(max(0.0, net_tax) / taxable_income * 100) if taxable_income > 0 else 0.0

    logger.debug(
        f"{config.financial_year}: taxable {taxable_income}, gross tax {gross_tax}, "
        f"net tax {net_tax}, refund {estimated_refund}"
    )

    steps = [
        CalculationStep(label="Assessable income", value=income.total_assessable),
        CalculationStep(label="Deductions", value=deductions.total, operation="-"),
        CalculationStep(label="Taxable income", value=taxable_income, operation="="),
        CalculationStep(
            label="Income tax", value=income_tax.tax_payable,
            explanation=f"Marginal rate {income_tax.marginal_rate:g}%",
        ),
        CalculationStep(label="Medicare levy", value=medicare.medicare_levy, operation="+"),
    ]
    if medicare.medicare_surcharge:
        steps.append(CalculationStep(label="Medicare levy surcharge", value=medicare.medicare_surcharge, operation="+"))
    steps.extend(application.steps)
    steps.append(CalculationStep(label="PAYG withheld", value=position_input.payg_withheld))
    steps.append(CalculationStep(
        label="Estimated refund" if estimated_refund >= 0 else "Estimated amount owing",
        value=estimated_refund,
        operation="=",
        explanation="PAYG withheld - net tax",
    ))

    # Warnings
    if income.rental < 0:
        warnings.append(
            f"Negative gearing: rental losses of {format_currency(-income.rental)} reduce other assessable income."
        )
    if loss_carried > 0:
        warnings.append(f"Capital losses of {format_currency(loss_carried)} carried forward to future years.")
    for bucket in NON_REFUNDABLE_ORDER:
        amount = getattr(application.unused_offsets, bucket)
        if amount > 0:
            warnings.append(
                f"{format_currency(amount, cents=True)} of {BUCKET_LABELS[bucket].lower()} is "
                "non-refundable and was not used."
            )
    if offsets.foreign_tax < position_input.foreign_tax_paid:
        warnings.append(
            f"Foreign income tax offset limited to {format_currency(offsets.foreign_tax, cents=True)}."
        )
    if division_293 > 0:
        warnings.append(
            f"Division 293 tax of {format_currency(division_293)} applies: income plus concessional "
            f"contributions exceed {format_currency(super_rules.division_293_threshold)}."
        )
    if position_input.concessional_super > super_rules.concessional_cap:
        warnings.append(
            f"Concessional contributions exceed the {format_currency(super_rules.concessional_cap)} cap."
        )

    # Recommendations
    marginal = income_tax.marginal_rate / 100
    remaining_cap = super_rules.concessional_cap - position_input.concessional_super
    if (
        position_input.salary > SACRIFICE_PROMPT_SALARY
        and marginal > super_rules.contributions_tax_rate
        and remaining_cap > UNUSED_CAP_PROMPT
    ):
        recommendations.append(
            f"You have {format_currency(remaining_cap)} unused concessional cap. Salary sacrifice could "
            f"save up to {format_currency(remaining_cap * (marginal - super_rules.contributions_tax_rate))} "
            "compared to income tax."
        )
    if income.rental < 0:
        recommendations.append(
            f"Negative gearing reduces your tax by about {format_currency(-income.rental * marginal)} "
            "at your marginal rate."
        )
    if income.franking_credits > 0:
        recommendations.append(
            f"{format_currency(income.franking_credits)} of franking credits reduce your tax; "
            "any excess is refunded."
        )
    if application.used_offsets.lito > 0:
        recommendations.append(
            f"Low income tax offset of {format_currency(application.used_offsets.lito)} applied."
        )
    if effective_rate > HIGH_EFFECTIVE_RATE:
        recommendations.append(
            f"Your effective tax rate is {effective_rate:.1f}%. Review deduction opportunities "
            "and salary sacrifice."
        )

    return TaxPositionResult(
        financial_year=config.financial_year,
        income=income,
        deductions=deductions,
        taxable_income=taxable_income,
        income_tax=income_tax.tax_payable,
        medicare_levy=medicare.medicare_levy,
        medicare_surcharge=medicare.medicare_surcharge,
        gross_tax=gross_tax,
        offsets_entitled=offsets,
        offsets_used=application.used_offsets,
        net_tax=net_tax,
        payg_withheld=position_input.payg_withheld,
        estimated_refund=estimated_refund,
        division_293_tax=division_293,
        effective_rate=effective_rate,
        marginal_rate=income_tax.marginal_rate,
        warnings=warnings,
        recommendations=recommendations,
        steps=steps,
    )


def calculate_quick_tax_position(
    salary: float,
    payg_withheld: float = 0,
    deductions: float = 0,
    config: Optional[TaxYearConfig] = None,
) -> TaxPositionResult:
    """Tax position for a salary earner with a single lump of deductions."""
    return calculate_tax_position(
        TaxPositionInput(
            salary=max(0.0, salary),
            payg_withheld=max(0.0, payg_withheld),
            other_deductions=max(0.0, deductions),
        ),
        config,
    )


def compare_tax_positions(
    position_1: TaxPositionInput,
    position_2: TaxPositionInput,
    config: Optional[TaxYearConfig] = None,
) -> TaxPositionComparison:
    """Compare two scenarios; differences are position_2 minus position_1."""
    config = config or get_current_config()
    result_1 = calculate_tax_position(position_1, config)
    result_2 = calculate_tax_position(position_2, config)
    return TaxPositionComparison(
        position_1=result_1,
        position_2=result_2,
        taxable_income_difference=round_cents(result_2.taxable_income - result_1.taxable_income),
        net_tax_difference=round_cents(result_2.net_tax - result_1.net_tax),
        refund_difference=round_cents(result_2.estimated_refund - result_1.estimated_refund),
    )
