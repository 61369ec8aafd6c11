"""Superannuation contributions and the taxes on them.

Concessional (before-tax) = SG + salary sacrifice + personal deductible.
Non-concessional (after-tax) = personal non-deductible + spouse contributions.

The fund pays contributions tax on concessional contributions. Division 293
adds a further tax when taxable income plus concessional contributions
exceeds the threshold, on the smaller of the contributions and the excess.
"""

from typing import Optional

from ..config import get_current_config, get_marginal_rate
from ..rounding import format_currency, round_cents, round_dollars
from ..rules import TaxYearConfig
from ..schemas import (
    CalculationStep,
    CapUtilisation,
    CoContributionResult,
    SpouseOffsetResult,
    SuperContributionInput,
    SuperContributionResult,
    SuperContributionSummary,
    SuperGuaranteeResult,
)

# Summary thresholds for suggesting more salary sacrifice
UNUSED_CAP_PROMPT = 5000
SACRIFICE_PROMPT_AMOUNT = 10000


def calculate_super_guarantee(gross_salary: float, config: Optional[TaxYearConfig] = None) -> SuperGuaranteeResult:
    """Employer SG on earnings up to the annual maximum contribution base."""
    config = config or get_current_config()
    rules = config.superannuation
    max_base = rules.max_contribution_base_annual
    eligible = min(max(0.0, gross_salary), max_base)
    amount = round_cents(eligible * rules.guarantee_rate)

    steps = [CalculationStep(label="Gross salary", value=gross_salary, explanation="Annual gross salary before tax")]
    if gross_salary > max_base:
        steps.append(CalculationStep(
            label="Maximum super contribution base",
            value=max_base,
            explanation=(
                f"SG applies only to the first {format_currency(max_base)} "
                f"(quarterly maximum {format_currency(rules.max_contribution_base_quarterly)})"
            ),
        ))
    steps.append(CalculationStep(
        label=f"Super guarantee ({rules.guarantee_rate * 100:g}%)",
        value=amount,
        operation="*",
        explanation=f"{format_currency(eligible)} x {rules.guarantee_rate * 100:g}%",
    ))

    return SuperGuaranteeResult(
        amount=amount,
        rate=rules.guarantee_rate,
        eligible_earnings=eligible,
        max_contribution_base=max_base,
        steps=steps,
    )


def calculate_division_293_tax(
    taxable_income: float,
    concessional_contributions: float,
    config: Optional[TaxYearConfig] = None,
) -> float:
    """Division 293 tax, rounded to whole dollars.

    Example: taxable 230,000 + concessional 30,000 = 260,000 against a 250,000
    threshold taxes min(30,000, 10,000) at 15% = 1,500.
    """
    config = config or get_current_config()
    rules = config.superannuation
    combined = taxable_income + concessional_contributions
    if concessional_contributions <= 0 or combined <= rules.division_293_threshold:
        return 0.0
    taxed = min(concessional_contributions, combined - rules.division_293_threshold)
    return round_dollars(taxed * rules.division_293_rate)


def calculate_super_contributions(
    contribution_input: SuperContributionInput,
    marginal_rate: Optional[float] = None,
    config: Optional[TaxYearConfig] = None,
) -> SuperContributionResult:
    """Resolve all contributions for a year and the tax on them.

    Args:
        contribution_input: Gross salary and any voluntary contributions (annual)
        marginal_rate: Marginal rate as a decimal, used to price salary
            sacrifice (default: rate for the gross salary)
        config: Tax year rules (default: current financial year)
    """
    config = config or get_current_config()
    rules = config.superannuation
    sacrifice = contribution_input.salary_sacrifice
    taxable_income = contribution_input.gross_salary - sacrifice
    if marginal_rate is None:
        marginal_rate = get_marginal_rate(contribution_input.gross_salary, config)

    sg = calculate_super_guarantee(contribution_input.gross_salary, config)
    steps = list(sg.steps)

    if sacrifice > 0:
        steps.append(CalculationStep(
            label="Salary sacrifice", value=sacrifice, operation="+",
            explanation="Pre-tax contributions from salary",
        ))
    if contribution_input.personal_deductible > 0:
        steps.append(CalculationStep(
            label="Personal deductible contributions", value=contribution_input.personal_deductible, operation="+",
            explanation="Personal contributions with a tax deduction claimed",
        ))

    total_concessional = round_cents(sg.amount + sacrifice + contribution_input.personal_deductible)
    steps.append(CalculationStep(
        label="Total concessional contributions", value=total_concessional, operation="=",
        explanation="SG + salary sacrifice + personal deductible",
    ))

    total_non_concessional = round_cents(
        contribution_input.personal_non_deductible + contribution_input.spouse_contribution
    )
    if total_non_concessional > 0:
        steps.append(CalculationStep(
            label="Total non-concessional contributions", value=total_non_concessional, operation="=",
            explanation="After-tax contributions (no deduction claimed)",
        ))

    savings = 0.0
    if sacrifice > 0 and marginal_rate > rules.contributions_tax_rate:
        savings = round_dollars(sacrifice * (marginal_rate - rules.contributions_tax_rate))
        steps.append(CalculationStep(
            label="Tax savings from salary sacrifice",
            value=savings,
            explanation=(
                f"{format_currency(sacrifice)} x ({marginal_rate * 100:g}% - "
                f"{rules.contributions_tax_rate * 100:g}%)"
            ),
        ))

    contributions_tax = round_dollars(total_concessional * rules.contributions_tax_rate)
    steps.append(CalculationStep(
        label=f"Contributions tax ({rules.contributions_tax_rate * 100:g}%)",
        value=contributions_tax,
        explanation="Paid by the fund on concessional contributions",
    ))

    division_293 = calculate_division_293_tax(taxable_income, total_concessional, config)
    if division_293 > 0:
        steps.append(CalculationStep(
            label="Division 293 tax",
            value=division_293,
            operation="+",
            explanation=(
                f"Income plus concessional contributions exceeds "
                f"{format_currency(rules.division_293_threshold)}"
            ),
        ))

    return SuperContributionResult(
        super_guarantee=sg.amount,
        salary_sacrifice=sacrifice,
        personal_deductible=contribution_input.personal_deductible,
        total_concessional=total_concessional,
        personal_non_deductible=contribution_input.personal_non_deductible,
        spouse_contribution=contribution_input.spouse_contribution,
        total_non_concessional=total_non_concessional,
        total_contributions=round_cents(total_concessional + total_non_concessional),
        contributions_tax=contributions_tax,
        division_293_tax=division_293,
        employer_total=sg.amount,
        employee_total=round_cents(sacrifice + contribution_input.personal_deductible + total_non_concessional),
        tax_savings_from_salary_sacrifice=savings,
        steps=steps,
    )


def calculate_co_contribution(
    taxable_income: float,
    personal_non_deductible: float,
    config: Optional[TaxYearConfig] = None,
) -> CoContributionResult:
    """Government co-contribution on personal after-tax contributions.

    Matches contributions up to the maximum below the lower income threshold,
    then reduces linearly to nothing at the upper threshold.
    """
    config = config or get_current_config()
    rules = config.superannuation.co_contribution

    if taxable_income > rules.upper_threshold:
        return CoContributionResult(
            eligible=False, amount=0,
            explanation=f"Income exceeds upper threshold of {format_currency(rules.upper_threshold)}",
        )
    if personal_non_deductible <= 0:
        return CoContributionResult(
            eligible=False, amount=0, explanation="No eligible non-concessional contributions made",
        )

    base = min(personal_non_deductible * rules.matching_rate, rules.max_amount)

    if taxable_income <= rules.lower_threshold:
        return CoContributionResult(
            eligible=True,
            amount=round_cents(base),
            explanation=(
                f"Full co-contribution: {format_currency(base, cents=True)} "
                f"({rules.matching_rate * 100:g}c per dollar up to {format_currency(rules.max_amount)})"
            ),
        )

    reduction_rate = rules.max_amount / (rules.upper_threshold - rules.lower_threshold)
    amount = round_dollars(max(0.0, base - (taxable_income - rules.lower_threshold) * reduction_rate))
    return CoContributionResult(
        eligible=amount > 0,
        amount=amount,
        explanation=(
            f"Reduced co-contribution: {format_currency(amount)} due to income phase-out"
            if amount > 0 else "Co-contribution fully phased out due to income level"
        ),
    )


def calculate_spouse_contribution_offset(
    spouse_income: float,
    contribution_amount: float,
    config: Optional[TaxYearConfig] = None,
) -> SpouseOffsetResult:
    """Tax offset for contributions made to a low-income spouse's super."""
    config = config or get_current_config()
    rules = config.superannuation.spouse_offset

    if spouse_income >= rules.upper_threshold:
        return SpouseOffsetResult(
            eligible=False, offset=0,
            explanation=(
                f"Spouse income ({format_currency(spouse_income)}) exceeds threshold "
                f"of {format_currency(rules.upper_threshold)}"
            ),
        )
    if contribution_amount <= 0:
        return SpouseOffsetResult(eligible=False, offset=0, explanation="No spouse contribution made")

    eligible_contribution = min(contribution_amount, rules.max_contribution)
    base = eligible_contribution * rules.rate

    if spouse_income <= rules.lower_threshold:
        offset = round_dollars(min(base, rules.max_offset))
        return SpouseOffsetResult(
            eligible=True,
            offset=offset,
            explanation=(
                f"Full offset: {format_currency(offset)} ({rules.rate * 100:g}% of up to "
                f"{format_currency(rules.max_contribution)})"
            ),
        )

    reduction_per_dollar = rules.max_offset / (rules.upper_threshold - rules.lower_threshold)
    offset = round_dollars(max(0.0, base - (spouse_income - rules.lower_threshold) * reduction_per_dollar))
    return SpouseOffsetResult(
        eligible=offset > 0,
        offset=offset,
        explanation=(
            f"Reduced offset: {format_currency(offset)} due to spouse income phase-out"
            if offset > 0 else "Offset fully phased out due to spouse income level"
        ),
    )


def _utilisation(used: float, cap: float) -> CapUtilisation:
    return CapUtilisation(
        used=used,
        cap=cap,
        remaining=max(0.0, round_cents(cap - used)),
        percentage=round_cents(min(100.0, used / cap * 100)) if cap > 0 else 0,
    )


def get_super_contribution_summary(
    contribution_input: SuperContributionInput,
    marginal_rate: Optional[float] = None,
    config: Optional[TaxYearConfig] = None,
) -> SuperContributionSummary:
    """Contributions plus cap utilisation, warnings and recommendations."""
    config = config or get_current_config()
    rules = config.superannuation
    contributions = calculate_super_contributions(contribution_input, marginal_rate, config)
    if marginal_rate is None:
        marginal_rate = get_marginal_rate(contribution_input.gross_salary, config)

    concessional = _utilisation(contributions.total_concessional, rules.concessional_cap)
    non_concessional = _utilisation(contributions.total_non_concessional, rules.non_concessional_cap)
    concessional_headroom = rules.concessional_cap - contributions.total_concessional
    non_concessional_headroom = rules.non_concessional_cap - contributions.total_non_concessional
    warnings = []
    recommendations = []

    if concessional_headroom < 0:
        warnings.append(
            f"Concessional contributions exceed cap by {format_currency(-concessional_headroom)}. "
            "Excess will be taxed at your marginal rate."
        )
    if non_concessional_headroom < 0:
        warnings.append(
            f"Non-concessional contributions exceed cap by {format_currency(-non_concessional_headroom)}. "
            "Excess contributions tax may apply."
        )
    if contributions.division_293_tax > 0:
        warnings.append(
            f"Division 293 tax of {format_currency(contributions.division_293_tax)} applies as combined "
            f"income exceeds {format_currency(rules.division_293_threshold)}."
        )

    saving_rate = marginal_rate - rules.contributions_tax_rate
    if concessional_headroom > UNUSED_CAP_PROMPT and marginal_rate >= 0.30:
        recommendations.append(
            f"You have {format_currency(concessional_headroom)} unused concessional cap. "
            f"Consider salary sacrifice to save {saving_rate * 100:.0f}% tax."
        )
    if contributions.salary_sacrifice == 0 and marginal_rate >= 0.30 and concessional_headroom > 0:
        amount = min(SACRIFICE_PROMPT_AMOUNT, concessional_headroom)
        recommendations.append(
            f"Salary sacrificing {format_currency(amount)} would save approximately "
            f"{format_currency(amount * saving_rate)} in tax."
        )

    return SuperContributionSummary(
        contributions=contributions,
        concessional=concessional,
        non_concessional=non_concessional,
        warnings=warnings,
        recommendations=recommendations,
    )
