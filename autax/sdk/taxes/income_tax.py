"""Progressive income tax on taxable income.

Tax for an income in a bracket is the bracket's base amount plus the rate
applied to each dollar from the bracket's min (the first dollar taxed at
that rate) up to the income:

    tax = base_amount + (income - min + 1) * rate

e.g. $100,000 in 2024-25: 4,288 + 55,000 * 0.30 = 20,788
"""

from ..config import get_bracket_info
from ..rounding import format_currency, round_cents
from ..rules import TaxYearConfig
from ..schemas import CalculationStep, DeductionSavingsResult, IncomeTaxResult, MarginalTaxResult


def _tax_payable(taxable_income: float, config: TaxYearConfig) -> float:
    if taxable_income <= 0:
        return 0.0
    info = get_bracket_info(taxable_income, config)
    return round_cents(info.bracket.base_amount + info.income_within_bracket * info.bracket.rate)


def calculate_income_tax(taxable_income: float, config: TaxYearConfig) -> IncomeTaxResult:
    """Calculate income tax payable on taxable income.

    Args:
        taxable_income: Assessable income less deductions (annual)
        config: Tax year rules

    Returns:
        IncomeTaxResult with tax payable, effective rate and marginal rate
        (both as percentages) and the calculation steps.
    """
    if taxable_income <= 0:
        return IncomeTaxResult(
            taxable_income=taxable_income,
            tax_payable=0,
            effective_rate=0,
            marginal_rate=0,
            steps=[CalculationStep(
                label="Taxable income",
                value=taxable_income,
                explanation="No tax payable on zero or negative taxable income",
            )],
        )

    info = get_bracket_info(taxable_income, config)
    bracket = info.bracket
    tax = _tax_payable(taxable_income, config)
    upper = format_currency(bracket.max) if bracket.max is not None else "and over"

    steps = [
        CalculationStep(label="Taxable income", value=taxable_income),
        CalculationStep(
            label="Tax bracket",
            value=bracket.rate * 100,
            explanation=f"{format_currency(bracket.min)} {upper} at {bracket.rate * 100:g}%",
        ),
        CalculationStep(
            label="Tax on income below bracket",
            value=bracket.base_amount,
            operation="+",
        ),
        CalculationStep(
            label="Tax on income within bracket",
            value=round_cents(info.income_within_bracket * bracket.rate),
            operation="+",
            explanation=f"{format_currency(info.income_within_bracket)} x {bracket.rate * 100:g}%",
        ),
        CalculationStep(label="Income tax payable", value=tax, operation="="),
    ]

    return IncomeTaxResult(
        taxable_income=taxable_income,
        tax_payable=tax,
        effective_rate=round_cents(tax / taxable_income * 100),
        marginal_rate=round_cents(bracket.rate * 100),
        steps=steps,
    )


def calculate_marginal_tax(
    additional_income: float,
    current_income: float,
    config: TaxYearConfig,
) -> MarginalTaxResult:
    """Tax on additional income stacked on top of current income.

    A negative additional_income gives the (negative) tax change from
    reducing income, which is how deductions and salary sacrifice are priced.
    """
    tax = round_cents(
        _tax_payable(current_income + additional_income, config)
        - _tax_payable(current_income, config)
    )
    rate = round_cents(tax / additional_income * 100) if additional_income else 0.0
    return MarginalTaxResult(additional_income=additional_income, tax=tax, marginal_rate=rate)


def calculate_deduction_savings(
    deduction: float,
    current_income: float,
    config: TaxYearConfig,
) -> DeductionSavingsResult:
    """Income tax saved by claiming a deduction against current income."""
    if deduction <= 0:
        return DeductionSavingsResult(deduction=deduction, savings=0, effective_rate=0)

    reduced = calculate_marginal_tax(-deduction, current_income, config)
    savings = -reduced.tax
    return DeductionSavingsResult(
        deduction=deduction,
        savings=savings,
        effective_rate=round_cents(savings / deduction * 100),
    )


def get_tax_bracket_description(taxable_income: float, config: TaxYearConfig) -> str:
    """Describe the bracket an income falls in, e.g. '30% bracket ($45,001 - $135,000)'."""
    bracket = get_bracket_info(taxable_income, config).bracket
    if bracket.rate == 0:
        return f"Tax-free threshold (up to {format_currency(bracket.max)})"
    if bracket.max is None:
        return f"{bracket.rate * 100:g}% bracket ({format_currency(bracket.min)}+)"
    return f"{bracket.rate * 100:g}% bracket ({format_currency(bracket.min)} - {format_currency(bracket.max)})"
