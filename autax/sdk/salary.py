"""Salary processing: gross/net resolution, sacrifice, tax and super.

Pipeline for one salary:
1. Annual gross: annualise a GROSS amount, or solve for the gross that
   produces a NET amount
2. Taxable income = gross - annualised salary sacrifice
3. PAYG withholding and Medicare levy on taxable income
4. Net = gross - (PAYG + Medicare) - sacrifice
5. Super = gross x SG rate + sacrifice
6. Per-period figures for the pay frequency

NET amounts are solved against this same pipeline, so running the resolved
gross forward reproduces the requested net to within a cent.
"""

import logging
import math
from typing import Optional

from .config import get_current_config, get_marginal_rate
from .rounding import format_currency, round_cents, round_dollars
from .rules import TaxYearConfig
from .schemas import (
    CalculationStep,
    MedicareLevyInput,
    PaygInput,
    PerPeriodAmounts,
    SacrificeRecommendation,
    SalaryBreakdown,
    SalaryComparison,
    SalaryDifferences,
    SalaryInput,
    SalarySummary,
)
from .solver import bisect_increasing
from .taxes.medicare import calculate_medicare_levy
from .taxes.withholding import PERIODS_PER_YEAR, annualise, calculate_payg, to_period

logger = logging.getLogger(__name__)

# Largest share of gross the sacrifice advisor will recommend
MAX_SACRIFICE_SHARE = 0.30
# Solve NET inputs tighter than a cent so the rounded gross still lands within one
NET_SOLVE_TOLERANCE = 0.001
MAX_BRACKET_DOUBLINGS = 4

FREQUENCY_LABELS = {
    "WEEKLY": "per week",
    "FORTNIGHTLY": "per fortnight",
    "MONTHLY": "per month",
    "QUARTERLY": "per quarter",
    "ANNUALLY": "per year",
}


def _annual_taxes(taxable_income: float, has_tax_free_threshold: bool, config: TaxYearConfig) -> tuple:
    """Return (PaygResult, MedicareLevyResult) for an annual taxable income."""
    payg = calculate_payg(
        PaygInput(gross_income=taxable_income, frequency="ANNUALLY", has_tax_free_threshold=has_tax_free_threshold),
        config,
    )
    medicare = calculate_medicare_levy(MedicareLevyInput(taxable_income=taxable_income), config)
    return payg, medicare


def _annual_net(gross: float, sacrifice: float, has_tax_free_threshold: bool, config: TaxYearConfig) -> float:
    payg, medicare = _annual_taxes(gross - sacrifice, has_tax_free_threshold, config)
    return gross - payg.annual_withholding - medicare.total - sacrifice


def _solve_gross(target_net: float, sacrifice: float, has_tax_free_threshold: bool, config: TaxYearConfig):
    """Find the annual gross whose net after tax and sacrifice equals target_net."""
    def net_for(gross: float) -> float:
        return _annual_net(gross, sacrifice, has_tax_free_threshold, config)

    low = target_net + sacrifice
    high = 2 * low
    for _ in range(MAX_BRACKET_DOUBLINGS):
        if net_for(high) >= target_net:
            break
        high *= 2

    return bisect_increasing(net_for, target_net, low, high, tolerance=NET_SOLVE_TOLERANCE)


def _gross_to_cents(gross: float, target_net: float, sacrifice: float, has_tax_free_threshold: bool,
                    config: TaxYearConfig) -> float:
    """Round a solved gross to whole cents on the same side of any withholding step."""
    lower = round_cents(math.floor(gross * 100) / 100)
    candidates = (lower, round_cents(lower + 0.01))
    return min(
        candidates,
        key=lambda cents: abs(_annual_net(cents, sacrifice, has_tax_free_threshold, config) - target_net),
    )


def process_salary(salary_input: SalaryInput, config: Optional[TaxYearConfig] = None) -> SalaryBreakdown:
    """Resolve a salary into annual and per-period gross, tax, super and net.

    Args:
        salary_input: Amount per pay period, whether it is gross or net, the pay
            frequency, salary sacrifice and tax-free threshold choice
        config: Tax year rules (default: current financial year)

    Returns:
        SalaryBreakdown with annual figures rounded to cents, per-period
        figures for the pay frequency, and the calculation steps.
    """
    config = config or get_current_config()
    frequency = salary_input.pay_frequency
    sacrifice_frequency = salary_input.salary_sacrifice_frequency or frequency
    tft = salary_input.has_tax_free_threshold
    steps = []
    warnings = []
    solver_iterations = None

    steps.append(CalculationStep(
        label=f"Input amount ({salary_input.salary_type.lower()})",
        value=salary_input.amount,
        explanation=FREQUENCY_LABELS[frequency],
    ))

    annual_sacrifice = round_cents(annualise(salary_input.salary_sacrifice, sacrifice_frequency))

    if salary_input.salary_type == "GROSS":
        annual_gross = round_cents(max(0.0, annualise(salary_input.amount, frequency)))
        steps.append(CalculationStep(
            label="Annual gross salary",
            value=annual_gross,
            explanation=f"{format_currency(salary_input.amount, cents=True)} x {PERIODS_PER_YEAR[frequency]} periods",
        ))
    else:
        target_net = annualise(salary_input.amount, frequency)
        steps.append(CalculationStep(label="Target annual net", value=round_cents(target_net)))
        if target_net <= 0:
            annual_gross = 0.0
            solver_iterations = 0
        else:
            solved = _solve_gross(target_net, annual_sacrifice, tft, config)
            annual_gross = _gross_to_cents(solved.value, target_net, annual_sacrifice, tft, config)
            solver_iterations = solved.iterations
            if not solved.converged:
                warnings.append(
                    f"Gross could not be resolved exactly from net after {solved.iterations} iterations; "
                    "figures are a best estimate"
                )
        steps.append(CalculationStep(
            label="Calculated annual gross",
            value=annual_gross,
            explanation=f"Solved from net ({solver_iterations} iterations)",
        ))

    if annual_sacrifice > 0:
        steps.append(CalculationStep(
            label="Salary sacrifice (pre-tax)",
            value=annual_sacrifice,
            operation="-",
            explanation="Reduces taxable income",
        ))
        if annual_sacrifice > annual_gross:
            warnings.append("Salary sacrifice exceeds gross salary")

    taxable_income = round_cents(max(0.0, annual_gross - annual_sacrifice))
    steps.append(CalculationStep(
        label="Taxable income",
        value=taxable_income,
        operation="=",
        explanation="Gross minus salary sacrifice" if annual_sacrifice > 0 else "Same as gross salary",
    ))

    payg, medicare = _annual_taxes(taxable_income, tft, config)
    steps.append(CalculationStep(
        label="PAYG withholding",
        value=payg.annual_withholding,
        operation="-",
        explanation="Tax withheld by employer",
    ))
    if salary_input.has_hecs_debt:
        steps.append(CalculationStep(
            label="HECS-HELP withholding",
            value=0,
            operation="-",
            explanation="Not yet implemented - not included in tax",
        ))
        warnings.append("HECS-HELP repayments are not included in withholding")
    steps.append(CalculationStep(
        label="Medicare levy",
        value=medicare.total,
        operation="-",
        explanation="Shade-in rate applied" if medicare.is_shade_in else f"{config.medicare_rate * 100:g}% of taxable income",
    ))

    total_tax = round_cents(payg.annual_withholding + medicare.total)
    annual_net = round_cents(annual_gross - total_tax - annual_sacrifice)
    steps.append(CalculationStep(label="Total tax (PAYG + Medicare)", value=total_tax, operation="="))
    steps.append(CalculationStep(
        label="Annual net salary",
        value=annual_net,
        operation="=",
        explanation="Take-home pay after tax and sacrifice",
    ))

    rate = config.superannuation.guarantee_rate
    super_guarantee = round_cents(annual_gross * rate)
    total_super = round_cents(super_guarantee + annual_sacrifice)
    steps.append(CalculationStep(
        label=f"Super guarantee ({rate * 100:g}%)",
        value=super_guarantee,
        explanation="Employer contribution on top of salary",
    ))
    if annual_sacrifice > 0:
        steps.append(CalculationStep(label="Total super (SG + sacrifice)", value=total_super, operation="="))
    if total_super > config.superannuation.concessional_cap:
        warnings.append(
            f"Concessional contributions of {format_currency(total_super)} exceed the "
            f"{format_currency(config.superannuation.concessional_cap)} cap"
        )

    per_period = PerPeriodAmounts(
        frequency=frequency,
        gross=round_cents(to_period(annual_gross, frequency)),
        tax=round_cents(to_period(total_tax, frequency)),
        net=round_cents(to_period(annual_net, frequency)),
        superannuation=round_cents(to_period(total_super, frequency)),
    )
    steps.append(CalculationStep(
        label=f"Net {FREQUENCY_LABELS[frequency]}",
        value=per_period.net,
        operation="=",
        explanation="Take-home pay each pay period",
    ))

    return SalaryBreakdown(
        gross_salary=annual_gross,
        net_salary=annual_net,
        taxable_income=taxable_income,
        salary_sacrifice=annual_sacrifice,
        payg_withholding=payg.annual_withholding,
        medicare_levy=medicare.total,
        total_tax=total_tax,
        super_guarantee=super_guarantee,
        total_super=total_super,
        per_period=per_period,
        solver_iterations=solver_iterations,
        warnings=warnings,
        steps=steps,
    )


def get_salary_summary(
    annual_gross: float,
    salary_sacrifice: float = 0,
    config: Optional[TaxYearConfig] = None,
) -> SalarySummary:
    """Headline figures for an annual gross salary."""
    config = config or get_current_config()
    result = process_salary(
        SalaryInput(amount=annual_gross, pay_frequency="ANNUALLY", salary_sacrifice=salary_sacrifice),
        config,
    )
    return SalarySummary(
        gross=result.gross_salary,
        net=result.net_salary,
        tax=result.total_tax,
        superannuation=result.total_super,
        effective_tax_rate=round_cents(result.total_tax / result.gross_salary * 100) if result.gross_salary > 0 else 0,
        marginal_tax_rate=round_cents(get_marginal_rate(result.taxable_income, config) * 100),
    )


def calculate_optimal_salary_sacrifice(
    annual_gross: float,
    config: Optional[TaxYearConfig] = None,
) -> SacrificeRecommendation:
    """Recommend a salary sacrifice amount that fills the concessional cap.

    The recommendation is the cap headroom left after SG, limited to 30% of
    gross. Savings are amount x (marginal rate - contributions tax rate), so
    sacrifice only helps when the marginal rate is above the 15% fund tax.
    """
    config = config or get_current_config()
    rules = config.superannuation
    marginal = get_marginal_rate(annual_gross, config)

    def no_benefit(reason: str) -> SacrificeRecommendation:
        return SacrificeRecommendation(
            optimal_amount=0, tax_savings=0, net_impact=0,
            marginal_rate=round_cents(marginal * 100), reason=reason,
        )

    if annual_gross <= 0:
        return no_benefit("No salary to sacrifice")

    headroom = rules.concessional_cap - annual_gross * rules.guarantee_rate
    if headroom <= 0:
        return no_benefit("Super guarantee already fills the concessional cap")

    if marginal <= rules.contributions_tax_rate:
        return no_benefit(
            f"Marginal rate of {marginal * 100:g}% is not above the "
            f"{rules.contributions_tax_rate * 100:g}% contributions tax; sacrifice would not save tax"
        )

    amount = round_dollars(min(headroom, annual_gross * MAX_SACRIFICE_SHARE))
    savings = round_dollars(amount * (marginal - rules.contributions_tax_rate))

    base = process_salary(SalaryInput(amount=annual_gross), config)
    sacrificed = process_salary(SalaryInput(amount=annual_gross, salary_sacrifice=amount), config)
    net_impact = round_dollars(sacrificed.net_salary - base.net_salary)

    return SacrificeRecommendation(
        optimal_amount=amount,
        tax_savings=savings,
        net_impact=net_impact,
        marginal_rate=round_cents(marginal * 100),
        reason=(
            f"Sacrificing {format_currency(amount)} saves about {format_currency(savings)} in tax "
            f"(taxed at {rules.contributions_tax_rate * 100:g}% in super instead of {marginal * 100:g}%)"
        ),
    )


def compare_salary_scenarios(
    scenario_1: SalaryInput,
    scenario_2: SalaryInput,
    config: Optional[TaxYearConfig] = None,
) -> SalaryComparison:
    """Process two salaries and report scenario 2 minus scenario 1."""
    config = config or get_current_config()
    result_1 = process_salary(scenario_1, config)
    result_2 = process_salary(scenario_2, config)
    return SalaryComparison(
        scenario_1=result_1,
        scenario_2=result_2,
        differences=SalaryDifferences(
            gross=round_cents(result_2.gross_salary - result_1.gross_salary),
            net=round_cents(result_2.net_salary - result_1.net_salary),
            tax=round_cents(result_2.total_tax - result_1.total_tax),
            superannuation=round_cents(result_2.total_super - result_1.total_super),
        ),
    )
