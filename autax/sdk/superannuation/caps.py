"""Contribution cap tracking with carry-forward and bring-forward.

Carry-forward (concessional): unused cap from up to five prior financial
years can be used when the total super balance is below the threshold.
Older amounts are used first.

Bring-forward (non-concessional): up to three years of cap can be used in
one year, depending on which total-super-balance band applies.

Excess contributions tax is an estimate only (32% extra on concessional
excess, 47% on non-concessional excess). The real assessment depends on
the member's marginal rate and includes an interest charge.
"""

import logging
from typing import Iterable, Mapping, Optional

from ..config import get_current_config, unused_concessional_cap, years_between
from ..rounding import format_currency, round_cents, round_dollars
from ..rules import TaxYearConfig
from ..schemas import (
    BringForwardResult,
    CapTrackingInput,
    CapTrackingResult,
    CarryForwardAmount,
    CarryForwardRecord,
    CarryForwardResult,
    ConcessionalCapStatus,
    ContributionStrategy,
    NonConcessionalCapStatus,
)

logger = logging.getLogger(__name__)

EXCESS_CONCESSIONAL_RATE = 0.32
EXCESS_NON_CONCESSIONAL_RATE = 0.47
NEAR_CAP_SHARE = 0.9

EXCESS_TAX_NOTE = (
    "Estimate only: excess concessional contributions at an additional 32% and excess "
    "non-concessional contributions at 47%. The ATO assessment depends on your marginal "
    "rate and includes an interest charge."
)


def build_carry_forward_records(concessional_by_year: Mapping[str, float]) -> list[CarryForwardRecord]:
    """Turn concessional contributions per past year into unused-cap records.

    Args:
        concessional_by_year: {'2021-22': 12000, ...} concessional contributions made

    Returns:
        One record per year with a known cap, oldest first.
    """
    return [
        CarryForwardRecord(financial_year=year, unused_amount=unused_concessional_cap(year, contributed))
        for year, contributed in sorted(concessional_by_year.items())
    ]


def calculate_carry_forward(
    records: Iterable[CarryForwardRecord],
    total_super_balance: float,
    config: Optional[TaxYearConfig] = None,
) -> CarryForwardResult:
    """Sum unused concessional cap available from prior years.

    Only records 1 to max_years financial years before config's year with a
    positive unused amount count. The breakdown is oldest first, the order in
    which carry-forward is consumed.
    """
    config = config or get_current_config()
    rules = config.superannuation.carry_forward

    if total_super_balance >= rules.balance_threshold:
        return CarryForwardResult(
            available=0,
            eligible=False,
            reason=(
                f"Total super balance ({format_currency(total_super_balance)}) is not below "
                f"the {format_currency(rules.balance_threshold)} threshold"
            ),
        )

    eligible_records = [
        record for record in records
        if 0 < years_between(record.financial_year, config.financial_year) <= rules.max_years
        and record.unused_amount > 0
    ]
    eligible_records.sort(key=lambda record: record.financial_year)

    available = round_cents(sum(record.unused_amount for record in eligible_records))
    return CarryForwardResult(
        available=available,
        breakdown=[
            CarryForwardAmount(financial_year=record.financial_year, amount=record.unused_amount)
            for record in eligible_records
        ],
        eligible=True,
        reason=(
            f"{format_currency(available)} carry-forward available from previous years"
            if available > 0 else "No unused caps from previous years"
        ),
    )


def calculate_bring_forward(total_super_balance: float, config: Optional[TaxYearConfig] = None) -> BringForwardResult:
    """Years of non-concessional cap available under the bring-forward rule."""
    config = config or get_current_config()
    rules = config.superannuation
    band = next(
        band for band in rules.bring_forward
        if band.balance_below is None or total_super_balance < band.balance_below
    )
    total_cap = band.years * rules.non_concessional_cap

    if band.years == 1:
        reason = (
            f"Total super balance ({format_currency(total_super_balance)}) is too high "
            "for bring-forward; standard cap only"
        )
    else:
        reason = f"Can bring forward {band.years} years: {format_currency(total_cap)} total cap"

    return BringForwardResult(
        years_available=band.years,
        total_cap=total_cap,
        eligible=band.years > 1,
        reason=reason,
    )


def _apply_carry_forward(excess_over_cap: float, carry_forward: CarryForwardResult) -> list[CarryForwardAmount]:
    """Consume carry-forward oldest first to cover contributions above the cap."""
    applied = []
    remaining = excess_over_cap
    for entry in carry_forward.breakdown:
        if remaining <= 0:
            break
        used = min(entry.amount, remaining)
        applied.append(CarryForwardAmount(financial_year=entry.financial_year, amount=round_cents(used)))
        remaining -= used
    return applied


def _percentage(used: float, available: float) -> float:
    if available <= 0:
        return 100.0 if used > 0 else 0.0
    return round_cents(min(100.0, used / available * 100))


def track_contribution_caps(cap_input: CapTrackingInput, config: Optional[TaxYearConfig] = None) -> CapTrackingResult:
    """Report cap usage for the year, including carry-forward and bring-forward.

    Args:
        cap_input: Year-to-date contributions, prior-year unused caps and total super balance
        config: Tax year rules (default: current financial year)

    Returns:
        CapTrackingResult. For each category remaining = max(0, available - used)
        and excess = max(0, used - available), so at most one is positive.
    """
    config = config or get_current_config()
    rules = config.superannuation
    tsb = cap_input.total_super_balance
    warnings = []

    carry_forward = calculate_carry_forward(cap_input.carry_forward_amounts or [], tsb, config)
    bring_forward = calculate_bring_forward(tsb, config)

    # Concessional
    cc_used = cap_input.concessional_ytd
    cc_cap = rules.concessional_cap
    cc_available = round_cents(cc_cap + carry_forward.available)
    cc_excess = round_cents(max(0.0, cc_used - cc_available))
    cc_applied = _apply_carry_forward(max(0.0, cc_used - cc_cap), carry_forward)

    concessional = ConcessionalCapStatus(
        cap=cc_cap,
        used=cc_used,
        carry_forward_available=carry_forward.available,
        carry_forward_applied=cc_applied,
        total_available=cc_available,
        remaining=round_cents(max(0.0, cc_available - cc_used)),
        percentage_used=_percentage(cc_used, cc_available),
        is_exceeded=cc_excess > 0,
        excess_amount=cc_excess,
    )

    # Non-concessional
    ncc_used = cap_input.non_concessional_ytd
    ncc_available = bring_forward.total_cap
    ncc_excess = round_cents(max(0.0, ncc_used - ncc_available))

    non_concessional = NonConcessionalCapStatus(
        cap=rules.non_concessional_cap,
        used=ncc_used,
        bring_forward_available=bring_forward.eligible,
        bring_forward_years=bring_forward.years_available,
        total_available=ncc_available,
        remaining=round_cents(max(0.0, ncc_available - ncc_used)),
        percentage_used=_percentage(ncc_used, ncc_available),
        is_exceeded=ncc_excess > 0,
        excess_amount=ncc_excess,
    )

    estimated_tax = round_dollars(
        cc_excess * EXCESS_CONCESSIONAL_RATE + ncc_excess * EXCESS_NON_CONCESSIONAL_RATE
    )

    if cc_excess > 0:
        warnings.append(
            f"Excess concessional contributions of {format_currency(cc_excess)} will be taxed "
            "at your marginal rate (plus interest charge)."
        )
    elif cc_used > cc_available * NEAR_CAP_SHARE:
        warnings.append(
            f"Concessional contributions at {cc_used / cc_available * 100:.0f}% of available cap. "
            "Be careful not to exceed."
        )
    if cc_applied:
        years = ", ".join(entry.financial_year for entry in cc_applied)
        warnings.append(f"Contributions above the standard cap use carry-forward from {years}.")
    if not carry_forward.eligible and cap_input.carry_forward_amounts:
        warnings.append(f"Carry-forward not available: {carry_forward.reason}.")

    if ncc_excess > 0:
        warnings.append(
            f"Excess non-concessional contributions of {format_currency(ncc_excess)} will attract "
            "47% tax unless you elect to withdraw."
        )
    elif ncc_used > rules.non_concessional_cap and bring_forward.eligible:
        warnings.append(
            f"Non-concessional contributions above {format_currency(rules.non_concessional_cap)} "
            f"trigger a {bring_forward.years_available}-year bring-forward period."
        )

    if estimated_tax:
        logger.debug(f"Estimated excess contributions tax {estimated_tax} for {config.financial_year}")

    return CapTrackingResult(
        financial_year=config.financial_year,
        concessional=concessional,
        non_concessional=non_concessional,
        estimated_excess_contributions_tax=estimated_tax,
        excess_tax_note=EXCESS_TAX_NOTE,
        warnings=warnings,
    )


def get_optimal_contribution_strategy(
    gross_salary: float,
    current_concessional: float,
    marginal_rate: float,
    config: Optional[TaxYearConfig] = None,
) -> ContributionStrategy:
    """Recommend salary sacrifice to fill the remaining concessional cap.

    When current_concessional is 0 the employer SG on gross_salary is assumed
    to be the only concessional contribution.
    """
    config = config or get_current_config()
    rules = config.superannuation
    used = current_concessional or gross_salary * rules.guarantee_rate
    remaining = rules.concessional_cap - used

    if remaining <= 0:
        return ContributionStrategy(
            recommended_salary_sacrifice=0,
            tax_savings=0,
            remaining_cap=0,
            explanation="Concessional cap already reached. No additional salary sacrifice recommended.",
        )

    if marginal_rate <= rules.contributions_tax_rate:
        return ContributionStrategy(
            recommended_salary_sacrifice=0,
            tax_savings=0,
            remaining_cap=round_dollars(remaining),
            explanation=(
                f"Marginal tax rate is at or below {rules.contributions_tax_rate * 100:g}%. "
                "Salary sacrifice not beneficial."
            ),
        )

    warnings = []
    if gross_salary - remaining + rules.concessional_cap > rules.division_293_threshold:
        below_threshold = max(0.0, rules.division_293_threshold - gross_salary)
        if below_threshold < remaining:
            warnings.append(
                "Full salary sacrifice would trigger Division 293 tax. Consider sacrificing only "
                f"{format_currency(below_threshold)} to stay below the threshold."
            )

    recommended = round_dollars(remaining)
    savings = round_dollars(remaining * (marginal_rate - rules.contributions_tax_rate))
    return ContributionStrategy(
        recommended_salary_sacrifice=recommended,
        tax_savings=savings,
        remaining_cap=recommended,
        explanation=(
            f"Salary sacrifice {format_currency(recommended)} to maximise super contributions "
            f"and save {format_currency(savings)} in tax."
        ),
        warnings=warnings,
    )
