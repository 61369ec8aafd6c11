"""Tax offsets and the order they are applied in.

Non-refundable offsets (LITO, SAPTO, foreign income tax, other) can only
reduce tax to zero; any excess is lost. Franking credits are refundable:
they are applied last and can take net tax below zero, producing a refund.

Application is an ordered reduction over named buckets with a running
remaining-tax figure. Changing NON_REFUNDABLE_ORDER changes which offset is
reported as unused when tax runs out.
"""

from typing import Optional

from ..rounding import format_currency, round_cents
from ..rules import TaxYearConfig, WithdrawalOffset
from ..schemas import (
    CalculationStep,
    OffsetApplication,
    OffsetResult,
    TaxOffsets,
    TaxOffsetsInput,
    TaxOffsetsResult,
)

NON_REFUNDABLE_ORDER = ("lito", "sapto", "foreign_tax", "other")
REFUNDABLE_ORDER = ("franking_credits",)

BUCKET_LABELS = {
    "lito": "Low income tax offset",
    "sapto": "Seniors and pensioners tax offset",
    "foreign_tax": "Foreign income tax offset",
    "other": "Other offsets",
    "franking_credits": "Franking credits",
}


def _withdrawn_offset(taxable_income: float, rules: WithdrawalOffset) -> float:
    """Full offset up to the start threshold, then reduced linearly to zero at cutoff."""
    if taxable_income <= rules.start_threshold:
        return rules.max_offset
    if taxable_income >= rules.cutoff_threshold:
        return 0.0
    reduction = (taxable_income - rules.start_threshold) * rules.withdrawal_rate
    return round_cents(max(0.0, rules.max_offset - reduction))


def calculate_lito(taxable_income: float, config: TaxYearConfig) -> OffsetResult:
    """Low Income Tax Offset."""
    lito = config.lito
    offset = _withdrawn_offset(taxable_income, lito)

    if taxable_income <= lito.full_threshold:
        explanation = f"Full offset for income up to {format_currency(lito.full_threshold)}"
    elif offset == 0:
        explanation = f"No offset for income of {format_currency(lito.cutoff_threshold)} or more"
    else:
        explanation = (
            f"{format_currency(lito.max_offset)} less {lito.withdrawal_rate * 100:g}c per dollar "
            f"over {format_currency(lito.full_threshold)}"
        )
    return OffsetResult(offset=offset, explanation=explanation)


def calculate_sapto(taxable_income: float, has_spouse: bool, config: TaxYearConfig) -> OffsetResult:
    """Seniors and Pensioners Tax Offset.

    Assumes the caller has already established eligibility (age, pension
    status). Only the income-based shade-out is computed here.
    """
    rates = config.sapto.couple_each if has_spouse else config.sapto.single
    household = "couple (each)" if has_spouse else "single"
    offset = _withdrawn_offset(taxable_income, rates)

    if taxable_income <= rates.shade_out_threshold:
        explanation = f"Full {household} offset below {format_currency(rates.shade_out_threshold)}"
    elif offset == 0:
        explanation = f"No {household} offset for income of {format_currency(rates.cutoff_threshold)} or more"
    else:
        explanation = (
            f"{format_currency(rates.max_offset)} less {rates.withdrawal_rate * 100:g}c per dollar "
            f"over {format_currency(rates.shade_out_threshold)} ({household})"
        )
    return OffsetResult(offset=offset, explanation=explanation)


def calculate_franking_credit_offset(franking_credits: float) -> OffsetResult:
    """Refundable offset for franking credits attached to dividends."""
    if franking_credits <= 0:
        return OffsetResult(offset=0, explanation="No franking credits")
    return OffsetResult(
        offset=round_cents(franking_credits),
        explanation="Refundable: excess over tax payable is refunded",
    )


def calculate_foreign_tax_offset(
    foreign_tax_paid: float,
    australian_tax_on_foreign_income: Optional[float] = None,
) -> OffsetResult:
    """Credit for tax paid overseas, limited to the Australian tax on that income.

    When the Australian tax on the foreign income is not supplied, the full
    foreign tax paid is allowed.
    """
    if foreign_tax_paid <= 0:
        return OffsetResult(offset=0, explanation="No foreign tax paid")

    if australian_tax_on_foreign_income is not None:
        australian_tax_on_foreign_income = max(0.0, australian_tax_on_foreign_income)
    if australian_tax_on_foreign_income is None or foreign_tax_paid <= australian_tax_on_foreign_income:
        return OffsetResult(offset=round_cents(foreign_tax_paid), explanation="Full credit for foreign tax paid")

    return OffsetResult(
        offset=round_cents(australian_tax_on_foreign_income),
        explanation=(
            f"Limited to Australian tax on foreign income "
            f"({format_currency(australian_tax_on_foreign_income, cents=True)})"
        ),
    )


def calculate_all_offsets(offsets_input: TaxOffsetsInput, config: TaxYearConfig) -> TaxOffsetsResult:
    """Work out every offset the taxpayer is entitled to, before application."""
    income = offsets_input.taxable_income
    steps = []

    lito = calculate_lito(income, config)
    steps.append(CalculationStep(label=BUCKET_LABELS["lito"], value=lito.offset, explanation=lito.explanation))

    sapto = OffsetResult(offset=0, explanation="Not eligible")
    if offsets_input.is_senior:
        sapto = calculate_sapto(income, offsets_input.has_spouse, config)
        steps.append(CalculationStep(label=BUCKET_LABELS["sapto"], value=sapto.offset, explanation=sapto.explanation))

    franking = calculate_franking_credit_offset(offsets_input.franking_credits)
    if franking.offset:
        steps.append(CalculationStep(
            label=BUCKET_LABELS["franking_credits"], value=franking.offset, explanation=franking.explanation,
        ))

    foreign = calculate_foreign_tax_offset(
        offsets_input.foreign_tax_paid, offsets_input.australian_tax_on_foreign_income
    )
    if foreign.offset:
        steps.append(CalculationStep(
            label=BUCKET_LABELS["foreign_tax"], value=foreign.offset, explanation=foreign.explanation,
        ))

    if offsets_input.other_offsets:
        steps.append(CalculationStep(label=BUCKET_LABELS["other"], value=offsets_input.other_offsets))

    offsets = TaxOffsets(
        lito=lito.offset,
        sapto=sapto.offset,
        franking_credits=franking.offset,
        foreign_tax=foreign.offset,
        other=offsets_input.other_offsets,
    )
    steps.append(CalculationStep(label="Total offsets", value=offsets.total, operation="="))
    return TaxOffsetsResult(offsets=offsets, steps=steps)


def apply_offsets(gross_tax: float, offsets: TaxOffsets) -> OffsetApplication:
    """Apply offsets to gross tax in statutory order.

    Non-refundable buckets are consumed in NON_REFUNDABLE_ORDER, each limited
    to the tax still remaining. Refundable franking credits follow and may
    take net tax negative.

    Args:
        gross_tax: Income tax plus Medicare before offsets
        offsets: Offset entitlements by bucket

    Returns:
        OffsetApplication with net tax (negative for a refund), the refundable
        amount, what each bucket used, and what was lost.
    """
    remaining = max(0.0, gross_tax)
    used = {}
    unused = {}
    steps = [CalculationStep(label="Gross tax", value=round_cents(remaining))]

    for bucket in NON_REFUNDABLE_ORDER:
        entitled = getattr(offsets, bucket)
        applied = round_cents(min(entitled, remaining))
        remaining = round_cents(remaining - applied)
        used[bucket] = applied
        unused[bucket] = round_cents(entitled - applied)
        if entitled:
            explanation = None
            if unused[bucket]:
                explanation = f"{format_currency(unused[bucket], cents=True)} unused (non-refundable)"
            steps.append(CalculationStep(
                label=BUCKET_LABELS[bucket], value=applied, operation="-", explanation=explanation,
            ))

    for bucket in REFUNDABLE_ORDER:
        entitled = getattr(offsets, bucket)
        remaining = round_cents(remaining - entitled)
        used[bucket] = entitled
        unused[bucket] = 0.0
        if entitled:
            steps.append(CalculationStep(
                label=BUCKET_LABELS[bucket], value=entitled, operation="-", explanation="Refundable",
            ))

    net_tax = remaining
    refundable_amount = round_cents(-net_tax) if net_tax < 0 else 0.0
    steps.append(CalculationStep(
        label="Net tax",
        value=net_tax,
        operation="=",
        explanation=f"Refund of {format_currency(refundable_amount, cents=True)}" if refundable_amount else None,
    ))

    return OffsetApplication(
        gross_tax=round_cents(max(0.0, gross_tax)),
        net_tax=net_tax,
        refundable_amount=refundable_amount,
        used_offsets=TaxOffsets(**used),
        unused_offsets=TaxOffsets(**unused),
        steps=steps,
    )
