"""taxes - Income tax, Medicare, offsets and PAYG withholding.

Scope:
- Progressive income tax on taxable income (brackets per financial year)
- Medicare levy with low-income shade-in, and the levy surcharge
- Tax offsets (LITO, SAPTO, franking credits, foreign tax) and their application
- PAYG withholding from the ATO scale coefficients
- Income taxability and the annual tax position

Constraints:
- Pure calculation - no I/O beyond the cached tax-rules config
- Year-specific rules arrive as a TaxYearConfig from sdk.config
- Degenerate input (zero or negative income) yields zero results, not errors

Modules:
- income_tax: Bracket tax, marginal tax and deduction savings
- medicare: Levy and surcharge
- offsets: Offset entitlements and statutory-order application
- withholding: Period conversions, scale lookup, gross-from-net
- income_types: Taxability by income type, franking credits, CGT discount
- position: Whole-of-year tax position and refund estimate

Usage:
    from autax.sdk.config import get_config
    from autax.sdk.taxes import calculate_income_tax, calculate_payg

    config = get_config("2024-25")
    tax = calculate_income_tax(100000, config)
"""

# Income tax
from .income_tax import (
    calculate_income_tax,
    calculate_marginal_tax,
    calculate_deduction_savings,
    get_tax_bracket_description,
)

# Medicare
from .medicare import (
    calculate_medicare_levy,
    get_medicare_summary,
    get_medicare_threshold,
)

# Offsets
from .offsets import (
    calculate_lito,
    calculate_sapto,
    calculate_franking_credit_offset,
    calculate_foreign_tax_offset,
    calculate_all_offsets,
    apply_offsets,
)

# PAYG withholding
from .withholding import (
    annualise,
    to_period,
    to_weekly,
    from_weekly,
    get_periods_per_year,
    calc_weekly_withholding,
    calc_withholding_per_period,
    calculate_payg,
    calculate_gross_from_net,
    get_payg_summary,
)

# Income types and tax position
from .income_types import (
    calculate_franking_credits,
    calculate_cgt_discount,
    determine_taxability,
    get_tax_category_label,
    is_taxable_category,
)
from .position import (
    calculate_tax_position,
    calculate_quick_tax_position,
    compare_tax_positions,
)

__all__ = [
    # Income tax
    "calculate_income_tax",
    "calculate_marginal_tax",
    "calculate_deduction_savings",
    "get_tax_bracket_description",
    # Medicare
    "calculate_medicare_levy",
    "get_medicare_summary",
    "get_medicare_threshold",
    # Offsets
    "calculate_lito",
    "calculate_sapto",
    "calculate_franking_credit_offset",
    "calculate_foreign_tax_offset",
    "calculate_all_offsets",
    "apply_offsets",
    # Withholding
    "annualise",
    "to_period",
    "to_weekly",
    "from_weekly",
    "get_periods_per_year",
    "calc_weekly_withholding",
    "calc_withholding_per_period",
    "calculate_payg",
    "calculate_gross_from_net",
    "get_payg_summary",
    # Income types
    "calculate_franking_credits",
    "calculate_cgt_discount",
    "determine_taxability",
    "get_tax_category_label",
    "is_taxable_category",
    # Position
    "calculate_tax_position",
    "calculate_quick_tax_position",
    "compare_tax_positions",
]
