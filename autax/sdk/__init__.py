"""AU Tax SDK - Australian tax, withholding and superannuation calculators."""

from .config import (
    # Tax year registry
    get_config,
    get_current_config,
    lookup_config,
    load_config_file,
    get_available_years,
    clear_config_cache,
    ConfigLookup,
    ConfigNotFoundError,
    ConfigNotFoundWarning,
    TaxRulesValidationError,
    # Financial years
    parse_financial_year,
    format_financial_year,
    financial_year_for_date,
    # Brackets
    get_bracket_info,
    get_marginal_rate,
    # Cap history
    get_concessional_cap,
    get_non_concessional_cap,
    # Logging
    configure_logging,
)

from .rules import TaxYearConfig

from .rounding import round_cents, round_dollars, format_currency

from .taxes import (
    calculate_income_tax,
    calculate_marginal_tax,
    calculate_deduction_savings,
    calculate_medicare_levy,
    get_medicare_summary,
    calculate_lito,
    calculate_sapto,
    calculate_all_offsets,
    apply_offsets,
    calculate_payg,
    calculate_gross_from_net,
    get_payg_summary,
    calculate_franking_credits,
    calculate_cgt_discount,
    determine_taxability,
    calculate_tax_position,
    calculate_quick_tax_position,
    compare_tax_positions,
)

from .salary import (
    process_salary,
    get_salary_summary,
    calculate_optimal_salary_sacrifice,
    compare_salary_scenarios,
)

from .superannuation import (
    calculate_super_guarantee,
    calculate_division_293_tax,
    calculate_super_contributions,
    calculate_co_contribution,
    calculate_spouse_contribution_offset,
    get_super_contribution_summary,
    calculate_carry_forward,
    calculate_bring_forward,
    track_contribution_caps,
    get_optimal_contribution_strategy,
)

__all__ = [
    # Config
    "get_config",
    "get_current_config",
    "lookup_config",
    "load_config_file",
    "get_available_years",
    "clear_config_cache",
    "ConfigLookup",
    "ConfigNotFoundError",
    "ConfigNotFoundWarning",
    "TaxRulesValidationError",
    "TaxYearConfig",
    "parse_financial_year",
    "format_financial_year",
    "financial_year_for_date",
    "get_bracket_info",
    "get_marginal_rate",
    "get_concessional_cap",
    "get_non_concessional_cap",
    "configure_logging",
    # Rounding
    "round_cents",
    "round_dollars",
    "format_currency",
    # Taxes
    "calculate_income_tax",
    "calculate_marginal_tax",
    "calculate_deduction_savings",
    "calculate_medicare_levy",
    "get_medicare_summary",
    "calculate_lito",
    "calculate_sapto",
    "calculate_all_offsets",
    "apply_offsets",
    "calculate_payg",
    "calculate_gross_from_net",
    "get_payg_summary",
    "calculate_franking_credits",
    "calculate_cgt_discount",
    "determine_taxability",
    "calculate_tax_position",
    "calculate_quick_tax_position",
    "compare_tax_positions",
    # Salary
    "process_salary",
    "get_salary_summary",
    "calculate_optimal_salary_sacrifice",
    "compare_salary_scenarios",
    # Superannuation
    "calculate_super_guarantee",
    "calculate_division_293_tax",
    "calculate_super_contributions",
    "calculate_co_contribution",
    "calculate_spouse_contribution_offset",
    "get_super_contribution_summary",
    "calculate_carry_forward",
    "calculate_bring_forward",
    "track_contribution_caps",
    "get_optimal_contribution_strategy",
]
