"""superannuation - Contributions, contribution taxes and cap tracking.

Modules:
- contributions: SG, contributions tax, Division 293, co-contribution, spouse offset
- caps: Concessional carry-forward, non-concessional bring-forward, cap status
"""

from .contributions import (
    calculate_super_guarantee,
    calculate_division_293_tax,
    calculate_super_contributions,
    calculate_co_contribution,
    calculate_spouse_contribution_offset,
    get_super_contribution_summary,
)
from .caps import (
    build_carry_forward_records,
    calculate_carry_forward,
    calculate_bring_forward,
    track_contribution_caps,
    get_optimal_contribution_strategy,
)

__all__ = [
    # Contributions
    "calculate_super_guarantee",
    "calculate_division_293_tax",
    "calculate_super_contributions",
    "calculate_co_contribution",
    "calculate_spouse_contribution_offset",
    "get_super_contribution_summary",
    # Caps
    "build_carry_forward_records",
    "calculate_carry_forward",
    "calculate_bring_forward",
    "track_contribution_caps",
    "get_optimal_contribution_strategy",
]
