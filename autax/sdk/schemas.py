"""Pydantic schemas for calculator inputs and results.

All schemas use extra='forbid' to reject unknown fields, so a misspelt
input option fails loudly instead of silently taking its default.

Every result carries a ``steps`` trail of CalculationStep entries that can
be rendered as-is (label, value, optional operator, optional explanation).
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .rules import FINANCIAL_YEAR_PATTERN, TaxBracket, check_consecutive_years


Frequency = Literal["WEEKLY", "FORTNIGHTLY", "MONTHLY", "QUARTERLY", "ANNUALLY"]
SalaryType = Literal["GROSS", "NET"]
FamilyStatus = Literal["SINGLE", "FAMILY"]
Operation = Literal["+", "-", "=", "*"]

FREQUENCIES: tuple = ("WEEKLY", "FORTNIGHTLY", "MONTHLY", "QUARTERLY", "ANNUALLY")


# =============================================================================
# Audit trail
# =============================================================================


class CalculationStep(BaseModel):
    """One line of a calculation's audit trail."""

    model_config = ConfigDict(extra="forbid")

    label: str
    value: float
    operation: Optional[Operation] = None
    explanation: Optional[str] = None


# =============================================================================
# Configuration registry
# =============================================================================


class BracketInfo(BaseModel):
    """Bracket an income falls into, and how far into it."""

    model_config = ConfigDict(extra="forbid")

    index: int = Field(..., ge=0)
    bracket: TaxBracket
    income_within_bracket: float = Field(..., ge=0)


# =============================================================================
# Income tax
# =============================================================================


class IncomeTaxResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    taxable_income: float
    tax_payable: float = Field(..., ge=0)
    effective_rate: float = Field(..., ge=0, description="Percent, 2 dp")
    marginal_rate: float = Field(..., ge=0, description="Percent")
    steps: List[CalculationStep] = Field(default_factory=list)


class MarginalTaxResult(BaseModel):
    """Tax on an increment of income stacked on top of existing income."""

    model_config = ConfigDict(extra="forbid")

    additional_income: float
    tax: float
    marginal_rate: float = Field(..., description="Percent, 2 dp")


class DeductionSavingsResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    deduction: float
    savings: float
    effective_rate: float = Field(..., description="Savings as percent of deduction")


# =============================================================================
# Medicare
# =============================================================================


class MedicareLevyInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    taxable_income: float
    has_private_health_insurance: bool = True
    has_medicare_exemption: bool = False
    family_status: FamilyStatus = "SINGLE"
    dependent_children: int = Field(default=0, ge=0)


class MedicareLevyResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    medicare_levy: float = Field(..., ge=0)
    medicare_surcharge: float = Field(..., ge=0)
    total: float = Field(..., ge=0)
    is_shade_in: bool = False
    is_exempt: bool = False
    threshold: Optional[float] = None
    steps: List[CalculationStep] = Field(default_factory=list)


class MedicareSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    levy: float
    surcharge: float
    total: float
    as_percentage: float = Field(..., description="Total as percent of income, 2 dp")
    could_save_with_phi: float = Field(..., ge=0, description="Surcharge avoided with private cover")


# =============================================================================
# Offsets
# =============================================================================


class OffsetResult(BaseModel):
    """A single offset amount with a human-readable explanation."""

    model_config = ConfigDict(extra="forbid")

    offset: float = Field(..., ge=0)
    explanation: str


class TaxOffsets(BaseModel):
    """Offset amounts by bucket. Total is always the sum of the buckets."""

    model_config = ConfigDict(extra="forbid")

    lito: float = Field(default=0, ge=0)
    sapto: float = Field(default=0, ge=0)
    franking_credits: float = Field(default=0, ge=0)
    foreign_tax: float = Field(default=0, ge=0)
    other: float = Field(default=0, ge=0)

    @computed_field
    @property
    def total(self) -> float:
        return round(self.lito + self.sapto + self.franking_credits + self.foreign_tax + self.other, 2)


class TaxOffsetsInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    taxable_income: float
    franking_credits: float = Field(default=0, ge=0)
    foreign_tax_paid: float = Field(default=0, ge=0)
    australian_tax_on_foreign_income: Optional[float] = Field(
        default=None, ge=0,
        description="Australian tax attributable to foreign income; limits the foreign offset",
    )
    is_senior: bool = Field(default=False, description="Caller has established SAPTO eligibility")
    has_spouse: bool = False
    other_offsets: float = Field(default=0, ge=0)


class TaxOffsetsResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    offsets: TaxOffsets
    steps: List[CalculationStep] = Field(default_factory=list)


class OffsetApplication(BaseModel):
    """Outcome of applying offsets to gross tax.

    ``used_offsets`` holds what each bucket actually consumed; ``unused_offsets``
    holds the non-refundable amounts that were wasted because tax hit zero.
    """

    model_config = ConfigDict(extra="forbid")

    gross_tax: float
    net_tax: float
    refundable_amount: float = Field(..., ge=0)
    used_offsets: TaxOffsets
    unused_offsets: TaxOffsets
    steps: List[CalculationStep] = Field(default_factory=list)


# =============================================================================
# PAYG withholding
# =============================================================================


class PaygInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_income: float = Field(..., description="Gross pay for one period of `frequency`")
    frequency: Frequency
    has_tax_free_threshold: bool = True
    has_hecs_debt: bool = False


class PaygResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    weekly: float = Field(..., ge=0)
    fortnightly: float = Field(..., ge=0)
    monthly: float = Field(..., ge=0)
    annual_withholding: float = Field(..., ge=0)
    steps: List[CalculationStep] = Field(default_factory=list)


class GrossFromNetResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross: float = Field(..., ge=0, description="Per-period gross")
    tax: float = Field(..., ge=0, description="Per-period withholding at that gross")
    iterations: int = Field(..., ge=0)
    converged: bool = True


class PaygSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    annual: float
    monthly: float
    fortnightly: float
    weekly: float
    effective_rate: float = Field(..., description="Annual withholding as percent of gross")


# =============================================================================
# Salary
# =============================================================================


class SalaryInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: float = Field(..., description="Salary per pay period, gross or net per salary_type")
    salary_type: SalaryType = "GROSS"
    pay_frequency: Frequency = "ANNUALLY"
    salary_sacrifice: float = Field(default=0, ge=0, description="Sacrifice per sacrifice period")
    salary_sacrifice_frequency: Optional[Frequency] = Field(
        default=None, description="Defaults to pay_frequency"
    )
    has_tax_free_threshold: bool = True
    has_hecs_debt: bool = False


class PerPeriodAmounts(BaseModel):
    model_config = ConfigDict(extra="forbid")

    frequency: Frequency
    gross: float
    tax: float
    net: float
    superannuation: float


class SalaryBreakdown(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_salary: float
    net_salary: float
    taxable_income: float
    salary_sacrifice: float
    payg_withholding: float
    medicare_levy: float
    total_tax: float
    super_guarantee: float
    total_super: float
    per_period: PerPeriodAmounts
    solver_iterations: Optional[int] = Field(default=None, description="Set when resolved from net")
    warnings: List[str] = Field(default_factory=list)
    steps: List[CalculationStep] = Field(default_factory=list)


class SalarySummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross: float
    net: float
    tax: float
    superannuation: float
    effective_tax_rate: float = Field(..., description="Total tax as percent of gross, 2 dp")
    marginal_tax_rate: float = Field(..., description="Percent")


class SacrificeRecommendation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    optimal_amount: float = Field(..., ge=0)
    tax_savings: float = Field(..., ge=0)
    net_impact: float = Field(..., description="Change in annual take-home pay (negative = less cash)")
    marginal_rate: float = Field(..., description="Percent")
    reason: str


class SalaryDifferences(BaseModel):
    """Scenario 2 minus scenario 1."""

    model_config = ConfigDict(extra="forbid")

    gross: float
    net: float
    tax: float
    superannuation: float


class SalaryComparison(BaseModel):
    model_config = ConfigDict(extra="forbid")

    scenario_1: SalaryBreakdown
    scenario_2: SalaryBreakdown
    differences: SalaryDifferences


# =============================================================================
# Superannuation contributions
# =============================================================================


class SuperGuaranteeResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: float = Field(..., ge=0)
    rate: float
    eligible_earnings: float = Field(..., ge=0)
    max_contribution_base: float
    steps: List[CalculationStep] = Field(default_factory=list)


class SuperContributionInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_salary: float
    salary_sacrifice: float = Field(default=0, ge=0)
    personal_deductible: float = Field(default=0, ge=0)
    personal_non_deductible: float = Field(default=0, ge=0)
    spouse_contribution: float = Field(default=0, ge=0)


class SuperContributionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    super_guarantee: float
    salary_sacrifice: float
    personal_deductible: float
    total_concessional: float
    personal_non_deductible: float
    spouse_contribution: float
    total_non_concessional: float
    total_contributions: float
    contributions_tax: float
    division_293_tax: float
    employer_total: float
    employee_total: float
    tax_savings_from_salary_sacrifice: float = Field(..., ge=0)
    steps: List[CalculationStep] = Field(default_factory=list)


class CoContributionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    eligible: bool
    amount: float = Field(..., ge=0)
    explanation: str


class SpouseOffsetResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    eligible: bool
    offset: float = Field(..., ge=0)
    explanation: str


class CapUtilisation(BaseModel):
    model_config = ConfigDict(extra="forbid")

    used: float
    cap: float
    remaining: float = Field(..., ge=0)
    percentage: float = Field(..., ge=0, le=100)


class SuperContributionSummary(BaseModel):
    model_config = ConfigDict(extra="forbid")

    contributions: SuperContributionResult
    concessional: CapUtilisation
    non_concessional: CapUtilisation
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# =============================================================================
# Contribution caps
# =============================================================================


class CarryForwardRecord(BaseModel):
    """Caller-supplied unused concessional cap for one prior financial year."""

    model_config = ConfigDict(extra="forbid")

    financial_year: str = Field(..., pattern=FINANCIAL_YEAR_PATTERN)
    unused_amount: float

    @field_validator("financial_year")
    @classmethod
    def consecutive_years(cls, v: str) -> str:
        return check_consecutive_years(v)


class CarryForwardAmount(BaseModel):
    model_config = ConfigDict(extra="forbid")

    financial_year: str
    amount: float


class CarryForwardResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    available: float = Field(..., ge=0)
    breakdown: List[CarryForwardAmount] = Field(default_factory=list, description="Oldest first")
    eligible: bool
    reason: str


class BringForwardResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    years_available: int = Field(..., ge=1)
    total_cap: float
    eligible: bool
    reason: str


class CapTrackingInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    concessional_ytd: float = Field(default=0, ge=0)
    non_concessional_ytd: float = Field(default=0, ge=0)
    carry_forward_amounts: Optional[List[CarryForwardRecord]] = None
    total_super_balance: float = Field(default=0, ge=0)


class ConcessionalCapStatus(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cap: float
    used: float
    carry_forward_available: float
    carry_forward_applied: List[CarryForwardAmount] = Field(
        default_factory=list, description="Carry-forward consumed by contributions above the cap"
    )
    total_available: float
    remaining: float = Field(..., ge=0)
    percentage_used: float = Field(..., ge=0, le=100)
    is_exceeded: bool
    excess_amount: float = Field(..., ge=0)


class NonConcessionalCapStatus(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cap: float
    used: float
    bring_forward_available: bool
    bring_forward_years: int
    total_available: float
    remaining: float = Field(..., ge=0)
    percentage_used: float = Field(..., ge=0, le=100)
    is_exceeded: bool
    excess_amount: float = Field(..., ge=0)


class CapTrackingResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    financial_year: str
    concessional: ConcessionalCapStatus
    non_concessional: NonConcessionalCapStatus
    estimated_excess_contributions_tax: float = Field(..., ge=0)
    excess_tax_note: str
    warnings: List[str] = Field(default_factory=list)


class ContributionStrategy(BaseModel):
    model_config = ConfigDict(extra="forbid")

    recommended_salary_sacrifice: float = Field(..., ge=0)
    tax_savings: float = Field(..., ge=0)
    remaining_cap: float = Field(..., ge=0)
    explanation: str
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# Tax position
# =============================================================================


class TaxPositionInput(BaseModel):
    """Income, deductions and credits for one taxpayer and financial year."""

    model_config = ConfigDict(extra="forbid")

    salary: float = Field(default=0, ge=0, description="Gross salary and wages (after sacrifice)")
    payg_withheld: float = Field(default=0, ge=0)
    rental_income: float = Field(default=0, description="Net rent; negative when negatively geared")
    franked_dividends: float = Field(default=0, ge=0, description="Cash dividends received")
    franking_percentage: float = Field(default=100, ge=0, le=100)
    unfranked_dividends: float = Field(default=0, ge=0)
    interest: float = Field(default=0, ge=0)
    capital_gains: float = Field(default=0, ge=0)
    capital_losses: float = Field(default=0, ge=0)
    cgt_discount_eligible: bool = Field(default=True, description="Assets held 12 months or more")
    foreign_income: float = Field(default=0, ge=0)
    foreign_tax_paid: float = Field(default=0, ge=0)
    other_income: float = Field(default=0, ge=0)
    exempt_income: float = Field(default=0, ge=0, description="Reported only, never taxed")

    work_deductions: float = Field(default=0, ge=0)
    investment_deductions: float = Field(default=0, ge=0)
    donations: float = Field(default=0, ge=0)
    personal_super_deduction: float = Field(default=0, ge=0)
    other_deductions: float = Field(default=0, ge=0)

    concessional_super: float = Field(default=0, ge=0, description="Employer SG plus sacrifice")
    has_private_health_insurance: bool = True
    family_status: FamilyStatus = "SINGLE"
    dependent_children: int = Field(default=0, ge=0)
    is_senior: bool = False
    has_spouse: bool = False
    other_offsets: float = Field(default=0, ge=0)


class IncomeBreakdown(BaseModel):
    model_config = ConfigDict(extra="forbid")

    salary: float
    rental: float
    dividends: float
    franking_credits: float
    interest: float
    net_capital_gain: float
    foreign: float
    other: float
    exempt: float
    total_assessable: float


class DeductionBreakdown(BaseModel):
    model_config = ConfigDict(extra="forbid")

    work: float
    investment: float
    donations: float
    personal_super: float
    other: float
    total: float


class TaxPositionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    financial_year: str
    income: IncomeBreakdown
    deductions: DeductionBreakdown
    taxable_income: float
    income_tax: float
    medicare_levy: float
    medicare_surcharge: float
    gross_tax: float
    offsets_entitled: TaxOffsets
    offsets_used: TaxOffsets
    net_tax: float
    payg_withheld: float
    estimated_refund: float = Field(..., description="Positive = refund, negative = amount owing")
    division_293_tax: float
    effective_rate: float
    marginal_rate: float
    warnings: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    steps: List[CalculationStep] = Field(default_factory=list)


class TaxPositionComparison(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position_1: TaxPositionResult
    position_2: TaxPositionResult
    taxable_income_difference: float
    net_tax_difference: float
    refund_difference: float


# =============================================================================
# Income taxability
# =============================================================================


class TaxabilityResult(BaseModel):
    """How one income item is treated for tax."""

    model_config = ConfigDict(extra="forbid")

    category: str
    taxable_amount: float
    exempt_amount: float = Field(..., ge=0)
    franking_credits: float = Field(default=0, ge=0)
    grossed_up_amount: float
    explanation: str
    references: List[str] = Field(default_factory=list)


class CgtDiscountResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    gross_gain: float
    discount: float = Field(..., ge=0)
    net_gain: float
    eligible: bool
    explanation: str
