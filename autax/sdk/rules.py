"""Pydantic schemas for tax rules validation.

These schemas validate the tax-rules/*.yaml files and provide typed access
to tax parameters like brackets, Medicare thresholds, PAYG coefficients and
superannuation caps. Every table is checked at load time: ascending minimums,
no gaps between whole-dollar bounds, and a single unbounded final bucket.
"""

from abc import abstractmethod
from datetime import date
from typing import Any, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .rounding import round_dollars

FINANCIAL_YEAR_PATTERN = r"^\d{4}-\d{2}$"

# Tolerance for derived amounts (base amounts, cutoff thresholds) in dollars
DERIVED_TOLERANCE = 1.0


def check_consecutive_years(financial_year: str) -> str:
    """Reject keys like '2024-26' whose two years are not consecutive."""
    start, end = financial_year.split("-")
    if (int(start) + 1) % 100 != int(end):
        raise ValueError(f"financial_year '{financial_year}' must span consecutive years")
    return financial_year


def _check_contiguous(rows: Sequence[Any], min_attr: str, max_attr: str, label: str) -> None:
    """Validate ascending, gap-free whole-dollar bands ending in an unbounded band."""
    if not rows:
        raise ValueError(f"{label}: at least one row is required")

    if getattr(rows[0], min_attr) != 0:
        raise ValueError(f"{label}: first row must start at 0")

    for i, row in enumerate(rows):
        lower = getattr(row, min_attr)
        upper = getattr(row, max_attr)
        is_last = i == len(rows) - 1

        if is_last:
            if upper is not None:
                raise ValueError(f"{label}: last row must be unbounded (max: null)")
            continue

        if upper is None:
            raise ValueError(f"{label}: only the last row may be unbounded (row {i})")
        if upper < lower:
            raise ValueError(f"{label}: row {i} max {upper} is below min {lower}")

        next_lower = getattr(rows[i + 1], min_attr)
        if next_lower != upper + 1:
            raise ValueError(
                f"{label}: gap or overlap between row {i} (max {upper}) "
                f"and row {i + 1} (min {next_lower})"
            )


def _check_withholding_rises(bands: Sequence[Any], label: str) -> None:
    """Whole-dollar withholding must not fall where one band hands over to the next.

    Both bands are evaluated at the lower band's max; the upper band applies
    to any earnings above it.
    """
    for i in range(len(bands) - 1):
        edge = bands[i].weekly_earnings_max
        below = round_dollars(bands[i].withholding(edge))
        above = round_dollars(bands[i + 1].withholding(edge))
        if above < below:
            raise ValueError(
                f"{label}: withholding falls from {below:g} to {above:g} "
                f"between row {i} and row {i + 1} at weekly earnings {edge:g}"
            )


class TaxBracket(BaseModel):
    """Single income tax bracket. Bounds are inclusive whole dollars."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    min: float = Field(..., ge=0, description="First dollar taxed at this rate")
    max: Optional[float] = Field(default=None, description="Last dollar in bracket (None = no cap)")
    base_amount: float = Field(..., ge=0, description="Tax on all income below min")
    rate: float = Field(..., ge=0, le=1, description="Marginal rate as decimal")


class MedicareThresholds(BaseModel):
    """Medicare levy low-income thresholds."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    single: float = Field(..., gt=0)
    family: float = Field(..., gt=0)
    dependent_child_increase: float = Field(..., ge=0)
    shade_out_multiplier: float = Field(..., gt=1, description="Shade-out bound as multiple of threshold")


class SurchargeTier(BaseModel):
    """Medicare levy surcharge income tier."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    min: float = Field(..., ge=0)
    max: Optional[float] = None
    rate: float = Field(..., ge=0, le=1)


class WithdrawalOffset(BaseModel):
    """Offset paid in full up to a threshold, then withdrawn linearly to zero."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_offset: float = Field(..., ge=0)
    withdrawal_rate: float = Field(..., gt=0, le=1, description="Reduction per dollar over threshold")
    cutoff_threshold: float = Field(..., ge=0, description="Income at which offset reaches zero")

    @property
    @abstractmethod
    def start_threshold(self) -> float:
        """Income at which withdrawal starts."""

    @model_validator(mode="after")
    def cutoff_matches_withdrawal(self):
        expected = self.start_threshold + self.max_offset / self.withdrawal_rate
        if abs(expected - self.cutoff_threshold) > DERIVED_TOLERANCE:
            raise ValueError(
                f"cutoff_threshold {self.cutoff_threshold} does not match "
                f"threshold + max_offset / withdrawal_rate = {expected:.2f}"
            )
        return self


class LitoRules(WithdrawalOffset):
    """Low Income Tax Offset parameters."""

    full_threshold: float = Field(..., ge=0)

    @property
    def start_threshold(self) -> float:
        return self.full_threshold


class SaptoRates(WithdrawalOffset):
    """SAPTO parameters for one household type."""

    shade_out_threshold: float = Field(..., ge=0)

    @property
    def start_threshold(self) -> float:
        return self.shade_out_threshold


class SaptoRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    single: SaptoRates
    couple_each: SaptoRates


class PaygBand(BaseModel):
    """Schedule 1 weekly earnings band: withholding = a * earnings - b."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    weekly_earnings_min: float = Field(..., ge=0)
    weekly_earnings_max: Optional[float] = None
    a: float = Field(..., ge=0, le=1)
    b: float

    def withholding(self, weekly_earnings: float) -> float:
        """Unrounded weekly withholding, never negative."""
        return max(0.0, self.a * weekly_earnings - self.b)


class PaygScales(BaseModel):
    """Withholding scales: scale 1 (no tax-free threshold), scale 2 (threshold claimed)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    scale_1: tuple[PaygBand, ...]
    scale_2: tuple[PaygBand, ...]

    @field_validator("scale_1", "scale_2")
    @classmethod
    def bands_contiguous(cls, v, info):
        _check_contiguous(v, "weekly_earnings_min", "weekly_earnings_max", f"payg.{info.field_name}")
        _check_withholding_rises(v, f"payg.{info.field_name}")
        return v


class CarryForwardRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    balance_threshold: float = Field(..., gt=0, description="Total super balance must be below this")
    max_years: int = Field(..., ge=1)


class BringForwardBand(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    balance_below: Optional[float] = Field(default=None, description="Upper TSB bound (None = no bound)")
    years: int = Field(..., ge=1, le=3)


class CoContributionRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    lower_threshold: float = Field(..., ge=0)
    upper_threshold: float = Field(..., gt=0)
    max_amount: float = Field(..., ge=0)
    matching_rate: float = Field(..., ge=0, le=1)


class SpouseOffsetRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    lower_threshold: float = Field(..., ge=0)
    upper_threshold: float = Field(..., gt=0)
    max_contribution: float = Field(..., ge=0)
    rate: float = Field(..., ge=0, le=1)

    @property
    def max_offset(self) -> float:
        return self.max_contribution * self.rate


class SuperannuationRules(BaseModel):
    """Superannuation rates, caps and thresholds."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    guarantee_rate: float = Field(..., ge=0, le=1)
    concessional_cap: float = Field(..., gt=0)
    non_concessional_cap: float = Field(..., gt=0)
    division_293_threshold: float = Field(..., gt=0)
    division_293_rate: float = Field(..., ge=0, le=1)
    contributions_tax_rate: float = Field(..., ge=0, le=1)
    max_contribution_base_quarterly: float = Field(..., gt=0)
    carry_forward: CarryForwardRules
    bring_forward: tuple[BringForwardBand, ...]
    co_contribution: CoContributionRules
    spouse_offset: SpouseOffsetRules

    @field_validator("bring_forward")
    @classmethod
    def bring_forward_bands(cls, v):
        if not v or v[-1].balance_below is not None:
            raise ValueError("bring_forward: last band must be unbounded (balance_below: null)")
        bounds = [band.balance_below for band in v[:-1]]
        if any(b is None for b in bounds):
            raise ValueError("bring_forward: only the last band may be unbounded")
        if bounds != sorted(bounds) or len(set(bounds)) != len(bounds):
            raise ValueError("bring_forward: balance_below must be strictly ascending")
        years = [band.years for band in v]
        if years != sorted(years, reverse=True):
            raise ValueError("bring_forward: years must not increase with balance")
        return v

    @property
    def max_contribution_base_annual(self) -> float:
        return self.max_contribution_base_quarterly * 4


class CgtRules(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    discount: float = Field(..., ge=0, le=1)
    min_holding_months: int = Field(..., ge=0)


class TaxYearConfig(BaseModel):
    """Complete, immutable tax rules for one financial year (1 July - 30 June)."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    financial_year: str = Field(..., pattern=FINANCIAL_YEAR_PATTERN, description="e.g. '2024-25'")
    start_date: date
    end_date: date

    brackets: tuple[TaxBracket, ...]
    tax_free_threshold: float = Field(..., ge=0)

    medicare_rate: float = Field(..., ge=0, le=1)
    medicare_thresholds: MedicareThresholds
    medicare_surcharge_tiers: tuple[SurchargeTier, ...]

    lito: LitoRules
    sapto: SaptoRules
    payg: PaygScales
    superannuation: SuperannuationRules
    cgt: CgtRules

    @model_validator(mode="before")
    @classmethod
    def derive_dates(cls, data: Any) -> Any:
        """Fill start/end dates from the financial year key when omitted."""
        if isinstance(data, dict) and isinstance(data.get("financial_year"), str):
            fy = data["financial_year"]
            if fy[:4].isdigit():
                start_year = int(fy[:4])
                data = dict(data)
                data.setdefault("start_date", date(start_year, 7, 1))
                data.setdefault("end_date", date(start_year + 1, 6, 30))
        return data

    @field_validator("financial_year")
    @classmethod
    def consecutive_years(cls, v: str) -> str:
        return check_consecutive_years(v)

    @field_validator("brackets")
    @classmethod
    def brackets_contiguous(cls, v):
        _check_contiguous(v, "min", "max", "brackets")
        for prev, bracket in zip(v, v[1:]):
            expected = prev.base_amount + (prev.max - prev.min + 1) * prev.rate
            if abs(expected - bracket.base_amount) > DERIVED_TOLERANCE:
                raise ValueError(
                    f"brackets: base_amount {bracket.base_amount} at {bracket.min} "
                    f"is discontinuous with previous bracket (expected {expected:.2f})"
                )
        return v

    @field_validator("medicare_surcharge_tiers")
    @classmethod
    def surcharge_tiers_valid(cls, v):
        _check_contiguous(v, "min", "max", "medicare_surcharge_tiers")
        rates = [tier.rate for tier in v]
        if rates != sorted(rates):
            raise ValueError("medicare_surcharge_tiers: rates must not decrease")
        return v

    @property
    def start_year(self) -> int:
        return int(self.financial_year[:4])

    @property
    def top_bracket(self) -> TaxBracket:
        return self.brackets[-1]
