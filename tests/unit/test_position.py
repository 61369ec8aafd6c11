"""Tests for the annual tax position."""

import pytest

from autax.sdk.schemas import TaxPositionInput
from autax.sdk.taxes.position import (
    calculate_quick_tax_position,
    calculate_tax_position,
    compare_tax_positions,
)


class TestTaxPosition:
    """Tests for calculate_tax_position."""

    def test_salary_refund(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=100000, payg_withheld=22932), config)
        assert result.taxable_income == 100000
        assert result.income_tax == 20788
        assert result.medicare_levy == 2000
        assert result.gross_tax == 22788
        assert result.offsets_used.lito == 0
        assert result.net_tax == 22788
        assert result.estimated_refund == 144
        assert result.effective_rate == pytest.approx(22.79)
        assert result.marginal_rate == 30

    def test_amount_owing(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=100000, payg_withheld=20000), config)
        assert result.estimated_refund == -2788
        assert result.steps[-1].label == "Estimated amount owing"

    def test_deductions(self, config):
        result = calculate_tax_position(
            TaxPositionInput(salary=100000, work_deductions=2000, donations=500, other_deductions=500), config
        )
        assert result.deductions.total == 3000
        assert result.taxable_income == 97000

    def test_deductions_cannot_make_income_negative(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=10000, work_deductions=20000), config)
        assert result.taxable_income == 0
        assert result.net_tax == 0

    def test_franking_credits_refunded(self, config):
        result = calculate_tax_position(TaxPositionInput(franked_dividends=7000), config)
        assert result.income.franking_credits == 3000
        assert result.income.total_assessable == 10000
        assert result.gross_tax == 0
        assert result.net_tax == -3000
        assert result.estimated_refund == 3000
        assert result.offsets_used.lito == 0
        assert any("non-refundable" in warning for warning in result.warnings)

    def test_negative_gearing(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=100000, rental_income=-10000), config)
        assert result.taxable_income == 90000
        assert result.income_tax == 17788
        assert any("Negative gearing" in warning for warning in result.warnings)
        assert any("Negative gearing" in rec for rec in result.recommendations)

    def test_capital_gain_discount(self, config):
        result = calculate_tax_position(TaxPositionInput(capital_gains=20000, capital_losses=5000), config)
        assert result.income.net_capital_gain == 7500

    def test_capital_gain_without_discount(self, config):
        result = calculate_tax_position(
            TaxPositionInput(capital_gains=20000, capital_losses=5000, cgt_discount_eligible=False), config
        )
        assert result.income.net_capital_gain == 15000

    def test_capital_losses_carried_forward(self, config):
        result = calculate_tax_position(TaxPositionInput(capital_gains=1000, capital_losses=4000), config)
        assert result.income.net_capital_gain == 0
        assert any("carried forward" in warning for warning in result.warnings)

    def test_foreign_tax_offset_limited(self, config):
        result = calculate_tax_position(
            TaxPositionInput(salary=50000, foreign_income=10000, foreign_tax_paid=5000), config
        )
        assert result.taxable_income == 60000
        # 8,788 of tax, a sixth of it on foreign income
        assert result.offsets_entitled.foreign_tax == pytest.approx(1464.67)
        assert any("limited" in warning for warning in result.warnings)

    def test_exempt_income_not_taxed(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=50000, exempt_income=20000), config)
        assert result.taxable_income == 50000
        assert result.income.exempt == 20000

    def test_surcharge_without_cover(self, config):
        result = calculate_tax_position(
            TaxPositionInput(salary=100000, has_private_health_insurance=False), config
        )
        assert result.medicare_surcharge == pytest.approx(1000)
        assert result.gross_tax == pytest.approx(23788)

    def test_division_293_reported_separately(self, config):
        result = calculate_tax_position(
            TaxPositionInput(salary=230000, concessional_super=30000, payg_withheld=80000), config
        )
        assert result.division_293_tax == 1500
        assert result.estimated_refund == pytest.approx(80000 - result.net_tax)
        assert any("Division 293" in warning for warning in result.warnings)

    def test_senior_gets_sapto(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=30000, is_senior=True), config)
        assert result.offsets_entitled.sapto == 2230
        assert result.net_tax == 0

    def test_low_income_lito(self, config):
        result = calculate_tax_position(TaxPositionInput(salary=30000), config)
        # 11,800 * 16% = 1,888 tax; 400 shade-in levy; LITO 700
        assert result.gross_tax == pytest.approx(2288)
        assert result.offsets_used.lito == 700
        assert result.net_tax == pytest.approx(1588)


class TestQuickAndCompare:
    def test_quick_position(self, config):
        result = calculate_quick_tax_position(100000, 22932, 2000, config)
        assert result.taxable_income == 98000
        assert result.estimated_refund > 144

    def test_compare(self, config):
        comparison = compare_tax_positions(
            TaxPositionInput(salary=100000),
            TaxPositionInput(salary=100000, work_deductions=1000),
            config,
        )
        assert comparison.taxable_income_difference == -1000
        # 30% tax + 2% Medicare on 1,000
        assert comparison.net_tax_difference == pytest.approx(-320)
        assert comparison.refund_difference == pytest.approx(320)
