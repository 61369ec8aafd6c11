"""Tests for superannuation contributions."""

import pytest

from autax.sdk.schemas import SuperContributionInput
from autax.sdk.superannuation.contributions import (
    calculate_co_contribution,
    calculate_division_293_tax,
    calculate_spouse_contribution_offset,
    calculate_super_contributions,
    calculate_super_guarantee,
    get_super_contribution_summary,
)


class TestSuperGuarantee:
    """Tests for employer SG."""

    def test_100k(self, config):
        assert calculate_super_guarantee(100000, config).amount == 11500

    def test_capped_at_maximum_contribution_base(self, config):
        result = calculate_super_guarantee(300000, config)
        assert result.eligible_earnings == 260280
        assert result.amount == pytest.approx(29932.20)

    def test_zero(self, config):
        assert calculate_super_guarantee(0, config).amount == 0


class TestDivision293:
    """Tests for Division 293 tax."""

    def test_example(self, config):
        # 230,000 + 30,000 = 260,000; min(30,000, 10,000) * 15%
        assert calculate_division_293_tax(230000, 30000, config) == 1500

    def test_below_threshold(self, config):
        assert calculate_division_293_tax(200000, 30000, config) == 0

    def test_limited_to_contributions(self, config):
        assert calculate_division_293_tax(400000, 20000, config) == 3000

    def test_no_contributions(self, config):
        assert calculate_division_293_tax(400000, 0, config) == 0


class TestSuperContributions:
    """Tests for calculate_super_contributions."""

    def test_totals(self, config):
        result = calculate_super_contributions(
            SuperContributionInput(
                gross_salary=100000,
                salary_sacrifice=5000,
                personal_deductible=1000,
                personal_non_deductible=2000,
                spouse_contribution=500,
            ),
            config=config,
        )
        assert result.super_guarantee == 11500
        assert result.total_concessional == 17500
        assert result.total_non_concessional == 2500
        assert result.total_contributions == 20000
        assert result.contributions_tax == 2625
        assert result.employer_total == 11500
        assert result.employee_total == 8500
        assert result.division_293_tax == 0

    def test_salary_sacrifice_savings(self, config):
        result = calculate_super_contributions(
            SuperContributionInput(gross_salary=100000, salary_sacrifice=10000), config=config
        )
        assert result.tax_savings_from_salary_sacrifice == 1500

    def test_explicit_marginal_rate(self, config):
        result = calculate_super_contributions(
            SuperContributionInput(gross_salary=100000, salary_sacrifice=10000), marginal_rate=0.37, config=config
        )
        assert result.tax_savings_from_salary_sacrifice == 2200

    def test_division_293_on_high_income(self, config):
        result = calculate_super_contributions(SuperContributionInput(gross_salary=260000), config=config)
        # SG 29,900 on 260,000; combined exceeds 250,000 by 39,900
        assert result.division_293_tax == pytest.approx(4485)


class TestCoContribution:
    """Tests for the government co-contribution."""

    def test_full(self, config):
        result = calculate_co_contribution(40000, 1000, config)
        assert result.eligible
        assert result.amount == 500

    def test_matching_below_max(self, config):
        assert calculate_co_contribution(40000, 400, config).amount == 200

    def test_phase_out(self, config):
        assert calculate_co_contribution(52900, 1000, config).amount == 250

    def test_above_upper_threshold(self, config):
        assert not calculate_co_contribution(70000, 1000, config).eligible

    def test_no_contribution(self, config):
        assert calculate_co_contribution(30000, 0, config).amount == 0


class TestSpouseOffset:
    """Tests for the spouse contribution offset."""

    def test_full(self, config):
        result = calculate_spouse_contribution_offset(30000, 3000, config)
        assert result.eligible
        assert result.offset == 540

    def test_phase_out(self, config):
        # 540 - (38,500 - 37,000) * 540 / 3,000
        assert calculate_spouse_contribution_offset(38500, 3000, config).offset == 270

    def test_spouse_income_too_high(self, config):
        assert not calculate_spouse_contribution_offset(41000, 3000, config).eligible

    def test_no_contribution(self, config):
        assert not calculate_spouse_contribution_offset(20000, 0, config).eligible


class TestContributionSummary:
    """Tests for warnings and recommendations."""

    def test_recommends_sacrifice(self, config):
        summary = get_super_contribution_summary(SuperContributionInput(gross_salary=100000), config=config)
        assert summary.concessional.remaining == 18500
        assert len(summary.recommendations) == 2
        assert not summary.warnings

    def test_warns_over_cap(self, config):
        summary = get_super_contribution_summary(
            SuperContributionInput(gross_salary=150000, salary_sacrifice=20000), config=config
        )
        assert summary.concessional.remaining == 0
        assert summary.concessional.percentage == 100
        assert any("exceed cap" in warning for warning in summary.warnings)

    def test_low_income_no_recommendation(self, config):
        summary = get_super_contribution_summary(SuperContributionInput(gross_salary=40000), config=config)
        assert not summary.recommendations
