"""Tests for the salary processor."""

import pytest

from autax.sdk.salary import (
    calculate_optimal_salary_sacrifice,
    compare_salary_scenarios,
    get_salary_summary,
    process_salary,
)
from autax.sdk.schemas import SalaryInput
from autax.sdk.taxes.withholding import get_scale


def within_a_cent(actual, expected):
    return round(abs(actual - expected) * 100) <= 1


class TestGrossSalary:
    """Tests for GROSS inputs."""

    def test_100k_monthly_example(self, config):
        result = process_salary(SalaryInput(amount=100000 / 12, pay_frequency="MONTHLY"), config)
        assert result.gross_salary == 100000
        assert result.taxable_income == 100000
        assert result.payg_withholding == 22932
        assert result.medicare_levy == 2000
        assert result.total_tax == 24932
        assert result.net_salary == 75068
        assert result.super_guarantee == 11500
        assert result.per_period.frequency == "MONTHLY"
        assert result.per_period.net == pytest.approx(6255.67)
        assert result.solver_iterations is None

    def test_sacrifice_reduces_taxable_income(self, config):
        result = process_salary(SalaryInput(amount=100000, salary_sacrifice=10000), config)
        assert result.taxable_income == 90000
        assert result.total_super == pytest.approx(21500)
        assert result.net_salary == pytest.approx(
            result.gross_salary - result.total_tax - result.salary_sacrifice
        )

    def test_sacrifice_frequency(self, config):
        result = process_salary(
            SalaryInput(
                amount=4000,
                pay_frequency="FORTNIGHTLY",
                salary_sacrifice=500,
                salary_sacrifice_frequency="MONTHLY",
            ),
            config,
        )
        assert result.gross_salary == 104000
        assert result.salary_sacrifice == 6000

    def test_zero_salary(self, config):
        result = process_salary(SalaryInput(amount=0), config)
        assert result.gross_salary == 0
        assert result.net_salary == 0
        assert result.total_tax == 0

    def test_hecs_warning(self, config):
        result = process_salary(SalaryInput(amount=80000, has_hecs_debt=True), config)
        assert any("HECS" in warning for warning in result.warnings)
        assert any("Not yet implemented" in (step.explanation or "") for step in result.steps)

    def test_cap_warning(self, config):
        result = process_salary(SalaryInput(amount=150000, salary_sacrifice=20000), config)
        assert any("exceed" in warning for warning in result.warnings)

    def test_no_tft_costs_more(self, config):
        with_tft = process_salary(SalaryInput(amount=60000), config)
        without = process_salary(SalaryInput(amount=60000, has_tax_free_threshold=False), config)
        assert without.payg_withholding > with_tft.payg_withholding


class TestNetSalary:
    """Tests for NET inputs solved back to gross."""

    def test_80k_net_example(self, config):
        result = process_salary(SalaryInput(amount=80000, salary_type="NET"), config)
        assert 100000 < result.gross_salary < 110000
        assert within_a_cent(result.net_salary, 80000)
        assert result.solver_iterations is not None
        assert result.solver_iterations <= 50
        assert not result.warnings

        forward = process_salary(SalaryInput(amount=result.gross_salary), config)
        assert within_a_cent(forward.net_salary, 80000)

    @pytest.mark.parametrize("net,frequency", [
        (1500, "FORTNIGHTLY"),
        (900, "WEEKLY"),
        (5000, "MONTHLY"),
        (40000, "ANNUALLY"),
        (300000, "ANNUALLY"),
    ])
    def test_net_round_trip(self, config, net, frequency):
        result = process_salary(SalaryInput(amount=net, salary_type="NET", pay_frequency=frequency), config)
        assert within_a_cent(result.net_salary, net * {"WEEKLY": 52, "FORTNIGHTLY": 26, "MONTHLY": 12}.get(frequency, 1))

    def test_net_with_sacrifice(self, config):
        result = process_salary(SalaryInput(amount=60000, salary_type="NET", salary_sacrifice=5000), config)
        assert result.salary_sacrifice == 5000
        assert within_a_cent(result.net_salary, 60000)

    def test_net_without_tft(self, config):
        result = process_salary(SalaryInput(amount=50000, salary_type="NET", has_tax_free_threshold=False), config)
        assert within_a_cent(result.net_salary, 50000)

    def test_no_tft_net_near_weekly_625(self, config):
        result = process_salary(
            SalaryInput(amount=24339.42, salary_type="NET", has_tax_free_threshold=False), config
        )
        assert within_a_cent(result.net_salary, 24339.42)
        assert not result.warnings

    @pytest.mark.parametrize("has_tft", [True, False])
    def test_net_round_trip_across_range(self, config, has_tft):
        nets = [round(i * 997.3, 2) for i in range(1, 502)]
        for band in get_scale(has_tft, config)[:-1]:
            for gross in (band.weekly_earnings_max * 52 - 26, band.weekly_earnings_max * 52 + 26):
                forward = process_salary(SalaryInput(amount=gross, has_tax_free_threshold=has_tft), config)
                nets.append(forward.net_salary)

        failures = []
        for net in nets:
            result = process_salary(
                SalaryInput(amount=net, salary_type="NET", has_tax_free_threshold=has_tft), config
            )
            unresolved = any("could not be resolved" in warning for warning in result.warnings)
            if unresolved or not within_a_cent(result.net_salary, net):
                failures.append((net, result.gross_salary, result.net_salary))
        assert failures == []

    @pytest.mark.parametrize("net", [0, -1000])
    def test_non_positive_net(self, config, net):
        result = process_salary(SalaryInput(amount=net, salary_type="NET"), config)
        assert result.gross_salary == 0
        assert result.solver_iterations == 0


class TestSummaryAndAdvice:
    """Tests for summaries, sacrifice advice and comparisons."""

    def test_summary(self, config):
        summary = get_salary_summary(100000, config=config)
        assert summary.net == 75068
        assert summary.effective_tax_rate == pytest.approx(24.93)
        assert summary.marginal_tax_rate == 30

    def test_optimal_sacrifice(self, config):
        result = calculate_optimal_salary_sacrifice(100000, config)
        # Cap headroom after 11,500 SG, saving 30% - 15%
        assert result.optimal_amount == 18500
        assert result.tax_savings == 2775
        assert result.net_impact < 0
        assert result.marginal_rate == 30

    def test_sacrifice_limited_to_share_of_gross(self, config):
        result = calculate_optimal_salary_sacrifice(30000, config)
        assert result.optimal_amount == 9000
        assert result.tax_savings == 90

    def test_no_benefit_below_contributions_tax(self, config):
        result = calculate_optimal_salary_sacrifice(15000, config)
        assert result.optimal_amount == 0
        assert "not above" in result.reason

    def test_no_benefit_without_headroom(self, config):
        assert calculate_optimal_salary_sacrifice(300000, config).optimal_amount == 0

    def test_compare(self, config):
        comparison = compare_salary_scenarios(
            SalaryInput(amount=100000), SalaryInput(amount=110000), config
        )
        assert comparison.differences.gross == 10000
        assert 0 < comparison.differences.net < 10000
        assert comparison.differences.superannuation == pytest.approx(1150)
