"""Tests for contribution cap tracking."""

import pytest

from autax.sdk.schemas import CapTrackingInput, CarryForwardRecord
from autax.sdk.superannuation.caps import (
    build_carry_forward_records,
    calculate_bring_forward,
    calculate_carry_forward,
    get_optimal_contribution_strategy,
    track_contribution_caps,
)


def records(unused_by_year):
    return [
        CarryForwardRecord(financial_year=year, unused_amount=amount)
        for year, amount in unused_by_year.items()
    ]


class TestCarryForward:
    """Tests for concessional carry-forward."""

    def test_balance_over_threshold_is_ineligible(self, config):
        result = calculate_carry_forward(records({"2022-23": 7500, "2023-24": 5000}), 600000, config)
        assert result.available == 0
        assert not result.eligible
        assert not result.breakdown

    def test_window_of_five_years(self, config):
        result = calculate_carry_forward(
            records({"2018-19": 1000, "2019-20": 2000, "2023-24": 3000, "2024-25": 4000}), 100000, config
        )
        assert result.eligible
        assert result.available == 5000
        assert [entry.financial_year for entry in result.breakdown] == ["2019-20", "2023-24"]

    def test_oldest_first(self, config):
        result = calculate_carry_forward(records({"2023-24": 3000, "2020-21": 1000}), 0, config)
        assert [entry.financial_year for entry in result.breakdown] == ["2020-21", "2023-24"]

    def test_zero_amounts_ignored(self, config):
        result = calculate_carry_forward(records({"2022-23": 0}), 0, config)
        assert result.available == 0
        assert result.eligible

    def test_records_from_contributions(self):
        built = build_carry_forward_records({"2023-24": 20000, "2022-23": 30000})
        assert [(r.financial_year, r.unused_amount) for r in built] == [("2022-23", 0), ("2023-24", 7500)]

    def test_record_rejects_bad_year(self):
        with pytest.raises(ValueError):
            CarryForwardRecord(financial_year="2023-25", unused_amount=100)


class TestBringForward:
    """Tests for non-concessional bring-forward."""

    @pytest.mark.parametrize("balance,years,cap", [
        (0, 3, 360000),
        (1659999, 3, 360000),
        (1660000, 2, 240000),
        (1779999, 2, 240000),
        (1780000, 1, 120000),
        (3000000, 1, 120000),
    ])
    def test_bands(self, config, balance, years, cap):
        result = calculate_bring_forward(balance, config)
        assert result.years_available == years
        assert result.total_cap == cap
        assert result.eligible == (years > 1)


class TestTrackContributionCaps:
    """Tests for track_contribution_caps."""

    def test_within_caps(self, config):
        result = track_contribution_caps(CapTrackingInput(concessional_ytd=20000, non_concessional_ytd=50000), config)
        assert result.financial_year == "2024-25"
        assert result.concessional.remaining == 10000
        assert not result.concessional.is_exceeded
        assert result.non_concessional.total_available == 360000
        assert result.estimated_excess_contributions_tax == 0

    def test_carry_forward_covers_excess(self, config):
        result = track_contribution_caps(
            CapTrackingInput(
                concessional_ytd=40000,
                carry_forward_amounts=records({"2022-23": 7500, "2023-24": 5000}),
                total_super_balance=300000,
            ),
            config,
        )
        cc = result.concessional
        assert cc.total_available == 42500
        assert cc.remaining == 2500
        assert cc.excess_amount == 0
        assert [(e.financial_year, e.amount) for e in cc.carry_forward_applied] == [
            ("2022-23", 7500), ("2023-24", 2500),
        ]

    def test_concessional_excess(self, config):
        result = track_contribution_caps(CapTrackingInput(concessional_ytd=35000), config)
        assert result.concessional.is_exceeded
        assert result.concessional.excess_amount == 5000
        assert result.concessional.remaining == 0
        assert result.estimated_excess_contributions_tax == 1600
        assert "Estimate only" in result.excess_tax_note
        assert any("Excess concessional" in warning for warning in result.warnings)

    def test_non_concessional_excess_without_bring_forward(self, config):
        result = track_contribution_caps(
            CapTrackingInput(non_concessional_ytd=150000, total_super_balance=2000000), config
        )
        assert result.non_concessional.excess_amount == 30000
        assert result.estimated_excess_contributions_tax == pytest.approx(14100)

    def test_carry_forward_refused_is_warned(self, config):
        result = track_contribution_caps(
            CapTrackingInput(
                concessional_ytd=10000,
                carry_forward_amounts=records({"2023-24": 5000}),
                total_super_balance=600000,
            ),
            config,
        )
        assert result.concessional.carry_forward_available == 0
        assert any("Carry-forward not available" in warning for warning in result.warnings)

    @pytest.mark.parametrize("used", [0, 15000, 29999, 30000, 30001, 45000, 90000])
    def test_remaining_and_excess_never_both_positive(self, config, used):
        result = track_contribution_caps(
            CapTrackingInput(concessional_ytd=used, non_concessional_ytd=used * 4), config
        )
        for status in (result.concessional, result.non_concessional):
            assert status.remaining == max(0, status.total_available - status.used)
            assert status.excess_amount == max(0, status.used - status.total_available)
            assert not (status.remaining > 0 and status.excess_amount > 0)

    def test_zero_available_percentage(self, config):
        result = track_contribution_caps(CapTrackingInput(), config)
        assert result.concessional.percentage_used == 0


class TestContributionStrategy:
    """Tests for get_optimal_contribution_strategy."""

    def test_fills_remaining_cap(self, config):
        strategy = get_optimal_contribution_strategy(100000, 0, 0.30, config)
        assert strategy.recommended_salary_sacrifice == 18500
        assert strategy.tax_savings == 2775
        assert not strategy.warnings

    def test_cap_already_used(self, config):
        strategy = get_optimal_contribution_strategy(100000, 30000, 0.30, config)
        assert strategy.recommended_salary_sacrifice == 0
        assert strategy.remaining_cap == 0

    def test_low_marginal_rate(self, config):
        strategy = get_optimal_contribution_strategy(15000, 0, 0.0, config)
        assert strategy.recommended_salary_sacrifice == 0
        assert strategy.remaining_cap > 0

    def test_division_293_warning(self, config):
        strategy = get_optimal_contribution_strategy(245000, 10000, 0.45, config)
        assert strategy.recommended_salary_sacrifice == 20000
        assert any("Division 293" in warning for warning in strategy.warnings)
