"""Tests for Medicare levy and surcharge."""

import pytest

from autax.sdk.schemas import MedicareLevyInput
from autax.sdk.taxes.medicare import calculate_medicare_levy, get_medicare_summary, get_medicare_threshold


def levy(config, income, **kwargs):
    return calculate_medicare_levy(MedicareLevyInput(taxable_income=income, **kwargs), config)


class TestMedicareLevy:
    """Tests for the levy zones."""

    def test_full_levy(self, config):
        result = levy(config, 100000)
        assert result.medicare_levy == 2000
        assert result.medicare_surcharge == 0
        assert result.total == 2000
        assert not result.is_shade_in

    def test_below_threshold(self, config):
        assert levy(config, 26000).medicare_levy == 0

    def test_shade_in(self, config):
        result = levy(config, 30000)
        assert result.is_shade_in
        assert result.medicare_levy == pytest.approx(400)

    def test_continuous_at_shade_out(self, config):
        thresholds = config.medicare_thresholds
        shade_out = thresholds.single * thresholds.shade_out_multiplier
        just_below = levy(config, shade_out - 0.01).medicare_levy
        at_boundary = levy(config, shade_out).medicare_levy
        assert at_boundary == pytest.approx(shade_out * config.medicare_rate)
        assert just_below == pytest.approx(at_boundary, abs=0.01)

    @pytest.mark.parametrize("income", [0, -5000])
    def test_zero_or_negative_income(self, config, income):
        assert levy(config, income).total == 0

    def test_exemption(self, config):
        result = levy(config, 100000, has_medicare_exemption=True)
        assert result.is_exempt
        assert result.total == 0

    def test_family_threshold_with_children(self, config):
        assert get_medicare_threshold("FAMILY", 2, config) == pytest.approx(51900)
        assert levy(config, 50000, family_status="FAMILY", dependent_children=2).medicare_levy == 0

    def test_children_ignored_for_single(self, config):
        assert get_medicare_threshold("SINGLE", 3, config) == 26000


class TestSurcharge:
    """Tests for the Medicare levy surcharge."""

    def test_not_applied_with_cover(self, config):
        assert levy(config, 150000).medicare_surcharge == 0

    def test_base_tier_has_no_surcharge(self, config):
        assert levy(config, 90000, has_private_health_insurance=False).medicare_surcharge == 0

    def test_tier_1(self, config):
        result = levy(config, 100000, has_private_health_insurance=False)
        assert result.medicare_surcharge == pytest.approx(1000)
        assert result.total == pytest.approx(3000)

    def test_tier_2(self, config):
        assert levy(config, 120000, has_private_health_insurance=False).medicare_surcharge == pytest.approx(1500)

    def test_summary_reports_saving(self, config):
        summary = get_medicare_summary(100000, False, config)
        assert summary.could_save_with_phi == pytest.approx(1000)
        assert summary.as_percentage == pytest.approx(3)
