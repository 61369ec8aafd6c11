"""Tests for tax offsets and their application."""

import pytest

from autax.sdk.schemas import TaxOffsets, TaxOffsetsInput
from autax.sdk.taxes.offsets import (
    NON_REFUNDABLE_ORDER,
    apply_offsets,
    calculate_all_offsets,
    calculate_foreign_tax_offset,
    calculate_franking_credit_offset,
    calculate_lito,
    calculate_sapto,
)


class TestLito:
    """Tests for the low income tax offset."""

    @pytest.mark.parametrize("income,expected", [
        (0, 700),
        (37500, 700),
        (45000, 325),
        (51500, 0),
        (80000, 0),
    ])
    def test_amounts(self, config, income, expected):
        assert calculate_lito(income, config).offset == pytest.approx(expected)

    def test_non_increasing(self, config):
        previous = calculate_lito(0, config).offset
        for income in range(0, 60001, 250):
            offset = calculate_lito(income, config).offset
            assert offset <= previous
            previous = offset


class TestSapto:
    """Tests for the seniors and pensioners tax offset."""

    def test_full_single(self, config):
        assert calculate_sapto(30000, False, config).offset == 2230

    def test_shading_out(self, config):
        # 2,230 - (40,000 - 32,279) * 12.5%
        assert calculate_sapto(40000, False, config).offset == pytest.approx(1264.88, abs=0.01)

    def test_couple_rate(self, config):
        assert calculate_sapto(20000, True, config).offset == 1602

    def test_cut_out(self, config):
        assert calculate_sapto(60000, False, config).offset == 0

    def test_only_when_senior(self, config):
        offsets = calculate_all_offsets(TaxOffsetsInput(taxable_income=30000), config).offsets
        assert offsets.sapto == 0
        offsets = calculate_all_offsets(TaxOffsetsInput(taxable_income=30000, is_senior=True), config).offsets
        assert offsets.sapto == 2230


class TestOtherOffsets:
    def test_franking(self):
        assert calculate_franking_credit_offset(300).offset == 300
        assert calculate_franking_credit_offset(0).offset == 0

    def test_foreign_full_without_limit(self):
        assert calculate_foreign_tax_offset(500).offset == 500

    def test_foreign_limited(self):
        assert calculate_foreign_tax_offset(500, 320).offset == 320

    def test_foreign_under_limit(self):
        assert calculate_foreign_tax_offset(200, 320).offset == 200

    @pytest.mark.parametrize("limit", [0, -5])
    def test_foreign_limit_not_positive(self, limit):
        result = calculate_foreign_tax_offset(100, limit)
        assert result.offset == 0

    def test_all_offsets_total(self, config):
        result = calculate_all_offsets(
            TaxOffsetsInput(taxable_income=30000, franking_credits=300, foreign_tax_paid=50, other_offsets=25),
            config,
        )
        assert result.offsets.total == pytest.approx(700 + 300 + 50 + 25)
        assert result.steps[-1].label == "Total offsets"


class TestApplyOffsets:
    """Tests for the ordered application of offsets."""

    def test_non_refundable_stops_at_zero(self):
        result = apply_offsets(500, TaxOffsets(lito=700))
        assert result.net_tax == 0
        assert result.refundable_amount == 0
        assert result.used_offsets.lito == 500
        assert result.unused_offsets.lito == 200

    def test_franking_refund(self):
        result = apply_offsets(500, TaxOffsets(lito=700, franking_credits=300))
        assert result.net_tax == -300
        assert result.refundable_amount == 300
        assert result.used_offsets.franking_credits == 300

    def test_franking_applied_after_non_refundable(self):
        result = apply_offsets(1000, TaxOffsets(lito=400, franking_credits=900))
        assert result.used_offsets.lito == 400
        assert result.net_tax == -300

    def test_order_decides_which_offset_is_unused(self):
        result = apply_offsets(1000, TaxOffsets(lito=700, sapto=600))
        assert result.used_offsets.lito == 700
        assert result.used_offsets.sapto == 300
        assert result.unused_offsets.sapto == 300
        assert NON_REFUNDABLE_ORDER[0] == "lito"

    def test_no_offsets(self):
        result = apply_offsets(2500, TaxOffsets())
        assert result.net_tax == 2500
        assert result.used_offsets.total == 0

    @pytest.mark.parametrize("gross_tax", [0, 100, 1000, 5000])
    @pytest.mark.parametrize("offsets", [
        TaxOffsets(lito=700),
        TaxOffsets(lito=700, sapto=2230, foreign_tax=800, other=150),
        TaxOffsets(other=10000),
    ])
    def test_non_refundable_never_produce_refund(self, gross_tax, offsets):
        result = apply_offsets(gross_tax, offsets)
        assert result.net_tax >= 0
        assert result.refundable_amount == 0
        for bucket in NON_REFUNDABLE_ORDER:
            used = getattr(result.used_offsets, bucket)
            unused = getattr(result.unused_offsets, bucket)
            assert used + unused == pytest.approx(getattr(offsets, bucket))
