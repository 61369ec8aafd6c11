"""Tests for the tax year configuration registry."""

from datetime import date
from pathlib import Path

import pytest

from autax.sdk.config import (
    ConfigNotFoundError,
    ConfigNotFoundWarning,
    TaxRulesValidationError,
    financial_year_for_date,
    format_financial_year,
    get_available_years,
    get_bracket_info,
    get_concessional_cap,
    get_config,
    get_current_config,
    get_marginal_rate,
    load_config,
    load_config_file,
    lookup_config,
    parse_financial_year,
    unused_concessional_cap,
    years_between,
)
from autax.sdk.rules import LitoRules, PaygBand, WithdrawalOffset

BUNDLED_2024 = Path(__file__).parents[2] / "autax" / "tax-rules" / "2024-25.yaml"


def write_year(rules_dir: Path, year: str, text: str = None) -> Path:
    """Copy the bundled 2024-25 rules under a new year key."""
    text = text or BUNDLED_2024.read_text()
    text = text.replace('financial_year: "2024-25"', f'financial_year: "{year}"')
    path = rules_dir / f"{year}.yaml"
    path.write_text(text)
    return path


class TestFinancialYearKeys:
    """Tests for 'YYYY-YY' key handling."""

    def test_parse(self):
        assert parse_financial_year("2024-25") == (2024, 2025)

    def test_parse_century(self):
        assert parse_financial_year("2099-00") == (2099, 2100)

    @pytest.mark.parametrize("key", ["2024", "2024-26", "24-25", "", "2024/25"])
    def test_parse_rejects_bad_keys(self, key):
        with pytest.raises(ValueError):
            parse_financial_year(key)

    def test_format(self):
        assert format_financial_year(2009) == "2009-10"

    def test_year_for_date(self):
        assert financial_year_for_date(date(2024, 7, 1)) == "2024-25"
        assert financial_year_for_date(date(2024, 6, 30)) == "2023-24"

    def test_years_between(self):
        assert years_between("2019-20", "2024-25") == 5
        assert years_between("2024-25", "2024-25") == 0


class TestBundledYears:
    """Tests for the bundled tax-rules files."""

    def test_available_years(self):
        years = get_available_years()
        assert {"2023-24", "2024-25", "2025-26"} <= set(years)
        assert years == sorted(years)

    def test_dates_derived(self, config):
        assert config.start_date == date(2024, 7, 1)
        assert config.end_date == date(2025, 6, 30)

    def test_2023_24_brackets_pre_stage_3(self):
        config = get_config("2023-24")
        assert config.brackets[1].rate == pytest.approx(0.19)

    def test_loaded_once(self):
        assert load_config("2024-25") is load_config("2024-25")

    def test_current_config_by_date(self):
        assert get_current_config(date(2024, 9, 1)).financial_year == "2024-25"


class TestFallback:
    """Unknown years fall back to the latest year with a warning."""

    def test_unknown_year_uses_latest(self):
        latest = get_available_years()[-1]
        with pytest.warns(ConfigNotFoundWarning):
            lookup = lookup_config("2030-31")
        assert lookup.config.financial_year == latest
        assert "2030-31" in lookup.warning

    def test_known_year_has_no_warning(self):
        assert lookup_config("2024-25").warning is None

    def test_load_config_raises_for_unknown_year(self):
        with pytest.raises(ConfigNotFoundError):
            load_config("2030-31")


class TestOverrideDirectory:
    """Tests for AUTAX_TAX_RULES_PATH."""

    def test_new_year_picked_up(self, rules_dir):
        write_year(rules_dir, "2030-31")
        assert "2030-31" in get_available_years()
        config = get_config("2030-31")
        assert config.financial_year == "2030-31"
        assert config.start_date == date(2030, 7, 1)

    def test_gapped_brackets_rejected(self, rules_dir):
        text = BUNDLED_2024.read_text().replace("{min: 45001,", "{min: 45101,")
        path = write_year(rules_dir, "2030-31", text)
        with pytest.raises(TaxRulesValidationError, match="gap or overlap"):
            load_config_file(path)

    def test_unbounded_middle_bracket_rejected(self, rules_dir):
        text = BUNDLED_2024.read_text().replace("max: 135000,", "max: null,")
        path = write_year(rules_dir, "2030-31", text)
        with pytest.raises(TaxRulesValidationError):
            load_config_file(path)

    def test_discontinuous_base_amount_rejected(self, rules_dir):
        text = BUNDLED_2024.read_text().replace("base_amount: 4288", "base_amount: 5000")
        path = write_year(rules_dir, "2030-31", text)
        with pytest.raises(TaxRulesValidationError):
            load_config_file(path)

    def test_falling_withholding_rejected(self, rules_dir):
        text = BUNDLED_2024.read_text().replace("a: 0.3227, b: 68.2367", "a: 0.3227, b: 75.0")
        path = write_year(rules_dir, "2030-31", text)
        with pytest.raises(TaxRulesValidationError, match="withholding falls"):
            load_config_file(path)

    def test_filename_must_match_year(self, rules_dir):
        path = rules_dir / "2030-31.yaml"
        path.write_text(BUNDLED_2024.read_text())
        with pytest.raises(TaxRulesValidationError, match="does not match filename"):
            load_config_file(path)

    def test_unknown_field_rejected(self, rules_dir):
        text = BUNDLED_2024.read_text() + "\nsurprise: 1\n"
        path = write_year(rules_dir, "2030-31", text)
        with pytest.raises(TaxRulesValidationError):
            load_config_file(path)


class TestBrackets:
    """Tests for bracket lookup helpers."""

    def test_bracket_info(self, config):
        info = get_bracket_info(100000, config)
        assert info.index == 2
        assert info.bracket.base_amount == 4288
        assert info.income_within_bracket == 55000

    def test_bracket_boundary_inclusive(self, config):
        assert get_bracket_info(45000, config).index == 1
        assert get_bracket_info(45001, config).index == 2

    def test_marginal_rate_is_decimal(self, config):
        assert get_marginal_rate(200000, config) == pytest.approx(0.45)
        assert get_marginal_rate(10000, config) == 0


class TestCapHistory:
    """Tests for historical concessional caps."""

    def test_known_cap(self):
        assert get_concessional_cap("2021-22") == 27500

    def test_unknown_cap(self):
        assert get_concessional_cap("2001-02") is None

    def test_unused_cap(self):
        assert unused_concessional_cap("2022-23", 20000) == 7500
        assert unused_concessional_cap("2022-23", 40000) == 0
        assert unused_concessional_cap("2001-02", 0) == 0


class TestRuleModels:
    """Tests for the rules models used directly."""

    def test_withdrawal_offset_is_abstract(self):
        with pytest.raises(TypeError):
            WithdrawalOffset(max_offset=700, withdrawal_rate=0.05, cutoff_threshold=51500)

    def test_lito_rules_build(self):
        rules = LitoRules(max_offset=700, full_threshold=37500, withdrawal_rate=0.05, cutoff_threshold=51500)
        assert rules.start_threshold == 37500

    def test_payg_band_withholding_floors_at_zero(self):
        band = PaygBand(weekly_earnings_min=0, weekly_earnings_max=361, a=0.16, b=57.8462)
        assert band.withholding(100) == 0
        assert band.withholding(400) == pytest.approx(6.1538)
