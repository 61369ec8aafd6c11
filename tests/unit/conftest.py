"""Shared fixtures for unit tests."""

import pytest

from autax.sdk.config import TAX_RULES_ENV_VAR, clear_config_cache, get_config


@pytest.fixture
def config():
    """2024-25 rules, the year most worked examples use."""
    return get_config("2024-25")


@pytest.fixture
def rules_dir(tmp_path, monkeypatch):
    """Empty override directory registered via AUTAX_TAX_RULES_PATH."""
    monkeypatch.setenv(TAX_RULES_ENV_VAR, str(tmp_path))
    clear_config_cache()
    yield tmp_path
    monkeypatch.delenv(TAX_RULES_ENV_VAR, raising=False)
    clear_config_cache()
