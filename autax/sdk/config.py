"""Tax year configuration registry.

Each financial year's rules live in a YAML file named after the year key
(``tax-rules/2024-25.yaml``). Adding a year is a data change only: drop a new
file in the directory and it is picked up on the next lookup.

Tax rules directory resolution:
1. AUTAX_TAX_RULES_PATH environment variable (files here override bundled ones)
2. tax-rules/ bundled with the package

Financial years run 1 July - 30 June. A date in July or later belongs to the
financial year starting that calendar year.
"""

import logging
import os
import re
import warnings
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import NamedTuple, Optional

import yaml
from pydantic import ValidationError

from .schemas import BracketInfo
from .rules import TaxBracket, TaxYearConfig

logger = logging.getLogger(__name__)

TAX_RULES_ENV_VAR = "AUTAX_TAX_RULES_PATH"
CAP_HISTORY_FILENAME = "cap-history.yaml"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s: %(message)s"

_YEAR_KEY = re.compile(r"^(\d{4})-(\d{2})$")


class ConfigNotFoundError(LookupError):
    """Raised by load_config when no rules file exists for a year."""
    pass


class ConfigNotFoundWarning(UserWarning):
    """Issued when an unknown year falls back to the latest known rules."""
    pass


class TaxRulesValidationError(ValueError):
    """Raised when a tax-rules file is malformed or breaks a table invariant."""
    pass


class ConfigLookup(NamedTuple):
    config: TaxYearConfig
    warning: Optional[str] = None


def configure_logging(default_level: str = "WARNING") -> None:
    """Configure root logging from the LOG_LEVEL environment variable."""
    level_name = os.environ.get("LOG_LEVEL", default_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.WARNING),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


# =============================================================================
# Financial year keys
# =============================================================================


def parse_financial_year(financial_year: str) -> tuple[int, int]:
    """Split a 'YYYY-YY' key into (start_year, end_year).

    Raises:
        ValueError: If the key is not in 'YYYY-YY' form or the years are not consecutive
    """
    match = _YEAR_KEY.match(financial_year or "")
    if not match:
        raise ValueError(f"Invalid financial year '{financial_year}'. Expected format YYYY-YY (e.g. 2024-25).")
    start = int(match.group(1))
    if (start + 1) % 100 != int(match.group(2)):
        raise ValueError(f"Invalid financial year '{financial_year}'. Years must be consecutive.")
    return start, start + 1


def format_financial_year(start_year: int) -> str:
    """Build the key for the financial year starting 1 July of start_year."""
    return f"{start_year}-{(start_year + 1) % 100:02d}"


def financial_year_for_date(as_of: date) -> str:
    """Return the financial year key a date falls in.

    Example: 2024-07-01 -> '2024-25', 2024-06-30 -> '2023-24'
    """
    start_year = as_of.year if as_of.month >= 7 else as_of.year - 1
    return format_financial_year(start_year)


def years_between(earlier: str, later: str) -> int:
    """Number of financial years from earlier to later (positive when earlier is older)."""
    return parse_financial_year(later)[0] - parse_financial_year(earlier)[0]


# =============================================================================
# Tax rules files
# =============================================================================


def _get_tax_rules_dirs() -> list[Path]:
    """Get tax rules directories, lowest precedence first."""
    dirs = [Path(__file__).parent.parent / "tax-rules"]
    override = os.environ.get(TAX_RULES_ENV_VAR)
    if override:
        dirs.append(Path(override).expanduser())
    return dirs


def _discover_rule_files() -> dict[str, Path]:
    """Map financial year key -> rules file, later directories overriding earlier."""
    files = {}
    for rules_dir in _get_tax_rules_dirs():
        if not rules_dir.is_dir():
            logger.warning(f"Tax rules directory not found: {rules_dir}")
            continue
        for path in rules_dir.glob("*.yaml"):
            if _YEAR_KEY.match(path.stem):
                files[path.stem] = path
    return files


def get_available_years() -> list[str]:
    """Get sorted list of financial years with rules files (ascending)."""
    return sorted(_discover_rule_files())


def _read_yaml(path: Path) -> dict:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise TaxRulesValidationError(f"{path.name}: invalid YAML: {e}") from e
    if not isinstance(data, dict):
        raise TaxRulesValidationError(f"{path.name}: expected a mapping at top level")
    return data


def load_config_file(path: Path) -> TaxYearConfig:
    """Load and validate one tax rules file.

    Raises:
        TaxRulesValidationError: If the file is malformed, fails validation,
            or its financial_year does not match the filename
    """
    data = _read_yaml(path)
    try:
        config = TaxYearConfig.model_validate(data)
    except ValidationError as e:
        raise TaxRulesValidationError(f"{path.name}: {e}") from e

    if config.financial_year != path.stem:
        raise TaxRulesValidationError(
            f"{path.name}: financial_year '{config.financial_year}' does not match filename"
        )
    logger.debug(f"Loaded tax rules {config.financial_year} from {path}")
    return config


@lru_cache(maxsize=None)
def load_config(financial_year: str) -> TaxYearConfig:
    """Load rules for an exact financial year.

    Raises:
        ConfigNotFoundError: If no rules file exists for the year
        TaxRulesValidationError: If the rules file is invalid
    """
    files = _discover_rule_files()
    if financial_year not in files:
        raise ConfigNotFoundError(f"No tax rules for financial year {financial_year}")
    return load_config_file(files[financial_year])


def clear_config_cache() -> None:
    """Forget loaded configs (after changing AUTAX_TAX_RULES_PATH)."""
    load_config.cache_clear()
    _load_cap_history.cache_clear()


def lookup_config(financial_year: str) -> ConfigLookup:
    """Get rules for a year, falling back to the latest known year.

    An unknown year never raises: the latest configuration is returned along
    with a warning string, and a ConfigNotFoundWarning is issued.
    """
    available = get_available_years()
    if financial_year in available:
        return ConfigLookup(load_config(financial_year))

    if not available:
        raise ConfigNotFoundError("No tax rules files found")

    latest = available[-1]
    message = f"No tax rules for financial year {financial_year}; using {latest}"
    logger.warning(message)
    warnings.warn(message, ConfigNotFoundWarning, stacklevel=3)
    return ConfigLookup(load_config(latest), message)


def get_config(financial_year: str) -> TaxYearConfig:
    """Get rules for a financial year key such as '2024-25'."""
    return lookup_config(financial_year).config


def get_current_config(as_of: Optional[date] = None) -> TaxYearConfig:
    """Get rules for the financial year containing as_of (default today)."""
    return get_config(financial_year_for_date(as_of or date.today()))


# =============================================================================
# Bracket lookup
# =============================================================================


def _bracket_index(taxable_income: float, config: TaxYearConfig) -> int:
    """Index of the first bracket whose max (unbounded for the last) covers income."""
    for i, bracket in enumerate(config.brackets):
        if bracket.max is None or taxable_income <= bracket.max:
            return i
    return len(config.brackets) - 1


def income_within_bracket(taxable_income: float, bracket: TaxBracket) -> float:
    """Dollars taxed at the bracket's rate; min is the first such dollar."""
    if bracket.min == 0:
        return max(0.0, taxable_income)
    return max(0.0, taxable_income - bracket.min + 1)


def get_bracket_info(taxable_income: float, config: TaxYearConfig) -> BracketInfo:
    """Find the bracket an income falls into."""
    index = _bracket_index(taxable_income, config)
    bracket = config.brackets[index]
    return BracketInfo(
        index=index,
        bracket=bracket,
        income_within_bracket=income_within_bracket(taxable_income, bracket),
    )


def get_marginal_rate(taxable_income: float, config: TaxYearConfig) -> float:
    """Marginal rate (decimal) for the bracket an income falls into."""
    return config.brackets[_bracket_index(taxable_income, config)].rate


# =============================================================================
# Historical contribution caps
# =============================================================================


@lru_cache(maxsize=1)
def _load_cap_history() -> dict:
    history = {"concessional": {}, "non_concessional": {}}
    for rules_dir in _get_tax_rules_dirs():
        path = rules_dir / CAP_HISTORY_FILENAME
        if not path.exists():
            continue
        data = _read_yaml(path)
        for kind in history:
            for year, cap in (data.get(kind) or {}).items():
                parse_financial_year(str(year))
                history[kind][str(year)] = float(cap)
    return history


def _get_cap(kind: str, financial_year: str) -> Optional[float]:
    cap = _load_cap_history()[kind].get(financial_year)
    if cap is not None:
        return cap
    if financial_year in get_available_years():
        return getattr(load_config(financial_year).superannuation, f"{kind}_cap")
    return None


def get_concessional_cap(financial_year: str) -> Optional[float]:
    """Concessional cap for a year, or None if the year is unknown."""
    return _get_cap("concessional", financial_year)


def get_non_concessional_cap(financial_year: str) -> Optional[float]:
    """Non-concessional cap for a year, or None if the year is unknown."""
    return _get_cap("non_concessional", financial_year)


def unused_concessional_cap(financial_year: str, contributed: float) -> float:
    """Unused concessional cap for a past year, for building carry-forward records.

    Unknown years yield 0 since no cap can be carried from them.
    """
    cap = get_concessional_cap(financial_year)
    if cap is None:
        logger.warning(f"No concessional cap on record for {financial_year}")
        return 0.0
    return max(0.0, cap - max(0.0, contributed))
