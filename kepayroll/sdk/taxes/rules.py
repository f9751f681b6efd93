"""Tax rules loading.

Rules live in tax-rules/YYYY-MM-DD.yaml, one file per effective date. A rule
set applies from its effective date until the next file takes over, so a law
change means adding a file rather than editing code.
"""

import logging
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Union

import yaml

from .schemas import TaxRules

logger = logging.getLogger(__name__)


class TaxRulesNotFoundError(Exception):
    """Raised when no tax rules are effective on the requested date."""
    pass


def _get_tax_rules_dir() -> Path:
    """Get the tax-rules directory path."""
    package_root = Path(__file__).parent.parent.parent  # taxes -> sdk -> kepayroll
    return package_root / "tax-rules"


def _parse_effective(stem: str) -> Optional[date]:
    try:
        return datetime.strptime(stem, "%Y-%m-%d").date()
    except ValueError:
        return None


def list_effective_dates(rules_dir: Optional[Path] = None) -> List[date]:
    """Get sorted list of available rule effective dates (descending)."""
    rules_dir = rules_dir or _get_tax_rules_dir()
    dates = [_parse_effective(p.stem) for p in rules_dir.glob("*.yaml")]
    return sorted((d for d in dates if d is not None), reverse=True)


def parse_period_date(as_of: Union[date, str]) -> date:
    if isinstance(as_of, datetime):
        return as_of.date()
    if isinstance(as_of, date):
        return as_of
    text = str(as_of).strip()
    # Accept a pay period (YYYY-MM) as well as a full date
    if len(text) == 7:
        text = f"{text}-01"
    return datetime.strptime(text, "%Y-%m-%d").date()


@lru_cache(maxsize=None)
def _load_rules_file(path: Path) -> TaxRules:
    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    rules = TaxRules.model_validate(raw)
    expected = _parse_effective(path.stem)
    if expected is not None and rules.effective != expected:
        raise ValueError(
            f"{path.name}: 'effective' is {rules.effective.isoformat()}, "
            f"but the file name says {expected.isoformat()}"
        )
    return rules


def load_tax_rules(as_of: Union[date, str], rules_dir: Optional[Path] = None) -> TaxRules:
    """Load the rule set effective on a date.

    Picks the newest tax-rules/*.yaml whose effective date is on or before
    as_of.

    Args:
        as_of: Date (or 'YYYY-MM-DD' / 'YYYY-MM' string) of the pay period
        rules_dir: Optional alternate rules directory (tests)

    Returns:
        Validated TaxRules

    Raises:
        TaxRulesNotFoundError: If no rule set is effective on as_of
    """
    rules_dir = rules_dir or _get_tax_rules_dir()
    target = parse_period_date(as_of)

    for effective in list_effective_dates(rules_dir):
        if effective <= target:
            path = rules_dir / f"{effective.isoformat()}.yaml"
            logger.debug(f"tax rules for {target.isoformat()}: {path.name}")
            return _load_rules_file(path)

    raise TaxRulesNotFoundError(
        f"No tax rules effective on {target.isoformat()} in {rules_dir}"
    )


def load_latest_tax_rules(rules_dir: Optional[Path] = None) -> TaxRules:
    """Load the most recent rule set regardless of date."""
    rules_dir = rules_dir or _get_tax_rules_dir()
    dates = list_effective_dates(rules_dir)
    if not dates:
        raise TaxRulesNotFoundError(f"No tax rules found in {rules_dir}")
    return _load_rules_file(rules_dir / f"{dates[0].isoformat()}.yaml")
