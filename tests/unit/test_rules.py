"""Tests for tax rules loading and effective-date resolution."""

from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

import kepayroll
from kepayroll.sdk.taxes import (
    TaxRules,
    TaxRulesNotFoundError,
    list_effective_dates,
    load_latest_tax_rules,
    load_tax_rules,
)

SHIPPED_RULES_DIR = Path(kepayroll.__file__).parent / "tax-rules"


def write_rules(rules_dir: Path, effective: str, body: str = None) -> Path:
    """Write a rules file based on the latest shipped one, with a new effective date."""
    text = body or (SHIPPED_RULES_DIR / "2025-02-01.yaml").read_text()
    text = text.replace("effective: 2025-02-01", f"effective: {effective}")
    path = rules_dir / f"{effective}.yaml"
    path.write_text(text)
    return path


class TestShippedRules:

    def test_effective_dates_descending(self):
        dates = list_effective_dates()

        assert dates[:3] == [date(2025, 2, 1), date(2024, 12, 27), date(2024, 10, 1)]

    @pytest.mark.parametrize("as_of,expected", [
        ("2024-10-01", "2024-10-01"),
        ("2024-12-26", "2024-10-01"),
        ("2024-12-27", "2024-12-27"),
        ("2025-01", "2024-12-27"),
        ("2025-02", "2025-02-01"),
        (date(2026, 6, 30), "2025-02-01"),
    ])
    def test_newest_rules_on_or_before(self, as_of, expected):
        assert load_tax_rules(as_of).effective.isoformat() == expected

    def test_before_first_rules(self):
        with pytest.raises(TaxRulesNotFoundError):
            load_tax_rules("2024-09-30")

    def test_invalid_date(self):
        with pytest.raises(ValueError):
            load_tax_rules("March 2025")

    def test_latest(self):
        assert load_latest_tax_rules().effective == date(2025, 2, 1)

    def test_allowable_deductions_by_period(self):
        assert load_tax_rules("2024-11").paye.allowable_deductions == ["nssf"]
        assert load_tax_rules("2025-03").paye.allowable_deductions == ["nssf", "shif", "housing_levy"]

    def test_minimum_wage_lookup(self):
        rules = load_tax_rules("2025-03")

        assert rules.minimum_wage("Nairobi") == 15201
        assert rules.minimum_wage("other urban") == 13200
        assert rules.minimum_wage(None) == 15201
        assert rules.minimum_wage("atlantis") == 15201

    def test_rules_are_cached(self):
        assert load_tax_rules("2025-03") is load_tax_rules("2025-04")


class TestCustomRulesDir:

    def test_new_file_takes_over_from_its_date(self, tmp_path):
        write_rules(tmp_path, "2025-02-01")
        write_rules(tmp_path, "2026-07-01")

        assert load_tax_rules("2026-06", rules_dir=tmp_path).effective == date(2025, 2, 1)
        assert load_tax_rules("2026-07", rules_dir=tmp_path).effective == date(2026, 7, 1)

    def test_effective_must_match_file_name(self, tmp_path):
        text = (SHIPPED_RULES_DIR / "2025-02-01.yaml").read_text()
        (tmp_path / "2026-01-01.yaml").write_text(text)

        with pytest.raises(ValueError, match="file name"):
            load_tax_rules("2026-03", rules_dir=tmp_path)

    def test_bands_must_increase(self, tmp_path):
        text = (SHIPPED_RULES_DIR / "2025-02-01.yaml").read_text()
        text = text.replace("up_to: 32333", "up_to: 20000")
        write_rules(tmp_path, "2026-01-01", body=text.replace("effective: 2025-02-01", "effective: 2026-01-01"))

        with pytest.raises(ValidationError, match="strictly increasing"):
            load_tax_rules("2026-01", rules_dir=tmp_path)

    def test_empty_dir(self, tmp_path):
        with pytest.raises(TaxRulesNotFoundError):
            load_latest_tax_rules(rules_dir=tmp_path)

    def test_non_date_files_ignored(self, tmp_path):
        write_rules(tmp_path, "2025-02-01")
        (tmp_path / "README.yaml").write_text("notes: true\n")

        assert list_effective_dates(tmp_path) == [date(2025, 2, 1)]


class TestTaxRulesSchema:

    def test_band_needs_one_bound(self):
        data = load_tax_rules("2025-03").model_dump()
        data["paye"]["bands"][0] = {"up_to": 24000, "over": 0, "rate": 0.1}

        with pytest.raises(ValidationError, match="exactly one"):
            TaxRules.model_validate(data)

    def test_nssf_limits_ordered(self):
        data = load_tax_rules("2025-03").model_dump()
        data["nssf"]["upper_earnings_limit"] = 5000

        with pytest.raises(ValidationError, match="upper_earnings_limit"):
            TaxRules.model_validate(data)
