"""taxes - Statutory deduction and PAYE logic.

Scope:
- Tax rules loading by effective date (rules.py, tax-rules/YYYY-MM-DD.yaml)
- NSSF, SHIF and Housing Levy contributions (contributions.py)
- PAYE bands, personal/insurance relief, disability exemption (withholding.py)

Constraints:
- Pure calculation - no employee lookup, no config files beyond tax rules
- Calculators clamp impossible values instead of raising
- Every monetary output is rounded to cents with round_cents()

Usage:
    from kepayroll.sdk.taxes import load_tax_rules, calc_paye, calc_nssf

    rules = load_tax_rules("2025-03")
    nssf = calc_nssf(65000, rules)
    paye = calc_paye(58337.50, rules)
"""

# Rules
from .schemas import TaxRules, TaxBand
from .rules import (
    load_tax_rules,
    load_latest_tax_rules,
    list_effective_dates,
    TaxRulesNotFoundError,
)

# PAYE
from .withholding import (
    round_cents,
    calc_paye,
    calc_gross_tax,
    calc_insurance_relief,
    calc_marginal_rate,
    apply_tax_bands,
)

# Contributions
from .contributions import calc_nssf, calc_shif, calc_housing_levy

__all__ = [
    # Rules
    "TaxRules",
    "TaxBand",
    "load_tax_rules",
    "load_latest_tax_rules",
    "list_effective_dates",
    "TaxRulesNotFoundError",
    # PAYE
    "round_cents",
    "calc_paye",
    "calc_gross_tax",
    "calc_insurance_relief",
    "calc_marginal_rate",
    "apply_tax_bands",
    # Contributions
    "calc_nssf",
    "calc_shif",
    "calc_housing_levy",
]
