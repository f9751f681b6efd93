"""ke-payroll SDK - Payroll calculation, statutory deductions and reporting."""

from .config import (
    get_config_dir,
    get_settings_path,
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_roster_path,
    load_roster,
    load_period_inputs,
    roster_entries,
    ConfigNotFoundError,
    RosterNotFoundError,
)

from .schemas import (
    ContractType,
    OvertimeType,
    InsurancePremiums,
    CompensationProfile,
    PeriodInputs,
    CalculationResult,
    BatchFailure,
    BatchResult,
)

from .taxes import (
    TaxRules,
    load_tax_rules,
    load_latest_tax_rules,
    list_effective_dates,
    TaxRulesNotFoundError,
    round_cents,
    calc_paye,
    calc_nssf,
    calc_shif,
    calc_housing_levy,
)

from .earnings import calc_period_earnings

from .employee import (
    build_compensation_profile,
    build_period_inputs,
    check_period_inputs,
    aggregate_insurance_premiums,
    is_valid_kra_pin,
    InvalidEmployeeError,
    InvalidPeriodInputsError,
)

from .payroll import calculate_payroll, run_batch, resolve_rules

from .reports import (
    summarize_payroll,
    ytd_totals,
    build_p10_return,
    PayrollSummary,
    YtdTotals,
    P10Return,
)

__all__ = [
    # Config
    "get_config_dir",
    "get_settings_path",
    "load_settings",
    "save_settings",
    "get_setting",
    "set_setting",
    "get_roster_path",
    "load_roster",
    "load_period_inputs",
    "roster_entries",
    "ConfigNotFoundError",
    "RosterNotFoundError",
    # Schemas
    "ContractType",
    "OvertimeType",
    "InsurancePremiums",
    "CompensationProfile",
    "PeriodInputs",
    "CalculationResult",
    "BatchFailure",
    "BatchResult",
    # Tax rules and calculators
    "TaxRules",
    "load_tax_rules",
    "load_latest_tax_rules",
    "list_effective_dates",
    "TaxRulesNotFoundError",
    "round_cents",
    "calc_paye",
    "calc_nssf",
    "calc_shif",
    "calc_housing_levy",
    "calc_period_earnings",
    # Employee boundary
    "build_compensation_profile",
    "build_period_inputs",
    "check_period_inputs",
    "aggregate_insurance_premiums",
    "is_valid_kra_pin",
    "InvalidEmployeeError",
    "InvalidPeriodInputsError",
    # Payroll
    "calculate_payroll",
    "run_batch",
    "resolve_rules",
    # Reports
    "summarize_payroll",
    "ytd_totals",
    "build_p10_return",
    "PayrollSummary",
    "YtdTotals",
    "P10Return",
]
