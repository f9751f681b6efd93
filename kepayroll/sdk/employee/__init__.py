"""employee - Boundary between employee records and the calculation engine.

Scope:
- CompensationProfile / PeriodInputs construction from loose records (profile.py)
- Insurance policy aggregation into relief categories (insurance.py)
- Minimum-wage and KRA PIN checks, input warnings

Constraints:
- The only place where field presence and defaults are resolved
- Raises InvalidEmployeeError / InvalidPeriodInputsError; calculators never see bad shapes

Usage:
    from kepayroll.sdk.employee import build_compensation_profile

    profile = build_compensation_profile({"id": "E001", "basicSalary": 50000, "allowances": 15000})
"""

from .profile import (
    build_compensation_profile,
    build_period_inputs,
    check_period_inputs,
    check_minimum_wage,
    is_valid_kra_pin,
    format_validation_error,
    InvalidEmployeeError,
    InvalidPeriodInputsError,
)
from .insurance import aggregate_insurance_premiums

__all__ = [
    "build_compensation_profile",
    "build_period_inputs",
    "check_period_inputs",
    "check_minimum_wage",
    "is_valid_kra_pin",
    "format_validation_error",
    "InvalidEmployeeError",
    "InvalidPeriodInputsError",
    "aggregate_insurance_premiums",
]
