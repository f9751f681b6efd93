"""Compensation profile and period input construction.

Employee records arrive loosely shaped: roster YAML, JSON from an API, or an
ORM row turned into a dict, in snake_case or camelCase. This module is the
single place where those records are checked for required fields, defaults
are resolved, and the typed values the calculation engine accepts are built.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from ..schemas import CompensationProfile, InsurancePremiums, PeriodInputs
from ..taxes.schemas import TaxRules
from .insurance import aggregate_insurance_premiums

logger = logging.getLogger(__name__)

KRA_PIN_PATTERN = re.compile(r"^[A-Z][0-9]{9}[A-Z]$")

# Source key -> CompensationProfile field
PROFILE_KEYS = {
    "employee_id": "employee_id",
    "employeeId": "employee_id",
    "id": "employee_id",
    "name": "name",
    "kra_pin": "kra_pin",
    "kraPin": "kra_pin",
    "basic_salary": "basic_salary",
    "basicSalary": "basic_salary",
    "allowances": "allowances",
    "contract_type": "contract_type",
    "contractType": "contract_type",
    "insurance_premiums": "insurance_premiums",
    "insurancePremiums": "insurance_premiums",
    "mortgage_interest": "mortgage_interest",
    "mortgageInterest": "mortgage_interest",
    "is_disabled": "is_disabled",
    "isDisabled": "is_disabled",
    "region": "region",
    "location": "region",
}

PERIOD_KEYS = {
    "overtime_hours": "overtime_hours",
    "overtimeHours": "overtime_hours",
    "overtime_type": "overtime_type",
    "overtimeType": "overtime_type",
    "unpaid_days": "unpaid_days",
    "unpaidDays": "unpaid_days",
    "custom_deductions": "custom_deductions",
    "customDeductions": "custom_deductions",
    "bonuses": "bonuses",
}

# camelCase premium keys used by older records
PREMIUM_KEYS = {
    "lifeInsurance": "life",
    "educationPolicy": "education",
    "healthInsurance": "health",
}


class InvalidEmployeeError(ValueError):
    """Raised when an employee record cannot produce a valid profile."""

    def __init__(self, message: str, employee_id: Optional[str] = None):
        super().__init__(message)
        self.employee_id = employee_id


class InvalidPeriodInputsError(ValueError):
    """Raised when period inputs are out of range or malformed."""
    pass


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one readable line."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(x) for x in err.get("loc", ())) or "record"
        parts.append(f"{loc}: {err.get('msg')}")
    return "; ".join(parts)


def _pick(record: Dict[str, Any], keys: Dict[str, str]) -> Dict[str, Any]:
    picked = {}
    for source, target in keys.items():
        if source in record and record[source] is not None and target not in picked:
            picked[target] = record[source]
    ignored = sorted(k for k in record if k not in keys)
    if ignored:
        logger.debug(f"ignoring fields not used by the calculation: {', '.join(ignored)}")
    return picked


def _resolve_premiums(value: Any) -> Optional[InsurancePremiums]:
    if value is None or isinstance(value, InsurancePremiums):
        return value
    if isinstance(value, (list, tuple)):
        return aggregate_insurance_premiums(value)
    if isinstance(value, dict):
        premiums = {PREMIUM_KEYS.get(k, k): v for k, v in value.items() if v is not None}
        return InsurancePremiums(**premiums)
    raise TypeError(f"insurance_premiums must be a list of policies or a mapping, got {type(value).__name__}")


def is_valid_kra_pin(pin: str) -> bool:
    """Check KRA PIN format: letter, 9 digits, letter (e.g. A123456789Z)."""
    return bool(KRA_PIN_PATTERN.match(pin.strip().upper()))


def check_minimum_wage(profile: CompensationProfile, rules: TaxRules) -> None:
    """Raise InvalidEmployeeError if basic salary is below the region's minimum wage.

    Profiles without a region, or with a region the rules don't list, are
    checked against the rules' default minimum.
    """
    minimum = rules.minimum_wage(profile.region)
    if minimum is not None and profile.basic_salary < minimum:
        raise InvalidEmployeeError(
            f"basic_salary {profile.basic_salary:,.2f} is below the {profile.region or 'default'} "
            f"minimum wage of {minimum:,.2f}",
            employee_id=profile.employee_id,
        )


def build_compensation_profile(
    record: Union[CompensationProfile, Dict[str, Any]],
    rules: Optional[TaxRules] = None,
) -> CompensationProfile:
    """Build a validated CompensationProfile from an employee record.

    Args:
        record: CompensationProfile, or a dict in snake_case or camelCase.
                insurance premiums may be a list of policy dicts or a mapping
                of category -> monthly premium.
        rules: Optional tax rules; when given, the minimum wage for the
               profile's region (or the default minimum) is enforced.

    Returns:
        CompensationProfile with all defaults resolved

    Raises:
        InvalidEmployeeError: Missing/invalid fields or minimum-wage violation
    """
    if isinstance(record, CompensationProfile):
        profile = record
    else:
        if not isinstance(record, dict):
            raise InvalidEmployeeError(f"employee record must be a mapping, got {type(record).__name__}")

        data = _pick(record, PROFILE_KEYS)
        employee_id = data.get("employee_id")
        if employee_id is not None:
            data["employee_id"] = str(employee_id)

        if "basic_salary" not in data:
            raise InvalidEmployeeError("basic_salary is required", employee_id=data.get("employee_id"))

        contract_type = data.get("contract_type")
        if isinstance(contract_type, str):
            data["contract_type"] = contract_type.strip().lower()

        pin = data.get("kra_pin")
        if pin is not None:
            pin = str(pin).strip().upper()
            if not is_valid_kra_pin(pin):
                raise InvalidEmployeeError(
                    f"invalid KRA PIN '{pin}' (expected format A123456789Z)",
                    employee_id=data.get("employee_id"),
                )
            data["kra_pin"] = pin

        try:
            data["insurance_premiums"] = _resolve_premiums(data.get("insurance_premiums"))
            profile = CompensationProfile(**data)
        except ValidationError as e:
            raise InvalidEmployeeError(format_validation_error(e), employee_id=data.get("employee_id")) from e
        except (TypeError, ValueError) as e:
            raise InvalidEmployeeError(str(e), employee_id=data.get("employee_id")) from e

    if rules is not None:
        check_minimum_wage(profile, rules)

    return profile


def build_period_inputs(record: Union[PeriodInputs, Dict[str, Any], None] = None) -> PeriodInputs:
    """Build validated PeriodInputs; None means a period with no variable inputs.

    Raises:
        InvalidPeriodInputsError: Out-of-range or malformed values
    """
    if record is None:
        return PeriodInputs()
    if isinstance(record, PeriodInputs):
        return record
    if not isinstance(record, dict):
        raise InvalidPeriodInputsError(f"period inputs must be a mapping, got {type(record).__name__}")

    data = _pick(record, PERIOD_KEYS)
    overtime_type = data.get("overtime_type")
    if isinstance(overtime_type, str):
        data["overtime_type"] = overtime_type.strip().lower()

    try:
        return PeriodInputs(**data)
    except ValidationError as e:
        raise InvalidPeriodInputsError(format_validation_error(e)) from e


def check_period_inputs(
    profile: CompensationProfile,
    inputs: PeriodInputs,
    rules: TaxRules,
) -> List[str]:
    """Return warnings for inputs that are valid but worth a second look."""
    warnings = []

    gross_estimate = profile.basic_salary + profile.allowances + inputs.bonuses
    daily_rate = profile.basic_salary / rules.working_time.days_per_month
    deduction_estimate = inputs.custom_deductions + inputs.unpaid_days * daily_rate

    if deduction_estimate >= gross_estimate:
        warnings.append("Total deductions may exceed gross pay, resulting in zero net pay")
    if inputs.overtime_hours > 60:
        warnings.append("Overtime hours exceed 60 - please verify this is correct")
    if inputs.unpaid_days > 15:
        warnings.append("Unpaid days exceed 15 - please verify this is correct")
    if inputs.unpaid_days > rules.working_time.days_per_month:
        warnings.append(
            f"Unpaid days exceed the {rules.working_time.days_per_month} standard working days; "
            f"the unpaid deduction is capped at the basic salary"
        )

    return warnings
