"""Insurance policy aggregation for insurance relief.

Employee records carry a list of insurance policies. PAYE only needs the
monthly premium totals per relief category, so policies are folded into an
InsurancePremiums value here.
"""

from typing import Any, Dict, Iterable, Optional

from ..schemas import InsurancePremiums

# Policy type (lowercased) -> relief category. Anything else counts as health.
POLICY_CATEGORIES = {
    "life": "life",
    "life insurance": "life",
    "education": "education",
    "education policy": "education",
    "health": "health",
    "health insurance": "health",
    "medical": "health",
}


def _get(policy: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in policy and policy[key] is not None:
            return policy[key]
    return default


def policy_monthly_amount(policy: Dict[str, Any]) -> float:
    """Monthly premium for a policy, falling back to the employee's share."""
    amount = _get(policy, "monthly_premium", "monthlyPremium")
    if not amount:
        amount = _get(policy, "employee_share", "employeeShare", default=0)
    return float(amount or 0)


def is_active(policy: Dict[str, Any]) -> bool:
    return _get(policy, "is_active", "isActive", default=True) is not False


def aggregate_insurance_premiums(
    policies: Optional[Iterable[Dict[str, Any]]],
) -> Optional[InsurancePremiums]:
    """Sum active policies by relief category.

    Args:
        policies: Policy dicts with insurance_type, monthly_premium or
                  employee_share, and optional is_active (camelCase accepted)

    Returns:
        InsurancePremiums, or None when there are no active premiums
    """
    if not policies:
        return None

    totals = {"life": 0.0, "education": 0.0, "health": 0.0}
    for policy in policies:
        if not is_active(policy):
            continue
        kind = str(_get(policy, "insurance_type", "insuranceType", "type", default="")).strip().lower()
        category = POLICY_CATEGORIES.get(kind, "health")
        totals[category] += policy_monthly_amount(policy)

    if not any(totals.values()):
        return None

    return InsurancePremiums(**totals)
