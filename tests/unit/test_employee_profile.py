"""Tests for building compensation profiles and period inputs from records."""

import pytest

from kepayroll.sdk.employee import (
    InvalidEmployeeError,
    InvalidPeriodInputsError,
    aggregate_insurance_premiums,
    build_compensation_profile,
    build_period_inputs,
    check_period_inputs,
    is_valid_kra_pin,
)
from kepayroll.sdk.schemas import ContractType, OvertimeType
from kepayroll.sdk.taxes import load_tax_rules


@pytest.fixture
def rules():
    return load_tax_rules("2025-03")


class TestBuildCompensationProfile:

    def test_camel_case_record(self):
        profile = build_compensation_profile({
            "id": 42,
            "name": "Otieno Ouma",
            "kraPin": "a123456789z",
            "basicSalary": 80000,
            "allowances": 20000,
            "contractType": "CONTRACT",
            "isDisabled": False,
            "location": "Mombasa",
            "departmentId": "ignored",
        })

        assert profile.employee_id == "42"
        assert profile.kra_pin == "A123456789Z"
        assert profile.basic_salary == 80000
        assert profile.contract_type == ContractType.CONTRACT
        assert profile.region == "Mombasa"

    def test_defaults_resolved(self):
        profile = build_compensation_profile({"employee_id": "E1", "basic_salary": 30000})

        assert profile.allowances == 0
        assert profile.contract_type == ContractType.PERMANENT
        assert profile.insurance_premiums is None
        assert profile.mortgage_interest is None
        assert not profile.is_disabled

    def test_missing_basic_salary(self):
        with pytest.raises(InvalidEmployeeError, match="basic_salary") as exc_info:
            build_compensation_profile({"id": "E9"})
        assert exc_info.value.employee_id == "E9"

    def test_negative_salary(self):
        with pytest.raises(InvalidEmployeeError, match="basic_salary"):
            build_compensation_profile({"id": "E9", "basicSalary": -100})

    def test_unknown_contract_type(self):
        with pytest.raises(InvalidEmployeeError, match="contract_type"):
            build_compensation_profile({"id": "E9", "basicSalary": 30000, "contractType": "freelance"})

    def test_invalid_kra_pin(self):
        with pytest.raises(InvalidEmployeeError, match="KRA PIN"):
            build_compensation_profile({"id": "E9", "basicSalary": 30000, "kraPin": "P05123"})

    def test_not_a_mapping(self):
        with pytest.raises(InvalidEmployeeError):
            build_compensation_profile(["E9", 30000])

    def test_is_a_value_error(self):
        with pytest.raises(ValueError):
            build_compensation_profile({})

    def test_insurance_policies_aggregated(self):
        profile = build_compensation_profile({
            "id": "E1",
            "basicSalary": 100000,
            "insurancePremiums": [
                {"insuranceType": "LIFE", "monthlyPremium": 2000},
                {"insurance_type": "medical", "employee_share": 1000},
                {"type": "education", "monthly_premium": 500, "is_active": False},
            ],
        })

        premiums = profile.insurance_premiums
        assert premiums.life == 2000
        assert premiums.health == 1000
        assert premiums.education == 0

    def test_insurance_mapping(self):
        profile = build_compensation_profile({
            "id": "E1",
            "basicSalary": 100000,
            "insurance_premiums": {"lifeInsurance": 1500, "education": 800},
        })

        assert profile.insurance_premiums.life == 1500
        assert profile.insurance_premiums.education == 800


class TestMinimumWage:

    def test_below_regional_minimum(self, rules):
        with pytest.raises(InvalidEmployeeError, match="minimum wage"):
            build_compensation_profile({"id": "E1", "basicSalary": 12000, "region": "Nairobi"}, rules)

    def test_above_regional_minimum(self, rules):
        profile = build_compensation_profile({"id": "E1", "basicSalary": 12000, "region": "rural"}, rules)
        assert profile.basic_salary == 12000

    def test_unknown_region_uses_default_minimum(self, rules):
        with pytest.raises(InvalidEmployeeError, match="minimum wage of 15,201.00"):
            build_compensation_profile({"id": "E1", "basicSalary": 5000, "region": "atlantis"}, rules)

    def test_no_region_uses_default_minimum(self, rules):
        with pytest.raises(InvalidEmployeeError, match="minimum wage"):
            build_compensation_profile({"id": "E1", "basicSalary": 15000}, rules)

        profile = build_compensation_profile({"id": "E1", "basicSalary": 15201}, rules)
        assert profile.region is None

    def test_no_rules_no_check(self):
        profile = build_compensation_profile({"id": "E1", "basicSalary": 5000, "region": "nairobi"})
        assert profile.basic_salary == 5000


class TestKraPin:

    @pytest.mark.parametrize("pin,valid", [
        ("A123456789Z", True),
        ("p051234567q", True),
        ("A12345678Z", False),
        ("1234567890A", False),
        ("A123456789", False),
    ])
    def test_format(self, pin, valid):
        assert is_valid_kra_pin(pin) is valid


class TestInsuranceAggregation:

    def test_empty_is_none(self):
        assert aggregate_insurance_premiums([]) is None
        assert aggregate_insurance_premiums(None) is None

    def test_all_inactive_is_none(self):
        policies = [{"insurance_type": "life", "monthly_premium": 1000, "isActive": False}]
        assert aggregate_insurance_premiums(policies) is None

    def test_unknown_type_counts_as_health(self):
        premiums = aggregate_insurance_premiums([{"insurance_type": "dental", "monthly_premium": 700}])
        assert premiums.health == 700


class TestPeriodInputs:

    def test_none_is_empty_period(self):
        inputs = build_period_inputs(None)

        assert inputs.overtime_hours == 0
        assert inputs.unpaid_days == 0
        assert inputs.overtime_type == OvertimeType.WEEKDAY

    def test_camel_case(self):
        inputs = build_period_inputs({
            "overtimeHours": 12,
            "overtimeType": "Holiday",
            "unpaidDays": 2,
            "customDeductions": 1500,
            "bonuses": 3000,
        })

        assert inputs.overtime_hours == 12
        assert inputs.overtime_type == OvertimeType.HOLIDAY
        assert inputs.custom_deductions == 1500

    def test_out_of_range(self):
        with pytest.raises(InvalidPeriodInputsError, match="unpaid_days"):
            build_period_inputs({"unpaid_days": 40})
        with pytest.raises(InvalidPeriodInputsError):
            build_period_inputs({"overtime_hours": -1})


class TestCheckPeriodInputs:

    def test_no_warnings(self, rules):
        profile = build_compensation_profile({"id": "E1", "basicSalary": 50000})
        assert check_period_inputs(profile, build_period_inputs({"overtimeHours": 10}), rules) == []

    def test_warnings(self, rules):
        profile = build_compensation_profile({"id": "E1", "basicSalary": 22000})
        inputs = build_period_inputs({"overtimeHours": 70, "unpaidDays": 16, "customDeductions": 10000})

        warnings = check_period_inputs(profile, inputs, rules)

        assert any("Overtime hours exceed 60" in w for w in warnings)
        assert any("Unpaid days exceed 15" in w for w in warnings)
        assert any("exceed gross pay" in w for w in warnings)
