"""Tests for the payroll orchestrator.

Reference case: basic 50,000 + allowances 15,000 in March 2025.

    NSSF          480 + 3,420          = 3,900.00
    SHIF          65,000 * 2.75%       = 1,787.50
    Housing Levy  65,000 * 1.5%        =   975.00
    Taxable       65,000 - 6,662.50    = 58,337.50
    Tax charged   2,400 + 2,083.25 + 7,801.35 = 12,284.60
    PAYE          12,284.60 - 2,400    = 9,884.60
    Net pay       65,000 - 16,547.10   = 48,452.90
"""

import pytest

from kepayroll.sdk.payroll import calculate_payroll
from kepayroll.sdk.schemas import CompensationProfile, InsurancePremiums, OvertimeType, PeriodInputs
from kepayroll.sdk.taxes import load_tax_rules, round_cents


@pytest.fixture
def rules():
    return load_tax_rules("2025-03")


@pytest.fixture
def profile():
    return CompensationProfile(
        employee_id="E001",
        name="Wanjiku Kamau",
        kra_pin="A123456789Z",
        basic_salary=50000,
        allowances=15000,
    )


class TestReferenceCase:

    def test_earnings(self, profile, rules):
        result = calculate_payroll(profile, rules=rules, as_of="2025-03")

        assert result.earnings.gross_pay == pytest.approx(65000.00)
        assert result.as_of.isoformat() == "2025-03-01"
        assert result.rules_effective.isoformat() == "2025-02-01"

    def test_deductions(self, profile, rules):
        d = calculate_payroll(profile, rules=rules).deductions

        assert d.nssf == pytest.approx(3900.00)
        assert d.shif == pytest.approx(1787.50)
        assert d.housing_levy == pytest.approx(975.00)
        assert d.total_allowable_deductions == pytest.approx(6662.50)
        assert d.taxable_income == pytest.approx(58337.50)
        assert d.gross_tax == pytest.approx(12284.60)
        assert d.personal_relief == pytest.approx(2400.00)
        assert d.paye == pytest.approx(9884.60)
        assert d.total_deductions == pytest.approx(16547.10)
        assert d.unrecovered_deductions == 0

    def test_net_pay_and_employer_share(self, profile, rules):
        result = calculate_payroll(profile, rules=rules)

        assert result.net_pay == pytest.approx(48452.90)
        assert result.employer_contributions.nssf == pytest.approx(3900.00)
        assert result.employer_contributions.total == pytest.approx(6662.50)

    def test_rules_loaded_from_as_of(self, profile):
        result = calculate_payroll(profile, as_of="2025-03-15")
        assert result.net_pay == pytest.approx(48452.90)

    def test_requires_rules_or_date(self, profile):
        with pytest.raises(ValueError, match="as_of"):
            calculate_payroll(profile)


class TestInvariants:

    def test_identical_inputs_identical_output(self, profile, rules):
        inputs = PeriodInputs(overtime_hours=7.5, bonuses=2500, custom_deductions=1200)

        first = calculate_payroll(profile, inputs, rules=rules, as_of="2025-03")
        second = calculate_payroll(profile, inputs, rules=rules, as_of="2025-03")

        assert first.model_dump_json() == second.model_dump_json()

    @pytest.mark.parametrize("basic,allowances,custom", [
        (15000, 0, 0),
        (50000, 15000, 3000),
        (120000, 30000, 10000),
        (900000, 100000, 0),
    ])
    def test_net_plus_deductions_equals_gross(self, rules, basic, allowances, custom):
        profile = CompensationProfile(employee_id="X", basic_salary=basic, allowances=allowances)
        result = calculate_payroll(profile, PeriodInputs(custom_deductions=custom), rules=rules)

        total = result.net_pay + result.deductions.total_deductions
        assert round_cents(total) == result.earnings.gross_pay

    def test_zero_gross(self, rules):
        profile = CompensationProfile(employee_id="X", basic_salary=0)
        result = calculate_payroll(profile, rules=rules)

        assert result.earnings.gross_pay == 0
        assert result.deductions.total_deductions == 0
        assert result.net_pay == 0


class TestPeriodInputs:

    def test_overtime_and_bonus_add_to_gross(self, rules):
        profile = CompensationProfile(employee_id="X", basic_salary=44000)
        inputs = PeriodInputs(overtime_hours=10, overtime_type=OvertimeType.HOLIDAY, bonuses=1000)

        result = calculate_payroll(profile, inputs, rules=rules)

        assert result.earnings.overtime == pytest.approx(5000.00)
        assert result.earnings.bonuses == pytest.approx(1000.00)
        assert result.earnings.gross_pay == pytest.approx(50000.00)

    def test_unpaid_days_reduce_gross(self, rules):
        profile = CompensationProfile(employee_id="X", basic_salary=44000, allowances=6000)
        result = calculate_payroll(profile, PeriodInputs(unpaid_days=2), rules=rules)

        assert result.calculations.unpaid_deduction == pytest.approx(4000.00)
        assert result.earnings.gross_pay == pytest.approx(46000.00)


class TestNetPayFloor:

    def test_custom_deductions_limited_to_available_pay(self, rules):
        # Statutory: NSSF 1,200 + SHIF 550 + Housing Levy 300, PAYE 0
        profile = CompensationProfile(employee_id="X", basic_salary=20000)
        result = calculate_payroll(profile, PeriodInputs(custom_deductions=25000), rules=rules)

        d = result.deductions
        assert d.total_statutory == pytest.approx(2050.00)
        assert d.custom_deductions == pytest.approx(17950.00)
        assert d.unrecovered_deductions == pytest.approx(7050.00)
        assert d.total_deductions == pytest.approx(20000.00)
        assert result.net_pay == 0

    def test_statutory_exceeding_gross(self, rules):
        # Minimum-wage basic wiped out by 31 unpaid days leaves gross 100,
        # against NSSF 6 + SHIF floor 300 + Housing Levy 1.50
        profile = CompensationProfile(employee_id="X", basic_salary=15201, allowances=100)
        result = calculate_payroll(profile, PeriodInputs(unpaid_days=31, custom_deductions=500), rules=rules)

        d = result.deductions
        assert result.earnings.gross_pay == pytest.approx(100.00)
        assert result.breakdown.shif.employee_contribution == pytest.approx(300.00)
        assert d.nssf == pytest.approx(6.00)
        assert d.shif == pytest.approx(94.00)
        assert d.housing_levy == 0
        assert d.custom_deductions == 0
        assert d.total_statutory == pytest.approx(100.00)
        assert d.total_deductions == pytest.approx(100.00)
        assert d.unrecovered_deductions == pytest.approx(707.50)
        assert result.net_pay == 0
        assert round_cents(result.net_pay + d.total_deductions) == result.earnings.gross_pay


class TestReliefs:

    def test_insurance_premiums(self, profile, rules):
        insured = profile.model_copy(update={"insurance_premiums": InsurancePremiums(life=10000)})
        result = calculate_payroll(insured, rules=rules)

        assert result.deductions.insurance_relief == pytest.approx(1500.00)
        assert result.deductions.paye == pytest.approx(8384.60)

    def test_mortgage_interest_capped(self, profile, rules):
        with_mortgage = profile.model_copy(update={"mortgage_interest": 30000})
        result = calculate_payroll(with_mortgage, rules=rules)

        assert result.deductions.mortgage_interest_relief == pytest.approx(25000.00)
        assert result.deductions.taxable_income == pytest.approx(33337.50)
        assert result.deductions.paye == pytest.approx(2384.60)

    def test_disabled_employee(self, profile, rules):
        disabled = profile.model_copy(update={"is_disabled": True})
        result = calculate_payroll(disabled, rules=rules)

        assert result.deductions.disability_exemption == pytest.approx(58337.50)
        assert result.deductions.paye == 0
        assert result.net_pay == pytest.approx(58337.50)


class TestRuleChanges:
    """Same salary under each shipped rule set."""

    def test_before_shif_and_levy_became_allowable(self, profile):
        result = calculate_payroll(profile, as_of="2024-11")
        d = result.deductions

        assert result.rules_effective.isoformat() == "2024-10-01"
        assert d.nssf == pytest.approx(2160.00)
        assert d.total_allowable_deductions == pytest.approx(2160.00)
        assert d.taxable_income == pytest.approx(62840.00)
        assert d.paye == pytest.approx(11235.35)
        assert result.net_pay == pytest.approx(48842.15)

    def test_tax_laws_amendment(self, profile):
        result = calculate_payroll(profile, as_of="2025-01")
        d = result.deductions

        assert result.rules_effective.isoformat() == "2024-12-27"
        assert d.taxable_income == pytest.approx(60077.50)
        assert d.paye == pytest.approx(10406.60)

    def test_nssf_phase_three(self, profile):
        result = calculate_payroll(profile, as_of="2025-02")
        assert result.deductions.nssf == pytest.approx(3900.00)
