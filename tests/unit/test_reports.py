"""Tests for payroll summaries, year-to-date totals and P10 returns."""

from datetime import date

import pytest
from pydantic import ValidationError

from kepayroll.sdk.payroll import calculate_payroll
from kepayroll.sdk.reports import build_p10_return, summarize_payroll, ytd_totals
from kepayroll.sdk.schemas import CompensationProfile, PeriodInputs


@pytest.fixture
def wanjiku():
    return CompensationProfile(
        employee_id="E001", name="Wanjiku Kamau", kra_pin="A123456789Z",
        basic_salary=50000, allowances=15000,
    )


@pytest.fixture
def otieno():
    return CompensationProfile(employee_id="E002", name="Otieno Ouma", basic_salary=20000)


@pytest.fixture
def march_results(wanjiku, otieno):
    return [
        calculate_payroll(wanjiku, as_of="2025-03"),
        calculate_payroll(otieno, PeriodInputs(custom_deductions=1000), as_of="2025-03"),
    ]


class TestSummarizePayroll:

    def test_empty_run(self):
        summary = summarize_payroll([])

        assert summary.employee_count == 0
        assert summary.total_gross_pay == 0
        assert summary.average_net_pay == 0
        assert summary.deductions.total == 0

    def test_totals(self, march_results):
        summary = summarize_payroll(march_results)

        assert summary.employee_count == 2
        assert summary.total_gross_pay == pytest.approx(85000.00)
        # 48,452.90 + (20,000 - 2,050 - 1,000)
        assert summary.total_net_pay == pytest.approx(65402.90)
        assert summary.average_gross_pay == pytest.approx(42500.00)
        assert summary.deductions.nssf == pytest.approx(5100.00)
        assert summary.deductions.custom == pytest.approx(1000.00)
        assert summary.total_deductions == pytest.approx(summary.total_gross_pay - summary.total_net_pay)

    def test_relief_totals(self, march_results):
        deductions = summarize_payroll(march_results).deductions

        # Otieno's relief is limited to his gross tax of 1,795
        assert deductions.personal_relief == pytest.approx(2400.00 + 1795.00)
        assert deductions.insurance_relief == 0
        assert deductions.total_allowable == pytest.approx(6662.50 + 2050.00)

    def test_employer_cost(self, march_results):
        summary = summarize_payroll(march_results)

        # Employer matches NSSF, SHIF and Housing Levy
        assert summary.employer_contributions.total == pytest.approx(6662.50 + 2050.00)
        assert summary.total_employment_cost == pytest.approx(85000.00 + 8712.50)


class TestYtdTotals:

    @pytest.fixture
    def quarter(self, wanjiku):
        return [calculate_payroll(wanjiku, as_of=f"2025-{m:02d}") for m in (1, 2, 3)]

    def test_sums_months(self, quarter):
        ytd = ytd_totals(quarter)

        assert ytd.months_covered == 3
        assert ytd.gross_pay == pytest.approx(195000.00)
        # January used the 2024-12-27 rules (NSSF 2,160)
        assert ytd.nssf == pytest.approx(2160.00 + 3900.00 + 3900.00)
        assert ytd.paye == pytest.approx(sum(r.deductions.paye for r in quarter))

    def test_through_date(self, quarter):
        ytd = ytd_totals(quarter, through=date(2025, 2, 28))

        assert ytd.months_covered == 2
        assert ytd.gross_pay == pytest.approx(130000.00)

    def test_other_year(self, quarter):
        assert ytd_totals(quarter, year=2024).months_covered == 0

    def test_undated_results(self, wanjiku):
        rules_result = calculate_payroll(wanjiku, as_of="2025-03")
        undated = rules_result.model_copy(update={"as_of": None})

        assert ytd_totals([undated, undated]).months_covered == 2
        assert ytd_totals([undated], year=2025).months_covered == 0


class TestP10Return:

    def test_rows_and_totals(self, march_results):
        p10 = build_p10_return(march_results, "Acme Ltd", "p051234567q", "2025-03")

        assert p10.employer_pin == "P051234567Q"
        assert [row.employee_id for row in p10.rows] == ["E001", "E002"]
        assert p10.rows[0].paye == pytest.approx(9884.60)
        assert p10.rows[1].other_deductions == pytest.approx(1000.00)
        assert p10.totals.gross_pay == pytest.approx(85000.00)
        assert p10.totals.paye == pytest.approx(9884.60)
        assert p10.employer_contributions.housing_levy == pytest.approx(975.00 + 300.00)

    def test_missing_employee_pins_reported(self, march_results):
        p10 = build_p10_return(march_results, "Acme Ltd", "P051234567Q", "2025-03")
        assert p10.missing_kra_pins == ["E002"]

    def test_period_normalized(self, march_results):
        assert build_p10_return(march_results, "Acme Ltd", "P051234567Q", "2025-3").period == "2025-03"

    def test_invalid_period(self, march_results):
        with pytest.raises(ValidationError):
            build_p10_return(march_results, "Acme Ltd", "P051234567Q", "2025-13")

    def test_invalid_employer_pin(self, march_results):
        with pytest.raises(ValueError, match="employer KRA PIN"):
            build_p10_return(march_results, "Acme Ltd", "", "2025-03")

    def test_empty_period(self):
        p10 = build_p10_return([], "Acme Ltd", "P051234567Q", "2025-03")

        assert p10.rows == []
        assert p10.totals.gross_pay == 0
