"""Pydantic schemas for ke-payroll data validation.

Input schemas use extra='forbid' to reject unknown fields, ensuring typos in
roster or period files cause clear errors rather than silent ignoring.
Result schemas are frozen values: the engine builds them once per call and
never mutates them.
"""

from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ContractType(str, Enum):
    """Employment contract type. Informational only: all types share one calculation path."""

    PERMANENT = "permanent"
    CONTRACT = "contract"
    CASUAL = "casual"
    INTERN = "intern"


class OvertimeType(str, Enum):
    """Selects the overtime multiplier."""

    WEEKDAY = "weekday"
    HOLIDAY = "holiday"


# =============================================================================
# Inputs
# =============================================================================


class InsurancePremiums(BaseModel):
    """Monthly premiums that qualify for insurance relief."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    life: float = Field(default=0, ge=0, description="Life assurance premium")
    education: float = Field(
        default=0, ge=0,
        description="Education policy premium (maturity of at least 10 years)",
    )
    health: float = Field(default=0, ge=0, description="Health insurance premium")

    @property
    def total(self) -> float:
        return self.life + self.education + self.health


class CompensationProfile(BaseModel):
    """An employee's monthly compensation, as seen by the calculation engine.

    Build it with kepayroll.sdk.employee.build_compensation_profile() when
    starting from a loose record; that is the one place defaults are resolved.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_id: str = Field(..., min_length=1)
    name: Optional[str] = None
    kra_pin: Optional[str] = None
    basic_salary: float = Field(..., ge=0, description="Monthly basic salary")
    allowances: float = Field(default=0, ge=0, description="Monthly allowances")
    contract_type: ContractType = ContractType.PERMANENT
    insurance_premiums: Optional[InsurancePremiums] = None
    mortgage_interest: Optional[float] = Field(
        default=None, ge=0, description="Monthly owner-occupier mortgage interest"
    )
    is_disabled: bool = False
    region: Optional[str] = Field(default=None, description="Minimum-wage region key")


class PeriodInputs(BaseModel):
    """Variable inputs for one pay period."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    overtime_hours: float = Field(default=0, ge=0)
    overtime_type: OvertimeType = OvertimeType.WEEKDAY
    unpaid_days: int = Field(default=0, ge=0, le=31)
    custom_deductions: float = Field(default=0, ge=0, description="Non-statutory deductions")
    bonuses: float = Field(default=0, ge=0)


# =============================================================================
# Calculator results
# =============================================================================


class NssfTier(BaseModel):
    """Pensionable pay and contribution falling in one NSSF tier."""

    model_config = ConfigDict(frozen=True)

    tier: int
    name: str
    lower: float
    upper: float
    pensionable_amount: float
    employee_contribution: float
    employer_contribution: float


class NssfResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    pensionable_pay: float
    employee_contribution: float
    employer_contribution: float
    total_contribution: float
    tiers: List[NssfTier] = Field(default_factory=list)
    capped_at_maximum: bool = False


class ShifResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    gross_salary: float
    employee_contribution: float
    employer_contribution: float
    total_contribution: float
    is_minimum_applied: bool
    effective_rate: float = Field(..., description="Employee contribution as % of gross")


class HousingLevyResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    gross_pay: float
    employee_contribution: float
    employer_contribution: float
    total_contribution: float


class PayeBandLine(BaseModel):
    """Income taxed within one PAYE band."""

    model_config = ConfigDict(frozen=True)

    band: int
    lower: float
    upper: Optional[float] = Field(default=None, description="None for the top band")
    rate: float
    taxable_amount: float
    tax: float


class PayeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    taxable_income: float
    disability_exemption: float = 0
    gross_tax: float
    personal_relief: float
    insurance_relief: float
    paye: float
    effective_rate: float = Field(..., description="PAYE as % of taxable income")
    bands: List[PayeBandLine] = Field(default_factory=list)


class PeriodEarnings(BaseModel):
    """Overtime pay and unpaid-day deduction for a period."""

    model_config = ConfigDict(frozen=True)

    working_days: int
    daily_rate: float
    hourly_rate: float
    overtime_hours: float
    overtime_multiplier: float
    overtime_pay: float
    unpaid_days: int
    unpaid_deduction: float


# =============================================================================
# Payroll result
# =============================================================================


class Earnings(BaseModel):
    model_config = ConfigDict(frozen=True)

    basic_salary: float
    allowances: float
    overtime: float
    bonuses: float
    gross_pay: float


class Deductions(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Amounts withheld this period; calculated contributions are in Breakdown
    nssf: float
    shif: float
    housing_levy: float
    mortgage_interest_relief: float = 0
    total_allowable_deductions: float

    # Tax
    taxable_income: float
    gross_tax: float
    personal_relief: float
    insurance_relief: float
    disability_exemption: float = 0
    paye: float

    # Other
    custom_deductions: float = Field(..., description="Custom deductions actually withheld")
    unrecovered_deductions: float = Field(
        default=0, description="Deductions that could not be withheld from this period's pay"
    )
    total_statutory: float
    total_deductions: float


class EmployerContributions(BaseModel):
    model_config = ConfigDict(frozen=True)

    nssf: float
    shif: float
    housing_levy: float
    total: float


class Calculations(BaseModel):
    model_config = ConfigDict(frozen=True)

    working_days: int
    daily_rate: float
    hourly_rate: float
    unpaid_deduction: float
    effective_tax_rate: float


class Breakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    paye: PayeResult
    nssf: NssfResult
    shif: ShifResult
    housing_levy: HousingLevyResult
    period: PeriodEarnings


class CalculationResult(BaseModel):
    """Full payroll calculation for one employee and period. Internally coherent."""

    model_config = ConfigDict(frozen=True)

    employee_id: str
    name: Optional[str] = None
    kra_pin: Optional[str] = None
    as_of: Optional[date] = None
    rules_effective: date
    earnings: Earnings
    deductions: Deductions
    employer_contributions: EmployerContributions
    net_pay: float = Field(..., ge=0)
    calculations: Calculations
    breakdown: Breakdown

    @model_validator(mode="after")
    def check_coherence(self) -> "CalculationResult":
        """Validate internal consistency of amounts."""
        errors = []
        tolerance = 0.005

        d = self.deductions
        expected_total = d.nssf + d.shif + d.housing_levy + d.paye + d.custom_deductions
        if abs(d.total_deductions - expected_total) > tolerance:
            errors.append(
                f"total_deductions ({d.total_deductions:.2f}) != "
                f"nssf + shif + housing_levy + paye + custom ({expected_total:.2f})"
            )

        e = self.earnings
        expected_gross = (
            e.basic_salary + e.allowances + e.overtime + e.bonuses
            - self.calculations.unpaid_deduction
        )
        if abs(e.gross_pay - expected_gross) > tolerance:
            errors.append(
                f"gross_pay ({e.gross_pay:.2f}) != "
                f"basic + allowances + overtime + bonuses - unpaid ({expected_gross:.2f})"
            )

        expected_net = e.gross_pay - d.total_deductions
        if d.total_deductions - e.gross_pay > tolerance:
            errors.append(
                f"total_deductions ({d.total_deductions:.2f}) exceeds gross_pay ({e.gross_pay:.2f})"
            )
        if abs(self.net_pay - expected_net) > tolerance:
            errors.append(
                f"net_pay ({self.net_pay:.2f}) != gross - total_deductions ({expected_net:.2f})"
            )

        if errors:
            raise ValueError("; ".join(errors))

        return self


# =============================================================================
# Batch
# =============================================================================


class BatchFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    employee_id: Optional[str] = None
    reason: str


class BatchResult(BaseModel):
    """Outcome of a bulk payroll run: partial failures never abort the run."""

    model_config = ConfigDict(frozen=True)

    successful: List[CalculationResult] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)
