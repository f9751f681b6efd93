"""Pydantic schemas for tax rules validation.

These schemas validate the tax-rules/*.yaml files and provide typed access
to statutory parameters like PAYE bands, NSSF earnings limits, SHIF floor
and reliefs.
"""

from datetime import date
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


AllowableDeduction = Literal["nssf", "shif", "housing_levy"]


class TaxBand(BaseModel):
    """Single PAYE band entry."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    up_to: Optional[float] = Field(default=None, gt=0, description="Upper bound (None if 'over' band)")
    over: Optional[float] = Field(default=None, ge=0, description="Lower bound for top band")
    rate: float = Field(..., ge=0, le=1, description="Tax rate as decimal")

    @model_validator(mode="after")
    def check_bound(self) -> "TaxBand":
        if (self.up_to is None) == (self.over is None):
            raise ValueError("band needs exactly one of 'up_to' or 'over'")
        return self


class PayeRules(BaseModel):
    """Progressive PAYE bands and the contributions deductible before them."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    bands: List[TaxBand] = Field(..., min_length=1)
    allowable_deductions: List[AllowableDeduction] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_bands(self) -> "PayeRules":
        bounded = [b.up_to for b in self.bands if b.up_to is not None]
        if bounded != sorted(bounded) or len(set(bounded)) != len(bounded):
            raise ValueError("PAYE 'up_to' bounds must be strictly increasing")
        tops = [b for b in self.bands if b.over is not None]
        if len(tops) > 1:
            raise ValueError("only one 'over' band is allowed")
        if tops and self.bands[-1].over is None:
            raise ValueError("the 'over' band must come last")
        if tops and bounded and tops[0].over != bounded[-1]:
            raise ValueError("the 'over' band must start where the last 'up_to' band ends")
        return self


class ReliefRules(BaseModel):
    """Monthly tax reliefs and exemptions."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    personal_relief: float = Field(..., ge=0)
    insurance_relief_rate: float = Field(..., ge=0, le=1)
    insurance_relief_cap: float = Field(..., ge=0)
    mortgage_interest_cap: float = Field(default=0, ge=0)
    disability_exemption: float = Field(default=0, ge=0)


class NssfRules(BaseModel):
    """Two-tier NSSF contribution rules."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_rate: float = Field(..., ge=0, le=1)
    employer_rate: float = Field(..., ge=0, le=1)
    lower_earnings_limit: float = Field(..., gt=0, description="Tier I ceiling (LEL)")
    upper_earnings_limit: float = Field(..., gt=0, description="Tier II ceiling (UEL)")
    pensionable_base: Literal["gross", "basic"] = "gross"

    @model_validator(mode="after")
    def check_limits(self) -> "NssfRules":
        if self.upper_earnings_limit < self.lower_earnings_limit:
            raise ValueError("upper_earnings_limit must be >= lower_earnings_limit")
        return self

    @property
    def max_employee_contribution(self) -> float:
        return self.upper_earnings_limit * self.employee_rate


class ShifRules(BaseModel):
    """SHIF flat-rate contribution with a floor and no ceiling."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_rate: float = Field(..., ge=0, le=1)
    employer_rate: float = Field(..., ge=0, le=1)
    minimum_contribution: float = Field(default=0, ge=0)


class HousingLevyRules(BaseModel):
    """Affordable Housing Levy rates."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    employee_rate: float = Field(..., ge=0, le=1)
    employer_rate: float = Field(..., ge=0, le=1)


class WorkingTimeRules(BaseModel):
    """Standard working time used to derive daily and hourly rates."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    days_per_month: int = Field(..., gt=0)
    hours_per_day: float = Field(..., gt=0)
    overtime_multipliers: Dict[Literal["weekday", "holiday"], float]

    @model_validator(mode="after")
    def check_multipliers(self) -> "WorkingTimeRules":
        missing = {"weekday", "holiday"} - set(self.overtime_multipliers)
        if missing:
            raise ValueError(f"missing overtime multipliers: {sorted(missing)}")
        return self


class TaxRules(BaseModel):
    """Complete statutory rules effective from a date."""
    model_config = ConfigDict(extra="ignore", frozen=True)  # Allow unknown fields for forward compat

    effective: date
    currency: str = "KES"
    paye: PayeRules
    reliefs: ReliefRules
    nssf: NssfRules
    shif: ShifRules
    housing_levy: HousingLevyRules
    working_time: WorkingTimeRules
    minimum_wages: Dict[str, float] = Field(default_factory=dict)

    def minimum_wage(self, region: Optional[str]) -> Optional[float]:
        """Minimum monthly wage for a region key.

        Missing or unlisted regions fall back to the 'default' entry; None
        when the rules carry no default.
        """
        if region:
            key = region.strip().lower().replace(" ", "_")
            if key in self.minimum_wages:
                return self.minimum_wages[key]
        return self.minimum_wages.get("default")
