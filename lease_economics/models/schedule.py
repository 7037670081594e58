"""
Schedule models: rent configuration, monthly rent lines, monthly and annual
cash-flow lines, and amortization rows.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .normalized import NormalizedEscalationPeriod

PaymentTiming = Literal["advance", "arrears"]
Rounding = Literal["none", "cents"]
TermSource = Literal["expiration", "term_months", "none"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Rent configuration ---


class FixedPercentRule(_Frozen):
    type: Literal["fixed_percent"] = "fixed_percent"
    rate: float = 0.0


class FixedAmountRule(_Frozen):
    type: Literal["fixed_amount"] = "fixed_amount"
    amount: float = Field(default=0.0, description="Annual step in $/RSF/year")


class CustomRule(_Frozen):
    type: Literal["custom"] = "custom"
    periods: Optional[List[NormalizedEscalationPeriod]] = None


EscalationRule = Annotated[
    Union[FixedPercentRule, FixedAmountRule, CustomRule],
    Field(discriminator="type"),
]


class RentConfig(_Frozen):
    """Base rent as annual $/RSF or as a monthly dollar amount, plus escalation."""
    base_rent_psf: Optional[float] = Field(default=None, ge=0.0)
    base_rent_monthly: Optional[float] = Field(default=None, ge=0.0)
    escalation: Optional[EscalationRule] = None


class ScheduleOptions(_Frozen):
    payment_timing: PaymentTiming = "advance"
    rounding: Rounding = "none"


# --- Monthly rent schedule ---


class MonthlyRentLine(_Frozen):
    period_index: int = Field(ge=0)
    start_date: date
    end_date: date
    payment_date: date
    proration_factor: float = 1.0
    contractual_base_rent: float = 0.0
    free_rent_amount: float = Field(default=0.0, le=0.0)
    net_rent_due: float = 0.0
    abates_operating: bool = False
    effective_rent_running: float = 0.0


class ScheduleAssumptions(_Frozen):
    payment_timing: PaymentTiming = "advance"
    rounding: Rounding = "none"
    term_source: TermSource = "none"


class RentScheduleSummary(_Frozen):
    total_contract_rent: float = 0.0
    total_net_rent: float = 0.0
    free_rent_value: float = 0.0
    months: int = 0


class MonthlyRentSchedule(_Frozen):
    lines: List[MonthlyRentLine] = Field(default_factory=list)
    summary: RentScheduleSummary = Field(default_factory=RentScheduleSummary)
    assumptions: ScheduleAssumptions = Field(default_factory=ScheduleAssumptions)


# --- Cash flow ---


class _CashflowAmounts(_Frozen):
    base_rent: float = 0.0
    abatement_credit: float = 0.0
    operating: float = 0.0
    parking: float = 0.0
    other_recurring: float = 0.0
    ti_shortfall: float = 0.0
    transaction_costs: float = 0.0
    amortized_costs: float = 0.0
    subtotal: float = 0.0
    net_cash_flow: float = 0.0


class MonthlyLine(_CashflowAmounts):
    """One lease month of cash flow. Month 0 carries the one-time items."""
    month_index: int = Field(ge=0)
    start_date: date
    end_date: date
    payment_date: date


class AnnualLine(_CashflowAmounts):
    """One lease year. The last year may cover fewer than twelve months."""
    year: int = Field(ge=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    months: int = 12


# --- Amortization ---


class AmortizationRow(_Frozen):
    month: int = Field(ge=1)
    interest: float = 0.0
    principal: float = 0.0
    ending_balance: float = 0.0


class AmortizationSummary(_Frozen):
    principal: float = 0.0
    annual_rate: float = 0.0
    months: int = 0
    rows: List[AmortizationRow] = Field(default_factory=list)
