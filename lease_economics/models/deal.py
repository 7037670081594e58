"""
Deal Definition: the raw input to the lease economics engine.

A deal is frozen once validated. Engine functions read it and build new
structures; nothing downstream writes back into a deal. Configuration
families that come in more than one shape (rent escalation, operating
escalation, abatement) are tagged variants selected by their type field.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator


class LeaseType(str, Enum):
    NNN = "NNN"
    FULL_SERVICE = "FS"


def _coerce_lease_type(value: Any) -> LeaseType:
    """Coerce casing and common spellings so nnn/full service/etc never fail validation."""
    if value is None:
        return LeaseType.NNN
    if isinstance(value, LeaseType):
        return value
    s = (str(value).strip() or "nnn").lower().replace("-", " ").replace("_", " ")
    if s in ("nnn", "triple net", "net"):
        return LeaseType.NNN
    if s in ("fs", "full service", "gross", "full service gross"):
        return LeaseType.FULL_SERVICE
    return LeaseType.NNN


AbatementScope = Literal["base_only", "base_plus_nnn"]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# --- Dates and term ---


class KeyDates(_Frozen):
    commencement: Optional[date] = None
    rent_start: Optional[date] = Field(default=None, description="Explicit rent start; derived when absent")
    expiration: Optional[date] = None
    early_access: Optional[date] = None


class LeaseTerm(_Frozen):
    years: int = Field(ge=0, default=0)
    months: int = Field(ge=0, default=0, description="Base months, not including abatement")
    include_abatement_in_term: bool = False


# --- Rent ---


class RentRow(_Frozen):
    """One row of the base rent schedule."""
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    rent_psf: float = Field(ge=0.0, default=0.0, description="Base rent $/RSF/year")
    escalation_percentage: Optional[float] = Field(default=None, description="Annual escalation (0.03 = 3%)")


class EscalationPeriod(_Frozen):
    period_start: date
    period_end: date
    escalation_percentage: float = 0.0


class FixedRentEscalation(_Frozen):
    escalation_type: Literal["fixed"] = "fixed"
    fixed_escalation_percentage: Optional[float] = None
    fixed_escalation_amount: Optional[float] = Field(
        default=None, description="Dollar step per RSF per year; requires escalation_mode='amount'"
    )
    escalation_mode: Optional[Literal["percent", "amount"]] = None


class CustomRentEscalation(_Frozen):
    escalation_type: Literal["custom"] = "custom"
    escalation_periods: List[EscalationPeriod] = Field(default_factory=list)


def _escalation_tag(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("escalation_type") or "fixed"
    return getattr(value, "escalation_type", None) or "fixed"


RentEscalation = Annotated[
    Union[
        Annotated[FixedRentEscalation, Tag("fixed")],
        Annotated[CustomRentEscalation, Tag("custom")],
    ],
    Discriminator(_escalation_tag),
]


# --- Operating expenses ---


class FixedOpExEscalation(_Frozen):
    escalation_type: Literal["fixed"] = "fixed"
    escalation_value: Optional[float] = Field(default=None, description="Annual growth, e.g. 0.03")
    escalation_cap: Optional[float] = None
    escalation_method: Literal["fixed", "cpi"] = "fixed"


class CustomOpExEscalation(_Frozen):
    escalation_type: Literal["custom"] = "custom"
    escalation_periods: List[EscalationPeriod] = Field(default_factory=list)
    escalation_cap: Optional[float] = None


OpExEscalation = Annotated[
    Union[
        Annotated[FixedOpExEscalation, Tag("fixed")],
        Annotated[CustomOpExEscalation, Tag("custom")],
    ],
    Discriminator(_escalation_tag),
]


class OperatingTerms(_Frozen):
    est_op_ex_psf: Optional[float] = Field(default=None, ge=0.0, description="Year-1 operating expenses $/RSF/year")
    escalation: OpExEscalation = Field(default_factory=FixedOpExEscalation)
    # FS only: bill a flat pass-through instead of increases over the base year
    use_manual_pass_through: bool = False
    manual_pass_through_psf: Optional[float] = Field(default=None, ge=0.0)


# --- Concessions ---


class AtCommencementAbatement(_Frozen):
    abatement_type: Literal["at_commencement"] = "at_commencement"
    free_rent_months: int = 0
    applies_to: AbatementScope = "base_only"


class AbatementPeriod(_Frozen):
    period_start: date
    period_end: date
    free_rent_months: int = 0
    applies_to: AbatementScope = "base_only"


class CustomAbatement(_Frozen):
    abatement_type: Literal["custom"] = "custom"
    periods: List[AbatementPeriod] = Field(default_factory=list)


def _abatement_tag(value: Any) -> str:
    if isinstance(value, dict):
        return value.get("abatement_type") or "at_commencement"
    return getattr(value, "abatement_type", None) or "at_commencement"


Abatement = Annotated[
    Union[
        Annotated[AtCommencementAbatement, Tag("at_commencement")],
        Annotated[CustomAbatement, Tag("custom")],
    ],
    Discriminator(_abatement_tag),
]


class Concessions(_Frozen):
    ti_allowance_psf: Optional[float] = Field(default=None, ge=0.0)
    ti_actual_build_cost_psf: Optional[float] = Field(default=None, ge=0.0)
    moving_allowance: float = Field(ge=0.0, default=0.0)
    other_credits: float = Field(ge=0.0, default=0.0)
    abatement: Abatement = Field(default_factory=AtCommencementAbatement)


# --- Parking, transaction costs, financing ---


class ParkingTerms(_Frozen):
    monthly_rate_per_stall: float = Field(ge=0.0, default=0.0)
    stalls: int = Field(ge=0, default=0)
    escalation_value: float = Field(ge=0.0, default=0.0, description="0.03 or 3 both mean 3%")


class TransactionCosts(_Frozen):
    legal_fees: float = Field(ge=0.0, default=0.0)
    brokerage_fees: float = Field(ge=0.0, default=0.0)
    due_diligence: float = Field(ge=0.0, default=0.0)
    environmental: float = Field(ge=0.0, default=0.0)
    other: float = Field(ge=0.0, default=0.0)
    total: Optional[float] = Field(default=None, ge=0.0)

    @property
    def resolved_total(self) -> float:
        if self.total is not None:
            return float(self.total)
        return self.legal_fees + self.brokerage_fees + self.due_diligence + self.environmental + self.other


class Financing(_Frozen):
    amortize_ti: bool = False
    amortize_free_rent: bool = False
    amortize_transaction_costs: bool = False
    amortization_method: Literal["straight_line", "present_value"] = "straight_line"
    interest_rate: Optional[float] = Field(default=None, ge=0.0)


class CashflowSettings(_Frozen):
    discount_rate: float = Field(ge=0.0, default=0.08)
    granularity: Literal["annual", "monthly"] = "annual"


# --- Main deal ---


class DealDefinition(_Frozen):
    """
    Immutable deal terms for one lease analysis.

    Optional sections left out of a payload mean "not part of this deal";
    the engine never fills them in on the deal itself.
    """

    id: str = ""
    name: str = ""
    tenant_name: str = ""
    market: str = ""
    notes: str = ""

    rsf: float = Field(ge=0.0, default=0.0, description="Rentable square feet")
    lease_type: LeaseType = LeaseType.NNN
    base_year: Optional[int] = Field(default=None, ge=1900)

    key_dates: KeyDates = Field(default_factory=KeyDates)
    lease_term: Optional[LeaseTerm] = None
    operating: OperatingTerms = Field(default_factory=OperatingTerms)
    rent_schedule: List[RentRow] = Field(default_factory=list)
    rent_escalation: Optional[RentEscalation] = None
    concessions: Concessions = Field(default_factory=Concessions)
    parking: Optional[ParkingTerms] = None
    transaction_costs: Optional[TransactionCosts] = None
    financing: Optional[Financing] = None
    cashflow_settings: CashflowSettings = Field(default_factory=CashflowSettings)

    @field_validator("lease_type", mode="before")
    @classmethod
    def coerce_lease_type(cls, v: Any) -> LeaseType:
        return _coerce_lease_type(v)
