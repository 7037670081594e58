"""
Normalized bundle: the derived, explicit form of a deal that the schedule
builder consumes, plus the warnings raised while deriving it.
"""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .deal import AbatementScope


class NormalizedDates(BaseModel):
    model_config = ConfigDict(frozen=True)

    commencement: Optional[date] = None
    expiration: Optional[date] = None
    rent_start: Optional[date] = None
    term_months_total: Optional[int] = None
    term_years: Optional[int] = None
    term_months_remainder: Optional[int] = None
    include_abatement_in_term: bool = False
    abatement_months_total: int = 0


class NormalizedAbatementPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    period_start: date
    period_end: date
    free_rent_months: int = 0
    applies_to: AbatementScope = "base_only"


class NormalizedEscalationPeriod(BaseModel):
    model_config = ConfigDict(frozen=True)

    period_start: date
    period_end: date
    escalation_percentage: float = 0.0


class NormalizedBundle(BaseModel):
    """Everything the schedule builder needs, with defaults already resolved."""
    model_config = ConfigDict(frozen=True)

    dates: NormalizedDates = Field(default_factory=NormalizedDates)
    abatement: List[NormalizedAbatementPeriod] = Field(default_factory=list)
    rent_escalation_periods: List[NormalizedEscalationPeriod] = Field(default_factory=list)
    operating_escalation_periods: List[NormalizedEscalationPeriod] = Field(default_factory=list)


class NormalizationIssue(BaseModel):
    """A non-fatal problem found while normalizing. Collected, never raised."""
    model_config = ConfigDict(frozen=True)

    severity: Literal["warn"] = "warn"
    code: str
    message: str
    field: Optional[str] = None
