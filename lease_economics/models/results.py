"""
Result models returned by the analysis pipeline and the scenario engine.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .deal import DealDefinition
from .normalized import NormalizationIssue, NormalizedBundle
from .schedule import AmortizationSummary, AnnualLine, MonthlyLine, MonthlyRentSchedule


class LeaseMetrics(BaseModel):
    """Headline metrics for one analyzed deal."""
    model_config = ConfigDict(frozen=True)

    discount_rate: float = 0.08
    npv: float = 0.0
    npv_monthly: float = 0.0
    irr: float = 0.0
    payback_period: float = 0.0
    effective_rent_psf: float = 0.0
    blended_rate: float = 0.0
    free_rent_value: float = 0.0
    total_net_cash_flow: float = 0.0


class LandlordYield(BaseModel):
    """Investment view of a cash-flow stream. Rates are fractions (0.07 = 7%)."""
    model_config = ConfigDict(frozen=True)

    npv: float = 0.0
    irr: float = 0.0
    cash_on_cash_return: float = 0.0
    yield_on_cost: float = 0.0
    equity_multiple: float = 0.0
    payback_period: float = 0.0
    net_yield: float = 0.0


class ReconciliationRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    year: int
    primary_net_cash_flow: Optional[float] = None
    legacy_net_cash_flow: Optional[float] = None
    difference: float = 0.0
    within_tolerance: bool = True


class AnalysisResult(BaseModel):
    """Full output of analyze_deal for one deal."""
    model_config = ConfigDict(frozen=True)

    deal: DealDefinition
    bundle: NormalizedBundle
    issues: List[NormalizationIssue] = Field(default_factory=list)
    rent_schedule: MonthlyRentSchedule = Field(default_factory=MonthlyRentSchedule)
    amortization: AmortizationSummary = Field(default_factory=AmortizationSummary)
    monthly_lines: List[MonthlyLine] = Field(default_factory=list)
    annual_lines: List[AnnualLine] = Field(default_factory=list)
    legacy_annual_lines: List[AnnualLine] = Field(default_factory=list)
    reconciliation: List[ReconciliationRow] = Field(default_factory=list)
    term_years: float = 0.0
    metrics: LeaseMetrics = Field(default_factory=LeaseMetrics)


class ScenarioResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    result: AnalysisResult


class ScenarioDriver(BaseModel):
    model_config = ConfigDict(frozen=True)

    component: str
    base_value: float = 0.0
    variant_value: float = 0.0
    delta: float = 0.0


class ScenarioComparison(BaseModel):
    """Variant minus base. A positive delta means the variant costs more."""
    model_config = ConfigDict(frozen=True)

    base_name: str = ""
    variant_name: str = ""
    npv_delta: float = 0.0
    total_cash_flow_delta: float = 0.0
    top_drivers: List[ScenarioDriver] = Field(default_factory=list)
