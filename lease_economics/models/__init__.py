"""Pydantic models for deals, normalized bundles, schedules and results."""

from .deal import (
    AbatementPeriod,
    AtCommencementAbatement,
    CashflowSettings,
    Concessions,
    CustomAbatement,
    CustomOpExEscalation,
    CustomRentEscalation,
    DealDefinition,
    EscalationPeriod,
    Financing,
    FixedOpExEscalation,
    FixedRentEscalation,
    KeyDates,
    LeaseTerm,
    LeaseType,
    OperatingTerms,
    ParkingTerms,
    RentRow,
    TransactionCosts,
)
from .normalized import (
    NormalizationIssue,
    NormalizedAbatementPeriod,
    NormalizedBundle,
    NormalizedDates,
    NormalizedEscalationPeriod,
)
from .schedule import (
    AmortizationRow,
    AmortizationSummary,
    AnnualLine,
    CustomRule,
    FixedAmountRule,
    FixedPercentRule,
    MonthlyLine,
    MonthlyRentLine,
    MonthlyRentSchedule,
    RentConfig,
    RentScheduleSummary,
    ScheduleAssumptions,
    ScheduleOptions,
)
from .results import (
    AnalysisResult,
    LandlordYield,
    LeaseMetrics,
    ReconciliationRow,
    ScenarioComparison,
    ScenarioDriver,
    ScenarioResult,
)

__all__ = [
    "AbatementPeriod",
    "AtCommencementAbatement",
    "CashflowSettings",
    "Concessions",
    "CustomAbatement",
    "CustomOpExEscalation",
    "CustomRentEscalation",
    "DealDefinition",
    "EscalationPeriod",
    "Financing",
    "FixedOpExEscalation",
    "FixedRentEscalation",
    "KeyDates",
    "LeaseTerm",
    "LeaseType",
    "OperatingTerms",
    "ParkingTerms",
    "RentRow",
    "TransactionCosts",
    "NormalizationIssue",
    "NormalizedAbatementPeriod",
    "NormalizedBundle",
    "NormalizedDates",
    "NormalizedEscalationPeriod",
    "AmortizationRow",
    "AmortizationSummary",
    "AnnualLine",
    "CustomRule",
    "FixedAmountRule",
    "FixedPercentRule",
    "MonthlyLine",
    "MonthlyRentLine",
    "MonthlyRentSchedule",
    "RentConfig",
    "RentScheduleSummary",
    "ScheduleAssumptions",
    "ScheduleOptions",
    "AnalysisResult",
    "LandlordYield",
    "LeaseMetrics",
    "ReconciliationRow",
    "ScenarioComparison",
    "ScenarioDriver",
    "ScenarioResult",
]
