"""
Scenario engine: apply partial overrides to a base deal, re-run the full
analysis, and explain the difference between two results.

Overrides merge key by key into nested sections; a list in the override
replaces the base list outright. The base deal is never modified.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from pydantic import BaseModel

from lease_economics.config import EngineSettings
from lease_economics.engine.analysis import analyze_deal
from lease_economics.models import (
    AnalysisResult,
    DealDefinition,
    MonthlyLine,
    ScenarioComparison,
    ScenarioDriver,
    ScenarioResult,
)

logger = logging.getLogger(__name__)

Overrides = Union[Mapping[str, Any], BaseModel]

BASE_CASE_NAME = "Base Case"

# (key, extractor) per driver bucket
_DRIVERS: List[Tuple[str, Callable[[MonthlyLine], float]]] = [
    ("base_rent", lambda m: m.base_rent),
    ("abatement_credit", lambda m: m.abatement_credit),
    ("operating", lambda m: m.operating),
    ("parking", lambda m: m.parking),
    ("amortized_costs", lambda m: m.amortized_costs),
    ("one_time_costs", lambda m: m.ti_shortfall + m.transaction_costs),
    ("other_recurring", lambda m: m.other_recurring),
]


def _deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _override_dict(overrides: Optional[Overrides]) -> Dict[str, Any]:
    if overrides is None:
        return {}
    if isinstance(overrides, BaseModel):
        return overrides.model_dump(exclude_unset=True)
    return dict(overrides)


def merge_scenario(base: DealDefinition, overrides: Optional[Overrides] = None) -> DealDefinition:
    """New deal with overrides applied; raises pydantic ValidationError if the result is invalid."""
    merged = _deep_merge(base.model_dump(), _override_dict(overrides))
    return DealDefinition.model_validate(merged)


def analyze_scenario(
    base: DealDefinition,
    overrides: Optional[Overrides] = None,
    settings: Optional[EngineSettings] = None,
) -> AnalysisResult:
    return analyze_deal(merge_scenario(base, overrides), settings)


def analyze_scenarios(
    base: DealDefinition,
    scenarios: Sequence[Tuple[str, Optional[Overrides]]],
    settings: Optional[EngineSettings] = None,
) -> List[ScenarioResult]:
    """One independent result per named scenario, in the order given."""
    results = []
    for name, overrides in scenarios:
        logger.info("[scenario] running name=%s", name)
        results.append(ScenarioResult(name=name, result=analyze_scenario(base, overrides, settings)))
    return results


def _monthly_total(lines: Sequence[MonthlyLine], extract: Callable[[MonthlyLine], float]) -> float:
    return sum(extract(m) for m in lines)


def scenario_drivers(
    base_lines: Sequence[MonthlyLine], variant_lines: Sequence[MonthlyLine], top_n: int = 3
) -> List[ScenarioDriver]:
    """Cash-flow buckets ranked by absolute change; changes under a cent are ignored."""
    drivers: List[ScenarioDriver] = []
    for key, extract in _DRIVERS:
        base_total = _monthly_total(base_lines, extract)
        variant_total = _monthly_total(variant_lines, extract)
        delta = variant_total - base_total
        if abs(delta) < 0.01:
            continue
        drivers.append(ScenarioDriver(component=key, base_value=base_total, variant_value=variant_total, delta=delta))
    drivers.sort(key=lambda d: abs(d.delta), reverse=True)
    return drivers[:top_n]


def compare_scenarios(
    base: AnalysisResult,
    variant: AnalysisResult,
    top_n: int = 3,
    base_name: str = "",
    variant_name: str = "",
) -> ScenarioComparison:
    base_total = sum(m.net_cash_flow for m in base.monthly_lines)
    variant_total = sum(m.net_cash_flow for m in variant.monthly_lines)
    return ScenarioComparison(
        base_name=base_name,
        variant_name=variant_name,
        npv_delta=variant.metrics.npv - base.metrics.npv,
        total_cash_flow_delta=variant_total - base_total,
        top_drivers=scenario_drivers(base.monthly_lines, variant.monthly_lines, top_n),
    )


def pick_baseline(results: Sequence[ScenarioResult]) -> Optional[ScenarioResult]:
    for r in results:
        if r.name == BASE_CASE_NAME:
            return r
    return results[0] if results else None


def compare_all(results: Sequence[ScenarioResult], top_n: int = 3) -> List[ScenarioComparison]:
    """Compare every scenario against the "Base Case" one, or the first when none is named so."""
    baseline = pick_baseline(results)
    if baseline is None:
        return []
    return [
        compare_scenarios(baseline.result, r.result, top_n, baseline.name, r.name)
        for r in results
        if r is not baseline
    ]
