"""Lease economics engine: monthly and annual lease cash flow, metrics and scenarios."""

__version__ = "0.1.0"

from lease_economics.engine.analysis import analyze_deal
from lease_economics.engine.scenario import analyze_scenario, analyze_scenarios, compare_scenarios, merge_scenario
from lease_economics.models import DealDefinition
from lease_economics.services.normalizer import normalize

__all__ = [
    "__version__",
    "DealDefinition",
    "analyze_deal",
    "analyze_scenario",
    "analyze_scenarios",
    "compare_scenarios",
    "merge_scenario",
    "normalize",
]
