"""Services: turn raw deal input into the engine's normalized form."""

from .normalizer import (
    collect_normalization_issues,
    normalize,
    normalize_abatement,
    normalize_dates,
    normalize_operating_escalations,
    normalize_rent_escalations,
)

__all__ = [
    "collect_normalization_issues",
    "normalize",
    "normalize_abatement",
    "normalize_dates",
    "normalize_operating_escalations",
    "normalize_rent_escalations",
]
