"""
Input normalization: DealDefinition -> NormalizedBundle + issues.

Resolves the implicit parts of a deal (rent start, lease term, default
escalation windows, at-commencement abatement block) into explicit dated
periods. Problems with the input are collected as warnings and returned
next to the bundle; nothing here raises for bad data.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Tuple

from lease_economics.engine.dates import add_months, block_end, months_from_dates
from lease_economics.models import (
    AtCommencementAbatement,
    CustomAbatement,
    CustomOpExEscalation,
    CustomRentEscalation,
    DealDefinition,
    FixedRentEscalation,
    NormalizationIssue,
    NormalizedAbatementPeriod,
    NormalizedBundle,
    NormalizedDates,
    NormalizedEscalationPeriod,
)

logger = logging.getLogger(__name__)


# --- Dates and term ---


def abatement_months_total(deal: DealDefinition) -> int:
    """Free months across the deal's abatement; negative counts add nothing."""
    abatement = deal.concessions.abatement
    if isinstance(abatement, AtCommencementAbatement):
        return max(0, abatement.free_rent_months)
    return sum(max(0, p.free_rent_months) for p in abatement.periods)


def derive_rent_start(deal: DealDefinition) -> Optional[date]:
    kd = deal.key_dates
    if kd.rent_start is not None:
        return kd.rent_start
    if kd.commencement is None:
        return None
    if isinstance(deal.concessions.abatement, AtCommencementAbatement):
        free = abatement_months_total(deal)
        if free > 0:
            return add_months(kd.commencement, free)
    return kd.commencement


def normalize_dates(deal: DealDefinition) -> NormalizedDates:
    kd = deal.key_dates
    abatement_total = abatement_months_total(deal)
    include_abatement = bool(deal.lease_term and deal.lease_term.include_abatement_in_term)

    term_total: Optional[int] = None
    term_years: Optional[int] = None
    term_rem: Optional[int] = None

    if deal.lease_term is not None:
        total = deal.lease_term.years * 12 + deal.lease_term.months
        if include_abatement:
            total += abatement_total
        if total > 0:
            term_total = total
            term_years, term_rem = divmod(total, 12)
    elif kd.commencement is not None and kd.expiration is not None:
        total = months_from_dates(kd.commencement, kd.expiration)
        if total:
            term_total = total
            term_years, term_rem = divmod(total, 12)

    return NormalizedDates(
        commencement=kd.commencement,
        expiration=kd.expiration,
        rent_start=derive_rent_start(deal),
        term_months_total=term_total,
        term_years=term_years,
        term_months_remainder=term_rem,
        include_abatement_in_term=include_abatement,
        abatement_months_total=abatement_total,
    )


# --- Escalations ---


def _escalation_window(deal: DealDefinition) -> Optional[Tuple[date, date]]:
    first = deal.rent_schedule[0] if deal.rent_schedule else None
    start = deal.key_dates.commencement or (first.period_start if first else None)
    end = deal.key_dates.expiration or (first.period_end if first else None)
    if start is None or end is None:
        return None
    return start, end


def _single_period(deal: DealDefinition, rate: float) -> List[NormalizedEscalationPeriod]:
    window = _escalation_window(deal)
    if window is None:
        return []
    return [NormalizedEscalationPeriod(period_start=window[0], period_end=window[1], escalation_percentage=rate)]


def normalize_rent_escalations(deal: DealDefinition) -> List[NormalizedEscalationPeriod]:
    esc = deal.rent_escalation
    if isinstance(esc, CustomRentEscalation):
        return [
            NormalizedEscalationPeriod(
                period_start=p.period_start,
                period_end=p.period_end,
                escalation_percentage=p.escalation_percentage,
            )
            for p in esc.escalation_periods
        ]
    rate: Optional[float] = None
    if isinstance(esc, FixedRentEscalation):
        rate = esc.fixed_escalation_percentage
    if rate is None and deal.rent_schedule:
        rate = deal.rent_schedule[0].escalation_percentage
    return _single_period(deal, rate or 0.0)


def normalize_operating_escalations(deal: DealDefinition) -> List[NormalizedEscalationPeriod]:
    esc = deal.operating.escalation
    if isinstance(esc, CustomOpExEscalation):
        return [
            NormalizedEscalationPeriod(
                period_start=p.period_start,
                period_end=p.period_end,
                escalation_percentage=p.escalation_percentage,
            )
            for p in esc.escalation_periods
        ]
    return _single_period(deal, esc.escalation_value or 0.0)


# --- Abatement ---


def normalize_abatement(deal: DealDefinition) -> List[NormalizedAbatementPeriod]:
    abatement = deal.concessions.abatement
    if isinstance(abatement, CustomAbatement):
        return [
            NormalizedAbatementPeriod(
                period_start=p.period_start,
                period_end=p.period_end,
                free_rent_months=p.free_rent_months,
                applies_to=p.applies_to,
            )
            for p in abatement.periods
        ]
    months = abatement.free_rent_months
    commencement = deal.key_dates.commencement
    if months <= 0 or commencement is None:
        return []
    return [
        NormalizedAbatementPeriod(
            period_start=commencement,
            period_end=block_end(commencement, months),
            free_rent_months=months,
            applies_to=abatement.applies_to,
        )
    ]


# --- Issues ---


def _warn(issues: List[NormalizationIssue], code: str, message: str, field: Optional[str] = None) -> None:
    issues.append(NormalizationIssue(code=code, message=message, field=field))


def _ordering_issues(
    issues: List[NormalizationIssue], label: str, periods: List[NormalizedEscalationPeriod]
) -> None:
    for i in range(1, len(periods)):
        prev, cur = periods[i - 1], periods[i]
        if cur.period_start < prev.period_start:
            _warn(
                issues,
                f"{label}_unsorted",
                f"{label} escalation periods are not sorted by start date.",
                f"{label}[{i}].period_start",
            )
        if cur.period_start <= prev.period_end:
            _warn(
                issues,
                f"{label}_overlap",
                f"{label} escalation periods overlap.",
                f"{label}[{i}].period_start",
            )


def collect_normalization_issues(deal: DealDefinition, bundle: NormalizedBundle) -> List[NormalizationIssue]:
    issues: List[NormalizationIssue] = []
    dates = bundle.dates

    if deal.key_dates.commencement is None:
        _warn(issues, "missing_commencement", "Commencement date is missing.", "key_dates.commencement")
    if deal.key_dates.expiration is None and deal.lease_term is None:
        _warn(
            issues,
            "missing_expiration",
            "Expiration date is missing and no lease term was given.",
            "key_dates.expiration",
        )
    if dates.commencement and dates.rent_start and dates.rent_start < dates.commencement:
        _warn(issues, "rent_start_before_commencement", "Rent start is before commencement.", "key_dates.rent_start")
    if dates.commencement and dates.expiration and dates.expiration < dates.commencement:
        _warn(issues, "expiration_before_commencement", "Expiration is before commencement.", "key_dates.expiration")

    abatement = deal.concessions.abatement
    if isinstance(abatement, AtCommencementAbatement):
        if abatement.free_rent_months < 0:
            _warn(
                issues,
                "negative_free_rent_months",
                "Free rent months cannot be negative.",
                "concessions.abatement.free_rent_months",
            )
    else:
        for i, period in enumerate(abatement.periods):
            if period.free_rent_months < 0:
                _warn(
                    issues,
                    "negative_free_rent_months",
                    "Free rent months cannot be negative.",
                    f"concessions.abatement.periods[{i}].free_rent_months",
                )

    esc = deal.rent_escalation
    if isinstance(esc, FixedRentEscalation) and esc.fixed_escalation_amount is not None and esc.escalation_mode is None:
        _warn(
            issues,
            "fixed_amount_mode_missing",
            "Fixed escalation amount provided without escalation_mode (percent vs amount).",
            "rent_escalation.escalation_mode",
        )

    _ordering_issues(issues, "rent_escalation", bundle.rent_escalation_periods)
    _ordering_issues(issues, "operating_escalation", bundle.operating_escalation_periods)
    return issues


def normalize(deal: DealDefinition) -> Tuple[NormalizedBundle, List[NormalizationIssue]]:
    """Run every normalizer and collect issues. The deal is not modified."""
    bundle = NormalizedBundle(
        dates=normalize_dates(deal),
        abatement=normalize_abatement(deal),
        rent_escalation_periods=normalize_rent_escalations(deal),
        operating_escalation_periods=normalize_operating_escalations(deal),
    )
    issues = collect_normalization_issues(deal, bundle)
    if issues:
        logger.info("[normalize] deal=%s issues=%d codes=%s", deal.id or "-", len(issues), [i.code for i in issues])
    else:
        logger.debug("[normalize] deal=%s issues=0", deal.id or "-")
    return bundle, issues
