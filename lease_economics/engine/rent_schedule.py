"""
Monthly base rent schedule.

Assumptions:
- Month boundaries are anchored to the commencement day-of-month; a month
  that lacks that day uses its last day. Each month ends the day before the
  next anchor, clamped to the lease end.
- When the normalized term differs from the date-derived term (explicit
  lease term, abatement folded into the term) it sets the schedule length;
  otherwise expiration anchors the schedule.
- A month cut short by the lease end is prorated by days covered.
- Abatement applies to whole lease months; overlapping periods take the
  earliest uncovered months first.
- Arrears timing moves the payment date to the end of the month; month
  boundaries do not move.
"""

from __future__ import annotations

import logging
import math
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from lease_economics.config import get_settings
from lease_economics.engine.dates import add_months, block_end, months_from_dates
from lease_economics.engine.escalation import EscalationLookup
from lease_economics.models import (
    CustomRule,
    FixedAmountRule,
    FixedPercentRule,
    MonthlyRentLine,
    MonthlyRentSchedule,
    NormalizedAbatementPeriod,
    NormalizedBundle,
    RentConfig,
    RentScheduleSummary,
    ScheduleAssumptions,
    ScheduleOptions,
)

logger = logging.getLogger(__name__)

# (index, start, end, natural_end) for one lease month
_Period = Tuple[int, date, date, date]


def default_schedule_options() -> ScheduleOptions:
    settings = get_settings()
    return ScheduleOptions(payment_timing=settings.payment_timing, rounding=settings.rounding)


def apply_rounding(value: float, mode: str) -> float:
    if mode == "cents":
        return round(value, 2)
    return value


def _month_periods(commencement: date, term_months: Optional[int], expiration: Optional[date]) -> List[_Period]:
    periods: List[_Period] = []
    if term_months is not None:
        for index in range(term_months):
            start = add_months(commencement, index)
            natural_end = add_months(commencement, index + 1) - timedelta(days=1)
            end = min(natural_end, expiration) if expiration else natural_end
            periods.append((index, start, end, natural_end))
        return periods

    if expiration is None:
        return periods
    index = 0
    while True:
        start = add_months(commencement, index)
        if start > expiration:
            break
        natural_end = add_months(commencement, index + 1) - timedelta(days=1)
        periods.append((index, start, min(natural_end, expiration), natural_end))
        index += 1
    return periods


def resolve_term(bundle: NormalizedBundle) -> Tuple[str, Optional[int], Optional[date]]:
    """Pick what bounds the schedule: (term_source, month count or None, lease end)."""
    dates = bundle.dates
    commencement = dates.commencement
    expiration = dates.expiration
    term = dates.term_months_total
    derived = months_from_dates(commencement, expiration) if commencement and expiration else None
    if derived is not None and expiration <= commencement:
        derived = None

    if term and term > 0:
        if derived is not None and derived == term and expiration is not None:
            return "expiration", None, expiration
        return "term_months", term, block_end(commencement, term)
    if expiration is not None:
        return "expiration", None, expiration
    return "none", None, None


def _base_annual_rent(rent: RentConfig, area: float) -> float:
    if rent.base_rent_monthly is not None:
        return rent.base_rent_monthly * 12
    if rent.base_rent_psf is not None:
        return rent.base_rent_psf * (area or 0.0)
    return 0.0


def annual_rent_by_year(
    rent: RentConfig, bundle: NormalizedBundle, area: float, base_annual: float, year_starts: List[date]
) -> List[float]:
    """Annual rent for each lease year, before abatement."""
    rule = rent.escalation
    fallback_rate = (
        bundle.rent_escalation_periods[0].escalation_percentage if bundle.rent_escalation_periods else 0.0
    )
    years = range(len(year_starts))

    if rule is None or isinstance(rule, FixedPercentRule):
        rate = rule.rate if rule is not None else fallback_rate
        return [base_annual * (1 + rate) ** y for y in years]
    if isinstance(rule, FixedAmountRule):
        step = rule.amount * (area or 0.0)
        return [base_annual + step * y for y in years]

    if isinstance(rule, CustomRule):
        periods = rule.periods if rule.periods is not None else bundle.rent_escalation_periods
        if periods:
            lookup = EscalationLookup(base_annual, year_starts, periods)
            return [lookup.value(y) for y in years]
    return [base_annual for _ in years]


def _free_rent_map(periods: List[_Period], abatement: List[NormalizedAbatementPeriod]) -> Dict[int, str]:
    """Lease month index -> applies_to of the abatement period that frees it."""
    free: Dict[int, str] = {}
    for block in abatement:
        remaining = block.free_rent_months
        if remaining <= 0:
            continue
        for index, start, end, _ in periods:
            if remaining <= 0:
                break
            if start > block.period_end or end < block.period_start:
                continue
            if index in free:
                continue
            free[index] = block.applies_to
            remaining -= 1
    return free


def build_monthly_schedule(
    bundle: NormalizedBundle,
    rent: RentConfig,
    area: float = 0.0,
    options: Optional[ScheduleOptions] = None,
) -> MonthlyRentSchedule:
    """Month-by-month contractual rent, free rent and net rent for one lease."""
    options = options or default_schedule_options()
    rounding = options.rounding
    commencement = bundle.dates.commencement
    if commencement is None:
        return MonthlyRentSchedule(
            assumptions=ScheduleAssumptions(payment_timing=options.payment_timing, rounding=rounding)
        )

    term_source, term_months, lease_end = resolve_term(bundle)
    periods = _month_periods(commencement, term_months, lease_end)

    base_annual = _base_annual_rent(rent, area)
    n_years = max(1, math.ceil(len(periods) / 12))
    year_starts = [add_months(commencement, 12 * y) for y in range(n_years)]
    rents = annual_rent_by_year(rent, bundle, area, base_annual, year_starts)
    free = _free_rent_map(periods, bundle.abatement)

    lines: List[MonthlyRentLine] = []
    running = 0.0
    for index, start, end, natural_end in periods:
        natural_days = (natural_end - start).days + 1
        proration = 1.0 if end >= natural_end else ((end - start).days + 1) / natural_days
        annual = rents[index // 12] if index // 12 < len(rents) else base_annual
        contractual = apply_rounding(annual / 12.0 * proration, rounding)
        free_amount = apply_rounding(-contractual, rounding) if index in free else 0.0
        net = apply_rounding(contractual + free_amount, rounding)
        running += net
        lines.append(
            MonthlyRentLine(
                period_index=index,
                start_date=start,
                end_date=end,
                payment_date=start if options.payment_timing == "advance" else end,
                proration_factor=proration,
                contractual_base_rent=contractual,
                free_rent_amount=free_amount,
                net_rent_due=net,
                abates_operating=free.get(index) == "base_plus_nnn",
                effective_rent_running=apply_rounding(running / (index + 1), rounding),
            )
        )

    summary = RentScheduleSummary(
        total_contract_rent=apply_rounding(sum(l.contractual_base_rent for l in lines), rounding),
        total_net_rent=apply_rounding(sum(l.net_rent_due for l in lines), rounding),
        free_rent_value=apply_rounding(sum(abs(min(0.0, l.free_rent_amount)) for l in lines), rounding),
        months=len(lines),
    )
    logger.debug(
        "[rent_schedule] months=%d term_source=%s contract=%.2f net=%.2f",
        len(lines), term_source, summary.total_contract_rent, summary.total_net_rent,
    )
    return MonthlyRentSchedule(
        lines=lines,
        summary=summary,
        assumptions=ScheduleAssumptions(
            payment_timing=options.payment_timing, rounding=rounding, term_source=term_source
        ),
    )
