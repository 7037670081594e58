"""
Negotiation equivalency: price one concession in terms of another.

Assumptions:
- Rent is billed in advance, so each month's flow lands on its start date.
- TI is paid at commencement, so its present value is its nominal value.
- Free rent comes out of the earliest rent-paying months; a fractional month
  frees that share of the next month.
- A term extension repeats the last scheduled month's rent.

Rates are $/RSF/yr, discount rates effective annual fractions.
"""

from __future__ import annotations

import math
from datetime import date
from typing import List, Sequence, Tuple

from lease_economics.engine.dates import add_months
from lease_economics.engine.metrics import npv_monthly
from lease_economics.models import MonthlyRentLine, MonthlyRentSchedule

MAX_FREE_RENT_MONTHS = 18


def _rent_paying(lines: Sequence[MonthlyRentLine]) -> List[MonthlyRentLine]:
    return [line for line in lines if line.net_rent_due > 0]


def _monthly_rent(line: MonthlyRentLine) -> float:
    return line.contractual_base_rent or line.net_rent_due


def pv_of_ti(ti_psf: float, rsf: float) -> float:
    if not ti_psf or rsf <= 0:
        return 0.0
    return ti_psf * rsf


def pv_of_rate_delta(
    rate_delta_psf_yr: float, rsf: float, lines: Sequence[MonthlyRentLine], discount_rate: float
) -> float:
    """PV of paying `rate_delta_psf_yr` more in every rent-paying month."""
    if not rate_delta_psf_yr or rsf <= 0:
        return 0.0
    paying = _rent_paying(lines)
    if not paying:
        return 0.0
    monthly = rate_delta_psf_yr * rsf / 12.0
    return npv_monthly([(line.start_date, monthly) for line in paying], discount_rate)


def pv_of_free_rent_months(
    free_rent_months: float, lines: Sequence[MonthlyRentLine], rsf: float, discount_rate: float
) -> float:
    """PV of the net rent given up by `free_rent_months` more free months; negative months take it back."""
    if not free_rent_months or rsf <= 0:
        return 0.0
    paying = _rent_paying(lines)
    if not paying:
        return 0.0

    sign = 1.0 if free_rent_months > 0 else -1.0
    target = min(abs(free_rent_months), len(paying))
    full = int(math.floor(target))
    remainder = target - full
    selected = paying[: full + (1 if remainder > 0 else 0)]

    flows: List[Tuple[date, float]] = []
    for index, line in enumerate(selected):
        share = remainder if index == full else 1.0
        flows.append((line.start_date, line.net_rent_due * share * sign))
    return npv_monthly(flows, discount_rate)


def pv_of_term_extension(
    extension_months: float, lines: Sequence[MonthlyRentLine], rsf: float, discount_rate: float
) -> float:
    """PV, from the first scheduled month, of extending the lease at its last month's rent."""
    if not extension_months or rsf <= 0 or not lines:
        return 0.0
    last = lines[-1]
    rent = _monthly_rent(last)
    if rent == 0:
        return 0.0

    sign = 1.0 if extension_months > 0 else -1.0
    total = abs(extension_months)
    full = int(math.floor(total))
    remainder = total - full
    flows = [(add_months(last.start_date, i), rent * sign) for i in range(1, full + 1)]
    if remainder > 0:
        flows.append((add_months(last.start_date, full + 1), rent * remainder * sign))
    return npv_monthly(flows, discount_rate, epoch=lines[0].start_date)


def ti_to_rate_equivalent_psf_yr(
    ti_psf: float, rsf: float, schedule: MonthlyRentSchedule, discount_rate: float
) -> float:
    """Rent increase ($/RSF/yr) worth the same as `ti_psf` of TI."""
    pv_ti = pv_of_ti(ti_psf, rsf)
    per_dollar = pv_of_rate_delta(1.0, rsf, schedule.lines, discount_rate)
    if pv_ti == 0 or per_dollar == 0:
        return 0.0
    return pv_ti / per_dollar


def rate_to_ti_equivalent_psf(
    rate_delta_psf_yr: float, rsf: float, schedule: MonthlyRentSchedule, discount_rate: float
) -> float:
    if rsf <= 0:
        return 0.0
    return pv_of_rate_delta(rate_delta_psf_yr, rsf, schedule.lines, discount_rate) / rsf


def free_rent_to_rate_equivalent_psf_yr(
    free_rent_months: float, rsf: float, schedule: MonthlyRentSchedule, discount_rate: float
) -> float:
    pv_free = pv_of_free_rent_months(free_rent_months, schedule.lines, rsf, discount_rate)
    per_dollar = pv_of_rate_delta(1.0, rsf, schedule.lines, discount_rate)
    if pv_free == 0 or per_dollar == 0:
        return 0.0
    return pv_free / per_dollar


def rate_to_free_rent_months(
    rate_delta_psf_yr: float,
    rsf: float,
    schedule: MonthlyRentSchedule,
    discount_rate: float,
    max_months: int = MAX_FREE_RENT_MONTHS,
) -> int:
    """Whole free-rent months closest in PV to a rent change; the sign follows the change."""
    target = pv_of_rate_delta(rate_delta_psf_yr, rsf, schedule.lines, discount_rate)
    if target == 0:
        return 0
    sign = 1 if target > 0 else -1
    limit = min(max_months, len(_rent_paying(schedule.lines)))

    best_months, best_diff = 0, math.inf
    for months in range(limit + 1):
        pv = abs(pv_of_free_rent_months(months, schedule.lines, rsf, discount_rate))
        diff = abs(abs(target) - pv)
        if diff < best_diff:
            best_months, best_diff = months, diff
    return best_months * sign


def term_extension_to_additional_ti_psf(
    extension_months: float, rsf: float, schedule: MonthlyRentSchedule, discount_rate: float
) -> float:
    if rsf <= 0:
        return 0.0
    return pv_of_term_extension(extension_months, schedule.lines, rsf, discount_rate) / rsf
