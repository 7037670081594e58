"""
Discounting and return metrics over cash-flow lines.

`npv` discounts annual lines at (1 + r)^(i + 1), first line one year out.
`npv_monthly` discounts dated flows with the equivalent monthly rate
(1 + r)^(1/12) - 1 counted from an epoch, so flows on annual boundaries give
the same result as `npv`. Rates are effective annual fractions (0.08 = 8%).
No intermediate rounding is applied.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

from lease_economics.config import EngineSettings, get_settings
from lease_economics.engine.amortization import monthly_rate_from_annual
from lease_economics.engine.dates import months_since
from lease_economics.models import LandlordYield, MonthlyRentSchedule

logger = logging.getLogger(__name__)


def _flows(lines: Iterable) -> List[float]:
    return [float(line.net_cash_flow) for line in lines]


def npv(lines: Sequence, rate: float) -> float:
    flows = _flows(lines)
    if rate == 0:
        return sum(flows)
    return sum(ncf / (1.0 + rate) ** (i + 1) for i, ncf in enumerate(flows))


def npv_monthly(cashflows: Sequence[Tuple[date, float]], rate: float, epoch: Optional[date] = None) -> float:
    """
    NPV of (date, amount) flows; the epoch defaults to the earliest flow date.

    Months are counted by `months_since`, so with an epoch on the 29th-31st a
    flow on a clamped month end (Feb 29 after Jan 31) still counts as the
    earlier month and is discounted one month less.
    """
    if not cashflows:
        return 0.0
    anchor = epoch or min(d for d, _ in cashflows)
    if rate == 0:
        return sum(amount for _, amount in cashflows)
    monthly = monthly_rate_from_annual(rate)
    return sum(amount / (1.0 + monthly) ** months_since(anchor, d) for d, amount in cashflows)


def irr(lines: Sequence, guess: Optional[float] = None, settings: Optional[EngineSettings] = None) -> float:
    """
    Newton-Raphson IRR on the annual NPV.

    Stops when |NPV| or |dNPV/dr| drops under the tolerance, or at the
    iteration cap, and returns the last iterate. Each iterate is held inside
    the configured rate bounds so the discount factor stays finite.
    Tolerance, cap and bounds come from `settings`, or the process settings
    when none are given.
    """
    settings = settings or get_settings()
    flows = _flows(lines)
    rate = settings.irr_guess if guess is None else guess
    rate = min(max(rate, settings.irr_min_rate), settings.irr_max_rate)

    for _ in range(settings.irr_max_iterations):
        value = sum(ncf / (1.0 + rate) ** (j + 1) for j, ncf in enumerate(flows))
        derivative = sum(-(j + 1) * ncf / (1.0 + rate) ** (j + 2) for j, ncf in enumerate(flows))
        if abs(value) < settings.irr_tolerance or abs(derivative) < settings.irr_tolerance:
            break
        rate = min(max(rate - value / derivative, settings.irr_min_rate), settings.irr_max_rate)
    else:
        logger.debug("[irr] no convergence after %d iterations rate=%.6f", settings.irr_max_iterations, rate)
    return rate


def payback_period(lines: Sequence) -> float:
    """Years until cumulative net cash flow reaches zero, interpolated; never -> len(lines)."""
    flows = _flows(lines)
    if not flows:
        return 0.0
    cumulative = 0.0
    year = 0
    for ncf in flows:
        cumulative += ncf
        year += 1
        if cumulative >= 0:
            break
    if cumulative < 0:
        return float(len(flows))
    last = flows[year - 1]
    if last == 0:
        return float(year - 1)
    previous = cumulative - last
    return year - 1 + abs(previous) / abs(last)


def effective_rent_psf(lines: Sequence, area: float, years: float) -> float:
    if area <= 0 or years <= 0:
        return 0.0
    return sum(_flows(lines)) / (area * years)


def blended_rate(total_net_rent: float, area: float, term_months: int) -> float:
    """Net rent as $/RSF/year over the whole term."""
    if area <= 0 or term_months <= 0:
        return 0.0
    return total_net_rent / (area * (term_months / 12.0))


def free_rent_value(schedule: MonthlyRentSchedule) -> float:
    return sum(abs(min(0.0, line.free_rent_amount)) for line in schedule.lines)


def cash_on_cash_return(lines: Sequence, investment: float) -> float:
    if investment == 0:
        return 0.0
    return sum(_flows(lines)) / abs(investment)


def average_annual_return(lines: Sequence) -> float:
    flows = _flows(lines)
    return sum(flows) / len(flows) if flows else 0.0


def landlord_yield(lines: Sequence, investment: float, rate: float = 0.08) -> LandlordYield:
    """Investment metrics for a landlord funding `investment` up front."""
    total = sum(_flows(lines))
    average = average_annual_return(lines)
    base = abs(investment)
    return LandlordYield(
        npv=npv(lines, rate),
        irr=irr(lines),
        cash_on_cash_return=total / base if base else 0.0,
        yield_on_cost=average / base if base else 0.0,
        equity_multiple=total / base if base else 0.0,
        payback_period=payback_period(lines),
        net_yield=average / base if base else 0.0,
    )
