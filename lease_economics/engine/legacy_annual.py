"""
Annual-only cash flow built directly from lease-year periods.

This is the older annual path kept alongside the monthly engine so results
can be reconciled year by year. Lease years run anniversary to anniversary;
a partial final year counts only the months it covers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional

from lease_economics.engine.cashflow import (
    OperatingModel,
    net_cash_flow,
    parking_growth_rate,
    ti_shortfall,
    transaction_cost_total,
)
from lease_economics.engine.dates import add_years, block_end, months_since, overlapping_months
from lease_economics.engine.escalation import EscalationLookup, escalate
from lease_economics.models import (
    AnnualLine,
    AtCommencementAbatement,
    CustomRentEscalation,
    DealDefinition,
    FixedRentEscalation,
    NormalizedBundle,
    RentRow,
)


@dataclass
class TermYear:
    """One lease year: 0-based index, inclusive dates and months covered."""
    index: int
    start: date
    end: date
    months: int


def _lease_end(bundle: NormalizedBundle) -> Optional[date]:
    dates = bundle.dates
    if dates.expiration is not None:
        return dates.expiration
    if dates.commencement is not None and dates.term_months_total:
        return block_end(dates.commencement, dates.term_months_total)
    return None


def build_term_years(commencement: date, expiration: date) -> List[TermYear]:
    if expiration <= commencement:
        return []
    years: List[TermYear] = []
    index = 0
    while True:
        start = add_years(commencement, index)
        if start > expiration:
            break
        end = min(add_years(commencement, index + 1) - timedelta(days=1), expiration)
        years.append(TermYear(index, start, end, overlapping_months(start, end, start, end)))
        index += 1
    return years


def _first_rent_psf(deal: DealDefinition) -> float:
    return deal.rent_schedule[0].rent_psf if deal.rent_schedule else 0.0


def _row_for(deal: DealDefinition, d: date) -> Optional[RentRow]:
    for row in deal.rent_schedule:
        if row.period_start and row.period_end and row.period_start <= d <= row.period_end:
            return row
    return None


def _annual_rent_psf(deal: DealDefinition, bundle: NormalizedBundle, years: List[TermYear]) -> List[Optional[float]]:
    """Rent $/RSF/yr per lease year; None where no rent applies."""
    base = _first_rent_psf(deal)
    esc = deal.rent_escalation

    if isinstance(esc, CustomRentEscalation):
        periods = bundle.rent_escalation_periods
        if periods:
            lookup = EscalationLookup(base, [y.start for y in years], periods)
            return [lookup.value(y.index) for y in years]
        # no usable periods: step through the rent rows themselves
        commencement = years[0].start
        rates: List[Optional[float]] = []
        for y in years:
            row = _row_for(deal, y.start)
            if row is None:
                rates.append(None)
                continue
            row_year = months_since(commencement, row.period_start or commencement) // 12
            elapsed = max(0, y.index - row_year)
            rates.append(row.rent_psf * (1 + (row.escalation_percentage or 0.0)) ** elapsed)
        return rates

    if isinstance(esc, FixedRentEscalation) and esc.escalation_mode == "amount" and esc.fixed_escalation_amount:
        return [base + esc.fixed_escalation_amount * y.index for y in years]

    rate = None
    if isinstance(esc, FixedRentEscalation):
        rate = esc.fixed_escalation_percentage
    if rate is None and deal.rent_schedule:
        rate = deal.rent_schedule[0].escalation_percentage
    return [base * (1 + (rate or 0.0)) ** y.index for y in years]


def _legacy_free_rent_value(deal: DealDefinition) -> float:
    abatement = deal.concessions.abatement
    if isinstance(abatement, AtCommencementAbatement):
        months = max(0, abatement.free_rent_months)
        return months / 12.0 * _first_rent_psf(deal) * deal.rsf
    total = 0.0
    for period in abatement.periods:
        row = _row_for(deal, period.period_start)
        psf = row.rent_psf if row else 0.0
        total += max(0, period.free_rent_months) / 12.0 * psf * deal.rsf
    return total


def _annual_amortized(deal: DealDefinition, years: List[TermYear]) -> List[float]:
    amounts = [0.0 for _ in years]
    financing = deal.financing
    if financing is None:
        return amounts
    term_years = sum(y.months for y in years) / 12.0

    total = 0.0
    if financing.amortize_ti and deal.concessions.ti_allowance_psf:
        total += deal.concessions.ti_allowance_psf * deal.rsf
    if financing.amortize_free_rent:
        total += _legacy_free_rent_value(deal)
    if financing.amortize_transaction_costs:
        total += transaction_cost_total(deal)
    if total <= 0 or term_years <= 0:
        return amounts

    rate = financing.interest_rate
    if financing.amortization_method == "present_value" and rate:
        payment = total * (rate / (1 - (1 + rate) ** (-term_years)))
    else:
        payment = total / term_years
    for i in range(min(math.ceil(term_years), len(years))):
        amounts[i] = payment
    return amounts


def build_annual_cashflow(deal: DealDefinition, bundle: NormalizedBundle) -> List[AnnualLine]:
    commencement = bundle.dates.commencement
    expiration = _lease_end(bundle)
    if commencement is None or expiration is None:
        return []
    years = build_term_years(commencement, expiration)
    if not years:
        return []

    rsf = deal.rsf
    rent_psf = _annual_rent_psf(deal, bundle, years)
    operating = OperatingModel(deal, bundle, len(years))

    base_rent = [((r or 0.0) * rsf * y.months / 12.0) for r, y in zip(rent_psf, years)]
    op = [operating.annual_psf(y.index) * rsf * y.months / 12.0 for y in years]
    op_psf = [operating.annual_psf(y.index) for y in years]

    # Abatement: whole months, earliest first, never more than a year holds
    abatement = [0.0 for _ in years]
    first_psf = _first_rent_psf(deal)
    concession = deal.concessions.abatement
    blocks = []
    if isinstance(concession, AtCommencementAbatement):
        if concession.free_rent_months > 0:
            blocks.append((years[0].start, expiration, concession.free_rent_months, concession.applies_to))
    else:
        for p in concession.periods:
            blocks.append((p.period_start, p.period_end, p.free_rent_months, p.applies_to))
    used = [0 for _ in years]
    for start, end, free, applies_to in blocks:
        remaining = free
        for y in years:
            if remaining <= 0:
                break
            available = min(overlapping_months(start, end, y.start, y.end), y.months - used[y.index])
            if available <= 0:
                continue
            months = min(remaining, available)
            rate = rent_psf[y.index] if rent_psf[y.index] is not None else first_psf
            abatement[y.index] -= rate * rsf * months / 12.0
            if applies_to == "base_plus_nnn":
                abatement[y.index] -= op_psf[y.index] * rsf * months / 12.0
            used[y.index] += months
            remaining -= months

    parking = [0.0 for _ in years]
    if deal.parking and deal.parking.monthly_rate_per_stall and deal.parking.stalls:
        growth = parking_growth_rate(deal.parking.escalation_value)
        for y in years:
            monthly = escalate(deal.parking.monthly_rate_per_stall, y.index, growth)
            parking[y.index] = monthly * y.months * deal.parking.stalls

    amortized = _annual_amortized(deal, years)
    shortfall = ti_shortfall(deal)
    txn = transaction_cost_total(deal)

    lines: List[AnnualLine] = []
    for y in years:
        i = y.index
        subtotal = base_rent[i] + op[i] + parking[i]
        one_time_ti = shortfall if i == 0 else 0.0
        one_time_txn = txn if i == 0 else 0.0
        lines.append(
            AnnualLine(
                year=i + 1,
                start_date=y.start,
                end_date=y.end,
                months=y.months,
                base_rent=base_rent[i],
                abatement_credit=abatement[i],
                operating=op[i],
                parking=parking[i],
                other_recurring=0.0,
                ti_shortfall=one_time_ti,
                transaction_costs=one_time_txn,
                amortized_costs=amortized[i],
                subtotal=subtotal,
                net_cash_flow=net_cash_flow(subtotal, abatement[i], one_time_ti, one_time_txn, amortized[i]),
            )
        )
    return lines
