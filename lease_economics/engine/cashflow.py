"""
Monthly cash-flow assembly.

Layers operating expenses, parking, one-time items and amortized costs onto
the monthly rent schedule. Lease month 0 carries the TI shortfall and the
transaction costs; TI and moving allowances are upfront items and never
enter the cash flow.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from typing import List, Optional

from lease_economics.engine.amortization import build_amortization_schedule
from lease_economics.engine.dates import add_months
from lease_economics.engine.escalation import EscalationLookup, escalate
from lease_economics.engine.rent_schedule import apply_rounding
from lease_economics.models import (
    AmortizationSummary,
    CustomOpExEscalation,
    DealDefinition,
    LeaseType,
    MonthlyLine,
    MonthlyRentSchedule,
    NormalizedBundle,
)

logger = logging.getLogger(__name__)


def parking_growth_rate(value: float) -> float:
    """Parking escalation as a fraction; values above 1 are whole percentages."""
    return value / 100.0 if value > 1 else value


def net_cash_flow(subtotal: float, abatement_credit: float, ti_shortfall: float,
                  transaction_costs: float, amortized_costs: float) -> float:
    return subtotal + abatement_credit + ti_shortfall + transaction_costs + amortized_costs


class OperatingModel:
    """Annual operating cost $/RSF per lease year for one deal."""

    def __init__(self, deal: DealDefinition, bundle: NormalizedBundle, term_years: int):
        self.deal = deal
        op = deal.operating
        self.escalation = op.escalation
        self.cap = op.escalation.escalation_cap
        self.base_op = op.est_op_ex_psf or 0.0
        self.manual = (
            deal.lease_type == LeaseType.FULL_SERVICE
            and op.use_manual_pass_through
            and op.manual_pass_through_psf is not None
        )
        self.manual_base = op.manual_pass_through_psf or 0.0
        commencement = bundle.dates.commencement
        base_year = deal.base_year if deal.base_year is not None else (commencement.year if commencement else 0)
        self.base_year_index = max(0, base_year - commencement.year) if commencement else 0

        self._lookup: Optional[EscalationLookup] = None
        self._manual_lookup: Optional[EscalationLookup] = None
        if isinstance(self.escalation, CustomOpExEscalation) and commencement is not None:
            periods = bundle.operating_escalation_periods
            year_starts = lease_year_starts(commencement, max(term_years, self.base_year_index + 1))
            self._lookup = EscalationLookup(self.base_op, year_starts, periods)
            self._manual_lookup = EscalationLookup(self.manual_base, year_starts, periods)

    def _escalated(self, base: float, year: int, lookup: Optional[EscalationLookup]) -> float:
        if lookup is not None:
            return lookup.value(year, self.cap)
        return escalate(base, year, self.escalation.escalation_value or 0.0, self.cap)

    def annual_psf(self, year: int) -> float:
        """What the tenant pays for operating, $/RSF for a full lease year."""
        if self.manual:
            return self._escalated(self.manual_base, year, self._manual_lookup)
        escalated = self._escalated(self.base_op, year, self._lookup)
        if self.deal.lease_type == LeaseType.FULL_SERVICE:
            base_year_value = self._escalated(self.base_op, self.base_year_index, self._lookup)
            return max(0.0, escalated - base_year_value)
        return escalated

    def gross_psf(self, year: int) -> float:
        """Escalated operating cost $/RSF regardless of who pays it."""
        if self.manual:
            return self._escalated(self.manual_base, year, self._manual_lookup)
        return self._escalated(self.base_op, year, self._lookup)


def lease_year_starts(commencement: date, years: int) -> List[date]:
    return [add_months(commencement, 12 * y) for y in range(max(1, years))]


def ti_shortfall(deal: DealDefinition) -> float:
    c = deal.concessions
    if c.ti_actual_build_cost_psf is None or c.ti_allowance_psf is None:
        return 0.0
    return max(0.0, (c.ti_actual_build_cost_psf - c.ti_allowance_psf) * deal.rsf)


def transaction_cost_total(deal: DealDefinition) -> float:
    return deal.transaction_costs.resolved_total if deal.transaction_costs else 0.0


def build_amortization_summary(deal: DealDefinition, schedule: MonthlyRentSchedule) -> AmortizationSummary:
    """What the financing terms fold into rent, amortized over the schedule's months."""
    months = len(schedule.lines)
    financing = deal.financing
    if financing is None or months <= 0:
        return AmortizationSummary(months=months)

    principal = 0.0
    if financing.amortize_ti and deal.concessions.ti_allowance_psf:
        principal += deal.concessions.ti_allowance_psf * deal.rsf
    if financing.amortize_free_rent:
        principal += schedule.summary.free_rent_value
    if financing.amortize_transaction_costs:
        principal += transaction_cost_total(deal)

    rate = (financing.interest_rate or 0.0) if financing.amortization_method == "present_value" else 0.0
    rows = build_amortization_schedule(principal, rate, months)
    return AmortizationSummary(principal=principal, annual_rate=rate, months=months, rows=rows)


def build_monthly_cashflow(
    deal: DealDefinition,
    bundle: NormalizedBundle,
    schedule: MonthlyRentSchedule,
    amortization: Optional[AmortizationSummary] = None,
) -> List[MonthlyLine]:
    lines = schedule.lines
    if not lines:
        return []
    operating = OperatingModel(deal, bundle, max(math.ceil(len(lines) / 12), 1))

    parking = deal.parking
    parking_rate = 0.0
    parking_growth = 0.0
    if parking and parking.monthly_rate_per_stall and parking.stalls:
        parking_rate = parking.monthly_rate_per_stall * parking.stalls
        parking_growth = parking_growth_rate(parking.escalation_value)

    rows = amortization.rows if amortization else []
    shortfall = ti_shortfall(deal)
    txn = transaction_cost_total(deal)

    # every component is rounded on its own; subtotal and net are built from the rounded parts
    rounding = schedule.assumptions.rounding
    out: List[MonthlyLine] = []
    for line in lines:
        i = line.period_index
        year = i // 12
        op = apply_rounding(operating.annual_psf(year) * deal.rsf / 12.0 * line.proration_factor, rounding)
        park = 0.0
        if parking_rate:
            park = apply_rounding(escalate(parking_rate, year, parking_growth) * line.proration_factor, rounding)
        abatement = line.free_rent_amount
        if line.abates_operating:
            abatement = apply_rounding(abatement - op, rounding)
        amortized = apply_rounding(rows[i].interest + rows[i].principal, rounding) if i < len(rows) else 0.0
        one_time_ti = apply_rounding(shortfall, rounding) if i == 0 else 0.0
        one_time_txn = apply_rounding(txn, rounding) if i == 0 else 0.0

        subtotal = apply_rounding(line.contractual_base_rent + op + park, rounding)
        net = apply_rounding(net_cash_flow(subtotal, abatement, one_time_ti, one_time_txn, amortized), rounding)
        out.append(
            MonthlyLine(
                month_index=i,
                start_date=line.start_date,
                end_date=line.end_date,
                payment_date=line.payment_date,
                base_rent=line.contractual_base_rent,
                abatement_credit=abatement,
                operating=op,
                parking=park,
                other_recurring=0.0,
                ti_shortfall=one_time_ti,
                transaction_costs=one_time_txn,
                amortized_costs=amortized,
                subtotal=subtotal,
                net_cash_flow=net,
            )
        )

    logger.debug("[cashflow] deal=%s months=%d net=%.2f", deal.id or "-", len(out), sum(m.net_cash_flow for m in out))
    return out
