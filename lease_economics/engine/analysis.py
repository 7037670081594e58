"""
Lease analysis: normalize a deal, build its schedules, roll up and score it.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from lease_economics.config import EngineSettings, get_settings
from lease_economics.engine.cashflow import build_amortization_summary, build_monthly_cashflow
from lease_economics.engine.legacy_annual import build_annual_cashflow
from lease_economics.engine.metrics import (
    blended_rate,
    effective_rent_psf,
    free_rent_value,
    irr,
    npv,
    npv_monthly,
    payback_period,
)
from lease_economics.engine.rent_schedule import build_monthly_schedule
from lease_economics.engine.rollup import reconcile_annual_lines, roll_up_to_annual
from lease_economics.models import (
    AnalysisResult,
    CustomRentEscalation,
    CustomRule,
    DealDefinition,
    FixedAmountRule,
    FixedPercentRule,
    FixedRentEscalation,
    LeaseMetrics,
    NormalizedBundle,
    RentConfig,
    ScheduleOptions,
)
from lease_economics.services.normalizer import normalize

logger = logging.getLogger(__name__)


def rent_config_from_deal(deal: DealDefinition, bundle: NormalizedBundle) -> RentConfig:
    """
    Base rent from the first rent row, escalation from the deal's rule.

    A fixed amount only counts as a dollar step when escalation_mode says so;
    otherwise the percent (or the first rent row's rate) applies.
    """
    base_psf = deal.rent_schedule[0].rent_psf if deal.rent_schedule else None
    esc = deal.rent_escalation
    if esc is None:
        return RentConfig(base_rent_psf=base_psf)
    if isinstance(esc, CustomRentEscalation):
        return RentConfig(base_rent_psf=base_psf, escalation=CustomRule(periods=bundle.rent_escalation_periods))

    rate = None
    if isinstance(esc, FixedRentEscalation):
        if esc.escalation_mode == "amount" and esc.fixed_escalation_amount is not None:
            return RentConfig(base_rent_psf=base_psf, escalation=FixedAmountRule(amount=esc.fixed_escalation_amount))
        rate = esc.fixed_escalation_percentage
    if rate is None and deal.rent_schedule:
        rate = deal.rent_schedule[0].escalation_percentage
    if rate is None:
        return RentConfig(base_rent_psf=base_psf)
    return RentConfig(base_rent_psf=base_psf, escalation=FixedPercentRule(rate=rate))


def analyze_deal(deal: DealDefinition, settings: Optional[EngineSettings] = None) -> AnalysisResult:
    settings = settings or get_settings()
    t0 = time.perf_counter()

    bundle, issues = normalize(deal)
    options = ScheduleOptions(payment_timing=settings.payment_timing, rounding=settings.rounding)
    schedule = build_monthly_schedule(bundle, rent_config_from_deal(deal, bundle), deal.rsf, options)
    amortization = build_amortization_summary(deal, schedule)
    monthly = build_monthly_cashflow(deal, bundle, schedule, amortization)
    annual = roll_up_to_annual(monthly)
    legacy = build_annual_cashflow(deal, bundle)

    months = len(monthly)
    term_years = months / 12.0
    rate = deal.cashflow_settings.discount_rate
    commencement = bundle.dates.commencement
    metrics = LeaseMetrics(
        discount_rate=rate,
        npv=npv(annual, rate),
        npv_monthly=npv_monthly([(m.payment_date, m.net_cash_flow) for m in monthly], rate, epoch=commencement),
        irr=irr(annual, settings=settings),
        payback_period=payback_period(annual),
        effective_rent_psf=effective_rent_psf(annual, deal.rsf, term_years),
        blended_rate=blended_rate(schedule.summary.total_net_rent, deal.rsf, months),
        free_rent_value=free_rent_value(schedule),
        total_net_cash_flow=sum(m.net_cash_flow for m in monthly),
    )

    logger.info(
        "[analyze] deal=%s months=%d years=%d issues=%d npv=%.2f elapsed=%.3fs",
        deal.id or "-", months, len(annual), len(issues), metrics.npv, time.perf_counter() - t0,
    )
    return AnalysisResult(
        deal=deal,
        bundle=bundle,
        issues=issues,
        rent_schedule=schedule,
        amortization=amortization,
        monthly_lines=monthly,
        annual_lines=annual,
        legacy_annual_lines=legacy,
        reconciliation=reconcile_annual_lines(annual, legacy, settings=settings),
        term_years=term_years,
        metrics=metrics,
    )
