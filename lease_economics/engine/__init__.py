"""Calculation engine: schedules, cash flow, roll-up and metrics."""

from .amortization import build_amortization_schedule, termination_fee_at_month
from .cashflow import build_amortization_summary, build_monthly_cashflow
from .equivalency import (
    free_rent_to_rate_equivalent_psf_yr,
    pv_of_free_rent_months,
    pv_of_rate_delta,
    pv_of_term_extension,
    pv_of_ti,
    rate_to_free_rent_months,
    rate_to_ti_equivalent_psf,
    term_extension_to_additional_ti_psf,
    ti_to_rate_equivalent_psf_yr,
)
from .legacy_annual import build_annual_cashflow
from .metrics import (
    average_annual_return,
    blended_rate,
    cash_on_cash_return,
    effective_rent_psf,
    free_rent_value,
    irr,
    landlord_yield,
    npv,
    npv_monthly,
    payback_period,
)
from .rent_schedule import build_monthly_schedule
from .rollup import reconcile_annual_lines, roll_up_to_annual

# analysis and scenario import the normalizer service, which imports this
# package; import them as lease_economics.engine.analysis / .scenario.
