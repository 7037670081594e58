from datetime import date

from lease_economics import analyze_deal
from lease_economics.config import EngineSettings
from lease_economics.engine.analysis import rent_config_from_deal
from lease_economics.engine.metrics import npv
from lease_economics.models import (
    CustomRule,
    DealDefinition,
    FixedAmountRule,
    FixedPercentRule,
)
from lease_economics.services.normalizer import normalize


def _deal(**overrides) -> DealDefinition:
    data = {
        "id": "analysis-test",
        "name": "Suite 400",
        "rsf": 10000,
        "lease_type": "NNN",
        "key_dates": {"commencement": "2024-01-01", "expiration": "2028-12-31"},
        "operating": {"est_op_ex_psf": 10, "escalation": {"escalation_value": 0.03}},
        "rent_schedule": [{"period_start": "2024-01-01", "period_end": "2028-12-31", "rent_psf": 30}],
        "rent_escalation": {"fixed_escalation_percentage": 0.03},
        "concessions": {"ti_allowance_psf": 40, "abatement": {"free_rent_months": 3}},
        "cashflow_settings": {"discount_rate": 0.08},
    }
    data.update(overrides)
    return DealDefinition.model_validate(data)


def _rule(deal):
    bundle, _ = normalize(deal)
    return rent_config_from_deal(deal, bundle)


def test_rent_config_picks_the_deal_rule():
    assert _rule(_deal()).escalation == FixedPercentRule(rate=0.03)
    assert _rule(_deal()).base_rent_psf == 30

    amount = _rule(_deal(rent_escalation={"fixed_escalation_amount": 1.5, "escalation_mode": "amount"}))
    assert amount.escalation == FixedAmountRule(amount=1.5)

    no_mode = _rule(_deal(rent_escalation={"fixed_escalation_amount": 1.5}))
    assert no_mode.escalation is None

    custom = _rule(
        _deal(
            rent_escalation={
                "escalation_type": "custom",
                "escalation_periods": [
                    {"period_start": "2024-01-01", "period_end": "2028-12-31", "escalation_percentage": 0.02}
                ],
            }
        )
    )
    assert isinstance(custom.escalation, CustomRule)
    assert custom.escalation.periods[0].escalation_percentage == 0.02

    assert _rule(_deal(rent_escalation=None)).escalation is None


def test_row_rate_backs_up_a_missing_percentage():
    deal = _deal(
        rent_escalation={"escalation_type": "fixed"},
        rent_schedule=[
            {"period_start": "2024-01-01", "period_end": "2028-12-31", "rent_psf": 30, "escalation_percentage": 0.025}
        ],
    )
    assert _rule(deal).escalation == FixedPercentRule(rate=0.025)


def test_analyze_deal_end_to_end():
    result = analyze_deal(_deal())
    assert len(result.monthly_lines) == 60
    assert len(result.annual_lines) == 5
    assert len(result.legacy_annual_lines) == 5
    assert result.term_years == 5
    assert result.issues == []

    metrics = result.metrics
    assert metrics.discount_rate == 0.08
    assert abs(metrics.npv - npv(result.annual_lines, 0.08)) < 1e-6
    assert abs(metrics.free_rent_value - 75000) < 1e-6
    assert abs(metrics.total_net_cash_flow - sum(y.net_cash_flow for y in result.annual_lines)) < 1e-6
    assert metrics.npv_monthly > 0
    assert metrics.payback_period == 0
    assert abs(metrics.blended_rate - result.rent_schedule.summary.total_net_rent / (10000 * 5)) < 1e-9
    assert abs(metrics.effective_rent_psf - metrics.total_net_cash_flow / (10000 * 5)) < 1e-6


def test_analyze_deal_reports_issues_without_failing():
    result = analyze_deal(_deal(key_dates={"expiration": "2028-12-31"}))
    assert "missing_commencement" in [i.code for i in result.issues]
    assert result.monthly_lines == []
    assert result.metrics.npv == 0


def test_settings_control_payment_timing():
    result = analyze_deal(_deal(), EngineSettings(payment_timing="arrears"))
    first = result.monthly_lines[0]
    assert first.payment_date == date(2024, 1, 31)
    assert result.rent_schedule.assumptions.payment_timing == "arrears"


def test_analysis_leaves_deal_unchanged():
    deal = _deal()
    before = deal.model_dump()
    result = analyze_deal(deal)
    assert deal.model_dump() == before
    assert result.deal == deal


def test_caller_settings_bound_the_irr():
    result = analyze_deal(_deal(), EngineSettings(irr_max_rate=0.5))
    assert result.metrics.irr <= 0.5
    assert analyze_deal(_deal()).metrics.irr > 0.5


def test_reconciliation_uses_caller_tolerance():
    result = analyze_deal(_deal())
    assert len(result.reconciliation) == 5
    assert all(row.within_tolerance for row in result.reconciliation)

    strict = analyze_deal(_deal(), EngineSettings(reconcile_tolerance=0.0))
    for row in strict.reconciliation:
        assert row.within_tolerance == (abs(row.difference) == 0)
