from lease_economics.engine.analysis import rent_config_from_deal
from lease_economics.engine.cashflow import (
    build_amortization_summary,
    build_monthly_cashflow,
    parking_growth_rate,
)
from lease_economics.engine.rent_schedule import build_monthly_schedule
from lease_economics.models import DealDefinition, ScheduleOptions
from lease_economics.services.normalizer import normalize


def _deal(lease_type="NNN", **overrides) -> DealDefinition:
    data = {
        "id": "cf-test",
        "rsf": 10000,
        "lease_type": lease_type,
        "key_dates": {"commencement": "2024-01-01", "expiration": "2026-12-31"},
        "lease_term": {"years": 3, "months": 0, "include_abatement_in_term": True},
        "operating": {"est_op_ex_psf": 12, "escalation": {"escalation_type": "fixed", "escalation_value": 0.03}},
        "rent_schedule": [{"period_start": "2024-01-01", "period_end": "2026-12-31", "rent_psf": 30}],
        "concessions": {"abatement": {"abatement_type": "at_commencement", "free_rent_months": 0}},
    }
    data.update(overrides)
    return DealDefinition.model_validate(data)


def _cashflow(deal):
    bundle, _ = normalize(deal)
    schedule = build_monthly_schedule(bundle, rent_config_from_deal(deal, bundle), deal.rsf, ScheduleOptions())
    amortization = build_amortization_summary(deal, schedule)
    return build_monthly_cashflow(deal, bundle, schedule, amortization), amortization


def _assert_net_invariant(lines):
    for m in lines:
        expected = m.subtotal + m.abatement_credit + m.ti_shortfall + m.transaction_costs + m.amortized_costs
        assert abs(m.net_cash_flow - expected) < 1e-6
        assert abs(m.subtotal - (m.base_rent + m.operating + m.parking + m.other_recurring)) < 1e-6


def test_nnn_operating_is_full_escalated_opex():
    cf, _ = _cashflow(_deal("NNN"))
    assert len(cf) == 36
    assert abs(cf[0].operating - 12 * 10000 / 12) < 1e-6
    assert abs(cf[12].operating - 12 * 1.03 * 10000 / 12) < 1e-6
    assert cf[24].operating > cf[12].operating
    _assert_net_invariant(cf)


def test_fs_operating_is_increase_over_base_year():
    cf, _ = _cashflow(_deal("FS"))
    for m in cf[:12]:
        assert m.operating == 0
    assert abs(cf[12].operating - (12 * 1.03 - 12) * 10000 / 12) < 1e-6
    for m in cf[12:]:
        assert m.operating > 0


def test_fs_later_base_year_defers_pass_through():
    cf, _ = _cashflow(_deal("FS", base_year=2025))
    assert all(m.operating == 0 for m in cf[:24])
    expected = (12 * 1.03 ** 2 - 12 * 1.03) * 10000 / 12
    assert abs(cf[24].operating - expected) < 1e-6


def test_fs_manual_pass_through():
    deal = _deal(
        "FS",
        operating={
            "est_op_ex_psf": 12,
            "use_manual_pass_through": True,
            "manual_pass_through_psf": 5,
            "escalation": {"escalation_value": 0.0},
        },
    )
    cf, _ = _cashflow(deal)
    assert abs(cf[0].operating - 5 * 10000 / 12) < 1e-6


def test_opex_escalation_cap():
    deal = _deal(operating={"est_op_ex_psf": 12, "escalation": {"escalation_value": 0.05, "escalation_cap": 0.02}})
    cf, _ = _cashflow(deal)
    assert abs(cf[12].operating - 12 * 1.02 * 10000 / 12) < 1e-6


def test_custom_opex_escalation():
    deal = _deal(
        operating={
            "est_op_ex_psf": 12,
            "escalation": {
                "escalation_type": "custom",
                "escalation_periods": [
                    {"period_start": "2024-01-01", "period_end": "2024-12-31", "escalation_percentage": 0.0},
                    {"period_start": "2025-01-01", "period_end": "2026-12-31", "escalation_percentage": 0.04},
                ],
            },
        }
    )
    cf, _ = _cashflow(deal)
    assert abs(cf[12].operating - 10000) < 1e-6
    assert abs(cf[24].operating - 10000 * 1.04) < 1e-6


def test_one_time_costs_land_in_month_zero():
    deal = _deal(
        "FS",
        concessions={"ti_allowance_psf": 50, "ti_actual_build_cost_psf": 65, "abatement": {"free_rent_months": 0}},
        transaction_costs={"total": 25000, "legal_fees": 10000, "brokerage_fees": 10000, "due_diligence": 5000},
    )
    cf, _ = _cashflow(deal)
    assert cf[0].transaction_costs == 25000
    assert cf[0].ti_shortfall == (65 - 50) * 10000
    for m in cf[1:]:
        assert m.transaction_costs == 0
        assert m.ti_shortfall == 0
    _assert_net_invariant(cf)


def test_transaction_total_falls_back_to_sum_of_parts():
    deal = _deal(transaction_costs={"legal_fees": 10000, "brokerage_fees": 5000})
    cf, _ = _cashflow(deal)
    assert cf[0].transaction_costs == 15000


def test_ti_allowance_alone_never_enters_cash_flow():
    deal = _deal(concessions={"ti_allowance_psf": 50, "moving_allowance": 20000, "abatement": {"free_rent_months": 0}})
    cf, _ = _cashflow(deal)
    assert all(m.ti_shortfall == 0 for m in cf)


def test_base_only_abatement_keeps_operating():
    deal = _deal(concessions={"abatement": {"free_rent_months": 2, "applies_to": "base_only"}})
    cf, _ = _cashflow(deal)
    assert abs(cf[0].abatement_credit + 25000) < 1e-6
    assert abs(cf[0].net_cash_flow - 10000) < 1e-6
    assert cf[2].abatement_credit == 0


def test_base_plus_nnn_abatement_also_credits_operating():
    deal = _deal(concessions={"abatement": {"free_rent_months": 2, "applies_to": "base_plus_nnn"}})
    cf, _ = _cashflow(deal)
    assert abs(cf[0].abatement_credit + 25000 + 10000) < 1e-6
    assert abs(cf[0].net_cash_flow) < 1e-6
    assert abs(cf[1].net_cash_flow) < 1e-6
    assert cf[2].net_cash_flow > 0
    _assert_net_invariant(cf)


def test_parking_escalates_by_lease_year():
    deal = _deal(parking={"monthly_rate_per_stall": 150, "stalls": 10, "escalation_value": 3})
    cf, _ = _cashflow(deal)
    assert abs(cf[0].parking - 1500) < 1e-6
    assert abs(cf[12].parking - 1500 * 1.03) < 1e-6


def test_parking_growth_rate_reads_whole_percentages():
    assert parking_growth_rate(3) == 0.03
    assert parking_growth_rate(0.03) == 0.03


def test_present_value_amortization_adds_level_payments():
    deal = _deal(
        "FS",
        concessions={"ti_allowance_psf": 50, "abatement": {"free_rent_months": 0}},
        financing={
            "amortize_ti": True,
            "amortization_method": "present_value",
            "interest_rate": 0.06,
        },
    )
    cf, amortization = _cashflow(deal)
    assert amortization.principal == 500000
    assert amortization.annual_rate == 0.06
    assert len(amortization.rows) == 36
    assert all(m.amortized_costs > 0 for m in cf)
    total = sum(m.amortized_costs for m in cf)
    expected = sum(r.interest + r.principal for r in amortization.rows)
    assert abs(total - expected) < 1e-6
    assert total > 500000


def test_straight_line_amortization_ignores_interest_rate():
    deal = _deal(
        concessions={"ti_allowance_psf": 36, "abatement": {"free_rent_months": 0}},
        financing={"amortize_ti": True, "amortization_method": "straight_line", "interest_rate": 0.06},
    )
    cf, amortization = _cashflow(deal)
    assert amortization.annual_rate == 0
    assert abs(cf[0].amortized_costs - 360000 / 36) < 1e-6


def test_amortize_free_rent_uses_schedule_value():
    deal = _deal(
        concessions={"abatement": {"free_rent_months": 2}},
        financing={"amortize_free_rent": True},
    )
    _, amortization = _cashflow(deal)
    assert abs(amortization.principal - 50000) < 1e-6


def test_no_financing_no_amortized_costs():
    cf, amortization = _cashflow(_deal())
    assert amortization.rows == []
    assert all(m.amortized_costs == 0 for m in cf)


def test_cents_rounding_covers_every_monthly_figure():
    deal = _deal(
        rsf=1234,
        operating={"est_op_ex_psf": 10.37, "escalation": {"escalation_value": 0.03}},
        parking={"monthly_rate_per_stall": 101.13, "stalls": 3, "escalation_value": 0.035},
        concessions={"abatement": {"free_rent_months": 2, "applies_to": "base_plus_nnn"}},
        transaction_costs={"total": 1234.567},
    )
    bundle, _ = normalize(deal)
    schedule = build_monthly_schedule(
        bundle, rent_config_from_deal(deal, bundle), deal.rsf, ScheduleOptions(rounding="cents")
    )
    cf = build_monthly_cashflow(deal, bundle, schedule, build_amortization_summary(deal, schedule))

    assert cf[0].operating == 1066.38
    assert cf[0].transaction_costs == 1234.57
    fields = ("base_rent", "abatement_credit", "operating", "parking", "transaction_costs", "subtotal", "net_cash_flow")
    for m in cf:
        for name in fields:
            value = getattr(m, name)
            assert value == round(value, 2)
        expected = m.subtotal + m.abatement_credit + m.ti_shortfall + m.transaction_costs + m.amortized_costs
        assert m.net_cash_flow == round(expected, 2)
        assert m.subtotal == round(m.base_rent + m.operating + m.parking, 2)


def test_zero_cap_holds_fixed_and_custom_opex_flat():
    fixed = _deal(operating={"est_op_ex_psf": 12, "escalation": {"escalation_value": 0.05, "escalation_cap": 0}})
    custom = _deal(
        operating={
            "est_op_ex_psf": 12,
            "escalation": {
                "escalation_type": "custom",
                "escalation_cap": 0,
                "escalation_periods": [
                    {"period_start": "2024-01-01", "period_end": "2026-12-31", "escalation_percentage": 0.05},
                ],
            },
        }
    )
    fixed_cf, _ = _cashflow(fixed)
    custom_cf, _ = _cashflow(custom)
    assert abs(fixed_cf[24].operating - 10000) < 1e-6
    assert abs(custom_cf[24].operating - 10000) < 1e-6


def test_custom_cap_limits_each_period():
    deal = _deal(
        operating={
            "est_op_ex_psf": 12,
            "escalation": {
                "escalation_type": "custom",
                "escalation_cap": 0.02,
                "escalation_periods": [
                    {"period_start": "2024-01-01", "period_end": "2025-12-31", "escalation_percentage": 0.05},
                    {"period_start": "2026-01-01", "period_end": "2026-12-31", "escalation_percentage": 0.01},
                ],
            },
        }
    )
    cf, _ = _cashflow(deal)
    assert abs(cf[12].operating - 10000 * 1.02) < 1e-6
    assert abs(cf[24].operating - 10000 * 1.02 ** 2) < 1e-6
