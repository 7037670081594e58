import pytest

from lease_economics.engine.amortization import (
    build_amortization_schedule,
    level_payment,
    monthly_rate_from_annual,
    termination_fee_at_month,
)


def test_zero_rate_is_straight_line():
    rows = build_amortization_schedule(1200, 0.0, 12)
    assert len(rows) == 12
    for row in rows:
        assert row.interest == 0
        assert abs(row.principal - 100) < 1e-9
    assert rows[0].month == 1
    assert abs(rows[-1].ending_balance) < 1e-9


def test_level_payment_schedule_pays_off():
    rows = build_amortization_schedule(500000, 0.06, 36)
    assert len(rows) == 36
    assert abs(rows[-1].ending_balance) < 1e-6

    payments = [r.interest + r.principal for r in rows]
    assert max(payments) - min(payments) < 1e-6
    assert abs(sum(r.principal for r in rows) - 500000) < 1e-6

    balance = 500000.0
    for row in rows:
        assert abs(row.ending_balance - max(0.0, balance - row.principal)) < 1e-6
        balance = row.ending_balance


def test_interest_declines_as_balance_falls():
    rows = build_amortization_schedule(100000, 0.08, 60)
    assert rows[0].interest > rows[-1].interest
    assert abs(rows[0].interest - 100000 * monthly_rate_from_annual(0.08)) < 1e-9


@pytest.mark.parametrize("principal,months", [(0, 12), (-500, 12), (1000, 0), (1000, -3)])
def test_degenerate_inputs_give_empty_schedule(principal, months):
    assert build_amortization_schedule(principal, 0.05, months) == []


def test_monthly_rate_compounds_to_annual():
    m = monthly_rate_from_annual(0.12)
    assert abs((1 + m) ** 12 - 1.12) < 1e-12
    assert monthly_rate_from_annual(0) == 0


def test_level_payment_matches_annuity_formula():
    i = monthly_rate_from_annual(0.06)
    expected = 10000 * i / (1 - (1 + i) ** -24)
    assert abs(level_payment(10000, i, 24) - expected) < 1e-9
    assert level_payment(1200, 0.0, 12) == 100


def test_termination_fee_is_balance_plus_penalty():
    rows = build_amortization_schedule(120000, 0.06, 60)
    fee = termination_fee_at_month(rows, 23, 3, monthly_rent=10000)
    assert abs(fee - (rows[23].ending_balance + 30000)) < 1e-9
    assert termination_fee_at_month(rows, 23, 3) == rows[23].ending_balance


def test_termination_fee_clamps_month_and_penalty():
    rows = build_amortization_schedule(1200, 0.0, 12)
    assert termination_fee_at_month(rows, -4, 0) == rows[0].ending_balance
    assert abs(termination_fee_at_month(rows, 99, 0)) < 1e-9
    assert termination_fee_at_month(rows, 5, -2, monthly_rent=500) == rows[5].ending_balance


def test_termination_fee_without_schedule_is_penalty_only():
    assert termination_fee_at_month([], 10, 2, monthly_rent=4000) == 8000
    assert termination_fee_at_month([], 10, 2) == 0
