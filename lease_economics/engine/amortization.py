"""
Level-payment amortization.

Monthly compounding is derived from the effective annual rate; payments are
level across the term and values are left unrounded.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from lease_economics.models import AmortizationRow


def monthly_rate_from_annual(annual_rate: float) -> float:
    """Effective monthly rate equivalent to an effective annual rate."""
    if annual_rate == 0:
        return 0.0
    return (1.0 + annual_rate) ** (1.0 / 12.0) - 1.0


def level_payment(principal: float, monthly_rate: float, months: int) -> float:
    if monthly_rate == 0:
        return principal / months
    return principal * monthly_rate / (1.0 - (1.0 + monthly_rate) ** (-months))


def build_amortization_schedule(principal: float, annual_rate: float, months: int) -> List[AmortizationRow]:
    if principal <= 0 or months <= 0:
        return []
    rate = monthly_rate_from_annual(annual_rate)
    payment = level_payment(principal, rate, months)

    rows: List[AmortizationRow] = []
    balance = principal
    for month in range(1, months + 1):
        interest = balance * rate
        principal_paid = payment - interest
        balance = max(0.0, balance - principal_paid)
        rows.append(AmortizationRow(month=month, interest=interest, principal=principal_paid, ending_balance=balance))
    return rows


def termination_fee_at_month(
    rows: Sequence[AmortizationRow],
    month_index: int,
    penalty_months: float,
    monthly_rent: Optional[float] = None,
) -> float:
    """
    Early-termination fee: unamortized balance at a 0-based lease month plus
    penalty months of current rent.

    The month index is clamped to the schedule; without a monthly rent only
    the balance counts, and negative penalty months count as none.
    """
    penalty = max(0.0, penalty_months) * (monthly_rent or 0.0)
    if not rows:
        return penalty
    index = min(max(0, month_index), len(rows) - 1)
    return rows[index].ending_balance + penalty
