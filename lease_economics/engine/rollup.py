"""Annual roll-up of monthly cash flow, and reconciliation against the annual-only path."""

from __future__ import annotations

from typing import List, Optional, Sequence

from lease_economics.config import EngineSettings, get_settings
from lease_economics.models import AnnualLine, MonthlyLine, ReconciliationRow

_SUMMED_FIELDS = (
    "base_rent",
    "abatement_credit",
    "operating",
    "parking",
    "other_recurring",
    "ti_shortfall",
    "transaction_costs",
    "amortized_costs",
    "subtotal",
    "net_cash_flow",
)


def roll_up_to_annual(months: Sequence[MonthlyLine]) -> List[AnnualLine]:
    """
    Sum consecutive 12-month blocks from lease month 0 into lease years.

    A trailing partial block becomes a shorter final year. Every amount is
    summed, so annual totals equal monthly totals field by field.
    """
    years: List[AnnualLine] = []
    for offset in range(0, len(months), 12):
        block = months[offset:offset + 12]
        totals = {name: sum(getattr(m, name) for m in block) for name in _SUMMED_FIELDS}
        years.append(
            AnnualLine(
                year=offset // 12 + 1,
                start_date=block[0].start_date,
                end_date=block[-1].end_date,
                months=len(block),
                **totals,
            )
        )
    return years


def reconcile_annual_lines(
    primary: Sequence[AnnualLine],
    legacy: Sequence[AnnualLine],
    tolerance: Optional[float] = None,
    settings: Optional[EngineSettings] = None,
) -> List[ReconciliationRow]:
    """Per-year net cash-flow differences (primary minus legacy)."""
    tol = (settings or get_settings()).reconcile_tolerance if tolerance is None else tolerance
    rows: List[ReconciliationRow] = []
    for i in range(max(len(primary), len(legacy))):
        p = primary[i].net_cash_flow if i < len(primary) else None
        q = legacy[i].net_cash_flow if i < len(legacy) else None
        diff = (p or 0.0) - (q or 0.0)
        rows.append(
            ReconciliationRow(
                year=i + 1,
                primary_net_cash_flow=p,
                legacy_net_cash_flow=q,
                difference=diff,
                within_tolerance=p is not None and q is not None and abs(diff) <= tol,
            )
        )
    return rows
