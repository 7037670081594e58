"""Escalation arithmetic shared by the rent schedule and the cash-flow builders."""

from __future__ import annotations

from datetime import date
from typing import Dict, Optional, Sequence

from lease_economics.models import NormalizedEscalationPeriod


def escalate(value: float, years: int, rate: float = 0.0, cap: Optional[float] = None) -> float:
    """Compound `value` for `years` lease years at `rate`, capped; negative rates are floored at 0."""
    if years <= 0:
        return value
    effective = min(rate, cap) if cap is not None else rate
    return value * (1.0 + max(0.0, effective)) ** years


class EscalationLookup:
    """
    Value per lease year under a list of dated escalation periods.

    Each lease year maps to the first period (in the order given) whose range
    contains the year's start date. A period's rate compounds once per lease
    year spent in it, starting from the value reached at the end of the
    previous periods. Unmapped years keep the base value.
    """

    def __init__(self, base: float, year_starts: Sequence[date], periods: Sequence[NormalizedEscalationPeriod]):
        self.base = base
        self.periods = list(periods)
        self.year_to_period: Dict[int, int] = {}
        for year, year_start in enumerate(year_starts):
            for idx, period in enumerate(self.periods):
                if period.period_start <= year_start <= period.period_end:
                    self.year_to_period[year] = idx
                    break

        self.first_year: Dict[int, int] = {}
        self.counts = [0] * len(self.periods)
        for year, idx in self.year_to_period.items():
            if idx not in self.first_year or year < self.first_year[idx]:
                self.first_year[idx] = year
            self.counts[idx] += 1

    def _rate(self, idx: int, cap: Optional[float]) -> float:
        rate = self.periods[idx].escalation_percentage
        return min(rate, cap) if cap is not None else rate

    def _start(self, idx: int, cap: Optional[float]) -> float:
        """Value reached when period `idx` begins, after the years spent in earlier periods."""
        current = self.base
        for earlier in range(idx):
            if self.counts[earlier] > 0:
                current = current * (1.0 + self._rate(earlier, cap)) ** self.counts[earlier]
        return current

    def value(self, year: int, cap: Optional[float] = None) -> float:
        """Value for a lease year; a cap (0 included) limits every period's rate."""
        idx = self.year_to_period.get(year)
        if idx is None:
            return self.base
        elapsed = year - self.first_year[idx]
        return self._start(idx, cap) * (1.0 + self._rate(idx, cap)) ** elapsed
