"""Payout engine (entry-count brackets + optional custom tiers).

Single source of truth for prize distribution across timer/management views:
- Rake is withheld from the gross pool before anything is split.
- Custom percentages replace the bracket table verbatim; their sum is not
  checked here (see validation.custom_payouts_warning for the edit-time check).
- Each tier is rounded on its own, so the amounts may drift from the net pool
  by a few units. That drift is accepted, not redistributed.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


# (min_entries, max_entries or None for open-ended, percentages)
PAYOUT_BRACKETS: tuple[tuple[int, int | None, tuple[float, ...]], ...] = (
    (1, 4, (100,)),
    (5, 10, (65, 35)),
    (11, 20, (50, 30, 20)),
    (21, None, (40, 30, 20, 10)),
)


@dataclass(frozen=True)
class PayoutTier:
    position: int
    percentage: float
    amount: int


def _round_half_up(value: float) -> int:
    # Halves go up, including for negatives (-2.5 -> -2).
    return int(math.floor(value + 0.5))


def net_prize_pool(gross_prize_pool: float, rake_percentage: float | None = 0) -> float:
    return gross_prize_pool * (1 - ((rake_percentage or 0) / 100))


def payout_bracket(total_entries: int) -> tuple[float, ...]:
    """Bracket percentages for an entry count (1-4, 5-10, 11-20, 21+)."""
    for low, high, percentages in PAYOUT_BRACKETS:
        if total_entries >= low and (high is None or total_entries <= high):
            return percentages
    # Below the first bracket; callers filter this case out before asking.
    return PAYOUT_BRACKETS[0][2]


def compute_payouts(
    total_entries: int,
    gross_prize_pool: float,
    rake_percentage: float | None = 0,
    custom_percentages: Sequence[float] | None = None,
) -> list[PayoutTier]:
    """
    Compute the payout table for the current entry count and prize pool.

    Args:
      total_entries: players plus re-entries.
      gross_prize_pool: money collected before rake.
      rake_percentage: share withheld before the split (0-100).
      custom_percentages: per-position percentages; overrides the brackets
        when non-empty.

    Returns an empty list when there is nothing to pay out.
    """
    if total_entries <= 0 or gross_prize_pool <= 0:
        return []

    net = net_prize_pool(gross_prize_pool, rake_percentage)

    if custom_percentages:
        percentages: Sequence[float] = list(custom_percentages)
    else:
        percentages = payout_bracket(total_entries)

    return [
        PayoutTier(
            position=index + 1,
            percentage=percentage,
            amount=_round_half_up(net * (percentage / 100)),
        )
        for index, percentage in enumerate(percentages)
    ]


def ordinal(position: int) -> str:
    """Place label: 1st, 2nd, 3rd, 4th, ..., 11th, 12th, 13th, 21st."""
    if 10 <= position % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(position % 10, "th")
    return f"{position}{suffix}"
