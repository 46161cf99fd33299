"""Prize pool aggregation over the player roster and bonus catalog.

Everything here is recomputed from the roster on every call; player and bonus
state changes often and the sums are cheap. Inputs are trusted: negative
amounts or counts are not rejected, they simply flow through the arithmetic.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .payouts import PayoutTier, compute_payouts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrizePoolSummary:
    total_entries: int
    active_players: int
    gross_prize_pool: float
    rake_amount: float
    net_prize_pool: float
    total_chips: int
    average_stack: int


@dataclass(frozen=True)
class TournamentSummary:
    prize_pool: PrizePoolSummary
    payouts: tuple[PayoutTier, ...]


def _bonus_index(bonuses: Iterable[Mapping[str, Any]] | None) -> dict[str, Mapping[str, Any]]:
    index: dict[str, Mapping[str, Any]] = {}
    for bonus in bonuses or []:
        bonus_id = bonus.get("id")
        if bonus_id is not None:
            index[str(bonus_id)] = bonus
    return index


def _is_active(player: Mapping[str, Any]) -> bool:
    return (player.get("status") or "active") == "active"


def aggregate_prize_pool(
    players: Iterable[Mapping[str, Any]] | None,
    buy_in: float,
    starting_chips: int,
    bonuses: Iterable[Mapping[str, Any]] | None = None,
    rake_percentage: float | None = 0,
) -> PrizePoolSummary:
    """
    Aggregate entries, money and chips for a tournament.

    Args:
      players: roster entries with reEntries, appliedBonuses and status.
      buy_in: price of one entry.
      starting_chips: chips handed out per entry.
      bonuses: catalog of add-ons ({id, cost, chips}); unknown ids count as 0.
      rake_percentage: share of the gross pool withheld (0-100).
    """
    catalog = _bonus_index(bonuses)
    total_entries = 0
    active_players = 0
    bonus_cost = 0.0
    bonus_chips = 0

    for player in players or []:
        total_entries += 1 + (player.get("reEntries") or 0)
        if _is_active(player):
            active_players += 1
        for bonus_id in player.get("appliedBonuses") or []:
            bonus = catalog.get(str(bonus_id))
            if bonus is None:
                continue
            bonus_cost += bonus.get("cost") or 0
            bonus_chips += bonus.get("chips") or 0

    gross = total_entries * buy_in + bonus_cost
    total_chips = total_entries * starting_chips + bonus_chips
    rake_amount = gross * (rake_percentage / 100) if rake_percentage else 0
    average_stack = (
        total_chips // active_players if active_players > 0 else starting_chips
    )

    return PrizePoolSummary(
        total_entries=total_entries,
        active_players=active_players,
        gross_prize_pool=gross,
        rake_amount=rake_amount,
        net_prize_pool=gross - rake_amount,
        total_chips=total_chips,
        average_stack=average_stack,
    )


def summarize_tournament(record: Mapping[str, Any]) -> TournamentSummary:
    """Prize pool and payout table for a persisted tournament record."""
    rake = record.get("rakePercentage") or 0
    summary = aggregate_prize_pool(
        record.get("players"),
        record.get("buyIn") or 0,
        record.get("startingChips") or 0,
        record.get("bonuses"),
        rake_percentage=rake,
    )
    payouts = compute_payouts(
        summary.total_entries,
        summary.gross_prize_pool,
        rake,
        record.get("customPayouts"),
    )
    logger.debug(
        f"Tournament {record.get('id')}: {summary.total_entries} entries, "
        f"gross {summary.gross_prize_pool}, {len(payouts)} paid places"
    )
    return TournamentSummary(prize_pool=summary, payouts=tuple(payouts))
