"""Snapshot reconciliation between a local clock view and the record store.

A clock view may have been suspended, reloaded, or be one of several open
views of the same tournament. Whenever a record arrives from the store, the
view rebases onto it if (and only if) it is strictly newer than anything the
view has already adopted:

- running snapshots are fast-forwarded by the wall-clock time elapsed since
  the store wrote them (floored to whole seconds, never negative)
- draft/paused/completed snapshots are adopted verbatim
- a record that carries a schedule replaces the local one before the level
  index is checked against it; without one the index is clamped locally
- the adopted updatedAt becomes the new high-water mark; older or equal
  timestamps are ignored so a stale write can never rewind the clock

This is last-writer-wins by timestamp. Two views writing at the same time can
still clobber each other; nothing here merges or locks.
"""
from __future__ import annotations

import logging
import math
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from pydantic import ValidationError as PydanticValidationError

from .clock import COMPLETED, RUNNING, ValidationError
from .levels import normalize_levels
from .validation import ValidatedSnapshot

logger = logging.getLogger(__name__)


@dataclass
class ReconcileOutcome:
    """Result of reconciling a remote snapshot into local state."""

    state: Dict[str, Any]
    applied: bool
    reason: str  # 'applied' | 'stale_snapshot' | 'missing_timestamp' | 'invalid_snapshot'
    elapsed_seconds: int = 0
    # Rebased onto a running clock with no time left: the caller must
    # complete the level (the controller does this automatically).
    level_complete_due: bool = False


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string or datetime to an aware UTC datetime.

    Naive values are taken as UTC. Anything unparseable gives None.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, str) and value.strip():
        try:
            return _as_utc(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def format_timestamp(value: datetime) -> str:
    return _as_utc(value).isoformat()


def advance_high_water(state: Dict[str, Any], persisted_at: Any) -> bool:
    """Move state['lastSyncedAt'] forward to persisted_at (in place).

    Used when the store acknowledges one of our own writes, so that the echo
    of that write is not adopted again. Never moves the mark backwards.
    """
    stamp = parse_timestamp(persisted_at)
    if stamp is None:
        return False
    current = parse_timestamp(state.get("lastSyncedAt"))
    if current is not None and stamp <= current:
        return False
    state["lastSyncedAt"] = format_timestamp(stamp)
    state["synced"] = True
    return True


def check_snapshot_freshness(
    state: Mapping[str, Any], persisted_at: datetime | None
) -> ValidationError | None:
    """Decide whether a snapshot written at persisted_at may be adopted.

    Validation rules:
        1. Nothing adopted yet → accept (first load), timestamp or not
        2. No timestamp after the first load → missing_timestamp
        3. persisted_at <= lastSyncedAt → stale_snapshot

    Use case:
        View A pauses the clock (written at T2) while view B's earlier start
        (written at T1 < T2) is still in flight. When B's record reaches A
        it is rejected as stale_snapshot and A keeps showing the pause.
    """
    last_synced = parse_timestamp(state.get("lastSyncedAt"))
    if not state.get("synced") and last_synced is None:
        return None
    if persisted_at is None:
        return ValidationError(
            kind="missing_timestamp",
            message="snapshot has no updatedAt and the clock is already synced",
        )
    if last_synced is not None and persisted_at <= last_synced:
        return ValidationError(kind="stale_snapshot")
    return None


def elapsed_since(persisted_at: datetime, now: datetime) -> int:
    """Whole seconds from persisted_at to now, floored, never negative."""
    return max(0, math.floor((_as_utc(now) - persisted_at).total_seconds()))


def reconcile(
    local: Dict[str, Any],
    remote: Mapping[str, Any],
    now: datetime | None = None,
) -> ReconcileOutcome:
    """Merge a remote record into local clock state.

    Args:
        local: Current clock state dict (not mutated)
        remote: Record or snapshot dict from the store (status,
            currentLevelIndex, timeRemainingSeconds, updatedAt and
            optionally levels)
        now: Wall-clock time of the merge; defaults to the current UTC time

    Returns:
        ReconcileOutcome; when applied is False, state is an unchanged copy
        of local and reason says why the remote was ignored.
    """
    try:
        snapshot = ValidatedSnapshot.model_validate(dict(remote))
    except PydanticValidationError as e:
        logger.warning(f"Ignoring invalid clock snapshot: {e}")
        return ReconcileOutcome(
            state=deepcopy(local), applied=False, reason="invalid_snapshot"
        )

    persisted_at = _as_utc(snapshot.updatedAt) if snapshot.updatedAt else None
    rejection = check_snapshot_freshness(local, persisted_at)
    if rejection is not None:
        logger.info(
            f"Ignoring {rejection.kind} (updatedAt={remote.get('updatedAt')}, "
            f"lastSyncedAt={local.get('lastSyncedAt')})"
        )
        return ReconcileOutcome(
            state=deepcopy(local), applied=False, reason=rejection.kind
        )

    new_state: Dict[str, Any] = deepcopy(local)
    if snapshot.levels is not None:
        # The schedule may have been edited in another view.
        new_state["levels"] = normalize_levels(snapshot.levels)
    levels = new_state.get("levels") or []
    elapsed = 0

    if not levels:
        new_state["status"] = COMPLETED
        new_state["currentLevelIndex"] = 0
        new_state["timeRemainingSeconds"] = 0
    else:
        remaining = snapshot.timeRemainingSeconds
        if snapshot.status == RUNNING and persisted_at is not None:
            elapsed = elapsed_since(persisted_at, now or datetime.now(timezone.utc))
            remaining = max(0, remaining - elapsed)
        new_state["status"] = snapshot.status
        new_state["currentLevelIndex"] = min(snapshot.currentLevelIndex, len(levels) - 1)
        new_state["timeRemainingSeconds"] = remaining

    if persisted_at is not None:
        new_state["lastSyncedAt"] = format_timestamp(persisted_at)
    new_state["synced"] = True

    level_complete_due = (
        new_state["status"] == RUNNING and new_state["timeRemainingSeconds"] == 0
    )
    logger.debug(
        f"Rebased clock onto {snapshot.status} snapshot: level "
        f"{new_state['currentLevelIndex']}, {new_state['timeRemainingSeconds']}s left "
        f"({elapsed}s elapsed)"
    )
    return ReconcileOutcome(
        state=new_state,
        applied=True,
        reason="applied",
        elapsed_seconds=elapsed,
        level_complete_due=level_complete_due,
    )
