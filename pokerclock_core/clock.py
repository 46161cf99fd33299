"""Core clock state transitions (pure, no UI/store).

This module implements the tournament clock as a pure state machine.
All functions are deterministic and side-effect free (no I/O, no timers, no store).

Architecture:
- State is a plain dict with keys like status, currentLevelIndex, timeRemainingSeconds, levels
- Commands are plain dicts with a 'type' field (START, PAUSE, TICK, JUMP_TO_LEVEL, etc.)
- apply_command() takes (state, cmd) and returns CommandOutcome with the new state
- Mutations are performed on a deepcopy; the caller's state is never touched
- ClockController (controller.py) owns one state per view and turns outcomes into hook calls

Key concepts:
- status: 'draft' | 'running' | 'paused' | 'completed'; only 'running' ticks
- snapshot_required: True for discrete transitions that must be persisted.
  Plain ticks are local only; the store sees sparse checkpoints, which the
  sync reconciler relies on for its elapsed-time compensation.
- stateVersion: monotonic counter bumped on every persisted transition
- events: notification names for the presentation layer
  ('tick', 'warning', 'level_advanced', 'completed')

State transitions:
- START: draft/paused -> running (no-op for an empty schedule)
- PAUSE: running -> paused, remaining time frozen
- TOGGLE: PAUSE when running, START otherwise
- TICK: one second off the clock; reaching 0 completes the level in the same tick
- LEVEL_COMPLETE: advance to the next level (stay running) or finish the tournament
- JUMP_TO_LEVEL / NEXT_LEVEL / PREVIOUS_LEVEL: full duration of the target level, always paused;
  an index outside the schedule is silently ignored
- RESET: running/paused -> paused with the full duration of the current level
"""
from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .levels import get_level, level_duration_seconds, next_level
from .types import ClockSnapshot, Level

DRAFT = "draft"
RUNNING = "running"
PAUSED = "paused"
COMPLETED = "completed"


class ClockConfig:
    """Timing configuration shared by the state machine and the tick source"""

    TICK_INTERVAL_SECONDS = 1.0
    # Warning notifications fire while the remaining time is 1..WARNING_SECONDS.
    WARNING_SECONDS = 10


@dataclass
class CommandOutcome:
    """Result of applying a clock command."""

    state: Dict[str, Any]
    cmd_payload: Dict[str, Any]
    snapshot_required: bool
    events: List[str] = field(default_factory=list)


@dataclass
class ValidationError:
    """Represents a non-transport validation failure (pure core)."""

    kind: str
    message: str | None = None
    status_code: int | None = None


def default_state(levels: List[Level] | None = None) -> Dict[str, Any]:
    """Create the clock state for a freshly created tournament.

    Args:
        levels: Schedule in play order; copied, never re-sorted

    Returns:
        Dict with keys:
        - status: 'draft', or 'completed' when the schedule is empty
        - currentLevelIndex: 0
        - timeRemainingSeconds: full duration of level 0 (0 for an empty schedule)
        - levels: the schedule
        - lastSyncedAt: None until a snapshot has been adopted or acknowledged
        - synced: False until the first reconcile
        - stateVersion: 0
    """
    schedule = deepcopy(list(levels or []))
    first = get_level(schedule, 0)
    return {
        "status": DRAFT if first is not None else COMPLETED,
        "currentLevelIndex": 0,
        "timeRemainingSeconds": level_duration_seconds(first),
        "levels": schedule,
        "lastSyncedAt": None,
        "synced": False,
        "stateVersion": 0,
    }


def current_level(state: Dict[str, Any]) -> Level | None:
    return get_level(state.get("levels"), state.get("currentLevelIndex", 0))


def build_snapshot(state: Dict[str, Any]) -> ClockSnapshot:
    """Record patch pushed to the store on a discrete transition.

    updatedAt is deliberately absent: the store assigns it on write.
    """
    return {
        "status": state.get("status") or DRAFT,
        "currentLevelIndex": int(state.get("currentLevelIndex") or 0),
        "timeRemainingSeconds": max(0, int(state.get("timeRemainingSeconds") or 0)),
    }


def _coerce_idx(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            return int(stripped, 10)
        except ValueError:
            return None
    return None


def _jump(new_state: Dict[str, Any], index: int | None) -> bool:
    """Move to levels[index], paused, with its full duration.

    Returns False (and leaves new_state alone) for an index outside the schedule.
    """
    target = get_level(new_state.get("levels"), index)
    if target is None:
        return False
    new_state["currentLevelIndex"] = index
    new_state["timeRemainingSeconds"] = level_duration_seconds(target)
    new_state["status"] = PAUSED
    return True


def _complete_level(new_state: Dict[str, Any], events: List[str]) -> None:
    """Advance to the next level, or finish the tournament after the last one."""
    levels = new_state.get("levels") or []
    index = int(new_state.get("currentLevelIndex") or 0)
    upcoming = next_level(levels, index)
    if upcoming is not None:
        new_state["currentLevelIndex"] = index + 1
        new_state["timeRemainingSeconds"] = level_duration_seconds(upcoming)
        new_state["status"] = RUNNING
        events.append("level_advanced")
    else:
        # Index stays on the last level so the final blinds remain displayable.
        new_state["status"] = COMPLETED
        new_state["timeRemainingSeconds"] = 0
        events.append("completed")


def _apply_transition(state: Dict[str, Any], cmd: Dict[str, Any]) -> CommandOutcome:
    """Apply pure state transition without side effects.

    Args:
        state: Current clock state dict (not mutated)
        cmd: Command dict with 'type' field and command-specific params

    Returns:
        CommandOutcome with:
        - state: Updated state dict (deepcopy with changes applied)
        - cmd_payload: Command enriched with resolved fields (e.g. jump index)
        - snapshot_required: True if this change must be persisted
        - events: Notifications for the presentation layer

    Commands that are not valid in the current status leave the state as it
    was and do not require a snapshot.
    """
    new_state: Dict[str, Any] = deepcopy(state)
    ctype = cmd.get("type")
    snapshot_required = False
    events: List[str] = []
    payload = dict(cmd)
    status = new_state.get("status") or DRAFT

    if ctype == "TOGGLE":
        ctype = "PAUSE" if status == RUNNING else "START"
        payload["resolvedType"] = ctype

    if ctype == "START":
        if status in {DRAFT, PAUSED} and new_state.get("levels"):
            new_state["status"] = RUNNING
            snapshot_required = True

    elif ctype == "PAUSE":
        if status == RUNNING:
            new_state["status"] = PAUSED
            snapshot_required = True

    elif ctype == "TICK":
        if status == RUNNING:
            remaining = int(new_state.get("timeRemainingSeconds") or 0)
            if remaining > 0:
                remaining -= 1
                new_state["timeRemainingSeconds"] = remaining
                payload["tickRemaining"] = remaining
                events.append("tick")
                if 0 < remaining <= ClockConfig.WARNING_SECONDS:
                    events.append("warning")
            if remaining <= 0:
                new_state["timeRemainingSeconds"] = 0
                _complete_level(new_state, events)
                snapshot_required = True

    elif ctype == "LEVEL_COMPLETE":
        if status == RUNNING:
            _complete_level(new_state, events)
            snapshot_required = True

    elif ctype in {"JUMP_TO_LEVEL", "NEXT_LEVEL", "PREVIOUS_LEVEL"}:
        if ctype == "JUMP_TO_LEVEL":
            index = _coerce_idx(cmd.get("index"))
        else:
            step = 1 if ctype == "NEXT_LEVEL" else -1
            index = int(new_state.get("currentLevelIndex") or 0) + step
        payload["index"] = index
        if _jump(new_state, index):
            snapshot_required = True

    elif ctype == "RESET":
        if status in {RUNNING, PAUSED}:
            new_state["timeRemainingSeconds"] = level_duration_seconds(
                current_level(new_state)
            )
            new_state["status"] = PAUSED
            snapshot_required = True

    if snapshot_required:
        new_state["stateVersion"] = int(new_state.get("stateVersion") or 0) + 1

    return CommandOutcome(
        state=new_state,
        cmd_payload=payload,
        snapshot_required=snapshot_required,
        events=events,
    )


def apply_command(state: Dict[str, Any], cmd: Dict[str, Any]) -> CommandOutcome:
    """Apply a clock command to a state dict.

    Args:
        state: Current clock state dict (never mutated)
        cmd: Command dict with 'type' field and command-specific params

    Returns:
        CommandOutcome with the new state, enriched command payload,
        snapshot flag and notification events
    """
    return _apply_transition(state, cmd)


def is_running(state: Dict[str, Any]) -> bool:
    return state.get("status") == RUNNING
