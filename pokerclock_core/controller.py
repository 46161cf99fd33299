"""Clock controller: the single owner of one clock view's state.

The controller feeds commands through the pure state machine in clock.py,
keeps the resulting state, and turns each outcome into hook calls:

- on_persist(snapshot): every discrete transition (never plain ticks). May
  return the store's updatedAt for the write; it becomes the high-water mark
  so the store echoing our own write back is not adopted a second time.
- on_tick(remaining): every second taken off the clock
- on_warning(remaining): the last ClockConfig.WARNING_SECONDS of a level
- on_level_advance(): the clock moved on to the next level
- on_complete(): the last level ran out

Warnings and level-advance notifications are audible cues in the UI and are
suppressed while the controller is muted. Exceptions raised by hooks propagate
to the caller.
"""
from __future__ import annotations

import logging
from copy import deepcopy
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping

from .clock import (
    CommandOutcome,
    apply_command,
    build_snapshot,
    current_level,
    default_state,
    is_running,
)
from .levels import next_level
from .sync import ReconcileOutcome, advance_high_water, reconcile
from .types import ClockSnapshot, Level

logger = logging.getLogger(__name__)

PersistHook = Callable[[ClockSnapshot], Any]
TickHook = Callable[[int], None]
NotifyHook = Callable[[], None]


class ClockController:
    def __init__(
        self,
        levels: List[Level] | None = None,
        *,
        state: Dict[str, Any] | None = None,
        on_persist: PersistHook | None = None,
        on_tick: TickHook | None = None,
        on_warning: TickHook | None = None,
        on_level_advance: NotifyHook | None = None,
        on_complete: NotifyHook | None = None,
        muted: bool = False,
    ) -> None:
        self._state: Dict[str, Any] = (
            deepcopy(state) if state is not None else default_state(levels)
        )
        self.on_persist = on_persist
        self.on_tick = on_tick
        self.on_warning = on_warning
        self.on_level_advance = on_level_advance
        self.on_complete = on_complete
        self.muted = muted

    # ---- read-only views ----

    @property
    def state(self) -> Dict[str, Any]:
        """A copy of the current state; changes go through the commands."""
        return deepcopy(self._state)

    @property
    def status(self) -> str:
        return self._state["status"]

    @property
    def current_level_index(self) -> int:
        return self._state["currentLevelIndex"]

    @property
    def remaining_seconds(self) -> int:
        return self._state["timeRemainingSeconds"]

    @property
    def is_running(self) -> bool:
        return is_running(self._state)

    @property
    def current_level(self) -> Level | None:
        return current_level(self._state)

    @property
    def next_level(self) -> Level | None:
        return next_level(self._state.get("levels"), self.current_level_index)

    def snapshot(self) -> ClockSnapshot:
        return build_snapshot(self._state)

    # ---- transitions ----

    def start(self) -> CommandOutcome:
        return self.dispatch({"type": "START"})

    def pause(self) -> CommandOutcome:
        return self.dispatch({"type": "PAUSE"})

    def toggle(self) -> CommandOutcome:
        return self.dispatch({"type": "TOGGLE"})

    def tick(self) -> CommandOutcome:
        return self.dispatch({"type": "TICK"})

    def level_complete(self) -> CommandOutcome:
        return self.dispatch({"type": "LEVEL_COMPLETE"})

    def jump_to_level(self, index: int) -> CommandOutcome:
        return self.dispatch({"type": "JUMP_TO_LEVEL", "index": index})

    def next(self) -> CommandOutcome:
        return self.dispatch({"type": "NEXT_LEVEL"})

    def previous(self) -> CommandOutcome:
        return self.dispatch({"type": "PREVIOUS_LEVEL"})

    def reset(self) -> CommandOutcome:
        return self.dispatch({"type": "RESET"})

    def dispatch(self, cmd: Dict[str, Any]) -> CommandOutcome:
        outcome = apply_command(self._state, cmd)
        self._state = outcome.state
        if outcome.snapshot_required:
            self._persist()
        self._notify(outcome)
        return outcome

    def reconcile(
        self, remote: Mapping[str, Any], now: datetime | None = None
    ) -> ReconcileOutcome:
        """Rebase onto a record from the store if it is newer than what we hold."""
        outcome = reconcile(self._state, remote, now)
        if not outcome.applied:
            return outcome
        self._state = outcome.state
        if outcome.level_complete_due:
            self.level_complete()
        return outcome

    # ---- hooks ----

    def _persist(self) -> None:
        if self.on_persist is None:
            return
        persisted_at = self.on_persist(build_snapshot(self._state))
        if persisted_at is not None and not advance_high_water(self._state, persisted_at):
            logger.debug(f"Store acknowledged write with non-advancing updatedAt {persisted_at!r}")

    def _notify(self, outcome: CommandOutcome) -> None:
        # A tick that finishes a level reports 0, not the next level's duration.
        remaining = outcome.cmd_payload.get("tickRemaining", self._state["timeRemainingSeconds"])
        for event in outcome.events:
            if event == "tick":
                if self.on_tick is not None:
                    self.on_tick(remaining)
            elif event == "warning":
                if self.on_warning is not None and not self.muted:
                    self.on_warning(remaining)
            elif event == "level_advanced":
                if self.on_level_advance is not None and not self.muted:
                    self.on_level_advance()
            elif event == "completed":
                if self.on_complete is not None:
                    self.on_complete()
