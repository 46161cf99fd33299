"""Type definitions for clock state, persisted records and commands."""
from __future__ import annotations

from typing import List, Optional, TypedDict


class Level(TypedDict, total=False):
    """A blind level (or break) in the tournament schedule."""
    id: str
    level: int  # Display number; breaks are not numbered (0)
    smallBlind: int
    bigBlind: int
    ante: int
    durationSeconds: int
    # Older records store the duration in minutes instead of seconds.
    durationMinutes: int
    isBreak: bool
    label: Optional[str]
    breakName: Optional[str]


class Bonus(TypedDict, total=False):
    """A purchasable add-on from the tournament bonus catalog."""
    id: str
    name: str  # e.g. 'Punctuality', 'Staff Bonus'
    cost: float
    chips: int


class Player(TypedDict, total=False):
    """A player entry in the tournament roster."""
    id: str
    name: str
    status: str  # 'active' | 'eliminated'
    position: Optional[int]
    reEntries: int
    # Bonus ids; the same id may appear more than once.
    appliedBonuses: List[str]


class ClockState(TypedDict, total=False):
    """
    TypedDict representing the runtime state of one clock view.

    All fields are optional (total=False) so partially hydrated states
    from older records still type-check; default_state() fills them all.
    """
    # Timer state
    status: str  # 'draft' | 'running' | 'paused' | 'completed'
    currentLevelIndex: int
    timeRemainingSeconds: int

    # Schedule
    levels: List[Level]

    # Sync bookkeeping
    lastSyncedAt: Optional[str]  # ISO-8601 high-water mark of adopted snapshots
    synced: bool
    stateVersion: int  # Monotonic counter bumped on persisted transitions


class ClockSnapshot(TypedDict, total=False):
    """The persisted subset of clock state exchanged with the record store."""
    status: str
    currentLevelIndex: int
    timeRemainingSeconds: int
    updatedAt: Optional[str]  # Server-assigned on write


class TournamentRecord(TypedDict, total=False):
    """Superset of the persisted tournament fields used by this package."""
    id: str
    name: str
    status: str
    currentLevelIndex: int
    timeRemainingSeconds: int
    updatedAt: Optional[str]
    levels: List[Level]
    players: List[Player]
    bonuses: List[Bonus]
    buyIn: float
    startingChips: int
    rakePercentage: Optional[float]
    customPayouts: Optional[List[float]]


class CommandPayload(TypedDict, total=False):
    """
    TypedDict for command payloads sent to apply_command().

    Fields vary by command type.
    """
    # Common
    type: str

    # JUMP_TO_LEVEL
    index: Optional[int]


# Type alias for callers that still use plain dicts
StateDict = ClockState
CmdDict = CommandPayload
