"""Level schedule helpers (pure, no I/O).

A schedule is an ordered list of Level dicts. The clock never re-sorts it;
the index into the list is the only notion of position. Breaks sit in the
same list as blind levels and are excluded from display numbering.

Durations:
- durationSeconds is authoritative when present
- older records carry durationMinutes; it is converted on read
"""
from __future__ import annotations

import math
from typing import Any, Dict, List

from .types import Level
from .validation import InputSanitizer

DEFAULT_LEVEL_SECONDS = 20 * 60

# Standard home-game structure offered when a tournament is created.
DEFAULT_LEVELS: List[Level] = [
    {"level": 1, "smallBlind": 25, "bigBlind": 50, "ante": 0, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 2, "smallBlind": 50, "bigBlind": 100, "ante": 0, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 3, "smallBlind": 75, "bigBlind": 150, "ante": 0, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 4, "smallBlind": 100, "bigBlind": 200, "ante": 0, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 5, "smallBlind": 100, "bigBlind": 200, "ante": 200, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 0, "smallBlind": 0, "bigBlind": 0, "ante": 0, "durationSeconds": 900, "isBreak": True, "label": "15 Min Break"},
    {"level": 6, "smallBlind": 150, "bigBlind": 300, "ante": 300, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 7, "smallBlind": 200, "bigBlind": 400, "ante": 400, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 8, "smallBlind": 300, "bigBlind": 600, "ante": 600, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
    {"level": 9, "smallBlind": 400, "bigBlind": 800, "ante": 800, "durationSeconds": DEFAULT_LEVEL_SECONDS, "isBreak": False},
]


def default_levels() -> List[Level]:
    """Return a fresh copy of the default blind structure."""
    return [dict(level) for level in DEFAULT_LEVELS]  # type: ignore[misc]


def _finite_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def level_duration_seconds(level: Level | None) -> int:
    """Full duration of a level in whole seconds.

    Falls back from durationSeconds to durationMinutes * 60; returns 0 for a
    missing level or a level without any usable duration.
    """
    if not isinstance(level, dict):
        return 0
    seconds = _finite_number(level.get("durationSeconds"))
    if seconds is not None and seconds >= 0:
        return int(seconds)
    minutes = _finite_number(level.get("durationMinutes"))
    if minutes is not None and minutes >= 0:
        return int(minutes * 60)
    return 0


def get_level(levels: List[Level] | None, index: Any) -> Level | None:
    """Return levels[index] if index addresses a valid level, else None."""
    if not levels or isinstance(index, bool) or not isinstance(index, int):
        return None
    if 0 <= index < len(levels):
        return levels[index]
    return None


def next_level(levels: List[Level] | None, index: int) -> Level | None:
    return get_level(levels, index + 1)


def level_label(level: Level | None) -> str:
    """Display label: break name for breaks, "Level N" otherwise."""
    if not isinstance(level, dict):
        return ""
    if level.get("isBreak"):
        return level.get("label") or level.get("breakName") or "Break"
    return f"Level {level.get('level', 0)}"


def describe_blinds(level: Level | None) -> str:
    """Compact blinds text, e.g. "100/200 (200)" when an ante is set."""
    if not isinstance(level, dict):
        return ""
    if level.get("isBreak"):
        return level_label(level)
    text = f"{level.get('smallBlind', 0)}/{level.get('bigBlind', 0)}"
    ante = level.get("ante") or 0
    if ante:
        text += f" ({ante})"
    return text


def normalize_levels(levels: List[Dict[str, Any]] | None) -> List[Level]:
    """Sanitize and renumber a schedule coming from an editor or a record.

    Args:
        levels: List of level dicts in schedule order

    Returns:
        List of normalized Level dicts with:
        - level: display number (1.. for blind levels, 0 for breaks)
        - durationSeconds: resolved from durationSeconds/durationMinutes
        - smallBlind/bigBlind/ante: ints, missing values become 0
        - label: sanitized break label (breaks only)

    Behavior:
        - Skips entries that are not dicts
        - Keeps the given order; nothing is re-sorted
        - Preserves 'id' when present
    """
    normalized: List[Level] = []
    if not levels:
        return normalized

    display = 1
    for raw in levels:
        if not isinstance(raw, dict):
            continue
        is_break = bool(raw.get("isBreak"))
        entry: Dict[str, Any] = {
            "level": 0 if is_break else display,
            "smallBlind": int(_finite_number(raw.get("smallBlind")) or 0),
            "bigBlind": int(_finite_number(raw.get("bigBlind")) or 0),
            "ante": int(_finite_number(raw.get("ante")) or 0),
            "durationSeconds": level_duration_seconds(raw),  # type: ignore[arg-type]
            "isBreak": is_break,
        }
        if raw.get("id") not in (None, ""):
            entry["id"] = str(raw["id"])
        if is_break:
            label = raw.get("label") or raw.get("breakName")
            if isinstance(label, str):
                safe_label = InputSanitizer.sanitize_label(label)
                if safe_label:
                    entry["label"] = safe_label
        else:
            display += 1
        normalized.append(entry)  # type: ignore[arg-type]
    return normalized


def format_clock(seconds: Any) -> str:
    """Format remaining seconds as MM:SS (minutes are not capped at 59).

    Examples:
        - 1200 → "20:00"
        - 65 → "01:05"
        - 0 → "00:00"
    """
    value = _finite_number(seconds)
    total = max(0, int(value)) if value is not None else 0
    minutes, secs = divmod(total, 60)
    return f"{minutes:02d}:{secs:02d}"


def parse_clock(text: str | None) -> int | None:
    """Parse an MM:SS string to total seconds.

    Examples:
        - "20:00" → 1200
        - "3:30" → 210
        - "" → None
        - "invalid" → None
    """
    if not text:
        return None
    try:
        minutes, seconds = text.strip().split(":")
        return int(minutes or 0) * 60 + int(seconds or 0)
    except ValueError:
        return None
