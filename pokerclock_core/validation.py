"""
Input validation schemas using Pydantic v2
Validates persisted tournament records, clock snapshots and clock commands
"""

import logging
import math
import re
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

ClockStatus = Literal["draft", "running", "paused", "completed"]


class RecordLimits:
    """Size limits enforced on persisted tournament records"""

    MAX_NAME_LENGTH = 100
    MAX_LEVELS = 200
    MAX_PLAYERS = 500
    MAX_BONUSES = 50
    MAX_PAYOUT_TIERS = 50
    MAX_LEVEL_SECONDS = 24 * 60 * 60


# ==================== VALIDATOR FUNCTIONS ====================


class ValidatedLevel(BaseModel):
    """Blind level or break as stored in a tournament record"""

    id: Optional[str] = Field(None, max_length=64)
    level: int = Field(0, ge=0, le=9999, description="Display number (0 for breaks)")
    smallBlind: int = Field(0, ge=0)
    bigBlind: int = Field(0, ge=0)
    ante: int = Field(0, ge=0)
    durationSeconds: Optional[int] = Field(
        None, gt=0, le=RecordLimits.MAX_LEVEL_SECONDS, description="Level length"
    )
    durationMinutes: Optional[float] = Field(
        None, gt=0, le=RecordLimits.MAX_LEVEL_SECONDS / 60, description="Legacy length"
    )
    isBreak: bool = False
    label: Optional[str] = Field(None, max_length=100)
    breakName: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def validate_duration(self) -> Self:
        """A level needs a duration in seconds or in minutes"""
        if self.durationSeconds is None and self.durationMinutes is None:
            raise ValueError("level requires durationSeconds or durationMinutes")
        return self

    model_config = ConfigDict(extra="allow")


class ValidatedSnapshot(BaseModel):
    """Persisted clock fields read back from the record store"""

    status: ClockStatus
    currentLevelIndex: int = Field(0, ge=0, description="Index into levels")
    timeRemainingSeconds: int = Field(0, ge=0, description="Remaining seconds")
    updatedAt: Optional[datetime] = Field(
        None, description="Server-assigned write timestamp (ISO-8601)"
    )
    levels: Optional[List[Dict[str, Any]]] = Field(
        None, max_length=RecordLimits.MAX_LEVELS, description="Schedule, when the record carries one"
    )

    @field_validator("timeRemainingSeconds", mode="before")
    @classmethod
    def floor_remaining(cls, v):
        """Stores may hand back fractional seconds; the clock counts whole ones"""
        if isinstance(v, float) and math.isfinite(v):
            return math.floor(v)
        return v

    model_config = ConfigDict(extra="ignore")


class ValidatedBonus(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: Optional[str] = Field(None, max_length=100)
    cost: float = Field(0, ge=0)
    chips: int = Field(0, ge=0)


class ValidatedPlayer(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: Optional[str] = Field(None, max_length=255)
    status: Literal["active", "eliminated"] = "active"
    position: Optional[int] = Field(None, ge=1)
    reEntries: int = Field(0, ge=0)
    appliedBonuses: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_player_name(cls, v: Optional[str]) -> Optional[str]:
        """Validate player name is safe"""
        if v is None:
            return v
        v = v.strip()
        if len(v) == 0:
            raise ValueError("player name cannot be empty")
        if "<" in v and ">" in v:
            raise ValueError("player name contains HTML tags")
        return v


class ValidatedTournament(BaseModel):
    """Tournament record as accepted at edit time"""

    name: str = Field(..., min_length=1, max_length=RecordLimits.MAX_NAME_LENGTH)
    status: ClockStatus = "draft"
    currentLevelIndex: int = Field(0, ge=0)
    timeRemainingSeconds: int = Field(0, ge=0)
    buyIn: float = Field(0, ge=0)
    startingChips: int = Field(0, ge=0)
    levels: List[ValidatedLevel] = Field(
        default_factory=list, max_length=RecordLimits.MAX_LEVELS
    )
    players: List[ValidatedPlayer] = Field(
        default_factory=list, max_length=RecordLimits.MAX_PLAYERS
    )
    bonuses: List[ValidatedBonus] = Field(
        default_factory=list, max_length=RecordLimits.MAX_BONUSES
    )
    rakePercentage: float = Field(0, ge=0, le=100, description="Rake (0-100)")
    customPayouts: List[float] = Field(
        default_factory=list, max_length=RecordLimits.MAX_PAYOUT_TIERS
    )
    updatedAt: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) == 0:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("customPayouts")
    @classmethod
    def validate_custom_payouts(cls, v: List[float]) -> List[float]:
        """Each tier must be a percentage; the sum is only warned about"""
        for i, pct in enumerate(v):
            if not math.isfinite(pct) or pct < 0 or pct > 100:
                raise ValueError(f"customPayouts[{i}] must be between 0 and 100")
        return v

    @model_validator(mode="after")
    def validate_level_index(self) -> Self:
        if self.levels and self.currentLevelIndex >= len(self.levels):
            raise ValueError("currentLevelIndex out of range for levels")
        return self

    model_config = ConfigDict(extra="allow")


class ValidatedClockCmd(BaseModel):
    """Clock command as received from a presentation layer"""

    type: str = Field(..., min_length=1, max_length=50, description="Command type")
    index: Optional[int] = Field(None, ge=0, le=RecordLimits.MAX_LEVELS - 1)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate command type is one of allowed types"""
        allowed_types = {
            "START",
            "PAUSE",
            "TOGGLE",
            "TICK",
            "LEVEL_COMPLETE",
            "JUMP_TO_LEVEL",
            "NEXT_LEVEL",
            "PREVIOUS_LEVEL",
            "RESET",
        }
        if v not in allowed_types:
            raise ValueError(f"type must be one of {allowed_types}, got {v}")
        return v

    @model_validator(mode="after")
    def validate_command_fields(self) -> Self:
        if self.type == "JUMP_TO_LEVEL" and self.index is None:
            raise ValueError("JUMP_TO_LEVEL requires index")
        return self

    model_config = ConfigDict(extra="allow")


def custom_payouts_warning(percentages: Optional[List[float]]) -> Optional[str]:
    """Edit-time check for custom payout tiers.

    The payout engine trusts custom percentages verbatim; this helper lets an
    editor warn when they do not add up to 100.
    """
    if not percentages:
        return None
    total = sum(percentages)
    if math.isclose(total, 100.0, abs_tol=1e-9):
        return None
    return f"custom payouts sum to {total:g}%, not 100%"


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        # Strip whitespace
        value = value.strip()

        # Limit length
        value = value[:max_length]

        # Remove null bytes
        value = value.replace("\0", "")

        return value

    @staticmethod
    def sanitize_label(label: str) -> str:
        """Sanitize a break label for display"""
        label = InputSanitizer.sanitize_string(label, 100)
        # Drop control characters and markup brackets, keep unicode letters
        label = re.sub(r"[<>{}\\\x00-\x1f\x7f]", "", label)
        return label.strip()

    @staticmethod
    def sanitize_player_name(name: str) -> str:
        """Sanitize player name for display"""
        name = InputSanitizer.sanitize_string(name, 255)
        dangerous_chars = r'[<>{}[\]\\|;()&$`"\*\x00-\x1f\x7f]'
        name = re.sub(dangerous_chars, "", name)
        return name.strip()

    @staticmethod
    def validate_and_sanitize_cmd(cmd_dict: dict) -> ValidatedClockCmd:
        """
        Validate clock command dictionary

        Returns:
            ValidatedClockCmd: Validated command object

        Raises:
            ValueError: If validation fails
        """
        try:
            return ValidatedClockCmd(**cmd_dict)
        except Exception as e:
            logger.warning(f"Command validation failed: {e}")
            raise ValueError(f"Invalid command: {str(e)}")

    @staticmethod
    def validate_record(record: dict) -> ValidatedTournament:
        """
        Validate a tournament record before it is written

        Raises:
            ValueError: If validation fails
        """
        try:
            validated = ValidatedTournament(**record)
        except Exception as e:
            logger.warning(f"Tournament validation failed: {e}")
            raise ValueError(f"Invalid tournament: {str(e)}")
        warning = custom_payouts_warning(validated.customPayouts)
        if warning:
            logger.info(f"Tournament {validated.name!r}: {warning}")
        return validated


ValidatedCmd = ValidatedClockCmd


# ==================== EXPORT ====================

__all__ = [
    "ClockStatus",
    "RecordLimits",
    "ValidatedLevel",
    "ValidatedSnapshot",
    "ValidatedBonus",
    "ValidatedPlayer",
    "ValidatedTournament",
    "ValidatedClockCmd",
    "ValidatedCmd",
    "InputSanitizer",
    "custom_payouts_warning",
]
