from .clock import (
    ClockConfig,
    CommandOutcome,
    ValidationError,
    apply_command,
    build_snapshot,
    current_level,
    default_state,
)
from .controller import ClockController
from .levels import (
    default_levels,
    format_clock,
    level_duration_seconds,
    normalize_levels,
    parse_clock,
)
from .payouts import PayoutTier, compute_payouts, ordinal, payout_bracket
from .prize_pool import (
    PrizePoolSummary,
    TournamentSummary,
    aggregate_prize_pool,
    summarize_tournament,
)
from .sync import ReconcileOutcome, check_snapshot_freshness, reconcile
from .ticker import run_ticker
from .types import Bonus, ClockSnapshot, ClockState, CommandPayload, Level, Player
from .validation import InputSanitizer, RecordLimits, ValidatedClockCmd, custom_payouts_warning

__all__ = [
    "ClockConfig",
    "CommandOutcome",
    "ValidationError",
    "apply_command",
    "build_snapshot",
    "current_level",
    "default_state",
    "ClockController",
    "default_levels",
    "format_clock",
    "level_duration_seconds",
    "normalize_levels",
    "parse_clock",
    "PayoutTier",
    "compute_payouts",
    "ordinal",
    "payout_bracket",
    "PrizePoolSummary",
    "TournamentSummary",
    "aggregate_prize_pool",
    "summarize_tournament",
    "ReconcileOutcome",
    "check_snapshot_freshness",
    "reconcile",
    "run_ticker",
    "Bonus",
    "ClockSnapshot",
    "ClockState",
    "CommandPayload",
    "Level",
    "Player",
    "InputSanitizer",
    "RecordLimits",
    "ValidatedClockCmd",
    "custom_payouts_warning",
]
