from .schema import (
    MODIFIER_FLAGS,
    OPERATOR_FLAGS,
    Configuration,
    GameRecord,
    HistoryEntry,
    Problem,
    RoundSummary,
    toggle_config,
)
from .leaderboard import LeaderboardGroup, aggregate, config_key, rank_entries

__all__ = [
    "MODIFIER_FLAGS",
    "OPERATOR_FLAGS",
    "Configuration",
    "GameRecord",
    "HistoryEntry",
    "Problem",
    "RoundSummary",
    "toggle_config",
    "LeaderboardGroup",
    "aggregate",
    "config_key",
    "rank_entries",
]
