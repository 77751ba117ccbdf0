from __future__ import annotations

"""Leaderboards over stored game records, one per configuration."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .schema import OPERATOR_SYMBOLS, Configuration, GameRecord

MODIFIER_TAGS = (("negatives", "neg"), ("double_digits", "2x"))
DEFAULT_TOP_N = 10


@dataclass
class LeaderboardGroup:
    key: str
    config: Configuration
    entries: List[GameRecord] = field(default_factory=list)


def config_key(config: Configuration) -> str:
    """Stable signature such as '+×(neg,2x)'; identical flags give identical keys."""
    ops = "".join(sym for flag, sym in OPERATOR_SYMBOLS.items() if getattr(config, flag))
    mods = [tag for flag, tag in MODIFIER_TAGS if getattr(config, flag)]
    if mods:
        return f"{ops}({','.join(mods)})"
    return ops


def rank_entries(records: Iterable[GameRecord], top_n: int = DEFAULT_TOP_N) -> List[GameRecord]:
    """Highest score first, most recent first among equal scores."""
    ranked = sorted(records, key=lambda r: (r.score, r.timestamp), reverse=True)
    return ranked[:top_n]


def aggregate(records: Iterable[GameRecord], top_n: int = DEFAULT_TOP_N) -> List[LeaderboardGroup]:
    groups: Dict[str, LeaderboardGroup] = {}
    for rec in records:
        key = config_key(rec.config)
        group = groups.get(key)
        if group is None:
            group = groups[key] = LeaderboardGroup(key=key, config=rec.config)
        group.entries.append(rec)

    for group in groups.values():
        group.entries = rank_entries(group.entries, top_n)

    # Most recently active configuration first
    return sorted(groups.values(), key=lambda g: g.entries[0].timestamp, reverse=True)


def format_leaderboard(groups: List[LeaderboardGroup]) -> str:
    if not groups:
        return "No games played yet."
    lines: List[str] = []
    for g in groups:
        lines.append(f"[{g.key}]")
        for i, r in enumerate(g.entries, start=1):
            when = r.timestamp.strftime("%Y-%m-%d %H:%M")
            lines.append(f"  {i:>2}. {r.score:>3} pts  {r.accuracy:>3}%  {when}")
    return "\n".join(lines)
