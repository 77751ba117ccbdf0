from __future__ import annotations

"""Explain mode: one line per round milestone.

Enabled from the CLI with `--explain`. Lines look like
`[EXPLAIN] round_finished score=12 accuracy=86`.
"""

from enum import Enum
from typing import Any

_ENABLED = False


class Milestone(str, Enum):
    ROUND_STARTED = "round_started"
    ANSWER_GRADED = "answer_graded"
    ROUND_FINISHED = "round_finished"
    ROUND_ABANDONED = "round_abandoned"


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def enabled() -> bool:
    return _ENABLED


def _fmt(value: Any) -> str:
    text = str(value)
    return repr(text) if (" " in text or not text) else text


def format_line(milestone: Milestone, **fields: Any) -> str:
    parts = [f"[EXPLAIN] {milestone.value}"]
    parts += [f"{k}={_fmt(v)}" for k, v in fields.items()]
    return " ".join(parts)


def trace(milestone: Milestone, **fields: Any) -> None:
    if _ENABLED:
        print(format_line(milestone, **fields))
