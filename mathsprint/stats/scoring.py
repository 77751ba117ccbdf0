from __future__ import annotations

"""Per-round scoring: answer parsing, history, score and accuracy."""

import re
from enum import Enum
from typing import List, Optional

from ..results.schema import HistoryEntry, Problem, RoundSummary

_ANSWER_RE = re.compile(r"-?\d+")


class Outcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    # Not parsed as an integer; nothing recorded
    IGNORED = "ignored"
    # Submitted while the previous answer's feedback was still showing
    LOCKED = "locked"


def parse_answer(raw: Optional[str]) -> Optional[int]:
    """Parse user input as an integer, or None if it is not one."""
    if raw is None:
        return None
    text = raw.strip()
    if not _ANSWER_RE.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        # Longer than the interpreter allows for int conversion
        return None


def compute_accuracy(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half up; 0 with no attempts."""
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


class ScoringTracker:
    def __init__(self) -> None:
        self.score = 0
        self.history: List[HistoryEntry] = []

    def reset(self) -> None:
        self.score = 0
        self.history = []

    def submit(self, problem: Problem, raw: Optional[str]) -> Outcome:
        value = parse_answer(raw)
        if value is None:
            return Outcome.IGNORED
        is_correct = value == problem.answer
        self.history.append(
            HistoryEntry(
                question=problem.question,
                correct_answer=problem.answer,
                user_answer=value,
                is_correct=is_correct,
            )
        )
        if is_correct:
            self.score += 1
            return Outcome.CORRECT
        return Outcome.INCORRECT

    @property
    def correct_count(self) -> int:
        return sum(1 for h in self.history if h.is_correct)

    @property
    def accuracy(self) -> int:
        return compute_accuracy(self.correct_count, len(self.history))

    def summarize(self, missed_limit: int = 3) -> RoundSummary:
        missed = [h for h in self.history if not h.is_correct][:missed_limit]
        return RoundSummary(
            score=self.score,
            accuracy=self.accuracy,
            attempts=len(self.history),
            missed=missed,
        )


def format_summary(summary: RoundSummary) -> str:
    """Return a human-readable summary of a finished round."""
    lines = [
        f"Score: {summary.score}",
        f"Accuracy: {summary.accuracy}% ({summary.attempts} answered)",
    ]
    if summary.missed:
        lines.append("Missed:")
        for h in summary.missed:
            lines.append(f"  {h.question} = {h.correct_answer} (you said {h.user_answer})")
    return "\n".join(lines)
