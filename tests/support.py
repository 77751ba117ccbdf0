"""Shared fakes for the test suite."""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

from mathsprint.results.schema import Configuration, GameRecord

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class ScriptedRng:
    """Deterministic stand-in for random.Random.

    `operator` forces the chosen operator flag; `ints` and `floats` are
    cycled forever.
    """

    def __init__(self, operator: Optional[str] = None, ints: Sequence[int] = (7, 5), floats: Sequence[float] = (0.9,)) -> None:
        self.operator = operator
        self._ints = itertools.cycle(ints)
        self._floats = itertools.cycle(floats)

    def choice(self, seq):
        if self.operator is None:
            return seq[0]
        for item in seq:
            if item.flag == self.operator:
                return item
        raise AssertionError(f"operator {self.operator} not enabled")

    def randint(self, a: int, b: int) -> int:
        return next(self._ints)

    def random(self) -> float:
        return next(self._floats)


class StepClock:
    """Returns T0, T0+1s, T0+2s, ... on successive calls."""

    def __init__(self, start: datetime = T0) -> None:
        self._next = start

    def __call__(self) -> datetime:
        now = self._next
        self._next = now + timedelta(seconds=1)
        return now


def only(**flags: bool) -> Configuration:
    base = {"add": False, "sub": False, "mul": False, "div": False}
    base.update(flags)
    return Configuration.model_validate(base)


def make_record(score: int, minutes: int, config: Optional[Configuration] = None, accuracy: int = 100, rid: Optional[str] = None) -> GameRecord:
    return GameRecord(
        id=rid or f"g-{score}-{minutes}",
        timestamp=T0 + timedelta(minutes=minutes),
        score=score,
        accuracy=accuracy,
        config=config or Configuration(),
    )


def keys(records: Iterable[GameRecord]) -> list:
    return [(r.score, r.timestamp) for r in records]
