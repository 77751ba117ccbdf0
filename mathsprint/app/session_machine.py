from __future__ import annotations

"""Session machine: screens, the round timer, and answer feedback.

Screens move menu -> playing -> result -> menu | playing, with
menu <-> history and playing -> menu (abandon) also allowed. All round
state (problem, score, time left, answers) lives in a `RoundState` that is
replaced wholesale when a round starts, so timers from an earlier round can
never touch a later one.

While the feedback delay after an answer is pending the round is locked and
further submissions are dropped.
"""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from uuid import uuid4

from ..drills.arithmetic import generate
from ..errors import InvalidTransitionError
from ..results.leaderboard import LeaderboardGroup, aggregate, config_key
from ..results.schema import Configuration, GameRecord, Problem, RoundSummary, toggle_config
from ..stats.scoring import Outcome, ScoringTracker
from ..storage.store import RecordStore
from . import events
from .events import EventBus
from .explain import Milestone, trace as xtrace
from .timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    MENU = "menu"
    PLAYING = "playing"
    RESULT = "result"
    HISTORY = "history"


@dataclass(frozen=True)
class RoundSettings:
    seconds: int = 60
    tick_ms: int = 1000
    correct_delay_ms: int = 150
    wrong_delay_ms: int = 400
    missed_shown: int = 3
    top_n: int = 10

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "RoundSettings":
        return cls(
            seconds=int(cfg["round"]["seconds"]),
            tick_ms=int(cfg["round"]["tick_ms"]),
            correct_delay_ms=int(cfg["feedback"]["correct_delay_ms"]),
            wrong_delay_ms=int(cfg["feedback"]["wrong_delay_ms"]),
            missed_shown=int(cfg["leaderboard"]["missed_shown"]),
            top_n=int(cfg["leaderboard"]["top_n"]),
        )


@dataclass
class RoundState:
    config: Configuration
    started_at: datetime
    time_left: int
    problem: Problem
    tracker: ScoringTracker = field(default_factory=ScoringTracker)
    failure_active: bool = False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionMachine:
    def __init__(
        self,
        store: RecordStore,
        scheduler: Scheduler,
        *,
        settings: Optional[RoundSettings] = None,
        config: Optional[Configuration] = None,
        rng: Optional[random.Random] = None,
        bus: Optional[EventBus] = None,
        clock: Callable[[], datetime] = _utcnow,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.settings = settings or RoundSettings()
        self.config = config or Configuration()
        self.rng = rng
        self.bus = bus or EventBus()
        self.clock = clock
        self.id_factory = id_factory

        self.screen = Screen.MENU
        self.round: Optional[RoundState] = None
        self.last_summary: Optional[RoundSummary] = None
        self.last_record: Optional[GameRecord] = None
        self._countdown: Optional[TimerHandle] = None
        self._feedback: Optional[TimerHandle] = None

    # --- transitions ---

    def _require(self, action: str, *screens: Screen) -> None:
        if self.screen not in screens:
            raise InvalidTransitionError(action, self.screen.value)

    def _set_screen(self, screen: Screen) -> None:
        self.screen = screen
        self.bus.emit(events.SCREEN_CHANGED, screen)

    def toggle(self, flag: str) -> Configuration:
        """Flip an operator or modifier flag; the last active operator stays on."""
        self._require("toggle", Screen.MENU)
        self.config = toggle_config(self.config, flag)
        return self.config

    def start(self) -> None:
        self._require("start", Screen.MENU)
        self._begin_round()

    def play_again(self) -> None:
        self._require("play_again", Screen.RESULT)
        self._begin_round()

    def abandon(self) -> None:
        """Leave a round early. Nothing is scored or stored."""
        self._require("abandon", Screen.PLAYING)
        self._cancel_timers()
        if self.round is not None:
            xtrace(Milestone.ROUND_ABANDONED, answered=len(self.round.tracker.history))
        self.round = None
        self._set_screen(Screen.MENU)

    def open_settings(self) -> None:
        self._require("open_settings", Screen.RESULT)
        self._set_screen(Screen.MENU)

    def view_history(self) -> List[LeaderboardGroup]:
        self._require("view_history", Screen.MENU)
        self._set_screen(Screen.HISTORY)
        return self.leaderboard()

    def back(self) -> None:
        self._require("back", Screen.HISTORY)
        self._set_screen(Screen.MENU)

    # --- round lifecycle ---

    def _cancel_timers(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        if self._feedback is not None:
            self._feedback.cancel()
            self._feedback = None

    def _begin_round(self) -> None:
        # Only one countdown may ever be armed
        self._cancel_timers()
        snapshot = self.config
        self.round = RoundState(
            config=snapshot,
            started_at=self.clock(),
            time_left=self.settings.seconds,
            problem=generate(snapshot, self.rng),
        )
        self.last_summary = None
        self.last_record = None
        self._countdown = self.scheduler.call_repeating(self.settings.tick_ms, self._tick)
        xtrace(Milestone.ROUND_STARTED, config=config_key(snapshot), seconds=self.settings.seconds)
        self._set_screen(Screen.PLAYING)
        self.bus.emit(events.PROBLEM_CHANGED, self.round.problem)

    def _tick(self) -> None:
        rnd = self.round
        if self.screen is not Screen.PLAYING or rnd is None:
            return
        rnd.time_left = max(0, rnd.time_left - 1)
        self.bus.emit(events.TICK, rnd.time_left)
        if rnd.time_left <= 0:
            self._finish_round()

    def _finish_round(self) -> None:
        rnd = self.round
        if rnd is None:
            return
        self._cancel_timers()
        rnd.failure_active = False
        summary = rnd.tracker.summarize(self.settings.missed_shown)
        record = GameRecord(
            id=self.id_factory(),
            timestamp=self.clock(),
            score=summary.score,
            accuracy=summary.accuracy,
            config=rnd.config,
        )
        self.store.append(record)
        self.last_summary = summary
        self.last_record = record
        logger.info("Round finished: score=%d accuracy=%d%%", summary.score, summary.accuracy)
        xtrace(Milestone.ROUND_FINISHED, id=record.id, score=record.score, accuracy=record.accuracy)
        self._set_screen(Screen.RESULT)
        self.bus.emit(events.ROUND_FINISHED, record)

    # --- answering ---

    def submit(self, raw: Optional[str]) -> Outcome:
        """Grade `raw` against the current problem.

        Unparseable input, input outside a round, and input while the
        previous answer's feedback is pending are dropped.
        """
        rnd = self.round
        if self.screen is not Screen.PLAYING or rnd is None:
            return Outcome.IGNORED
        if self._feedback is not None:
            return Outcome.LOCKED
        outcome = rnd.tracker.submit(rnd.problem, raw)
        if outcome is Outcome.IGNORED:
            return outcome

        xtrace(Milestone.ANSWER_GRADED, question=rnd.problem.question, answer=raw.strip(), outcome=outcome.value)
        if outcome is Outcome.CORRECT:
            delay = self.settings.correct_delay_ms
        else:
            rnd.failure_active = True
            delay = self.settings.wrong_delay_ms
        self._feedback = self.scheduler.call_later(delay, self._advance)
        self.bus.emit(events.ANSWER_RECORDED, rnd.tracker.history[-1])
        return outcome

    def _advance(self) -> None:
        self._feedback = None
        rnd = self.round
        if self.screen is not Screen.PLAYING or rnd is None:
            return
        rnd.failure_active = False
        rnd.problem = generate(rnd.config, self.rng)
        self.bus.emit(events.PROBLEM_CHANGED, rnd.problem)

    # --- derived views ---

    @property
    def problem(self) -> Optional[Problem]:
        return self.round.problem if self.round else None

    @property
    def score(self) -> int:
        return self.round.tracker.score if self.round else 0

    @property
    def time_left(self) -> int:
        return self.round.time_left if self.round else 0

    @property
    def progress_percent(self) -> float:
        """Share of the round's time still remaining, 0-100."""
        if not self.round:
            return 0.0
        return self.round.time_left / self.settings.seconds * 100

    @property
    def is_locked(self) -> bool:
        return self._feedback is not None

    @property
    def failure_active(self) -> bool:
        return bool(self.round and self.round.failure_active)

    def summary(self) -> Optional[RoundSummary]:
        if self.last_summary is not None:
            return self.last_summary
        if self.round is not None:
            return self.round.tracker.summarize(self.settings.missed_shown)
        return None

    def leaderboard(self) -> List[LeaderboardGroup]:
        return aggregate(self.store.list(), self.settings.top_n)
