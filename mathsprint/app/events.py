from __future__ import annotations

"""Tiny pub/sub event bus between the session machine and front ends."""

import logging
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

SCREEN_CHANGED = "screen_changed"
PROBLEM_CHANGED = "problem_changed"
ANSWER_RECORDED = "answer_recorded"
TICK = "tick"
ROUND_FINISHED = "round_finished"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any = None) -> None:
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception:
                # Keep delivering to the remaining subscribers
                logger.exception("Subscriber for %r failed", event)
