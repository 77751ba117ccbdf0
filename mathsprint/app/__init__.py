from .session_machine import RoundSettings, RoundState, Screen, SessionMachine
from .timers import ManualScheduler, ThreadingScheduler, TimerHandle

__all__ = [
    "RoundSettings",
    "RoundState",
    "Screen",
    "SessionMachine",
    "ManualScheduler",
    "ThreadingScheduler",
    "TimerHandle",
]
