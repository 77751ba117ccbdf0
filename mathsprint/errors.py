from __future__ import annotations

"""Exception hierarchy for mathsprint."""


class MathSprintError(Exception):
    """Base class for all mathsprint errors."""


class InvalidTransitionError(MathSprintError):
    """An action was invoked from a screen that does not define it."""

    def __init__(self, action: str, screen: str) -> None:
        super().__init__(f"Action '{action}' is not available on screen '{screen}'")
        self.action = action
        self.screen = screen


class ConfigError(MathSprintError):
    """Configuration file could not be read."""
