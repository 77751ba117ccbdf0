from __future__ import annotations

"""Round and game-record models.

Persisted shapes (`Configuration`, `GameRecord`) are Pydantic models so the
stored history is validated on load. Per-round values that never leave the
process are plain frozen dataclasses.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Constants ---

OPERATOR_FLAGS = ("add", "sub", "mul", "div")
# Display glyphs, in the fixed order used for questions and configuration keys
OPERATOR_SYMBOLS = {"add": "+", "sub": "−", "mul": "×", "div": "÷"}
MODIFIER_FLAGS = ("negatives", "double_digits")
# Wire names accepted by toggle_config in addition to the attribute names
_FLAG_ALIASES = {"doubleDigits": "double_digits"}


# --- Pydantic models ---

class Configuration(BaseModel):
    """Operator and modifier flags; at least one operator is always on."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    add: bool = True
    sub: bool = True
    mul: bool = True
    div: bool = True
    negatives: bool = False
    double_digits: bool = Field(default=False, alias="doubleDigits")

    @model_validator(mode="after")
    def _one_operator(self) -> "Configuration":
        if not any(getattr(self, f) for f in OPERATOR_FLAGS):
            raise ValueError("at least one operator flag must be true")
        return self

    def active_operators(self) -> List[str]:
        return [f for f in OPERATOR_FLAGS if getattr(self, f)]

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class GameRecord(BaseModel):
    id: str
    timestamp: datetime
    score: int = Field(ge=0, le=4294967295)
    accuracy: int = Field(ge=0, le=100)
    config: Configuration

    @field_validator("timestamp")
    @classmethod
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def toggle_config(config: Configuration, flag: str) -> Configuration:
    """Return `config` with `flag` flipped.

    Turning off the only active operator returns `config` unchanged.
    Modifier flags always toggle.
    """
    name = _FLAG_ALIASES.get(flag, flag)
    if name not in OPERATOR_FLAGS and name not in MODIFIER_FLAGS:
        raise ValueError(f"Unknown configuration flag: {flag}")
    current = bool(getattr(config, name))
    if name in OPERATOR_FLAGS and current and config.active_operators() == [name]:
        return config
    return config.model_copy(update={name: not current})


# --- Round values ---

@dataclass(frozen=True)
class Problem:
    question: str
    answer: int


@dataclass(frozen=True)
class HistoryEntry:
    question: str
    correct_answer: int
    user_answer: int
    is_correct: bool


@dataclass(frozen=True)
class RoundSummary:
    score: int
    accuracy: int
    attempts: int
    missed: List[HistoryEntry] = field(default_factory=list)
