from __future__ import annotations

"""Arithmetic problem generation.

One problem per call: pick an enabled operator, draw two operands from the
configured range, optionally flip their signs, then build the question text
and its exact integer answer.
"""

import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..results.schema import OPERATOR_SYMBOLS, Configuration, Problem


@dataclass(frozen=True)
class Operator:
    flag: str
    symbol: str
    apply: Callable[[int, int], Tuple[int, int, int]]


def _add(a: int, b: int) -> Tuple[int, int, int]:
    return a, b, a + b


def _sub(a: int, b: int) -> Tuple[int, int, int]:
    return a, b, a - b


def _mul(a: int, b: int) -> Tuple[int, int, int]:
    return a, b, a * b


def _div(a: int, b: int) -> Tuple[int, int, int]:
    # Shown dividend is a multiple of the divisor, so the quotient is exact
    return a * b, b, a


OPERATORS: Dict[str, Operator] = {
    flag: Operator(flag, OPERATOR_SYMBOLS[flag], fn)
    for flag, fn in (("add", _add), ("sub", _sub), ("mul", _mul), ("div", _div))
}

NORMAL_RANGE = (1, 12)
DOUBLE_DIGIT_RANGE = (10, 99)


def operand_range(config: Configuration) -> Tuple[int, int]:
    return DOUBLE_DIGIT_RANGE if config.double_digits else NORMAL_RANGE


def format_operand(n: int) -> str:
    """Negative operands are parenthesised so the sign never reads as the operator."""
    return str(n) if n >= 0 else f"({n})"


def generate(config: Configuration, rng: Optional[random.Random] = None) -> Problem:
    """Create a fresh problem for `config`.

    `rng` needs `choice`, `randint` and `random`; the module-level generator
    is used when omitted.
    """
    r = rng if rng is not None else random
    candidates: List[Operator] = [OPERATORS[f] for f in config.active_operators()]
    op = r.choice(candidates)

    lo, hi = operand_range(config)
    a = r.randint(lo, hi)
    b = r.randint(lo, hi)
    if config.negatives:
        if r.random() < 0.5:
            a = -a
        if r.random() < 0.5:
            b = -b

    left, right, answer = op.apply(a, b)
    question = f"{format_operand(left)} {op.symbol} {format_operand(right)}"
    return Problem(question=question, answer=answer)
