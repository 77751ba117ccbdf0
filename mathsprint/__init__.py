"""mathsprint: a timed mental-arithmetic drill.

The session machine plays rounds of generated problems, scores answers,
stores finished games, and ranks them per operator/modifier configuration.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
