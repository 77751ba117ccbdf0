from .scoring import Outcome, ScoringTracker, compute_accuracy, format_summary, parse_answer

__all__ = ["Outcome", "ScoringTracker", "compute_accuracy", "format_summary", "parse_answer"]
