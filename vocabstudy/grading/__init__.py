"""
Answer Scorers.

Strategy Pattern implementation for fuzzy answer matching.
"""

from .base import MatchMode, ScoreResult, ScorerRegistry, SimilarityScorer, normalize_answer
from .scorers import ExactScorer, LevenshteinScorer, TokenSetScorer

__all__ = [
    # Base classes
    "MatchMode",
    "ScoreResult",
    "ScorerRegistry",
    "SimilarityScorer",
    "normalize_answer",
    # Scorers
    "ExactScorer",
    "LevenshteinScorer",
    "TokenSetScorer",
]
