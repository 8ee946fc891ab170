"""
Similarity Scorer Implementations.

Concrete scorers for each MatchMode.
"""

from __future__ import annotations

from rapidfuzz import fuzz
from rapidfuzz.distance import Levenshtein

from .base import MatchMode, ScorerRegistry, SimilarityScorer


# =============================================================================
# LEVENSHTEIN Scorer
# =============================================================================


@ScorerRegistry.register(MatchMode.LEVENSHTEIN)
class LevenshteinScorer(SimilarityScorer):
    """
    Normalized edit-distance similarity.

    score = 1 - distance / max(len(entered), len(reference)), so a single
    typo in a ten-letter word still scores 0.9.
    """

    name = "levenshtein"

    def _similarity(self, entered: str, reference: str) -> float:
        return Levenshtein.normalized_similarity(entered, reference)


# =============================================================================
# EXACT Scorer
# =============================================================================


@ScorerRegistry.register(MatchMode.EXACT)
class ExactScorer(SimilarityScorer):
    """Accept only answers equal to the reference after normalization."""

    name = "exact"

    def _similarity(self, entered: str, reference: str) -> float:
        # Equal strings are handled by the base class.
        return 0.0


# =============================================================================
# TOKEN_SET Scorer
# =============================================================================


@ScorerRegistry.register(MatchMode.TOKEN_SET)
class TokenSetScorer(SimilarityScorer):
    """
    Word-order insensitive matching for multi-word answers.

    "to go out" and "go out, to" score 1.0.
    """

    name = "token_set"

    def _similarity(self, entered: str, reference: str) -> float:
        return fuzz.token_set_ratio(entered, reference) / 100
