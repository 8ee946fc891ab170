"""
Base Similarity Scorer.

Provides the abstract base for answer scorers, answer normalization, and a
registry for scorer discovery and instantiation.
"""

from __future__ import annotations

import re
import unicodedata
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from loguru import logger

_WHITESPACE = re.compile(r"\s+")


class MatchMode(str, Enum):
    """How entered text is compared against a reference answer."""

    LEVENSHTEIN = "levenshtein"  # Normalized edit distance
    EXACT = "exact"  # Equality after normalization
    TOKEN_SET = "token_set"  # Word-order insensitive overlap


def normalize_answer(text: str | None, fold_accents: bool = True) -> str:
    """
    Normalize text for comparison.

    Lowercases, collapses runs of whitespace, trims, and (unless disabled)
    strips diacritics so that "Café" and "cafe" compare equal.
    """
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", str(text)).casefold()
    if fold_accents:
        decomposed = unicodedata.normalize("NFKD", text)
        text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", text).strip()


# =============================================================================
# Score Result
# =============================================================================


@dataclass(frozen=True)
class ScoreResult:
    """Similarity of one entered string against one reference."""

    score: float  # 0.0 to 1.0
    accepted: bool
    reference: str = ""
    normalized_entered: str = ""
    normalized_reference: str = ""


# =============================================================================
# Scorer Registry
# =============================================================================


class ScorerRegistry:
    """
    Registry for similarity scorers.

    Example:
        @ScorerRegistry.register(MatchMode.LEVENSHTEIN)
        class LevenshteinScorer(SimilarityScorer):
            ...

        scorer = ScorerRegistry.create(MatchMode.LEVENSHTEIN, threshold=0.85)
    """

    _scorers: ClassVar[dict[MatchMode, type[SimilarityScorer]]] = {}

    @classmethod
    def register(cls, mode: MatchMode):
        """
        Decorator to register a scorer.

        Args:
            mode: MatchMode this scorer handles
        """

        def decorator(scorer_class: type[SimilarityScorer]):
            cls._scorers[mode] = scorer_class
            scorer_class.match_mode = mode
            logger.debug(f"Registered scorer: {mode.value} -> {scorer_class.__name__}")
            return scorer_class

        return decorator

    @classmethod
    def get(cls, mode: MatchMode | str) -> type[SimilarityScorer]:
        """Get scorer class by match mode."""
        mode = MatchMode(mode)
        if mode not in cls._scorers:
            raise KeyError(f"No scorer registered for mode: {mode.value}")
        return cls._scorers[mode]

    @classmethod
    def create(cls, mode: MatchMode | str, threshold: float) -> SimilarityScorer:
        """Instantiate the scorer registered for a mode."""
        return cls.get(mode)(threshold=threshold)

    @classmethod
    def list_scorers(cls) -> dict[str, type[SimilarityScorer]]:
        """List all registered scorers."""
        return {mode.value: cls._scorers[mode] for mode in cls._scorers}


# =============================================================================
# Base Similarity Scorer
# =============================================================================


class SimilarityScorer(ABC):
    """
    Abstract base class for similarity scorers.

    Scorers are pure: the same inputs always produce the same ScoreResult,
    and they hold no state beyond their acceptance threshold, so a single
    instance is safe to share between threads.

    Subclasses implement _similarity() over already-normalized strings.
    """

    match_mode: ClassVar[MatchMode] = MatchMode.LEVENSHTEIN
    name: ClassVar[str] = "base_scorer"

    def __init__(self, threshold: float = 0.85):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"threshold must be within [0, 1], got {threshold}")
        self.threshold = threshold

    @abstractmethod
    def _similarity(self, entered: str, reference: str) -> float:
        """Similarity of two normalized, non-empty strings in [0, 1]."""
        ...

    def score(self, entered: str | None, reference: str, fold_accents: bool = True) -> ScoreResult:
        """
        Score entered text against a single reference answer.

        Empty entered text always scores 0 and is rejected.
        """
        norm_entered = normalize_answer(entered, fold_accents)
        norm_reference = normalize_answer(reference, fold_accents)

        if not norm_entered or not norm_reference:
            value = 0.0
        elif norm_entered == norm_reference:
            value = 1.0
        else:
            value = min(max(float(self._similarity(norm_entered, norm_reference)), 0.0), 1.0)

        return ScoreResult(
            score=value,
            accepted=value > 0.0 and value >= self.threshold,
            reference=reference,
            normalized_entered=norm_entered,
            normalized_reference=norm_reference,
        )

    def best_match(
        self, entered: str | None, references: Iterable[str], fold_accents: bool = True
    ) -> ScoreResult:
        """
        Score against several accepted answers and keep the best.

        Ties keep the earliest reference, so the canonical form wins.
        """
        best: ScoreResult | None = None
        for reference in references:
            result = self.score(entered, reference, fold_accents)
            if best is None or result.score > best.score:
                best = result
        if best is None:
            return ScoreResult(score=0.0, accepted=False)
        return best
