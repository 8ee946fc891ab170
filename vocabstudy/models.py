"""
Domain models for the vocab study engine.

Reference data (VocabItem, Person) is immutable. StudySession values are
also frozen: the evaluator derives an updated copy and hands it to the
store, which accepts it only if the version still matches.

Derived figures (VocabStats, AwesomeProfile) are computed on read by the
stats aggregator and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class Verdict(str, Enum):
    """Classification of a single answer."""

    CORRECT = "correct"
    CLOSE = "close"
    INCORRECT = "incorrect"


class StudyStage(str, Enum):
    """
    Derived lifecycle of a study session.

    Never stored; recomputed from the attempt counters on every read.
    """

    UNSEEN = "unseen"  # attempts == 0
    SEEN = "seen"  # fewer attempts than min_exposure
    LEARNING = "learning"  # correct ratio below mastery threshold
    MASTERED = "mastered"  # correct ratio at or above mastery threshold

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            StudyStage.UNSEEN: "dim",
            StudyStage.SEEN: "yellow",
            StudyStage.LEARNING: "cyan",
            StudyStage.MASTERED: "green",
        }[self]


@dataclass(frozen=True)
class VocabItem:
    """A vocabulary entry authored by content creators."""

    vocab_id: int
    infinitive: str
    part_of_speech: str = ""
    known_lang: str = ""
    learning_lang: str = ""
    hint: str = ""
    user_notes: str = ""
    alternates: tuple[str, ...] = ()

    @property
    def accepted_answers(self) -> list[str]:
        """Infinitive first, then any alternate forms."""
        return [self.infinitive, *(a for a in self.alternates if a)]


@dataclass(frozen=True)
class Person:
    """An awesome person (learner)."""

    awesome_id: int
    name: str = ""


@dataclass(frozen=True)
class StudySession:
    """Persistent per-(person, item) performance record."""

    vocab_study_id: int
    vocab_id: int
    awesome_id: int
    attempts: int = 0
    correct_attempts: int = 0
    last_change: float = 0.0
    last_tested: datetime | None = None
    version: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if self.attempts < 0 or self.correct_attempts < 0:
            raise ValueError("attempt counters must be non-negative")
        if self.correct_attempts > self.attempts:
            raise ValueError(
                f"correct_attempts ({self.correct_attempts}) exceeds attempts ({self.attempts})"
            )

    @property
    def percentage_correct(self) -> float:
        """Correct ratio, 0.0 before the first attempt."""
        if self.attempts == 0:
            return 0.0
        return self.correct_attempts / self.attempts

    @property
    def incorrect_attempts(self) -> int:
        return self.attempts - self.correct_attempts


@dataclass(frozen=True)
class Challenge:
    """A request-scoped prompt for one study session. Not persisted."""

    vocab_id: int
    vocab_study_id: int
    prompt: str
    hints: tuple[str, ...] = ()  # revealed one at a time, least revealing first

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the public camelCase field names."""
        return {
            "vocabId": self.vocab_id,
            "vocabStudyId": self.vocab_study_id,
            "prompt": self.prompt,
            "hints": list(self.hints),
        }


@dataclass
class FeedbackResult:
    """Outcome of evaluating one response."""

    feedback: str
    verdict: Verdict
    expected: str
    session: StudySession

    @property
    def is_correct(self) -> bool:
        return self.verdict is Verdict.CORRECT


@dataclass
class VocabStats:
    """Derived statistics for one study session."""

    vocab_study_id: int
    vocab_id: int
    attempts: int
    correct_attempts: int
    percentage_correct: float
    last_change: float
    last_tested: str
    stage: StudyStage

    def to_dict(self) -> dict[str, Any]:
        return {
            "vocabStudyId": self.vocab_study_id,
            "vocabId": self.vocab_id,
            "attempts": self.attempts,
            "correctAttempts": self.correct_attempts,
            "percentageCorrect": self.percentage_correct,
            "lastChange": self.last_change,
            "lastTested": self.last_tested,
            "stage": self.stage.value,
        }


@dataclass
class AwesomeProfile:
    """Derived summary of a person's progress across all study sessions."""

    awesome_id: int
    name: str = ""
    num_known: int = 0
    num_correct: int = 0
    num_incorrect: int = 0
    total_percentage: float = 0.0
    smallest_vocab: int = 0
    stage_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "awesomeId": self.awesome_id,
            "name": self.name,
            "numKnown": self.num_known,
            "numCorrect": self.num_correct,
            "numIncorrect": self.num_incorrect,
            "totalPercentage": self.total_percentage,
            "smallestVocab": self.smallest_vocab,
            "stageCounts": dict(self.stage_counts),
        }
