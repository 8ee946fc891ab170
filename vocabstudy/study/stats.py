"""
Stats Aggregator.

Derives VocabStats and AwesomeProfile from raw study sessions. Nothing
computed here is ever written back: every figure is re-derived from the
attempt counters on each call.

Thresholds (defaults):
- known:     last_change >= 0.7
- mastered:  correct ratio >= 0.8 once attempts >= min_exposure
- exposure:  fewer than 3 attempts counts toward smallest_vocab
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from config import Settings, get_settings
from vocabstudy.errors import NotFound
from vocabstudy.models import AwesomeProfile, StudySession, StudyStage, VocabStats
from vocabstudy.store.base import ProgressStore

NEVER_TESTED = "never"
LAST_TESTED_FORMAT = "%Y-%m-%d %H:%M UTC"


def format_last_tested(value: datetime | None) -> str:
    """Locale-independent display string for a last_tested timestamp."""
    if value is None:
        return NEVER_TESTED
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(LAST_TESTED_FORMAT)


def ratio(numerator: int, denominator: int) -> float:
    """numerator / denominator, or 0.0 when there is nothing to divide by."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def classify_stage(session: StudySession, mastery_threshold: float = 0.8, min_exposure: int = 3) -> StudyStage:
    """Derive the lifecycle stage of a session from its counters."""
    if session.attempts == 0:
        return StudyStage.UNSEEN
    if session.attempts < min_exposure:
        return StudyStage.SEEN
    if session.percentage_correct >= mastery_threshold:
        return StudyStage.MASTERED
    return StudyStage.LEARNING


class StatsAggregator:
    """Compute per-session stats and per-person profiles."""

    def __init__(
        self,
        store: ProgressStore,
        known_threshold: float = 0.7,
        mastery_threshold: float = 0.8,
        min_exposure: int = 3,
    ):
        self.store = store
        self.known_threshold = known_threshold
        self.mastery_threshold = mastery_threshold
        self.min_exposure = min_exposure

    @classmethod
    def from_settings(cls, store: ProgressStore, settings: Settings | None = None) -> StatsAggregator:
        settings = settings or get_settings()
        return cls(
            store,
            known_threshold=settings.known_threshold,
            mastery_threshold=settings.mastery_threshold,
            min_exposure=settings.min_exposure,
        )

    def stage_of(self, session: StudySession) -> StudyStage:
        return classify_stage(session, self.mastery_threshold, self.min_exposure)

    def stats_for(self, vocab_study_id: int) -> VocabStats:
        """Statistics for one study session. Raises NotFound if it does not exist."""
        session = self.store.get_study_session(vocab_study_id)
        return self.summarize_session(session)

    def summarize_session(self, session: StudySession) -> VocabStats:
        return VocabStats(
            vocab_study_id=session.vocab_study_id,
            vocab_id=session.vocab_id,
            attempts=session.attempts,
            correct_attempts=session.correct_attempts,
            percentage_correct=ratio(session.correct_attempts, session.attempts),
            last_change=session.last_change,
            last_tested=format_last_tested(session.last_tested),
            stage=self.stage_of(session),
        )

    def profile_for(self, awesome_id: int) -> AwesomeProfile:
        """
        Aggregate profile for a person.

        An unknown person, or one with no study sessions, yields a
        zero-valued profile rather than an error.
        """
        try:
            person = self.store.get_person(awesome_id)
        except NotFound:
            return self.summarize_profile(awesome_id, "", [])

        sessions = self.store.list_study_sessions(awesome_id)
        return self.summarize_profile(awesome_id, person.name, sessions)

    def summarize_profile(
        self, awesome_id: int, name: str, sessions: Iterable[StudySession]
    ) -> AwesomeProfile:
        """Pure aggregation over a collection of sessions."""
        stage_counts = {stage.value: 0 for stage in StudyStage}
        num_known = 0
        total_attempts = 0
        total_correct = 0
        smallest_vocab = 0

        for session in sessions:
            total_attempts += session.attempts
            total_correct += session.correct_attempts
            if session.attempts > 0 and session.last_change >= self.known_threshold:
                num_known += 1
            if session.attempts < self.min_exposure:
                smallest_vocab += 1
            stage_counts[self.stage_of(session).value] += 1

        return AwesomeProfile(
            awesome_id=awesome_id,
            name=name,
            num_known=num_known,
            num_correct=total_correct,
            num_incorrect=total_attempts - total_correct,
            total_percentage=ratio(total_correct, total_attempts),
            smallest_vocab=smallest_vocab,
            stage_counts=stage_counts,
        )
