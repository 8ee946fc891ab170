"""
Study Service (session facade).

The single entry point the boundary layers (API, CLI, tests) call:

- get_study_list(awesome_id, limit)            -> list[Challenge]
- check_response(vocab_id, vocab_study_id, s)  -> feedback string
- get_vocab_stats(vocab_study_id)              -> VocabStats
- get_awesome_person(awesome_id)               -> AwesomeProfile
- enroll(awesome_id, vocab_id)                 -> StudySession

Arguments are validated here before any component or store is touched.
Failures surface as vocabstudy.errors.StudyError subclasses.
"""

from __future__ import annotations

from loguru import logger

from config import Settings, get_settings
from vocabstudy.errors import InvalidArgument
from vocabstudy.models import AwesomeProfile, Challenge, FeedbackResult, StudySession, VocabStats
from vocabstudy.store.base import ProgressStore
from vocabstudy.study.evaluator import ResponseEvaluator
from vocabstudy.study.selector import StudySelector
from vocabstudy.study.stats import StatsAggregator


def _require_id(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{name} must be non-negative, got {value}")
    return value


def _require_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise InvalidArgument(f"limit must be an integer, got {limit!r}")
    if limit <= 0:
        raise InvalidArgument(f"limit must be positive, got {limit}")
    return limit


class StudyService:
    """
    High-level service for study operations.

    Coordinates the selector, evaluator and stats aggregator over one
    progress store. Holds no per-request state, so one instance can serve
    concurrent callers.
    """

    def __init__(
        self,
        store: ProgressStore,
        selector: StudySelector | None = None,
        evaluator: ResponseEvaluator | None = None,
        stats: StatsAggregator | None = None,
        default_limit: int = 5,
    ):
        self.store = store
        self.selector = selector or StudySelector(store)
        self.evaluator = evaluator or ResponseEvaluator(store)
        self.stats = stats or StatsAggregator(store)
        self.default_limit = default_limit

    @classmethod
    def from_settings(cls, store: ProgressStore, settings: Settings | None = None) -> StudyService:
        """Build a service whose components use the configured thresholds."""
        settings = settings or get_settings()
        return cls(
            store,
            selector=StudySelector.from_settings(store, settings),
            evaluator=ResponseEvaluator.from_settings(store, settings),
            stats=StatsAggregator.from_settings(store, settings),
            default_limit=settings.default_study_limit,
        )

    def get_study_list(self, awesome_id: int, limit: int | None = None) -> list[Challenge]:
        """Challenges for a person, weakest retention first."""
        _require_id("awesome_id", awesome_id)
        limit = _require_limit(self.default_limit if limit is None else limit)
        return self.selector.select_challenges(awesome_id, limit)

    def evaluate_response(self, vocab_id: int, vocab_study_id: int, entered: str | None) -> FeedbackResult:
        """check_response() with the full result, for callers that want the verdict."""
        _require_id("vocab_id", vocab_id)
        _require_id("vocab_study_id", vocab_study_id)
        if entered is not None and not isinstance(entered, str):
            raise InvalidArgument(f"entered must be a string, got {type(entered).__name__}")
        return self.evaluator.evaluate(vocab_id, vocab_study_id, entered or "")

    def check_response(self, vocab_id: int, vocab_study_id: int, entered: str | None) -> str:
        """Score an answer, record the attempt, and return feedback."""
        return self.evaluate_response(vocab_id, vocab_study_id, entered).feedback

    def get_vocab_stats(self, vocab_study_id: int) -> VocabStats:
        _require_id("vocab_study_id", vocab_study_id)
        return self.stats.stats_for(vocab_study_id)

    def get_awesome_person(self, awesome_id: int) -> AwesomeProfile:
        """Profile for a person; unknown people get a zero-valued profile."""
        _require_id("awesome_id", awesome_id)
        return self.stats.profile_for(awesome_id)

    def enroll(self, awesome_id: int, vocab_id: int) -> StudySession:
        """Start studying a vocab item. Returns the existing session if already enrolled."""
        _require_id("awesome_id", awesome_id)
        _require_id("vocab_id", vocab_id)
        session = self.store.create_study_session(awesome_id, vocab_id)
        logger.debug(f"Person {awesome_id} enrolled in vocab {vocab_id} (study {session.vocab_study_id})")
        return session
