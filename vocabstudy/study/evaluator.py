"""
Response Evaluator.

Scores a learner's free-text answer against a vocab item's accepted
answers, classifies it, and records the attempt on the study session.

Classification (defaults):
- Correct:   similarity >= 0.85
- Close:     similarity >= 0.60
- Incorrect: anything else, including an empty answer

last_change is an exponential moving average of outcomes
(1.0 correct, close_credit for close, 0.0 incorrect):

    last_change = alpha * outcome + (1 - alpha) * last_change
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from datetime import UTC, datetime

from loguru import logger

from config import Settings, get_settings
from vocabstudy.errors import Conflict, InvalidArgument
from vocabstudy.grading import ScoreResult, ScorerRegistry, SimilarityScorer
from vocabstudy.models import FeedbackResult, StudySession, Verdict, VocabItem
from vocabstudy.store.base import ProgressStore


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ResponseEvaluator:
    """
    Evaluate answers and update study sessions.

    The read-modify-write is optimistic: if the save reports a Conflict the
    whole evaluation is redone once against a fresh read before the
    Conflict is surfaced.
    """

    MAX_SAVE_ATTEMPTS = 2

    def __init__(
        self,
        store: ProgressStore,
        scorer: SimilarityScorer | None = None,
        close_threshold: float = 0.60,
        ema_alpha: float = 0.3,
        close_credit: float = 0.5,
        strict_accent_langs: frozenset[str] = frozenset(),
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            store: Progress store adapter
            scorer: Similarity scorer; its threshold decides Correct.
                Defaults to a Levenshtein scorer at 0.85.
            close_threshold: Minimum similarity for a Close verdict
            ema_alpha: Weight of the newest outcome in last_change
            close_credit: Outcome value credited for a Close verdict
            strict_accent_langs: Learning-language codes where diacritics count
            clock: Source of "now" for last_tested
        """
        self.store = store
        self.scorer = scorer or ScorerRegistry.create("levenshtein", threshold=0.85)
        self.close_threshold = close_threshold
        self.ema_alpha = ema_alpha
        self.close_credit = close_credit
        self.strict_accent_langs = strict_accent_langs
        self.clock = clock

    @classmethod
    def from_settings(cls, store: ProgressStore, settings: Settings | None = None) -> ResponseEvaluator:
        settings = settings or get_settings()
        return cls(
            store,
            scorer=ScorerRegistry.create(settings.match_mode, threshold=settings.accept_threshold),
            close_threshold=settings.close_threshold,
            ema_alpha=settings.ema_alpha,
            close_credit=settings.close_credit,
            strict_accent_langs=settings.get_strict_accent_langs(),
        )

    # ------------------------------------------------------------------
    # Policy
    # ------------------------------------------------------------------

    def classify(self, match: ScoreResult) -> Verdict:
        """Map a similarity result onto a verdict."""
        if match.accepted:
            return Verdict.CORRECT
        if match.score > 0.0 and match.score >= self.close_threshold:
            return Verdict.CLOSE
        return Verdict.INCORRECT

    def score(self, item: VocabItem, entered: str | None) -> ScoreResult:
        """Best match of entered text against the item's accepted answers."""
        fold_accents = item.learning_lang.lower() not in self.strict_accent_langs
        return self.scorer.best_match(entered, item.accepted_answers, fold_accents=fold_accents)

    def record_attempt(self, session: StudySession, verdict: Verdict) -> StudySession:
        """Return the session with one more attempt applied. Pure."""
        outcome = {
            Verdict.CORRECT: 1.0,
            Verdict.CLOSE: self.close_credit,
            Verdict.INCORRECT: 0.0,
        }[verdict]
        last_change = self.ema_alpha * outcome + (1 - self.ema_alpha) * session.last_change

        return replace(
            session,
            attempts=session.attempts + 1,
            correct_attempts=session.correct_attempts + (1 if verdict is Verdict.CORRECT else 0),
            last_change=round(last_change, 6),
            last_tested=self.clock(),
        )

    @staticmethod
    def feedback_for(verdict: Verdict, item: VocabItem, match: ScoreResult) -> str:
        """Human-readable feedback. Never exposes the numeric score."""
        answer = item.infinitive
        if verdict is Verdict.CORRECT:
            if match.normalized_entered == match.normalized_reference:
                return f"Correct! {answer}"
            return f"Correct! Watch the spelling: {answer}"
        if verdict is Verdict.CLOSE:
            return f"Close! The answer is: {answer}"
        if not match.normalized_entered:
            return f"No answer given. The correct answer is: {answer}"
        return f"Incorrect. The correct answer is: {answer}"

    # ------------------------------------------------------------------
    # Operation
    # ------------------------------------------------------------------

    def evaluate(self, vocab_id: int, vocab_study_id: int, entered: str | None) -> FeedbackResult:
        """
        Score an answer and persist the attempt.

        Raises:
            NotFound: the study session or vocab item does not exist
            InvalidArgument: the study session is for a different vocab item
            Conflict: the session was updated concurrently on every attempt
            StorageUnavailable: the store failed
        """
        for _ in range(self.MAX_SAVE_ATTEMPTS - 1):
            try:
                return self._evaluate_once(vocab_id, vocab_study_id, entered)
            except Conflict:
                logger.warning(f"Conflict saving vocab study {vocab_study_id}, retrying with a fresh read")
        return self._evaluate_once(vocab_id, vocab_study_id, entered)

    def _evaluate_once(self, vocab_id: int, vocab_study_id: int, entered: str | None) -> FeedbackResult:
        """One read-score-save pass. Raises Conflict if the save is stale."""
        session = self.store.get_study_session(vocab_study_id)
        if session.vocab_id != vocab_id:
            raise InvalidArgument(
                f"vocab study {vocab_study_id} belongs to vocab {session.vocab_id}, not {vocab_id}"
            )
        item = self.store.get_vocab_item(vocab_id)

        match = self.score(item, entered)
        verdict = self.classify(match)
        saved = self.store.save_study_session(self.record_attempt(session, verdict))

        logger.debug(
            f"vocab study {vocab_study_id}: {verdict.value} "
            f"({saved.correct_attempts}/{saved.attempts})"
        )
        return FeedbackResult(
            feedback=self.feedback_for(verdict, item, match),
            verdict=verdict,
            expected=item.infinitive,
            session=saved,
        )
