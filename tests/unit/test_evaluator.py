"""
Unit tests for ResponseEvaluator.

Tests:
- Verdict classification and feedback wording
- Attempt counters and the last_change moving average
- Accent handling per learning language
- Optimistic-concurrency retry and concurrent submissions
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

from vocabstudy.errors import Conflict, InvalidArgument, NotFound
from vocabstudy.grading import ScoreResult
from vocabstudy.models import Verdict
from vocabstudy.store.memory import InMemoryProgressStore
from vocabstudy.study.evaluator import ResponseEvaluator


class FlakyStore(InMemoryProgressStore):
    """Reports a Conflict on the first `conflicts` saves."""

    def __init__(self, conflicts: int):
        super().__init__()
        self.conflicts = conflicts
        self.reads = 0

    def get_study_session(self, vocab_study_id):
        self.reads += 1
        return super().get_study_session(vocab_study_id)

    def save_study_session(self, session):
        if self.conflicts > 0:
            self.conflicts -= 1
            raise Conflict(f"vocab study {session.vocab_study_id} changed concurrently")
        return super().save_study_session(session)


@pytest.fixture
def evaluator(store, clock):
    return ResponseEvaluator(store, clock=clock)


@pytest.fixture
def study_id(store):
    return store.create_study_session(1, 10).vocab_study_id


class TestVerdicts:
    def test_correct(self, evaluator, study_id):
        result = evaluator.evaluate(10, study_id, "hablar")
        assert result.verdict is Verdict.CORRECT
        assert result.feedback == "Correct! hablar"
        assert result.is_correct

    def test_correct_with_typo(self, store, evaluator):
        store.add_vocab_item("estudiar", vocab_id=20, learning_lang="es", hint="to study")
        study = store.create_study_session(1, 20)
        result = evaluator.evaluate(20, study.vocab_study_id, "estudar")
        assert result.verdict is Verdict.CORRECT
        assert result.feedback == "Correct! Watch the spelling: estudiar"

    def test_close(self, evaluator, study_id):
        result = evaluator.evaluate(10, study_id, "hablr")
        assert result.verdict is Verdict.CLOSE
        assert result.feedback == "Close! The answer is: hablar"

    def test_incorrect(self, evaluator, study_id):
        result = evaluator.evaluate(10, study_id, "zzz")
        assert result.verdict is Verdict.INCORRECT
        assert result.feedback == "Incorrect. The correct answer is: hablar"

    def test_empty_answer(self, evaluator, study_id):
        result = evaluator.evaluate(10, study_id, "")
        assert result.verdict is Verdict.INCORRECT
        assert result.feedback == "No answer given. The correct answer is: hablar"
        assert result.session.attempts == 1

    def test_feedback_never_contains_score(self, evaluator, study_id):
        result = evaluator.evaluate(10, study_id, "hablr")
        assert "0.8" not in result.feedback

    def test_alternate_accepted(self, store, evaluator):
        store.add_vocab_item("ir", vocab_id=21, hint="to go", alternates=["irse"])
        study = store.create_study_session(1, 21)
        result = evaluator.evaluate(21, study.vocab_study_id, "irse")
        assert result.verdict is Verdict.CORRECT
        assert result.expected == "ir"


class TestClassify:
    def test_close_band(self, evaluator):
        assert evaluator.classify(ScoreResult(score=0.7, accepted=False)) is Verdict.CLOSE

    def test_below_close(self, evaluator):
        assert evaluator.classify(ScoreResult(score=0.5, accepted=False)) is Verdict.INCORRECT

    def test_zero_is_never_close(self, store):
        evaluator = ResponseEvaluator(store, close_threshold=0.0)
        assert evaluator.classify(ScoreResult(score=0.0, accepted=False)) is Verdict.INCORRECT


class TestRecordAttempt:
    def test_counters_and_timestamp(self, evaluator, study_id, clock):
        start = clock.now
        result = evaluator.evaluate(10, study_id, "hablar")
        assert result.session.attempts == 1
        assert result.session.correct_attempts == 1
        assert result.session.last_tested == start
        assert result.session.version == 1

    def test_moving_average(self, evaluator, study_id):
        evaluator.evaluate(10, study_id, "hablar")
        result = evaluator.evaluate(10, study_id, "hablar")
        assert result.session.last_change == pytest.approx(0.51)

    def test_close_gets_partial_credit(self, evaluator, study_id):
        result = evaluator.evaluate(10, study_id, "hablr")
        assert result.session.correct_attempts == 0
        assert result.session.last_change == pytest.approx(0.15)

    def test_four_of_three_becomes_eighty_percent(self, store, evaluator, study_id):
        session = store.get_study_session(study_id)
        store.save_study_session(replace(session, attempts=4, correct_attempts=3))

        result = evaluator.evaluate(10, study_id, "hablar")

        assert result.session.attempts == 5
        assert result.session.correct_attempts == 4
        assert result.session.percentage_correct == pytest.approx(0.8)

    def test_record_attempt_is_pure(self, evaluator, store, study_id):
        session = store.get_study_session(study_id)
        evaluator.record_attempt(session, Verdict.CORRECT)
        assert store.get_study_session(study_id).attempts == 0


class TestAccents:
    @pytest.fixture
    def tree_id(self, store):
        store.add_vocab_item("árbol", vocab_id=30, learning_lang="es", hint="tree")
        return store.create_study_session(1, 30).vocab_study_id

    def test_accents_folded(self, evaluator, tree_id):
        result = evaluator.evaluate(30, tree_id, "arbol")
        assert result.feedback == "Correct! árbol"

    def test_accents_strict_for_language(self, store, clock, tree_id):
        evaluator = ResponseEvaluator(store, strict_accent_langs=frozenset({"es"}), clock=clock)
        result = evaluator.evaluate(30, tree_id, "arbol")
        assert result.verdict is Verdict.CLOSE


class TestErrors:
    def test_unknown_study(self, evaluator):
        with pytest.raises(NotFound, match="vocab study 999 not found"):
            evaluator.evaluate(10, 999, "hablar")

    def test_mismatched_vocab(self, evaluator, study_id, store):
        with pytest.raises(InvalidArgument):
            evaluator.evaluate(11, study_id, "comer")
        assert store.get_study_session(study_id).attempts == 0


class TestConcurrentSubmissions:
    def test_counters_match_successful_saves(self, store):
        study_id = store.create_study_session(1, 10).vocab_study_id
        evaluator = ResponseEvaluator(store)
        answers = ["hablar" if n % 2 == 0 else "zzz" for n in range(40)]

        def submit(answer):
            try:
                return evaluator.evaluate(10, study_id, answer)
            except Conflict:
                return None

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = [r for r in pool.map(submit, answers) if r is not None]

        session = store.get_study_session(study_id)
        assert session.attempts == len(results)
        assert session.correct_attempts == sum(r.is_correct for r in results)
        assert session.correct_attempts <= session.attempts
        assert session.version == len(results)


class TestConflictRetry:
    @pytest.fixture
    def flaky(self):
        def build(conflicts):
            store = FlakyStore(conflicts)
            store.add_person("Ada", awesome_id=1)
            store.add_vocab_item("hablar", vocab_id=10, hint="to speak")
            study = store.create_study_session(1, 10)
            return store, study.vocab_study_id

        return build

    def test_retries_once(self, flaky):
        store, study_id = flaky(1)
        result = ResponseEvaluator(store).evaluate(10, study_id, "hablar")
        assert result.session.attempts == 1
        assert store.reads == 2

    def test_more_attempts_when_configured(self, flaky):
        store, study_id = flaky(2)
        evaluator = ResponseEvaluator(store)
        evaluator.MAX_SAVE_ATTEMPTS = 3
        result = evaluator.evaluate(10, study_id, "hablar")
        assert result.session.attempts == 1
        assert store.reads == 3

    def test_second_conflict_surfaces(self, flaky):
        store, study_id = flaky(2)
        with pytest.raises(Conflict):
            ResponseEvaluator(store).evaluate(10, study_id, "hablar")
        assert store.get_study_session(study_id).attempts == 0
