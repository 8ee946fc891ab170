"""
Unit tests for InMemoryProgressStore.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

from vocabstudy.errors import Conflict, InvalidArgument, NotFound
from vocabstudy.models import StudySession
from vocabstudy.store.memory import InMemoryProgressStore


class TestReferenceData:
    def test_auto_ids(self):
        store = InMemoryProgressStore()
        assert store.add_vocab_item("ser").vocab_id == 1
        assert store.add_vocab_item("estar", vocab_id=7).vocab_id == 7
        assert store.add_vocab_item("ir").vocab_id == 8
        assert store.add_person("Ada").awesome_id == 1

    def test_duplicate_explicit_id(self, store):
        with pytest.raises(InvalidArgument):
            store.add_vocab_item("otra", vocab_id=10)
        with pytest.raises(InvalidArgument):
            store.add_person("Other", awesome_id=1)

    def test_alternates_stored_as_tuple(self, store):
        item = store.add_vocab_item("ir", alternates=["irse"])
        assert item.alternates == ("irse",)
        assert item.accepted_answers == ["ir", "irse"]

    def test_unknown_records(self, store):
        with pytest.raises(NotFound, match="vocab item 404 not found"):
            store.get_vocab_item(404)
        with pytest.raises(NotFound, match="awesome person 404 not found"):
            store.get_person(404)


class TestStudySessions:
    def test_create_is_idempotent(self, store):
        first = store.create_study_session(1, 10)
        again = store.create_study_session(1, 10)
        assert again == first
        assert len(store.list_study_sessions(1)) == 1

    def test_create_requires_person_and_item(self, store):
        with pytest.raises(NotFound):
            store.create_study_session(99, 10)
        with pytest.raises(NotFound):
            store.create_study_session(1, 404)

    def test_find(self, store):
        assert store.find_study_session(1, 10) is None
        created = store.create_study_session(1, 10)
        assert store.find_study_session(1, 10) == created

    def test_list_in_creation_order(self, store):
        store.add_person("Grace", awesome_id=2)
        store.create_study_session(1, 12)
        store.create_study_session(2, 10)
        store.create_study_session(1, 10)
        assert [s.vocab_id for s in store.list_study_sessions(1)] == [12, 10]
        assert store.list_study_sessions(3) == []

    def test_save_bumps_version(self, store):
        session = store.create_study_session(1, 10)
        saved = store.save_study_session(replace(session, attempts=1))
        assert saved.version == session.version + 1
        assert store.get_study_session(session.vocab_study_id).attempts == 1

    def test_stale_save_conflicts(self, store):
        session = store.create_study_session(1, 10)
        store.save_study_session(replace(session, attempts=1))
        with pytest.raises(Conflict):
            store.save_study_session(replace(session, attempts=1, correct_attempts=1))
        assert store.get_study_session(session.vocab_study_id).correct_attempts == 0

    def test_save_unknown(self, store):
        with pytest.raises(NotFound):
            store.save_study_session(StudySession(999, 10, 1))

    def test_concurrent_enrollment_creates_one_session(self, store):
        with ThreadPoolExecutor(max_workers=8) as pool:
            sessions = list(pool.map(lambda _: store.create_study_session(1, 10), range(16)))
        assert len({s.vocab_study_id for s in sessions}) == 1


class TestSessionInvariants:
    def test_correct_cannot_exceed_attempts(self):
        with pytest.raises(ValueError):
            StudySession(1, 10, 1, attempts=1, correct_attempts=2)

    def test_negative_counters(self):
        with pytest.raises(ValueError):
            StudySession(1, 10, 1, attempts=-1)
