"""
In-memory progress store.

Thread-safe reference implementation of ProgressStore, used by tests, the
demo seed, and any caller that does not need durability. All maps are
guarded by one lock; versions give the same optimistic-concurrency
contract as the SQL store.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import UTC, datetime

from loguru import logger

from vocabstudy.errors import Conflict, InvalidArgument, NotFound
from vocabstudy.models import Person, StudySession, VocabItem
from vocabstudy.store.base import ProgressStore


class InMemoryProgressStore(ProgressStore):
    """Dictionary-backed ProgressStore."""

    def __init__(self):
        self._lock = threading.RLock()
        self._items: dict[int, VocabItem] = {}
        self._people: dict[int, Person] = {}
        self._sessions: dict[int, StudySession] = {}
        self._pairs: dict[tuple[int, int], int] = {}
        self._study_ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_vocab_item(self, vocab_id: int) -> VocabItem:
        with self._lock:
            try:
                return self._items[vocab_id]
            except KeyError:
                raise NotFound.for_record("vocab item", vocab_id) from None

    def get_study_session(self, vocab_study_id: int) -> StudySession:
        with self._lock:
            try:
                return self._sessions[vocab_study_id]
            except KeyError:
                raise NotFound.for_record("vocab study", vocab_study_id) from None

    def list_study_sessions(self, awesome_id: int) -> list[StudySession]:
        with self._lock:
            # dicts keep insertion order, which is creation order here
            return [s for s in self._sessions.values() if s.awesome_id == awesome_id]

    def get_person(self, awesome_id: int) -> Person:
        with self._lock:
            try:
                return self._people[awesome_id]
            except KeyError:
                raise NotFound.for_record("awesome person", awesome_id) from None

    def find_study_session(self, awesome_id: int, vocab_id: int) -> StudySession | None:
        with self._lock:
            vocab_study_id = self._pairs.get((awesome_id, vocab_id))
            if vocab_study_id is None:
                return None
            return self._sessions[vocab_study_id]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_study_session(self, session: StudySession) -> StudySession:
        with self._lock:
            current = self._sessions.get(session.vocab_study_id)
            if current is None:
                raise NotFound.for_record("vocab study", session.vocab_study_id)
            if current.version != session.version:
                raise Conflict(
                    f"vocab study {session.vocab_study_id} changed concurrently "
                    f"(expected version {session.version}, found {current.version})"
                )
            saved = replace(session, version=session.version + 1)
            self._sessions[saved.vocab_study_id] = saved
            return saved

    def create_study_session(self, awesome_id: int, vocab_id: int) -> StudySession:
        with self._lock:
            existing = self.find_study_session(awesome_id, vocab_id)
            if existing is not None:
                return existing
            self.get_person(awesome_id)
            self.get_vocab_item(vocab_id)

            session = StudySession(
                vocab_study_id=next(self._study_ids),
                vocab_id=vocab_id,
                awesome_id=awesome_id,
                created_at=datetime.now(UTC),
            )
            self._sessions[session.vocab_study_id] = session
            self._pairs[(awesome_id, vocab_id)] = session.vocab_study_id
            logger.debug(
                f"Created vocab study {session.vocab_study_id} for person {awesome_id}, vocab {vocab_id}"
            )
            return session

    def add_vocab_item(self, infinitive: str, *, vocab_id: int | None = None, **fields) -> VocabItem:
        with self._lock:
            if vocab_id is None:
                vocab_id = max(self._items, default=0) + 1
            elif vocab_id in self._items:
                raise InvalidArgument(f"vocab item {vocab_id} already exists")
            if "alternates" in fields:
                fields["alternates"] = tuple(fields["alternates"])
            item = VocabItem(vocab_id=vocab_id, infinitive=infinitive, **fields)
            self._items[vocab_id] = item
            return item

    def add_person(self, name: str, *, awesome_id: int | None = None) -> Person:
        with self._lock:
            if awesome_id is None:
                awesome_id = max(self._people, default=0) + 1
            elif awesome_id in self._people:
                raise InvalidArgument(f"awesome person {awesome_id} already exists")
            person = Person(awesome_id=awesome_id, name=name)
            self._people[awesome_id] = person
            return person
