"""
SQLAlchemy progress store.

Implements ProgressStore over the tables in vocabstudy.db.models. Every
call runs in its own transaction. Study session updates are conditional
on the version the caller read:

    UPDATE vocab_studies SET ..., version = version + 1
    WHERE vocab_study_id = :id AND version = :version

so two writers racing on the same row cannot both succeed.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from vocabstudy.db.database import session_scope
from vocabstudy.db.models import AwesomePersonRecord, VocabItemRecord, VocabStudyRecord
from vocabstudy.errors import Conflict, InvalidArgument, NotFound, StorageUnavailable
from vocabstudy.models import Person, StudySession, VocabItem
from vocabstudy.store.base import ProgressStore


class SqlProgressStore(ProgressStore):
    """ProgressStore backed by a relational database."""

    def __init__(self, session_factory: sessionmaker | None = None):
        """
        Args:
            session_factory: Session factory to use. Defaults to the
                application-wide SessionLocal from vocabstudy.db.database.
        """
        self._factory = session_factory

    @contextmanager
    def _transaction(self) -> Generator[Session, None, None]:
        try:
            with session_scope(self._factory) as db:
                yield db
        except SQLAlchemyError as e:
            logger.error(f"Progress store failure: {e}")
            raise StorageUnavailable(f"progress store unavailable: {e}") from e

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_vocab_item(self, vocab_id: int) -> VocabItem:
        with self._transaction() as db:
            record = db.get(VocabItemRecord, vocab_id)
            if record is None:
                raise NotFound.for_record("vocab item", vocab_id)
            return record.to_domain()

    def get_study_session(self, vocab_study_id: int) -> StudySession:
        with self._transaction() as db:
            record = db.get(VocabStudyRecord, vocab_study_id)
            if record is None:
                raise NotFound.for_record("vocab study", vocab_study_id)
            return record.to_domain()

    def list_study_sessions(self, awesome_id: int) -> list[StudySession]:
        with self._transaction() as db:
            records = db.scalars(
                select(VocabStudyRecord)
                .where(VocabStudyRecord.awesome_id == awesome_id)
                .order_by(VocabStudyRecord.vocab_study_id)
            )
            return [record.to_domain() for record in records]

    def get_person(self, awesome_id: int) -> Person:
        with self._transaction() as db:
            record = db.get(AwesomePersonRecord, awesome_id)
            if record is None:
                raise NotFound.for_record("awesome person", awesome_id)
            return record.to_domain()

    def find_study_session(self, awesome_id: int, vocab_id: int) -> StudySession | None:
        with self._transaction() as db:
            record = db.scalars(
                select(VocabStudyRecord).where(
                    VocabStudyRecord.awesome_id == awesome_id,
                    VocabStudyRecord.vocab_id == vocab_id,
                )
            ).one_or_none()
            return record.to_domain() if record else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_study_session(self, session: StudySession) -> StudySession:
        with self._transaction() as db:
            result = db.execute(
                update(VocabStudyRecord)
                .where(
                    VocabStudyRecord.vocab_study_id == session.vocab_study_id,
                    VocabStudyRecord.version == session.version,
                )
                .values(
                    attempts=session.attempts,
                    correct_attempts=session.correct_attempts,
                    last_change=session.last_change,
                    last_tested=session.last_tested,
                    version=session.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                if db.get(VocabStudyRecord, session.vocab_study_id) is None:
                    raise NotFound.for_record("vocab study", session.vocab_study_id)
                raise Conflict(f"vocab study {session.vocab_study_id} changed concurrently")

            db.flush()
            record = db.get(VocabStudyRecord, session.vocab_study_id, populate_existing=True)
            return record.to_domain()

    def create_study_session(self, awesome_id: int, vocab_id: int) -> StudySession:
        existing = self.find_study_session(awesome_id, vocab_id)
        if existing is not None:
            return existing

        try:
            with self._transaction() as db:
                if db.get(AwesomePersonRecord, awesome_id) is None:
                    raise NotFound.for_record("awesome person", awesome_id)
                if db.get(VocabItemRecord, vocab_id) is None:
                    raise NotFound.for_record("vocab item", vocab_id)

                record = VocabStudyRecord(awesome_id=awesome_id, vocab_id=vocab_id)
                db.add(record)
                db.flush()
                session = record.to_domain()
        except StorageUnavailable as e:
            # lost the race to another enrollment of the same pair
            if isinstance(e.__cause__, IntegrityError):
                winner = self.find_study_session(awesome_id, vocab_id)
                if winner is not None:
                    return winner
            raise

        logger.info(
            f"Created vocab study {session.vocab_study_id} for person {awesome_id}, vocab {vocab_id}"
        )
        return session

    def add_vocab_item(self, infinitive: str, *, vocab_id: int | None = None, **fields) -> VocabItem:
        with self._transaction() as db:
            if vocab_id is not None and db.get(VocabItemRecord, vocab_id) is not None:
                raise InvalidArgument(f"vocab item {vocab_id} already exists")
            if "alternates" in fields:
                fields["alternates"] = list(fields["alternates"])
            record = VocabItemRecord(vocab_id=vocab_id, infinitive=infinitive, **fields)
            db.add(record)
            db.flush()
            return record.to_domain()

    def add_person(self, name: str, *, awesome_id: int | None = None) -> Person:
        with self._transaction() as db:
            if awesome_id is not None and db.get(AwesomePersonRecord, awesome_id) is not None:
                raise InvalidArgument(f"awesome person {awesome_id} already exists")
            record = AwesomePersonRecord(awesome_id=awesome_id, name=name)
            db.add(record)
            db.flush()
            return record.to_domain()
