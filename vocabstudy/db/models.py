"""
SQLAlchemy models for persisted study data.

Tables:
- awesome_people: learners
- vocab_items: immutable vocabulary reference data
- vocab_studies: one row per (person, item) with attempt counters

Column types are portable between SQLite and PostgreSQL.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from vocabstudy.models import Person, StudySession, VocabItem


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on the way back; stored values are always UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class AwesomePersonRecord(Base):
    """A learner."""

    __tablename__ = "awesome_people"

    awesome_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    studies: Mapped[list[VocabStudyRecord]] = relationship(back_populates="person")

    def __repr__(self) -> str:
        return f"<AwesomePersonRecord id={self.awesome_id} name={self.name!r}>"

    def to_domain(self) -> Person:
        return Person(awesome_id=self.awesome_id, name=self.name or "")


class VocabItemRecord(Base):
    """Vocabulary reference data."""

    __tablename__ = "vocab_items"

    vocab_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    infinitive: Mapped[str] = mapped_column(Text, nullable=False)
    part_of_speech: Mapped[str] = mapped_column(Text, default="")
    known_lang: Mapped[str] = mapped_column(Text, default="")
    learning_lang: Mapped[str] = mapped_column(Text, default="")
    hint: Mapped[str] = mapped_column(Text, default="")
    user_notes: Mapped[str] = mapped_column(Text, default="")
    alternates: Mapped[list[str]] = mapped_column(JSON, default=list)

    def __repr__(self) -> str:
        return f"<VocabItemRecord id={self.vocab_id} infinitive={self.infinitive!r}>"

    def to_domain(self) -> VocabItem:
        return VocabItem(
            vocab_id=self.vocab_id,
            infinitive=self.infinitive,
            part_of_speech=self.part_of_speech or "",
            known_lang=self.known_lang or "",
            learning_lang=self.learning_lang or "",
            hint=self.hint or "",
            user_notes=self.user_notes or "",
            alternates=tuple(self.alternates or ()),
        )


class VocabStudyRecord(Base):
    """
    Per-(person, item) performance counters.

    `version` is bumped on every update; writers must supply the version
    they read (optimistic concurrency).
    """

    __tablename__ = "vocab_studies"

    vocab_study_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vocab_id: Mapped[int] = mapped_column(
        ForeignKey("vocab_items.vocab_id", ondelete="RESTRICT"), nullable=False
    )
    awesome_id: Mapped[int] = mapped_column(
        ForeignKey("awesome_people.awesome_id", ondelete="RESTRICT"), nullable=False
    )

    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    correct_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_change: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    last_tested: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)

    person: Mapped[AwesomePersonRecord] = relationship(back_populates="studies")

    __table_args__ = (
        UniqueConstraint("awesome_id", "vocab_id", name="uq_person_vocab"),
        CheckConstraint("correct_attempts <= attempts", name="ck_correct_le_attempts"),
        Index("idx_vocab_studies_person", "awesome_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<VocabStudyRecord id={self.vocab_study_id} person={self.awesome_id} "
            f"vocab={self.vocab_id} {self.correct_attempts}/{self.attempts}>"
        )

    def to_domain(self) -> StudySession:
        return StudySession(
            vocab_study_id=self.vocab_study_id,
            vocab_id=self.vocab_id,
            awesome_id=self.awesome_id,
            attempts=self.attempts,
            correct_attempts=self.correct_attempts,
            last_change=self.last_change,
            last_tested=_as_utc(self.last_tested),
            version=self.version,
            created_at=_as_utc(self.created_at),
        )
