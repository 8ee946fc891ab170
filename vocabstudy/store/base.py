"""
Progress Store Adapter interface.

The study core reads and writes persisted records only through this
interface. Implementations must raise the errors from vocabstudy.errors:

- NotFound when an identifier does not resolve
- Conflict when save_study_session() sees a stale version
- StorageUnavailable for any backend failure
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from vocabstudy.models import Person, StudySession, VocabItem


class ProgressStore(ABC):
    """Abstract persistence boundary for vocab items, people and study sessions."""

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @abstractmethod
    def get_vocab_item(self, vocab_id: int) -> VocabItem:
        """Return a vocab item or raise NotFound."""
        ...

    @abstractmethod
    def get_study_session(self, vocab_study_id: int) -> StudySession:
        """Return a study session or raise NotFound."""
        ...

    @abstractmethod
    def list_study_sessions(self, awesome_id: int) -> list[StudySession]:
        """All sessions owned by a person, in creation order. Empty if none."""
        ...

    @abstractmethod
    def get_person(self, awesome_id: int) -> Person:
        """Return a person or raise NotFound."""
        ...

    @abstractmethod
    def find_study_session(self, awesome_id: int, vocab_id: int) -> StudySession | None:
        """Return the session for a (person, item) pair, or None."""
        ...

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @abstractmethod
    def save_study_session(self, session: StudySession) -> StudySession:
        """
        Persist an updated session.

        Succeeds only if the stored version equals session.version; the
        returned session carries the incremented version. Raises Conflict
        otherwise and NotFound if the session was never created.
        """
        ...

    @abstractmethod
    def create_study_session(self, awesome_id: int, vocab_id: int) -> StudySession:
        """
        Create the session for a (person, item) pair.

        Returns the existing session if the pair is already enrolled.
        Raises NotFound if the person or the item is unknown.
        """
        ...

    @abstractmethod
    def add_vocab_item(self, infinitive: str, *, vocab_id: int | None = None, **fields) -> VocabItem:
        """
        Insert a vocab item.

        The store assigns vocab_id when it is None. Remaining keyword
        arguments map onto VocabItem fields (hint, part_of_speech, ...).
        """
        ...

    @abstractmethod
    def add_person(self, name: str, *, awesome_id: int | None = None) -> Person:
        """Insert a person, assigning awesome_id when it is None."""
        ...
