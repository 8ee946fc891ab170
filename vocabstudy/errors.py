"""
Study engine error taxonomy.

Every failure that crosses the Session Facade is a StudyError subclass.
Boundary layers map these to HTTP status codes or CLI exit codes.
"""

from __future__ import annotations


class StudyError(Exception):
    """Base class for all study engine errors."""

    code: str = "study_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NotFound(StudyError):
    """An identifier does not resolve to a stored record."""

    code = "not_found"

    @classmethod
    def for_record(cls, kind: str, record_id: int) -> NotFound:
        return cls(f"{kind} {record_id} not found")


class InvalidArgument(StudyError):
    """A caller supplied a malformed argument (negative id, non-positive limit)."""

    code = "invalid_argument"


class Conflict(StudyError):
    """A save lost an optimistic-concurrency race against another writer."""

    code = "conflict"


class StorageUnavailable(StudyError):
    """The progress store failed in a way the core cannot recover from."""

    code = "storage_unavailable"
