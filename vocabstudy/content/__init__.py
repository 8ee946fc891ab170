"""Vocabulary content import."""

from .loader import ImportReport, VocabularyLoader

__all__ = ["ImportReport", "VocabularyLoader"]
