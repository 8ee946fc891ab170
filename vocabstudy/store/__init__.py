"""
Progress store adapters.

- ProgressStore: the abstract boundary the study core talks to
- InMemoryProgressStore: thread-safe dictionary implementation
- SqlProgressStore: SQLAlchemy implementation (imported lazily, it pulls
  in the database engine)
"""

from .base import ProgressStore
from .memory import InMemoryProgressStore

__all__ = ["ProgressStore", "InMemoryProgressStore"]
