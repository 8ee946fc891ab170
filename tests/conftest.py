"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from vocabstudy.store.memory import InMemoryProgressStore  # noqa: E402
from vocabstudy.study.evaluator import ResponseEvaluator  # noqa: E402
from vocabstudy.study.service import StudyService  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        elif "smoke" in path:
            item.add_marker(pytest.mark.smoke)


class FixedClock:
    """Deterministic clock; each call advances one minute."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(minutes=1)
        return current


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    """In-memory store with one person and three Spanish verbs."""
    store = InMemoryProgressStore()
    store.add_person("Ada", awesome_id=1)
    store.add_vocab_item(
        "hablar", vocab_id=10, part_of_speech="verb", known_lang="en",
        learning_lang="es", hint="to speak",
    )
    store.add_vocab_item(
        "comer", vocab_id=11, part_of_speech="verb", known_lang="en",
        learning_lang="es", hint="to eat",
    )
    store.add_vocab_item(
        "vivir", vocab_id=12, part_of_speech="verb", known_lang="en",
        learning_lang="es", hint="to live", user_notes="regular -ir",
    )
    return store


@pytest.fixture
def service(store, clock):
    """StudyService over the seeded store with a deterministic clock."""
    return StudyService(store, evaluator=ResponseEvaluator(store, clock=clock))
