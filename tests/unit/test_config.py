"""
Unit tests for Settings.
"""

import pytest
from pydantic import ValidationError

from config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("ACCEPT_THRESHOLD", raising=False)
    settings = Settings(_env_file=None)
    assert settings.match_mode == "levenshtein"
    assert settings.accept_threshold == 0.85
    assert settings.close_threshold == 0.60
    assert settings.default_study_limit == 5
    assert settings.get_strict_accent_langs() == frozenset()


def test_environment_override(monkeypatch):
    monkeypatch.setenv("ACCEPT_THRESHOLD", "0.9")
    monkeypatch.setenv("MATCH_MODE", "token_set")
    settings = Settings(_env_file=None)
    assert settings.accept_threshold == 0.9
    assert settings.match_mode == "token_set"


def test_strict_accent_langs_parsed():
    settings = Settings(_env_file=None, strict_accent_langs=" ES, pt ,,")
    assert settings.get_strict_accent_langs() == frozenset({"es", "pt"})


def test_close_above_accept_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, accept_threshold=0.5, close_threshold=0.7)


def test_unknown_match_mode_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, match_mode="soundex")


def test_limit_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, default_study_limit=0)


def test_grouped_views():
    settings = Settings(_env_file=None)
    assert settings.get_scoring_config()["match_mode"] == "levenshtein"
    assert settings.get_progress_thresholds()["min_exposure"] == 3
