"""
Study list selection.

Ranks a person's study sessions so that weak and stale items resurface
first:

1. lowest last_change (weakest retention)
2. oldest last_tested, never-tested items before any tested one
3. creation order
"""

from __future__ import annotations

import re
import string
from collections.abc import Sequence
from datetime import datetime

from loguru import logger

from config import Settings, get_settings
from vocabstudy.errors import InvalidArgument
from vocabstudy.models import Challenge, StudySession, VocabItem
from vocabstudy.store.base import ProgressStore

PROMPT_FIELDS = frozenset(
    {"infinitive", "part_of_speech", "known_lang", "learning_lang", "hint", "user_notes"}
)
_EMPTY_BRACKETS = re.compile(r"\s*(\(\s*\)|\[\s*\])")


class PromptFormatter:
    """Render a challenge prompt from a vocab item using a format template."""

    def __init__(self, template: str = "{hint} ({part_of_speech})"):
        unknown = {
            name
            for _, name, _, _ in string.Formatter().parse(template)
            if name is not None and name not in PROMPT_FIELDS
        }
        if unknown:
            raise ValueError(f"Unknown prompt template fields: {', '.join(sorted(unknown))}")
        self.template = template

    def format(self, item: VocabItem) -> str:
        prompt = self.template.format(
            infinitive=item.infinitive,
            part_of_speech=item.part_of_speech,
            known_lang=item.known_lang,
            learning_lang=item.learning_lang,
            hint=item.hint,
            user_notes=item.user_notes,
        )
        prompt = _EMPTY_BRACKETS.sub("", prompt).strip()
        if not prompt:
            prompt = f"? ({len(item.infinitive)} letters)"
        if item.user_notes and "{user_notes}" not in self.template:
            prompt = f"{prompt} - {item.user_notes}"
        return prompt


def hints_for(item: VocabItem) -> tuple[str, ...]:
    """
    Ordered hints for a vocab item, least revealing first.

    The answer itself is never included. Empty fields are skipped.
    """
    hints = [f"Words in answer: {len(item.infinitive.split())}"]
    if item.part_of_speech:
        hints.append(f"Part of speech: {item.part_of_speech}")
    if item.known_lang:
        hints.append(f"Translate from: {item.known_lang}")
    if item.hint:
        hints.append(f"Other hints: {item.hint}")
    if item.user_notes:
        hints.append(f"Your notes: {item.user_notes}")
    return tuple(hints)


def retention_key(position: int, session: StudySession) -> tuple:
    """Sort key: weakest retention, then stalest, then creation order."""
    tested = session.last_tested
    return (
        session.last_change,
        tested is not None,
        tested or datetime.min,
        position,
    )


def rank_sessions(sessions: Sequence[StudySession]) -> list[StudySession]:
    """Order sessions weakest-retention-first. Pure."""
    ranked = sorted(enumerate(sessions), key=lambda pair: retention_key(*pair))
    return [session for _, session in ranked]


class StudySelector:
    """Choose which vocab items a person should study next."""

    def __init__(self, store: ProgressStore, formatter: PromptFormatter | None = None):
        self.store = store
        self.formatter = formatter or PromptFormatter()

    @classmethod
    def from_settings(cls, store: ProgressStore, settings: Settings | None = None) -> StudySelector:
        settings = settings or get_settings()
        return cls(store, PromptFormatter(settings.prompt_template))

    def select_challenges(self, awesome_id: int, limit: int) -> list[Challenge]:
        """
        Build up to `limit` challenges for a person.

        Returns fewer than `limit` when the person has fewer study
        sessions; never pads.

        Raises:
            InvalidArgument: limit is not positive
            NotFound: the person does not exist
        """
        if limit <= 0:
            raise InvalidArgument(f"limit must be positive, got {limit}")

        self.store.get_person(awesome_id)
        sessions = self.store.list_study_sessions(awesome_id)
        selected = rank_sessions(sessions)[:limit]

        challenges = []
        for session in selected:
            item = self.store.get_vocab_item(session.vocab_id)
            challenges.append(
                Challenge(
                    vocab_id=item.vocab_id,
                    vocab_study_id=session.vocab_study_id,
                    prompt=self.formatter.format(item),
                    hints=hints_for(item),
                )
            )

        logger.debug(
            f"Selected {len(challenges)} of {len(sessions)} challenges for person {awesome_id}"
        )
        return challenges
