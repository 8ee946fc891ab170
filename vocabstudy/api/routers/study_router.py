"""
Study router.

JSON endpoints mirroring the study operations:
- GET  /list                      getStudyList
- POST /check                     checkResponse
- GET  /stats/{vocab_study_id}    getVocabStats
- GET  /people/{awesome_id}       getAwesomePerson
- POST /enroll                    start studying a vocab item

Field names are camelCase on the wire (vocabId, vocabStudyId, ...).
Errors are translated by the StudyError handler in vocabstudy.api.main.
"""
from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vocabstudy.study.service import StudyService

router = APIRouter()


# ========================================
# Service Dependency
# ========================================


@lru_cache(maxsize=1)
def _default_service() -> StudyService:
    from vocabstudy.store.sql import SqlProgressStore

    return StudyService.from_settings(SqlProgressStore())


def get_study_service() -> StudyService:
    """FastAPI dependency for the study service."""
    return _default_service()


# ========================================
# Request/Response Models
# ========================================


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChallengeResponse(CamelModel):
    """One study list entry."""

    vocab_id: int
    vocab_study_id: int
    prompt: str
    hints: List[str] = Field(default_factory=list, description="Hints, least revealing first")


class CheckRequest(CamelModel):
    """Request model for checking an answer."""

    vocab_id: int = Field(..., description="Vocab item id")
    vocab_study_id: int = Field(..., description="Vocab study id")
    entered: str = Field("", description="The learner's answer")


class CheckResponse(CamelModel):
    feedback: str


class VocabStatsResponse(CamelModel):
    """Derived statistics for one vocab study."""

    vocab_study_id: int
    vocab_id: int
    attempts: int
    correct_attempts: int
    percentage_correct: float
    last_change: float
    last_tested: str
    stage: str


class AwesomeProfileResponse(CamelModel):
    """Derived progress profile for one person."""

    awesome_id: int
    name: str
    num_known: int
    num_correct: int
    num_incorrect: int
    total_percentage: float
    smallest_vocab: int
    stage_counts: Dict[str, int]


class EnrollRequest(CamelModel):
    awesome_id: int
    vocab_id: int


class StudySessionResponse(CamelModel):
    vocab_study_id: int
    vocab_id: int
    awesome_id: int
    attempts: int
    correct_attempts: int
    last_change: float
    last_tested: Optional[datetime]


# ========================================
# Study Endpoints
# ========================================


@router.get("/list", response_model=List[ChallengeResponse], summary="Get study list")
def get_study_list(
    awesome_id: int = Query(..., alias="awesomeId", description="Awesome person id"),
    limit: Optional[int] = Query(None, description="Maximum number of challenges"),
    service: StudyService = Depends(get_study_service),
) -> List[ChallengeResponse]:
    """Challenges for a person, weakest retention first."""
    challenges = service.get_study_list(awesome_id, limit)
    return [
        ChallengeResponse(
            vocab_id=c.vocab_id,
            vocab_study_id=c.vocab_study_id,
            prompt=c.prompt,
            hints=list(c.hints),
        )
        for c in challenges
    ]


@router.post("/check", response_model=CheckResponse, summary="Check a response")
def check_response(
    request: CheckRequest,
    service: StudyService = Depends(get_study_service),
) -> CheckResponse:
    """Score an answer and record the attempt."""
    feedback = service.check_response(request.vocab_id, request.vocab_study_id, request.entered)
    logger.debug(f"checkResponse vocab_study={request.vocab_study_id}: {feedback}")
    return CheckResponse(feedback=feedback)


@router.get("/stats/{vocab_study_id}", response_model=VocabStatsResponse, summary="Get vocab stats")
def get_vocab_stats(
    vocab_study_id: int,
    service: StudyService = Depends(get_study_service),
) -> VocabStatsResponse:
    stats = service.get_vocab_stats(vocab_study_id)
    return VocabStatsResponse(
        vocab_study_id=stats.vocab_study_id,
        vocab_id=stats.vocab_id,
        attempts=stats.attempts,
        correct_attempts=stats.correct_attempts,
        percentage_correct=stats.percentage_correct,
        last_change=stats.last_change,
        last_tested=stats.last_tested,
        stage=stats.stage.value,
    )


@router.get("/people/{awesome_id}", response_model=AwesomeProfileResponse, summary="Get awesome person")
def get_awesome_person(
    awesome_id: int,
    service: StudyService = Depends(get_study_service),
) -> AwesomeProfileResponse:
    """Progress profile; unknown people get a zero-valued profile."""
    profile = service.get_awesome_person(awesome_id)
    return AwesomeProfileResponse(
        awesome_id=profile.awesome_id,
        name=profile.name,
        num_known=profile.num_known,
        num_correct=profile.num_correct,
        num_incorrect=profile.num_incorrect,
        total_percentage=profile.total_percentage,
        smallest_vocab=profile.smallest_vocab,
        stage_counts=profile.stage_counts,
    )


@router.post("/enroll", response_model=StudySessionResponse, status_code=201, summary="Enroll in a vocab item")
def enroll(
    request: EnrollRequest,
    service: StudyService = Depends(get_study_service),
) -> StudySessionResponse:
    session = service.enroll(request.awesome_id, request.vocab_id)
    return StudySessionResponse(
        vocab_study_id=session.vocab_study_id,
        vocab_id=session.vocab_id,
        awesome_id=session.awesome_id,
        attempts=session.attempts,
        correct_attempts=session.correct_attempts,
        last_change=session.last_change,
        last_tested=session.last_tested,
    )
