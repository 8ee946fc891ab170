"""
Study core.

- evaluator: scores answers and records attempts
- selector: ranks study sessions into challenges
- stats: derives VocabStats / AwesomeProfile
- service: StudyService facade over all three
"""

from .evaluator import ResponseEvaluator
from .selector import PromptFormatter, StudySelector, hints_for, rank_sessions
from .service import StudyService
from .stats import StatsAggregator, classify_stage, format_last_tested

__all__ = [
    "ResponseEvaluator",
    "PromptFormatter",
    "StudySelector",
    "hints_for",
    "rank_sessions",
    "StudyService",
    "StatsAggregator",
    "classify_stage",
    "format_last_tested",
]
