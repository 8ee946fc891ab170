"""
Vocab Study Engine.

Answer-matching and progress-tracking core for a vocabulary drilling
application:

- grading: fuzzy answer scorers (normalized Levenshtein by default)
- study: response evaluation, study-list selection, statistics, facade
- store: progress store adapters (in-memory, SQLAlchemy)
- api / cli: thin FastAPI and Typer boundaries over the facade
"""

__version__ = "0.3.0"
