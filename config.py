"""
Configuration settings for the vocab-study engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///vocab_study.db",
        description="SQLAlchemy connection string (SQLite or PostgreSQL)",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default="logs/vocab_study.log",
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=3001,
        description="API server port",
    )

    # ========================================
    # Answer Matching
    # ========================================
    match_mode: Literal["levenshtein", "exact", "token_set"] = Field(
        default="levenshtein",
        description="Similarity scorer used to compare answers",
    )
    accept_threshold: float = Field(
        default=0.85,
        ge=0.0,
        le=1.0,
        description="Similarity at or above which an answer is correct",
    )
    close_threshold: float = Field(
        default=0.60,
        ge=0.0,
        le=1.0,
        description="Similarity at or above which an answer is close",
    )
    strict_accent_langs: str = Field(
        default="",
        description="Comma-separated learning-language codes where accents must match",
    )

    # ========================================
    # Progress Tracking
    # ========================================
    ema_alpha: float = Field(
        default=0.3,
        gt=0.0,
        le=1.0,
        description="Smoothing factor for the last_change moving average",
    )
    close_credit: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Moving-average outcome credited for a close answer",
    )
    known_threshold: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="last_change at or above which an item counts as known",
    )
    mastery_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Correct ratio at or above which an item is mastered",
    )
    min_exposure: int = Field(
        default=3,
        ge=1,
        description="Attempts below which an item is still under-exposed",
    )

    # ========================================
    # Study Lists
    # ========================================
    default_study_limit: int = Field(
        default=5,
        gt=0,
        description="Default number of challenges per study list",
    )
    prompt_template: str = Field(
        default="{hint} ({part_of_speech})",
        description="Format string for challenge prompts",
    )

    @model_validator(mode="after")
    def _check_threshold_order(self) -> Settings:
        if self.close_threshold > self.accept_threshold:
            raise ValueError("close_threshold must not exceed accept_threshold")
        return self

    def get_strict_accent_langs(self) -> frozenset[str]:
        """Learning-language codes where diacritics are significant."""
        return frozenset(
            code.strip().lower() for code in self.strict_accent_langs.split(",") if code.strip()
        )

    def get_scoring_config(self) -> dict[str, any]:
        """Get answer matching configuration as a dictionary."""
        return {
            "match_mode": self.match_mode,
            "accept_threshold": self.accept_threshold,
            "close_threshold": self.close_threshold,
            "strict_accent_langs": self.get_strict_accent_langs(),
        }

    def get_progress_thresholds(self) -> dict[str, float]:
        """Get progress tracking thresholds."""
        return {
            "ema_alpha": self.ema_alpha,
            "close_credit": self.close_credit,
            "known_threshold": self.known_threshold,
            "mastery_threshold": self.mastery_threshold,
            "min_exposure": self.min_exposure,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
