"""
Configuration settings for the question-style engine.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QENGINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Target Style Distribution (global default)
    # ========================================
    default_direct_ratio: float = Field(
        default=0.60,
        ge=0.0,
        le=1.0,
        description="Target fraction of direct questions (60%)",
    )
    default_scenario_ratio: float = Field(
        default=0.30,
        ge=0.0,
        le=1.0,
        description="Target fraction of scenario questions (30%)",
    )
    default_case_study_ratio: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Target fraction of case study questions (10%)",
    )

    # ========================================
    # Session Distribution Tracking
    # ========================================
    session_timeout_minutes: int = Field(
        default=120,
        ge=1,
        description="Idle minutes before a session's distribution state expires",
    )
    health_deviation_threshold: float = Field(
        default=0.15,
        ge=0.0,
        le=1.0,
        description="Per-style deviation that triggers a rebalancing recommendation",
    )

    # ========================================
    # Pattern Selection Bias (needs product calibration)
    # ========================================
    synthesis_style_bias: float = Field(
        default=0.10,
        ge=0.0,
        description="Deficit bonus for scenario/case_study on synthesis-level objectives",
    )
    advanced_style_bias: float = Field(
        default=0.05,
        ge=0.0,
        description="Deficit bonus for scenario/case_study on advanced objectives",
    )

    # ========================================
    # Template Cache
    # ========================================
    template_cache_ttl_seconds: int = Field(
        default=3600,
        ge=1,
        description="Lifetime of a cached prompt template (1 hour)",
    )
    template_cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Cache size above which metrics recommend eviction",
    )

    # ========================================
    # Question Validation
    # ========================================
    validation_min_score: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Minimum quality score for a question to be considered valid",
    )
    penalty_high: int = Field(
        default=25,
        ge=0,
        description="Score penalty for a high-severity issue",
    )
    penalty_medium: int = Field(
        default=10,
        ge=0,
        description="Score penalty for a medium-severity issue",
    )
    penalty_low: int = Field(
        default=5,
        ge=0,
        description="Score penalty for a low-severity issue",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    def get_engine_config(self) -> dict[str, Any]:
        """Get engine tunables as a dictionary."""
        return {
            "target_distribution": {
                "direct": self.default_direct_ratio,
                "scenario": self.default_scenario_ratio,
                "case_study": self.default_case_study_ratio,
            },
            "session": {
                "timeout_minutes": self.session_timeout_minutes,
                "health_deviation_threshold": self.health_deviation_threshold,
            },
            "selection_bias": {
                "synthesis": self.synthesis_style_bias,
                "advanced": self.advanced_style_bias,
            },
            "template_cache": {
                "ttl_seconds": self.template_cache_ttl_seconds,
                "max_entries": self.template_cache_max_entries,
            },
            "validation": {
                "min_score": self.validation_min_score,
                "penalties": {
                    "high": self.penalty_high,
                    "medium": self.penalty_medium,
                    "low": self.penalty_low,
                },
            },
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
