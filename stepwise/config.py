"""
Configuration settings for the stepwise practice engine.

Uses Pydantic Settings for environment variable management with .env file support.
All variables are prefixed with ``STEPWISE_`` (e.g. ``STEPWISE_MASTERY_THRESHOLD=3``).
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from stepwise.core.mastery import MasteryConfig
    from stepwise.core.models import SelectionWeights
    from stepwise.study.guidance import GuidanceConfig
    from stepwise.study.orchestrator import OrchestratorConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STEPWISE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Mastery State Machine
    # ========================================
    step_max: int = Field(
        default=5,
        ge=1,
        description="Upper bound of the per-word mastery step",
    )
    mastery_threshold: int = Field(
        default=2,
        ge=1,
        description="Step at or above which a word counts as mastered",
    )
    revision_demotion_step: int = Field(
        default=1,
        ge=0,
        description="Step a mastered word drops to when a revision attempt is wrong",
    )

    # ========================================
    # Sessions & Progression
    # ========================================
    completion_threshold: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Fraction of a session's words that must be mastered to rotate",
    )
    max_complexity_level: int = Field(
        default=10,
        ge=1,
        description="Highest complexity level a subject can unlock",
    )
    default_session_size: int = Field(
        default=12,
        ge=1,
        description="Words drawn into a new session",
    )
    min_session_size: int = Field(default=1, ge=1)
    max_session_size: int = Field(default=50, ge=1)

    # Selection weights for new subject settings
    weight_struggling: float = Field(default=0.5, ge=0.0)
    weight_new: float = Field(default=0.3, ge=0.0)
    weight_revision: float = Field(default=0.2, ge=0.0)

    # ========================================
    # Guidance
    # ========================================
    struggling_accuracy_floor: float = Field(
        default=0.4,
        ge=0.0,
        le=1.0,
        description="Recent accuracy below this marks a word as struggling",
    )
    reveal_ceiling: int = Field(
        default=3,
        ge=0,
        description="Answer reveals at or beyond this mark a word as struggling",
    )
    recent_attempt_window: int = Field(
        default=5,
        ge=1,
        description="Number of latest attempts used for recent accuracy",
    )

    # ========================================
    # Storage & Content
    # ========================================
    profile_dir: Path = Field(
        default=Path.home() / ".stepwise" / "profiles",
        description="Directory holding one JSON document per learner",
    )
    catalog_dir: Path | None = Field(
        default=None,
        description="Optional directory with extra question bank JSON files",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Minimum loguru level for the CLI sink",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper() if isinstance(value, str) else value

    def mastery_config(self) -> MasteryConfig:
        """Build the mastery state machine configuration."""
        from stepwise.core.mastery import MasteryConfig

        return MasteryConfig(
            step_max=self.step_max,
            mastery_threshold=self.mastery_threshold,
            revision_step=self.revision_demotion_step,
        )

    def selection_weights(self) -> SelectionWeights:
        """Default bucket weights for subjects without their own."""
        from stepwise.core.models import SelectionWeights

        return SelectionWeights(
            struggling=self.weight_struggling,
            new=self.weight_new,
            revision=self.weight_revision,
        )

    def orchestrator_config(self) -> OrchestratorConfig:
        """Build the session orchestrator configuration."""
        from stepwise.study.orchestrator import OrchestratorConfig

        return OrchestratorConfig(
            completion_threshold=self.completion_threshold,
            max_complexity_level=self.max_complexity_level,
            default_session_size=self.default_session_size,
            min_session_size=self.min_session_size,
            max_session_size=max(self.min_session_size, self.max_session_size),
        )

    def guidance_config(self) -> GuidanceConfig:
        """Build the guidance thresholds."""
        from stepwise.study.guidance import GuidanceConfig

        return GuidanceConfig(
            accuracy_floor=self.struggling_accuracy_floor,
            reveal_ceiling=self.reveal_ceiling,
            recent_window=self.recent_attempt_window,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
