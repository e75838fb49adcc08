"""Engine configuration and heuristic settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_BASE_DIR = Path(__file__).resolve().parents[2]
_ENV_FILE = _BASE_DIR / ".env"


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE, env_file_encoding="utf-8", extra="ignore"
    )

    # Transfer buffers (minutes)
    local_buffer_min: int = Field(
        default=5, description="Buffer before/after a local transfer"
    )
    airport_egress_buffer_min: int = Field(
        default=30, description="Buffer after a flight arrival before ground transport"
    )
    airport_ingress_buffer_min: int = Field(
        default=20, description="Buffer between drop-off and a flight departure"
    )
    walking_threshold_min: int = Field(
        default=15,
        description="Windows shorter than this between stationary segments are walkable",
    )
    tight_schedule_min: int = Field(
        default=10, description="Transfer windows shorter than this are flagged tight"
    )
    max_transfer_min: int = Field(
        default=180,
        description="Longest window a synthesized transfer stretches across",
    )

    # Dependency graph
    implicit_dependency_window_min: int = Field(
        default=30,
        description="A segment starting this soon after another ends depends on it",
    )

    # Duration inference
    meaningful_duration_min: int = Field(
        default=5,
        description="Recorded durations shorter than this are treated as missing",
    )
    default_activity_min: int = Field(
        default=120, description="Duration used when no pattern matches"
    )

    # Gap classification
    overnight_same_day_hours: float = Field(
        default=8.0, description="Same-day gaps longer than this count as overnight"
    )
    overnight_evening_hour: int = Field(
        default=18, description="Earliest end hour for an evening-to-morning gap"
    )
    overnight_morning_cutoff_hour: int = Field(
        default=14, description="Next-day start hour must be before this"
    )

    # Location matching
    word_overlap_threshold: float = Field(
        default=0.7, description="Share of significant words that must match"
    )
    substring_min_length: int = Field(
        default=8, description="Names longer than this may match by containment"
    )
    coordinate_match_meters: float = Field(
        default=100.0, description="Coordinates closer than this raise confidence"
    )

    # Enrichment
    enrichment_timeout_s: float = Field(
        default=3.0, description="Timeout for a single enrichment search"
    )

    @field_validator("word_overlap_threshold", mode="after")
    @classmethod
    def _validate_threshold(cls, value: float) -> float:
        """Keep the overlap threshold a proper fraction."""
        if not 0.0 < value <= 1.0:
            raise ValueError("word_overlap_threshold must be in (0, 1]")
        return value


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get engine settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
