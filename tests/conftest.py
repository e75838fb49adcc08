"""Pytest configuration and fixtures for testing."""

import pytest

from backend.continuity.config import Settings
from backend.continuity.matching.location_matcher import LocationMatcher
from backend.continuity.metrics.registry import MetricsClient


@pytest.fixture
def settings() -> Settings:
    """Engine settings with defaults only (no .env file)."""
    return Settings(_env_file=None)


@pytest.fixture
def metrics() -> MetricsClient:
    """Create a fresh metrics client."""
    return MetricsClient()


@pytest.fixture
def matcher(settings: Settings) -> LocationMatcher:
    """Location matcher using default settings."""
    return LocationMatcher(settings)
