"""Location identity matching."""

from .location_matcher import (
    AIRPORT_CITIES,
    AIRPORT_COUNTRIES,
    LocationMatcher,
    haversine_meters,
)

__all__ = ["AIRPORT_CITIES", "AIRPORT_COUNTRIES", "LocationMatcher", "haversine_meters"]
