"""Decide whether two described locations are the same place.

Locations arrive from many sources with inconsistent naming: an airport
may carry an IATA code or only a name, a hotel may be described by its
brand in one segment and by its street address in the next. The matcher
applies an ordered cascade of rules and the first rule that applies
decides. Coordinates never decide on their own; they only move the
confidence reported alongside the decision.
"""

import logging
import math

from backend.continuity.config import Settings, get_settings
from backend.continuity.models.common import Coordinates, Location
from backend.continuity.models.gap import LocationMatch
from backend.continuity.utils.strings import (
    looks_like_street_address,
    normalize_city_name,
    normalize_name,
    share_significant_word,
    significant_words,
    word_overlap_ratio,
)

logger = logging.getLogger(__name__)

# Small lookup for airports seen often enough to resolve without an address
AIRPORT_CITIES = {
    "JFK": "new york",
    "LGA": "new york",
    "EWR": "newark",
    "LAX": "los angeles",
    "SFO": "san francisco",
    "ORD": "chicago",
    "ATL": "atlanta",
    "DFW": "dallas",
    "BOS": "boston",
    "PHL": "philadelphia",
    "MIA": "miami",
    "SEA": "seattle",
    "DEN": "denver",
    "HNL": "honolulu",
    "LHR": "london",
    "LGW": "london",
    "CDG": "paris",
    "ORY": "paris",
    "MXP": "milan",
    "LIN": "milan",
    "FCO": "rome",
    "CIA": "rome",
    "VCE": "venice",
    "MAD": "madrid",
    "BCN": "barcelona",
    "AMS": "amsterdam",
    "FRA": "frankfurt",
    "ATH": "athens",
    "LIM": "lima",
    "CUZ": "cusco",
    "GIG": "rio de janeiro",
    "NRT": "tokyo",
    "HND": "tokyo",
    "KEF": "reykjavik",
}

AIRPORT_COUNTRIES = {
    "JFK": "US",
    "LGA": "US",
    "EWR": "US",
    "LAX": "US",
    "SFO": "US",
    "ORD": "US",
    "ATL": "US",
    "DFW": "US",
    "BOS": "US",
    "PHL": "US",
    "MIA": "US",
    "SEA": "US",
    "DEN": "US",
    "HNL": "US",
    "LHR": "GB",
    "LGW": "GB",
    "CDG": "FR",
    "ORY": "FR",
    "MXP": "IT",
    "LIN": "IT",
    "FCO": "IT",
    "CIA": "IT",
    "VCE": "IT",
    "MAD": "ES",
    "BCN": "ES",
    "AMS": "NL",
    "FRA": "DE",
    "ATH": "GR",
    "LIM": "PE",
    "CUZ": "PE",
    "GIG": "BR",
    "NRT": "JP",
    "HND": "JP",
    "KEF": "IS",
}


def haversine_meters(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points in meters."""
    # Earth radius in meters
    R = 6_371_000.0

    lat1, lon1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lng)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.asin(math.sqrt(h))

    return R * c


class LocationMatcher:
    """Ordered rule cascade for location identity."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def is_same_location(self, a: Location, b: Location) -> bool:
        """Whether two locations describe the same place."""
        return self.match(a, b).same

    def match(self, a: Location, b: Location) -> LocationMatch:
        """Run the cascade and report the deciding rule with a confidence."""
        result = self._decide(a, b)
        logger.debug(
            f"Location match {a.name!r} vs {b.name!r}: same={result.same} rule={result.rule}"
        )
        close = self._coordinates_close(a, b)
        if close is None:
            return result

        # Proximity raises confidence in "same" and lowers it in "different"
        if close and result.same:
            confidence = min(1.0, result.confidence + 0.15)
        elif close:
            confidence = max(0.0, result.confidence - 0.2)
        elif result.same:
            confidence = max(0.0, result.confidence - 0.2)
        else:
            confidence = min(1.0, result.confidence + 0.1)
        return result.model_copy(update={"confidence": round(confidence, 2)})

    def _decide(self, a: Location, b: Location) -> LocationMatch:
        # Rule 1: both coded
        if a.code and b.code:
            return LocationMatch(same=a.code == b.code, rule="code", confidence=1.0)

        # Rule 2: normalized names
        if normalize_name(a.name) == normalize_name(b.name):
            return LocationMatch(same=True, rule="name", confidence=0.95)

        # Rule 3: one coded, one not
        if a.code or b.code:
            return LocationMatch(same=False, rule="code_mismatch", confidence=0.7)

        # Rule 4: street addresses
        if (
            self._is_address_like(a)
            or self._is_address_like(b)
            or self._street_equals_name(a, b)
            or self._street_equals_name(b, a)
        ):
            return self._match_address(a, b)

        # Rule 5: shared significant words or containment
        return self._match_words(a, b)

    def _is_address_like(self, location: Location) -> bool:
        return looks_like_street_address(location.name)

    def _match_address(self, a: Location, b: Location) -> LocationMatch:
        city_a = self.resolve_city(a)
        city_b = self.resolve_city(b)
        if city_a and city_b and city_a != city_b:
            return LocationMatch(same=False, rule="address", confidence=0.9)

        # One side's street is literally the other side's name
        if self._street_equals_name(a, b) or self._street_equals_name(b, a):
            return LocationMatch(same=True, rule="address", confidence=0.9)

        if city_a is None or city_a != city_b:
            return LocationMatch(same=False, rule="address", confidence=0.5)

        if share_significant_word(self._word_pool(a, city_a), self._word_pool(b, city_b)):
            return LocationMatch(same=True, rule="address", confidence=0.75)
        return LocationMatch(same=False, rule="address", confidence=0.6)

    def _match_words(self, a: Location, b: Location) -> LocationMatch:
        name_a = normalize_name(a.name)
        name_b = normalize_name(b.name)

        min_length = self.settings.substring_min_length
        if len(name_a) > min_length and len(name_b) > min_length:
            if name_a in name_b or name_b in name_a:
                return LocationMatch(same=True, rule="containment", confidence=0.8)

        ratio = word_overlap_ratio(significant_words(a.name), significant_words(b.name))
        if ratio > self.settings.word_overlap_threshold:
            return LocationMatch(same=True, rule="words", confidence=round(0.5 + 0.3 * ratio, 2))
        return LocationMatch(same=False, rule="words", confidence=round(0.8 - 0.3 * ratio, 2))

    @staticmethod
    def _street_equals_name(a: Location, b: Location) -> bool:
        if not a.address or not a.address.street:
            return False
        return normalize_name(a.address.street) == normalize_name(b.name)

    @staticmethod
    def _word_pool(location: Location, city: str | None) -> list[str]:
        # A shared city name says nothing about the venue
        street = location.address.street if location.address else None
        city_words = set(significant_words(city))
        return [word for word in significant_words(location.name, street) if word not in city_words]

    def _coordinates_close(self, a: Location, b: Location) -> bool | None:
        if a.coordinates is None or b.coordinates is None:
            return None
        distance = haversine_meters(a.coordinates, b.coordinates)
        return distance <= self.settings.coordinate_match_meters

    def resolve_city(self, location: Location) -> str | None:
        """Best-effort normalized city for a location.

        Uses the address city, then the airport table, then the tail of a
        comma-separated name ("Hotel Ritz, Madrid").
        """
        if location.city:
            city = normalize_city_name(location.city)
            if city:
                return city
        if location.code and location.code in AIRPORT_CITIES:
            return AIRPORT_CITIES[location.code]
        parts = [part.strip() for part in location.name.split(",") if part.strip()]
        while len(parts) > 1 and len(parts[-1]) == 2:
            parts.pop()
        if len(parts) > 1:
            city = normalize_city_name(parts[-1])
            return city or None
        return None

    def resolve_country(self, location: Location) -> str | None:
        """Country from the address, or from the airport table."""
        if location.address and location.address.country:
            return location.address.country.upper()
        if location.code:
            return AIRPORT_COUNTRIES.get(location.code)
        return None

    def same_city(self, a: Location, b: Location) -> bool | None:
        """True/False when both cities resolve, None when either is unknown."""
        city_a = self.resolve_city(a)
        city_b = self.resolve_city(b)
        if city_a is None or city_b is None:
            return None
        return city_a == city_b
