"""Unit tests for the location matching cascade."""

import pytest

from backend.continuity.matching.location_matcher import LocationMatcher, haversine_meters
from backend.continuity.models.common import Coordinates, Location
from tests.unit.segment_test_helpers import (
    CDG,
    LOUVRE,
    create_airport,
    create_location,
)

LOUVRE_COORDS = (48.8606, 2.3376)


class TestCodeRules:
    """Codes decide before anything else."""

    def test_same_code_ignores_case(self, matcher: LocationMatcher) -> None:
        """Codes are upper-cased on validation."""
        a = create_airport("jfk", "New York")
        b = Location(name="Kennedy Terminal 4", code="JFK")

        result = matcher.match(a, b)

        assert result.same
        assert result.rule == "code"
        assert result.confidence == 1.0

    def test_different_codes(self, matcher: LocationMatcher) -> None:
        """Two airports in the same city are still different places."""
        result = matcher.match(create_airport("JFK", "New York"), create_airport("LGA", "New York"))

        assert not result.same
        assert result.rule == "code"

    def test_one_coded_one_not_is_different(self, matcher: LocationMatcher) -> None:
        """A coded place never equals an uncoded one with a different name."""
        result = matcher.match(CDG, create_location("Charles de Gaulle", city="Paris"))

        assert not result.same
        assert result.rule == "code_mismatch"


def test_normalized_names_match(matcher: LocationMatcher) -> None:
    """Case and punctuation do not matter."""
    result = matcher.match(create_location("Hotel Ritz"), create_location("hotel  ritz!"))

    assert result.same
    assert result.rule == "name"


class TestAddressRules:
    """Street addresses compared against venue names."""

    def test_street_equals_other_name(self, matcher: LocationMatcher) -> None:
        """A hotel listed by its street address in another segment."""
        hotel = create_location("Hotel L'Esplanade", city="Lima", street="Juan Fanning 515-525")
        address_only = create_location("Juan Fanning 515-525", city="Lima")

        result = matcher.match(hotel, address_only)

        assert result.same
        assert result.rule == "address"

    def test_address_and_unrelated_venue(self, matcher: LocationMatcher) -> None:
        """Same city but no shared words."""
        result = matcher.match(
            create_location("350 Fifth Ave", city="New York"),
            create_location("Central Park Zoo", city="New York"),
        )

        assert not result.same
        assert result.rule == "address"

    def test_shared_word_in_same_city(self, matcher: LocationMatcher) -> None:
        """An address and a venue named after its street."""
        result = matcher.match(
            create_location("12 Rue de Rivoli", city="Paris"),
            create_location("Hotel Rivoli", city="Paris"),
        )

        assert result.same
        assert result.confidence == 0.75

    def test_shared_word_in_different_cities(self, matcher: LocationMatcher) -> None:
        """Known, differing cities always mean different places."""
        result = matcher.match(
            create_location("12 Rue de Rivoli", city="Paris"),
            create_location("Hotel Rivoli", city="Lyon"),
        )

        assert not result.same
        assert result.confidence == 0.9

    def test_venue_street_does_not_select_address_rule(self, matcher: LocationMatcher) -> None:
        """Venues with street addresses still compare by name words."""
        result = matcher.match(
            create_location("Hilton Paris Opera", city="Paris", street="108 Rue Saint-Lazare"),
            create_location("Disneyland Paris", city="Paris"),
        )

        assert not result.same
        assert result.rule == "words"

    def test_city_name_is_not_a_shared_word(self, matcher: LocationMatcher) -> None:
        """Both sides naming their own city says nothing about the venue."""
        result = matcher.match(
            create_location("12 Rue de Paris", city="Paris"),
            create_location("Paris Opera House", city="Paris"),
        )

        assert not result.same
        assert result.rule == "address"
        assert result.confidence == 0.6

    def test_shared_word_without_cities(self, matcher: LocationMatcher) -> None:
        """Without a city a shared word is not enough."""
        result = matcher.match(
            create_location("12 Rue de Rivoli"),
            create_location("Hotel Rivoli"),
        )

        assert not result.same
        assert result.confidence == 0.5


class TestWordRules:
    """Significant word overlap and containment."""

    def test_word_overlap(self, matcher: LocationMatcher) -> None:
        """Brand names with and without the generic words."""
        result = matcher.match(
            create_location("Four Seasons Resort Oahu"),
            create_location("Four Seasons Oahu"),
        )

        assert result.same
        assert result.rule == "words"
        assert result.confidence == pytest.approx(0.8)

    def test_containment(self, matcher: LocationMatcher) -> None:
        """A long name contained in another."""
        result = matcher.match(
            create_location("Louvre Museum"),
            create_location("The Louvre Museum Paris"),
        )

        assert result.same
        assert result.rule == "containment"

    def test_short_names_never_match_by_containment(self, matcher: LocationMatcher) -> None:
        """Short names fall through to word overlap."""
        result = matcher.match(create_location("Spa"), create_location("Spa Garden Terrace"))

        assert result.rule == "words"

    def test_unrelated_names(self, matcher: LocationMatcher) -> None:
        """No shared words means different places."""
        assert not matcher.is_same_location(
            create_location("Eiffel Tower"), create_location("Louvre Museum")
        )


class TestCoordinates:
    """Coordinates adjust confidence but never decide."""

    def test_close_coordinates_raise_confidence(self, matcher: LocationMatcher) -> None:
        """Same name and same point."""
        a = create_location("Louvre Museum", coords=LOUVRE_COORDS)
        b = create_location("louvre museum", coords=LOUVRE_COORDS)

        result = matcher.match(a, b)

        assert result.same
        assert result.confidence == 1.0

    def test_distant_coordinates_lower_confidence(self, matcher: LocationMatcher) -> None:
        """The decision stands even when the points disagree."""
        a = create_location("Louvre Museum", coords=LOUVRE_COORDS)
        b = create_location("Louvre Museum", coords=(45.7326, 4.8181))

        result = matcher.match(a, b)

        assert result.same
        assert result.confidence == pytest.approx(0.75)

    def test_close_coordinates_do_not_merge_different_places(
        self, matcher: LocationMatcher
    ) -> None:
        """Two venues in one building stay distinct."""
        a = create_location("Eiffel Tower", coords=(48.8584, 2.2945))
        b = create_location("Le Jules Verne", coords=(48.8583, 2.2945))

        result = matcher.match(a, b)

        assert not result.same
        assert result.confidence < 0.8


class TestResolveCity:
    """City resolution from addresses, codes and names."""

    def test_from_address(self, matcher: LocationMatcher) -> None:
        assert matcher.resolve_city(LOUVRE) == "paris"

    def test_from_airport_code(self, matcher: LocationMatcher) -> None:
        assert matcher.resolve_city(Location(name="Kennedy", code="JFK")) == "new york"

    def test_from_name_tail(self, matcher: LocationMatcher) -> None:
        assert matcher.resolve_city(create_location("Hotel Ritz, Madrid")) == "madrid"
        assert matcher.resolve_city(create_location("Hotel X, Austin, TX")) == "austin"

    def test_unknown(self, matcher: LocationMatcher) -> None:
        assert matcher.resolve_city(create_location("Hotel Ritz")) is None

    def test_same_city_is_tri_state(self, matcher: LocationMatcher) -> None:
        """None when either side is unknown."""
        assert matcher.same_city(LOUVRE, CDG) is True
        assert matcher.same_city(LOUVRE, create_airport("LHR", "London")) is False
        assert matcher.same_city(LOUVRE, create_location("Somewhere")) is None


def test_resolve_country(matcher: LocationMatcher) -> None:
    """Address country first, then the airport table."""
    assert matcher.resolve_country(create_location("Louvre", country="fr")) == "FR"
    assert matcher.resolve_country(Location(name="Haneda", code="HND")) == "JP"
    assert matcher.resolve_country(create_location("Somewhere")) is None


def test_haversine_paris_london() -> None:
    """Paris to London is roughly 344 km."""
    distance = haversine_meters(
        Coordinates(lat=48.8566, lng=2.3522), Coordinates(lat=51.5074, lng=-0.1278)
    )
    assert 340_000 < distance < 347_000
