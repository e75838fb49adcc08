"""Unit tests for gap classification."""

import pytest

from backend.continuity.models.common import GapClassification, Location, TransferType
from backend.continuity.planning.classifier import GapClassifier
from tests.unit.segment_test_helpers import (
    CDG,
    CONFLUENCES,
    EIFFEL,
    HOTEL_RITZ,
    LOUVRE,
    at,
    create_activity,
    create_airport,
    create_flight,
    create_hotel,
    create_location,
    create_transfer,
)

LUTETIA = create_location("Hotel Lutetia", city="Paris", country="FR")
JFK = create_airport("JFK", "New York", "US")


@pytest.fixture
def classifier(settings, matcher) -> GapClassifier:
    return GapClassifier(settings, matcher)


class TestOvernight:
    """Overnight detection."""

    @pytest.mark.parametrize(
        ("end", "start", "expected"),
        [
            (at(1, 21), at(2, 12), True),
            (at(1, 18), at(2, 13, 59), True),
            (at(1, 11), at(2, 15), False),
            (at(1, 17), at(2, 9), False),
            (at(1, 21), at(2, 14), False),
            (at(1, 8), at(1, 17), True),
            (at(1, 9), at(1, 12), False),
            (at(1, 9), at(1, 17), False),
        ],
    )
    def test_is_overnight_gap(self, classifier: GapClassifier, end, start, expected) -> None:
        assert classifier.is_overnight_gap(end, start) is expected


class TestAirportSegments:
    """Airport adjacency."""

    def test_flight(self) -> None:
        flight = create_flight("f1", CDG, JFK, at(1, 9), at(1, 17))
        assert GapClassifier.is_airport_segment(flight)

    def test_transfer_from_coded_airport(self) -> None:
        transfer = create_transfer("t1", CDG, HOTEL_RITZ, at(1, 9), at(1, 10))
        assert GapClassifier.is_airport_segment(transfer)

    def test_transfer_to_named_airport(self) -> None:
        orly = create_location("Orly Airport", city="Paris")
        transfer = create_transfer("t1", HOTEL_RITZ, orly, at(1, 9), at(1, 10))
        assert GapClassifier.is_airport_segment(transfer)

    def test_local_transfer(self) -> None:
        transfer = create_transfer("t1", LOUVRE, EIFFEL, at(1, 9), at(1, 10), TransferType.TAXI)
        assert not GapClassifier.is_airport_segment(transfer)

    def test_activity(self) -> None:
        activity = create_activity("a1", "Visit", LOUVRE, at(1, 9), at(1, 10))
        assert not GapClassifier.is_airport_segment(activity)


class TestClassifyGap:
    """First matching rule wins."""

    def test_same_location(self, classifier: GapClassifier) -> None:
        assert classifier.classify_gap(LOUVRE, LOUVRE, 60, False, False) == GapClassification.NONE

    def test_no_time(self, classifier: GapClassifier) -> None:
        assert classifier.classify_gap(LOUVRE, EIFFEL, 0, False, False) == GapClassification.NONE

    def test_overnight_in_same_city(self, classifier: GapClassifier) -> None:
        result = classifier.classify_gap(LOUVRE, EIFFEL, 600, True, False)
        assert result == GapClassification.SKIP_OVERNIGHT

    def test_overnight_to_airport_is_not_skipped(self, classifier: GapClassifier) -> None:
        result = classifier.classify_gap(HOTEL_RITZ, CDG, 600, True, True)
        assert result == GapClassification.AIRPORT_TRANSFER

    def test_overnight_hotel_change_is_not_skipped(self, classifier: GapClassifier) -> None:
        result = classifier.classify_gap(HOTEL_RITZ, LUTETIA, 600, True, False, hotel_to_hotel=True)
        assert result == GapClassification.LOCAL_TRANSFER

    def test_overnight_between_cities(self, classifier: GapClassifier) -> None:
        result = classifier.classify_gap(LOUVRE, CONFLUENCES, 900, True, False)
        assert result == GapClassification.TRAVEL_DAY

    def test_unknown_cities_are_a_travel_day(self, classifier: GapClassifier) -> None:
        """Only a known shared city makes a transfer local."""
        result = classifier.classify_gap(
            create_location("Louvre Museum"), create_location("Eiffel Tower"), 180, False, False
        )
        assert result == GapClassification.TRAVEL_DAY

    def test_one_unknown_city_is_a_travel_day(self, classifier: GapClassifier) -> None:
        result = classifier.classify_gap(create_location("Tower visit"), LOUVRE, 120, False, False)
        assert result == GapClassification.TRAVEL_DAY

    def test_unknown_cities_overnight_are_skipped(self, classifier: GapClassifier) -> None:
        result = classifier.classify_gap(
            create_location("Louvre Museum"), create_location("Eiffel Tower"), 600, True, False
        )
        assert result == GapClassification.SKIP_OVERNIGHT


class TestGapConfidence:
    """Confidence that a gap needs filling."""

    def _activity(self, segment_id: str, location: Location = LOUVRE):
        return create_activity(segment_id, "Visit", location, at(1, 9), at(1, 10))

    def test_flight_to_flight_travel_day(self, classifier: GapClassifier) -> None:
        first = create_flight("f1", JFK, CDG, at(1, 9), at(1, 17))
        second = create_flight("f2", create_airport("LYS", "Lyon"), JFK, at(2, 9), at(2, 17))
        assert classifier.gap_confidence(GapClassification.TRAVEL_DAY, first, second) == 95

    def test_flight_to_hotel(self, classifier: GapClassifier) -> None:
        flight = create_flight("f1", JFK, CDG, at(1, 9), at(1, 17))
        hotel = create_hotel("h1", HOTEL_RITZ, at(1, 19), at(3, 11))
        assert classifier.gap_confidence(GapClassification.AIRPORT_TRANSFER, flight, hotel) == 95

    def test_activity_to_flight(self, classifier: GapClassifier) -> None:
        flight = create_flight("f1", CDG, JFK, at(1, 15), at(1, 23))
        assert (
            classifier.gap_confidence(
                GapClassification.AIRPORT_TRANSFER, self._activity("a1"), flight
            )
            == 95
        )

    def test_hotel_to_hotel_travel_day(self, classifier: GapClassifier) -> None:
        first = create_hotel("h1", HOTEL_RITZ, at(1, 15), at(3, 11))
        second = create_hotel("h2", CONFLUENCES, at(3, 15), at(5, 11))
        assert classifier.gap_confidence(GapClassification.TRAVEL_DAY, first, second) == 90

    def test_hotel_to_activity(self, classifier: GapClassifier) -> None:
        hotel = create_hotel("h1", HOTEL_RITZ, at(1, 15), at(3, 11))
        result = classifier.gap_confidence(
            GapClassification.LOCAL_TRANSFER, hotel, self._activity("a1")
        )
        assert result == 85

    def test_activity_to_activity(self, classifier: GapClassifier) -> None:
        first, second = self._activity("a1"), self._activity("a2", EIFFEL)
        assert classifier.gap_confidence(GapClassification.LOCAL_TRANSFER, first, second) == 80
        assert classifier.gap_confidence(GapClassification.TRAVEL_DAY, first, second) == 60
        assert classifier.gap_confidence(GapClassification.SKIP_OVERNIGHT, first, second) == 50


class TestDescribeGap:
    """Human-readable gap descriptions."""

    def test_local(self, classifier: GapClassifier) -> None:
        text = classifier.describe_gap(LOUVRE, EIFFEL, GapClassification.LOCAL_TRANSFER)
        assert text == "Local transfer needed from Louvre Museum, Paris to Eiffel Tower, Paris"

    def test_airport(self, classifier: GapClassifier) -> None:
        text = classifier.describe_gap(HOTEL_RITZ, CDG, GapClassification.AIRPORT_TRANSFER)
        assert text == "Airport transfer needed from Hotel Ritz, Paris to Paris Airport (CDG)"

    def test_overnight(self, classifier: GapClassifier) -> None:
        text = classifier.describe_gap(LOUVRE, EIFFEL, GapClassification.SKIP_OVERNIGHT)
        assert text.startswith("Overnight gap between")

    def test_international(self, classifier: GapClassifier) -> None:
        text = classifier.describe_gap(JFK, CDG, GapClassification.TRAVEL_DAY)
        assert text == "International flight needed from New York Airport (JFK) to Paris Airport (CDG)"

    def test_domestic(self, classifier: GapClassifier) -> None:
        text = classifier.describe_gap(LOUVRE, CONFLUENCES, GapClassification.TRAVEL_DAY)
        assert text.startswith("Domestic transportation needed from")

    def test_unknown_country(self, classifier: GapClassifier) -> None:
        text = classifier.describe_gap(
            create_location("Somewhere"), CONFLUENCES, GapClassification.TRAVEL_DAY
        )
        assert text == "Transportation gap between Somewhere and Musee des Confluences, Lyon"


def test_suggest_segment_type() -> None:
    """Travel days suggest a flight, everything else a transfer."""
    assert GapClassifier.suggest_segment_type(GapClassification.TRAVEL_DAY) == "FLIGHT"
    assert GapClassifier.suggest_segment_type(GapClassification.LOCAL_TRANSFER) == "TRANSFER"
