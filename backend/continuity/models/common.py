"""Common data types and enums used across the engine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class SegmentType(str, Enum):
    """Segment type discriminator."""

    FLIGHT = "FLIGHT"
    HOTEL = "HOTEL"
    MEETING = "MEETING"
    ACTIVITY = "ACTIVITY"
    TRANSFER = "TRANSFER"
    CUSTOM = "CUSTOM"


class SegmentStatus(str, Enum):
    """Booking status of a segment."""

    TENTATIVE = "TENTATIVE"
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class TransferType(str, Enum):
    """Ground transfer vehicle types."""

    TAXI = "TAXI"
    SHUTTLE = "SHUTTLE"
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"
    RIDE_SHARE = "RIDE_SHARE"
    RENTAL_CAR = "RENTAL_CAR"
    RAIL = "RAIL"
    FERRY = "FERRY"
    WALKING = "WALKING"
    OTHER = "OTHER"


class GapClassification(str, Enum):
    """Category of a discontinuity between adjacent segments."""

    NONE = "NONE"
    SKIP_OVERNIGHT = "SKIP_OVERNIGHT"
    LOCAL_TRANSFER = "LOCAL_TRANSFER"
    AIRPORT_TRANSFER = "AIRPORT_TRANSFER"
    TRAVEL_DAY = "TRAVEL_DAY"


class Confidence(str, Enum):
    """Confidence levels for heuristic results."""

    high = "high"
    medium = "medium"
    low = "low"


# Types that may overlap other segments without conflicting
BACKGROUND_TYPES = frozenset({SegmentType.HOTEL, SegmentType.MEETING})

# Conveyances: a traveler occupies one at a time
EXCLUSIVE_TYPES = frozenset({SegmentType.FLIGHT, SegmentType.TRANSFER})

# Start location equals end location
STATIONARY_TYPES = frozenset(
    {SegmentType.HOTEL, SegmentType.MEETING, SegmentType.ACTIVITY}
)


class Coordinates(BaseModel):
    """Geographic coordinates in WGS84 decimal degrees."""

    lat: float = Field(ge=-90.0, le=90.0, description="Latitude in decimal degrees")
    lng: float = Field(
        ge=-180.0, le=180.0, description="Longitude in decimal degrees"
    )


class Address(BaseModel):
    """Postal address of a location."""

    street: str | None = Field(default=None, description="Street address")
    city: str | None = Field(default=None, description="City name")
    state: str | None = Field(default=None, description="State or province")
    postal_code: str | None = Field(default=None, description="Postal or ZIP code")
    country: str | None = Field(
        default=None, description="Country (ISO 3166-1 alpha-2 preferred)"
    )


class Location(BaseModel):
    """A described place: airport, hotel, venue or street address."""

    name: str = Field(description="Location name")
    code: str | None = Field(
        default=None, description="Short identifier such as an IATA airport code"
    )
    address: Address | None = Field(default=None, description="Physical address")
    coordinates: Coordinates | None = Field(
        default=None, description="Geographic coordinates"
    )
    timezone: str | None = Field(default=None, description="IANA timezone identifier")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Ensure the name carries text."""
        if not v or not v.strip():
            raise ValueError("Location name must not be empty")
        return v

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str | None) -> str | None:
        """Upper-case codes; blank codes count as absent."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            return None
        if not v.isalnum():
            raise ValueError(f"Location code must be alphanumeric: {v!r}")
        return v.upper()

    @property
    def city(self) -> str | None:
        """City from the address, if present."""
        return self.address.city if self.address else None

    def display_name(self) -> str:
        """Name with code or city for human-readable messages."""
        if self.code:
            return f"{self.name} ({self.code})"
        if self.city:
            return f"{self.name}, {self.city}"
        return self.name
