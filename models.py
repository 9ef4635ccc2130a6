# models.py
# Domain records exchanged with the LLM and kept in local history.
# Attribute names are snake_case; the JSON names (what the model returns and
# what history files store) are the camelCase aliases.

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ActivityType = Literal["food", "sightseeing", "relax", "travel", "shopping", "other"]
PlaceType = Literal["restaurant", "attraction", "shop"]
RadiusLabel = Literal["100m", "300m", "500m", "1km", "3km", "5km", "10km"]

RADIUS_OPTIONS = ("100m", "300m", "500m", "1km", "3km", "5km", "10km")
WALKING_RADII = ("100m", "300m", "500m")
DEFAULT_RADIUS = "1km"

MIN_DURATION = 1
MAX_DURATION = 14


def new_record_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Trip input ---

class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    duration: int = Field(3, ge=MIN_DURATION, le=MAX_DURATION)
    budget_amount: int = Field(20000, ge=0)
    travel_style: Optional[str] = None
    companions: Optional[str] = None
    transport_preference: Optional[str] = None
    dietary_restrictions: Optional[str] = None
    special_requests: Optional[str] = None
    interests: List[str] = Field(default_factory=list)

    @field_validator("origin", "destination")
    @classmethod
    def _required_place(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator(
        "travel_style", "companions", "transport_preference",
        "dietary_restrictions", "special_requests",
    )
    @classmethod
    def _blank_is_missing(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @field_validator("interests")
    @classmethod
    def _unique_tags(cls, value: List[str]) -> List[str]:
        tags = [tag.strip() for tag in value if tag and tag.strip()]
        return list(dict.fromkeys(tags))


# --- Itinerary ---

class Activity(_Record):
    time: str
    activity: str
    description: str
    location: str
    type: ActivityType
    estimated_cost: Optional[str] = Field(None, alias="estimatedCost")


class DayPlan(_Record):
    day: int = Field(..., gt=0)
    title: str
    theme: str = ""
    activities: List[Activity]


class ItineraryPayload(_Record):
    """The itinerary exactly as the model returns it."""

    destination: str
    trip_name: str = Field(..., alias="tripName")
    summary: str
    estimated_transport_cost: str = Field(..., alias="estimatedTransportCost")
    total_estimated_cost: str = Field(..., alias="totalEstimatedCost")
    days: List[DayPlan] = Field(..., min_length=1)

    @field_validator("days")
    @classmethod
    def _consecutive_day_numbers(cls, days: List[DayPlan]) -> List[DayPlan]:
        numbers = [d.day for d in days]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f"day numbers must run 1..{len(numbers)} in order, got {numbers}")
        return days


class Itinerary(ItineraryPayload):
    id: str
    created_at: datetime = Field(..., alias="createdAt")


# --- Nearby search ---

class NearbyPlace(_Record):
    name: str
    type: PlaceType
    description: str
    address: str
    rating: str
    price_level: str = Field(..., alias="priceLevel")
    tags: List[str] = Field(default_factory=list)


class NearbyResponse(_Record):
    places: List[NearbyPlace]


class SearchRecord(_Record):
    id: str
    timestamp: datetime
    location_name: str = Field(..., alias="locationName")
    radius: RadiusLabel = DEFAULT_RADIUS
    results: List[NearbyPlace] = Field(default_factory=list)


# --- Chat ---

class ChatMessage(_Record):
    role: Literal["user", "model"]
    text: str
    timestamp: datetime = Field(default_factory=utc_now)
