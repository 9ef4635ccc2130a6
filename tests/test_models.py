import pytest
from pydantic import ValidationError

from models import DayPlan, ItineraryPayload, SearchRecord, UserPreferences, new_record_id, utc_now
from schemas import ACTIVITY_SCHEMA, ACTIVITY_TYPES, ITINERARY_SCHEMA, NEARBY_PLACE_SCHEMA, PLACE_TYPES


def test_preferences_are_frozen(prefs):
    with pytest.raises(ValidationError):
        prefs.destination = "大阪"


@pytest.mark.parametrize("field", ["origin", "destination"])
def test_preferences_require_places(field):
    values = {"origin": "台北", "destination": "東京", field: "  "}
    with pytest.raises(ValidationError):
        UserPreferences(**values)


@pytest.mark.parametrize("duration", [0, 15])
def test_preferences_duration_range(duration):
    with pytest.raises(ValidationError):
        UserPreferences(origin="台北", destination="東京", duration=duration)


def test_preferences_dedupe_interests():
    prefs = UserPreferences(origin="台北", destination="東京", interests=["美食探索", " 美食探索", "", "攝影打卡"])
    assert prefs.interests == ["美食探索", "攝影打卡"]


def test_duplicate_day_numbers_rejected(itinerary_payload):
    itinerary_payload["days"][1]["day"] = 1
    with pytest.raises(ValidationError):
        ItineraryPayload.model_validate(itinerary_payload)


def test_day_theme_is_optional(itinerary_payload):
    day = dict(itinerary_payload["days"][0])
    del day["theme"]
    assert DayPlan.model_validate(day).theme == ""


def test_search_record_rejects_unknown_radius():
    with pytest.raises(ValidationError):
        SearchRecord(id=new_record_id(), timestamp=utc_now(), locationName="x", radius="2km")


def test_schema_required_fields_match_models():
    aliases = {f.alias or name for name, f in ItineraryPayload.model_fields.items() if f.is_required()}
    assert aliases == set(ITINERARY_SCHEMA["required"])
    assert ACTIVITY_SCHEMA["properties"]["type"]["enum"] == ACTIVITY_TYPES
    assert NEARBY_PLACE_SCHEMA["properties"]["type"]["enum"] == PLACE_TYPES


@pytest.mark.parametrize("numbers", [[1, 5, 9], [2, 3, 4], [1, 3, 2]])
def test_day_numbers_must_run_from_one_in_order(itinerary_payload, numbers):
    for day, number in zip(itinerary_payload["days"], numbers):
        day["day"] = number
    with pytest.raises(ValidationError):
        ItineraryPayload.model_validate(itinerary_payload)
