# schemas.py
# Response schemas handed to Gemini as `response_schema`. Field names here,
# the aliases in models.py and the prompts must all agree.

ACTIVITY_TYPES = ["food", "sightseeing", "relax", "travel", "shopping", "other"]
PLACE_TYPES = ["restaurant", "attraction", "shop"]


def _string(description=None):
    field = {"type": "string"}
    if description:
        field["description"] = description
    return field


def _enum(values, description=None):
    field = {"type": "string", "format": "enum", "enum": list(values)}
    if description:
        field["description"] = description
    return field


# --- Itinerary ---

ACTIVITY_SCHEMA = {
    "type": "object",
    "properties": {
        "time": _string("Time of the activity (e.g., 09:00 AM)"),
        "activity": _string("Name of the activity or place"),
        "description": _string("Short detailed description of what to do there"),
        "location": _string("Address or area name"),
        "type": _enum(ACTIVITY_TYPES, "Category of the activity"),
        "estimatedCost": _string("Estimated cost per person in the requested currency"),
    },
    "required": ["time", "activity", "description", "location", "type"],
}

DAY_SCHEMA = {
    "type": "object",
    "properties": {
        "day": {"type": "integer", "description": "Day number (1, 2, 3...)"},
        "title": _string("Title for the day (e.g., 'Historical Center Tour')"),
        "theme": _string("Main theme of the day"),
        "activities": {
            "type": "array",
            "items": ACTIVITY_SCHEMA,
            "description": "List of activities for the day, sorted by time",
        },
    },
    "required": ["day", "title", "activities"],
}

ITINERARY_SCHEMA = {
    "type": "object",
    "properties": {
        "destination": _string(),
        "tripName": _string("A creative name for this trip"),
        "summary": _string("A brief 2-3 sentence summary of the entire trip"),
        "estimatedTransportCost": _string(
            "Estimated round-trip transport cost between origin and destination"
        ),
        "totalEstimatedCost": _string("Estimated total cost of the whole trip"),
        "days": {
            "type": "array",
            "items": DAY_SCHEMA,
            "description": "Daily breakdown of the itinerary",
        },
    },
    "required": [
        "destination",
        "tripName",
        "summary",
        "estimatedTransportCost",
        "totalEstimatedCost",
        "days",
    ],
}


# --- Nearby places ---

NEARBY_PLACE_SCHEMA = {
    "type": "object",
    "properties": {
        "name": _string(),
        "type": _enum(PLACE_TYPES),
        "description": _string("Short appealing description"),
        "address": _string("Approximate address or street name"),
        "rating": _string("Estimated rating out of 5 (e.g. 4.5)"),
        "priceLevel": _string("Average cost per person in the requested currency"),
        "tags": {"type": "array", "items": _string()},
    },
    "required": ["name", "type", "description", "address", "rating", "priceLevel", "tags"],
}

NEARBY_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "places": {"type": "array", "items": NEARBY_PLACE_SCHEMA},
    },
    "required": ["places"],
}
