# prompts.py

from typing import List, NamedTuple, Optional, Sequence

from models import RADIUS_OPTIONS, WALKING_RADII, ChatMessage, Itinerary, UserPreferences

# Rendered in place of any preference the user left empty, so the model
# does not invent one.
NONE_PLACEHOLDER = "None"

DEFAULT_LANGUAGE = "Traditional Chinese (Taiwan usage)"
DEFAULT_CURRENCY = "New Taiwan Dollar (NT$)"

# System instructions
ITINERARY_SYSTEM_INSTRUCTION = (
    "You are an expert travel planner. Always respond in {language}. "
    "Provide structured JSON output only."
)

NEARBY_SYSTEM_INSTRUCTION = (
    "You are a local guide expert. Recommend great places nearby within a specific radius. "
    "Always respond in {language} and always use {currency} for prices."
)

CHAT_SYSTEM_INSTRUCTION = (
    "You are a helpful travel assistant. Answer questions about travel, destinations, "
    "and logistics in {language}."
)

CHAT_TRIP_CONTEXT = """

Current Trip Context:
Destination: {destination}
Summary: {summary}
Total estimated cost: {total_cost}
Full details are known to the user. Answer specific questions about this itinerary if asked."""

# Prompt to generate a full day-by-day itinerary
ITINERARY_PROMPT = """
I need a travel itinerary for the following trip:
- Origin: {origin}
- Destination: {destination}
- Duration: {duration} days
- Total budget: {budget} ({currency})
- Companions: {companions}
- Travel style: {travel_style}
- Transport preference: {transport_preference}
- Dietary restrictions: {dietary_restrictions}
- Special requests: {special_requests}
- Interests: {interests}

Instructions:
1. First estimate the round-trip transport cost between {origin} and {destination}
   and report it separately as "estimatedTransportCost".
2. Deduct that transport cost from the total budget and size the daily spending
   of activities, food and local transport with what remains.
3. Prefer real, named venues (restaurants, attractions, shops) over generic descriptions.
4. For every day, list activities with time, place, description, type and estimated cost,
   sorted by time and allowing for travel time between places.
5. Report the estimated cost of the whole trip as "totalEstimatedCost".
6. Respond in {language}. Express every price in {currency}.
7. Return only a JSON object matching the declared response schema, with exactly {duration} days.
"""

# Prompt to recommend places around a location
NEARBY_PROMPT = """
Recommend 5 restaurants and 5 attractions or activities located at or near "{location}",
all within a radius of {radius}.

Requirements:
1. Places must stay within the requested radius ({radius}).{walking_note}
2. Include hidden gems recommended by locals as well as must-visit spots.
3. Give a real, specific address or street name for every place.
4. Estimate prices in {currency}.
5. Base ratings on typical online reviews, out of 5.
6. Respond in {language}.
7. Return only a JSON object with a "places" list matching the declared response schema.
"""

WALKING_NOTE = " This is walking distance, so only recommend places very close by."

COORDINATES_QUERY = "latitude {latitude}, longitude {longitude}"


class ChatRequest(NamedTuple):
    system_instruction: str
    history: List[dict]
    message: str


def _or_none(value: Optional[str]) -> str:
    return value if value else NONE_PLACEHOLDER


def build_itinerary_prompt(prefs: UserPreferences,
                           language: str = DEFAULT_LANGUAGE,
                           currency: str = DEFAULT_CURRENCY) -> str:
    return ITINERARY_PROMPT.format(
        origin=prefs.origin,
        destination=prefs.destination,
        duration=prefs.duration,
        budget=prefs.budget_amount,
        currency=currency,
        companions=_or_none(prefs.companions),
        travel_style=_or_none(prefs.travel_style),
        transport_preference=_or_none(prefs.transport_preference),
        dietary_restrictions=_or_none(prefs.dietary_restrictions),
        special_requests=_or_none(prefs.special_requests),
        interests=", ".join(prefs.interests) if prefs.interests else NONE_PLACEHOLDER,
        language=language,
    )


def build_nearby_prompt(location: str, radius: str,
                        language: str = DEFAULT_LANGUAGE,
                        currency: str = DEFAULT_CURRENCY) -> str:
    location = location.strip()
    if not location:
        raise ValueError("location must not be empty")
    if radius not in RADIUS_OPTIONS:
        raise ValueError(f"unknown radius {radius!r}, expected one of {', '.join(RADIUS_OPTIONS)}")

    return NEARBY_PROMPT.format(
        location=location,
        radius=radius,
        walking_note=WALKING_NOTE if radius in WALKING_RADII else "",
        currency=currency,
        language=language,
    )


def format_coordinates(latitude: float, longitude: float) -> str:
    """Location query used instead of free text when a position is known."""
    return COORDINATES_QUERY.format(latitude=latitude, longitude=longitude)


def build_chat_system_instruction(trip_context: Optional[Itinerary] = None,
                                  language: str = DEFAULT_LANGUAGE) -> str:
    instruction = CHAT_SYSTEM_INSTRUCTION.format(language=language)
    if trip_context is not None:
        instruction += CHAT_TRIP_CONTEXT.format(
            destination=trip_context.destination,
            summary=trip_context.summary,
            total_cost=trip_context.total_estimated_cost,
        )
    return instruction


def build_chat_request(history: Sequence[ChatMessage],
                       new_message: str,
                       trip_context: Optional[Itinerary] = None,
                       language: str = DEFAULT_LANGUAGE) -> ChatRequest:
    """
    Prior turns become Gemini content dicts; the new message is sent on its own
    so the chat session appends it after the history.
    """
    turns = [{"role": m.role, "parts": [m.text]} for m in history]
    return ChatRequest(
        system_instruction=build_chat_system_instruction(trip_context, language),
        history=turns,
        message=new_message,
    )
