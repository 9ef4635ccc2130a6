# share_link.py
# Trip inputs (never the generated plan) encoded as URL query parameters, so
# another session can regenerate an equivalent itinerary.

from typing import Mapping, Optional, Union
from urllib.parse import parse_qs, urlencode

from pydantic import ValidationError

from logger import get_logger
from models import MAX_DURATION, MIN_DURATION, UserPreferences

logger = get_logger(__name__)

DEFAULT_ORIGIN = "台北"
DEFAULT_DURATION = 3
DEFAULT_BUDGET = 20000

# query key -> UserPreferences attribute, for the free-text fields
_TEXT_PARAMS = {
    "style": "travel_style",
    "who": "companions",
    "transport": "transport_preference",
    "diet": "dietary_restrictions",
    "notes": "special_requests",
}


def encode_preferences(prefs: UserPreferences) -> str:
    params = {
        "origin": prefs.origin,
        "dest": prefs.destination,
        "days": str(prefs.duration),
        "budget": str(prefs.budget_amount),
    }
    for key, attr in _TEXT_PARAMS.items():
        value = getattr(prefs, attr)
        if value:
            params[key] = value
    if prefs.interests:
        params["tags"] = ",".join(prefs.interests)
    return urlencode(params)


def build_share_url(base_url: str, prefs: UserPreferences) -> str:
    return f"{base_url.split('?', 1)[0]}?{encode_preferences(prefs)}"


def _first(params: Mapping, key: str) -> str:
    value = params.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    return (value or "").strip()


def _int_param(params: Mapping, key: str, default: int) -> int:
    try:
        return int(_first(params, key))
    except ValueError:
        return default


def decode_preferences(params: Union[str, Mapping]) -> Optional[UserPreferences]:
    """
    Rebuilds preferences from a query string or a mapping of query params.
    Returns None when no destination is present or the values are unusable.
    """
    if isinstance(params, str):
        params = parse_qs(params.lstrip("?"))

    destination = _first(params, "dest")
    if not destination:
        return None

    duration = _int_param(params, "days", DEFAULT_DURATION)
    budget = _int_param(params, "budget", DEFAULT_BUDGET)
    tags = _first(params, "tags")

    try:
        return UserPreferences(
            origin=_first(params, "origin") or DEFAULT_ORIGIN,
            destination=destination,
            duration=min(max(duration, MIN_DURATION), MAX_DURATION),
            budget_amount=budget if budget >= 0 else DEFAULT_BUDGET,
            interests=tags.split(",") if tags else [],
            **{attr: _first(params, key) or None for key, attr in _TEXT_PARAMS.items()},
        )
    except ValidationError as e:
        logger.warning("Ignoring unusable shared trip parameters: %s", e)
        return None
