import pytest

from models import ChatMessage, UserPreferences
from prompts import (
    NONE_PLACEHOLDER, build_chat_request, build_chat_system_instruction,
    build_itinerary_prompt, build_nearby_prompt, format_coordinates,
)


def test_itinerary_prompt_is_deterministic(prefs):
    same = UserPreferences(**prefs.model_dump())
    assert build_itinerary_prompt(prefs) == build_itinerary_prompt(same)


def test_itinerary_prompt_embeds_every_preference(prefs):
    prompt = build_itinerary_prompt(prefs)
    for value in ("台北", "東京", "3 days", "30000", "情侶/夫妻", "休閒放鬆", "大眾運輸", "美食探索, 歷史文化"):
        assert value in prompt


def test_itinerary_prompt_asks_for_transport_cost_and_locale(prefs):
    prompt = build_itinerary_prompt(prefs, language="Japanese", currency="JPY")
    assert "round-trip transport cost" in prompt
    assert "Deduct that transport cost" in prompt
    assert "Respond in Japanese" in prompt
    assert "JPY" in prompt
    assert "exactly 3 days" in prompt


def test_missing_preferences_render_placeholder():
    prefs = UserPreferences(origin="台北", destination="首爾", special_requests="   ")
    prompt = build_itinerary_prompt(prefs)
    assert f"Dietary restrictions: {NONE_PLACEHOLDER}" in prompt
    assert f"Special requests: {NONE_PLACEHOLDER}" in prompt
    assert f"Interests: {NONE_PLACEHOLDER}" in prompt
    assert f"Companions: {NONE_PLACEHOLDER}" in prompt


def test_nearby_prompt_contents():
    prompt = build_nearby_prompt("台北101", "3km")
    assert '"台北101"' in prompt
    assert "3km" in prompt
    assert "5 restaurants and 5 attractions" in prompt
    assert "walking distance" not in prompt


def test_nearby_prompt_walking_radius_note():
    assert "walking distance" in build_nearby_prompt("台北101", "300m")


@pytest.mark.parametrize("location, radius", [("   ", "1km"), ("台北101", "2km"), ("台北101", "")])
def test_nearby_prompt_rejects_bad_input(location, radius):
    with pytest.raises(ValueError):
        build_nearby_prompt(location, radius)


def test_format_coordinates():
    assert format_coordinates(25.033, 121.5654) == "latitude 25.033, longitude 121.5654"


def test_chat_system_instruction_without_trip():
    instruction = build_chat_system_instruction(None)
    assert "travel assistant" in instruction
    assert "Current Trip Context" not in instruction


def test_chat_request_converts_history():
    history = [ChatMessage(role="user", text="嗨"), ChatMessage(role="model", text="你好")]
    request = build_chat_request(history, "明天天氣？")
    assert request.history == [
        {"role": "user", "parts": ["嗨"]},
        {"role": "model", "parts": ["你好"]},
    ]
    assert request.message == "明天天氣？"
