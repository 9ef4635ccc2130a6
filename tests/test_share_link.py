from urllib.parse import parse_qs, urlsplit

from models import UserPreferences
from share_link import build_share_url, decode_preferences, encode_preferences


def test_encode_uses_short_keys(prefs):
    params = parse_qs(encode_preferences(prefs))
    assert params["origin"] == ["台北"]
    assert params["dest"] == ["東京"]
    assert params["days"] == ["3"]
    assert params["budget"] == ["30000"]
    assert params["style"] == ["休閒放鬆"]
    assert params["who"] == ["情侶/夫妻"]
    assert params["tags"] == ["美食探索,歷史文化"]
    assert "diet" not in params
    assert "notes" not in params


def test_shared_link_regenerates_same_inputs(prefs):
    url = build_share_url("https://voyage.example/app?old=1", prefs)
    assert url.startswith("https://voyage.example/app?")
    assert "old=1" not in url
    assert decode_preferences(urlsplit(url).query) == prefs


def test_decode_accepts_streamlit_style_mapping():
    prefs = decode_preferences({"dest": "大阪", "days": "5", "tags": "美食探索"})
    assert prefs.destination == "大阪"
    assert prefs.origin == "台北"
    assert prefs.duration == 5
    assert prefs.budget_amount == 20000
    assert prefs.interests == ["美食探索"]


def test_decode_without_destination_is_none():
    assert decode_preferences("origin=台北&days=3") is None
    assert decode_preferences({}) is None


def test_decode_bad_numbers_fall_back():
    prefs = decode_preferences("dest=京都&days=many&budget=-5")
    assert prefs.duration == 3
    assert prefs.budget_amount == 20000


def test_decode_clamps_duration():
    assert decode_preferences("dest=京都&days=30").duration == 14
    assert decode_preferences("dest=京都&days=0").duration == 1


def test_decode_keeps_optional_text_fields():
    original = UserPreferences(
        origin="高雄", destination="沖繩", dietary_restrictions="素食", special_requests="想看海",
        transport_preference="自駕",
    )
    decoded = decode_preferences(encode_preferences(original))
    assert decoded.dietary_restrictions == "素食"
    assert decoded.special_requests == "想看海"
    assert decoded.transport_preference == "自駕"
    assert decoded.travel_style is None
