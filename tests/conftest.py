import json

import pytest

import llm_handler
from models import UserPreferences


def make_day(number, activity_type="sightseeing"):
    return {
        "day": number,
        "title": f"第 {number} 天",
        "theme": "城市漫遊",
        "activities": [
            {
                "time": "09:00 AM",
                "activity": "淺草寺",
                "description": "參拜並逛仲見世通",
                "location": "東京都台東區淺草2-3-1",
                "type": activity_type,
                "estimatedCost": "NT$0",
            },
            {
                "time": "12:30 PM",
                "activity": "大黑家天麩羅",
                "description": "老字號天丼",
                "location": "東京都台東區淺草1-38-10",
                "type": "food",
            },
        ],
    }


@pytest.fixture
def itinerary_payload():
    return {
        "destination": "東京",
        "tripName": "東京三日散策",
        "summary": "從淺草到澀谷的經典路線。",
        "estimatedTransportCost": "NT$12,000",
        "totalEstimatedCost": "NT$29,500",
        "days": [make_day(1), make_day(2), make_day(3)],
    }


@pytest.fixture
def nearby_payload():
    return {
        "places": [
            {
                "name": "阜杭豆漿",
                "type": "restaurant",
                "description": "排隊名店的厚燒餅",
                "address": "台北市中正區忠孝東路一段108號",
                "rating": "4.3",
                "priceLevel": "NT$100/人",
                "tags": ["早餐", "在地"],
            },
            {
                "name": "華山1914文化創意產業園區",
                "type": "attraction",
                "description": "老酒廠改建的展演空間",
                "address": "台北市中正區八德路一段1號",
                "rating": "4.5",
                "priceLevel": "免費",
                "tags": ["文青"],
            },
        ]
    }


@pytest.fixture
def prefs():
    return UserPreferences(
        origin="台北",
        destination="東京",
        duration=3,
        budget_amount=30000,
        travel_style="休閒放鬆",
        companions="情侶/夫妻",
        transport_preference="大眾運輸",
        interests=["美食探索", "歷史文化"],
    )


class FakeResponse:
    def __init__(self, text):
        self._text = text
        self.candidates = [object()] if text is not None else []
        self.prompt_feedback = None

    @property
    def text(self):
        if not self._text:
            raise ValueError("no text parts")
        return self._text


class FakeGemini:
    """Stands in for genai.GenerativeModel and records every call."""

    def __init__(self):
        self.reply = None
        self.error = None
        self.models = []
        self.prompts = []
        self.chat_history = None
        self.chat_messages = []

    def reply_json(self, payload):
        self.reply = json.dumps(payload, ensure_ascii=False)

    def model_factory(self, model_name, **kwargs):
        fake = self

        class _Model:
            def __init__(self):
                self.model_name = model_name
                self.kwargs = kwargs

            def generate_content(self, prompt):
                fake.prompts.append(prompt)
                if fake.error:
                    raise fake.error
                return FakeResponse(fake.reply)

            def start_chat(self, history):
                fake.chat_history = history
                return self

            def send_message(self, message):
                fake.chat_messages.append(message)
                if fake.error:
                    raise fake.error
                return FakeResponse(fake.reply)

        model = _Model()
        self.models.append(model)
        return model


@pytest.fixture
def gemini(monkeypatch):
    fake = FakeGemini()
    monkeypatch.setattr(llm_handler.settings, "GEMINI_API_KEY", "test-key")
    monkeypatch.setattr(llm_handler.genai, "configure", lambda **kwargs: None)
    monkeypatch.setattr(llm_handler.genai, "GenerativeModel", fake.model_factory)
    return fake
