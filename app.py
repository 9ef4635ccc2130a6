import streamlit as st

# Import functions from other files
from config import settings
from history_store import itinerary_history, nearby_history
from llm_handler import (
    GenerationError, LLMError, ParseError,
    generate_chat_response, generate_itinerary, search_nearby_places,
)
from logger import get_logger
from models import (
    DEFAULT_RADIUS, MAX_DURATION, MIN_DURATION, RADIUS_OPTIONS,
    ChatMessage, SearchRecord, UserPreferences, new_record_id, utc_now,
)
from prompts import format_coordinates
from share_link import DEFAULT_BUDGET, DEFAULT_DURATION, DEFAULT_ORIGIN, build_share_url, decode_preferences

logger = get_logger(__name__)

# --- Page Configuration ---
st.set_page_config(page_title="VoyageAI", layout="wide", initial_sidebar_state="expanded")

INTERESTS_OPTIONS = ["美食探索", "歷史文化", "自然風景", "購物血拼", "放鬆療癒", "冒險運動", "親子同樂", "攝影打卡"]
TRAVEL_STYLES = ["休閒放鬆", "緊湊充實", "美食之旅", "冒險探索"]
COMPANIONS = ["獨自旅行", "情侶/夫妻", "家庭", "朋友"]
TRANSPORT_OPTIONS = ["大眾運輸", "自駕", "計程車/包車", "步行"]
RADIUS_LABELS = {
    "100m": "100公尺 (步行)", "300m": "300公尺 (步行)", "500m": "500公尺 (步行)",
    "1km": "1公里", "3km": "3公里", "5km": "5公里", "10km": "10公里 (開車)",
}
ACTIVITY_ICONS = {"food": "🍜", "sightseeing": "📸", "relax": "☕", "travel": "🚆", "shopping": "🛍️", "other": "📍"}
PLACE_ICONS = {"restaurant": "🍽️", "attraction": "📸", "shop": "🛍️"}

GENERATION_FAILED = "生成行程時發生錯誤，請檢查您的網路或 API Key 設定。"
PARSE_FAILED = "無法解析行程內容，請重試。"
SEARCH_FAILED = "搜尋失敗，請稍後再試。"
CHAT_FAILED = "抱歉，連接發生錯誤，請稍後再試。"
CHAT_GREETING = "你好！我是您的旅遊助手。對這次行程有任何疑問嗎？我可以為您查詢交通、天氣或餐廳建議。"


# --- Initialize Session State ---
def initialize_session_state():
    default_values = {
        "view": "planner",
        "preferences": decode_preferences(st.query_params.to_dict()),
        "itinerary": None,
        "nearby_results": None,
        "nearby_location": "",
        "nearby_radius": DEFAULT_RADIUS,
        "chat_messages": [],
        "error_message": None,
    }
    for key, value in default_values.items():
        if key not in st.session_state:
            st.session_state[key] = value

    # History stores survive reruns; load once per session
    if "itinerary_history" not in st.session_state:
        st.session_state.itinerary_history = itinerary_history()
        st.session_state.itinerary_history.load()
    if "nearby_history" not in st.session_state:
        st.session_state.nearby_history = nearby_history()
        st.session_state.nearby_history.load()

initialize_session_state()


# --- Helper Functions ---
def reset_planner():
    st.session_state.itinerary = None
    st.session_state.error_message = None


def option_index(options, value, default=0):
    return options.index(value) if value in options else default


# --- Sidebar for Navigation/History ---
with st.sidebar:
    st.title("VoyageAI ✈️")
    st.write("AI 旅遊規劃與周邊探索")

    st.session_state.view = st.radio(
        "功能", ["planner", "nearby"],
        format_func=lambda v: "🗺️ 行程規劃" if v == "planner" else "🧭 周邊探索",
        index=0 if st.session_state.view == "planner" else 1,
    )

    if st.button("重新規劃 / New Trip"):
        reset_planner()
        st.rerun()

    st.markdown("---")
    st.subheader("📚 歷史行程")
    itineraries = st.session_state.itinerary_history.records
    if not itineraries:
        st.caption("尚無紀錄")
    for record in itineraries:
        c1, c2 = st.columns([4, 1])
        with c1:
            if st.button(f"{record.trip_name} ({record.created_at:%Y-%m-%d})", key=f"open_{record.id}"):
                st.session_state.itinerary = record
                st.session_state.view = "planner"
                st.rerun()
        with c2:
            if st.button("🗑️", key=f"del_{record.id}"):
                st.session_state.itinerary_history.delete(record.id)
                if st.session_state.itinerary is not None and st.session_state.itinerary.id == record.id:
                    reset_planner()
                st.rerun()


# --- Planner View ---
def render_trip_form():
    st.header("🌍 規劃您的完美旅程")
    initial = st.session_state.preferences
    with st.form("trip_form"):
        c1, c2 = st.columns(2)
        with c1:
            origin = st.text_input("出發地", initial.origin if initial else DEFAULT_ORIGIN)
            duration = st.slider("天數", MIN_DURATION, MAX_DURATION, initial.duration if initial else DEFAULT_DURATION)
            travel_style = st.selectbox(
                "旅遊風格", TRAVEL_STYLES,
                index=option_index(TRAVEL_STYLES, initial.travel_style if initial else None),
            )
            transport = st.selectbox(
                "交通偏好", TRANSPORT_OPTIONS,
                index=option_index(TRANSPORT_OPTIONS, initial.transport_preference if initial else None),
            )
        with c2:
            destination = st.text_input("目的地", initial.destination if initial else "")
            budget = st.number_input(
                "總預算", min_value=0, step=1000,
                value=initial.budget_amount if initial else DEFAULT_BUDGET,
            )
            companions = st.selectbox(
                "旅伴", COMPANIONS,
                index=option_index(COMPANIONS, initial.companions if initial else None, default=1),
            )
            dietary = st.text_input("飲食限制", (initial.dietary_restrictions if initial else None) or "無")

        interests = st.multiselect(
            "特別興趣", INTERESTS_OPTIONS,
            default=[i for i in (initial.interests if initial else []) if i in INTERESTS_OPTIONS],
        )
        special = st.text_area("其他需求", (initial.special_requests if initial else None) or "")

        submitted = st.form_submit_button("✨ 生成行程")

    if not submitted:
        return
    if not origin.strip() or not destination.strip():
        st.error("請輸入出發地與目的地。")
        return

    prefs = UserPreferences(
        origin=origin, destination=destination, duration=duration, budget_amount=int(budget),
        travel_style=travel_style, companions=companions, transport_preference=transport,
        dietary_restrictions=dietary, special_requests=special, interests=interests,
    )
    st.session_state.preferences = prefs
    st.session_state.error_message = None
    try:
        with st.spinner("AI 正在為您規劃行程..."):
            itinerary = generate_itinerary(prefs)
    except ParseError as e:
        logger.warning("Itinerary for %s could not be parsed: %s", prefs.destination, e)
        st.session_state.error_message = PARSE_FAILED
    except GenerationError as e:
        logger.warning("Itinerary generation for %s failed: %s", prefs.destination, e)
        st.session_state.error_message = GENERATION_FAILED
    else:
        st.session_state.itinerary = itinerary
        st.session_state.itinerary_history.append(itinerary)
    st.rerun()


def render_itinerary(itinerary):
    st.header(f"🧳 {itinerary.trip_name}")
    st.write(itinerary.summary)
    c1, c2, c3 = st.columns(3)
    c1.metric("目的地", itinerary.destination)
    c2.metric("來回交通", itinerary.estimated_transport_cost)
    c3.metric("總花費預估", itinerary.total_estimated_cost)

    for day in itinerary.days:
        with st.expander(f"Day {day.day} · {day.title}", expanded=day.day == 1):
            if day.theme:
                st.caption(day.theme)
            for act in day.activities:
                cost = f" · {act.estimated_cost}" if act.estimated_cost else ""
                st.markdown(f"**{act.time}** {ACTIVITY_ICONS.get(act.type, '📍')} **{act.activity}**{cost}")
                st.markdown(f"{act.description}  \n📍 {act.location}")

    prefs = st.session_state.preferences
    if prefs is not None and prefs.destination == itinerary.destination:
        st.markdown("---")
        st.write("🔗 分享這趟行程的設定：")
        st.code(build_share_url(settings.APP_BASE_URL, prefs), language="text")

    if st.button("⬅️ 返回"):
        reset_planner()
        st.rerun()


# --- Nearby View ---
def render_nearby():
    st.header("🧭 探索周邊精彩")
    with st.form("nearby_form"):
        location = st.text_input("地址或地標", st.session_state.nearby_location)
        radius = st.selectbox(
            "距離範圍", RADIUS_OPTIONS,
            index=option_index(list(RADIUS_OPTIONS), st.session_state.nearby_radius),
            format_func=lambda r: RADIUS_LABELS[r],
        )
        use_coords = st.checkbox("使用座標搜尋")
        c1, c2 = st.columns(2)
        latitude = c1.number_input("緯度", value=25.0330, format="%.6f")
        longitude = c2.number_input("經度", value=121.5654, format="%.6f")
        searched = st.form_submit_button("🔍 搜尋")

    if searched:
        query = format_coordinates(latitude, longitude) if use_coords else location.strip()
        if query:
            st.session_state.nearby_location = location
            st.session_state.nearby_radius = radius
            try:
                with st.spinner("搜尋中..."):
                    places = search_nearby_places(query, radius)
            except GenerationError as e:
                logger.warning("Nearby search for %r failed: %s", query, e)
                st.error(SEARCH_FAILED)
            else:
                st.session_state.nearby_results = places
                st.session_state.nearby_history.append(SearchRecord(
                    id=new_record_id(), timestamp=utc_now(),
                    location_name=query, radius=radius, results=places,
                ))

    results = st.session_state.nearby_results
    if results is not None:
        if not results:
            st.info("找不到符合條件的地點。")
        for place in results:
            st.markdown(f"### {PLACE_ICONS.get(place.type, '📍')} {place.name}")
            st.markdown(f"⭐ {place.rating} · {place.price_level}  \n📍 {place.address}")
            st.write(place.description)
            if place.tags:
                st.caption(" ".join(f"#{t}" for t in place.tags))

    with st.expander("🕘 搜尋紀錄"):
        records = st.session_state.nearby_history.records
        if records and st.button("清除所有紀錄"):
            st.session_state.nearby_history.clear()
            st.rerun()
        for record in records:
            c1, c2 = st.columns([4, 1])
            with c1:
                label = f"{record.location_name} · {RADIUS_LABELS[record.radius]} · {record.timestamp:%m/%d %H:%M}"
                if st.button(label, key=f"nearby_{record.id}"):
                    st.session_state.nearby_location = record.location_name
                    st.session_state.nearby_radius = record.radius
                    st.session_state.nearby_results = record.results
                    st.rerun()
            with c2:
                if st.button("🗑️", key=f"nearby_del_{record.id}"):
                    st.session_state.nearby_history.delete(record.id)
                    st.rerun()


# --- Chat Assistant ---
def render_chat():
    st.markdown("---")
    st.subheader("💬 旅遊助手")
    with st.chat_message("assistant"):
        st.write(CHAT_GREETING)
    for msg in st.session_state.chat_messages:
        with st.chat_message("user" if msg.role == "user" else "assistant"):
            st.write(msg.text)

    prompt = st.chat_input("問我任何關於行程的問題...")
    if not prompt or not prompt.strip():
        return

    history = list(st.session_state.chat_messages)
    st.session_state.chat_messages.append(ChatMessage(role="user", text=prompt))
    try:
        with st.spinner("思考中..."):
            reply = generate_chat_response(history, prompt, st.session_state.itinerary)
    except LLMError as e:
        logger.warning("Chat turn failed: %s", e)
        reply = CHAT_FAILED
    st.session_state.chat_messages.append(ChatMessage(role="model", text=reply))
    st.rerun()


# --- Main Application Logic ---
if st.session_state.error_message:
    st.error(st.session_state.error_message)

if st.session_state.view == "planner":
    if st.session_state.itinerary is None:
        render_trip_form()
    else:
        render_itinerary(st.session_state.itinerary)
else:
    render_nearby()

render_chat()
