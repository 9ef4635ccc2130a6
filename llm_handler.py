import json
import re # For stripping markdown fences
from typing import List, Optional, Sequence

import google.generativeai as genai
from pydantic import ValidationError

from config import settings
from logger import get_logger
from models import (
    DEFAULT_RADIUS, ChatMessage, Itinerary, ItineraryPayload, NearbyPlace,
    NearbyResponse, UserPreferences, new_record_id, utc_now,
)
from prompts import (
    ITINERARY_SYSTEM_INSTRUCTION, NEARBY_SYSTEM_INSTRUCTION,
    build_chat_request, build_itinerary_prompt, build_nearby_prompt,
)
from schemas import ITINERARY_SCHEMA, NEARBY_RESPONSE_SCHEMA

logger = get_logger(__name__)

# --- Configuration ---
# Safety settings: Adjust thresholds as needed for your application.
# Blocking too aggressively might prevent useful responses.
DEFAULT_SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]

_FENCE_RE = re.compile(r"```[A-Za-z]*")


class LLMError(Exception):
    """Base class for failures talking to, or understanding, the model."""


class GenerationError(LLMError):
    """The provider call failed or produced no text."""


class ParseError(LLMError):
    """The model answered, but not with JSON of the expected shape."""


def configure_gemini():
    """
    Configures the Gemini API with the key from the environment.
    Raises GenerationError when no key is configured.
    """
    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise GenerationError("GEMINI_API_KEY is not set. Add it to the environment or .env file.")
    genai.configure(api_key=api_key)


def clean_json_string(text: str) -> str:
    """
    Reduces a raw model answer to the JSON object it contains: markdown fences
    are removed, then everything from the first '{' to the last '}' is kept.
    Brace balance is not checked. Without a usable brace pair the trimmed text
    is returned as is.
    """
    cleaned = _FENCE_RE.sub("", text)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start:end + 1]
    return cleaned.strip()


def parse_json_payload(text: str) -> dict:
    cleaned = clean_json_string(text)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"LLM did not return valid JSON after cleaning: {e}") from e
    if not isinstance(payload, dict):
        raise ParseError(f"Expected a JSON object, got {type(payload).__name__}")
    return payload


def _build_model(system_instruction: Optional[str] = None, response_schema: Optional[dict] = None):
    generation_config = None
    if response_schema is not None:
        generation_config = genai.types.GenerationConfig(
            response_mime_type="application/json", # Crucial for asking for JSON output
            response_schema=response_schema,
        )
    return genai.GenerativeModel(
        settings.GEMINI_MODEL,
        safety_settings=DEFAULT_SAFETY_SETTINGS,
        generation_config=generation_config,
        system_instruction=system_instruction,
    )


def _response_text(response) -> str:
    if not response.candidates:
        feedback = getattr(response, "prompt_feedback", None)
        logger.warning("Gemini API returned no candidates. Prompt feedback: %s", feedback)
        return ""
    try:
        return response.text or ""
    except ValueError:
        # Raised by the SDK when the candidate has no text parts (e.g. blocked).
        logger.warning("Gemini candidate carried no text (finish reason: %s)",
                       getattr(response.candidates[0], "finish_reason", None))
        return ""


def get_gemini_response(prompt_text: str,
                        response_schema: Optional[dict] = None,
                        system_instruction: Optional[str] = None) -> str:
    """
    Sends a prompt to the Gemini API and returns the raw response text.

    Args:
        prompt_text (str): The prompt to send to the LLM.
        response_schema (dict): Optional schema; when given the model is asked
                                for application/json constrained to it.
        system_instruction (str): Optional system instruction.

    Returns:
        str: The text of the first candidate.

    Raises:
        GenerationError: missing API key, provider failure or empty response.
    """
    configure_gemini()
    model = _build_model(system_instruction, response_schema)

    logger.debug("Sending prompt to %s (%d chars)", settings.GEMINI_MODEL, len(prompt_text))
    try:
        response = model.generate_content(prompt_text)
    except Exception as e:
        logger.exception("Error communicating with Gemini API")
        raise GenerationError(f"Error communicating with Gemini API: {e}") from e

    text = _response_text(response)
    if not text:
        raise GenerationError("No text response from Gemini")
    return text


def generate_itinerary(prefs: UserPreferences) -> Itinerary:
    prompt = build_itinerary_prompt(prefs, settings.RESPONSE_LANGUAGE, settings.CURRENCY)
    text = get_gemini_response(
        prompt,
        response_schema=ITINERARY_SCHEMA,
        system_instruction=ITINERARY_SYSTEM_INSTRUCTION.format(language=settings.RESPONSE_LANGUAGE),
    )

    try:
        payload = ItineraryPayload.model_validate(parse_json_payload(text))
    except ValidationError as e:
        logger.error("Itinerary response failed validation: %s", e)
        raise ParseError(f"Itinerary response does not match the schema: {e}") from e
    except ParseError:
        logger.error("Could not parse itinerary response: %.500s", text)
        raise

    itinerary = Itinerary(id=new_record_id(), created_at=utc_now(), **payload.model_dump())
    logger.info("Generated itinerary %s for %s (%d days)",
                itinerary.id, itinerary.destination, len(itinerary.days))
    return itinerary


def search_nearby_places(location: str, radius: str = DEFAULT_RADIUS) -> List[NearbyPlace]:
    """
    Provider failures propagate as GenerationError; an unparsable answer only
    yields an empty list.
    """
    prompt = build_nearby_prompt(location, radius, settings.RESPONSE_LANGUAGE, settings.CURRENCY)
    text = get_gemini_response(
        prompt,
        response_schema=NEARBY_RESPONSE_SCHEMA,
        system_instruction=NEARBY_SYSTEM_INSTRUCTION.format(
            language=settings.RESPONSE_LANGUAGE, currency=settings.CURRENCY,
        ),
    )

    try:
        places = NearbyResponse.model_validate(parse_json_payload(text)).places
    except (ParseError, ValidationError) as e:
        logger.warning("Discarding unparsable nearby-search response for %r: %s", location, e)
        return []

    logger.info("Found %d places within %s of %r", len(places), radius, location)
    return places


def generate_chat_response(history: Sequence[ChatMessage],
                           new_message: str,
                           trip_context: Optional[Itinerary] = None) -> str:
    request = build_chat_request(history, new_message, trip_context, settings.RESPONSE_LANGUAGE)

    configure_gemini()
    model = _build_model(system_instruction=request.system_instruction)
    try:
        chat = model.start_chat(history=request.history)
        response = chat.send_message(request.message)
    except Exception as e:
        logger.exception("Error during chat turn")
        raise GenerationError(f"Error communicating with Gemini API: {e}") from e

    return _response_text(response) or settings.CHAT_FALLBACK_MESSAGE
