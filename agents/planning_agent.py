"""
Itinerary generation with litellm: prompt, extract, validate and retry.

One request = one prompt, sent up to ``max_retries`` times until the model
returns something that both parses and validates:

  1. Prompt construction     → build_itinerary_prompt(trip)
  2. Model round-trip        → LLMClient.complete()   (errors propagate, no retry)
  3. JSON extraction         → extract_json()         (None → retry)
  4. Validation              → validate_itinerary()   (errors → retry)

The retry loop is a small explicit state machine so the transition logic can
be tested without a live model.  The client is passed in, so tests can hand
the loop any object with a ``complete(prompt)`` method.
"""

from __future__ import annotations

import json
import logging
import os
import re
from enum import Enum
from typing import Any, Optional

import litellm

from agents.itinerary_schema import Itinerary
from agents.itinerary_validator import ValidationResult, validate_itinerary
from TripRequest import TripRequest

logger = logging.getLogger(__name__)

# Silence litellm's own verbose logging
litellm.suppress_debug_info = True
# Drop params unsupported by the active model
litellm.drop_params = True

DEFAULT_MAX_ATTEMPTS = 3


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ItineraryGenerationError(Exception):
    """Model output could not be turned into a valid itinerary."""

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [])


class ItineraryParseError(ItineraryGenerationError):
    pass


class ItineraryValidationError(ItineraryGenerationError):
    pass


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

_LLM_DEFAULTS = {
    "gemini":    "gemini-2.5-flash-lite",
    "openai":    "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-20250514",
}


def _llm_name() -> str:
    """Return the litellm model string (provider/model format)."""
    provider = os.getenv("LLM_PROVIDER", "gemini").lower().strip()
    if provider not in _LLM_DEFAULTS:
        provider = "gemini"
    model = os.getenv("LLM_MODEL", _LLM_DEFAULTS[provider])
    if provider == "openai":
        return model  # litellm uses bare model name for OpenAI
    return f"{provider}/{model}"


def _max_attempts() -> int:
    return int(os.getenv("MAX_GENERATION_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS)))


def _enforce_day_count() -> bool:
    return os.getenv("ENFORCE_DAY_COUNT", "false").lower().strip() in ("1", "true", "yes")


# ---------------------------------------------------------------------------
# Model client
# ---------------------------------------------------------------------------

class LLMClient:
    """Thin wrapper around ``litellm.completion``, one call per ``complete``."""

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
    ):
        self.model = model or _llm_name()
        self.temperature = temperature
        self.system_prompt = system_prompt

    def complete(self, prompt: str) -> str:
        messages = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        messages.append({"role": "user", "content": prompt})

        logger.debug("Calling litellm.completion: model=%s", self.model)
        response = litellm.completion(
            model=self.model,
            messages=messages,
            temperature=self.temperature,
        )
        return response.choices[0].message.content or ""


# ---------------------------------------------------------------------------
# Prompt construction
# ---------------------------------------------------------------------------

def build_itinerary_prompt(trip: TripRequest) -> str:
    """Render the planner prompt for *trip*, JSON template included."""
    budget = trip.readable_budget()
    start = trip.start_date.isoformat()
    end = trip.end_date().isoformat()

    return f"""
You are a professional AI travel planner.

Create a detailed, multi-city travel itinerary in **EXACTLY** the following JSON format. The itinerary is for "{trip.traveler_type}" traveler(s), going on a {trip.days}-day trip, starting from "{trip.departure}" and visiting: {trip.destination}. The start date is {start} and the end date is {end} ({trip.days} days). Their interests include: {trip.interests()}. The budget is "{budget}".

If you break ANY rule below, the entire output is INVALID and will be discarded. This itinerary will be machine-validated.

IMPORTANT RULES (you MUST follow all of these):
1. ONLY return valid **minified JSON**. Do NOT include markdown, comments, explanations, or formatting. No line breaks or extra content.
2. Wrap everything in a top-level JSON object matching the format below.
3. Use double quotes for all keys and string values. Use **null** (without quotes) where applicable.
4. You MUST return **EXACTLY {trip.days} activity days** across all cities. NO MORE, NO LESS.
   - If you return fewer or more days, the response is INVALID.
   - Total activity days = total number of objects in all cities[].activities[]
   - Every day must contain at least 1 plan item.
5. All cities in the "travelling" array MUST also appear in the "cities" array.
6. Use sequential day numbering across all cities: e.g., City A = Days 1-3, City B = Days 4-6.
7. Activities must be chronologically accurate, with no time overlaps. Every day must start with a 'transportFromPrevious: null'.
8. For additional plans on the same day, each one must include a valid 'transportFromPrevious' object.
9. Valid transportFromPrevious.mode values (within cities): "Walk", "Car", "Metro", "Bus", "Bike", "Taxi"
10. Valid travelling.modeOfTransport values (between cities): "Flight", "Train", "Bus", "Car"
11. If travelling.modeOfTransport is "Flight", you MUST include valid "departure_airport_city_IATAcode" and "destination_airport_city_IATAcode". If not a flight, both should be null (not string "null").
12. Provide realistic durations for all transport entries (e.g., "10 mins", "45 mins")
13. Do not include any trailing commas or extra content.
14. Provide the 'notes' field for activities, hotels and travelling
15. You MUST provide valid geolocation coordinates for each activity using a "location" object with lat and lng (numbers only, not strings).
16. You MUST provide valid "coordinates" for each city using a "coordinates" object with lat and lng (numbers only, not strings). These represent the city center and will be used to center maps.

"{trip.departure}" is the starting point. Only include it in the "cities" array if it's also one of the visit destinations.

JSON FORMAT TO FOLLOW EXACTLY (must be minified in output):

{{
  "tripName": "Trip Title",
  "startDate": "{start}",
  "endDate": "{end}",
  "cities": [
    {{
      "name": "City Name",
      "coordinates": {{"lat": 48.8566, "lng": 2.3522}},
      "startDate": "YYYY-MM-DD",
      "endDate": "YYYY-MM-DD",
      "activities": [
        {{
          "day": 1,
          "plan": [
            {{
              "name": "Activity Title",
              "location": {{"name": "Location Name", "lat": 48.8584, "lng": 2.2945}},
              "time": "10:00 AM",
              "transportFromPrevious": null,
              "notes": "Activity related notes"
            }},
            {{
              "name": "Next Activity",
              "location": {{"name": "Location Name", "lat": 48.8584, "lng": 2.2945}},
              "time": "1:00 PM",
              "transportFromPrevious": {{
                "mode": "Taxi",
                "from": "Previous Location",
                "to": "Next Location",
                "duration": "15 mins"
              }},
              "notes": "Activity related notes"
            }}
          ]
        }}
      ],
      "notes": "Hotel area suggestions or city-specific tips"
    }}
  ],
  "hotels": [
    {{
      "city": "City Name",
      "cityCode": "cityCode",
      "checkIn": "YYYY-MM-DD",
      "checkOut": "YYYY-MM-DD",
      "notes": "Suggestions based on a {budget} budget"
    }}
  ],
  "travelling": [
    {{
      "from": "{trip.departure}",
      "to": "City A",
      "date": "YYYY-MM-DD",
      "modeOfTransport": "Flight",
      "departure_airport_city_IATAcode": "DEL",
      "destination_airport_city_IATAcode": "SYD",
      "notes": "Tips for this leg"
    }},
    {{
      "from": "City A",
      "to": "City B",
      "date": "YYYY-MM-DD",
      "modeOfTransport": "Bus",
      "departure_airport_city_IATAcode": null,
      "destination_airport_city_IATAcode": null,
      "notes": "Tips for this leg"
    }}
  ]
}}
""".strip()


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

_LEADING_FENCE = re.compile(r"^```json\n?")
_TRAILING_FENCE = re.compile(r"```$")


def extract_json(raw_text: Any) -> Any:
    """Parse the JSON object out of a model response, or return None.

    Strips a ```json fence, then drops anything after the last closing brace
    (models like to append commentary).  Never raises.
    """
    try:
        cleaned = _LEADING_FENCE.sub("", raw_text.strip())
        cleaned = _TRAILING_FENCE.sub("", cleaned).strip()

        last_brace = cleaned.rfind("}")
        if last_brace == -1:
            raise ValueError("No valid closing brace in JSON string")
        return json.loads(cleaned[:last_brace + 1])
    except Exception as exc:
        logger.warning("Error parsing model JSON: %s", exc)
        return None


# ---------------------------------------------------------------------------
# Generation loop
# ---------------------------------------------------------------------------

class GenerationState(str, Enum):
    ATTEMPTING = "attempting"
    SUCCEEDED = "succeeded"
    EXHAUSTED_PARSE = "exhausted_parse"
    EXHAUSTED_VALIDATION = "exhausted_validation"
    UPSTREAM_FAILED = "upstream_failed"


def next_state(
    attempt: int,
    max_attempts: int,
    parsed: Any,
    result: Optional[ValidationResult],
    upstream_error: Optional[BaseException] = None,
) -> GenerationState:
    """State after *attempt* given what the model call, extraction and validation produced."""
    if upstream_error is not None:
        return GenerationState.UPSTREAM_FAILED
    final = attempt >= max_attempts
    if parsed is None:
        return GenerationState.EXHAUSTED_PARSE if final else GenerationState.ATTEMPTING
    if result is not None and result.valid:
        return GenerationState.SUCCEEDED
    return GenerationState.EXHAUSTED_VALIDATION if final else GenerationState.ATTEMPTING


def generate_and_validate_itinerary(
    client: Any,
    prompt: str,
    expected_days: int,
    departure: str,
    max_retries: int = DEFAULT_MAX_ATTEMPTS,
    enforce_day_count: bool = False,
) -> Itinerary:
    """Ask *client* for an itinerary until one validates or attempts run out.

    Raises:
        ItineraryParseError: the last attempt produced no parsable JSON.
        ItineraryValidationError: the last attempt failed validation; the
            message joins every error from that attempt.
        Exception: whatever ``client.complete`` raised, unchanged.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    for attempt in range(1, max_retries + 1):
        try:
            text = client.complete(prompt)
        except Exception as exc:
            state = next_state(attempt, max_retries, None, None, upstream_error=exc)
            logger.error("Model call failed on attempt %d (%s): %s", attempt, state.value, exc)
            raise

        parsed = extract_json(text)
        result = None
        if parsed is not None:
            result = validate_itinerary(parsed, expected_days, departure, enforce_day_count)

        state = next_state(attempt, max_retries, parsed, result)

        if state is GenerationState.SUCCEEDED:
            logger.info("Itinerary validated on attempt %d/%d", attempt, max_retries)
            return result.itinerary
        if state is GenerationState.EXHAUSTED_PARSE:
            raise ItineraryParseError("Failed to parse valid JSON from model.")
        if state is GenerationState.EXHAUSTED_VALIDATION:
            raise ItineraryValidationError(
                "Itinerary failed validation: " + "; ".join(result.errors),
                result.errors,
            )

        if parsed is None:
            logger.warning("JSON parsing failed on attempt %d/%d", attempt, max_retries)
        else:
            logger.warning("Validation failed on attempt %d/%d: %s",
                           attempt, max_retries, result.errors)

    # next_state always leaves ATTEMPTING on the final attempt
    raise AssertionError("unreachable")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class ItineraryPlanner:
    """Prompt + generation loop behind one call, with config-driven defaults."""

    def __init__(
        self,
        client: Any = None,
        max_attempts: Optional[int] = None,
        enforce_day_count: Optional[bool] = None,
    ):
        self.client = client if client is not None else LLMClient()
        self.max_attempts = max_attempts if max_attempts is not None else _max_attempts()
        self.enforce_day_count = (
            enforce_day_count if enforce_day_count is not None else _enforce_day_count()
        )

    def plan(self, trip: TripRequest) -> Itinerary:
        logger.info("Generating %d-day itinerary from %s to %s",
                    trip.days, trip.departure, trip.destination)
        return generate_and_validate_itinerary(
            self.client,
            build_itinerary_prompt(trip),
            trip.days,
            trip.departure,
            max_retries=self.max_attempts,
            enforce_day_count=self.enforce_day_count,
        )


# Default instance consumed by main.py through the get_planner dependency
planning_agent = ItineraryPlanner()
