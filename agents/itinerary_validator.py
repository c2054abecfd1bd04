"""
Rule-based validation of a parsed itinerary candidate.

The candidate comes straight out of ``json.loads`` on model output, so every
rule here has to cope with missing keys and wrong types without raising.
Rules run in a fixed order and each returns a list of human-readable errors;
the final rule decodes the candidate against ``itinerary_schema.Itinerary``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from agents.itinerary_schema import Itinerary

logger = logging.getLogger(__name__)

_MISSING = object()

STRUCTURE_ERROR = "Itinerary structure is invalid."


@dataclass
class ValidationResult:
    """Either a typed itinerary (valid) or the reasons it was rejected."""

    valid: bool
    errors: List[str] = field(default_factory=list)
    itinerary: Optional[Itinerary] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _dicts(value: Any) -> list[dict]:
    """Dict entries of *value* when it is a list, else nothing."""
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, dict)]


def _has_structure(candidate: Any) -> bool:
    return (
        isinstance(candidate, dict)
        and isinstance(candidate.get("cities"), list)
        and isinstance(candidate.get("travelling"), list)
    )


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _check_travel_cities(candidate: dict, departure: str) -> list[str]:
    """Every city a leg starts or ends in must be planned, bar the departure city."""
    planned = [c.get("name") for c in _dicts(candidate["cities"])]
    legs = _dicts(candidate["travelling"])
    # to-cities first, then from-cities, duplicates dropped in first-seen order
    referenced: list = []
    for city in [leg.get("to") for leg in legs] + [leg.get("from") for leg in legs]:
        if city not in referenced:
            referenced.append(city)

    errors = []
    for city in referenced:
        if city == departure:
            continue
        if city not in planned:
            errors.append(f"City \"{city}\" in 'travelling' is missing from 'cities' array.")
    return errors


def _check_unique_cities(candidate: dict) -> list[str]:
    seen: list = []
    errors = []
    for name in [c.get("name") for c in _dicts(candidate["cities"])]:
        if name in seen:
            message = f"City \"{name}\" appears more than once in 'cities' array."
            if message not in errors:
                errors.append(message)
        else:
            seen.append(name)
    return errors


def _check_day_count(candidate: dict, expected_days: int) -> list[str]:
    found = sum(len(c["activities"]) for c in _dicts(candidate["cities"])
                if isinstance(c.get("activities"), list))
    if found != expected_days:
        return [f"Mismatch in total days: expected {expected_days}, but found {found} activity days."]
    return []


def _check_transport_chain(candidate: dict) -> list[str]:
    """First stop of a day arrives from nowhere; every later stop says how it was reached."""
    errors = []
    for city in _dicts(candidate["cities"]):
        for day in _dicts(city.get("activities")):
            label = f"Day {day.get('day')} in \"{city.get('name')}\""
            for index, activity in enumerate(_dicts(day.get("plan"))):
                transport = activity.get("transportFromPrevious", _MISSING)
                if index == 0 and transport is not None:
                    errors.append(f"{label}: First activity must have transportFromPrevious as null.")
                if index > 0 and (transport is None or transport is _MISSING):
                    errors.append(f"{label}: Activity #{index + 1} must have valid transportFromPrevious.")
    return errors


def _decode(candidate: dict) -> tuple[Optional[Itinerary], list[str]]:
    try:
        return Itinerary.model_validate(candidate), []
    except ValidationError as exc:
        errors = []
        for err in exc.errors():
            path = ".".join(str(part) for part in err["loc"]) or "<root>"
            errors.append(f"Schema error at {path}: {err['msg']}")
        return None, errors


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def validate_itinerary(
    candidate: Any,
    expected_days: int,
    departure: str,
    enforce_day_count: bool = False,
) -> ValidationResult:
    """Check a parsed candidate against the itinerary rules.

    Args:
        candidate: Whatever the JSON extractor produced.
        expected_days: Requested trip length, only used by the day-count rule.
        departure: Trip origin; allowed in ``travelling`` without a ``cities`` entry.
        enforce_day_count: Turn on the total-days rule (off by default).

    Returns:
        ValidationResult carrying the typed itinerary when valid.
    """
    if not _has_structure(candidate):
        return ValidationResult(valid=False, errors=[STRUCTURE_ERROR])

    rules: list[Callable[[], list[str]]] = [
        lambda: _check_travel_cities(candidate, departure),
        lambda: _check_unique_cities(candidate),
    ]
    if enforce_day_count:
        rules.append(lambda: _check_day_count(candidate, expected_days))
    rules.append(lambda: _check_transport_chain(candidate))

    errors: list[str] = []
    for rule in rules:
        errors.extend(rule())

    itinerary, schema_errors = _decode(candidate)
    errors.extend(schema_errors)

    if errors:
        logger.debug("Itinerary rejected with %d error(s)", len(errors))
        return ValidationResult(valid=False, errors=errors)
    return ValidationResult(valid=True, itinerary=itinerary)
