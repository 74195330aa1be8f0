"""
modules/validation/ingestion_validator.py
------------------------------------------
Boundary checks applied before anything reaches a pipeline stage.

  Request:
    ✓ Parsed by the TripRequest pydantic model (destination, budget > 0,
      1 ≤ days ≤ MAX_TRIP_DAYS, HH:MM start time, known preferences, ...)

  Draft activity (raw dict from the draft source):
    ✓ Non-empty name
    ✓ start_time / end_time are HH:MM, 00:00–23:59
    ✓ end_time after start_time
    ✓ Coordinates numeric and within [-90, 90] / [-180, 180]
    ✓ cost numeric and >= 0 if present
    ✓ At least two alternatives

Request failures are fatal (InvalidInputError).  Draft-activity failures
are not: the normalizer substitutes defaults and reports each problem.

Usage:
    from tripsmith.modules.validation import parse_request, validate_activity_record

    request = parse_request(payload)            # raises InvalidInputError
    result = validate_activity_record(raw)
    if not result.valid:
        print(result.errors)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from tripsmith.errors import InvalidInputError
from tripsmith.schemas.requests import TripRequest

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

_LAT_KEYS = ("lat", "latitude")
_LON_KEYS = ("lon", "lng", "longitude")


# ── Result dataclass ───────────────────────────────────────────────────────────

@dataclass
class ValidationResult:
    """
    Outcome of a single validation run.

    Attributes:
        valid:  True iff there are zero errors.
        errors: Human-readable list of failure reasons.
        record: The input record (for logging purposes).
    """
    valid: bool
    errors: list[str] = field(default_factory=list)
    record: Any = field(default=None, repr=False)

    def __bool__(self) -> bool:
        return self.valid


# ── Request validation ─────────────────────────────────────────────────────────

def validate_request(payload: dict[str, Any] | TripRequest) -> ValidationResult:
    """Run the TripRequest model over *payload* and collect field errors."""
    if isinstance(payload, TripRequest):
        return ValidationResult(valid=True, record=payload)
    if not isinstance(payload, dict):
        return ValidationResult(
            valid=False,
            errors=[f"request must be an object, got {type(payload).__name__}"],
            record=payload,
        )
    try:
        TripRequest.model_validate(payload)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'request'}: {err['msg']}"
            for err in exc.errors()
        ]
        return ValidationResult(valid=False, errors=errors, record=payload)
    return ValidationResult(valid=True, record=payload)


def parse_request(payload: dict[str, Any] | TripRequest) -> TripRequest:
    """Return a validated TripRequest or raise InvalidInputError."""
    if isinstance(payload, TripRequest):
        return payload
    result = validate_request(payload)
    if not result.valid:
        raise InvalidInputError(
            "invalid itinerary request: " + "; ".join(result.errors),
            {"errors": result.errors},
        )
    return TripRequest.model_validate(payload)


# ── Draft activity validation ──────────────────────────────────────────────────

def parse_hhmm(value: Any) -> int | None:
    """'H:MM' / 'HH:MM' → minutes from midnight, or None when malformed."""
    if not isinstance(value, str):
        return None
    m = _HHMM.match(value.strip())
    if not m:
        return None
    return int(m.group(1)) * 60 + int(m.group(2))


def _first_present(mapping: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def validate_activity_record(record: dict[str, Any]) -> ValidationResult:
    """
    Check one raw draft activity.  Every problem listed here is repaired by
    the draft normalizer; nothing in this check is fatal.
    """
    errors: list[str] = []
    if not isinstance(record, dict):
        return ValidationResult(
            valid=False,
            errors=[f"activity must be an object, got {type(record).__name__}"],
            record=record,
        )

    # ── Name ───────────────────────────────────────────────────────────────
    name = record.get("name")
    if not name or not str(name).strip():
        errors.append("name must not be empty")

    # ── Times ──────────────────────────────────────────────────────────────
    start = parse_hhmm(record.get("start_time"))
    end = parse_hhmm(record.get("end_time"))
    if start is None:
        errors.append(f"start_time={record.get('start_time')!r} is not HH:MM")
    if end is None:
        errors.append(f"end_time={record.get('end_time')!r} is not HH:MM")
    if start is not None and end is not None and end <= start:
        errors.append(
            f"end_time={record.get('end_time')} is not after start_time={record.get('start_time')}"
        )

    # ── Coordinates ────────────────────────────────────────────────────────
    location = record.get("location")
    if location is None:
        errors.append("location is missing")
    elif isinstance(location, dict):
        lat = _first_present(location, _LAT_KEYS)
        lon = _first_present(location, _LON_KEYS)
        if not (_is_number(lat) and _is_number(lon)):
            errors.append(f"location lat/lon must be numeric (got lat={lat!r}, lon={lon!r})")
        else:
            if not -90.0 <= float(lat) <= 90.0:
                errors.append(f"lat={lat} is outside valid range [-90, 90]")
            if not -180.0 <= float(lon) <= 180.0:
                errors.append(f"lon={lon} is outside valid range [-180, 180]")
    elif not isinstance(location, str):
        errors.append(f"location must be an object or address string, got {type(location).__name__}")

    # ── Cost ───────────────────────────────────────────────────────────────
    cost = record.get("cost")
    if cost is not None:
        if not _is_number(cost):
            errors.append(f"cost={cost!r} must be numeric")
        elif float(cost) < 0:
            errors.append(f"cost={cost} must be >= 0")

    # ── Alternatives ───────────────────────────────────────────────────────
    alternatives = record.get("alternatives")
    if not isinstance(alternatives, list) or len(alternatives) < 2:
        errors.append("at least two alternatives are required")

    return ValidationResult(valid=len(errors) == 0, errors=errors, record=record)
