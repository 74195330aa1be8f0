"""
modules/input/draft_normalizer.py
-----------------------------------
Turns the draft source's raw day plans into a typed Itinerary.

This is the single point where external data is coerced:
  - location   {lat, lon} | {lat, lng} | {latitude, longitude} | address string
               → Coordinate clamped to valid ranges; missing/malformed → (0, 0)
  - category   → closed Category enum (unmapped → OTHER)
  - times      malformed → 08:00 / 10:00; end not after start → start + 60 min
  - cost       missing/malformed/negative → 0 (filled later by CostEstimator)
  - alternatives fewer than two → two synthesized at ±20 % of the cost
  - day count  extra days dropped; missing days copy the last day, relabelled

Every substitution is reported as a data-normalization StageIssue.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from tripsmith.errors import DraftSourceError, ErrorKind, StageIssue
from tripsmith.schemas.categories import Category, normalize_category
from tripsmith.schemas.itinerary import (
    Activity,
    Alternative,
    Coordinate,
    DayPlan,
    Itinerary,
)
from tripsmith.modules.validation.ingestion_validator import (
    parse_hhmm,
    validate_activity_record,
)

logger = logging.getLogger(__name__)

_DEFAULT_START: str = "08:00"
_DEFAULT_END:   str = "10:00"
_DEFAULT_DURATION_MIN: int = 60
_DEFAULT_NAME:  str = "Unknown activity"
_ALTERNATIVE_BASE_COST: int = 100_000
_ALTERNATIVE_SPREAD: float = 0.2

_LAT_KEYS = ("lat", "latitude")
_LON_KEYS = ("lon", "lng", "longitude")
_SCHEDULE_KEYS = ("schedule", "activities")


def _first_present(mapping: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if mapping.get(key) is not None:
            return mapping[key]
    return None


def _coerce_cost(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    try:
        cost = float(value)
    except (TypeError, ValueError):
        return 0
    if cost != cost or cost < 0:
        return 0
    return round(cost)


class DraftNormalizer:
    """Coerces raw draft day plans into an Itinerary of exactly *days* days."""

    def normalize(
        self,
        raw_days: Any,
        days: int,
        destination: str = "",
        number_of_people: int = 1,
        start_date: Optional[date] = None,
    ) -> tuple[Itinerary, list[StageIssue]]:
        """
        Return (itinerary, issues).  Raises DraftSourceError when the draft has
        no usable day at all.
        """
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        if not isinstance(raw_days, list) or not raw_days:
            raise DraftSourceError("draft source returned no day plans", {"draft": raw_days})

        issues: list[StageIssue] = []
        plans = [self._day(raw, index, issues) for index, raw in enumerate(raw_days)]

        if len(plans) > days:
            self._issue(issues, None, f"draft has {len(plans)} days, truncated to {days}")
            plans = plans[:days]
        last_draft = plans[-1]
        while len(plans) < days:
            number = len(plans) + 1
            self._issue(issues, number - 1,
                        f"draft has {len(raw_days)} days, day {number} copied from the last day")
            plans.append(self._suggested_copy(last_draft, number))

        itinerary = Itinerary(
            destination=destination,
            days=plans,
            number_of_people=max(1, number_of_people),
            start_date=start_date.isoformat() if start_date else None,
        )
        logger.info(
            "normalized draft: %d day(s), %d activities, %d issue(s)",
            len(plans), sum(len(p.schedule) for p in plans), len(issues),
        )
        return itinerary, issues

    # ── Day / activity coercion ───────────────────────────────────────────────

    def _day(self, raw: Any, index: int, issues: list[StageIssue]) -> DayPlan:
        label = f"Day {index + 1}"
        if not isinstance(raw, dict):
            self._issue(issues, index, f"day {index + 1} is not an object; left empty")
            return DayPlan(day_label=label)

        label = str(raw.get("day") or raw.get("day_label") or label)
        schedule = _first_present(raw, _SCHEDULE_KEYS)
        if not isinstance(schedule, list):
            self._issue(issues, index, f"{label} has no schedule list; left empty")
            schedule = []

        activities = [self.activity(item, index, issues) for item in schedule]
        return DayPlan(day_label=label, schedule=activities)

    def activity(self, raw: Any, day_index: int | None = None,
                 issues: list[StageIssue] | None = None) -> Activity:
        """Coerce one raw activity dict; problems are appended to *issues*."""
        issues = issues if issues is not None else []
        if not isinstance(raw, dict):
            self._issue(issues, day_index, f"activity {raw!r} is not an object; defaults used")
            raw = {}

        check = validate_activity_record(raw)
        name = str(raw.get("name") or "").strip() or _DEFAULT_NAME
        for error in check.errors:
            self._issue(issues, day_index, f"{name}: {error}")

        raw_category = raw.get("category")
        category = normalize_category(raw_category)
        if category is Category.OTHER and raw_category and str(raw_category).strip().lower() not in ("other", "khác"):
            self._issue(issues, day_index, f"{name}: unknown category {raw_category!r} mapped to other")

        start = parse_hhmm(raw.get("start_time"))
        end = parse_hhmm(raw.get("end_time"))
        if start is None:
            start = parse_hhmm(_DEFAULT_START)
        if end is None:
            end = parse_hhmm(_DEFAULT_END)
        if end <= start:
            end = start + _DEFAULT_DURATION_MIN

        location, address = self._location(raw.get("location"))
        cost = _coerce_cost(raw.get("cost"))

        activity = Activity(
            name=name,
            category=category,
            location=location,
            address=str(raw.get("address") or address or ""),
            description=str(raw.get("description") or ""),
            cost=cost,
            alternatives=self._alternatives(raw.get("alternatives"), name, cost),
        )
        activity.set_window(start, end)
        return activity

    @staticmethod
    def _location(raw: Any) -> tuple[Coordinate, str]:
        if isinstance(raw, dict):
            return (
                Coordinate.from_raw(_first_present(raw, _LAT_KEYS), _first_present(raw, _LON_KEYS)),
                str(raw.get("address") or ""),
            )
        if isinstance(raw, str):
            return Coordinate(), raw
        return Coordinate(), ""

    @staticmethod
    def _alternatives(raw: Any, name: str, cost: int) -> list[Alternative]:
        parsed: list[Alternative] = []
        if isinstance(raw, list):
            for item in raw:
                if isinstance(item, dict) and item.get("name"):
                    parsed.append(Alternative(
                        name=str(item["name"]),
                        description=str(item.get("description") or ""),
                        cost=_coerce_cost(item.get("cost")),
                    ))
        if len(parsed) >= 2:
            return parsed

        base = cost or _ALTERNATIVE_BASE_COST
        return [
            Alternative(
                name=f"{name} - Alternative 1",
                description=f"A cheaper take on {name}",
                cost=round(base * (1 - _ALTERNATIVE_SPREAD)),
            ),
            Alternative(
                name=f"{name} - Alternative 2",
                description=f"A more upscale take on {name}",
                cost=round(base * (1 + _ALTERNATIVE_SPREAD)),
            ),
        ]

    @staticmethod
    def _suggested_copy(last: DayPlan, number: int) -> DayPlan:
        suffix = f" (suggested for day {number})"
        copy = last.copy()
        copy.day_label = f"Day {number}"
        for activity in copy.schedule:
            activity.name += suffix
            activity.description = (activity.description + suffix).strip()
        return copy

    @staticmethod
    def _issue(issues: list[StageIssue], day_index: int | None, message: str) -> None:
        issues.append(StageIssue(
            kind=ErrorKind.DATA_NORMALIZATION,
            stage="normalize",
            message=message,
            day_index=day_index,
        ))
