"""
modules/planning/scheduler.py
-------------------------------
Temporal repair for one day's ordered activities.

Steps (all times in minutes):
  1. Stable sort by start_time.
  2. First activity starts at the day start.  If that leaves it shorter than
     _MIN_DURATION_MIN, it is stretched to _DEFAULT_DURATION_MIN.
  3. Walking the list, any activity starting before its predecessor ends is
     shifted to start at the predecessor's end, keeping its duration.
  4. Between each consecutive pair a travel leg is estimated.  Legs over
     _MIN_TRAVEL_MIN become synthetic Category.TRAVEL activities running from
     prev.end; the next activity is pushed past the leg if needed.
  5. Output is re-sorted by start_time.

Whenever an activity is shifted its duration is preserved, except durations
under _MIN_DURATION_MIN which become _DEFAULT_DURATION_MIN.

Travel segments already present in the input are dropped and recomputed, so
schedule(schedule(x)) == schedule(x).
"""

from __future__ import annotations
import logging

from tripsmith import config
from tripsmith.schemas.categories import Category
from tripsmith.schemas.itinerary import (
    Activity,
    DayPlan,
    Itinerary,
    time_to_minutes,
)
from tripsmith.modules.tool_usage.distance_tool import DistanceTool, TravelLeg, midpoint

logger = logging.getLogger(__name__)

# ── Scheduling constants (minutes) ───────────────────────────────────────────
_MIN_DURATION_MIN:     int = 45
_DEFAULT_DURATION_MIN: int = 60
_MIN_TRAVEL_MIN:       int = 5

_MODE_LABELS: dict[str, str] = {
    "walking":   "Walk",
    "motorbike": "Motorbike",
    "car":       "Car",
}


def _fit_duration(duration: int) -> int:
    return _DEFAULT_DURATION_MIN if duration < _MIN_DURATION_MIN else duration


def _shift_to(activity: Activity, start_min: int) -> None:
    """Move *activity* to start at start_min, preserving (or fixing) its duration."""
    duration = _fit_duration(activity.duration_minutes)
    activity.set_window(start_min, start_min + duration)


class TemporalScheduler:
    """Sorts, de-overlaps and interleaves travel segments into a day."""

    def __init__(self, distance_tool: DistanceTool | None = None):
        self.distance_tool = distance_tool or DistanceTool()

    # ── Public API ────────────────────────────────────────────────────────────

    def schedule(self, activities: list[Activity], day_start: str | None = None) -> list[Activity]:
        """
        Return a new, conflict-free schedule for *activities* starting at
        *day_start* ("HH:MM", default config.DEFAULT_DAY_START).
        """
        start_min = time_to_minutes(day_start or config.DEFAULT_DAY_START)

        stops = [a.copy() for a in activities if not a.is_travel]
        if not stops:
            return []
        stops.sort(key=lambda a: a.start_minutes)   # stable on ties

        # Step 2: anchor the first stop
        first = stops[0]
        end = max(first.end_minutes, start_min)
        if end - start_min < _MIN_DURATION_MIN:
            end = start_min + _DEFAULT_DURATION_MIN
        first.set_window(start_min, end)

        out: list[Activity] = [first]
        for prev, nxt in zip(stops, stops[1:]):
            if nxt.end_minutes <= nxt.start_minutes:
                nxt.set_window(nxt.start_minutes, nxt.start_minutes + _DEFAULT_DURATION_MIN)

            # Step 3: overlap with the predecessor
            if nxt.start_minutes < prev.end_minutes:
                _shift_to(nxt, prev.end_minutes)

            # Step 4: travel leg
            leg = self.distance_tool.travel_leg(prev.location, nxt.location)
            if leg.minutes > _MIN_TRAVEL_MIN:
                segment = self._travel_segment(prev, nxt, leg)
                out.append(segment)
                if segment.end_minutes > nxt.start_minutes:
                    _shift_to(nxt, segment.end_minutes)
            out.append(nxt)

        out.sort(key=lambda a: a.start_minutes)
        return out

    def schedule_day(self, day: DayPlan, day_start: str | None = None) -> DayPlan:
        result = day.copy()
        result.schedule = self.schedule(day.schedule, day_start)
        return result

    def schedule_itinerary(self, itinerary: Itinerary, day_start: str | None = None) -> Itinerary:
        result = itinerary.copy()
        result.days = [self.schedule_day(day, day_start) for day in itinerary.days]
        return result

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _travel_segment(prev: Activity, nxt: Activity, leg: TravelLeg) -> Activity:
        label = _MODE_LABELS.get(leg.mode, leg.mode.title())
        segment = Activity(
            name=f"{label} to {nxt.name}",
            category=Category.TRAVEL,
            location=midpoint(prev.location, nxt.location),
            address=f"{prev.address or prev.name} → {nxt.address or nxt.name}",
            description=(
                f"{label} {leg.distance_km:.1f} km from {prev.name} to {nxt.name} "
                f"(about {leg.minutes} min including buffer)"
            ),
            cost=leg.cost,
            transportation=leg.mode,
            distance_km=round(leg.distance_km, 2),
        )
        segment.set_window(prev.end_minutes, prev.end_minutes + leg.minutes)
        return segment
