"""
modules/reoptimization/weather_adapter.py
-------------------------------------------
Rebuilds adverse-weather days around indoor activities.

For a day whose forecast is not good weather:
  1. Non-travel activities are bucketed by start hour
       morning   < 12:00
       afternoon 12:00–16:59
       evening   ≥ 17:00
     and by exposure (indoor / outdoor / neutral).
  2. Indoor and neutral activities are always kept.  Outdoor activities are
     kept when the rain probability is under the bucket threshold
     (50 / 30 / 40 %) or when the bucket has no indoor activity.
  3. Each dropped outdoor activity is replaced by a substitute built from
     the first unused indoor place in the pool; the substitute inherits the
     dropped slot and cost.  With no candidate left, the outdoor activity
     stays, flagged with an adverse-weather note.
  4. The rebuilt list is sorted by start and any overlap is pushed to
     prev.end + 30 min, duration preserved.  Travel segments are not carried
     over; the 30-minute gap stands in for transit.

Every outdoor activity, on good and bad days alike, gets a weather_note.

Design principles:
  - Never mutates its input; each day is rebuilt from a copy.
  - A day that fails to adapt keeps its pre-stage copy (per-day isolation).
  - The non-travel activity count of a day never decreases.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from tripsmith.errors import ErrorKind, StageIssue
from tripsmith.schemas.categories import Category, is_indoor, is_outdoor
from tripsmith.schemas.itinerary import (
    Activity,
    Coordinate,
    DayPlan,
    Itinerary,
    WeatherDay,
)
from tripsmith.modules.tool_usage.weather_tool import FallbackWeatherProvider, pad_forecast

logger = logging.getLogger(__name__)

# ── Rebuild constants ─────────────────────────────────────────────────────────
_AFTERNOON_START_H: int = 12
_EVENING_START_H:   int = 17
_RAIN_THRESHOLDS: dict[str, int] = {
    "morning":   50,
    "afternoon": 30,
    "evening":   40,
}
_REBUILD_GAP_MIN: int = 30


def _time_bucket(activity: Activity) -> str:
    hour = activity.start_minutes // 60
    if hour < _AFTERNOON_START_H:
        return "morning"
    if hour < _EVENING_START_H:
        return "afternoon"
    return "evening"


def _adverse_note(weather: WeatherDay) -> str:
    return (
        f"Unfavourable forecast ({weather.condition.value}, "
        f"{weather.rain_probability}% chance of rain). Bring an umbrella or "
        f"raincoat, or consider an indoor alternative."
    )


def _favourable_note(weather: WeatherDay) -> str:
    return f"Favourable forecast ({weather.condition.value}, {weather.avg_temp:.0f}°C)."


def _substitute_note(weather: WeatherDay) -> str:
    return (
        f"Replaces an outdoor activity because of the unfavourable forecast "
        f"({weather.condition.value}, {weather.rain_probability}% chance of rain)."
    )


# ─────────────────────────────────────────────────────────────────────────────
# Data classes
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Place:
    """A candidate venue for weather substitutes."""
    name: str
    category: Category
    location: Coordinate = field(default_factory=Coordinate)
    address: str = ""
    description: str = ""

    @classmethod
    def from_activity(cls, activity: Activity) -> "Place":
        return cls(
            name=activity.name,
            category=activity.category,
            location=activity.location,
            address=activity.address,
            description=activity.description,
        )


@dataclass
class WeatherAdaptResult:
    itinerary: Itinerary
    issues: list[StageIssue] = field(default_factory=list)
    rebuilt_days: list[int] = field(default_factory=list)      # 0-based indices
    substitutions: int = 0

    @property
    def ok(self) -> bool:
        return not self.issues


# ─────────────────────────────────────────────────────────────────────────────
# WeatherAdapter
# ─────────────────────────────────────────────────────────────────────────────

class WeatherAdapter:
    """
    Adapts an itinerary to a daily forecast.

    The forecast is padded to the trip length first, using *provider* for
    days with nothing to carry forward.
    """

    def __init__(self, provider: Optional[FallbackWeatherProvider] = None) -> None:
        self.provider = provider

    # ── Public API ────────────────────────────────────────────────────────────

    def adapt(
        self,
        itinerary: Itinerary,
        forecast: list[WeatherDay],
        places: Optional[Iterable[Place]] = None,
    ) -> WeatherAdaptResult:
        """Rebuild adverse days and annotate outdoor activities."""
        weather = self._padded(itinerary, forecast)
        pool = list(places) if places is not None else self._pool_from(itinerary)
        used_substitutes: set[str] = set()

        result = WeatherAdaptResult(itinerary=itinerary.copy())
        for index, (day, day_weather) in enumerate(zip(itinerary.days, weather)):
            day_used = set(used_substitutes)
            try:
                adapted, swapped = self.adapt_day(day, day_weather, pool, day_used)
            except Exception as exc:  # noqa: BLE001
                logger.exception("weather adaptation failed for day %d", index + 1)
                result.issues.append(StageIssue(
                    kind=ErrorKind.PER_DAY_ISOLATION,
                    stage="weather",
                    message=str(exc),
                    day_index=index,
                ))
                continue
            result.itinerary.days[index] = adapted
            used_substitutes = day_used
            result.substitutions += swapped
            if not day_weather.is_good_weather:
                result.rebuilt_days.append(index)
        return result

    def annotate(self, itinerary: Itinerary, forecast: list[WeatherDay]) -> Itinerary:
        """Attach weather and notes without reordering anything."""
        weather = self._padded(itinerary, forecast)
        result = itinerary.copy()
        for day, day_weather in zip(result.days, weather):
            day.weather = day_weather
            self._annotate_outdoor(day.schedule, day_weather)
        return result

    def adapt_day(
        self,
        day: DayPlan,
        weather: WeatherDay,
        pool: list[Place],
        used_substitutes: set[str] | None = None,
    ) -> tuple[DayPlan, int]:
        """
        Return (adapted copy of *day*, number of substitutes inserted).

        *used_substitutes* collects place names already used as substitutes
        so one venue is not offered twice across the trip.
        """
        used_substitutes = used_substitutes if used_substitutes is not None else set()
        result = day.copy()
        result.weather = weather
        swapped = 0

        if not weather.is_good_weather:
            logger.info(
                "adverse weather on %s (%s, %d%%): rebuilding %r",
                weather.date or "?", weather.condition.value, weather.rain_probability,
                day.day_label,
            )
            kept, dropped = self._split(result.non_travel, weather.rain_probability)
            scheduled = {a.name for a in kept}
            for outdoor in dropped:
                place = self._pick_substitute(pool, scheduled | used_substitutes)
                if place is None:
                    outdoor.weather_note = _adverse_note(weather)
                    kept.append(outdoor)
                    continue
                kept.append(self._substitute(outdoor, place, weather))
                scheduled.add(place.name)
                used_substitutes.add(place.name)
                swapped += 1
            result.schedule = self._repair_gaps(kept)

        self._annotate_outdoor(result.schedule, weather)
        return result, swapped

    # ── Internals ─────────────────────────────────────────────────────────────

    def _padded(self, itinerary: Itinerary, forecast: list[WeatherDay]) -> list[WeatherDay]:
        start = date.fromisoformat(itinerary.start_date) if itinerary.start_date else None
        return pad_forecast(forecast, len(itinerary.days), start, self.provider)

    @staticmethod
    def _pool_from(itinerary: Itinerary) -> list[Place]:
        return [
            Place.from_activity(a)
            for day in itinerary.days
            for a in day.schedule
            if not a.is_travel and a.name
        ]

    @staticmethod
    def _split(activities: list[Activity], rain_probability: int) -> tuple[list[Activity], list[Activity]]:
        buckets: dict[str, dict[str, list[Activity]]] = {
            name: {"indoor": [], "outdoor": [], "neutral": []} for name in _RAIN_THRESHOLDS
        }
        for activity in activities:
            if is_indoor(activity.category):
                exposure = "indoor"
            elif is_outdoor(activity.category):
                exposure = "outdoor"
            else:
                exposure = "neutral"
            buckets[_time_bucket(activity)][exposure].append(activity)

        kept: list[Activity] = []
        dropped: list[Activity] = []
        for name, threshold in _RAIN_THRESHOLDS.items():
            group = buckets[name]
            kept.extend(group["indoor"])
            kept.extend(group["neutral"])
            if rain_probability < threshold or not group["indoor"]:
                kept.extend(group["outdoor"])
            else:
                dropped.extend(group["outdoor"])
        return kept, dropped

    @staticmethod
    def _pick_substitute(pool: list[Place], excluded: set[str]) -> Optional[Place]:
        for place in pool:
            if is_indoor(place.category) and place.name not in excluded:
                return place
        return None

    @staticmethod
    def _substitute(dropped: Activity, place: Place, weather: WeatherDay) -> Activity:
        substitute = Activity(
            name=place.name,
            category=place.category,
            start_time=dropped.start_time,
            end_time=dropped.end_time,
            location=place.location,
            address=place.address,
            description=f"Indoor alternative to {dropped.name}. {place.description}".strip(),
            cost=dropped.cost,
            alternatives=list(dropped.alternatives),
            weather_note=_substitute_note(weather),
            cost_estimated=dropped.cost_estimated,
            budget_optimized=dropped.budget_optimized,
        )
        return substitute

    @staticmethod
    def _repair_gaps(activities: list[Activity]) -> list[Activity]:
        ordered = sorted(activities, key=lambda a: a.start_minutes)
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.start_minutes <= prev.end_minutes:
                duration = cur.duration_minutes
                start = prev.end_minutes + _REBUILD_GAP_MIN
                cur.set_window(start, start + duration)
        return ordered

    @staticmethod
    def _annotate_outdoor(activities: list[Activity], weather: WeatherDay) -> None:
        note = _favourable_note(weather) if weather.is_good_weather else _adverse_note(weather)
        for activity in activities:
            if is_outdoor(activity.category):
                activity.weather_note = note
