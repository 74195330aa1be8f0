"""
schemas/itinerary.py
--------------------
Dataclass definitions for the itinerary structures every stage passes around.

Ownership: each DayPlan owns its activities exclusively.  Stages never mutate
their input; they work on copy() and return the copy.

Units: money in whole VND (int), clock times as "HH:MM" strings.  A schedule
pushed past midnight keeps counting hours ("24:30") so ordering and durations
stay intact.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from tripsmith.schemas.categories import BudgetBucket, Category


# ── Clock helpers ────────────────────────────────────────────────────────────

def time_to_minutes(value: str) -> int:
    """'HH:MM' → minutes from midnight.  Raises ValueError on malformed input."""
    hours, _, mins = value.partition(":")
    h, m = int(hours), int(mins)
    if h < 0 or not 0 <= m < 60:
        raise ValueError(f"invalid clock time {value!r}")
    return h * 60 + m


def minutes_to_time(mins: int) -> str:
    """Minutes from midnight → 'HH:MM' (hours are not wrapped at 24)."""
    mins = max(0, int(mins))
    return f"{mins // 60:02d}:{mins % 60:02d}"


# ── Geometry ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Coordinate:
    """WGS84 point.  Build via from_raw() at the boundary to get clamping."""
    lat: float = 0.0
    lon: float = 0.0

    @classmethod
    def from_raw(cls, lat: object, lon: object) -> "Coordinate":
        return cls(
            lat=max(-90.0, min(90.0, _to_float(lat))),
            lon=max(-180.0, min(180.0, _to_float(lon))),
        )

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lon": self.lon}


def _to_float(value: object) -> float:
    try:
        result = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if result != result or result in (float("inf"), float("-inf")):
        return 0.0
    return result


# ── Activities ───────────────────────────────────────────────────────────────

@dataclass
class Alternative:
    name: str = ""
    description: str = ""
    cost: int = 0

    def to_dict(self) -> dict:
        return {"name": self.name, "description": self.description, "cost": self.cost}


@dataclass
class Activity:
    """
    A single scheduled stop, or a synthetic travel segment when
    category is Category.TRAVEL.
    """
    name: str = ""
    category: Category = Category.OTHER
    start_time: str = "08:00"
    end_time: str = "10:00"
    location: Coordinate = field(default_factory=Coordinate)
    address: str = ""
    description: str = ""
    cost: int = 0
    alternatives: list[Alternative] = field(default_factory=list)
    weather_note: Optional[str] = None

    # travel segments only: walking | motorbike | car
    transportation: Optional[str] = None
    distance_km: Optional[float] = None

    # set by CostEstimator / BudgetAllocator
    cost_estimated: bool = False
    cost_details: Optional[dict] = None
    budget_optimized: bool = False

    @property
    def is_travel(self) -> bool:
        return self.category is Category.TRAVEL

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    def set_window(self, start_min: int, end_min: int) -> None:
        self.start_time = minutes_to_time(start_min)
        self.end_time = minutes_to_time(end_min)

    def copy(self) -> "Activity":
        return copy.deepcopy(self)


# ── Weather ──────────────────────────────────────────────────────────────────

class WeatherCondition(str, Enum):
    THUNDERSTORM = "Thunderstorm"
    DRIZZLE      = "Drizzle"
    RAIN         = "Rain"
    SNOW         = "Snow"
    ATMOSPHERE   = "Atmosphere"
    CLEAR        = "Clear"
    CLOUDS       = "Clouds"


@dataclass
class WeatherDay:
    date: str = ""                  # ISO date
    condition: WeatherCondition = WeatherCondition.CLEAR
    description: str = ""
    rain_probability: int = 0       # 0-100
    is_good_weather: bool = True
    avg_temp: float = 25.0
    max_temp: float = 28.0
    min_temp: float = 22.0
    wind_speed: float = 0.0
    synthesized: bool = False       # True when produced by padding / fallback

    def to_dict(self) -> dict:
        return {
            "date":             self.date,
            "condition":        self.condition.value,
            "description":      self.description,
            "rain_probability": self.rain_probability,
            "is_good_weather":  self.is_good_weather,
            "avg_temp":         self.avg_temp,
            "max_temp":         self.max_temp,
            "min_temp":         self.min_temp,
            "wind_speed":       self.wind_speed,
            "synthesized":      self.synthesized,
        }


# ── Cost context ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CountryCostFactor:
    factor: float = 1.0
    tier: str = "moderate"          # expensive | moderate | budget
    is_city: bool = False
    country: Optional[str] = None


@dataclass(frozen=True)
class SeasonInfo:
    country: str = "vietnam"
    season: str = "off_peak"        # special_event | peak | off_peak
    factor: float = 1.0
    special_event: Optional[str] = None


@dataclass(frozen=True)
class CostContext:
    """Derived once per itinerary before CostEstimator runs."""
    destination: str = ""
    country: CountryCostFactor = field(default_factory=CountryCostFactor)
    season: SeasonInfo = field(default_factory=SeasonInfo)
    group_factor: float = 1.0
    number_of_people: int = 1

    @property
    def country_factor(self) -> float:
        return self.country.factor

    @property
    def season_factor(self) -> float:
        return self.season.factor


# ── Budget ───────────────────────────────────────────────────────────────────

@dataclass
class BudgetAllocation:
    """
    Category split produced by BudgetAllocator.allocate().

    fractions  — bucket → share of total_budget (sums to 1.0)
    amounts    — bucket → total_budget × fraction, largest-remainder rounded, VND
    daily      — bucket → amounts[bucket] / days, VND
    cost_estimates — reference unit prices scaled by the destination factor
    """
    total_budget: int = 0
    days: int = 1
    fractions: dict[BudgetBucket, float] = field(default_factory=dict)
    amounts: dict[BudgetBucket, int] = field(default_factory=dict)
    daily: dict[BudgetBucket, int] = field(default_factory=dict)
    country_factor: float = 1.0
    country_tier: str = "moderate"
    is_city: bool = False
    cost_estimates: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        """Sum of the per-bucket amounts; equals round(total_budget)."""
        return sum(self.amounts.values())

    def to_dict(self) -> dict:
        return {
            "total_budget":   self.total_budget,
            "days":           self.days,
            "fractions":      {b.value: f for b, f in self.fractions.items()},
            "amounts":        {b.value: a for b, a in self.amounts.items()},
            "daily":          {b.value: a for b, a in self.daily.items()},
            "country_factor": self.country_factor,
            "country_tier":   self.country_tier,
            "is_city":        self.is_city,
            "cost_estimates": dict(self.cost_estimates),
        }


@dataclass
class DayBudgetSummary:
    day_number: int = 0
    daily_budget: int = 0
    estimated_cost: int = 0
    remaining: int = 0
    status: str = "within_budget"   # within_budget | over_budget

    def to_dict(self) -> dict:
        return {
            "day_number":     self.day_number,
            "daily_budget":   self.daily_budget,
            "estimated_cost": self.estimated_cost,
            "remaining":      self.remaining,
            "status":         self.status,
        }


@dataclass
class BudgetSummary:
    total_budget: int = 0
    estimated_total_cost: int = 0
    remaining_budget: int = 0
    status: str = "within_budget"
    allocation: Optional[BudgetAllocation] = None

    def to_dict(self) -> dict:
        return {
            "total_budget":         self.total_budget,
            "estimated_total_cost": self.estimated_total_cost,
            "remaining_budget":     self.remaining_budget,
            "status":               self.status,
            "allocation":           self.allocation.to_dict() if self.allocation else None,
        }


@dataclass
class CostBreakdown:
    """Trip total split into reporting categories."""
    total: int = 0
    accommodation: int = 0
    food: int = 0
    transportation: int = 0
    attractions: int = 0
    entertainment: int = 0
    other: int = 0
    number_of_people: int = 1

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "breakdown": {
                "accommodation":  self.accommodation,
                "food":           self.food,
                "transportation": self.transportation,
                "attractions":    self.attractions,
                "entertainment":  self.entertainment,
                "other":          self.other,
            },
            "number_of_people": self.number_of_people,
        }


# ── Day / itinerary ──────────────────────────────────────────────────────────

@dataclass
class DayPlan:
    """One day's activities.  Owns its schedule exclusively."""
    day_label: str = ""
    schedule: list[Activity] = field(default_factory=list)
    date: Optional[str] = None
    weather: Optional[WeatherDay] = None
    budget_summary: Optional[DayBudgetSummary] = None
    budget_tips: dict = field(default_factory=dict)

    @property
    def non_travel(self) -> list[Activity]:
        return [a for a in self.schedule if not a.is_travel]

    @property
    def total_cost(self) -> int:
        return sum(a.cost for a in self.schedule)

    def copy(self) -> "DayPlan":
        return copy.deepcopy(self)


@dataclass
class Itinerary:
    """
    Top-level pipeline artefact.  Day count is fixed at normalization and
    never changes afterwards.
    """
    destination: str = ""
    days: list[DayPlan] = field(default_factory=list)
    number_of_people: int = 1
    start_date: Optional[str] = None
    budget_summary: Optional[BudgetSummary] = None

    @property
    def total_cost(self) -> int:
        return sum(d.total_cost for d in self.days)

    def copy(self) -> "Itinerary":
        return copy.deepcopy(self)
