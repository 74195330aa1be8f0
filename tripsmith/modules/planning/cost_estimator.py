"""
modules/planning/cost_estimator.py
------------------------------------
Deterministic per-activity cost estimates in VND.

    fresh estimate   = round(round(base(category) × people_scaling × country_factor) × season_factor)
    existing cost    = round(cost × group_size_factor(n) × season_factor)
    travel segment   = its leg fare unchanged

An existing cost is read as a single-person base price.  Travel segments carry
whole-group fares from DistanceTool and are never rescaled.

Lookup tables:
  _COUNTRY_TIERS      expensive / moderate / budget countries with city lists;
                      a city-level match costs 20 % more than the country.
  _PEAK_SEASONS       peak months per country (1-12).
  _SPECIAL_EVENTS     date windows that override peak/off-peak.
  _BASE_COSTS         single-person base price per category.

Unknown destinations resolve to factor 1.0, tier "moderate".
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Optional

from tripsmith import config
from tripsmith.schemas.categories import Category
from tripsmith.schemas.itinerary import (
    Activity,
    CostContext,
    CountryCostFactor,
    Itinerary,
    SeasonInfo,
)

logger = logging.getLogger(__name__)

_CITY_PREMIUM: float = 1.2
_DEFAULT_BASE_COST: int = 100_000
_DEFAULT_SEASON_COUNTRY: str = "Vietnam"


# ── Destination tiers ────────────────────────────────────────────────────────
# tier → [(country, [cities], factor)]
_COUNTRY_TIERS: dict[str, list[tuple[str, list[str], float]]] = {
    "expensive": [
        ("Japan",                ["Tokyo", "Osaka", "Kyoto"],                      2.5),
        ("South Korea",          ["Seoul", "Busan", "Incheon"],                    2.0),
        ("Singapore",            ["Singapore"],                                    2.8),
        ("Hong Kong",            ["Hong Kong"],                                    2.5),
        ("United States",        ["New York", "San Francisco", "Los Angeles"],     2.5),
        ("United Kingdom",       ["London", "Manchester"],                         2.3),
        ("Australia",            ["Sydney", "Melbourne"],                          2.2),
        ("Switzerland",          ["Zurich", "Geneva"],                             3.0),
        ("Norway",               ["Oslo"],                                         2.8),
        ("Denmark",              ["Copenhagen"],                                   2.7),
        ("France",               ["Paris"],                                        2.2),
        ("Germany",              ["Munich", "Berlin"],                             2.0),
        ("Italy",                ["Milan", "Rome", "Venice"],                      1.8),
        ("Canada",               ["Toronto", "Vancouver"],                         2.0),
        ("Netherlands",          ["Amsterdam"],                                    2.1),
        ("Sweden",               ["Stockholm"],                                    2.5),
        ("Finland",              ["Helsinki"],                                     2.4),
        ("Israel",               ["Tel Aviv", "Jerusalem"],                        2.2),
        ("United Arab Emirates", ["Dubai", "Abu Dhabi"],                           2.3),
    ],
    "moderate": [
        ("China",          ["Shanghai", "Beijing", "Guangzhou"],   1.5),
        ("Taiwan",         ["Taipei"],                             1.6),
        ("Spain",          ["Madrid", "Barcelona"],                1.7),
        ("Portugal",       ["Lisbon"],                             1.5),
        ("Greece",         ["Athens"],                             1.4),
        ("Czech Republic", ["Prague"],                             1.4),
        ("Poland",         ["Warsaw"],                             1.3),
        ("Hungary",        ["Budapest"],                           1.3),
        ("Malaysia",       ["Kuala Lumpur"],                       1.2),
        ("Mexico",         ["Mexico City"],                        1.2),
        ("Brazil",         ["Sao Paulo", "Rio de Janeiro"],        1.3),
        ("Argentina",      ["Buenos Aires"],                       1.2),
        ("Chile",          ["Santiago"],                           1.4),
        ("Russia",         ["Moscow", "Saint Petersburg"],         1.5),
        ("Turkey",         ["Istanbul"],                           1.3),
    ],
    "budget": [
        ("Vietnam",     ["Hanoi", "Ho Chi Minh City", "Da Nang", "Hue", "Hoi An"], 1.0),
        ("Thailand",    ["Bangkok", "Chiang Mai", "Phuket"],                       1.1),
        ("Indonesia",   ["Jakarta", "Bali", "Yogyakarta"],                         1.0),
        ("Philippines", ["Manila", "Cebu"],                                        1.0),
        ("Cambodia",    ["Phnom Penh", "Siem Reap"],                               0.9),
        ("Laos",        ["Vientiane", "Luang Prabang"],                            0.9),
        ("Myanmar",     ["Yangon", "Mandalay"],                                    0.9),
        ("India",       ["New Delhi", "Mumbai", "Bangalore"],                      0.9),
        ("Nepal",       ["Kathmandu"],                                             0.8),
        ("Sri Lanka",   ["Colombo"],                                               0.9),
        ("Egypt",       ["Cairo"],                                                 0.9),
        ("Morocco",     ["Marrakech", "Casablanca"],                               1.0),
        ("Peru",        ["Lima", "Cusco"],                                         1.0),
        ("Bolivia",     ["La Paz"],                                                0.8),
        ("Colombia",    ["Bogota", "Medellin"],                                    1.0),
    ],
}


# ── Seasons ──────────────────────────────────────────────────────────────────
# country → (peak months 1-12, factor)
_PEAK_SEASONS: dict[str, tuple[frozenset[int], float]] = {
    "Japan":          (frozenset({4, 5, 10, 11}),    1.3),
    "South Korea":    (frozenset({4, 5, 11, 12}),    1.25),
    "Thailand":       (frozenset({12, 1, 2}),        1.4),
    "Vietnam":        (frozenset({12, 1, 2, 3, 4}),  1.3),
    "Singapore":      (frozenset({6, 7, 12, 1}),     1.2),
    "France":         (frozenset({6, 7, 8}),         1.5),
    "Italy":          (frozenset({6, 7, 8}),         1.5),
    "United States":  (frozenset({6, 7, 8, 12}),     1.3),
    "United Kingdom": (frozenset({6, 7, 8}),         1.4),
    "Australia":      (frozenset({12, 1, 2}),        1.3),
    "Indonesia":      (frozenset({6, 7, 8}),         1.4),
}

_LUNAR_NEW_YEAR: dict[int, date] = {
    2023: date(2023, 1, 22),
    2024: date(2024, 2, 10),
    2025: date(2025, 1, 29),
    2026: date(2026, 2, 17),
    2027: date(2027, 2, 6),
    2028: date(2028, 1, 26),
    2029: date(2029, 2, 13),
    2030: date(2030, 2, 3),
}


def lunar_new_year(year: int) -> date:
    """Lunar new year's day; 1 February for years outside the table."""
    return _LUNAR_NEW_YEAR.get(year, date(year, 2, 1))


def _is_lunar_new_year(d: date) -> bool:
    tet = lunar_new_year(d.year)
    return tet - timedelta(days=3) <= d <= tet + timedelta(days=7)


def _is_christmas(d: date) -> bool:
    return d.month == 12 and 20 <= d.day <= 26


def _is_new_year(d: date) -> bool:
    return (d.month == 12 and d.day >= 27) or (d.month == 1 and d.day <= 3)


def _is_cherry_blossom(d: date) -> bool:
    return (d.month == 4 and d.day >= 15) or (d.month == 5 and d.day <= 10)


@dataclass(frozen=True)
class _SpecialEvent:
    name: str
    countries: Optional[frozenset[str]]     # None = everywhere
    check: Callable[[date], bool]
    factor: float


# Checked in order; the first match wins.
_SPECIAL_EVENTS: list[_SpecialEvent] = [
    _SpecialEvent("Lunar New Year", frozenset({"Vietnam", "China"}), _is_lunar_new_year, 1.5),
    _SpecialEvent("Christmas",      None,                            _is_christmas,      1.4),
    _SpecialEvent("New Year",       None,                            _is_new_year,       1.4),
    _SpecialEvent("Cherry Blossom", frozenset({"Japan"}),            _is_cherry_blossom, 1.6),
]


# ── Base costs & scaling ─────────────────────────────────────────────────────
_BASE_COSTS: dict[Category, int] = {
    Category.ACCOMMODATION: 800_000,
    Category.HOTEL:         800_000,
    Category.HOSTEL:        200_000,
    Category.APARTMENT:     600_000,
    Category.FOOD:          150_000,
    Category.RESTAURANT:    150_000,
    Category.CAFE:           50_000,
    Category.BAR:           200_000,
    Category.FAST_FOOD:      80_000,
    Category.BAKERY:         50_000,
    Category.STREET_FOOD:    40_000,
    Category.FINE_DINING:   500_000,
    Category.DESSERT:        50_000,
    Category.MUSEUM:        100_000,
    Category.ART_GALLERY:    80_000,
    Category.PARK:           20_000,
    Category.MONUMENT:       50_000,
    Category.HISTORIC:      100_000,
    Category.ZOO:           150_000,
    Category.THEME_PARK:    300_000,
    Category.BEACH:               0,
    Category.MOUNTAIN:       50_000,
    Category.LAKE:                0,
    Category.TRAVEL:        100_000,
    Category.TAXI:          150_000,
    Category.BUS:            30_000,
    Category.TRAIN:          80_000,
    Category.SUBWAY:         30_000,
    Category.SHOPPING:      200_000,
    Category.ENTERTAINMENT: 200_000,
}

# Shared price: grows slowly with each extra person.
_GROUP_SCALED = frozenset({
    Category.MUSEUM, Category.ART_GALLERY, Category.PARK, Category.HISTORIC,
    Category.ENTERTAINMENT, Category.CULTURAL,
})
# Per-head price.
_PER_PERSON = frozenset({
    Category.RESTAURANT, Category.CAFE, Category.STREET_FOOD, Category.FAST_FOOD,
    Category.FINE_DINING, Category.FOOD,
    Category.ACCOMMODATION, Category.HOSTEL, Category.HOTEL, Category.APARTMENT,
})
# Vehicles and guides: partly shared.
_MIXED = frozenset({
    Category.TRAVEL, Category.TAXI, Category.TRANSPORT, Category.TOUR,
})


def base_cost(category: Category) -> int:
    return _BASE_COSTS.get(category, _DEFAULT_BASE_COST)


def _cost_source(activity: Activity, fresh: bool) -> str:
    if activity.is_travel:
        return "travel_leg"
    return "category_default" if fresh else "provided"


def people_scaling(category: Category, people: int) -> float:
    if category in _GROUP_SCALED:
        return 1 + 0.3 * (people - 1)
    if category in _PER_PERSON:
        return float(people)
    if category in _MIXED:
        return 1 + 0.7 * (people - 1)
    return people * 0.9


def group_size_factor(people: int) -> float:
    """Economy-of-scale multiplier applied to single-person prices."""
    if people <= 1:
        return 1.0
    if people <= 2:
        return 1.8
    if people <= 4:
        return 3.0
    if people <= 8:
        return 5.2
    return 0.6 * people + 0.4


# ── Destination & season lookup ──────────────────────────────────────────────

def country_cost_factor(destination: str) -> CountryCostFactor:
    """
    Resolve a free-text destination to a cost tier.

    Tiers are scanned expensive → moderate → budget; within each country the
    country name is tried before its cities.  First substring match wins.
    """
    if not destination or not isinstance(destination, str):
        return CountryCostFactor()
    needle = destination.lower()
    for tier, countries in _COUNTRY_TIERS.items():
        for country, cities, factor in countries:
            if country.lower() in needle:
                return CountryCostFactor(factor=factor, tier=tier, is_city=False, country=country)
            for city in cities:
                if city.lower() in needle:
                    return CountryCostFactor(
                        factor=round(factor * _CITY_PREMIUM, 4),
                        tier=tier,
                        is_city=True,
                        country=country,
                    )
    return CountryCostFactor()


def _season_country(destination: str) -> str:
    needle = (destination or "").lower()
    for country in _PEAK_SEASONS:
        if country.lower() in needle:
            return country
    resolved = country_cost_factor(destination).country
    if resolved in _PEAK_SEASONS:
        return resolved
    return _DEFAULT_SEASON_COUNTRY


def travel_season(on: Optional[date], destination: str) -> SeasonInfo:
    """Season classification for *destination* on date *on* (today if None)."""
    on = on or date.today()
    country = _season_country(destination)

    for event in _SPECIAL_EVENTS:
        if (event.countries is None or country in event.countries) and event.check(on):
            return SeasonInfo(country=country, season="special_event",
                              factor=event.factor, special_event=event.name)

    months, factor = _PEAK_SEASONS[country]
    if on.month in months:
        return SeasonInfo(country=country, season="peak", factor=factor)
    return SeasonInfo(country=country, season="off_peak", factor=1.0)


# ── CostEstimator ────────────────────────────────────────────────────────────

class CostEstimator:
    """Stateless; every method is a pure function of its arguments."""

    @staticmethod
    def build_context(
        destination: str,
        start_date: Optional[date] = None,
        number_of_people: int = 1,
    ) -> CostContext:
        people = max(1, int(number_of_people or 1))
        context = CostContext(
            destination=destination,
            country=country_cost_factor(destination),
            season=travel_season(start_date, destination),
            group_factor=group_size_factor(people),
            number_of_people=people,
        )
        logger.info(
            "cost context for %r: country=%.2f (%s) season=%s %.2f group=%.2f",
            destination, context.country_factor, context.country.tier,
            context.season.season, context.season_factor, context.group_factor,
        )
        return context

    def estimate(self, activity: Activity, context: CostContext) -> int:
        """Estimated cost of *activity* for the whole group, in VND."""
        if activity.is_travel:
            # leg fares are already whole-group prices
            return max(0, activity.cost or 0)
        if activity.cost and activity.cost > 0:
            return round(activity.cost * context.group_factor * context.season_factor)
        return self._fresh_estimate(activity.category, context)

    def estimate_activity(self, activity: Activity, context: CostContext) -> Activity:
        """Copy of *activity* with cost and cost_details filled in."""
        result = activity.copy()
        if activity.cost_estimated:
            return result
        fresh = not (activity.cost and activity.cost > 0)
        result.cost = self.estimate(activity, context)
        result.cost_estimated = True
        result.cost_details = {
            "base_cost":         base_cost(activity.category) if fresh and not activity.is_travel else activity.cost,
            "source":            _cost_source(activity, fresh),
            "country_factor":    context.country_factor,
            "country_type":      context.country.tier,
            "season":            context.season.season,
            "season_factor":     context.season_factor,
            "group_size_factor": context.group_factor,
            "number_of_people":  context.number_of_people,
            "per_person":        round(result.cost / context.number_of_people),
            "total":             result.cost,
            "currency":          config.CURRENCY_UNIT,
        }
        return result

    def estimate_itinerary(self, itinerary: Itinerary, context: CostContext) -> Itinerary:
        result = itinerary.copy()
        for day in result.days:
            day.schedule = [self.estimate_activity(a, context) for a in day.schedule]
        return result

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _fresh_estimate(category: Category, context: CostContext) -> int:
        scaled = round(
            base_cost(category)
            * people_scaling(category, context.number_of_people)
            * context.country_factor
        )
        return round(scaled * context.season_factor)
