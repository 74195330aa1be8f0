from tripsmith.schemas.categories import (
    BudgetBucket,
    Category,
    budget_bucket,
    is_indoor,
    is_outdoor,
    normalize_category,
)
from tripsmith.schemas.itinerary import (
    Activity,
    Alternative,
    BudgetAllocation,
    BudgetSummary,
    Coordinate,
    CostBreakdown,
    CostContext,
    CountryCostFactor,
    DayBudgetSummary,
    DayPlan,
    Itinerary,
    SeasonInfo,
    WeatherCondition,
    WeatherDay,
    minutes_to_time,
    time_to_minutes,
)
from tripsmith.schemas.requests import TripRequest

__all__ = [
    "Activity",
    "Alternative",
    "BudgetAllocation",
    "BudgetBucket",
    "BudgetSummary",
    "Category",
    "Coordinate",
    "CostBreakdown",
    "CostContext",
    "CountryCostFactor",
    "DayBudgetSummary",
    "DayPlan",
    "Itinerary",
    "SeasonInfo",
    "TripRequest",
    "WeatherCondition",
    "WeatherDay",
    "budget_bucket",
    "is_indoor",
    "is_outdoor",
    "minutes_to_time",
    "normalize_category",
    "time_to_minutes",
]
