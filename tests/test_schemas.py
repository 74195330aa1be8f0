"""Category normalization, budget buckets and value types."""

import pytest

from tripsmith.schemas.categories import (
    BudgetBucket,
    Category,
    budget_bucket,
    is_indoor,
    is_outdoor,
    normalize_category,
)
from tripsmith.schemas.itinerary import (
    Coordinate,
    minutes_to_time,
    time_to_minutes,
)

from conftest import make_activity, make_itinerary


@pytest.mark.parametrize("raw, expected", [
    ("museum", Category.MUSEUM),
    ("  Museum ", Category.MUSEUM),
    ("FAST FOOD", Category.FAST_FOOD),
    ("theme-park", Category.OTHER),
    ("theme park", Category.THEME_PARK),
    ("Bảo tàng", Category.MUSEUM),
    ("nhà hàng", Category.RESTAURANT),
    ("travel", Category.TRANSPORT),
    (Category.TRAVEL, Category.TRANSPORT),
    (Category.PARK, Category.PARK),
    ("", Category.OTHER),
    (None, Category.OTHER),
    (42, Category.OTHER),
])
def test_normalize_category(raw, expected):
    assert normalize_category(raw) is expected


def test_budget_buckets():
    assert budget_bucket(Category.HOSTEL) is BudgetBucket.ACCOMMODATION
    assert budget_bucket(Category.STREET_FOOD) is BudgetBucket.FOOD
    assert budget_bucket(Category.BEACH) is BudgetBucket.ATTRACTIONS
    assert budget_bucket(Category.TRAVEL) is BudgetBucket.TRANSPORTATION
    assert budget_bucket(Category.SHOPPING) is BudgetBucket.OTHER


def test_exposure_sets_are_disjoint():
    for category in Category:
        assert not (is_indoor(category) and is_outdoor(category))
    assert is_indoor(Category.MUSEUM)
    assert is_outdoor(Category.PARK)
    assert not is_indoor(Category.HOTEL) and not is_outdoor(Category.HOTEL)


def test_coordinate_clamping():
    assert Coordinate.from_raw(123, -500) == Coordinate(90.0, -180.0)
    assert Coordinate.from_raw("21.5", None) == Coordinate(21.5, 0.0)
    assert Coordinate.from_raw(float("nan"), float("inf")) == Coordinate()


def test_clock_helpers():
    assert time_to_minutes("08:30") == 510
    assert minutes_to_time(510) == "08:30"
    assert minutes_to_time(24 * 60 + 15) == "24:15"
    with pytest.raises(ValueError):
        time_to_minutes("08:75")
    with pytest.raises(ValueError):
        time_to_minutes("noon")


def test_copies_are_independent():
    trip = make_itinerary([make_activity("A", cost=10)])
    clone = trip.copy()
    clone.days[0].schedule[0].cost = 99
    assert trip.days[0].schedule[0].cost == 10
    assert trip.total_cost == 10
