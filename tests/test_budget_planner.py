"""Budget split, cross-day rebalancing and cost reporting."""

import pytest

from tripsmith.modules.planning.budget_planner import BudgetAllocator
from tripsmith.schemas.categories import BudgetBucket, Category

from conftest import make_activity, make_itinerary


# ── allocate ─────────────────────────────────────────────────────────────────

def test_expensive_city_raises_accommodation_share():
    alloc = BudgetAllocator().allocate(10_000_000, 5, "Tokyo")
    assert alloc.fractions[BudgetBucket.ACCOMMODATION] > 0.30
    assert alloc.fractions[BudgetBucket.ACCOMMODATION] == pytest.approx(0.38)
    assert sum(alloc.fractions.values()) == pytest.approx(1.0)
    assert alloc.country_tier == "expensive"
    assert alloc.is_city is True


def test_amounts_add_up_to_the_budget():
    for destination in ("Tokyo", "Hanoi", "Atlantis", "Bangkok"):
        for days in (1, 3, 7, 11):
            alloc = BudgetAllocator().allocate(9_999_999, days, destination)
            assert alloc.total == 9_999_999


def test_default_split_for_unknown_destination():
    alloc = BudgetAllocator().allocate(1_000_000, 4, "Atlantis")
    assert alloc.amounts == {
        BudgetBucket.ACCOMMODATION:  300_000,
        BudgetBucket.FOOD:           250_000,
        BudgetBucket.ATTRACTIONS:    200_000,
        BudgetBucket.TRANSPORTATION: 150_000,
        BudgetBucket.OTHER:          100_000,
    }
    assert alloc.daily[BudgetBucket.ACCOMMODATION] == 75_000


def test_short_budget_city_trip():
    alloc = BudgetAllocator().allocate(1_000_000, 2, "Hanoi")
    assert alloc.fractions[BudgetBucket.ACCOMMODATION] == pytest.approx(0.23)
    assert alloc.fractions[BudgetBucket.ATTRACTIONS] == pytest.approx(0.30)
    assert alloc.fractions[BudgetBucket.TRANSPORTATION] == pytest.approx(0.18)


def test_long_trip_shift():
    alloc = BudgetAllocator().allocate(1_000_000, 7, "Atlantis")
    assert alloc.fractions[BudgetBucket.ACCOMMODATION] == pytest.approx(0.35)
    assert alloc.fractions[BudgetBucket.ATTRACTIONS] == pytest.approx(0.15)


@pytest.mark.parametrize("budget, days", [(1_000_000, 0), (1_000_000, -2), (0, 3), (-5, 3)])
def test_invalid_allocation_arguments(budget, days):
    with pytest.raises(ValueError):
        BudgetAllocator().allocate(budget, days, "Hanoi")


def test_reference_prices_follow_destination_factor():
    alloc = BudgetAllocator().allocate(1_000_000, 3, "Tokyo")
    assert alloc.cost_estimates["mid_range_hotel"] == 2_400_000
    tips = BudgetAllocator.budget_tips(alloc)
    assert tips["recommended_accommodation"] == 2_400_000
    assert tips["country_type"] == "expensive"


# ── rebalance ────────────────────────────────────────────────────────────────

def _trip():
    return make_itinerary(
        [
            make_activity("Hotel", Category.HOTEL, cost=1_000_000),
            make_activity("Lunch", Category.RESTAURANT, cost=300_000),
            make_activity("Coffee", Category.CAFE, cost=100_001),
            make_activity("Walk", Category.TRAVEL, cost=0),
        ],
        [make_activity("Museum", Category.MUSEUM, cost=50_000)],
        [],
    )


def test_rebalance_hits_bucket_targets_exactly():
    allocator = BudgetAllocator()
    alloc = allocator.allocate(3_000_000, 3, "Atlantis")
    out = allocator.rebalance(_trip(), alloc)

    day1, day2, _ = out.days
    assert day1.schedule[0].cost == alloc.amounts[BudgetBucket.ACCOMMODATION]
    assert day1.schedule[1].cost + day1.schedule[2].cost == alloc.amounts[BudgetBucket.FOOD]
    assert day2.schedule[0].cost == alloc.amounts[BudgetBucket.ATTRACTIONS]
    assert day1.schedule[1].budget_optimized is True


def test_empty_bucket_is_left_alone():
    allocator = BudgetAllocator()
    out = allocator.rebalance(_trip(), allocator.allocate(3_000_000, 3, "Atlantis"))
    walk = out.days[0].schedule[3]
    assert walk.cost == 0
    assert walk.budget_optimized is False


def test_rebalance_summaries():
    allocator = BudgetAllocator()
    alloc = allocator.allocate(3_000_000, 3, "Atlantis")
    out = allocator.rebalance(_trip(), alloc)

    assert [d.budget_summary.day_number for d in out.days] == [1, 2, 3]
    assert out.days[0].budget_summary.daily_budget == 1_000_000
    assert out.days[0].budget_summary.status == "over_budget"
    assert out.days[2].budget_summary.status == "within_budget"
    assert out.days[2].budget_summary.remaining == 1_000_000
    assert out.days[0].budget_tips["recommended_food_per_meal"] == 150_000

    summary = out.budget_summary
    assert summary.estimated_total_cost == 900_000 + 750_000 + 600_000
    assert summary.remaining_budget == 3_000_000 - summary.estimated_total_cost
    assert summary.status == "within_budget"
    assert summary.allocation is alloc


def test_rebalance_does_not_mutate_input():
    trip = _trip()
    allocator = BudgetAllocator()
    allocator.rebalance(trip, allocator.allocate(3_000_000, 3, "Atlantis"))
    assert trip.days[0].schedule[0].cost == 1_000_000
    assert trip.budget_summary is None


# ── cost_breakdown ───────────────────────────────────────────────────────────

def test_cost_breakdown_by_reporting_category():
    trip = make_itinerary(
        [
            make_activity("Hotel", Category.HOTEL, cost=500),
            make_activity("Lunch", Category.RESTAURANT, cost=200),
            make_activity("Bar crawl", Category.NIGHTLIFE, cost=150),
            make_activity("Taxi", Category.TAXI, cost=70),
            make_activity("Museum", Category.MUSEUM, cost=40),
            make_activity("Spa", Category.SPA, cost=30),
        ],
        people=3,
    )
    report = BudgetAllocator.cost_breakdown(trip)
    assert report.total == 990
    assert (report.accommodation, report.food, report.entertainment) == (500, 200, 150)
    assert (report.transportation, report.attractions, report.other) == (70, 40, 30)
    assert report.to_dict()["number_of_people"] == 3
    assert report.to_dict()["breakdown"]["food"] == 200
