"""Destination tiers, seasons, group scaling and per-activity estimates."""

from datetime import date

import pytest

from tripsmith import config
from tripsmith.modules.planning.cost_estimator import (
    CostEstimator,
    country_cost_factor,
    group_size_factor,
    lunar_new_year,
    people_scaling,
    travel_season,
)
from tripsmith.modules.planning.scheduler import TemporalScheduler
from tripsmith.schemas.categories import Category, normalize_category

from conftest import make_activity, make_itinerary

OFF_PEAK = date(2026, 6, 15)


# ── Destination tiers ────────────────────────────────────────────────────────

def test_country_match():
    f = country_cost_factor("Vietnam")
    assert (f.factor, f.tier, f.is_city, f.country) == (1.0, "budget", False, "Vietnam")


def test_city_match_costs_twenty_percent_more():
    f = country_cost_factor("Tokyo")
    assert f.tier == "expensive"
    assert f.is_city is True
    assert f.country == "Japan"
    assert f.factor == pytest.approx(3.0)


def test_country_name_wins_over_city():
    f = country_cost_factor("Paris, France")
    assert f.is_city is False
    assert f.factor == pytest.approx(2.2)


def test_unknown_destination_is_moderate():
    f = country_cost_factor("Atlantis")
    assert (f.factor, f.tier, f.is_city, f.country) == (1.0, "moderate", False, None)
    assert country_cost_factor("").factor == 1.0


# ── Seasons ──────────────────────────────────────────────────────────────────

def test_lunar_new_year_window_in_vietnam():
    season = travel_season(date(2026, 2, 17), "Hanoi")
    assert season.season == "special_event"
    assert season.special_event == "Lunar New Year"
    assert season.factor == 1.5
    assert travel_season(date(2026, 2, 14), "Hanoi").special_event == "Lunar New Year"
    assert travel_season(date(2026, 2, 24), "Hanoi").special_event == "Lunar New Year"


def test_lunar_new_year_fallback_date():
    assert lunar_new_year(2026) == date(2026, 2, 17)
    assert lunar_new_year(2040) == date(2040, 2, 1)


def test_christmas_and_new_year_apply_everywhere():
    assert travel_season(date(2026, 12, 24), "Paris").special_event == "Christmas"
    assert travel_season(date(2026, 12, 30), "Bangkok").special_event == "New Year"
    assert travel_season(date(2027, 1, 2), "Hanoi").factor == 1.4


def test_cherry_blossom_only_in_japan():
    assert travel_season(date(2026, 4, 20), "Tokyo").special_event == "Cherry Blossom"
    assert travel_season(date(2026, 4, 20), "Tokyo").factor == 1.6
    assert travel_season(date(2026, 4, 20), "Seoul").season == "peak"


def test_peak_and_off_peak():
    peak = travel_season(date(2026, 10, 10), "Tokyo")
    assert (peak.country, peak.season, peak.factor) == ("Japan", "peak", 1.3)
    off = travel_season(date(2026, 7, 1), "Tokyo")
    assert (off.season, off.factor) == ("off_peak", 1.0)


def test_unknown_destination_uses_default_season_country():
    assert travel_season(OFF_PEAK, "Atlantis").country == "Vietnam"


# ── Group scaling ────────────────────────────────────────────────────────────

@pytest.mark.parametrize("people, expected", [
    (1, 1.0), (2, 1.8), (3, 3.0), (4, 3.0), (5, 5.2), (8, 5.2), (10, 6.4),
])
def test_group_size_factor(people, expected):
    assert group_size_factor(people) == pytest.approx(expected)


def test_people_scaling_regimes():
    assert people_scaling(Category.MUSEUM, 3) == pytest.approx(1.6)
    assert people_scaling(Category.HOTEL, 3) == pytest.approx(3.0)
    assert people_scaling(Category.TAXI, 3) == pytest.approx(2.4)
    assert people_scaling(Category.OTHER, 3) == pytest.approx(2.7)


# ── Estimates ────────────────────────────────────────────────────────────────

def test_four_person_meal_scales_by_head():
    ctx = CostEstimator.build_context("Hanoi", OFF_PEAK, 4)
    meal = make_activity("Pho", Category.RESTAURANT)
    assert ctx.country_factor == pytest.approx(1.2)
    assert ctx.season_factor == 1.0
    assert CostEstimator().estimate(meal, ctx) == round(150_000 * 4 * 1.2 * 1.0)


@pytest.mark.parametrize("raw", ["food", "meal", "restaurant"])
def test_generic_meal_categories_are_priced_per_head(raw):
    ctx = CostEstimator.build_context("Hanoi", OFF_PEAK, 4)
    meal = make_activity("Dinner", normalize_category(raw))
    assert CostEstimator().estimate(meal, ctx) == round(150_000 * 4 * 1.2)


@pytest.mark.parametrize("raw", ["accommodation", "lodging", "hotel"])
def test_generic_lodging_categories_are_priced_per_head(raw):
    ctx = CostEstimator.build_context("Hanoi", OFF_PEAK, 2)
    stay = make_activity("Stay", normalize_category(raw))
    assert CostEstimator().estimate(stay, ctx) == round(800_000 * 2 * 1.2)


def test_apartment_is_priced_per_head():
    assert people_scaling(Category.APARTMENT, 3) == pytest.approx(3.0)


def test_existing_cost_is_rescaled_for_the_group():
    ctx = CostEstimator.build_context("Hanoi", OFF_PEAK, 2)
    ticket = make_activity("Show", Category.THEATER, cost=100_000)
    assert CostEstimator().estimate(ticket, ctx) == 180_000


def test_free_walk_stays_free():
    ctx = CostEstimator.build_context("Tokyo", OFF_PEAK, 3)
    walk = make_activity("Walk to Park", Category.TRAVEL)
    assert CostEstimator().estimate(walk, ctx) == 0


def test_beach_has_no_base_cost():
    ctx = CostEstimator.build_context("Da Nang", OFF_PEAK, 2)
    assert CostEstimator().estimate(make_activity("My Khe", Category.BEACH), ctx) == 0


def test_peak_season_raises_fresh_estimates():
    estimator = CostEstimator()
    museum = make_activity("Museum", Category.MUSEUM)
    off = estimator.estimate(museum, estimator.build_context("Tokyo", date(2026, 7, 1), 1))
    peak = estimator.estimate(museum, estimator.build_context("Tokyo", date(2026, 10, 10), 1))
    assert off == 300_000
    assert peak == 390_000


def test_estimate_activity_records_details_once():
    estimator = CostEstimator()
    ctx = estimator.build_context("Hanoi", OFF_PEAK, 2)
    estimated = estimator.estimate_activity(make_activity("Show", Category.THEATER, cost=100_000), ctx)
    assert estimated.cost == 180_000
    assert estimated.cost_estimated is True
    assert estimated.cost_details["source"] == "provided"
    assert estimated.cost_details["per_person"] == 90_000
    # a second pass must not scale the group price again
    assert estimator.estimate_activity(estimated, ctx).cost == 180_000


def test_estimate_itinerary_does_not_mutate_input():
    trip = make_itinerary([make_activity("Pho", Category.RESTAURANT)], people=2)
    out = CostEstimator().estimate_itinerary(trip, CostEstimator.build_context("Hanoi", OFF_PEAK, 2))
    assert trip.days[0].schedule[0].cost == 0
    assert out.days[0].schedule[0].cost == round(150_000 * 2 * 1.2)


def test_travel_leg_fare_is_not_rescaled_for_the_group():
    ctx = CostEstimator.build_context("Hanoi", OFF_PEAK, 4)
    stops = [
        make_activity("Temple", start="09:00", end="10:00", lat=21.0277, lon=105.8355),
        make_activity("Lake", start="10:30", end="11:30", lat=21.0277 + 2 / 111.2, lon=105.8355),
    ]
    schedule = TemporalScheduler().schedule(stops, "09:00")
    leg = next(a for a in schedule if a.is_travel)
    assert leg.cost > 0

    estimated = CostEstimator().estimate_activity(leg, ctx)
    assert estimated.cost == leg.cost
    assert estimated.cost_details["source"] == "travel_leg"
    assert estimated.cost_details["currency"] == config.CURRENCY_UNIT
