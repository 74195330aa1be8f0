"""2-opt route ordering."""

import random

from tripsmith.modules.planning.route_planner import RouteOptimizer
from tripsmith.schemas.categories import Category
from tripsmith.schemas.itinerary import Alternative, DayPlan

from conftest import make_activity


def _names(activities):
    return [a.name for a in activities]


def test_reorders_to_shorter_path():
    stops = [
        make_activity("A", lat=0, lon=0),
        make_activity("B", lat=10, lon=10),
        make_activity("C", lat=1, lon=1),
    ]
    route = RouteOptimizer().optimize(stops)
    assert _names(route) == ["A", "C", "B"]


def test_two_stops_are_returned_unchanged():
    stops = [make_activity("A", lat=5, lon=5), make_activity("B", lat=0, lon=0)]
    assert _names(RouteOptimizer().optimize(stops)) == ["A", "B"]
    assert RouteOptimizer().optimize([]) == []


def test_input_is_not_mutated():
    stops = [
        make_activity("A", lat=0, lon=0),
        make_activity("B", lat=10, lon=10),
        make_activity("C", lat=1, lon=1),
    ]
    RouteOptimizer().optimize(stops)
    assert _names(stops) == ["A", "B", "C"]


def test_distance_never_increases():
    rng = random.Random(7)
    optimizer = RouteOptimizer()
    for _ in range(20):
        stops = [
            make_activity(f"S{i}", lat=rng.uniform(20, 22), lon=rng.uniform(105, 107))
            for i in range(rng.randint(3, 9))
        ]
        route = optimizer.optimize(stops)
        assert optimizer.route_length(route) <= optimizer.route_length(stops) + 1e-9
        assert sorted(_names(route)) == sorted(_names(stops))


def test_first_stop_stays_in_place():
    rng = random.Random(11)
    optimizer = RouteOptimizer()
    for _ in range(20):
        stops = [
            make_activity(f"S{i}", lat=rng.uniform(20, 22), lon=rng.uniform(105, 107))
            for i in range(rng.randint(3, 9))
        ]
        assert optimizer.optimize(stops)[0].name == "S0"


def test_deterministic():
    stops = [make_activity(f"S{i}", lat=(i * 37) % 11, lon=(i * 13) % 7) for i in range(8)]
    optimizer = RouteOptimizer()
    assert _names(optimizer.optimize(stops)) == _names(optimizer.optimize(stops))


def test_optimize_day_keeps_time_slots_in_route_order():
    day = DayPlan(day_label="Day 1", schedule=[
        make_activity("A", start="08:00", end="09:00", lat=0, lon=0),
        make_activity("B", start="10:00", end="12:00", lat=10, lon=10),
        make_activity("C", start="13:00", end="13:30", lat=1, lon=1),
        make_activity("walk", category=Category.TRAVEL, start="09:00", end="09:20"),
    ])
    routed = RouteOptimizer().optimize_day(day)
    assert _names(routed.schedule) == ["A", "C", "B"]
    # C takes B's 10:00 slot with its own 30 minutes, B moves to 13:00
    assert (routed.schedule[1].start_time, routed.schedule[1].end_time) == ("10:00", "10:30")
    assert (routed.schedule[2].start_time, routed.schedule[2].end_time) == ("13:00", "15:00")
    assert len(day.schedule) == 4


def test_alternatives_survive_reordering():
    a = make_activity("A", lat=0, lon=0)
    b = make_activity("B", lat=10, lon=10)
    c = make_activity("C", lat=1, lon=1)
    b.alternatives = [Alternative("B1", "", 1), Alternative("B2", "", 2)]
    route = RouteOptimizer().optimize([a, b, c])
    assert [alt.name for alt in route[2].alternatives] == ["B1", "B2"]
