"""Shared fixtures: activity/day builders and a temp-dir StructuredLogger."""

from __future__ import annotations

import pytest

from tripsmith.modules.observability.logger import StructuredLogger
from tripsmith.schemas.categories import Category
from tripsmith.schemas.itinerary import Activity, Coordinate, DayPlan, Itinerary


def make_activity(
    name: str,
    category: Category = Category.ATTRACTION,
    start: str = "08:00",
    end: str = "09:00",
    lat: float = 0.0,
    lon: float = 0.0,
    cost: int = 0,
) -> Activity:
    return Activity(
        name=name,
        category=category,
        start_time=start,
        end_time=end,
        location=Coordinate(lat, lon),
        cost=cost,
    )


def make_itinerary(*schedules: list[Activity], destination: str = "Hanoi",
                   start_date: str | None = None, people: int = 1) -> Itinerary:
    return Itinerary(
        destination=destination,
        days=[DayPlan(day_label=f"Day {i + 1}", schedule=list(s)) for i, s in enumerate(schedules)],
        number_of_people=people,
        start_date=start_date,
    )


@pytest.fixture
def activity():
    return make_activity


@pytest.fixture
def itinerary():
    return make_itinerary


@pytest.fixture
def event_logger(tmp_path):
    log = StructuredLogger(tmp_path / "logs")
    yield log
    log.close()
