"""End-to-end pipeline runs with fake draft and weather sources."""

import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from tripsmith import (
    DraftSourceError,
    ErrorKind,
    InvalidInputError,
    WeatherSourceError,
    config,
    run_pipeline,
)
from tripsmith.modules.planning.scheduler import TemporalScheduler
from tripsmith.modules.tool_usage.weather_tool import FixedWeatherProvider
from tripsmith.schemas.categories import Category
from tripsmith.schemas.itinerary import WeatherCondition, WeatherDay, time_to_minutes

REQUEST = {
    "destination": "Hanoi",
    "budget": 10_000_000,
    "days": 2,
    "start_date": "2026-06-01",
    "number_of_people": 2,
    "start_time": "08:00",
}

SUNNY = WeatherDay(condition=WeatherCondition.CLEAR, rain_probability=0, is_good_weather=True)


def _act(name, category, start, end, lat, lon, cost=None):
    return {
        "name": name, "category": category, "start_time": start, "end_time": end,
        "location": {"lat": lat, "lon": lon}, "address": f"{name}, Hanoi",
        "cost": cost, "alternatives": [{"name": f"{name} A"}, {"name": f"{name} B"}],
    }


def draft_source(request):
    return [
        {"day": "Day 1", "schedule": [
            _act("Hotel", "hotel", "07:00", "07:30", 21.0245, 105.8412),
            _act("Temple of Literature", "tham quan", "09:00", "11:00", 21.0277, 105.8355),
            _act("Bun Cha lunch", "restaurant", "12:00", "13:00", 21.0340, 105.8500),
            _act("Hoan Kiem Lake", "lake", "15:00", "16:30", 21.0288, 105.8525),
        ]},
        {"day": "Day 2", "schedule": [
            _act("Egg coffee", "cafe", "08:00", "09:00", 21.0335, 105.8520, cost=35_000),
            _act("Ethnology Museum", "museum", "10:00", "12:00", 21.0405, 105.7985),
        ]},
    ]


def sunny_source(location, start, end):
    return [
        WeatherDay(date=date.fromordinal(start.toordinal() + i).isoformat(),
                   condition=WeatherCondition.CLEAR, is_good_weather=True)
        for i in range((end - start).days + 1)
    ]


def _run(request=None, **kwargs):
    kwargs.setdefault("weather_source", sunny_source)
    return run_pipeline(request or REQUEST, draft_source, **kwargs)


def test_full_run(event_logger):
    result = _run(event_logger=event_logger)

    assert len(result.itinerary.days) == 2
    assert result.weather_optimized is True
    assert result.budget_optimized is True
    assert result.allocation.total == 10_000_000
    assert not [i for i in result.issues if i.kind is ErrorKind.PER_DAY_ISOLATION]

    for day in result.itinerary.days:
        assert day.schedule[0].start_time == "08:00"
        for prev, cur in zip(day.schedule, day.schedule[1:]):
            assert time_to_minutes(cur.start_time) >= time_to_minutes(prev.end_time)
        assert day.budget_summary is not None
        assert day.weather is not None
        assert all(a.cost_estimated for a in day.schedule)

    assert result.itinerary.budget_summary.total_budget == 10_000_000
    assert result.cost_breakdown.total == result.itinerary.total_cost
    assert result.cost_breakdown.number_of_people == 2

    points = [f for f in result.geojson["features"] if f["geometry"]["type"] == "Point"]
    assert len(points) == 6

    json.dumps(result.to_dict())


def test_stage_timings_are_logged(event_logger):
    result = _run(event_logger=event_logger)
    path = event_logger.logs_dir / f"{result.session_id}.jsonl"
    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]

    stages = [r["payload"]["stage"] for r in records if r["event_type"] == "PERFORMANCE"]
    assert stages == ["draft", "normalize", "route_schedule", "cost", "budget", "weather", "output"]
    assert records[0]["event_type"] == "PIPELINE_START"
    assert records[-1]["event_type"] == "PIPELINE_END"
    assert result.session_id.startswith("run_")


def test_caller_request_is_not_modified(event_logger):
    request = dict(REQUEST)
    _run(request, event_logger=event_logger)
    assert request == REQUEST


def test_invalid_request_raises_before_any_stage(event_logger):
    source = MagicMock()
    with pytest.raises(InvalidInputError):
        run_pipeline({**REQUEST, "budget": -1}, source, event_logger=event_logger)
    source.assert_not_called()


def test_draft_source_failure_aborts(event_logger):
    def broken(request):
        raise RuntimeError("model timeout")

    with pytest.raises(DraftSourceError) as exc_info:
        run_pipeline(REQUEST, broken, event_logger=event_logger)
    assert exc_info.value.kind is ErrorKind.EXTERNAL_SOURCE_FAILURE
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_empty_draft_aborts(event_logger):
    with pytest.raises(DraftSourceError):
        run_pipeline(REQUEST, lambda request: [], event_logger=event_logger)


def test_weather_failure_degrades(event_logger):
    def down(location, start, end):
        raise WeatherSourceError("Weatherbit request failed")

    result = _run(event_logger=event_logger, weather_source=down,
                  weather_provider=FixedWeatherProvider(SUNNY))

    assert result.weather_optimized is False
    issue = next(i for i in result.issues if i.kind is ErrorKind.EXTERNAL_SOURCE_FAILURE)
    assert issue.stage == "weather"
    assert all(d.weather.synthesized for d in result.itinerary.days)
    lake = next(a for a in result.itinerary.days[0].schedule if a.name == "Hoan Kiem Lake")
    assert lake.weather_note


def test_unexpected_weather_error_also_degrades(event_logger):
    def crash(location, start, end):
        raise KeyError("data")

    result = _run(event_logger=event_logger, weather_source=crash)
    assert result.weather_optimized is False
    assert len(result.itinerary.days) == 2


def test_default_weather_source_uses_the_stub_forecast(event_logger, monkeypatch):
    monkeypatch.setattr(config, "USE_STUB_WEATHER", True)
    result = run_pipeline(REQUEST, draft_source, event_logger=event_logger)

    assert result.weather_optimized is True
    assert all(d.weather.description == "stub" for d in result.itinerary.days)
    assert not any(i.kind is ErrorKind.EXTERNAL_SOURCE_FAILURE for i in result.issues)


def test_default_weather_source_without_key_degrades(event_logger, monkeypatch):
    monkeypatch.setattr(config, "USE_STUB_WEATHER", False)
    monkeypatch.setattr(config, "WEATHERBIT_API_KEY", "")
    monkeypatch.setattr(config, "USE_WEATHER_CACHE", False)
    result = run_pipeline(REQUEST, draft_source, event_logger=event_logger)

    assert result.weather_optimized is False
    assert any(i.kind is ErrorKind.EXTERNAL_SOURCE_FAILURE for i in result.issues)


def test_weather_source_gets_trip_window_and_start_location(event_logger):
    source = MagicMock(side_effect=sunny_source)
    request = {**REQUEST, "start_location_lat": 21.03, "start_location_lon": 105.85}
    _run(request, event_logger=event_logger, weather_source=source)

    location, start, end = source.call_args.args
    assert (location.lat, location.lon) == (21.03, 105.85)
    assert (start, end) == (date(2026, 6, 1), date(2026, 6, 2))


def test_no_start_date_skips_weather(event_logger):
    source = MagicMock()
    request = {k: v for k, v in REQUEST.items() if k != "start_date"}
    result = _run(request, event_logger=event_logger, weather_source=source)

    source.assert_not_called()
    assert result.weather_optimized is False
    assert all(d.weather is None for d in result.itinerary.days)


def test_rainy_day_is_rebuilt(event_logger):
    def rainy(location, start, end):
        return [WeatherDay(date=start.isoformat(), condition=WeatherCondition.RAIN,
                           rain_probability=90, is_good_weather=False)]

    result = _run(event_logger=event_logger, weather_source=rainy)
    for day in result.itinerary.days:
        assert not any(a.is_travel for a in day.schedule)
    day1 = [a.name for a in result.itinerary.days[0].schedule]
    assert len(day1) == 4
    assert "Hoan Kiem Lake" not in day1 or \
        "chance of rain" in result.itinerary.days[0].schedule[day1.index("Hoan Kiem Lake")].weather_note


def test_short_draft_is_padded(event_logger):
    result = _run({**REQUEST, "days": 3}, event_logger=event_logger)
    assert len(result.itinerary.days) == 3
    assert [i for i in result.issues if i.kind is ErrorKind.DATA_NORMALIZATION]


def test_failing_day_is_isolated(event_logger, monkeypatch):
    original = TemporalScheduler.schedule_day

    def flaky(self, day, day_start=None):
        if day.day_label == "Day 2":
            raise RuntimeError("boom")
        return original(self, day, day_start)

    monkeypatch.setattr(TemporalScheduler, "schedule_day", flaky)
    result = _run(event_logger=event_logger)

    issue = next(i for i in result.issues if i.kind is ErrorKind.PER_DAY_ISOLATION)
    assert (issue.stage, issue.day_index) == ("schedule", 1)
    day2 = result.itinerary.days[1]
    assert [a.name for a in day2.schedule] == ["Egg coffee", "Ethnology Museum"]
    assert result.itinerary.days[0].schedule[0].start_time == "08:00"


def test_over_budget_days_get_savings_suggestions(event_logger):
    request = {k: v for k, v in REQUEST.items() if k != "start_date"}
    result = _run(request, event_logger=event_logger)

    issue = next(i for i in result.issues if i.kind is ErrorKind.BUDGET_INFEASIBILITY)
    assert 1 in issue.context["over_budget_days"]
    assert result.itinerary.days[0].budget_summary.status == "over_budget"

    temple = next(s for s in result.savings_suggestions if s.activity_name == "Temple of Literature")
    alt = temple.alternatives[0]
    assert alt.savings == temple.activity_cost - alt.estimated_cost
    assert alt.category is Category.ATTRACTION
