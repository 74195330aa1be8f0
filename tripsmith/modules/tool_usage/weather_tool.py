"""
modules/tool_usage/weather_tool.py
-------------------------------------
Daily forecast fetcher backed by the Weatherbit 16-day Forecast API, plus the
padding that stretches a short forecast over the whole trip.

Endpoint:
    GET https://api.weatherbit.io/v2.0/forecast/daily
        ?lat={lat}&lon={lon}&days=16&units=M&key={key}

No OAuth — plain API key in `key` query param.

Weatherbit code → condition mapping
───────────────────────────────────
  < 300   Thunderstorm
  < 500   Drizzle
  < 600   Rain
  < 700   Snow
  < 800   Atmosphere (fog / haze / dust)
  800     Clear
  801-899 Clouds

A day is "good weather" unless it is Rain or Thunderstorm or its
precipitation probability is 40 % or more.
"""

from __future__ import annotations
import logging
import random
from dataclasses import replace
from datetime import date, timedelta
from typing import Any, Optional, Protocol

import redis
import requests

from tripsmith import config
from tripsmith.db import redis_client
from tripsmith.errors import WeatherSourceError
from tripsmith.schemas.itinerary import Coordinate, WeatherCondition, WeatherDay

logger = logging.getLogger(__name__)

_GOOD_WEATHER_MAX_POP: int = 40
_BAD_CONDITIONS = frozenset({WeatherCondition.RAIN, WeatherCondition.THUNDERSTORM})


# ─────────────────────────────────────────────────────────────────────────────
# Weatherbit code → condition
# ─────────────────────────────────────────────────────────────────────────────

def weather_code_to_condition(code: int) -> WeatherCondition:
    """Map a Weatherbit weather code to a WeatherCondition."""
    if code < 300:
        return WeatherCondition.THUNDERSTORM
    if code < 500:
        return WeatherCondition.DRIZZLE
    if code < 600:
        return WeatherCondition.RAIN
    if code < 700:
        return WeatherCondition.SNOW
    if code < 800:
        return WeatherCondition.ATMOSPHERE
    if code == 800:
        return WeatherCondition.CLEAR
    if code < 900:
        return WeatherCondition.CLOUDS
    return WeatherCondition.CLEAR


def is_good_weather(condition: WeatherCondition, rain_probability: int) -> bool:
    return condition not in _BAD_CONDITIONS and rain_probability < _GOOD_WEATHER_MAX_POP


def parse_forecast(payload: dict[str, Any]) -> list[WeatherDay]:
    """
    Convert a Weatherbit forecast/daily response body into WeatherDay records.
    Raises WeatherSourceError when the body has no ``data`` list.
    """
    rows = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(rows, list):
        raise WeatherSourceError("Weatherbit response has no 'data' list", {"payload": payload})

    days: list[WeatherDay] = []
    for row in rows:
        weather = row.get("weather") or {}
        condition = weather_code_to_condition(int(weather.get("code", 800)))
        pop = int(round(float(row.get("pop", 0) or 0)))
        pop = max(0, min(100, pop))
        days.append(WeatherDay(
            date=str(row.get("valid_date", "")),
            condition=condition,
            description=str(weather.get("description", "")),
            rain_probability=pop,
            is_good_weather=is_good_weather(condition, pop),
            avg_temp=float(row.get("temp", 0.0) or 0.0),
            max_temp=float(row.get("max_temp", 0.0) or 0.0),
            min_temp=float(row.get("min_temp", 0.0) or 0.0),
            wind_speed=float(row.get("wind_spd", 0.0) or 0.0),
        ))
    return days


# ─────────────────────────────────────────────────────────────────────────────
# Fallback providers
# ─────────────────────────────────────────────────────────────────────────────

class FallbackWeatherProvider(Protocol):
    def default_day(self, on: str) -> WeatherDay: ...


class RandomWeatherProvider:
    """
    Bounded pseudo-random days (20–34 °C, any rain probability) for dates no
    forecast covers.  Pass a seed for reproducible output.
    """

    _CONDITIONS = (
        WeatherCondition.CLEAR,
        WeatherCondition.CLOUDS,
        WeatherCondition.RAIN,
        WeatherCondition.THUNDERSTORM,
    )

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def default_day(self, on: str) -> WeatherDay:
        condition = self._rng.choice(self._CONDITIONS)
        temp = self._rng.randint(20, 34)
        pop = self._rng.randint(0, 99)
        return WeatherDay(
            date=on,
            condition=condition,
            description="simulated",
            rain_probability=pop,
            is_good_weather=is_good_weather(condition, pop),
            avg_temp=float(temp),
            max_temp=float(temp + 2),
            min_temp=float(temp - 2),
            wind_speed=float(self._rng.randint(0, 9)),
            synthesized=True,
        )


class FixedWeatherProvider:
    """Same day every time; for tests and offline runs."""

    def __init__(self, template: WeatherDay) -> None:
        self._template = template

    def default_day(self, on: str) -> WeatherDay:
        return replace(self._template, date=on, synthesized=True)


def pad_forecast(
    forecast: list[WeatherDay],
    days: int,
    start_date: Optional[date] = None,
    provider: Optional[FallbackWeatherProvider] = None,
) -> list[WeatherDay]:
    """
    Return exactly *days* WeatherDay records, one per trip day.

    With a start_date, forecast entries are matched by date; otherwise by
    position.  A day with no entry copies the most recent known day before it
    (marked synthesized) or, when none exists yet, comes from *provider*.
    """
    provider = provider or RandomWeatherProvider(config.WEATHER_RANDOM_SEED)
    by_date = {d.date: d for d in forecast if d.date}

    padded: list[WeatherDay] = []
    last_known: Optional[WeatherDay] = None
    for i in range(days):
        on = (start_date + timedelta(days=i)).isoformat() if start_date else ""
        if start_date:
            known = by_date.get(on)
        else:
            known = forecast[i] if i < len(forecast) else None

        if known is not None:
            last_known = known
            padded.append(replace(known))
        elif last_known is not None:
            padded.append(replace(last_known, date=on, synthesized=True))
        else:
            padded.append(provider.default_day(on))
    return padded


# ─────────────────────────────────────────────────────────────────────────────
# WeatherTool
# ─────────────────────────────────────────────────────────────────────────────

class WeatherTool:
    """
    Weather source for the pipeline: ``tool(location, start, end)`` returns
    the forecast days inside [start, end].

    Stub mode (config.USE_STUB_WEATHER) returns clear-sky days and makes no
    HTTP calls.  Any HTTP or payload failure raises WeatherSourceError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        use_stub: Optional[bool] = None,
        use_cache: Optional[bool] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key   = api_key if api_key is not None else config.WEATHERBIT_API_KEY
        self.use_stub  = config.USE_STUB_WEATHER if use_stub is None else use_stub
        self.use_cache = config.USE_WEATHER_CACHE if use_cache is None else use_cache
        self.session   = session or requests.Session()

    def __call__(self, location: Coordinate, start_date: date, end_date: date) -> list[WeatherDay]:
        return self.fetch_forecast(location, start_date, end_date)

    def fetch_forecast(self, location: Coordinate, start_date: date, end_date: date) -> list[WeatherDay]:
        span = (end_date - start_date).days + 1
        if span > config.WEATHER_MAX_FORECAST_DAYS:
            logger.warning(
                "forecast requested for %d days; Weatherbit covers %d, the rest will be padded",
                span, config.WEATHER_MAX_FORECAST_DAYS,
            )

        if self.use_stub:
            logger.info("returning stub forecast for (%.4f, %.4f)", location.lat, location.lon)
            return self._stub_forecast(start_date, min(span, config.WEATHER_MAX_FORECAST_DAYS))

        days = self._cached(location)
        if days is None:
            days = self._fetch_remote(location)
            self._store(location, days)

        lo, hi = start_date.isoformat(), end_date.isoformat()
        return [d for d in days if lo <= d.date <= hi]

    # ── Internals ─────────────────────────────────────────────────────────────

    def _fetch_remote(self, location: Coordinate) -> list[WeatherDay]:
        if not self.api_key:
            raise WeatherSourceError("WEATHERBIT_API_KEY is not set")
        url = f"{config.WEATHERBIT_BASE_URL}/forecast/daily"
        params = {
            "lat":   location.lat,
            "lon":   location.lon,
            "days":  config.WEATHER_MAX_FORECAST_DAYS,
            "units": "M",
            "key":   self.api_key,
        }
        try:
            resp = self.session.get(url, params=params, timeout=config.WEATHER_REQUEST_TIMEOUT)
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as exc:
            raise WeatherSourceError(
                f"Weatherbit request failed: {exc}",
                {"lat": location.lat, "lon": location.lon},
            ) from exc
        return parse_forecast(payload)

    def _cached(self, location: Coordinate) -> Optional[list[WeatherDay]]:
        if not self.use_cache:
            return None
        try:
            rows = redis_client.get_forecast(location.lat, location.lon)
        except redis.RedisError as exc:
            logger.warning("forecast cache read failed: %s", exc)
            return None
        if rows is None:
            return None
        return [
            WeatherDay(**{**row, "condition": WeatherCondition(row["condition"])})
            for row in rows
        ]

    def _store(self, location: Coordinate, days: list[WeatherDay]) -> None:
        if not self.use_cache:
            return
        try:
            redis_client.set_forecast(location.lat, location.lon, [d.to_dict() for d in days])
        except redis.RedisError as exc:
            logger.warning("forecast cache write failed: %s", exc)

    @staticmethod
    def _stub_forecast(start_date: date, days: int) -> list[WeatherDay]:
        return [
            WeatherDay(
                date=(start_date + timedelta(days=i)).isoformat(),
                condition=WeatherCondition.CLEAR,
                description="stub",
                rain_probability=0,
                is_good_weather=True,
                avg_temp=28.0,
                max_temp=31.0,
                min_temp=24.0,
                wind_speed=1.0,
            )
            for i in range(max(0, days))
        ]
