"""
db/redis_client.py
-------------------
redis-py client — singleton plus helpers for the forecast cache.

Key schema:

  forecast:{lat}:{lon}:{yyyy-mm-dd}
       Type : String (JSON list of WeatherDay dicts)
       TTL  : WEATHER_CACHE_TTL (default 10,800 s = 3 hours)
       Coordinates are rounded to 2 decimals (~1 km) so nearby requests share
       an entry; the date is the day the forecast was fetched.

Environment variables (set in config.py):
    REDIS_HOST        default: localhost
    REDIS_PORT        default: 6379
    REDIS_DB          default: 0
    REDIS_PASSWORD    default: ""  (empty = no auth)
    WEATHER_CACHE_TTL default: 10800
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

import redis

from tripsmith import config

# Module-level singleton; initialised lazily on first call to get_redis()
_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    """Return the singleton Redis client, creating it on first call."""
    global _client
    if _client is None:
        kwargs: dict[str, Any] = {
            "host":             config.REDIS_HOST,
            "port":             config.REDIS_PORT,
            "db":               config.REDIS_DB,
            "decode_responses": True,   # return str, not bytes
        }
        if config.REDIS_PASSWORD:
            kwargs["password"] = config.REDIS_PASSWORD
        _client = redis.Redis(**kwargs)
    return _client


# ── Forecast cache ────────────────────────────────────────────────────────────

def _forecast_key(lat: float, lon: float, fetched_on: date | None = None) -> str:
    fetched_on = fetched_on or date.today()
    return f"forecast:{lat:.2f}:{lon:.2f}:{fetched_on.isoformat()}"


def get_forecast(lat: float, lon: float) -> list[dict] | None:
    """Return the cached forecast rows for today, or None on a miss."""
    raw = get_redis().get(_forecast_key(lat, lon))
    if raw is None:
        return None
    return json.loads(raw)


def set_forecast(lat: float, lon: float, rows: list[dict]) -> None:
    """Cache forecast rows for today with WEATHER_CACHE_TTL."""
    get_redis().set(
        _forecast_key(lat, lon),
        json.dumps(rows, ensure_ascii=False),
        ex=config.WEATHER_CACHE_TTL,
    )
