"""
db/
----
Cache access layer.

  Redis (redis-py) — volatile forecast cache
    forecast:{lat}:{lon}:{date}   TTL = WEATHER_CACHE_TTL (3 h)

Persistence of finished itineraries lives outside this package; it consumes
tripsmith.modules.output.itinerary_to_dict() verbatim.
"""

from tripsmith.db.redis_client import get_forecast, get_redis, set_forecast

__all__ = ["get_redis", "get_forecast", "set_forecast"]
