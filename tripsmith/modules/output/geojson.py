"""
modules/output/geojson.py
---------------------------
GeoJSON FeatureCollection for map rendering.

  - one Point per non-travel activity, coordinates [lon, lat]
  - one LineString per day joining its stops in schedule order
    (days with fewer than two stops get no line)

Coordinates are already clamped at ingestion, so they are emitted as-is.
"""

from __future__ import annotations

import logging

from tripsmith.schemas.itinerary import Itinerary

logger = logging.getLogger(__name__)


def itinerary_to_geojson(itinerary: Itinerary) -> dict:
    features: list[dict] = []

    for day_index, day in enumerate(itinerary.days):
        stops = day.non_travel
        if not stops:
            logger.warning("Day %d has no activities to map", day_index + 1)
            continue

        for stop_index, activity in enumerate(stops):
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "Point",
                    "coordinates": [activity.location.lon, activity.location.lat],
                },
                "properties": {
                    "id":          f"activity-{day_index}-{stop_index}",
                    "name":        activity.name,
                    "day":         day.day_label,
                    "day_index":   day_index,
                    "category":    activity.category.value,
                    "start_time":  activity.start_time,
                    "end_time":    activity.end_time,
                    "cost":        activity.cost,
                    "address":     activity.address,
                    "weather_note": activity.weather_note,
                },
            })

        if len(stops) >= 2:
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[a.location.lon, a.location.lat] for a in stops],
                },
                "properties": {
                    "id":        f"route-{day_index}",
                    "day":       day.day_label,
                    "day_index": day_index,
                    "stops":     len(stops),
                },
            })

    return {"type": "FeatureCollection", "features": features}
