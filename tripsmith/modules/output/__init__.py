"""modules/output — export formats for a finished itinerary."""

from tripsmith.modules.output.serializer import (
    activity_to_dict, day_to_dict, itinerary_to_dict,
)
from tripsmith.modules.output.geojson import itinerary_to_geojson

__all__ = [
    "activity_to_dict",
    "day_to_dict",
    "itinerary_to_dict",
    "itinerary_to_geojson",
]
