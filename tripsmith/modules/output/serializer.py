"""
modules/output/serializer.py
------------------------------
Plain-dict export of an Itinerary, the shape persistence stores verbatim.

Enums are flattened to their string values and Coordinates to {lat, lon};
everything else passes through unchanged.
"""

from __future__ import annotations

from typing import Optional

from tripsmith.schemas.itinerary import Activity, DayPlan, Itinerary


def activity_to_dict(activity: Activity) -> dict:
    record = {
        "name":         activity.name,
        "category":     activity.category.value,
        "start_time":   activity.start_time,
        "end_time":     activity.end_time,
        "location":     activity.location.to_dict(),
        "address":      activity.address,
        "description":  activity.description,
        "cost":         activity.cost,
        "alternatives": [alt.to_dict() for alt in activity.alternatives],
    }
    # optional fields only appear once a stage has set them
    if activity.weather_note is not None:
        record["weather_note"] = activity.weather_note
    if activity.transportation is not None:
        record["transportation"] = activity.transportation
        record["distance_km"] = activity.distance_km
    if activity.cost_estimated:
        record["cost_estimated"] = True
        record["cost_details"] = activity.cost_details
    if activity.budget_optimized:
        record["budget_optimized"] = True
    return record


def day_to_dict(day: DayPlan) -> dict:
    record: dict = {
        "day":      day.day_label,
        "date":     day.date,
        "schedule": [activity_to_dict(a) for a in day.schedule],
    }
    if day.weather is not None:
        record["weather"] = day.weather.to_dict()
    if day.budget_summary is not None:
        record["budget_summary"] = day.budget_summary.to_dict()
    if day.budget_tips:
        record["budget_tips"] = dict(day.budget_tips)
    return record


def itinerary_to_dict(itinerary: Optional[Itinerary]) -> dict:
    """Nested dict for the whole trip; an empty trip for None."""
    if itinerary is None:
        return {"destination": "", "days": [], "number_of_people": 1}
    record: dict = {
        "destination":      itinerary.destination,
        "start_date":       itinerary.start_date,
        "number_of_people": itinerary.number_of_people,
        "days":             [day_to_dict(d) for d in itinerary.days],
        "total_cost":       itinerary.total_cost,
    }
    if itinerary.budget_summary is not None:
        record["budget_summary"] = itinerary.budget_summary.to_dict()
    return record
