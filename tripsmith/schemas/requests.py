"""
schemas/requests.py
-------------------
Pydantic model for an itinerary request.  Validated once at the boundary;
stages only ever see a TripRequest that passed.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tripsmith import config

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

VALID_PREFERENCES: frozenset[str] = frozenset({
    "restaurant", "cafe", "bar", "fast_food", "bakery", "street_food",
    "fine_dining", "dessert", "museum", "art_gallery", "park", "monument",
    "historic", "zoo", "theme_park", "theater", "cinema", "cultural",
    "shopping", "nightlife", "beach", "mountain", "lake", "spa",
})


class TripRequest(BaseModel):
    destination: str = Field(..., min_length=1, description="City and/or country, e.g. 'Hanoi, Vietnam'")
    budget: float = Field(..., gt=0, description="Total trip budget in VND")
    days: int = Field(..., ge=1, le=config.MAX_TRIP_DAYS)
    preferences: list[str] = Field(default_factory=list)
    start_location_name: str = Field("", description="Free-text starting point")
    start_location_lat: Optional[float] = Field(None, ge=-90, le=90)
    start_location_lon: Optional[float] = Field(None, ge=-180, le=180)
    start_time: str = Field(config.DEFAULT_DAY_START, description="Day start 'HH:MM'")
    start_date: Optional[date] = None
    number_of_people: int = Field(config.DEFAULT_NUMBER_OF_PEOPLE, ge=1)

    @field_validator("destination")
    @classmethod
    def _destination_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("destination must not be blank")
        return v.strip()

    @field_validator("start_time")
    @classmethod
    def _start_time_hhmm(cls, v: str) -> str:
        if not _HHMM.match(v):
            raise ValueError(f"start_time must be HH:MM, got {v!r}")
        return v

    @field_validator("preferences")
    @classmethod
    def _known_preferences(cls, v: list[str]) -> list[str]:
        normalized = [p.strip().lower() for p in v if p and p.strip()]
        unknown = sorted(set(normalized) - VALID_PREFERENCES)
        if unknown:
            raise ValueError(f"unknown preferences: {', '.join(unknown)}")
        return normalized
