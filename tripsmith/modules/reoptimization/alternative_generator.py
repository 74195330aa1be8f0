"""
modules/reoptimization/alternative_generator.py
------------------------------------------------
Cheaper stand-ins for expensive activities, offered when a trip ends up
over budget.

For every activity costing more than _EXPENSIVE_THRESHOLD VND one
alternative is proposed at the same place and time:

  dining           → nearby local eatery          50 % of the cost
  sightseeing      → explore the surroundings     30 % of the cost
  entertainment    → local low-cost entertainment 40 % of the cost

Design principles:
  - NO schedule mutation.  This module is read-only and produces a list.
  - savings == original cost − alternative cost, exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from tripsmith.schemas.categories import Category
from tripsmith.schemas.itinerary import Activity, Coordinate, Itinerary

_EXPENSIVE_THRESHOLD: int = 100_000

_DINING = frozenset({
    Category.RESTAURANT, Category.FOOD, Category.FINE_DINING, Category.BAR,
})
_SIGHTSEEING = frozenset({
    Category.ATTRACTION, Category.CULTURAL, Category.MUSEUM, Category.ART_GALLERY,
    Category.HISTORIC, Category.ZOO, Category.THEME_PARK,
})
_ENTERTAINMENT = frozenset({
    Category.ENTERTAINMENT, Category.SHOPPING, Category.NIGHTLIFE,
    Category.THEATER, Category.CINEMA,
})


# ─────────────────────────────────────────────────────────────────────────────
# Output dataclasses
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class BudgetAlternative:
    name: str
    description: str
    category: Category
    location: Coordinate
    address: str
    start_time: str
    end_time: str
    estimated_cost: int
    savings: int

    def to_dict(self) -> dict:
        return {
            "name":           self.name,
            "description":    self.description,
            "category":       self.category.value,
            "location":       self.location.to_dict(),
            "address":        self.address,
            "start_time":     self.start_time,
            "end_time":       self.end_time,
            "estimated_cost": self.estimated_cost,
            "savings":        self.savings,
        }


@dataclass
class SavingsSuggestion:
    day_number: int
    activity_name: str
    activity_cost: int
    alternatives: list[BudgetAlternative] = field(default_factory=list)

    @property
    def best_savings(self) -> int:
        return max((a.savings for a in self.alternatives), default=0)

    def to_dict(self) -> dict:
        return {
            "day_number":    self.day_number,
            "activity_name": self.activity_name,
            "activity_cost": self.activity_cost,
            "alternatives":  [a.to_dict() for a in self.alternatives],
        }


# ─────────────────────────────────────────────────────────────────────────────
# Generator
# ─────────────────────────────────────────────────────────────────────────────

class BudgetAlternativeGenerator:
    """Proposes cheaper variants of a trip's expensive activities."""

    def __init__(self, threshold: int = _EXPENSIVE_THRESHOLD) -> None:
        self.threshold = threshold

    def suggest(self, itinerary: Itinerary) -> list[SavingsSuggestion]:
        suggestions: list[SavingsSuggestion] = []
        for day_index, day in enumerate(itinerary.days):
            for activity in day.schedule:
                if activity.is_travel or activity.cost <= self.threshold:
                    continue
                alternative = self._alternative_for(activity)
                if alternative is None:
                    continue
                suggestions.append(SavingsSuggestion(
                    day_number=day_index + 1,
                    activity_name=activity.name,
                    activity_cost=activity.cost,
                    alternatives=[alternative],
                ))
        return suggestions

    def potential_savings(self, suggestions: list[SavingsSuggestion]) -> int:
        """Total saved if every best alternative were taken."""
        return sum(s.best_savings for s in suggestions)

    # ── Internals ─────────────────────────────────────────────────────────────

    @staticmethod
    def _alternative_for(activity: Activity) -> Optional[BudgetAlternative]:
        if activity.category in _DINING:
            share, category = 0.5, Category.STREET_FOOD
            name = f"Local eatery near {activity.name}"
            description = (
                f"Instead of eating at {activity.name}, try a neighbourhood eatery "
                f"nearby: lower prices, same local flavour."
            )
        elif activity.category in _SIGHTSEEING:
            share, category = 0.3, Category.ATTRACTION
            name = f"Explore the area around {activity.name}"
            description = (
                f"Skip the paid entry to {activity.name} and explore the surroundings, "
                f"take photos outside and enjoy the free public spaces."
            )
        elif activity.category in _ENTERTAINMENT:
            share, category = 0.4, Category.ENTERTAINMENT
            name = f"Low-cost local alternative to {activity.name}"
            description = (
                f"Rather than spending heavily on {activity.name}, look for local "
                f"entertainment at a more affordable price."
            )
        else:
            return None

        cost = round(activity.cost * share)
        return BudgetAlternative(
            name=name,
            description=description,
            category=category,
            location=activity.location,
            address=activity.address,
            start_time=activity.start_time,
            end_time=activity.end_time,
            estimated_cost=cost,
            savings=activity.cost - cost,
        )
