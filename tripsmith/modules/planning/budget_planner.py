"""
modules/planning/budget_planner.py
------------------------------------
Deterministic budget split and cross-day cost rebalancing.

Split rules (fractions of the total budget):
  1. Default           accommodation 0.30  food 0.25  attractions 0.20
                       transportation 0.15  other 0.10
  2. Trip length       ≤ 2 days: accommodation 0.25, attractions 0.25
                       ≥ 7 days: accommodation 0.35, attractions 0.15
  3. Destination tier  expensive: accommodation +0.05, food +0.05,
                                  attractions −0.05, other −0.05
                       budget:    accommodation −0.05, food −0.05,
                                  attractions +0.05, transportation +0.05
  4. City-level match  accommodation +0.03, transportation −0.02, food −0.01
  5. Renormalize so the fractions sum to 1.0.

Rebalancing scales every activity in a bucket by target / current so that
the bucket total lands exactly on its allocated amount.  Buckets whose
current total is zero are left alone.

Entry points
------------
  allocate()        — BudgetAllocation for a total, trip length and destination.
  rebalance()       — cross-day cost scaling plus per-day and trip summaries.
  cost_breakdown()  — reporting totals per spending category.

All monetary amounts are in VND.
"""

from __future__ import annotations

import logging
import math

from tripsmith.schemas.categories import BudgetBucket, Category, budget_bucket
from tripsmith.schemas.itinerary import (
    Activity,
    BudgetAllocation,
    BudgetSummary,
    CostBreakdown,
    DayBudgetSummary,
    Itinerary,
)
from tripsmith.modules.planning.cost_estimator import country_cost_factor

logger = logging.getLogger(__name__)

WITHIN_BUDGET = "within_budget"
OVER_BUDGET   = "over_budget"

# ── Default split ────────────────────────────────────────────────────────────
_DEFAULT_SPLIT: dict[BudgetBucket, float] = {
    BudgetBucket.ACCOMMODATION:  0.30,
    BudgetBucket.FOOD:           0.25,
    BudgetBucket.ATTRACTIONS:    0.20,
    BudgetBucket.TRANSPORTATION: 0.15,
    BudgetBucket.OTHER:          0.10,
}

_SHORT_TRIP_DAYS = 2
_LONG_TRIP_DAYS  = 7

_TIER_SHIFT: dict[str, dict[BudgetBucket, float]] = {
    "expensive": {
        BudgetBucket.ACCOMMODATION: +0.05,
        BudgetBucket.FOOD:          +0.05,
        BudgetBucket.ATTRACTIONS:   -0.05,
        BudgetBucket.OTHER:         -0.05,
    },
    "budget": {
        BudgetBucket.ACCOMMODATION:  -0.05,
        BudgetBucket.FOOD:           -0.05,
        BudgetBucket.ATTRACTIONS:    +0.05,
        BudgetBucket.TRANSPORTATION: +0.05,
    },
}

_CITY_SHIFT: dict[BudgetBucket, float] = {
    BudgetBucket.ACCOMMODATION:  +0.03,
    BudgetBucket.TRANSPORTATION: -0.02,
    BudgetBucket.FOOD:           -0.01,
}

# Reference unit prices (VND) before the destination factor.
_REFERENCE_PRICES: dict[str, int] = {
    "budget_meal":       50_000,
    "mid_range_meal":   150_000,
    "fine_dining":      500_000,
    "local_transport":   30_000,
    "taxi_per_km":       15_000,
    "budget_hotel":     300_000,
    "mid_range_hotel":  800_000,
    "luxury_hotel":   2_000_000,
    "museum_entrance":  100_000,
    "tour_guide":       500_000,
}

# Reporting-only split used by cost_breakdown()
_ENTERTAINMENT = frozenset({
    Category.ENTERTAINMENT, Category.NIGHTLIFE, Category.THEATER, Category.CINEMA,
})


def _scale_to_target(activities: list[Activity], target: int) -> None:
    """
    Scale costs in place so they sum to exactly *target*.

    Uses largest-remainder rounding: floor every scaled cost, then hand the
    leftover units to the largest fractional parts (earliest first on ties).
    """
    current = sum(a.cost for a in activities)
    if current <= 0:
        return
    ratio = target / current
    scaled = [a.cost * ratio for a in activities]
    floors = [math.floor(s) for s in scaled]
    leftover = target - sum(floors)
    order = sorted(range(len(activities)), key=lambda i: (-(scaled[i] - floors[i]), i))
    for i in order[:max(0, leftover)]:
        floors[i] += 1
    for activity, cost in zip(activities, floors):
        activity.cost = cost
        activity.budget_optimized = True


def _split_amount(total: int, fractions: dict[BudgetBucket, float]) -> dict[BudgetBucket, int]:
    """Largest-remainder split of *total* so the amounts add up to it exactly."""
    scaled = {b: total * f for b, f in fractions.items()}
    amounts = {b: math.floor(s) for b, s in scaled.items()}
    leftover = total - sum(amounts.values())
    order = sorted(scaled, key=lambda b: -(scaled[b] - amounts[b]))
    for bucket in order[:max(0, leftover)]:
        amounts[bucket] += 1
    return amounts


class BudgetAllocator:
    """
    Category budget split and cost rebalancing.

    Usage
    -----
        allocation = allocator.allocate(total, days, destination)
        itinerary  = allocator.rebalance(itinerary, allocation)
    """

    # =========================================================================
    # PUBLIC: allocate
    # =========================================================================

    def allocate(self, total_budget: float, days: int, destination: str) -> BudgetAllocation:
        """
        Split *total_budget* into category targets.

        Parameters
        ----------
        total_budget
            Whole-trip budget (VND).  Must be positive.
        days
            Trip length.  Must be ≥ 1; anything else is a caller bug.
        destination
            Free-text destination used for the tier lookup.
        """
        if days < 1:
            raise ValueError(f"days must be >= 1, got {days}")
        if total_budget <= 0:
            raise ValueError(f"total_budget must be > 0, got {total_budget}")

        tier = country_cost_factor(destination)
        split = dict(_DEFAULT_SPLIT)

        if days <= _SHORT_TRIP_DAYS:
            split[BudgetBucket.ACCOMMODATION] = 0.25
            split[BudgetBucket.ATTRACTIONS] = 0.25
        elif days >= _LONG_TRIP_DAYS:
            split[BudgetBucket.ACCOMMODATION] = 0.35
            split[BudgetBucket.ATTRACTIONS] = 0.15

        for bucket, delta in _TIER_SHIFT.get(tier.tier, {}).items():
            split[bucket] += delta
        if tier.is_city:
            for bucket, delta in _CITY_SHIFT.items():
                split[bucket] += delta

        total_fraction = sum(split.values())
        fractions = {b: f / total_fraction for b, f in split.items()}

        amounts = _split_amount(round(total_budget), fractions)
        daily = {b: round(a / days) for b, a in amounts.items()}

        allocation = BudgetAllocation(
            total_budget=round(total_budget),
            days=days,
            fractions=fractions,
            amounts=amounts,
            daily=daily,
            country_factor=tier.factor,
            country_tier=tier.tier,
            is_city=tier.is_city,
            cost_estimates={k: round(v * tier.factor) for k, v in _REFERENCE_PRICES.items()},
        )
        logger.info(
            "budget split for %r (%s%s): %s",
            destination, tier.tier, ", city" if tier.is_city else "",
            {b.value: round(f, 3) for b, f in fractions.items()},
        )
        return allocation

    # =========================================================================
    # PUBLIC: rebalance
    # =========================================================================

    def rebalance(self, itinerary: Itinerary, allocation: BudgetAllocation) -> Itinerary:
        """
        Return a copy of *itinerary* whose per-bucket cost totals equal the
        allocation's targets, with per-day and trip-level budget summaries.

        Days are a barrier here: buckets are summed across the whole trip.
        """
        result = itinerary.copy()

        buckets: dict[BudgetBucket, list[Activity]] = {b: [] for b in BudgetBucket}
        for day in result.days:
            for activity in day.schedule:
                buckets[budget_bucket(activity.category)].append(activity)

        for bucket, activities in buckets.items():
            current = sum(a.cost for a in activities)
            if current == 0:
                continue
            target = allocation.amounts.get(bucket, 0)
            _scale_to_target(activities, target)
            logger.debug("rebalanced %s: %d → %d VND", bucket.value, current, target)

        days = max(1, len(result.days))
        daily_budget = round(allocation.total_budget / days)
        tips = self.budget_tips(allocation)
        for index, day in enumerate(result.days):
            spent = day.total_cost
            day.budget_summary = DayBudgetSummary(
                day_number=index + 1,
                daily_budget=daily_budget,
                estimated_cost=spent,
                remaining=daily_budget - spent,
                status=WITHIN_BUDGET if spent <= daily_budget else OVER_BUDGET,
            )
            day.budget_tips = dict(tips)

        total_cost = sum(d.budget_summary.estimated_cost for d in result.days)
        result.budget_summary = BudgetSummary(
            total_budget=allocation.total_budget,
            estimated_total_cost=total_cost,
            remaining_budget=allocation.total_budget - total_cost,
            status=WITHIN_BUDGET if total_cost <= allocation.total_budget else OVER_BUDGET,
            allocation=allocation,
        )
        return result

    @staticmethod
    def budget_tips(allocation: BudgetAllocation) -> dict:
        """Reference prices attached to every day's plan."""
        est = allocation.cost_estimates
        return {
            "recommended_accommodation":  est.get("mid_range_hotel", 0),
            "recommended_food_per_meal":  est.get("mid_range_meal", 0),
            "recommended_transportation": est.get("local_transport", 0),
            "country_factor":             allocation.country_factor,
            "country_type":               allocation.country_tier,
        }

    # =========================================================================
    # PUBLIC: cost_breakdown
    # =========================================================================

    @staticmethod
    def cost_breakdown(itinerary: Itinerary) -> CostBreakdown:
        """Trip cost totals per reporting category."""
        report = CostBreakdown(number_of_people=itinerary.number_of_people)
        for day in itinerary.days:
            for activity in day.schedule:
                if activity.cost <= 0:
                    continue
                report.total += activity.cost
                if activity.category in _ENTERTAINMENT:
                    report.entertainment += activity.cost
                    continue
                bucket = budget_bucket(activity.category)
                if bucket is BudgetBucket.ACCOMMODATION:
                    report.accommodation += activity.cost
                elif bucket is BudgetBucket.FOOD:
                    report.food += activity.cost
                elif bucket is BudgetBucket.TRANSPORTATION:
                    report.transportation += activity.cost
                elif bucket is BudgetBucket.ATTRACTIONS:
                    report.attractions += activity.cost
                else:
                    report.other += activity.cost
        return report
