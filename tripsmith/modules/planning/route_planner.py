"""
modules/planning/route_planner.py
-----------------------------------
Per-day stop ordering by 2-opt local search.

Objective: total great-circle length of the open path through the day's
stops in order (no return to the first stop).

Search:
  - Scan (i, j) row-major with 0 <= i <= n-3 and i+2 <= j <= n-1.
  - Candidate = current order with the slice [i+1 .. j] reversed.
  - Accept the first strictly shorter candidate, then restart the scan.
  - Stop when a full scan finds no improvement (local optimum).

Days with two stops or fewer are returned unchanged.  The optimizer looks at
geometry only: scheduled times are ignored here and repaired afterwards by
the TemporalScheduler.

optimize_day() hands the day's start times, in ascending order, to the stops
in route order (each stop keeps its own duration), so the scheduler's sort
by start time preserves the route.  This can put a lunch stop at 10:00.
"""

from __future__ import annotations
import logging

from tripsmith.schemas.itinerary import Activity, DayPlan, Itinerary
from tripsmith.modules.tool_usage.distance_tool import DistanceTool

logger = logging.getLogger(__name__)

# Improvements smaller than this are float noise, not shorter routes.
_MIN_GAIN_KM: float = 1e-9


class RouteOptimizer:
    """2-opt reordering of a day's activities by location."""

    def __init__(self, distance_tool: DistanceTool | None = None):
        self.distance_tool = distance_tool or DistanceTool()

    # ── Public API ────────────────────────────────────────────────────────────

    def optimize(self, activities: list[Activity]) -> list[Activity]:
        """
        Return a reordered copy of *activities* whose path length is no
        longer than the input's.  The input list and its items are untouched.
        """
        route = [a.copy() for a in activities]
        n = len(route)
        if n <= 2:
            return route

        dist = self.distance_tool.distance
        passes = 0
        improved = True
        while improved:
            improved = False
            passes += 1
            for i in range(n - 2):
                for j in range(i + 2, n):
                    a, b = route[i].location, route[i + 1].location
                    c = route[j].location
                    gain = dist(a, b) - dist(a, c)
                    if j + 1 < n:
                        d = route[j + 1].location
                        gain += dist(c, d) - dist(b, d)
                    if gain > _MIN_GAIN_KM:
                        route[i + 1:j + 1] = reversed(route[i + 1:j + 1])
                        improved = True
                        break
                if improved:
                    break

        logger.debug("2-opt converged after %d pass(es) over %d stops", passes, n)
        return route

    def optimize_day(self, day: DayPlan) -> DayPlan:
        """Reorder one day's stops.  Existing travel segments are discarded."""
        stops = [a for a in day.schedule if not a.is_travel]
        route = self.optimize(stops)
        starts = sorted(a.start_minutes for a in stops)
        for activity, start in zip(route, starts):
            activity.set_window(start, start + activity.duration_minutes)

        result = day.copy()
        result.schedule = route
        return result

    def optimize_itinerary(self, itinerary: Itinerary) -> Itinerary:
        result = itinerary.copy()
        result.days = [self.optimize_day(day) for day in itinerary.days]
        return result

    def route_length(self, activities: list[Activity]) -> float:
        """Open-path length in km through *activities* in the given order."""
        return self.distance_tool.path_length(a.location for a in activities)
