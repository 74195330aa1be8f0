"""
pipeline.py
-----------
End-to-end itinerary pipeline.

Stages, in order:
  1. Request validation      TripRequest (pydantic), InvalidInputError on failure
  2. Draft                   draft_source(request) → raw day plans
  3. Normalization           DraftNormalizer → Itinerary with exactly request.days days
  4. Route + schedule        per day: RouteOptimizer then TemporalScheduler
  5. Cost estimation         CostEstimator over the whole itinerary
  6. Budget                  BudgetAllocator.allocate + rebalance (cross-day barrier)
  7. Weather                 weather_source → WeatherAdapter (needs start_date)
  8. Output                  cost breakdown + GeoJSON

Failure policy:
  - Invalid request or failed draft source: raised, nothing else runs.
  - A day failing in stage 4 keeps its pre-stage copy; the run continues.
  - A failing weather source degrades to annotate-only over a synthesized
    forecast and reports weather_optimized=False.
  - Over budget is reported (status + issue + savings suggestions), never raised.

Every stage is timed into the StructuredLogger under one session id per run.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional

from tripsmith import config
from tripsmith.errors import (
    DraftSourceError,
    ErrorKind,
    StageIssue,
    TripsmithError,
)
from tripsmith.schemas.itinerary import (
    BudgetAllocation,
    Coordinate,
    CostBreakdown,
    DayPlan,
    Itinerary,
    WeatherDay,
)
from tripsmith.schemas.requests import TripRequest
from tripsmith.modules.input.draft_normalizer import DraftNormalizer
from tripsmith.modules.validation.ingestion_validator import parse_request
from tripsmith.modules.planning.route_planner import RouteOptimizer
from tripsmith.modules.planning.scheduler import TemporalScheduler
from tripsmith.modules.planning.cost_estimator import CostEstimator
from tripsmith.modules.planning.budget_planner import OVER_BUDGET, BudgetAllocator
from tripsmith.modules.reoptimization.weather_adapter import Place, WeatherAdapter
from tripsmith.modules.reoptimization.alternative_generator import (
    BudgetAlternativeGenerator,
    SavingsSuggestion,
)
from tripsmith.modules.tool_usage.weather_tool import FallbackWeatherProvider, WeatherTool
from tripsmith.modules.observability.logger import StructuredLogger
from tripsmith.modules.output.geojson import itinerary_to_geojson
from tripsmith.modules.output.serializer import itinerary_to_dict

logger = logging.getLogger(__name__)

DraftSource   = Callable[[TripRequest], Any]
WeatherSource = Callable[[Coordinate, Any, Any], list[WeatherDay]]


@dataclass
class PipelineResult:
    itinerary: Itinerary
    allocation: BudgetAllocation
    cost_breakdown: CostBreakdown
    weather_optimized: bool = False
    budget_optimized: bool = False
    issues: list[StageIssue] = field(default_factory=list)
    savings_suggestions: list[SavingsSuggestion] = field(default_factory=list)
    geojson: dict = field(default_factory=dict)
    session_id: str = ""

    @property
    def over_budget(self) -> bool:
        summary = self.itinerary.budget_summary
        return summary is not None and summary.status == OVER_BUDGET

    def to_dict(self) -> dict:
        return {
            "itinerary":           itinerary_to_dict(self.itinerary),
            "allocation":          self.allocation.to_dict(),
            "cost_breakdown":      self.cost_breakdown.to_dict(),
            "weather_optimized":   self.weather_optimized,
            "budget_optimized":    self.budget_optimized,
            "issues":              [i.to_dict() for i in self.issues],
            "savings_suggestions": [s.to_dict() for s in self.savings_suggestions],
            "geojson":             self.geojson,
        }


def run_pipeline(
    request: TripRequest | dict,
    draft_source: DraftSource,
    weather_source: Optional[WeatherSource] = None,
    places: Optional[Iterable[Place]] = None,
    event_logger: Optional[StructuredLogger] = None,
    weather_provider: Optional[FallbackWeatherProvider] = None,
) -> PipelineResult:
    """
    Run every stage for *request* and return the finished itinerary.

    Parameters
    ----------
    request
        TripRequest, or a raw dict validated into one.
    draft_source
        ``draft_source(request) -> list[dict]`` of raw day plans.
    weather_source
        ``weather_source(location, start, end) -> list[WeatherDay]``.
        Defaults to WeatherTool().
    places
        Substitute pool for adverse-weather days; defaults to the
        itinerary's own activities.
    event_logger
        StructuredLogger receiving PERFORMANCE and issue records.
    weather_provider
        Fallback for forecast days nothing can be carried forward to.
    """
    request = parse_request(request)
    event_logger = event_logger or StructuredLogger()
    session_id = f"run_{uuid.uuid4().hex[:8]}"
    issues: list[StageIssue] = []

    event_logger.log(session_id, "PIPELINE_START", {
        "destination": request.destination,
        "days":        request.days,
        "budget":      request.budget,
        "people":      request.number_of_people,
    })

    try:
        # ── Draft + normalization ────────────────────────────────────────────
        with event_logger.timed(session_id, "draft"):
            raw_days = _call_draft_source(draft_source, request)

        with event_logger.timed(session_id, "normalize") as perf:
            itinerary, normalize_issues = DraftNormalizer().normalize(
                raw_days,
                days=request.days,
                destination=request.destination,
                number_of_people=request.number_of_people,
                start_date=request.start_date,
            )
            issues.extend(normalize_issues)
            perf["issues"] = len(normalize_issues)

        # ── Route + schedule, isolated per day ───────────────────────────────
        with event_logger.timed(session_id, "route_schedule") as perf:
            itinerary, day_issues = _route_and_schedule(itinerary, request.start_time)
            issues.extend(day_issues)
            perf["failed_days"] = len(day_issues)

        # ── Costs + budget ───────────────────────────────────────────────────
        with event_logger.timed(session_id, "cost"):
            estimator = CostEstimator()
            context = estimator.build_context(
                request.destination, request.start_date, request.number_of_people,
            )
            itinerary = estimator.estimate_itinerary(itinerary, context)

        with event_logger.timed(session_id, "budget") as perf:
            allocator = BudgetAllocator()
            allocation = allocator.allocate(request.budget, request.days, request.destination)
            itinerary = allocator.rebalance(itinerary, allocation)
            perf["status"] = itinerary.budget_summary.status

        savings: list[SavingsSuggestion] = []
        over_days = [
            d.budget_summary.day_number for d in itinerary.days
            if d.budget_summary and d.budget_summary.status == OVER_BUDGET
        ]
        if itinerary.budget_summary.status == OVER_BUDGET or over_days:
            summary = itinerary.budget_summary
            issues.append(StageIssue(
                kind=ErrorKind.BUDGET_INFEASIBILITY,
                stage="budget",
                message=(
                    f"estimated cost {summary.estimated_total_cost} {config.CURRENCY_UNIT} against "
                    f"budget {summary.total_budget} {config.CURRENCY_UNIT}; over on day(s) {over_days}"
                ),
                context={"over_budget_days": over_days, "status": summary.status},
            ))
            savings = BudgetAlternativeGenerator().suggest(itinerary)

        # ── Weather ──────────────────────────────────────────────────────────
        weather_optimized = False
        if request.start_date is None:
            logger.info("no start date given; skipping weather adaptation")
        else:
            with event_logger.timed(session_id, "weather") as perf:
                itinerary, weather_optimized, weather_issues = _apply_weather(
                    itinerary, request, weather_source or WeatherTool(), places, weather_provider,
                )
                issues.extend(weather_issues)
                perf["weather_optimized"] = weather_optimized

        # ── Output ───────────────────────────────────────────────────────────
        with event_logger.timed(session_id, "output"):
            breakdown = BudgetAllocator.cost_breakdown(itinerary)
            geojson = itinerary_to_geojson(itinerary)

        for issue in issues:
            event_logger.log(session_id, "STAGE_ISSUE", issue.to_dict())
        event_logger.log(session_id, "PIPELINE_END", {
            "total_cost":        itinerary.total_cost,
            "issues":            len(issues),
            "weather_optimized": weather_optimized,
        })
    finally:
        event_logger.close(session_id)

    return PipelineResult(
        itinerary=itinerary,
        allocation=allocation,
        cost_breakdown=breakdown,
        weather_optimized=weather_optimized,
        budget_optimized=True,
        issues=issues,
        savings_suggestions=savings,
        geojson=geojson,
        session_id=session_id,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Stage helpers
# ─────────────────────────────────────────────────────────────────────────────

def _call_draft_source(draft_source: DraftSource, request: TripRequest) -> Any:
    try:
        return draft_source(request)
    except TripsmithError:
        raise
    except Exception as exc:
        raise DraftSourceError(f"draft source failed: {exc}", {"destination": request.destination}) from exc


def _route_and_schedule(itinerary: Itinerary, day_start: str) -> tuple[Itinerary, list[StageIssue]]:
    router = RouteOptimizer()
    scheduler = TemporalScheduler()
    issues: list[StageIssue] = []

    result = itinerary.copy()
    for index, day in enumerate(itinerary.days):
        stage = "route"
        try:
            routed: DayPlan = router.optimize_day(day)
            stage = "schedule"
            result.days[index] = scheduler.schedule_day(routed, day_start)
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s stage failed for day %d", stage, index + 1)
            issues.append(StageIssue(
                kind=ErrorKind.PER_DAY_ISOLATION,
                stage=stage,
                message=str(exc),
                day_index=index,
            ))
    return result, issues


def _weather_location(itinerary: Itinerary, request: TripRequest) -> Coordinate:
    if request.start_location_lat is not None and request.start_location_lon is not None:
        return Coordinate.from_raw(request.start_location_lat, request.start_location_lon)
    for day in itinerary.days:
        for activity in day.non_travel:
            if activity.location != Coordinate():
                return activity.location
    return Coordinate()


def _apply_weather(
    itinerary: Itinerary,
    request: TripRequest,
    weather_source: WeatherSource,
    places: Optional[Iterable[Place]],
    provider: Optional[FallbackWeatherProvider],
) -> tuple[Itinerary, bool, list[StageIssue]]:
    """Return (itinerary, weather_optimized, issues)."""
    adapter = WeatherAdapter(provider)
    start = request.start_date
    end = start + timedelta(days=request.days - 1)
    location = _weather_location(itinerary, request)

    try:
        forecast = weather_source(location, start, end)
    except Exception as exc:  # noqa: BLE001
        logger.warning("weather source failed, falling back to synthesized forecast: %s", exc)
        issue = StageIssue(
            kind=ErrorKind.EXTERNAL_SOURCE_FAILURE,
            stage="weather",
            message=str(exc),
            context={"lat": location.lat, "lon": location.lon},
        )
        return adapter.annotate(itinerary, []), False, [issue]

    outcome = adapter.adapt(itinerary, forecast, places)
    logger.info(
        "weather adapted: %d day(s) rebuilt, %d substitution(s)",
        len(outcome.rebuilt_days), outcome.substitutions,
    )
    return outcome.itinerary, True, outcome.issues
