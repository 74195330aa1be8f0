"""
tripsmith
---------
Travel itinerary optimization: route ordering, time repair, cost estimation,
budget allocation and weather adaptation over an externally drafted plan.

    from tripsmith import run_pipeline
    result = run_pipeline({"destination": "Hanoi", "budget": 5_000_000, "days": 2},
                          draft_source=my_draft_source)
"""

from tripsmith.errors import (
    DraftSourceError,
    ErrorKind,
    InvalidInputError,
    StageIssue,
    TripsmithError,
    WeatherSourceError,
)
from tripsmith.pipeline import PipelineResult, run_pipeline

__version__ = "0.1.0"

__all__ = [
    "DraftSourceError",
    "ErrorKind",
    "InvalidInputError",
    "PipelineResult",
    "StageIssue",
    "TripsmithError",
    "WeatherSourceError",
    "run_pipeline",
]
