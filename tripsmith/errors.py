"""
errors.py
---------
Exception classes and error kinds for the itinerary pipeline.

Every failure the pipeline can report falls into one ErrorKind.  Conditions
that abort a run are raised as TripsmithError subclasses; conditions the
pipeline recovers from are collected as StageIssue records on the result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ErrorKind(str, Enum):
    INVALID_INPUT           = "invalid-input"
    EXTERNAL_SOURCE_FAILURE = "external-source-failure"
    DATA_NORMALIZATION      = "data-normalization"
    BUDGET_INFEASIBILITY    = "budget-infeasibility"
    PER_DAY_ISOLATION       = "per-day-isolation"


class TripsmithError(Exception):
    """Base exception for all tripsmith errors."""

    kind: ErrorKind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class InvalidInputError(TripsmithError):
    """
    Request failed boundary validation.  Raised before any stage runs.

    ``context["errors"]`` holds the individual field messages.
    """

    kind = ErrorKind.INVALID_INPUT


class ExternalSourceError(TripsmithError):
    """Base exception for draft and weather source failures."""

    kind = ErrorKind.EXTERNAL_SOURCE_FAILURE


class DraftSourceError(ExternalSourceError):
    """The draft source failed or returned something unusable.  Aborts the run."""


class WeatherSourceError(ExternalSourceError):
    """
    The weather source failed.  Never aborts a run: the pipeline degrades to a
    synthesized forecast and reports weather_optimized=False.
    """


@dataclass
class StageIssue:
    """A recovered failure recorded on the pipeline result."""
    kind: ErrorKind
    stage: str
    message: str
    day_index: int | None = None
    context: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "kind":      self.kind.value,
            "stage":     self.stage,
            "message":   self.message,
            "day_index": self.day_index,
            "context":   self.context,
        }
