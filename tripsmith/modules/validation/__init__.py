"""
modules/validation package — boundary checks before any stage runs.
"""
from tripsmith.modules.validation.ingestion_validator import (
    ValidationResult,
    parse_hhmm,
    parse_request,
    validate_activity_record,
    validate_request,
)

__all__ = [
    "ValidationResult",
    "parse_hhmm",
    "parse_request",
    "validate_activity_record",
    "validate_request",
]
