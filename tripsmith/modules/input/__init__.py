"""modules/input — draft ingestion and normalization."""

from tripsmith.modules.input.draft_normalizer import DraftNormalizer

__all__ = ["DraftNormalizer"]
