"""Domain port definitions for adapters."""

from __future__ import annotations

from .extraction import (
    DocumentUnderstandingService,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
)

__all__ = [
    "DocumentUnderstandingService",
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSuccess",
]
