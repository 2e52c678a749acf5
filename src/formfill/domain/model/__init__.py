"""Public domain model surface."""

from __future__ import annotations

from formfill.domain.model.enums import ExtractionMode, FactKey, FieldType, StepKind
from formfill.domain.model.form import ACCEPTED_MEDIA_TYPES, Document, Field

__all__ = [
    "ACCEPTED_MEDIA_TYPES",
    "Document",
    "ExtractionMode",
    "FactKey",
    "Field",
    "FieldType",
    "StepKind",
]
