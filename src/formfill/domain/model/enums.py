"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class FieldType(StrEnum):
    TEXT = "text"
    DATE = "date"
    ADDRESS = "address"
    PHONE = "phone"
    EMAIL = "email"


class FactKey(StrEnum):
    """Canonical fact vocabulary. Unrecognized keys are kept as plain strings."""

    FULL_NAME = "fullName"
    DATE_OF_BIRTH = "dateOfBirth"
    ADDRESS = "address"
    PHONE = "phone"
    EMAIL = "email"


class ExtractionMode(StrEnum):
    """Mode flag understood by the document understanding service."""

    SCHEMA = "analyze"
    FACTS = "extract"


class StepKind(StrEnum):
    FORM_UPLOAD = "form_upload"
    REFERENCE_UPLOAD = "reference_upload"
    REVIEW = "review"
