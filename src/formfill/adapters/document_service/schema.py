"""Pydantic models describing document understanding service payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from formfill.domain.model import FieldType


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class ServiceBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ServiceEnvelope(ServiceBaseModel):
    """``{success, data, error}`` wrapper returned by the service."""

    success: bool = True
    data: object = None
    error: str | None = None

    _normalize_error = field_validator("error", mode="before")(_blank_to_none)


class FieldPayload(ServiceBaseModel):
    id: str
    text: str = Field(validation_alias=AliasChoices("text", "label", "question"))
    type: FieldType | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return _blank_to_none(value)

    @field_validator("text", mode="before")
    @classmethod
    def _strip_text(cls, value: object) -> object:
        return _blank_to_none(value)

    @field_validator("type", mode="before")
    @classmethod
    def _lenient_type(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return normalized if normalized in {member.value for member in FieldType} else None
        return value


def with_default_id(item: object, position: int) -> object:
    """Give id-less field payloads their 1-based position as id."""

    if isinstance(item, Mapping):
        mapping = cast(Mapping[str, object], item)
        if mapping.get("id") in (None, ""):
            return {**mapping, "id": str(position)}
    return item
