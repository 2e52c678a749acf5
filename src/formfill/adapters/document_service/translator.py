"""Translate service payloads into fields and facts.

Parsing is tolerant: payloads that cannot be interpreted degrade to an empty result
(logged at WARNING) so the wizard can still advance and the user can answer manually.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from logging import getLogger
from typing import Final, cast

from pydantic import ValidationError

from formfill.domain.errors import MalformedResponseError
from formfill.domain.facts import canonical_fact_key
from formfill.domain.model import Field

from .schema import FieldPayload, with_default_id

log = getLogger(__name__)

RAW_TEXT_KEY: Final[str] = "rawText"
_JSON_FRAGMENT = re.compile(r"\{[\s\S]*\}|\[[\s\S]*\]")


def recover_json(text: str) -> object | None:
    """Return the first JSON object or array embedded in ``text``, if any."""

    found = _JSON_FRAGMENT.search(text)
    if found is None:
        return None
    try:
        return json.loads(found.group(0))
    except json.JSONDecodeError:
        return None


def parse_fields(data: object) -> tuple[Field, ...]:
    try:
        items = _field_items(data)
    except MalformedResponseError as exc:
        log.warning("Treating schema response as empty: %s", exc)
        return ()

    fields: list[Field] = []
    seen: set[str] = set()
    for position, item in enumerate(items, start=1):
        try:
            payload = FieldPayload.model_validate(with_default_id(item, position))
        except ValidationError:
            log.warning("Skipping unreadable field payload at position %s", position)
            continue
        if payload.id in seen:
            log.warning("Dropping duplicate field id %s", payload.id)
            continue
        seen.add(payload.id)
        fields.append(Field(id=payload.id, text=payload.text, type=payload.type))
    return tuple(fields)


def parse_facts(data: object) -> dict[str, str]:
    try:
        mapping = _fact_mapping(data)
    except MalformedResponseError as exc:
        log.warning("Treating facts response as empty: %s", exc)
        return {}

    facts: dict[str, str] = {}
    for raw_key, raw_value in mapping.items():
        value = _fact_value(raw_value)
        if value is None:
            log.debug("Ignoring non-scalar fact %s", raw_key)
            continue
        facts[canonical_fact_key(str(raw_key))] = value
    return facts


def _field_items(data: object) -> list[object]:
    if data is None:
        return []
    if isinstance(data, str):
        recovered = recover_json(data)
        if recovered is None:
            raise MalformedResponseError("schema response contains no JSON")
        data = recovered
    if isinstance(data, Mapping):
        nested = cast(Mapping[str, object], data).get("fields")
        if nested is None:
            raise MalformedResponseError("schema response is an object without 'fields'")
        data = nested
    if not isinstance(data, list):
        raise MalformedResponseError(f"schema response is {type(data).__name__}, not a list")
    return cast(list[object], data)


def _fact_mapping(data: object) -> Mapping[object, object]:
    if data is None:
        return {}
    if isinstance(data, str):
        recovered = recover_json(data)
        if recovered is None:
            return {RAW_TEXT_KEY: data} if data.strip() else {}
        data = recovered
    if not isinstance(data, Mapping):
        raise MalformedResponseError(f"facts response is {type(data).__name__}, not an object")
    return cast(Mapping[object, object], data)


def _fact_value(value: object) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, int | float):
        return str(value)
    return None
