"""Assemble resolved answers into the ordered output handed to document generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from formfill.domain.errors import MissingAnswersError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from formfill.domain.model import Field
    from formfill.domain.reconciliation import ReconciliationRecord


@dataclass(frozen=True, slots=True)
class AnsweredField:
    field: Field
    answer: str


def assemble(
    fields: Iterable[Field],
    records: Mapping[str, ReconciliationRecord],
) -> tuple[AnsweredField, ...]:
    """Pair every field with its resolved answer, preserving field order.

    Raises ``MissingAnswersError`` naming every unresolved field; nothing is
    assembled in that case.
    """

    ordered = tuple(fields)
    missing: list[str] = []
    answered: list[AnsweredField] = []
    for field in ordered:
        record = records.get(field.id)
        if record is None or not record.is_resolved or not record.selected_answer:
            missing.append(field.id)
            continue
        answered.append(AnsweredField(field=field, answer=record.selected_answer))

    if missing:
        raise MissingAnswersError(missing)
    return tuple(answered)


def format_summary(answers: Iterable[AnsweredField]) -> str:
    return "\n".join(f"{item.field.text}: {item.answer}" for item in answers)
