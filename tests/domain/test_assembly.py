from __future__ import annotations

import pytest

from formfill.domain.assembly import assemble, format_summary
from formfill.domain.errors import MissingAnswersError
from formfill.domain.model import Field
from formfill.domain.reconciliation import enter_manual, new_record, seed_from_match


def _fields() -> tuple[Field, ...]:
    return (
        Field(id="1", text="What is your full name?"),
        Field(id="2", text="Date of birth?"),
    )


def test_assemble_preserves_field_order() -> None:
    fields = _fields()
    records = {field.id: new_record(field.id) for field in fields}
    enter_manual(records["2"], "1990-01-01")
    seed_from_match(records["1"], ("John Smith",))

    answers = assemble(fields, records)

    assert [(item.field.id, item.answer) for item in answers] == [
        ("1", "John Smith"),
        ("2", "1990-01-01"),
    ]
    assert len(answers) == len(fields)


def test_assemble_names_unresolved_fields() -> None:
    fields = _fields()
    records = {field.id: new_record(field.id) for field in fields}
    seed_from_match(records["1"], ("John Smith",))

    with pytest.raises(MissingAnswersError) as exc:
        assemble(fields, records)

    assert exc.value.field_ids == ("2",)


def test_assemble_reports_conflicts_and_missing_records() -> None:
    fields = (*_fields(), Field(id="3", text="Address"))
    records = {field.id: new_record(field.id) for field in fields[:2]}
    seed_from_match(records["1"], ("John Smith", "John A. Smith"))
    enter_manual(records["2"], "1990-01-01")

    with pytest.raises(MissingAnswersError) as exc:
        assemble(fields, records)

    assert exc.value.field_ids == ("1", "3")


def test_assemble_empty_form_returns_empty_tuple() -> None:
    assert assemble((), {}) == ()


def test_format_summary_lists_question_and_answer() -> None:
    fields = _fields()
    records = {field.id: new_record(field.id) for field in fields}
    enter_manual(records["1"], "John Smith")
    enter_manual(records["2"], "1990-01-01")

    summary = format_summary(assemble(fields, records))

    assert summary == "What is your full name?: John Smith\nDate of birth?: 1990-01-01"
