from __future__ import annotations

import asyncio

import pytest

from formfill.domain.errors import (
    ExtractionFailedError,
    MissingAnswersError,
    StepInProgressError,
    WizardValidationError,
)
from formfill.domain.model import StepKind
from formfill.domain.reconciliation import ReconciliationStatus
from formfill.domain.wizard import WizardController, WizardStep, default_steps
from tests.support.documents import FakeDocumentService, make_document, sample_fields


def _service() -> FakeDocumentService:
    return FakeDocumentService(
        fields=sample_fields(),
        facts={
            "passport.pdf": {"fullName": "John Smith", "dob": "1990-01-01"},
            "utility.pdf": {"address": "123 Main St, Anytown, USA"},
        },
    )


def _upload_form(wizard: WizardController) -> None:
    wizard.select_documents([make_document("form.pdf")])
    asyncio.run(wizard.advance())


def test_default_steps_are_form_references_review() -> None:
    wizard = WizardController(service=_service())

    assert [step.kind for step in wizard.steps] == [
        StepKind.FORM_UPLOAD,
        StepKind.REFERENCE_UPLOAD,
        StepKind.REVIEW,
    ]
    assert wizard.state.current_step == 0
    assert wizard.state.step_count == 3
    assert not wizard.state.is_processing


def test_advance_without_documents_is_rejected() -> None:
    wizard = WizardController(service=_service())

    with pytest.raises(WizardValidationError):
        asyncio.run(wizard.advance())

    assert wizard.state.current_step == 0


def test_full_flow_resolves_and_assembles() -> None:
    service = _service()
    wizard = WizardController(service=service)

    _upload_form(wizard)
    assert wizard.state.current_step == 1
    assert [field.id for field in wizard.session.fields] == ["1", "2", "3"]

    wizard.select_documents([make_document("passport.pdf"), make_document("utility.pdf")])
    assert asyncio.run(wizard.advance()) == 2
    assert wizard.is_last_step

    answers = wizard.finish()

    assert [item.answer for item in answers] == [
        "John Smith",
        "1990-01-01",
        "123 Main St, Anytown, USA",
    ]
    assert wizard.state.completed
    assert ("facts", ("passport.pdf",)) in service.calls
    assert ("facts", ("utility.pdf",)) in service.calls


def test_extraction_failure_keeps_step_and_allows_retry() -> None:
    service = _service()
    service.failures = 1
    wizard = WizardController(service=service)
    wizard.select_documents([make_document("form.pdf")])

    with pytest.raises(ExtractionFailedError) as exc:
        asyncio.run(wizard.advance())

    assert exc.value.reason == "service unavailable"
    assert wizard.state.current_step == 0
    assert not wizard.state.is_processing
    assert wizard.session.fields == ()

    assert asyncio.run(wizard.advance()) == 1
    assert len(wizard.session.fields) == 3


def test_partial_reference_failure_commits_nothing() -> None:
    service = _service()
    wizard = WizardController(service=service)
    _upload_form(wizard)
    wizard.select_documents([make_document("passport.pdf"), make_document("utility.pdf")])
    service.failures = 1

    with pytest.raises(ExtractionFailedError):
        asyncio.run(wizard.advance())

    assert wizard.state.current_step == 1
    assert not wizard.session.facts
    assert wizard.session.record_for("1").status is ReconciliationStatus.NO_MATCH


def test_second_advance_is_rejected_while_extraction_pending() -> None:
    async def scenario() -> None:
        service = _service()
        service.release = asyncio.Event()
        wizard = WizardController(service=service)
        wizard.select_documents([make_document("form.pdf")])

        pending = asyncio.create_task(wizard.advance())
        await asyncio.sleep(0)
        assert wizard.state.is_processing

        with pytest.raises(StepInProgressError):
            await wizard.advance()
        with pytest.raises(StepInProgressError):
            wizard.select_documents([make_document("other.pdf")])

        service.release.set()
        assert await pending == 1
        assert not wizard.state.is_processing
        assert len(service.calls) == 1

    asyncio.run(scenario())


def test_retreat_during_extraction_discards_result() -> None:
    async def scenario() -> None:
        service = _service()
        wizard = WizardController(service=service)
        wizard.select_documents([make_document("form.pdf")])
        await wizard.advance()

        service.release = asyncio.Event()
        wizard.select_documents([make_document("passport.pdf")])
        pending = asyncio.create_task(wizard.advance())
        await asyncio.sleep(0)

        assert wizard.retreat() == 0
        service.release.set()

        assert await pending == 0
        assert not wizard.state.is_processing
        assert not wizard.session.facts

    asyncio.run(scenario())


def test_retreat_never_goes_below_zero_or_touches_records() -> None:
    wizard = WizardController(service=_service())
    _upload_form(wizard)
    wizard.session.enter_manual("2", "1990-01-01")

    assert wizard.retreat() == 0
    assert wizard.retreat() == 0
    assert wizard.session.record_for("2").selected_answer == "1990-01-01"
    assert wizard.selection(0) == (make_document("form.pdf"),)


def test_reference_reupload_keeps_user_answers() -> None:
    service = _service()
    wizard = WizardController(service=service)
    _upload_form(wizard)
    wizard.select_documents([make_document("passport.pdf")])
    asyncio.run(wizard.advance())
    wizard.session.enter_manual("1", "Jonathan Smith")

    wizard.retreat()
    service.facts["passport.pdf"] = {"fullName": "J. Smith"}
    asyncio.run(wizard.advance())

    assert wizard.session.record_for("1").selected_answer == "Jonathan Smith"


def test_select_documents_enforces_limits_and_types() -> None:
    wizard = WizardController(service=_service())

    with pytest.raises(WizardValidationError, match="only upload 1 file"):
        wizard.select_documents([make_document("a.pdf"), make_document("b.pdf")])
    with pytest.raises(WizardValidationError, match="Unsupported file type"):
        wizard.select_documents([make_document("form.png", media_type="image/png")])

    assert wizard.selection() == ()


def test_select_documents_rejects_duplicate_names() -> None:
    wizard = WizardController(service=_service())
    _upload_form(wizard)

    with pytest.raises(WizardValidationError, match="distinct names"):
        wizard.select_documents([make_document("a.pdf"), make_document("a.pdf")])


def test_review_step_does_not_accept_documents_and_stays_last() -> None:
    wizard = WizardController(service=_service())
    _upload_form(wizard)
    wizard.select_documents([make_document("passport.pdf")])
    asyncio.run(wizard.advance())

    with pytest.raises(WizardValidationError):
        wizard.select_documents([make_document("extra.pdf")])
    assert asyncio.run(wizard.advance()) == 2


def test_finish_requires_last_step_and_resolved_answers() -> None:
    wizard = WizardController(service=_service())
    with pytest.raises(WizardValidationError):
        wizard.finish()

    _upload_form(wizard)
    wizard.select_documents([make_document("utility.pdf")])
    asyncio.run(wizard.advance())

    with pytest.raises(MissingAnswersError) as exc:
        wizard.finish()
    assert exc.value.field_ids == ("1", "2")
    assert not wizard.state.completed


def test_step_sequence_is_configuration() -> None:
    steps = (
        WizardStep(name="Upload References", kind=StepKind.REFERENCE_UPLOAD, min_documents=1),
        WizardStep(name="Review", kind=StepKind.REVIEW),
    )
    wizard = WizardController(service=_service(), steps=steps)
    wizard.select_documents([make_document("passport.pdf")])

    assert asyncio.run(wizard.advance()) == 1
    assert wizard.session.facts.get("fullName") == "John Smith"


def test_wizard_requires_review_as_final_step() -> None:
    with pytest.raises(ValueError, match="review step"):
        WizardController(service=_service(), steps=default_steps()[:2])


def test_replacing_a_reference_drops_its_facts() -> None:
    service = _service()
    service.facts["wrong.pdf"] = {"fullName": "Jane Doe"}
    service.facts["right.pdf"] = {"fullName": "John Smith"}
    wizard = WizardController(service=service)
    _upload_form(wizard)
    wizard.select_documents([make_document("wrong.pdf")])
    asyncio.run(wizard.advance())
    assert wizard.session.record_for("1").selected_answer == "Jane Doe"

    wizard.retreat()
    wizard.select_documents([make_document("right.pdf")])
    asyncio.run(wizard.advance())

    record = wizard.session.record_for("1")
    assert record.status is ReconciliationStatus.RESOLVED
    assert record.candidates == ("John Smith",)
    assert record.selected_answer == "John Smith"
    assert wizard.session.facts.sources == ("right.pdf",)


def test_reference_step_keeps_facts_of_other_steps() -> None:
    steps = (
        WizardStep(name="Identity", kind=StepKind.REFERENCE_UPLOAD, min_documents=1),
        WizardStep(name="Residence", kind=StepKind.REFERENCE_UPLOAD, min_documents=1),
        WizardStep(name="Review", kind=StepKind.REVIEW),
    )
    service = _service()
    service.facts["licence.pdf"] = {"fullName": "John A. Smith"}
    wizard = WizardController(service=service, steps=steps)
    wizard.select_documents([make_document("passport.pdf")])
    asyncio.run(wizard.advance())
    wizard.select_documents([make_document("utility.pdf")])
    asyncio.run(wizard.advance())

    wizard.retreat()
    wizard.retreat()
    wizard.select_documents([make_document("licence.pdf")])
    asyncio.run(wizard.advance())

    assert wizard.session.facts.sources == ("utility.pdf", "licence.pdf")
    assert wizard.session.facts.get("fullName") == "John A. Smith"
    assert wizard.session.facts.get("address") == "123 Main St, Anytown, USA"


def test_raising_fact_call_waits_for_siblings_and_fails_the_step() -> None:
    async def scenario() -> None:
        service = _service()
        wizard = WizardController(service=service)
        wizard.select_documents([make_document("form.pdf")])
        await wizard.advance()

        service.release = asyncio.Event()
        service.errors["utility.pdf"] = RuntimeError("connection reset")
        wizard.select_documents([make_document("passport.pdf"), make_document("utility.pdf")])
        pending = asyncio.create_task(wizard.advance())
        for _ in range(3):
            await asyncio.sleep(0)

        assert not pending.done()
        service.release.set()

        with pytest.raises(ExtractionFailedError) as exc:
            await pending

        assert exc.value.reason == "utility.pdf: connection reset"
        assert service.completed == ["form.pdf", "passport.pdf"]
        assert wizard.state.current_step == 1
        assert not wizard.state.is_processing
        assert not wizard.session.facts

    asyncio.run(scenario())
