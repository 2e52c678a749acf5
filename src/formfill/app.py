"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import mimetypes
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from formfill.adapters.document_service import DocumentServiceClient
from formfill.config.wizard import get_wizard_config
from formfill.domain.errors import MissingAnswersError
from formfill.domain.model import Document, StepKind
from formfill.domain.wizard import WizardController

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from pathlib import Path

    from formfill.domain.assembly import AnsweredField
    from formfill.domain.model import Field
    from formfill.domain.ports import DocumentUnderstandingService
    from formfill.domain.session import ReviewItem
    from formfill.domain.wizard import WizardStep

log = getLogger(__name__)


@dataclass(slots=True)
class FillFormResult:
    """Outcome of a non-interactive fill run."""

    review: tuple[ReviewItem, ...]
    answers: tuple[AnsweredField, ...] | None = None
    missing: tuple[str, ...] = ()

    @property
    def complete(self) -> bool:
        return self.answers is not None


def load_document(path: Path) -> Document:
    media_type, _ = mimetypes.guess_type(path.name)
    return Document(
        name=path.name,
        content=path.read_bytes(),
        media_type=media_type or "application/octet-stream",
    )


def build_wizard(
    *,
    service: DocumentUnderstandingService | None = None,
    steps: Sequence[WizardStep] | None = None,
) -> WizardController:
    effective_steps = steps if steps is not None else get_wizard_config().steps
    return WizardController(service=service or DocumentServiceClient(), steps=effective_steps)


def extract_form_fields(
    form: Document,
    *,
    service: DocumentUnderstandingService | None = None,
) -> tuple[Field, ...]:
    """Run schema extraction only and return the form's fields."""

    return asyncio.run(_extract_form_fields_async(form, service=service))


def fill_form(
    *,
    form: Document,
    references: Sequence[Document],
    selections: Mapping[str, str] | None = None,
    answers: Mapping[str, str] | None = None,
    service: DocumentUnderstandingService | None = None,
    steps: Sequence[WizardStep] | None = None,
) -> FillFormResult:
    """Drive the wizard end to end, apply user decisions and assemble the form.

    ``selections`` pick one of the proposed candidates per field id; ``answers`` are
    manual entries and win over selections for the same field.
    """

    wizard = build_wizard(service=service, steps=steps)
    return asyncio.run(
        _fill_form_async(
            wizard,
            form=form,
            references=references,
            selections=selections or {},
            answers=answers or {},
        )
    )


async def _extract_form_fields_async(
    form: Document,
    *,
    service: DocumentUnderstandingService | None,
) -> tuple[Field, ...]:
    effective_service = service or DocumentServiceClient()
    wizard = WizardController(service=effective_service)
    wizard.select_documents([form])
    await wizard.advance()
    return wizard.session.fields


async def _fill_form_async(
    wizard: WizardController,
    *,
    form: Document,
    references: Sequence[Document],
    selections: Mapping[str, str],
    answers: Mapping[str, str],
) -> FillFormResult:
    log.info(
        "Starting fill: form=%s, references=%s, steps=%s",
        form.name,
        len(references),
        [step.name for step in wizard.steps],
    )
    while not wizard.is_last_step:
        step = wizard.current
        if step.kind is StepKind.FORM_UPLOAD:
            wizard.select_documents([form])
        elif step.kind is StepKind.REFERENCE_UPLOAD:
            wizard.select_documents(references)
        await wizard.advance()

    session = wizard.session
    for field_id, answer in selections.items():
        session.select_candidate(field_id, answer)
    for field_id, text in answers.items():
        session.enter_manual(field_id, text)

    try:
        assembled = wizard.finish()
    except MissingAnswersError as exc:
        log.warning("Form incomplete; unresolved fields: %s", ", ".join(exc.field_ids))
        return FillFormResult(review=session.review_items(), missing=exc.field_ids)

    return FillFormResult(review=session.review_items(), answers=assembled)
