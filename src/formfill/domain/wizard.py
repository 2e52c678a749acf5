"""Wizard controller gating upload → extraction → review → assembly.

The step sequence is configuration. Upload steps trigger one extraction call each time
they are advanced; the call is awaited before any state changes, and ``is_processing``
rejects overlapping requests while it is pending.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from formfill.domain.errors import (
    ExtractionFailedError,
    StepInProgressError,
    WizardValidationError,
)
from formfill.domain.model import StepKind
from formfill.domain.ports import ExtractionFailure, ExtractionSuccess
from formfill.domain.session import ReviewSession

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence

    from formfill.domain.assembly import AnsweredField
    from formfill.domain.model import Document
    from formfill.domain.ports import DocumentUnderstandingService, ExtractionResult

log = getLogger(__name__)

DEFAULT_MAX_REFERENCES: Final[int] = 5


@dataclass(frozen=True, slots=True, kw_only=True)
class WizardStep:
    name: str
    kind: StepKind
    min_documents: int = 0
    max_documents: int | None = None

    @property
    def accepts_documents(self) -> bool:
        return self.kind is not StepKind.REVIEW


def default_steps(*, max_references: int = DEFAULT_MAX_REFERENCES) -> tuple[WizardStep, ...]:
    return (
        WizardStep(
            name="Upload Form",
            kind=StepKind.FORM_UPLOAD,
            min_documents=1,
            max_documents=1,
        ),
        WizardStep(
            name="Upload References",
            kind=StepKind.REFERENCE_UPLOAD,
            min_documents=1,
            max_documents=max_references,
        ),
        WizardStep(name="Review", kind=StepKind.REVIEW),
    )


@dataclass(slots=True)
class WizardState:
    step_count: int
    current_step: int = 0
    selections: dict[int, tuple[Document, ...]] = field(
        default_factory=dict["int", "tuple[Document, ...]"]
    )
    committed_sources: dict[int, tuple[str, ...]] = field(
        default_factory=dict["int", "tuple[str, ...]"]
    )
    is_processing: bool = False
    completed: bool = False


class WizardController:
    """Drive one review session through the configured steps."""

    def __init__(
        self,
        *,
        service: DocumentUnderstandingService,
        session: ReviewSession | None = None,
        steps: Sequence[WizardStep] | None = None,
    ) -> None:
        self._steps = tuple(steps) if steps is not None else default_steps()
        if not self._steps:
            raise ValueError("Wizard needs at least one step")
        if self._steps[-1].kind is not StepKind.REVIEW:
            raise ValueError("The final wizard step must be a review step")
        self._service = service
        self.session = session or ReviewSession()
        self.state = WizardState(step_count=len(self._steps))

    @property
    def steps(self) -> tuple[WizardStep, ...]:
        return self._steps

    @property
    def current(self) -> WizardStep:
        return self._steps[self.state.current_step]

    @property
    def is_last_step(self) -> bool:
        return self.state.current_step == len(self._steps) - 1

    def selection(self, index: int | None = None) -> tuple[Document, ...]:
        step_index = self.state.current_step if index is None else index
        return self.state.selections.get(step_index, ())

    def select_documents(self, documents: Iterable[Document]) -> tuple[Document, ...]:
        """Replace the current step's document selection."""

        self._ensure_idle()
        step = self.current
        selected = tuple(documents)
        if not step.accepts_documents:
            raise WizardValidationError(f"{step.name} does not accept documents")
        if step.max_documents is not None and len(selected) > step.max_documents:
            plural = "s" if step.max_documents != 1 else ""
            raise WizardValidationError(
                f"You can only upload {step.max_documents} file{plural} for {step.name}"
            )
        unsupported = [document.name for document in selected if not document.is_accepted_type]
        if unsupported:
            raise WizardValidationError(f"Unsupported file type: {', '.join(unsupported)}")
        names = [document.name for document in selected]
        if len(set(names)) != len(names):
            raise WizardValidationError("Selected documents must have distinct names")

        self.state.selections[self.state.current_step] = selected
        return selected

    async def advance(self) -> int:
        """Validate the current step, run its extraction and move forward.

        Returns the new step index. Raises ``WizardValidationError`` or
        ``StepInProgressError`` without changing state, and ``ExtractionFailedError``
        when the service fails (the step stays put and may be retried).
        """

        self._ensure_idle()
        index = self.state.current_step
        step = self._steps[index]
        documents = self.selection(index)
        if len(documents) < step.min_documents:
            plural = "s" if step.min_documents != 1 else ""
            raise WizardValidationError(
                f"Please upload at least {step.min_documents} document{plural} for {step.name}"
            )

        if step.accepts_documents and documents:
            self.state.is_processing = True
            try:
                outcome = await self._extract(index, step, documents)
            finally:
                self.state.is_processing = False

            if self.state.current_step != index:
                log.info("Discarding %s extraction result; wizard left the step", step.name)
                return self.state.current_step
            if isinstance(outcome, ExtractionFailure):
                log.warning("%s extraction failed: %s", step.name, outcome.reason)
                raise ExtractionFailedError(outcome.reason, step=step.name)
            outcome.payload()

        self.state.current_step = min(index + 1, len(self._steps) - 1)
        log.debug("Wizard at step %s (%s)", self.state.current_step, self.current.name)
        return self.state.current_step

    def retreat(self) -> int:
        self.state.current_step = max(0, self.state.current_step - 1)
        return self.state.current_step

    def finish(self) -> tuple[AnsweredField, ...]:
        """Assemble the answers; only allowed from the final step."""

        self._ensure_idle()
        if not self.is_last_step:
            raise WizardValidationError("Finish the remaining steps before generating the form")
        answers = self.session.assemble()
        self.state.completed = True
        log.info("Assembled %s answers", len(answers))
        return answers

    def _ensure_idle(self) -> None:
        if self.state.is_processing:
            raise StepInProgressError(f"{self.current.name} is still processing")

    async def _extract(
        self,
        index: int,
        step: WizardStep,
        documents: tuple[Document, ...],
    ) -> ExtractionResult[Callable[[], None]]:
        """Call the service and return a commit action; nothing is committed here."""

        log.info("Running %s extraction for %s document(s)", step.kind, len(documents))
        if step.kind is StepKind.FORM_UPLOAD:
            fields_result = await self._service.extract_fields(documents)
            if isinstance(fields_result, ExtractionFailure):
                return fields_result
            fields = fields_result.payload
            return ExtractionSuccess(lambda: self.session.load_fields(fields))

        # Every call settles before any result is read.
        results = await asyncio.gather(
            *(self._service.extract_facts((document,)) for document in documents),
            return_exceptions=True,
        )
        facts_by_source: dict[str, dict[str, str]] = {}
        for document, result in zip(documents, results, strict=True):
            if isinstance(result, Exception):
                log.warning("Fact extraction for %s raised: %r", document.name, result)
                return ExtractionFailure(f"{document.name}: {result}")
            if isinstance(result, BaseException):
                raise result
            if isinstance(result, ExtractionFailure):
                return ExtractionFailure(f"{document.name}: {result.reason}")
            facts_by_source[document.name] = result.payload
        return ExtractionSuccess(lambda: self._commit_facts(index, facts_by_source))

    def _commit_facts(self, index: int, facts_by_source: dict[str, dict[str, str]]) -> None:
        """Make the step's fact sources match its current selection."""

        facts = self.session.facts
        held_elsewhere = {
            source
            for step_index, sources in self.state.committed_sources.items()
            if step_index != index
            for source in sources
        }
        stale = [
            source
            for source in self.state.committed_sources.get(index, ())
            if source not in facts_by_source and source not in held_elsewhere
        ]
        for source in stale:
            facts.drop_source(source)
        for source, values in facts_by_source.items():
            facts.replace_source(values, source=source)
        self.state.committed_sources[index] = tuple(facts_by_source)

        changed = self.session.refresh()
        log.info(
            "Stored facts from %s source(s), dropped %s; %s record(s) re-seeded",
            len(facts_by_source),
            len(stale),
            changed,
        )
