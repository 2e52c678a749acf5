"""Error taxonomy for the reconciliation core.

Every condition here is local to the current step and recoverable: validation errors
leave state untouched, extraction failures can be retried.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class FormFillError(RuntimeError):
    """Base class for all formfill domain errors."""


class ValidationError(FormFillError):
    """A user action violated a precondition. No state was changed."""


class WizardValidationError(ValidationError):
    """The current wizard step cannot accept the requested action."""


class StepInProgressError(ValidationError):
    """An extraction for the current step is still pending."""


class UnknownFieldError(ValidationError):
    def __init__(self, field_id: str) -> None:
        super().__init__(f"Unknown field: {field_id}")
        self.field_id = field_id


class DuplicateFieldError(ValidationError):
    def __init__(self, field_id: str) -> None:
        super().__init__(f"Duplicate field id: {field_id}")
        self.field_id = field_id


class CandidateNotFoundError(ValidationError):
    def __init__(self, field_id: str, answer: str) -> None:
        super().__init__(f"{answer!r} is not a candidate for field {field_id}")
        self.field_id = field_id
        self.answer = answer


class MissingAnswersError(ValidationError):
    """Assembly was requested while some fields are still unresolved."""

    def __init__(self, field_ids: Iterable[str]) -> None:
        self.field_ids = tuple(field_ids)
        super().__init__(f"Missing answers for fields: {', '.join(self.field_ids)}")


class ExtractionFailedError(FormFillError):
    """The document understanding service failed; the step did not advance."""

    def __init__(self, reason: str, *, step: str) -> None:
        super().__init__(f"Extraction failed during {step!r}: {reason}")
        self.reason = reason
        self.step = step


class MalformedResponseError(ValueError):
    """A service payload could not be interpreted as the expected shape."""


class InvariantViolationError(AssertionError):
    """A reconciliation record reached a state outside the three valid shapes."""
