"""Reconciliation record and its status vocabulary."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from formfill.domain.errors import InvariantViolationError

if TYPE_CHECKING:
    from formfill.domain.matching import CandidateSet


class ReconciliationStatus(StrEnum):
    NO_MATCH = "no_match"
    CONFLICT = "conflict"
    RESOLVED = "resolved"


@dataclass(slots=True, kw_only=True)
class ReconciliationRecord:
    """Per-field resolution state.

    ``user_touched`` is set by any explicit user decision and is never cleared; once
    set, automatic seeding leaves the record alone.
    """

    field_id: str
    status: ReconciliationStatus = ReconciliationStatus.NO_MATCH
    candidates: CandidateSet = ()
    selected_answer: str | None = None
    user_touched: bool = False

    @property
    def is_resolved(self) -> bool:
        return self.status is ReconciliationStatus.RESOLVED

    def validate_invariants(self) -> None:
        answered = bool(self.selected_answer)
        match self.status:
            case ReconciliationStatus.RESOLVED:
                ok = answered
            case ReconciliationStatus.CONFLICT:
                ok = len(self.candidates) > 1 and not answered
            case ReconciliationStatus.NO_MATCH:
                ok = not self.candidates and not answered
        if not ok:
            raise InvariantViolationError(
                f"Invalid record for field {self.field_id}: status={self.status}, "
                f"candidates={len(self.candidates)}, answered={answered}"
            )
