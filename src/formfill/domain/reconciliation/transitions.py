"""State transitions for reconciliation records.

Transitions mutate the record in place and check the record invariants before
returning. Validation failures raise before any field is touched.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from formfill.domain.errors import CandidateNotFoundError

from .contracts import ReconciliationRecord, ReconciliationStatus

if TYPE_CHECKING:
    from formfill.domain.matching import CandidateSet

log = getLogger(__name__)


def new_record(field_id: str) -> ReconciliationRecord:
    return ReconciliationRecord(field_id=field_id)


def seed_from_match(record: ReconciliationRecord, candidates: CandidateSet) -> bool:
    """Apply matcher output to ``record``; return whether the record changed.

    Records with an explicit user decision are never re-seeded.
    """

    if record.user_touched:
        log.debug("Skipping re-seed of user-touched field %s", record.field_id)
        return False

    before = (record.status, record.candidates, record.selected_answer)
    record.candidates = tuple(candidates)
    _apply_candidates(record)
    record.validate_invariants()
    return before != (record.status, record.candidates, record.selected_answer)


def select_candidate(record: ReconciliationRecord, answer: str) -> None:
    if answer not in record.candidates:
        raise CandidateNotFoundError(record.field_id, answer)
    record.selected_answer = answer
    record.status = ReconciliationStatus.RESOLVED
    record.user_touched = True
    record.validate_invariants()


def enter_manual(record: ReconciliationRecord, text: str) -> None:
    """Record a free-text answer. Blank text withdraws any previous answer."""

    record.user_touched = True
    answer = text.strip()
    if answer:
        record.selected_answer = answer
        record.status = ReconciliationStatus.RESOLVED
    else:
        _apply_candidates(record)
    record.validate_invariants()


def _apply_candidates(record: ReconciliationRecord) -> None:
    if not record.candidates:
        record.status = ReconciliationStatus.NO_MATCH
        record.selected_answer = None
    elif len(record.candidates) == 1:
        record.status = ReconciliationStatus.RESOLVED
        record.selected_answer = record.candidates[0]
    else:
        record.status = ReconciliationStatus.CONFLICT
        record.selected_answer = None
