"""Session-scoped reconciliation context.

A ``ReviewSession`` owns the fields of one blank form, the facts gathered from its
reference documents and one reconciliation record per field. Sessions share nothing,
so several can coexist in one process.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from formfill.domain.assembly import assemble
from formfill.domain.errors import DuplicateFieldError, UnknownFieldError
from formfill.domain.facts import FactStore
from formfill.domain.matching import DEFAULT_RULES, MatchRule, match
from formfill.domain.reconciliation import (
    ReconciliationRecord,
    ReconciliationStatus,
    enter_manual,
    new_record,
    seed_from_match,
    select_candidate,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from formfill.domain.assembly import AnsweredField
    from formfill.domain.matching import CandidateSet
    from formfill.domain.model import Field

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReviewItem:
    """Read-only view of one field for the review surface."""

    id: str
    text: str
    status: ReconciliationStatus
    candidates: CandidateSet
    selected_answer: str | None


@dataclass(slots=True)
class ReviewSession:
    rules: tuple[MatchRule, ...] = DEFAULT_RULES
    facts: FactStore = field(default_factory=FactStore)
    _fields: tuple[Field, ...] = field(default=(), repr=False)
    _records: dict[str, ReconciliationRecord] = field(
        default_factory=dict["str", "ReconciliationRecord"], repr=False
    )

    @property
    def fields(self) -> tuple[Field, ...]:
        return self._fields

    @property
    def records(self) -> Mapping[str, ReconciliationRecord]:
        return self._records

    def load_fields(self, fields: Iterable[Field]) -> None:
        """Replace the form schema and all records, then seed from known facts."""

        ordered = tuple(fields)
        seen: set[str] = set()
        for item in ordered:
            if item.id in seen:
                raise DuplicateFieldError(item.id)
            seen.add(item.id)

        self._fields = ordered
        self._records = {item.id: new_record(item.id) for item in ordered}
        log.info("Loaded %s form fields", len(ordered))
        self.refresh()

    def merge_facts(self, facts: Mapping[str, str], *, source: str) -> int:
        """Replace the facts known from ``source`` and re-seed the records."""

        stored = self.facts.replace_source(facts, source=source)
        self.refresh()
        return stored

    def refresh(self) -> int:
        """Re-run the matcher for every field; return how many records changed."""

        changed = 0
        for item in self._fields:
            candidates = match(item, self.facts, rules=self.rules)
            if seed_from_match(self._records[item.id], candidates):
                changed += 1
        if changed:
            log.debug("Re-seeded %s of %s records", changed, len(self._fields))
        return changed

    def record_for(self, field_id: str) -> ReconciliationRecord:
        record = self._records.get(field_id)
        if record is None:
            raise UnknownFieldError(field_id)
        return record

    def select_candidate(self, field_id: str, answer: str) -> ReconciliationRecord:
        record = self.record_for(field_id)
        select_candidate(record, answer)
        return record

    def enter_manual(self, field_id: str, text: str) -> ReconciliationRecord:
        record = self.record_for(field_id)
        enter_manual(record, text)
        return record

    def review_items(self) -> tuple[ReviewItem, ...]:
        items: list[ReviewItem] = []
        for item in self._fields:
            record = self._records[item.id]
            items.append(
                ReviewItem(
                    id=item.id,
                    text=item.text,
                    status=record.status,
                    candidates=record.candidates,
                    selected_answer=record.selected_answer,
                )
            )
        return tuple(items)

    def unresolved_field_ids(self) -> tuple[str, ...]:
        return tuple(item.id for item in self._fields if not self._records[item.id].is_resolved)

    def assemble(self) -> tuple[AnsweredField, ...]:
        return assemble(self._fields, self._records)
