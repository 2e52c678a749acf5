"""Per-field reconciliation state machine.

Every field starts in ``NO_MATCH``. Matcher output seeds the record (zero, one or many
candidates map onto ``NO_MATCH``, ``RESOLVED`` and ``CONFLICT``); explicit user
selections and manual entries move it to ``RESOLVED`` and pin it against later
seeding.
"""

from __future__ import annotations

from .contracts import ReconciliationRecord, ReconciliationStatus
from .transitions import enter_manual, new_record, seed_from_match, select_candidate

__all__ = [
    "ReconciliationRecord",
    "ReconciliationStatus",
    "enter_manual",
    "new_record",
    "seed_from_match",
    "select_candidate",
]
