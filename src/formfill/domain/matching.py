"""Field matcher: propose candidate answers for a form field from the fact store.

Matching policy is an ordered rule table. Each rule names a fact key and the keywords
(substring, case-insensitive) or field types that select it. A rule naming the field's
declared type wins; otherwise the first keyword hit in table order does. The matcher
then proposes one candidate per source document holding that fact, with identical
values collapsed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from formfill.domain.model import FactKey, FieldType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from formfill.domain.facts import FactStore
    from formfill.domain.model import Field


type CandidateSet = tuple[str, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchRule:
    fact_key: str
    keywords: tuple[str, ...] = ()
    field_types: frozenset[FieldType] = frozenset()

    def matches_type(self, field: Field) -> bool:
        return field.type is not None and field.type in self.field_types

    def matches_keyword(self, field: Field) -> bool:
        label = field.text.lower()
        return any(keyword in label for keyword in self.keywords)


DEFAULT_RULES: Final[tuple[MatchRule, ...]] = (
    MatchRule(fact_key=FactKey.FULL_NAME, keywords=("name",)),
    MatchRule(fact_key=FactKey.DATE_OF_BIRTH, keywords=("birth", "dob")),
    MatchRule(
        fact_key=FactKey.ADDRESS,
        keywords=("address",),
        field_types=frozenset({FieldType.ADDRESS}),
    ),
    MatchRule(
        fact_key=FactKey.PHONE,
        keywords=("phone",),
        field_types=frozenset({FieldType.PHONE}),
    ),
    MatchRule(
        fact_key=FactKey.EMAIL,
        keywords=("email", "e-mail"),
        field_types=frozenset({FieldType.EMAIL}),
    ),
)


def rule_for(field: Field, *, rules: Iterable[MatchRule] = DEFAULT_RULES) -> MatchRule | None:
    """Return the rule selecting ``field``, if any.

    A rule naming the field's declared type wins outright; otherwise the first rule
    whose keyword appears in the label is used.
    """

    rule_table = tuple(rules)
    for rule in rule_table:
        if rule.matches_type(field):
            return rule
    for rule in rule_table:
        if rule.matches_keyword(field):
            return rule
    return None


def match(
    field: Field,
    facts: FactStore,
    *,
    rules: Iterable[MatchRule] = DEFAULT_RULES,
) -> CandidateSet:
    """Return the candidate answers for ``field``. Never raises; no match is ``()``."""

    rule = rule_for(field, rules=rules)
    if rule is None:
        return ()

    seen: set[str] = set()
    candidates: list[str] = []
    for sourced in facts.values_for(rule.fact_key):
        value = sourced.value.strip()
        if not value or value in seen:
            continue
        seen.add(value)
        candidates.append(value)
    return tuple(candidates)


def match_all(
    fields: Iterable[Field],
    facts: FactStore,
    *,
    rules: Iterable[MatchRule] = DEFAULT_RULES,
) -> dict[str, CandidateSet]:
    rule_table = tuple(rules)
    return {field.id: match(field, facts, rules=rule_table) for field in fields}
