"""Fact store built from facts-extraction output.

Facts are layered per source document. Within one source a key holds exactly one
value and a later extraction for the same source replaces it (last-writer-wins).
Sources are kept in first-insertion order, which is the order candidates are proposed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

from formfill.domain.model import FactKey

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

log = getLogger(__name__)

DEFAULT_SOURCE: Final[str] = "default"

FACT_KEY_ALIASES: Final[dict[str, str]] = {
    "fullname": FactKey.FULL_NAME,
    "full_name": FactKey.FULL_NAME,
    "name": FactKey.FULL_NAME,
    "dateofbirth": FactKey.DATE_OF_BIRTH,
    "date_of_birth": FactKey.DATE_OF_BIRTH,
    "dob": FactKey.DATE_OF_BIRTH,
    "birthdate": FactKey.DATE_OF_BIRTH,
    "address": FactKey.ADDRESS,
    "phone": FactKey.PHONE,
    "phonenumber": FactKey.PHONE,
    "phone_number": FactKey.PHONE,
    "email": FactKey.EMAIL,
    "emailaddress": FactKey.EMAIL,
    "email_address": FactKey.EMAIL,
}


def canonical_fact_key(key: str) -> str:
    """Map a raw extraction key onto the canonical vocabulary.

    Unrecognized keys are returned unchanged (stripped) so they remain available as
    extension facts.
    """

    stripped = key.strip()
    return FACT_KEY_ALIASES.get(stripped.lower(), stripped)


@dataclass(frozen=True, slots=True)
class SourcedValue:
    source: str
    value: str


@dataclass(slots=True)
class FactStore:
    """Mapping from canonical fact key to value, one layer per source document."""

    _layers: dict[str, dict[str, str]] = field(
        default_factory=dict["str", "dict[str, str]"], repr=False
    )

    @classmethod
    def from_mapping(cls, facts: Mapping[str, str], *, source: str = DEFAULT_SOURCE) -> FactStore:
        store = cls()
        store.merge(facts, source=source)
        return store

    @property
    def sources(self) -> tuple[str, ...]:
        return tuple(self._layers)

    def merge(self, facts: Mapping[str, str], *, source: str = DEFAULT_SOURCE) -> int:
        """Merge ``facts`` into the layer for ``source`` and return the number stored.

        Blank values are skipped; they never overwrite an existing value.
        """

        layer = self._layers.setdefault(source, {})
        stored = 0
        for raw_key, raw_value in facts.items():
            key = canonical_fact_key(raw_key)
            value = raw_value.strip()
            if not key or not value:
                continue
            layer[key] = value
            stored += 1
        log.debug("Merged %s facts from source %r", stored, source)
        return stored

    def replace_source(self, facts: Mapping[str, str], *, source: str) -> int:
        """Drop everything previously known from ``source`` and store ``facts``."""

        self._layers.pop(source, None)
        return self.merge(facts, source=source)

    def drop_source(self, source: str) -> bool:
        """Forget every fact known from ``source``; return whether it was present."""

        return self._layers.pop(source, None) is not None

    def get(self, key: str) -> str | None:
        """Return the most recently merged value for ``key`` across all sources."""

        canonical = canonical_fact_key(key)
        for layer in reversed(self._layers.values()):
            value = layer.get(canonical)
            if value:
                return value
        return None

    def values_for(self, key: str) -> tuple[SourcedValue, ...]:
        canonical = canonical_fact_key(key)
        return tuple(
            SourcedValue(source=source, value=layer[canonical])
            for source, layer in self._layers.items()
            if layer.get(canonical)
        )

    def keys(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for layer in self._layers.values():
            seen.update(dict.fromkeys(layer))
        return tuple(seen)

    def as_dict(self) -> dict[str, str]:
        return {key: value for key in self.keys() if (value := self.get(key)) is not None}

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def __bool__(self) -> bool:
        return any(self._layers.values())
