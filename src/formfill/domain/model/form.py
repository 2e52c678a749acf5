"""Form fields and uploaded documents."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from formfill.domain.model.enums import FieldType

ACCEPTED_MEDIA_TYPES: Final[frozenset[str]] = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    }
)


@dataclass(frozen=True, slots=True, kw_only=True)
class Field:
    """A labeled slot on the blank form. Identity is ``id``."""

    id: str
    text: str
    type: FieldType | None = None

    def __post_init__(self) -> None:
        if not self.id.strip():
            raise ValueError("Field id must not be blank")
        if not self.text.strip():
            raise ValueError(f"Field {self.id} must have a label")


@dataclass(frozen=True, slots=True, kw_only=True)
class Document:
    """Opaque uploaded document payload."""

    name: str
    content: bytes
    media_type: str = "application/pdf"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_accepted_type(self) -> bool:
        return self.media_type in ACCEPTED_MEDIA_TYPES
