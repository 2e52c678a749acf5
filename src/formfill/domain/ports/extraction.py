"""Port for the document understanding service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from formfill.domain.model import Document, Field


@dataclass(frozen=True, slots=True)
class ExtractionSuccess[T]:
    payload: T


@dataclass(frozen=True, slots=True)
class ExtractionFailure:
    reason: str


type ExtractionResult[T] = ExtractionSuccess[T] | ExtractionFailure


@runtime_checkable
class DocumentUnderstandingService(Protocol):
    """Async port returning explicit success/failure values instead of raising."""

    async def extract_fields(
        self, documents: Sequence[Document]
    ) -> ExtractionResult[tuple[Field, ...]]: ...

    async def extract_facts(
        self, documents: Sequence[Document]
    ) -> ExtractionResult[dict[str, str]]: ...


__all__ = [
    "DocumentUnderstandingService",
    "ExtractionFailure",
    "ExtractionResult",
    "ExtractionSuccess",
]
