"""Reusable fakes and helpers for wizard and session tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from formfill.domain.model import Document, Field
from formfill.domain.ports import ExtractionFailure, ExtractionSuccess

if TYPE_CHECKING:
    from collections.abc import Sequence

    from formfill.domain.ports import ExtractionResult


def make_document(
    name: str = "form.pdf",
    *,
    content: bytes = b"%PDF-1.7 example",
    media_type: str = "application/pdf",
) -> Document:
    return Document(name=name, content=content, media_type=media_type)


def sample_fields() -> tuple[Field, ...]:
    return (
        Field(id="1", text="What is your full name?"),
        Field(id="2", text="Date of birth?"),
        Field(id="3", text="Current address"),
    )


@dataclass(slots=True)
class FakeDocumentService:
    """In-memory document understanding service.

    ``failures`` makes the next N calls fail and ``errors`` makes calls for the named
    documents raise. When ``release`` is set, every other call blocks until the event is
    set, which lets tests observe the pending state. ``completed`` lists the calls that
    ran to the end.
    """

    fields: tuple[Field, ...] = ()
    facts: dict[str, dict[str, str]] = field(default_factory=dict["str", "dict[str, str]"])
    failures: int = 0
    release: asyncio.Event | None = None
    errors: dict[str, Exception] = field(default_factory=dict["str", "Exception"])
    calls: list[tuple[str, tuple[str, ...]]] = field(
        default_factory=list["tuple[str, tuple[str, ...]]"]
    )
    completed: list[str] = field(default_factory=list["str"])

    async def extract_fields(
        self, documents: Sequence[Document]
    ) -> ExtractionResult[tuple[Field, ...]]:
        failure = await self._record("fields", documents)
        if failure is not None:
            return failure
        return ExtractionSuccess(self.fields)

    async def extract_facts(self, documents: Sequence[Document]) -> ExtractionResult[dict[str, str]]:
        failure = await self._record("facts", documents)
        if failure is not None:
            return failure
        return ExtractionSuccess(dict(self.facts.get(documents[0].name, {})))

    async def _record(
        self, mode: str, documents: Sequence[Document]
    ) -> ExtractionFailure | None:
        self.calls.append((mode, tuple(document.name for document in documents)))
        for document in documents:
            if document.name in self.errors:
                raise self.errors[document.name]
        if self.release is not None:
            await self.release.wait()
        self.completed.extend(document.name for document in documents)
        if self.failures > 0:
            self.failures -= 1
            return ExtractionFailure("service unavailable")
        return None
