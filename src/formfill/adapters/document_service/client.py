"""HTTP client for the document understanding service."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from formfill.adapters.http_resilience import ResilientClient
from formfill.config.document_service import DocumentServiceConfig, get_document_service_config
from formfill.domain.model import ExtractionMode
from formfill.domain.ports import (
    DocumentUnderstandingService,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
)

from .schema import ServiceEnvelope
from .translator import parse_facts, parse_fields

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from formfill.config.http_resilience import ResilienceConfig
    from formfill.domain.model import Document, Field

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class DocumentServiceClient:
    """Post documents as multipart ``files`` with a ``mode`` flag and read the envelope.

    Transport and service errors come back as ``ExtractionFailure``; payloads that
    cannot be interpreted come back as empty successes.
    """

    config: DocumentServiceConfig = field(default_factory=get_document_service_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def extract_fields(
        self, documents: Sequence[Document]
    ) -> ExtractionResult[tuple[Field, ...]]:
        outcome = await self._extract(documents, mode=ExtractionMode.SCHEMA)
        if isinstance(outcome, ExtractionFailure):
            return outcome
        fields = parse_fields(outcome.payload)
        log.info("Service returned %s field(s)", len(fields))
        return ExtractionSuccess(fields)

    async def extract_facts(self, documents: Sequence[Document]) -> ExtractionResult[dict[str, str]]:
        outcome = await self._extract(documents, mode=ExtractionMode.FACTS)
        if isinstance(outcome, ExtractionFailure):
            return outcome
        facts = parse_facts(outcome.payload)
        log.info("Service returned %s fact(s)", len(facts))
        return ExtractionSuccess(facts)

    async def _extract(
        self,
        documents: Sequence[Document],
        *,
        mode: ExtractionMode,
    ) -> ExtractionResult[object]:
        if not documents:
            return ExtractionFailure("No files uploaded")

        files = [
            ("files", (document.name, document.content, document.media_type))
            for document in documents
        ]
        log.debug(
            "Sending %s document(s) (%s bytes) in %s mode",
            len(documents),
            sum(document.size for document in documents),
            mode,
        )
        try:
            async with self.client_factory(self.config.resilience) as client:
                response = await client.post(
                    self.config.endpoint,
                    data={"mode": str(mode)},
                    files=files,
                )
        except httpx.HTTPError as exc:
            log.warning("Document service request failed: %s", exc)
            return ExtractionFailure(f"Document service unavailable: {exc}")

        return _read_envelope(response)


def _read_envelope(response: httpx.Response) -> ExtractionResult[object]:
    try:
        payload = response.json()
    except ValueError:
        if response.is_error:
            return ExtractionFailure(f"Document service returned HTTP {response.status_code}")
        log.warning("Document service returned a non-JSON body; treating as empty")
        return ExtractionSuccess(None)

    if not isinstance(payload, dict) or ("success" not in payload and "data" not in payload):
        if response.is_error:
            return ExtractionFailure(f"Document service returned HTTP {response.status_code}")
        return ExtractionSuccess(payload)

    try:
        envelope = ServiceEnvelope.model_validate(payload)
    except ValidationError:
        if response.is_error:
            return ExtractionFailure(f"Document service returned HTTP {response.status_code}")
        log.warning("Unreadable document service envelope; treating as empty")
        return ExtractionSuccess(None)

    if response.is_error or not envelope.success:
        reason = envelope.error or f"Document service returned HTTP {response.status_code}"
        log.error("Document service error: %s", reason)
        return ExtractionFailure(reason)
    return ExtractionSuccess(envelope.data)


if TYPE_CHECKING:
    _service_check: DocumentUnderstandingService = DocumentServiceClient()
