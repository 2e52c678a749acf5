"""Public interface for the document understanding service adapter."""

from __future__ import annotations

from .client import DocumentServiceClient
from .schema import FieldPayload, ServiceEnvelope
from .translator import RAW_TEXT_KEY, parse_facts, parse_fields, recover_json

__all__ = [
    "RAW_TEXT_KEY",
    "DocumentServiceClient",
    "FieldPayload",
    "ServiceEnvelope",
    "parse_facts",
    "parse_fields",
    "recover_json",
]
