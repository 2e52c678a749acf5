"""Document understanding service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, optional_float_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class DocumentServiceConfig:
    """Where and how to reach the document understanding service."""

    endpoint: str
    resilience: ResilienceConfig
    api_key: str | None = None


def get_document_service_config(
    *,
    resilience: ResilienceConfig | None = None,
) -> DocumentServiceConfig:
    values = require_env_vars(("FORMFILL_SERVICE_URL",))
    api_key = optional_env_var("FORMFILL_SERVICE_API_KEY")
    timeout = optional_float_env_var("FORMFILL_SERVICE_TIMEOUT") or DEFAULT_TIMEOUT_SECONDS

    headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
    return DocumentServiceConfig(
        endpoint=values["FORMFILL_SERVICE_URL"],
        api_key=api_key,
        resilience=resilience
        or ResilienceConfig(
            name="document-service",
            timeout_seconds=timeout,
            retry=RetryPolicy(total=2),
            ratelimit=RateLimit(max_calls=4, per_seconds=1.0),
            default_headers=headers,
        ),
    )
