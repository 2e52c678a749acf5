"""Application configuration helpers."""

from __future__ import annotations

from .document_service import DocumentServiceConfig, get_document_service_config
from .env import require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .wizard import WizardConfig, get_wizard_config

__all__ = [
    "ConfigurationError",
    "DocumentServiceConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "WizardConfig",
    "configure_logging",
    "get_document_service_config",
    "get_wizard_config",
    "require_env_var",
    "require_env_vars",
]
