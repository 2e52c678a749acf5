"""Wizard step configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from formfill.domain.wizard import DEFAULT_MAX_REFERENCES, WizardStep, default_steps

from .env import optional_int_env_var
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class WizardConfig:
    steps: tuple[WizardStep, ...] = field(default_factory=default_steps)


def get_wizard_config() -> WizardConfig:
    max_references = optional_int_env_var("FORMFILL_MAX_REFERENCES")
    if max_references is None:
        max_references = DEFAULT_MAX_REFERENCES
    if max_references < 1:
        raise ConfigurationError("FORMFILL_MAX_REFERENCES must be at least 1")
    return WizardConfig(steps=default_steps(max_references=max_references))
