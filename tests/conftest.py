from __future__ import annotations

import pytest

FORMFILL_ENV_VARS = (
    "FORMFILL_SERVICE_URL",
    "FORMFILL_SERVICE_API_KEY",
    "FORMFILL_SERVICE_TIMEOUT",
    "FORMFILL_MAX_REFERENCES",
    "FORMFILL_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ``.env`` or shell exports out of the tests."""

    for name in FORMFILL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
