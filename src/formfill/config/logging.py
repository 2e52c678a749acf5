"""Shared logging helpers for formfill."""

from __future__ import annotations

import logging
import os

NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(value: str | int | None = None) -> int:
    """Translate a level name or number, falling back to ``FORMFILL_LOG_LEVEL`` then INFO."""

    raw = value if value is not None else os.getenv("FORMFILL_LOG_LEVEL")
    if raw is None or raw == "":
        return logging.INFO
    if isinstance(raw, int):
        return raw
    level = logging.getLevelNamesMapping().get(raw.strip().upper())
    if level is None:
        raise ValueError(f"Unknown log level: {raw}")
    return level


def configure_logging(*, level: str | int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with a terse format suitable for CLI output.

    HTTP transport loggers are held at WARNING unless DEBUG is requested, so request
    lines do not drown the review output. Pass ``force=True`` to reconfigure during
    tests.
    """

    resolved = resolve_log_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    transport_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
