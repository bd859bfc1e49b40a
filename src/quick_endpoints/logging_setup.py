"""Process-wide logging configuration."""

from __future__ import annotations

import logging

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def resolve_level(level: str | None) -> int:
    if not level:
        return logging.INFO
    return LEVELS.get(level.strip().lower(), logging.INFO)


def configure_logging(level: str | None = "info") -> int:
    resolved = resolve_level(level)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z", force=True)
    return resolved
