"""Centralized logging configuration for the API server and the engine."""

from __future__ import annotations

import logging
import os
from typing import Iterable

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

BACKEND_LOGGER = "backend"
ENGINE_LOGGER = "ecosim"


def _resolve(explicit: str | None, env_var: str, fallback: str) -> str:
    raw = explicit if explicit is not None else os.getenv(env_var)
    return (raw or fallback).upper()


def configure_logging(
    *,
    level: str | None = None,
    engine_level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    include_uvicorn: bool = True,
    extra_loggers: Iterable[str] | None = None,
) -> logging.Logger:
    """Configure root, backend and engine logging.

    Safe to call more than once (``basicConfig`` is a no-op once handlers
    exist; levels are simply re-applied).

    Args:
        level: Backend log level. Falls back to ``ECOSIM_LOG_LEVEL`` or INFO.
        engine_level: Level for the ``ecosim`` engine loggers, which log every
            run at DEBUG. Falls back to ``ECOSIM_ENGINE_LOG_LEVEL`` or the
            backend level.
        format: Log format string.
        datefmt: Date format string.
        include_uvicorn: Whether to align uvicorn loggers with the backend level.
        extra_loggers: Additional logger names to align with the backend level.

    Returns:
        The backend application logger.
    """
    resolved_level = _resolve(level, "ECOSIM_LOG_LEVEL", "INFO")
    resolved_engine_level = _resolve(engine_level, "ECOSIM_ENGINE_LOG_LEVEL", resolved_level)
    logging.basicConfig(level=resolved_level, format=format, datefmt=datefmt)

    app_logger = logging.getLogger(BACKEND_LOGGER)
    app_logger.setLevel(resolved_level)
    logging.getLogger(ENGINE_LOGGER).setLevel(resolved_engine_level)

    aligned = list(extra_loggers or ())
    if include_uvicorn:
        aligned.extend(("uvicorn", "uvicorn.error", "uvicorn.access"))
    for logger_name in aligned:
        logging.getLogger(logger_name).setLevel(resolved_level)

    app_logger.debug(
        "Logging configured (backend=%s, engine=%s)", resolved_level, resolved_engine_level
    )
    return app_logger
