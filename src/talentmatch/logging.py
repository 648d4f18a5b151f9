"""structlog setup shared by the CLI and library callers."""

from __future__ import annotations

import logging
from typing import Any, TextIO

import structlog

from . import __version__

LOG_FORMATS = ("json", "console")


def _add_service(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("service", "talentmatch")
    event_dict.setdefault("version", __version__)
    return event_dict


def configure_logging(
    level: str = "INFO",
    *,
    fmt: str = "json",
    stream: TextIO | None = None,
) -> None:
    """Route structlog events at or above ``level`` to ``stream``.

    ``json`` writes one object per line; ``console`` is meant for interactive
    runs. Events carry whatever is bound through ``structlog.contextvars``
    (the orchestrator binds ``run_id`` and ``requirement_id``).
    """
    if fmt not in LOG_FORMATS:
        raise ValueError(f"Unknown log format '{fmt}', expected one of {LOG_FORMATS}")
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level '{level}'")

    logging.basicConfig(level=log_level, format="%(message)s")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_service,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
    ]
    if fmt == "json":
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=True,
    )


__all__ = ["LOG_FORMATS", "configure_logging"]
