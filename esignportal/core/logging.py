from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars

from esignportal.core.config import get_settings

_CONFIGURED = False


def setup_logging(level: int | str | None = None) -> None:
    """Configure structlog once for the process.

    Local runs get the console renderer; every other environment emits one
    JSON object per line on stdout.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    settings = get_settings()
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO

    logging.basicConfig(level=level, format="%(message)s", stream=sys.stdout)

    renderer: Any
    if settings.environment == "local":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", key="timestamp"),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def bind_client(client_id: str, user_id: str | None = None) -> None:
    """Attach the portal client (and the user, once known) to later log lines."""
    if user_id:
        bind_contextvars(client_id=client_id, user_id=user_id)
    else:
        bind_contextvars(client_id=client_id)
