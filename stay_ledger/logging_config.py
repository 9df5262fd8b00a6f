from __future__ import annotations

import logging
import sys
from typing import Any, Callable, MutableMapping

import structlog

from stay_ledger.config import LOG_FORMAT, LOG_LEVEL, SERVICE_NAME

Processor = Callable[[Any, str, MutableMapping[str, Any]], Any]

# Libraries that log every statement or request at INFO.
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "alembic", "uvicorn.access")


def _add_service(_: Any, __: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def _output_processors() -> list[Processor]:
    if LOG_FORMAT == "console":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def setup_logging() -> None:
    """
    Configure stdlib logging and structlog for the whole process.

    Booking and ledger events are emitted as key/value events
    (``stay_created``, ``folio_line_added``, ``status_transitioned`` ...).
    Values bound with ``structlog.contextvars`` by the request middleware,
    such as ``request_id``, are merged into every event of that request.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
        level=LOG_LEVEL,
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_service,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_output_processors(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(LOG_LEVEL)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
