"""Logging setup for ibanctl commands and the HTTP service.

Everything goes to stderr through one stdlib handler whose formatter runs
the structlog processor chain. structlog events (``cache.hit``) and plain
stdlib records from the loaders or uvicorn therefore render the same way:
colored key/value lines by default, one JSON object per line with
``--log-json``.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderers(log_json: bool) -> list[Processor]:
    if log_json:
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def _stderr_handler(log_json: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_pre_chain(),
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_renderers(log_json),
            ],
        )
    )
    return handler


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route structlog and stdlib logging to stderr.

    Safe to call repeatedly; each call replaces the root handler.

    Args:
        verbose: Log ibanctl events from DEBUG instead of INFO.
        log_json: Render JSON lines instead of console output.
    """
    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    root = logging.getLogger()
    root.handlers = [_stderr_handler(log_json)]
    root.setLevel(logging.WARNING)

    logging.getLogger("ibanctl").setLevel(logging.DEBUG if verbose else logging.INFO)
    # Access lines are only produced when [server] access_log is on.
    for name in _SERVER_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)
