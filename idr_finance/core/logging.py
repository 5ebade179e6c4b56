"""
IDR Finance — Logging configuration.

Every log line carries a context id: the ``X-Request-ID`` of the HTTP request
being served, ``load`` for lines written by the startup loader, ``-`` otherwise.
The id lives in a ``ContextVar`` so it follows the request or the loader into
every task they spawn.

    configure_logging()                 # once, from idr_finance.app
    token = bind_context_id(request_id)
    try:
        ...
    finally:
        reset_context_id(token)
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar, Token
from typing import IO, Optional

from idr_finance import config

LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(context_id)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOAD_CONTEXT_ID = "load"

# Access lines come from the request-logging middleware instead.
_QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")

_context_id: ContextVar[str] = ContextVar("context_id", default="-")
_handler: Optional[logging.Handler] = None


class ContextIdFilter(logging.Filter):
    """Stamp ``record.context_id`` from the current context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context_id = _context_id.get()
        return True


def bind_context_id(context_id: str) -> Token:
    return _context_id.set(context_id)


def reset_context_id(token: Token) -> None:
    _context_id.reset(token)


def current_context_id() -> str:
    return _context_id.get()


def configure_logging(level: Optional[str] = None, stream: Optional[IO[str]] = None) -> None:
    """Install the service handler on the root logger exactly once.

    ``level`` falls back to ``LOG_LEVEL`` and then INFO when it is not a
    known level name.
    """
    global _handler
    if _handler is not None:
        return

    name = (level or config.LOG_LEVEL).upper()
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(ContextIdFilter())

    root = logging.getLogger()
    root.setLevel(resolved)
    root.addHandler(handler)

    for noisy in _QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _handler = handler


def reset_logging_for_tests() -> None:
    """Detach the service handler so ``configure_logging`` can run again."""
    global _handler
    if _handler is not None:
        logging.getLogger().removeHandler(_handler)
        _handler = None
