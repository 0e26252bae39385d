"""structlog configuration for formgate.

The engine itself logs through stdlib ``logging.getLogger(__name__)`` and
never configures handlers; embedding applications keep control of that.
The CLI calls :func:`configure_logging` once, which routes both stdlib
records and structlog events through one formatter on stderr:

- Human (default): colored console output when stderr is a TTY
- JSON (--log-json): one JSON object per line
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog

# Loggers that are chatty at DEBUG and never useful to form authors.
_QUIET_LOGGERS = ("asyncio", "pluggy")


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog processors and output routing.

    Args:
        verbose: Enable DEBUG-level output for ``formgate.*``. When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
        stream: Destination (default: ``sys.stderr``).
    """
    out = stream or sys.stderr
    formgate_level = logging.DEBUG if verbose else logging.WARNING

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        final: list[structlog.types.Processor] = [
            structlog.processors.format_exc_info,
            renderer,
        ]
    else:
        is_tty = getattr(out, "isatty", lambda: False)()
        final = [structlog.dev.ConsoleRenderer(colors=is_tty)]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *final,
        ],
    )

    handler = logging.StreamHandler(out)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.WARNING)

    logging.getLogger("formgate").setLevel(formgate_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, **initial_values: Any) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to *name* with optional context."""
    return structlog.get_logger(name, **initial_values)
