"""structlog setup for the forecasting runner.

Library modules only call ``structlog.get_logger(__name__)``; nothing is
configured on import. Entry points that own the process (``scripts/``) call
``configure_logging`` once.
"""

import logging
import sys
from typing import IO, Literal

import structlog

from cfo_cashflow.config.settings import get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def build_processors(
    log_format: LogFormat, colors: bool = False
) -> list[structlog.types.Processor]:
    """Processor chain ending in the renderer for ``log_format``.

    JSON output turns exceptions into structured ``exception`` fields so a
    failed query can be searched by table or code; the console keeps plain
    tracebacks.
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if log_format == "json":
        processors += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(sort_keys=True),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=colors,
                exception_formatter=structlog.dev.plain_traceback,
            )
        )
    return processors


def configure_logging(
    level: LogLevel | None = None,
    format: LogFormat | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Route structlog through stdlib logging to ``stream`` (stderr by default).

    ``level`` and ``format`` fall back to ``LOG_LEVEL`` / ``LOG_FORMAT``.
    Stdout is left alone so the runner can print the result envelope there.
    """
    settings = get_settings()
    log_level = level or settings.log_level
    log_format = format or settings.log_format
    out = stream or sys.stderr

    logging.basicConfig(
        format="%(message)s",
        stream=out,
        level=getattr(logging, log_level),
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(logging.WARNING, getattr(logging, log_level)))

    structlog.configure(
        processors=build_processors(log_format, colors=out.isatty()),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
