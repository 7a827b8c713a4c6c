"""
Structured logging configuration using structlog.

Every line carries the service name and, inside a request, the request id and
path bound by the HTTP middleware. Rendering is JSON lines or colored console
output, picked by ``LOG_FORMAT``.
"""

import logging
import sys
from typing import List, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .config import settings

# Upstream clients log their own failures; transport-level chatter adds nothing
QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


def add_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", settings.service_name)
    return event_dict


def shared_processors() -> List[Processor]:
    """Processors applied to both structlog and stdlib records."""
    return [
        structlog.contextvars.merge_contextvars,
        add_service,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def select_renderer(log_format: str, level: int) -> Processor:
    """``json`` or ``console``; ``auto`` means console at DEBUG, JSON otherwise."""
    if log_format == "auto":
        log_format = "console" if level <= logging.DEBUG else "json"
    if log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def setup_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configure structlog and route stdlib logging (providers, services) through it.

    Args:
        log_level: Override log level (default: settings.log_level)
        log_format: Override renderer (default: settings.log_format)
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)
    renderer = select_renderer(log_format or settings.log_format, level)

    processors = shared_processors()
    if isinstance(renderer, structlog.processors.JSONRenderer):
        processors.append(structlog.processors.format_exc_info)

    structlog.configure(
        processors=[*processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    ))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
