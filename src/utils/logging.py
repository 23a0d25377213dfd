"""Structured logging configuration for Reelsmith.

Uses structlog for structured, JSON-capable logging with per-run
correlation: every event logged while a pipeline run is active carries
the id of the video the run belongs to.
"""

import logging
import sys
from contextvars import ContextVar

import structlog

# Context variable for pipeline run correlation
current_video_id: ContextVar[str | None] = ContextVar("current_video_id", default=None)


def add_video_id(_logger, _method_name, event_dict):
    """Structlog processor to inject video_id into all log events."""
    video_id = current_video_id.get()
    if video_id:
        event_dict["video_id"] = video_id
    return event_dict


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, output JSON logs (for production). If False, use colored console output.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_video_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Route stdlib loggers (logging.getLogger(__name__)) through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Suppress noisy third-party loggers
    for logger_name in ("aiohttp", "aiosqlite", "httpx", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def set_run_context(video_id: str) -> None:
    """Set the video whose pipeline run is executing in this task.

    Args:
        video_id: Video ID to include in all subsequent log messages
    """
    current_video_id.set(video_id)


def clear_run_context() -> None:
    """Clear the current run context."""
    current_video_id.set(None)
