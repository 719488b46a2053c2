"""Structured logging configuration with JSON output and context injection."""

import contextvars
import logging
import logging.config
import os

import structlog

# Context var for request ID (thread-safe for async)
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "request_id", default="no-request-id"
)


def get_request_id() -> str:
    """Get current request ID from context."""
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    """Set request ID for current context and bind it to every log line."""
    request_id_var.set(request_id)
    structlog.contextvars.bind_contextvars(request_id=request_id)


def configure_logging() -> None:
    """Configure structlog.

    JSON lines everywhere except ENVIRONMENT=development, which gets the
    console renderer. LOG_LEVEL controls the stdlib root level.
    """
    environment = os.getenv("ENVIRONMENT", "development")
    level = os.getenv("LOG_LEVEL", "INFO").upper()

    renderer = (
        structlog.dev.ConsoleRenderer()
        if environment == "development"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Route stdlib loggers (uvicorn, sqlalchemy) through the same formatter
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "processor": renderer,
                },
            },
            "handlers": {
                "default": {
                    "level": level,
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": True,
                }
            },
        }
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structlog logger tagged with its module name."""
    return structlog.get_logger(name).bind(logger=name)
