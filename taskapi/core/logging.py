from __future__ import annotations

import logging
import logging.config
import time
from uuid import uuid4

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from taskapi.core.config import Settings

TRACE_HEADER = "X-Trace-ID"
TRACE_ID_MAX_LENGTH = 128
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

# Third-party loggers routed through the structured handlers instead of their own.
_LIBRARY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy", "alembic")


def bind_log_context(
    *,
    trace_id: str | None = None,
    user_id: int | None = None,
    task_id: int | None = None,
) -> None:
    """Attach request identifiers to every log line emitted in the current context."""
    values = {"trace_id": trace_id, "user_id": user_id, "task_id": task_id}
    payload = {key: value for key, value in values.items() if value is not None}
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def _build_renderer(settings: Settings) -> object:
    if settings.log_format == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def _build_handlers(settings: Settings, level: str) -> dict[str, dict[str, object]]:
    handlers: dict[str, dict[str, object]] = {
        "stdout": {"class": "logging.StreamHandler", "formatter": "structured", "level": level}
    }
    if settings.log_file is not None:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "structured",
            "level": level,
            "filename": settings.log_file,
            "maxBytes": LOG_FILE_MAX_BYTES,
            "backupCount": LOG_FILE_BACKUP_COUNT,
            "encoding": "utf-8",
        }
    return handlers


def configure_logging(settings: Settings) -> None:
    level = settings.log_level.upper()
    shared_processors: list[object] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    handlers = _build_handlers(settings, level)
    handler_names = list(handlers)

    loggers: dict[str, dict[str, object]] = {"": {"handlers": handler_names, "level": level}}
    for name in _LIBRARY_LOGGERS:
        loggers[name] = {"handlers": handler_names, "level": level, "propagate": False}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": shared_processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        structlog.processors.format_exc_info,
                        structlog.processors.EventRenamer("message"),
                        _build_renderer(settings),
                    ],
                }
            },
            "handlers": handlers,
            "loggers": loggers,
        }
    )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def resolve_trace_id(request: Request) -> str:
    incoming = (request.headers.get(TRACE_HEADER) or "").strip()
    if incoming:
        return incoming[:TRACE_ID_MAX_LENGTH]
    return f"trace-http-{uuid4().hex}"


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Bind a trace id per request, log its outcome and echo the id back."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        logger = get_logger("taskapi.api.request")
        trace_id = resolve_trace_id(request)
        request.state.trace_id = trace_id
        clear_log_context()
        bind_log_context(trace_id=trace_id)
        log = logger.bind(method=request.method, path=request.url.path)
        log.info("request.received")
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            log.exception("request.failed", duration_ms=_elapsed_ms(started))
            raise
        else:
            response.headers[TRACE_HEADER] = trace_id
            log.info(
                "request.completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            return response
        finally:
            clear_log_context()


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
