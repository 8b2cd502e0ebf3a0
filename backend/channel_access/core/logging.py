"""
Structured logging for access-control decisions.

The enclosing request layer calls set_request_id(); every line logged while
that context is active carries the id. Output is JSON in production and a
single human-readable line elsewhere.
"""
import inspect
import json
import logging
import time
from contextvars import ContextVar
from functools import wraps
from typing import Optional, Any, Dict

from channel_access.core.config import settings

request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def configure_logging(level: Optional[str] = None) -> None:
    """Set the root log level from settings (or an explicit override)."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(levelname)s %(name)s %(message)s",
    )


class StructuredLogger:
    """Thin wrapper over a stdlib logger that renders keyword context."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)
        self._is_json = settings.APP_ENV == 'production'

    def _render(self, level: str, message: str, context: Dict[str, Any], error: Optional[Exception]) -> str:
        request_id = request_id_var.get()

        if self._is_json:
            payload: Dict[str, Any] = {
                'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S%z'),
                'level': level,
                'logger': self.name,
                'message': message,
                'env': settings.APP_ENV,
            }
            if request_id:
                payload['request_id'] = request_id
            if context:
                payload['context'] = context
            if error is not None:
                payload['error'] = {'type': type(error).__name__, 'message': str(error)}
            return json.dumps(payload, default=str)

        line = f"[{request_id or '-'}] [{settings.APP_ENV}] {message}"
        if context:
            line += f" | {context}"
        if error is not None:
            line += f" | error={type(error).__name__}: {error}"
        return line

    def _emit(self, levelno: int, message: str, context: Dict[str, Any], error: Optional[Exception] = None):
        if self.logger.isEnabledFor(levelno):
            self.logger.log(levelno, self._render(logging.getLevelName(levelno), message, context, error))

    def debug(self, message: str, **context):
        self._emit(logging.DEBUG, message, context)

    def info(self, message: str, **context):
        self._emit(logging.INFO, message, context)

    def warning(self, message: str, **context):
        self._emit(logging.WARNING, message, context)

    def error(self, message: str, error: Optional[Exception] = None, **context):
        self._emit(logging.ERROR, message, context, error)


def get_logger(name: str = settings.APP_NAME) -> StructuredLogger:
    return StructuredLogger(name)


permissions_logger = get_logger(f"{settings.APP_NAME}.permissions")
db_logger = get_logger(f"{settings.APP_NAME}.database")

# Failures that are ordinary outcomes of an access-control call.
_REJECTION_STATUSES = (403, 404, 409)


def log_operation(operation: str, logger: Optional[StructuredLogger] = None):
    """
    Decorator for logging coroutine entry/exit with timing.

    Usage:
        @log_operation("add_member", permissions_logger)
        async def add_member(...):
            ...

    Rejections (403/404/409) are logged at info level; anything else is
    logged as an error. The exception is always re-raised.
    """
    def decorator(func):
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"log_operation expects a coroutine function, got {func!r}")

        @wraps(func)
        async def wrapper(*args, **kwargs):
            log = logger or permissions_logger
            start = time.perf_counter()
            log.debug(f"{operation} started")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                duration = round((time.perf_counter() - start) * 1000, 2)
                status = getattr(e, 'status_code', None)
                if status in _REJECTION_STATUSES:
                    log.info(f"{operation} rejected", status=status, duration_ms=duration)
                else:
                    log.error(f"{operation} failed", error=e, duration_ms=duration)
                raise
            log.info(f"{operation} completed", duration_ms=round((time.perf_counter() - start) * 1000, 2))
            return result

        return wrapper

    return decorator
