"""Structured logging helpers.

Every helper logs a plain message plus an ``extra`` dict with a ``type`` key
(``operation``, ``http_request``, ``store_operation``, ``cache_operation``,
``series_generation``) so JSON formatters and log queries can filter on it.
"""

import functools
import logging
import time
from contextlib import contextmanager
from typing import Any, Callable, Iterator, TypeVar

from .config import settings

F = TypeVar('F', bound=Callable[..., Any])

NOISY_LIBRARIES = ("urllib3", "requests", "botocore", "boto3", "s3transfer")


class PerformanceLogger:
    """Wraps a module logger with timing and structured-extra helpers."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    @contextmanager
    def time_operation(self, operation: str, **context) -> Iterator[dict]:
        """Time the block and log its outcome.

        Yields the context dict; anything the block adds to it (a point
        count, a cache source) ends up on the completion record.
        """
        start = time.perf_counter()
        context = {"operation": operation, **context}
        self.logger.debug("%s started", operation, extra={**context, "type": "operation"})

        try:
            yield context
        except Exception as e:
            duration = time.perf_counter() - start
            self.logger.error(
                "%s failed after %.3fs: %s",
                operation,
                duration,
                e,
                extra={**context, "type": "operation", "status": "error",
                       "duration_seconds": duration, "error": str(e)}
            )
            raise

        duration = time.perf_counter() - start
        self.logger.info(
            "%s finished in %.3fs",
            operation,
            duration,
            extra={**context, "type": "operation", "status": "success", "duration_seconds": duration}
        )

    def log_request(self, method: str, path: str, status_code: int, duration: float, **kwargs):
        """One record per HTTP request, written after the response is known."""
        level = logging.WARNING if status_code >= 500 else logging.INFO
        self.logger.log(
            level,
            "%s %s -> %d (%.3fs)",
            method.upper(),
            path,
            status_code,
            duration,
            extra={
                "type": "http_request",
                "method": method.upper(),
                "path": path,
                "status_code": status_code,
                "duration_seconds": duration,
                **kwargs
            }
        )

    def log_store_operation(self, store: str, operation: str, key: str, **kwargs):
        self.logger.debug(
            "%s %s %s",
            store,
            operation,
            key,
            extra={"type": "store_operation", "store": store, "store_operation": operation,
                   "store_key": key, **kwargs}
        )

    def log_cache_operation(self, operation: str, cache_key: str, hit: bool | None = None, **kwargs):
        outcome = "" if hit is None else (" hit" if hit else " miss")
        self.logger.debug(
            "cache %s %s%s",
            cache_key,
            operation,
            outcome,
            extra={"type": "cache_operation", "cache_operation": operation,
                   "cache_key": cache_key, "cache_hit": hit, **kwargs}
        )

    def log_series_generation(self, symbol: str, range_code: str, points: int, **kwargs):
        self.logger.info(
            "Synthesized %d points for %s (%s)",
            points,
            symbol,
            range_code,
            extra={"type": "series_generation", "symbol": symbol, "range": range_code,
                   "points": points, **kwargs}
        )


def setup_performance_logging(level: str | None = None) -> None:
    """Configure the root handler and the ``stockdash`` logger tree."""
    log_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        force=True
    )
    logging.getLogger("stockdash").setLevel(log_level)

    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    if settings.debug:
        # Store and cache traces are logged at DEBUG
        logging.getLogger("stockdash.services").setLevel(logging.DEBUG)
        logging.getLogger("stockdash.core.cache").setLevel(logging.DEBUG)


def get_performance_logger(name: str) -> PerformanceLogger:
    return PerformanceLogger(logging.getLogger(name))


def log_performance(operation_name: str | None = None):
    """Decorator form of ``time_operation``."""
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            perf = get_performance_logger(func.__module__)
            with perf.time_operation(operation_name or func.__name__, function=func.__qualname__):
                return func(*args, **kwargs)
        return wrapper
    return decorator
