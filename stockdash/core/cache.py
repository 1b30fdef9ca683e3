"""TTL cache for data loaded from slow collaborators."""

import logging
import threading
import time
from typing import Callable, Generic, TypeVar

from .logging import get_performance_logger

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReferenceCache(Generic[T]):
    """Caches the result of ``loader`` for ``ttl_seconds``.

    The cache is an ordinary object owned by whoever builds it; the clock is
    injected so expiry can be driven from tests. When a reload fails and an
    older value exists, the stale value is served instead of the error.
    """

    def __init__(
        self,
        loader: Callable[[], T],
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        name: str = "references",
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._name = name
        self._lock = threading.Lock()
        self._value: T | None = None
        self._loaded_at: float | None = None
        self._perf = get_performance_logger(__name__)

    @property
    def age_seconds(self) -> float | None:
        if self._loaded_at is None:
            return None
        return self._clock() - self._loaded_at

    def is_fresh(self) -> bool:
        age = self.age_seconds
        return age is not None and age < self._ttl

    def get(self) -> T:
        """Return the cached value, reloading it when expired."""
        with self._lock:
            if self.is_fresh():
                self._perf.log_cache_operation("get", self._name, hit=True)
                return self._value

            self._perf.log_cache_operation("get", self._name, hit=False)
            try:
                value = self._loader()
            except Exception as e:
                if self._loaded_at is None:
                    raise
                logger.warning(
                    "Reload of %s failed, serving stale data (age %.1fs): %s",
                    self._name, self.age_seconds, e
                )
                return self._value

            self._value = value
            self._loaded_at = self._clock()
            return value

    def invalidate(self) -> None:
        with self._lock:
            self._value = None
            self._loaded_at = None
        self._perf.log_cache_operation("invalidate", self._name)
