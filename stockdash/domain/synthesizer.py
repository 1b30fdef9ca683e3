"""Synthetic OHLCV series anchored to a symbol's current price."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from ..core.exceptions import InvalidInputError
from ..core.logging import get_performance_logger
from .entities import RangeCode, StockReference, TimeSeries, TimeSeriesPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesizerConfig:
    """Tunable constants of the random walk."""

    volatility: float = 0.02
    open_jitter: float = 0.005
    high_low_spread: float = 0.01
    growth_threshold: float = 1.3
    growth_multiplier: float = 0.4
    decline_multiplier: float = 1.4
    default_volume: int = 10_000_000


def _round_up(value: float) -> float:
    return math.ceil(value * 100) / 100


def _round_down(value: float) -> float:
    return math.floor(value * 100) / 100


class SeriesSynthesizer:
    """Generates a plausible price history ending exactly at the current price.

    Output is random on every call. Pass ``rng`` only when a reproducible
    series is wanted (tests); by default each call draws from a fresh
    generator so concurrent requests share no state.
    """

    def __init__(
        self,
        config: SynthesizerConfig | None = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[np.random.Generator] = None,
    ):
        self.config = config or SynthesizerConfig()
        self._clock = clock
        self._rng = rng
        self._perf = get_performance_logger(__name__)

    def trend_multiplier(self, reference: StockReference, range_code: RangeCode) -> float:
        """Ratio of the starting anchor to the current price.

        Long ranges start well below the price when it sits comfortably above
        the 52-week low (growth), otherwise above it (decline).
        """
        if not range_code.is_long:
            return 1.0
        low = reference.low_52_week
        if low is not None and reference.price > low * self.config.growth_threshold:
            return self.config.growth_multiplier
        return self.config.decline_multiplier

    def starting_anchor(self, reference: StockReference, range_code: RangeCode) -> float:
        return reference.price * self.trend_multiplier(reference, range_code)

    def synthesize(self, reference: StockReference, range_code: RangeCode | str | None = None) -> TimeSeries:
        """Build the series for ``range_code``; unknown codes use the default shape."""
        if not isinstance(reference, StockReference):
            raise InvalidInputError("A resolved stock reference is required")

        if not isinstance(range_code, RangeCode):
            range_code = RangeCode.parse(range_code)

        shape = range_code.shape
        n = shape.points
        price = reference.price
        multiplier = self.trend_multiplier(reference, range_code)
        volume_base = self._volume_base(reference)
        rng = self._rng or np.random.default_rng()
        now = int(self._clock())

        points: list[TimeSeriesPoint] = []
        walk = 1.0
        for i in range(n - 1, -1, -1):
            progress = i / n
            target = price * (multiplier * progress + (1 - progress))
            if i != n - 1:
                drift = (n - i) / n
                walk *= 1 + (rng.random() - 0.5) * self.config.volatility * drift

            close = max(round(target * walk, 2), 0.01)
            timestamp = now - i * shape.interval_seconds
            points.append(self._bar(timestamp, close, volume_base, rng))

        points[-1] = self._bar(points[-1].timestamp, price, volume_base, rng)

        series = TimeSeries.of(points)
        self._perf.log_series_generation(
            reference.symbol, range_code.value, len(series), start_anchor=round(price * multiplier, 2)
        )
        return series

    def _volume_base(self, reference: StockReference) -> int:
        for candidate in (reference.avg_volume, reference.volume):
            if candidate and candidate > 0:
                return candidate
        return self.config.default_volume

    def _bar(self, timestamp: int, close: float, volume_base: int, rng: np.random.Generator) -> TimeSeriesPoint:
        open_ = round(close * (1 + (rng.random() - 0.5) * self.config.open_jitter), 2)
        high = _round_up(max(open_, close) * (1 + rng.random() * self.config.high_low_spread))
        low = _round_down(min(open_, close) * (1 - rng.random() * self.config.high_low_spread))
        return TimeSeriesPoint(
            timestamp=timestamp,
            open=open_,
            high=high,
            low=max(low, 0.0),
            close=close,
            volume=int(rng.random() * volume_base),
        )
