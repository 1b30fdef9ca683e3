from __future__ import annotations

from stockdash.domain.entities import StockReference, TimeSeries, TimeSeriesPoint


def make_reference(**overrides) -> StockReference:
    data = {
        "symbol": "AAPL",
        "name": "Apple Inc.",
        "price": 185.92,
        "change": 1.78,
        "change_percent": 0.97,
        "high_52_week": 199.62,
        "low_52_week": 141.39,
        "market_cap": "2.87T",
        "volume": 48521400,
        "avg_volume": 56395400,
    }
    data.update(overrides)
    return StockReference(**data)


def make_series(closes: list[float], start: int = 1_700_000_000, step: int = 86400) -> TimeSeries:
    return TimeSeries.of(
        TimeSeriesPoint(
            timestamp=start + i * step,
            open=c,
            high=round(c * 1.01, 2),
            low=round(c * 0.99, 2),
            close=c,
            volume=1000 + i,
        )
        for i, c in enumerate(closes)
    )


class FakeClock:
    """Manually advanced clock for cache and timestamp tests."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
