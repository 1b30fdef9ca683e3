"""Domain entities representing core business objects."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping, Optional

import pandas as pd

from ..core.exceptions import InvalidInputError


class TickerSymbol:
    """Value object representing a validated stock ticker symbol."""

    _PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,15}$")

    def __init__(self, value: str):
        if not value or not isinstance(value, str):
            raise InvalidInputError("Symbol must be a non-empty string")

        value = value.strip()
        if not self._PATTERN.match(value):
            raise InvalidInputError(f"Invalid symbol format: {value}", {"symbol": value})

        self._value = value.upper()

    @property
    def value(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"TickerSymbol('{self._value}')"

    def __eq__(self, other) -> bool:
        if isinstance(other, TickerSymbol):
            return self._value == other._value
        return False

    def __hash__(self) -> int:
        return hash(self._value)


@dataclass(frozen=True)
class RangeShape:
    """Number of bars and spacing between them for one range code."""

    points: int
    interval_minutes: int

    @property
    def interval_seconds(self) -> int:
        return self.interval_minutes * 60


class RangeCode(str, Enum):
    """Span and granularity of a historical series."""
    ONE_DAY = "1D"
    FIVE_DAYS = "5D"
    ONE_MONTH = "1M"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"
    TEN_YEARS = "10Y"
    MAX = "MAX"

    @property
    def shape(self) -> RangeShape:
        return RANGE_SHAPES[self]

    @property
    def is_long(self) -> bool:
        """Long ranges are drawn as a growth or decline trend."""
        return self in LONG_RANGES

    @property
    def object_key_part(self) -> str:
        """Lowercase token used in object store keys (``AAPL/1m.json``)."""
        return self.value.lower()

    @classmethod
    def parse(cls, raw: Optional[str], default: "RangeCode | None" = None, strict: bool = False) -> "RangeCode":
        """Parse a range code case-insensitively.

        Absent values resolve to ``default`` (``1M`` unless given). Unknown
        codes also fall back to the default unless ``strict`` is set, in which
        case they raise ``InvalidInputError``.
        """
        fallback = default or DEFAULT_RANGE
        if raw is None or not str(raw).strip():
            return fallback
        token = str(raw).strip().upper()
        try:
            return cls(token)
        except ValueError:
            if strict:
                raise InvalidInputError(
                    f"Unknown range code: {raw}",
                    {"range": raw, "allowed": [r.value for r in cls]}
                ) from None
            return fallback


RANGE_SHAPES: dict[RangeCode, RangeShape] = {
    RangeCode.ONE_DAY: RangeShape(points=39, interval_minutes=10),
    RangeCode.FIVE_DAYS: RangeShape(points=32, interval_minutes=48),
    RangeCode.ONE_MONTH: RangeShape(points=22, interval_minutes=24 * 60),
    RangeCode.ONE_YEAR: RangeShape(points=52, interval_minutes=7 * 24 * 60),
    RangeCode.FIVE_YEARS: RangeShape(points=60, interval_minutes=30 * 24 * 60),
    RangeCode.TEN_YEARS: RangeShape(points=120, interval_minutes=30 * 24 * 60),
    RangeCode.MAX: RangeShape(points=180, interval_minutes=30 * 24 * 60),
}

LONG_RANGES = frozenset({RangeCode.FIVE_YEARS, RangeCode.TEN_YEARS, RangeCode.MAX})

DEFAULT_RANGE = RangeCode.ONE_MONTH


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _non_negative(value: Optional[float]) -> Optional[float]:
    # Volumes below zero are treated as unknown
    return value if value is not None and value >= 0 else None


@dataclass(frozen=True)
class StockReference:
    """Reference attributes of one symbol as kept in the key-value store."""

    symbol: str
    price: float
    name: str = ""
    change: Optional[float] = None
    change_percent: Optional[float] = None
    high_52_week: Optional[float] = None
    low_52_week: Optional[float] = None
    market_cap: Optional[str] = None
    volume: Optional[int] = None
    avg_volume: Optional[int] = None

    def __post_init__(self):
        if not math.isfinite(self.price):
            raise InvalidInputError("Price must be a finite number", {"symbol": self.symbol})
        if self.price < 0:
            raise InvalidInputError("Price must not be negative", {"symbol": self.symbol, "price": self.price})

    @classmethod
    def from_item(cls, item: Optional[Mapping[str, Any]]) -> "StockReference":
        """Build a reference from a store item using the camelCase attribute names."""
        if not item:
            raise InvalidInputError("Stock reference is missing")

        symbol = item.get("symbol")
        if not symbol:
            raise InvalidInputError("Stock reference has no symbol")

        price = _optional_float(item.get("price"))
        if price is None:
            raise InvalidInputError(
                f"Stock reference for {symbol} has no usable price",
                {"symbol": symbol, "price": str(item.get("price"))}
            )

        volume = _non_negative(_optional_float(item.get("volume")))
        avg_volume = _non_negative(_optional_float(item.get("avgVolume")))
        market_cap = item.get("marketCap")

        return cls(
            symbol=str(symbol).upper(),
            price=price,
            name=str(item.get("name") or ""),
            change=_optional_float(item.get("change")),
            change_percent=_optional_float(item.get("changePercent")),
            high_52_week=_optional_float(item.get("high52Week")),
            low_52_week=_optional_float(item.get("low52Week")),
            market_cap=str(market_cap) if market_cap is not None else None,
            volume=int(volume) if volume is not None else None,
            avg_volume=int(avg_volume) if avg_volume is not None else None,
        )

    def to_item(self) -> dict[str, Any]:
        """Serialize with the attribute names the store and frontend use."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
            "high52Week": self.high_52_week,
            "low52Week": self.low_52_week,
            "marketCap": self.market_cap,
            "volume": self.volume,
            "avgVolume": self.avg_volume,
        }


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One OHLCV bar."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: int

    @property
    def is_consistent(self) -> bool:
        return self.low <= min(self.open, self.close) and max(self.open, self.close) <= self.high


_WIRE_COLUMNS = ("t", "o", "h", "l", "c", "v")


@dataclass(frozen=True)
class TimeSeries:
    """Ordered bars, oldest first, with strictly increasing timestamps."""

    points: tuple[TimeSeriesPoint, ...]

    def __post_init__(self):
        if not self.points:
            raise ValueError("Time series must contain at least one point")

        for previous, current in zip(self.points, self.points[1:]):
            if current.timestamp <= previous.timestamp:
                raise ValueError(
                    f"Timestamps must strictly increase ({previous.timestamp} -> {current.timestamp})"
                )

    @classmethod
    def of(cls, points: Iterable[TimeSeriesPoint]) -> "TimeSeries":
        return cls(tuple(points))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    @property
    def first(self) -> TimeSeriesPoint:
        return self.points[0]

    @property
    def last(self) -> TimeSeriesPoint:
        return self.points[-1]

    def to_wire(self) -> dict[str, list]:
        """Column-oriented ``{t, o, h, l, c, v}`` shape read by the chart."""
        return {
            "t": [p.timestamp for p in self.points],
            "o": [p.open for p in self.points],
            "h": [p.high for p in self.points],
            "l": [p.low for p in self.points],
            "c": [p.close for p in self.points],
            "v": [p.volume for p in self.points],
        }

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "TimeSeries":
        """Parse the column-oriented shape; raises ``ValueError`` when malformed."""
        missing = [col for col in _WIRE_COLUMNS if col not in payload]
        if missing:
            raise ValueError(f"Missing series columns: {missing}")

        lengths = {len(payload[col]) for col in _WIRE_COLUMNS}
        if len(lengths) != 1:
            raise ValueError("Series columns have different lengths")

        points = [
            TimeSeriesPoint(
                timestamp=int(t),
                open=float(o),
                high=float(h),
                low=float(low),
                close=float(c),
                volume=int(v),
            )
            for t, o, h, low, c, v in zip(*(payload[col] for col in _WIRE_COLUMNS))
        ]
        return cls.of(points)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "TimeSeries":
        """Build from a DataFrame with Open/High/Low/Close/Volume columns and a datetime index."""
        required_columns = ['Open', 'High', 'Low', 'Close', 'Volume']
        missing_columns = [col for col in required_columns if col not in df.columns]
        if missing_columns:
            raise ValueError(f"Missing required columns: {missing_columns}")

        df = df.sort_index()
        index = pd.to_datetime(df.index)
        points = [
            TimeSeriesPoint(
                timestamp=int(ts.timestamp()),
                open=float(row.Open),
                high=float(row.High),
                low=float(row.Low),
                close=float(row.Close),
                volume=int(row.Volume),
            )
            for ts, row in zip(index, df.itertuples(index=False))
        ]
        return cls.of(points)
