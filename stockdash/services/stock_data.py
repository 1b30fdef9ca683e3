"""Stock data assembly: reference lookup, historical series and the merged response."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..core.cache import ReferenceCache
from ..core.config import settings
from ..core.exceptions import NotFoundError
from ..core.interfaces import HistoricalStoreInterface, ReferenceStoreInterface
from ..domain.entities import RangeCode, StockReference, TickerSymbol, TimeSeries
from ..domain.synthesizer import SeriesSynthesizer

logger = logging.getLogger(__name__)


def merge_stock_data(reference: StockReference, series: TimeSeries, range_code: RangeCode | str) -> dict[str, Any]:
    """Combine a series with the live reference fields the dashboard shows."""
    return {
        **series.to_wire(),
        "currentPrice": reference.price,
        "change": reference.change,
        "changePercent": reference.change_percent,
        "companyName": reference.name,
        "symbol": reference.symbol,
        "range": range_code.value if isinstance(range_code, RangeCode) else range_code,
    }


class StockDataService:
    """Resolves symbols and serves their historical series."""

    def __init__(
        self,
        reference_store: ReferenceStoreInterface,
        historical_store: HistoricalStoreInterface,
        synthesizer: SeriesSynthesizer,
        allow_synthetic: bool | None = None,
        listing_ttl_seconds: float | None = None,
        clock: Callable[[], float] | None = None,
    ):
        self.reference_store = reference_store
        self.historical_store = historical_store
        self.synthesizer = synthesizer
        self.allow_synthetic = settings.allow_synthetic_data if allow_synthetic is None else allow_synthetic

        cache_kwargs: dict[str, Any] = {
            "ttl_seconds": listing_ttl_seconds or settings.reference_cache_ttl_seconds,
            "name": "stock-listing",
        }
        if clock is not None:
            cache_kwargs["clock"] = clock
        self._listing = ReferenceCache(reference_store.list_all, **cache_kwargs)

    def resolve(self, symbol: str) -> StockReference:
        ticker = TickerSymbol(symbol)
        reference = self.reference_store.get(ticker.value)
        if reference is None:
            logger.warning("Stock symbol not found: %s", ticker)
            raise NotFoundError(f"Stock symbol {ticker} not found", {"symbol": ticker.value})
        return reference

    def get_series(self, reference: StockReference, range_code: RangeCode) -> tuple[TimeSeries, str]:
        """Stored series when present, otherwise a synthetic one if allowed."""
        series = self.historical_store.get_series(reference.symbol, range_code)
        if series is not None:
            return series, "stored"

        if not self.allow_synthetic:
            raise NotFoundError(
                f"Historical data for {reference.symbol} with range {range_code.object_key_part} not found",
                {"symbol": reference.symbol, "range": range_code.value}
            )

        logger.debug("No stored series for %s/%s, synthesizing", reference.symbol, range_code.value)
        return self.synthesizer.synthesize(reference, range_code), "synthetic"

    def get_stock_data(self, symbol: str, range_code: str | RangeCode | None = None) -> dict[str, Any]:
        if not isinstance(range_code, RangeCode):
            range_code = RangeCode.parse(range_code, default=RangeCode.parse(settings.default_range))

        reference = self.resolve(symbol)
        series, source = self.get_series(reference, range_code)
        logger.info(
            "Serving %d points for %s (%s, %s)",
            len(series), reference.symbol, range_code.value, source
        )
        return merge_stock_data(reference, series, range_code)

    def list_stocks(self) -> list[StockReference]:
        return self._listing.get()

    def refresh_listing(self) -> None:
        self._listing.invalidate()
