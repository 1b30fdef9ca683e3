"""Alpha Vantage market data client."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd
import requests

from ..core.config import settings
from ..core.exceptions import InvalidInputError, MarketDataError
from ..core.interfaces import MarketDataInterface
from ..core.logging import get_performance_logger
from ..domain.entities import TickerSymbol, TimeSeries

logger = logging.getLogger(__name__)

MAX_POINTS = 100


@dataclass(frozen=True)
class TimeSeriesParams:
    function: str
    output_size: str
    interval: Optional[str] = None

    @property
    def series_key(self) -> str:
        """Key of the series object in the provider response."""
        if self.function == "TIME_SERIES_INTRADAY":
            return f"Time Series ({self.interval})"
        if self.function == "TIME_SERIES_WEEKLY":
            return "Weekly Time Series"
        if self.function == "TIME_SERIES_MONTHLY":
            return "Monthly Time Series"
        return "Time Series (Daily)"


def time_series_params(range_code: str) -> TimeSeriesParams:
    code = (range_code or "").strip().upper()
    if code == "1D":
        return TimeSeriesParams("TIME_SERIES_INTRADAY", "compact", "5min")
    if code == "5D":
        return TimeSeriesParams("TIME_SERIES_INTRADAY", "full", "30min")
    if code == "1M":
        return TimeSeriesParams("TIME_SERIES_DAILY", "compact")
    if code in ("3M", "6M"):
        return TimeSeriesParams("TIME_SERIES_DAILY", "full")
    if code in ("1Y", "2Y"):
        return TimeSeriesParams("TIME_SERIES_WEEKLY", "full")
    return TimeSeriesParams("TIME_SERIES_MONTHLY", "full")


def _make_session() -> requests.Session:
    s = requests.Session()
    s.headers.update({"Accept": "application/json"})
    # Inherit proxies from environment if set
    for k in ("http", "https"):
        env = os.getenv(f"{k.upper()}_PROXY")
        if env:
            s.proxies[k] = env
    return s


def parse_time_series(raw: dict[str, Any], limit: int = MAX_POINTS) -> TimeSeries:
    """Turn the provider's ``{timestamp: {"1. open": ...}}`` mapping into a series."""
    if not raw:
        raise MarketDataError("Empty time series from provider")

    df = pd.DataFrame.from_dict(raw, orient="index")
    # Field names are "1. open", "2. high", ... with some payloads using bare names
    df = df.rename(columns=lambda c: str(c).split(". ", 1)[-1].capitalize())
    df.index = pd.to_datetime(df.index)
    df = df.apply(pd.to_numeric, errors="coerce").dropna()
    df = df.sort_index()
    if len(df) > limit:
        df = df.iloc[-limit:]

    try:
        return TimeSeries.from_frame(df)
    except ValueError as e:
        raise MarketDataError(f"Unexpected data format from provider: {e}") from e


class AlphaVantageClient(MarketDataInterface):
    """Fetches time series and symbol search results over HTTP."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key if api_key is not None else settings.alpha_vantage_api_key
        self.base_url = base_url or settings.alpha_vantage_base_url
        self.timeout = timeout or settings.request_timeout_seconds
        self._session = session or _make_session()
        self._perf = get_performance_logger(__name__)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def _query(self, params: dict[str, Any]) -> dict[str, Any]:
        if not self.enabled:
            raise MarketDataError("Alpha Vantage API key is not configured")

        try:
            r = self._session.get(
                self.base_url,
                params={**params, "apikey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MarketDataError(f"Request to market data provider failed: {e}") from e

        if r.status_code != 200:
            raise MarketDataError(
                f"Market data provider returned HTTP {r.status_code}",
                {"status_code": r.status_code}
            )

        try:
            data = r.json()
        except ValueError as e:
            raise MarketDataError("Market data provider returned invalid JSON") from e

        if data.get("Error Message"):
            raise MarketDataError(data["Error Message"], {"function": params.get("function")})
        if data.get("Note"):
            logger.warning("Alpha Vantage API limit message: %s", data["Note"])
        return data

    def fetch_series(self, symbol: str, range_code: str) -> TimeSeries:
        ticker = TickerSymbol(symbol).value
        params = time_series_params(range_code)

        query = {
            "function": params.function,
            "symbol": ticker,
            "outputsize": params.output_size,
        }
        if params.interval:
            query["interval"] = params.interval

        with self._perf.time_operation("alpha_vantage_fetch", symbol=ticker, range=range_code):
            data = self._query(query)

        raw = data.get(params.series_key)
        if not raw:
            raise MarketDataError(
                "No data available for this symbol and timeframe",
                {"symbol": ticker, "range": range_code}
            )
        return parse_time_series(raw)

    def search_symbols(self, keyword: str) -> list[dict]:
        """Search for symbols; returns an empty list on provider failure."""
        if not keyword or not keyword.strip():
            return []

        try:
            data = self._query({"function": "SYMBOL_SEARCH", "keywords": keyword.strip()})
        except (MarketDataError, InvalidInputError) as e:
            logger.error("Error searching stock symbols: %s", e)
            return []

        matches = data.get("bestMatches")
        if not isinstance(matches, list):
            logger.warning("No matches found or unexpected response format")
            return []

        return [
            {
                "symbol": item.get("1. symbol"),
                "name": item.get("2. name"),
                "type": item.get("3. type"),
                "region": item.get("4. region"),
            }
            for item in matches
        ]
