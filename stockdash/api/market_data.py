"""Third-party market data endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.services import ServiceContainer, get_container
from ..models.api_models import MarketSearchResult, StockDataResponse
from ..services.stock_data import merge_stock_data

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/market-data")


@router.get("/search", response_model=list[MarketSearchResult])
def search_market_symbols(
    keyword: str = "",
    container: ServiceContainer = Depends(get_container)
) -> list[dict]:
    """Provider symbol search; empty when the provider is not configured."""
    market_data = container.get_market_data()
    if not market_data.enabled:
        logger.debug("Market data provider not configured, returning no matches")
        return []
    return market_data.search_symbols(keyword)


@router.get("/stock-data", response_model=StockDataResponse)
def get_market_stock_data(
    symbol: str,
    range_code: str = Query("1M", alias="range"),
    container: ServiceContainer = Depends(get_container)
) -> dict:
    """Live provider series merged with the stored reference for the symbol."""
    market_data = container.get_market_data()
    if not market_data.enabled:
        raise HTTPException(status_code=503, detail="Market data provider is not configured")

    service = container.get_stock_data_service()
    reference = service.resolve(symbol)
    requested = range_code.strip().upper() or "1M"
    series = market_data.fetch_series(reference.symbol, requested)
    # Provider ranges (3M, 6M, 2Y) are wider than RangeCode, echo what was fetched
    return merge_stock_data(reference, series, requested)
