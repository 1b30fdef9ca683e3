"""Stock data and search endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ..core.services import ServiceContainer, get_container
from ..models.api_models import SearchResult, StockDataResponse, StockSummary
from ..services.search import search_stocks as run_search

logger = logging.getLogger(__name__)
router = APIRouter()

SEARCH_PARAM_NAMES = ("query", "keyword", "q", "search")


def first_param(params, *names: str) -> Optional[str]:
    for name in names:
        value = params.get(name)
        if value:
            return value
    return None


@router.get("/stock-data", response_model=StockDataResponse)
def get_stock_data(
    request: Request,
    container: ServiceContainer = Depends(get_container)
) -> dict:
    """Historical series for a symbol merged with its current quote."""
    params = request.query_params
    symbol = first_param(params, "symbol", "Symbol")
    range_code = first_param(params, "range", "Range")

    if not symbol:
        raise HTTPException(status_code=400, detail="Symbol parameter is required")

    logger.debug("Processing request for %s (%s)", symbol, range_code)
    return container.get_stock_data_service().get_stock_data(symbol, range_code)


@router.get("/search-stocks", response_model=list[SearchResult])
def search_stocks(
    request: Request,
    container: ServiceContainer = Depends(get_container)
) -> list[dict]:
    """Match symbols and company names against a keyword."""
    keyword = first_param(request.query_params, *SEARCH_PARAM_NAMES)
    return run_search(container.get_reference_store(), keyword)


@router.get("/stocks", response_model=list[StockSummary])
def list_stocks(container: ServiceContainer = Depends(get_container)) -> list[StockSummary]:
    """Every stock reference record, served from the listing cache."""
    references = container.get_stock_data_service().list_stocks()
    logger.info("Listing %d stocks", len(references))
    return [StockSummary.from_reference(r) for r in references]


@router.get("/stocks/{symbol}", response_model=StockSummary)
def get_stock(
    symbol: str,
    container: ServiceContainer = Depends(get_container)
) -> StockSummary:
    """Reference record of one symbol."""
    reference = container.get_stock_data_service().resolve(symbol)
    return StockSummary.from_reference(reference)
