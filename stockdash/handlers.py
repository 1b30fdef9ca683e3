"""Serverless (API Gateway proxy) entry points.

Each handler takes the Lambda ``event`` and ``context`` and returns the
``{statusCode, headers, body}`` envelope API Gateway expects. They share the
service container with the FastAPI app, so behaviour matches the HTTP API.
"""

import json
import logging
import time
from typing import Any

from .core.error_handlers import error_body, exception_body, log_app_exception
from .core.exceptions import BaseAppException
from .core.services import get_container
from .services.search import search_stocks

logger = logging.getLogger(__name__)

SEARCH_PARAM_NAMES = ("query", "keyword", "q", "search")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Content-Type": "application/json",
}


def create_response(status_code: int, body: Any) -> dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": json.dumps(body),
    }


def _query_params(event: dict) -> dict:
    return (event or {}).get("queryStringParameters") or {}


def _first(params: dict, *names: str):
    for name in names:
        if params.get(name):
            return params[name]
    return None


def _error_id() -> str:
    return format(int(time.time() * 1000), "x")


def _app_error(exc: BaseAppException) -> dict[str, Any]:
    log_app_exception(exc)
    return create_response(exc.status_code, exception_body(exc))


def _unhandled(message: str) -> dict[str, Any]:
    error_id = _error_id()
    logger.exception("Unhandled exception in handler (errorId=%s)", error_id)
    body = error_body("INTERNAL_SERVER_ERROR", message, {"errorId": error_id})
    body["errorId"] = error_id
    return create_response(500, body)


def probe_permissions(event: dict) -> dict[str, Any]:
    """Report whether the configured stores are reachable."""
    container = get_container()
    results: dict[str, Any] = {"success": True, "tests": {}}

    if event.get("testDynamoDB"):
        results["tests"]["dynamoDB"] = container.get_reference_store().probe()
    if event.get("testS3"):
        results["tests"]["s3"] = container.get_historical_store().probe()

    results["success"] = all(t.get("success") for t in results["tests"].values())
    return create_response(200, results)


def get_stock_data_handler(event: dict, context: Any = None) -> dict[str, Any]:
    if (event or {}).get("testType") == "permissions":
        return probe_permissions(event)

    params = _query_params(event)
    symbol = _first(params, "symbol", "Symbol")
    range_code = _first(params, "range", "Range")
    logger.info("Processing stock data request", extra={"symbol": symbol, "range": range_code})

    if not symbol:
        logger.warning("Missing required parameter: symbol")
        body = error_body("INVALID_INPUT", "Symbol parameter is required", {"receivedParams": params})
        return create_response(400, body)

    try:
        data = get_container().get_stock_data_service().get_stock_data(symbol, range_code)
    except BaseAppException as e:
        return _app_error(e)
    except Exception:
        return _unhandled("Failed to fetch stock data. Please try again.")

    return create_response(200, data)


def search_stocks_handler(event: dict, context: Any = None) -> dict[str, Any]:
    keyword = _first(_query_params(event), *SEARCH_PARAM_NAMES)
    logger.info("Processing search request", extra={"keyword": keyword})

    try:
        results = search_stocks(get_container().get_reference_store(), keyword)
    except BaseAppException as e:
        return _app_error(e)
    except Exception:
        return _unhandled("Failed to search stocks. Please try again.")

    return create_response(200, results)
