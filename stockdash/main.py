from fastapi import FastAPI

from .api import health, market_data, stocks
from .core.config import settings
from .core.error_handlers import setup_error_handlers
from .core.middleware import (
    setup_cors,
    setup_logging,
    setup_prometheus,
    setup_request_logging,
    setup_sentry,
)


def create_app() -> FastAPI:
    setup_logging()
    setup_sentry()

    app = FastAPI(title=settings.app_name, version=settings.app_version)

    setup_cors(app)
    setup_request_logging(app)
    setup_error_handlers(app)
    setup_prometheus(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(stocks.router, tags=["stocks"])
    app.include_router(market_data.router, tags=["market-data"])
    return app


app = create_app()
