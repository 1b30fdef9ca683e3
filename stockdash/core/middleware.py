"""Middleware and optional integrations installed by ``create_app``."""

import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .config import settings
from .logging import get_performance_logger, setup_performance_logging

logger = logging.getLogger(__name__)


def setup_cors(app: FastAPI) -> None:
    """The dashboard is served from another origin and only reads."""
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentials with a wildcard origin
        allow_credentials=settings.cors_allow_credentials and origins != ["*"],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )
    logger.info("CORS enabled for %s", ", ".join(origins))


def setup_sentry() -> None:
    if not settings.sentry_dsn:
        return

    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
    except ImportError:
        logger.warning("SENTRY_DSN is set but sentry-sdk is not installed")
        return

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        integrations=[FastApiIntegration()],
        traces_sample_rate=settings.sentry_traces_sample_rate,
        profiles_sample_rate=settings.sentry_profiles_sample_rate,
        environment=settings.sentry_env,
        release=settings.git_sha or settings.app_version,
    )
    logger.info("Sentry reporting to environment %s", settings.sentry_env)


def setup_prometheus(app: FastAPI) -> None:
    """Expose request metrics at ``/metrics`` when the instrumentator is installed."""
    if not settings.metrics_enabled:
        logger.info("Prometheus metrics disabled")
        return

    try:
        from prometheus_fastapi_instrumentator import Instrumentator
    except ImportError:
        logger.warning("prometheus-fastapi-instrumentator not installed, /metrics unavailable")
        return

    Instrumentator(excluded_handlers=["/healthz", "/health/live", "/metrics"]).instrument(app).expose(
        app, include_in_schema=False
    )
    logger.info("Prometheus metrics enabled at /metrics")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes one record per request with status and duration."""

    def __init__(self, app):
        super().__init__(app)
        self.perf = get_performance_logger(__name__)

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        context = {"client_ip": request.client.host if request.client else "unknown"}
        symbol = request.query_params.get("symbol") or request.query_params.get("Symbol")
        if symbol:
            context["symbol"] = symbol

        try:
            response = await call_next(request)
        except Exception:
            self.perf.log_request(
                request.method, request.url.path, 500, time.perf_counter() - start, **context
            )
            raise

        self.perf.log_request(
            request.method, request.url.path, response.status_code, time.perf_counter() - start, **context
        )
        return response


def setup_logging() -> None:
    setup_performance_logging()


def setup_request_logging(app: FastAPI) -> None:
    app.add_middleware(RequestLoggingMiddleware)
