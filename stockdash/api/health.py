"""Liveness, readiness and version endpoints."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..core.config import settings
from ..core.services import ServiceContainer, get_container
from ..models.api_models import HealthResponse, ReadinessResponse, VersionResponse

router = APIRouter()


@router.get("/healthz", response_model=HealthResponse)
def health_check(container: ServiceContainer = Depends(get_container)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        storage=settings.storage_backend.value,
        marketData=container.get_market_data().enabled,
        syntheticData=container.get_stock_data_service().allow_synthetic,
    )


@router.get("/health/live")
def liveness_probe():
    return {"status": "alive"}


@router.get("/health/ready", response_model=ReadinessResponse)
def readiness_probe(container: ServiceContainer = Depends(get_container)):
    """Probe both stores; 503 until they are reachable."""
    checks = {
        "references": container.get_reference_store().probe(),
        "historical": container.get_historical_store().probe(),
    }
    ready = all(check.get("success") for check in checks.values())
    body = ReadinessResponse(ready=ready, checks=checks)
    if not ready:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body


@router.get("/version", response_model=VersionResponse)
def get_version() -> VersionResponse:
    return VersionResponse(
        app=settings.app_name,
        version=settings.app_version,
        git_sha=settings.git_sha
    )
