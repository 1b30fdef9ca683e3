"""API request and response models."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..domain.entities import StockReference


class StockDataResponse(BaseModel):
    """Historical series merged with live reference fields."""
    t: List[int] = Field(..., description="Bar timestamps, seconds since epoch, oldest first")
    o: List[float] = Field(..., description="Open prices")
    h: List[float] = Field(..., description="High prices")
    l: List[float] = Field(..., description="Low prices")  # noqa: E741
    c: List[float] = Field(..., description="Close prices")
    v: List[int] = Field(..., description="Volumes")
    currentPrice: float = Field(..., description="Current stock price")
    change: Optional[float] = Field(None, description="Price change since previous close")
    changePercent: Optional[float] = Field(None, description="Percent change since previous close")
    companyName: str = Field("", description="Company name")
    symbol: str = Field(..., description="Stock ticker symbol")
    range: str = Field(..., description="Range code of the series")


class StockSummary(BaseModel):
    """Reference record of one stock."""
    symbol: str = Field(..., description="Stock ticker symbol")
    name: str = Field("", description="Company name")
    price: float = Field(..., description="Current stock price")
    change: Optional[float] = None
    changePercent: Optional[float] = None
    high52Week: Optional[float] = None
    low52Week: Optional[float] = None
    marketCap: Optional[str] = None
    volume: Optional[int] = None
    avgVolume: Optional[int] = None

    @classmethod
    def from_reference(cls, reference: StockReference) -> "StockSummary":
        return cls(**reference.to_item())


class SearchResult(BaseModel):
    """Symbol search match."""
    symbol: str = Field(..., description="Stock ticker symbol")
    name: str = Field(..., description="Company name")


class MarketSearchResult(BaseModel):
    """Symbol search match from the market data provider."""
    symbol: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    region: Optional[str] = None


class HealthResponse(BaseModel):
    """Service status and the backends it is wired to."""
    status: str = Field(..., description="Service status")
    storage: str = Field(..., description="Storage backend, memory or aws")
    marketData: bool = Field(..., description="Whether the market data provider is configured")
    syntheticData: bool = Field(..., description="Whether missing series are synthesized")


class ReadinessResponse(BaseModel):
    """Result of probing the reference and historical stores."""
    ready: bool
    checks: Dict[str, Dict[str, Any]]


class VersionResponse(BaseModel):
    """Version information response."""
    app: str = Field(..., description="Application name")
    version: str = Field(..., description="Application version")
    git_sha: Optional[str] = Field(None, description="Git commit SHA")
