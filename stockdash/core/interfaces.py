"""Service interfaces for dependency injection."""

from abc import ABC, abstractmethod

from ..domain.entities import RangeCode, StockReference, TimeSeries


class ReferenceStoreInterface(ABC):
    """Key-value store of stock references keyed by uppercase symbol."""

    @abstractmethod
    def get(self, symbol: str) -> StockReference | None:
        """Return the reference for ``symbol`` or None when absent."""
        pass

    @abstractmethod
    def put(self, reference: StockReference) -> None:
        """Insert or replace a reference."""
        pass

    @abstractmethod
    def list_all(self) -> list[StockReference]:
        """Return every stored reference."""
        pass

    def probe(self) -> dict:
        """Cheap access check used by the permissions probe."""
        return {"success": True, "itemCount": len(self.list_all())}


class HistoricalStoreInterface(ABC):
    """Object store of pre-generated series keyed by ``SYMBOL/range.json``."""

    @staticmethod
    def object_key(symbol: str, range_code: RangeCode) -> str:
        return f"{symbol.upper()}/{range_code.object_key_part}.json"

    @abstractmethod
    def get_series(self, symbol: str, range_code: RangeCode) -> TimeSeries | None:
        """Return the stored series or None when the object does not exist."""
        pass

    @abstractmethod
    def put_series(self, symbol: str, range_code: RangeCode, series: TimeSeries) -> None:
        """Store a series under its object key."""
        pass

    def probe(self) -> dict:
        return {"success": True}


class MarketDataInterface(ABC):
    """Third-party market data provider."""

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether the provider is configured for use."""
        pass

    @abstractmethod
    def fetch_series(self, symbol: str, range_code: str) -> TimeSeries:
        """Fetch a historical series for a symbol."""
        pass

    @abstractmethod
    def search_symbols(self, keyword: str) -> list[dict]:
        """Search provider symbols by keyword."""
        pass
