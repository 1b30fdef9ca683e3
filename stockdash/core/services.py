"""Service wiring with dependency injection support."""

import logging

from ..domain.synthesizer import SeriesSynthesizer, SynthesizerConfig
from .config import settings
from .exceptions import ConfigurationError
from .interfaces import HistoricalStoreInterface, MarketDataInterface, ReferenceStoreInterface

logger = logging.getLogger(__name__)


def _require_aws_setting(name: str) -> str:
    value = getattr(settings, name)
    if not value:
        raise ConfigurationError(f"AWS storage requires {name.upper()} to be set", {name: value})
    return value


def _default_reference_store() -> ReferenceStoreInterface:
    from ..services import stores

    if settings.uses_aws:
        table = _require_aws_setting("stock_table")
        logger.info("Using DynamoDB reference store (table=%s)", table)
        return stores.DynamoReferenceStore(table_name=table)

    reference_store = stores.InMemoryReferenceStore()
    if settings.seed_sample_data:
        from ..services.sample_data import load_sample_data
        load_sample_data(reference_store)
    return reference_store


def _default_historical_store() -> HistoricalStoreInterface:
    from ..services import stores

    if settings.uses_aws:
        bucket = _require_aws_setting("historical_bucket")
        logger.info("Using S3 historical store (bucket=%s)", bucket)
        return stores.S3HistoricalStore(bucket=bucket)
    return stores.InMemoryHistoricalStore()


class ServiceContainer:
    """Container for service dependencies."""

    def __init__(
        self,
        reference_store: ReferenceStoreInterface | None = None,
        historical_store: HistoricalStoreInterface | None = None,
        synthesizer: SeriesSynthesizer | None = None,
        market_data: MarketDataInterface | None = None,
    ):
        from ..services.alpha_vantage import AlphaVantageClient
        from ..services.stock_data import StockDataService

        self.reference_store = reference_store if reference_store is not None else _default_reference_store()
        self.historical_store = (
            historical_store if historical_store is not None else _default_historical_store()
        )
        self.synthesizer = synthesizer or SeriesSynthesizer(
            SynthesizerConfig(volatility=settings.synth_volatility)
        )
        self.market_data = market_data or AlphaVantageClient()
        self.stock_data_service = StockDataService(
            self.reference_store, self.historical_store, self.synthesizer
        )

    def get_reference_store(self) -> ReferenceStoreInterface:
        """Get reference store instance."""
        return self.reference_store

    def get_historical_store(self) -> HistoricalStoreInterface:
        """Get historical store instance."""
        return self.historical_store

    def get_synthesizer(self) -> SeriesSynthesizer:
        return self.synthesizer

    def get_market_data(self) -> MarketDataInterface:
        """Get market data provider instance."""
        return self.market_data

    def get_stock_data_service(self):
        """Get stock data service instance."""
        return self.stock_data_service


# Global service container instance
_service_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the global service container."""
    global _service_container
    if _service_container is None:
        _service_container = ServiceContainer()
    return _service_container


def set_container(container: ServiceContainer | None) -> None:
    """Set the global service container (for testing)."""
    global _service_container
    _service_container = container
