"""Sample stock universe and the loader that seeds the stores with it.

Run ``python -m stockdash.services.sample_data`` to populate the configured
backend (DynamoDB table and S3 bucket when ``STORAGE_BACKEND=aws``).
"""

from __future__ import annotations

import logging

from ..core.interfaces import HistoricalStoreInterface, ReferenceStoreInterface
from ..core.logging import get_performance_logger, log_performance
from ..domain.entities import RangeCode, StockReference
from ..domain.synthesizer import SeriesSynthesizer

logger = logging.getLogger(__name__)

SAMPLE_STOCKS: dict[str, dict] = {
    "AAPL": {
        "name": "Apple Inc.",
        "price": 185.92,
        "change": 1.78,
        "changePercent": 0.97,
        "high52Week": 199.62,
        "low52Week": 141.39,
        "marketCap": "2.87T",
        "volume": 48521400,
        "avgVolume": 56395400,
    },
    "MSFT": {
        "name": "Microsoft Corporation",
        "price": 415.43,
        "change": 2.42,
        "changePercent": 0.59,
        "high52Week": 430.82,
        "low52Week": 310.10,
        "marketCap": "3.09T",
        "volume": 19246000,
        "avgVolume": 21340200,
    },
    "GOOGL": {
        "name": "Alphabet Inc.",
        "price": 164.58,
        "change": -0.72,
        "changePercent": -0.43,
        "high52Week": 178.77,
        "low52Week": 115.36,
        "marketCap": "2.01T",
        "volume": 18564300,
        "avgVolume": 19875500,
    },
    "AMZN": {
        "name": "Amazon.com, Inc.",
        "price": 177.23,
        "change": 0.83,
        "changePercent": 0.47,
        "high52Week": 185.10,
        "low52Week": 115.48,
        "marketCap": "1.84T",
        "volume": 31427600,
        "avgVolume": 34892700,
    },
    "META": {
        "name": "Meta Platforms, Inc.",
        "price": 471.92,
        "change": 3.21,
        "changePercent": 0.68,
        "high52Week": 531.49,
        "low52Week": 258.04,
        "marketCap": "1.19T",
        "volume": 12845700,
        "avgVolume": 14562300,
    },
    "TSLA": {
        "name": "Tesla, Inc.",
        "price": 248.42,
        "change": -3.78,
        "changePercent": -1.50,
        "high52Week": 299.29,
        "low52Week": 138.80,
        "marketCap": "792.43B",
        "volume": 98562400,
        "avgVolume": 106234500,
    },
    "NVDA": {
        "name": "NVIDIA Corporation",
        "price": 118.71,
        "change": 2.13,
        "changePercent": 1.83,
        "high52Week": 140.76,
        "low52Week": 41.04,
        "marketCap": "2.93T",
        "volume": 134621800,
        "avgVolume": 141235600,
    },
}


def sample_references() -> list[StockReference]:
    return [StockReference.from_item({"symbol": symbol, **data}) for symbol, data in SAMPLE_STOCKS.items()]


def load_sample_data(
    reference_store: ReferenceStoreInterface,
    historical_store: HistoricalStoreInterface | None = None,
    synthesizer: SeriesSynthesizer | None = None,
    ranges: list[RangeCode] | None = None,
) -> dict[str, int]:
    """Write the sample references and, if a historical store is given, one series per range."""
    perf = get_performance_logger(__name__)
    synthesizer = synthesizer or SeriesSynthesizer()
    ranges = ranges or list(RangeCode)
    counts = {"references": 0, "series": 0}

    with perf.time_operation("load_sample_data", stocks=len(SAMPLE_STOCKS)):
        for reference in sample_references():
            reference_store.put(reference)
            counts["references"] += 1

            if historical_store is None:
                continue
            for range_code in ranges:
                historical_store.put_series(
                    reference.symbol, range_code, synthesizer.synthesize(reference, range_code)
                )
                counts["series"] += 1

    logger.info(
        "Loaded %d references and %d historical series",
        counts["references"], counts["series"]
    )
    return counts


@log_performance("seed_stores")
def main() -> None:
    from ..core.logging import setup_performance_logging
    from ..core.services import get_container

    setup_performance_logging()
    container = get_container()
    load_sample_data(
        container.get_reference_store(),
        container.get_historical_store(),
        container.get_synthesizer(),
    )


if __name__ == "__main__":
    main()
