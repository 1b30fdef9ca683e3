"""Reference (key-value) and historical (object) store implementations."""

from __future__ import annotations

import json
import logging
import threading
from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import settings
from ..core.exceptions import InvalidInputError, StorageError
from ..core.interfaces import HistoricalStoreInterface, ReferenceStoreInterface
from ..core.logging import get_performance_logger
from ..domain.entities import RangeCode, StockReference, TimeSeries

logger = logging.getLogger(__name__)
perf = get_performance_logger(__name__)


class InMemoryReferenceStore(ReferenceStoreInterface):
    """Dictionary-backed reference store for development and tests."""

    def __init__(self, references: list[StockReference] | None = None):
        self._lock = threading.Lock()
        self._items: dict[str, StockReference] = {}
        for reference in references or []:
            self.put(reference)

    def get(self, symbol: str) -> StockReference | None:
        perf.log_store_operation("memory-references", "get", symbol.upper())
        with self._lock:
            return self._items.get(symbol.upper())

    def put(self, reference: StockReference) -> None:
        perf.log_store_operation("memory-references", "put", reference.symbol)
        with self._lock:
            self._items[reference.symbol.upper()] = reference

    def list_all(self) -> list[StockReference]:
        with self._lock:
            return sorted(self._items.values(), key=lambda r: r.symbol)


class InMemoryHistoricalStore(HistoricalStoreInterface):
    """Keeps serialized series in a dict keyed like the object store."""

    def __init__(self):
        self._lock = threading.Lock()
        self._objects: dict[str, str] = {}

    def get_series(self, symbol: str, range_code: RangeCode) -> TimeSeries | None:
        key = self.object_key(symbol, range_code)
        perf.log_store_operation("memory-historical", "get", key)
        with self._lock:
            body = self._objects.get(key)
        if body is None:
            return None
        return TimeSeries.from_wire(json.loads(body))

    def put_series(self, symbol: str, range_code: RangeCode, series: TimeSeries) -> None:
        key = self.object_key(symbol, range_code)
        perf.log_store_operation("memory-historical", "put", key, points=len(series))
        with self._lock:
            self._objects[key] = json.dumps(series.to_wire())

    def __len__(self) -> int:
        return len(self._objects)


def _to_dynamo(item: dict[str, Any]) -> dict[str, Any]:
    # DynamoDB rejects floats and empty attributes
    out = {}
    for key, value in item.items():
        if value is None:
            continue
        if isinstance(value, float):
            value = Decimal(str(value))
        out[key] = value
    return out


class DynamoReferenceStore(ReferenceStoreInterface):
    """Reference store backed by a DynamoDB table keyed on ``symbol``."""

    def __init__(self, table_name: str | None = None, region: str | None = None, table=None):
        self.table_name = table_name or settings.stock_table
        if table is None:
            dynamodb = boto3.resource("dynamodb", region_name=region or settings.aws_region)
            table = dynamodb.Table(self.table_name)
        self._table = table

    def get(self, symbol: str) -> StockReference | None:
        key = symbol.upper()
        perf.log_store_operation("dynamodb", "get", key, table=self.table_name)
        try:
            response = self._table.get_item(Key={"symbol": key})
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB get_item failed for %s: %s", key, e)
            raise StorageError(
                "Failed to retrieve stock data from database",
                {"symbol": key, "table": self.table_name}
            ) from e

        item = response.get("Item")
        if not item:
            return None
        return StockReference.from_item(item)

    def put(self, reference: StockReference) -> None:
        perf.log_store_operation("dynamodb", "put", reference.symbol, table=self.table_name)
        try:
            self._table.put_item(Item=_to_dynamo(reference.to_item()))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(
                f"Failed to store {reference.symbol}",
                {"symbol": reference.symbol, "table": self.table_name}
            ) from e

    def _scan_items(self, **kwargs) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        try:
            while True:
                response = self._table.scan(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    return items
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            logger.error("DynamoDB scan failed on %s: %s", self.table_name, e)
            raise StorageError("Failed to scan stock table", {"table": self.table_name}) from e

    def list_all(self) -> list[StockReference]:
        perf.log_store_operation("dynamodb", "scan", "*", table=self.table_name)
        references = []
        for item in self._scan_items():
            try:
                references.append(StockReference.from_item(item))
            except InvalidInputError as e:
                logger.warning("Skipping malformed stock item %s: %s", item.get("symbol"), e)
        return sorted(references, key=lambda r: r.symbol)

    def probe(self) -> dict:
        try:
            response = self._table.scan(Limit=1)
        except (ClientError, BotoCoreError) as e:
            error = e.response.get("Error", {}) if isinstance(e, ClientError) else {}
            return {"success": False, "error": str(e), "code": error.get("Code")}
        return {"success": True, "itemCount": response.get("Count", 0)}


class S3HistoricalStore(HistoricalStoreInterface):
    """Historical series stored as JSON objects in an S3 bucket."""

    def __init__(self, bucket: str | None = None, region: str | None = None, client=None):
        self.bucket = bucket or settings.historical_bucket
        self._client = client or boto3.client("s3", region_name=region or settings.aws_region)

    def get_series(self, symbol: str, range_code: RangeCode) -> TimeSeries | None:
        key = self.object_key(symbol, range_code)
        perf.log_store_operation("s3", "get", key, bucket=self.bucket)
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            body = response["Body"].read()
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            logger.error("S3 get_object failed for %s: %s", key, e)
            raise StorageError("Failed to retrieve historical data", {"key": key}) from e
        except BotoCoreError as e:
            raise StorageError("Failed to retrieve historical data", {"key": key}) from e

        try:
            return TimeSeries.from_wire(json.loads(body))
        except ValueError as e:
            logger.error("Invalid historical data in %s: %s", key, e)
            raise StorageError("Invalid historical data format", {"key": key}) from e

    def put_series(self, symbol: str, range_code: RangeCode, series: TimeSeries) -> None:
        key = self.object_key(symbol, range_code)
        perf.log_store_operation("s3", "put", key, bucket=self.bucket, points=len(series))
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=json.dumps(series.to_wire()),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload {key}", {"key": key}) from e

    def probe(self) -> dict:
        try:
            response = self._client.list_objects_v2(Bucket=self.bucket, MaxKeys=1)
        except (ClientError, BotoCoreError) as e:
            error = e.response.get("Error", {}) if isinstance(e, ClientError) else {}
            return {"success": False, "error": str(e), "code": error.get("Code")}
        return {"success": True, "objectCount": len(response.get("Contents", []))}
