"""Tests for the reference and historical store implementations."""

import io
import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from stockdash.core.exceptions import StorageError
from stockdash.domain.entities import RangeCode
from stockdash.services.stores import (
    DynamoReferenceStore,
    InMemoryHistoricalStore,
    InMemoryReferenceStore,
    S3HistoricalStore,
)
from .utils import make_reference, make_series


def client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestInMemoryStores:

    def test_reference_round_trip(self):
        store = InMemoryReferenceStore()
        store.put(make_reference(symbol="MSFT", name="Microsoft Corporation"))

        assert store.get("msft").name == "Microsoft Corporation"
        assert store.get("NOPE") is None

    def test_list_all_sorted(self):
        store = InMemoryReferenceStore([make_reference(symbol="TSLA"), make_reference(symbol="AAPL")])
        assert [r.symbol for r in store.list_all()] == ["AAPL", "TSLA"]
        assert store.probe() == {"success": True, "itemCount": 2}

    def test_historical_round_trip(self):
        store = InMemoryHistoricalStore()
        series = make_series([1.0, 2.0, 3.0])

        store.put_series("aapl", RangeCode.ONE_MONTH, series)

        assert store.get_series("AAPL", RangeCode.ONE_MONTH) == series
        assert store.get_series("AAPL", RangeCode.ONE_YEAR) is None
        assert len(store) == 1

    def test_object_key(self):
        assert InMemoryHistoricalStore.object_key("aapl", RangeCode.TEN_YEARS) == "AAPL/10y.json"


class TestDynamoReferenceStore:

    def setup_method(self):
        self.table = MagicMock()
        self.store = DynamoReferenceStore(table_name="stock-data", table=self.table)

    def test_get_converts_item(self):
        self.table.get_item.return_value = {
            "Item": {"symbol": "AAPL", "name": "Apple Inc.", "price": Decimal("185.92"), "avgVolume": Decimal("100")}
        }

        reference = self.store.get("aapl")

        self.table.get_item.assert_called_once_with(Key={"symbol": "AAPL"})
        assert reference.price == 185.92
        assert reference.avg_volume == 100

    def test_get_missing_returns_none(self):
        self.table.get_item.return_value = {}
        assert self.store.get("ZZZ") is None

    def test_get_client_error_raises_storage_error(self):
        self.table.get_item.side_effect = client_error("ResourceNotFoundException", "GetItem")
        with pytest.raises(StorageError) as exc_info:
            self.store.get("AAPL")
        assert exc_info.value.details["table"] == "stock-data"

    def test_put_uses_decimals_and_drops_nulls(self):
        self.store.put(make_reference(market_cap=None))

        item = self.table.put_item.call_args.kwargs["Item"]
        assert item["price"] == Decimal("185.92")
        assert "marketCap" not in item
        assert item["volume"] == 48521400

    def test_list_all_follows_pagination_and_skips_bad_items(self):
        self.table.scan.side_effect = [
            {"Items": [{"symbol": "MSFT", "price": Decimal("415.43")}], "LastEvaluatedKey": {"symbol": "MSFT"}},
            {"Items": [{"symbol": "AAPL", "price": Decimal("185.92")}, {"symbol": "BAD"}]},
        ]

        references = self.store.list_all()

        assert [r.symbol for r in references] == ["AAPL", "MSFT"]
        assert self.table.scan.call_args_list[1].kwargs == {"ExclusiveStartKey": {"symbol": "MSFT"}}

    def test_probe(self):
        self.table.scan.return_value = {"Count": 1}
        assert self.store.probe() == {"success": True, "itemCount": 1}

        self.table.scan.side_effect = client_error("AccessDeniedException", "Scan")
        result = self.store.probe()
        assert result["success"] is False
        assert result["code"] == "AccessDeniedException"


class TestS3HistoricalStore:

    def setup_method(self):
        self.client = MagicMock()
        self.store = S3HistoricalStore(bucket="hist", client=self.client)

    def test_get_series_reads_object(self):
        series = make_series([5.0, 6.0])
        self.client.get_object.return_value = {"Body": io.BytesIO(json.dumps(series.to_wire()).encode())}

        assert self.store.get_series("aapl", RangeCode.ONE_MONTH) == series
        self.client.get_object.assert_called_once_with(Bucket="hist", Key="AAPL/1m.json")

    def test_missing_object_returns_none(self):
        self.client.get_object.side_effect = client_error("NoSuchKey")
        assert self.store.get_series("AAPL", RangeCode.ONE_YEAR) is None

    def test_other_errors_raise_storage_error(self):
        self.client.get_object.side_effect = client_error("AccessDenied")
        with pytest.raises(StorageError):
            self.store.get_series("AAPL", RangeCode.ONE_YEAR)

    def test_invalid_payload_raises_storage_error(self):
        self.client.get_object.return_value = {"Body": io.BytesIO(b"not json")}
        with pytest.raises(StorageError) as exc_info:
            self.store.get_series("AAPL", RangeCode.ONE_YEAR)
        assert exc_info.value.message == "Invalid historical data format"

    def test_put_series(self):
        self.store.put_series("msft", RangeCode.MAX, make_series([1.0]))

        kwargs = self.client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "hist"
        assert kwargs["Key"] == "MSFT/max.json"
        assert kwargs["ContentType"] == "application/json"
        assert json.loads(kwargs["Body"])["c"] == [1.0]

    def test_probe(self):
        self.client.list_objects_v2.return_value = {"Contents": [{"Key": "AAPL/1m.json"}]}
        assert self.store.probe() == {"success": True, "objectCount": 1}
