"""
ReceiptScan Backend: Receipt Store Unit Tests
=============================================

What:  Row writes and newest-first range reads against a fake OTSClient.
"""

from unittest.mock import MagicMock

import pytest
from tablestore import INF_MAX, INF_MIN, Condition, Direction

from receiptscan.exceptions import StoreError
from receiptscan.models.receipt import ReceiptRecord
from receiptscan.services.receipt_store import ReceiptStore


class TestPutReceipt:

    @pytest.mark.asyncio
    async def test_writes_row_keyed_by_user_and_timestamp(self, receipt_store, fake_ots):
        record = ReceiptRecord("Cafe X", "12.50", "Card", timestamp=1000)

        consumed = await receipt_store.put_receipt("u1", record)

        assert consumed == "consumed"
        table_name, row, condition = fake_ots.put_calls[0]
        assert table_name == "receipts"
        assert row.primary_key == [("user_id", "u1"), ("timestamp", 1000)]
        assert isinstance(condition, Condition)

    @pytest.mark.asyncio
    async def test_same_key_overwrites(self, receipt_store, fake_ots):
        await receipt_store.put_receipt("u1", ReceiptRecord("First", "1", "Cash", timestamp=1000))
        await receipt_store.put_receipt("u1", ReceiptRecord("Second", "2", "Card", timestamp=1000))

        records = await receipt_store.list_recent("u1")

        assert len(records) == 1
        assert records[0].shop_name == "Second"

    @pytest.mark.asyncio
    async def test_store_failure_raises_store_error(self, receipt_store, fake_ots):
        fake_ots.error = RuntimeError("OTSServerBusy")

        with pytest.raises(StoreError, match="OTSServerBusy"):
            await receipt_store.put_receipt("u1", ReceiptRecord(timestamp=1000))


class TestListRecent:

    @pytest.mark.asyncio
    async def test_backward_scan_over_full_user_range(self, receipt_store, fake_ots):
        await receipt_store.list_recent("u1")

        call = fake_ots.range_calls[0]
        assert call["direction"] == Direction.BACKWARD
        assert call["start"] == [("user_id", "u1"), ("timestamp", INF_MAX)]
        assert call["end"] == [("user_id", "u1"), ("timestamp", INF_MIN)]
        assert call["limit"] == 100
        assert call["max_version"] == 1

    @pytest.mark.asyncio
    async def test_newest_first(self, receipt_store):
        for ts, shop in [(1000, "Old"), (3000, "Newest"), (2000, "Middle")]:
            await receipt_store.put_receipt("u1", ReceiptRecord(shop, "1", "Cash", timestamp=ts))

        records = await receipt_store.list_recent("u1")

        assert [r.timestamp for r in records] == [3000, 2000, 1000]
        assert records[0].shop_name == "Newest"

    @pytest.mark.asyncio
    async def test_only_requested_user(self, receipt_store):
        await receipt_store.put_receipt("u1", ReceiptRecord("Mine", "1", "Cash", timestamp=1000))
        await receipt_store.put_receipt("u2", ReceiptRecord("Theirs", "2", "Card", timestamp=2000))

        records = await receipt_store.list_recent("u1")

        assert [r.shop_name for r in records] == ["Mine"]

    @pytest.mark.asyncio
    async def test_never_more_than_one_page(self, receipt_store):
        for ts in range(150):
            await receipt_store.put_receipt("u1", ReceiptRecord("Shop", "1", "Cash", timestamp=ts))

        records = await receipt_store.list_recent("u1")

        assert len(records) == 100
        assert records[0].timestamp == 149

    @pytest.mark.asyncio
    async def test_page_is_truncated_even_if_store_overshoots(self, sync_settings):
        rows = [MagicMock(primary_key=[("user_id", "u1"), ("timestamp", i)], attribute_columns=[])
                for i in range(120)]
        client = MagicMock()
        client.get_range.return_value = (None, None, rows, None)
        store = ReceiptStore(sync_settings, client=client)

        records = await store.list_recent("u1")

        assert len(records) == 100

    @pytest.mark.asyncio
    async def test_read_failure_raises_store_error(self, receipt_store, fake_ots):
        fake_ots.error = RuntimeError("OTSObjectNotExist: table does not exist")

        with pytest.raises(StoreError, match="table does not exist"):
            await receipt_store.list_recent("u1")
