"""
ReceiptScan Backend: Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── fake_ocr: In-memory OCRService returning canned `Data` objects
    ├── fake_ots: In-memory stand-in for tablestore.OTSClient (put_row / get_range)
    ├── sync_settings / scan_settings: Settings for each deployment mode
    ├── sync_client: HTTPX AsyncClient against a scan-and-sync app
    └── scan_client: HTTPX AsyncClient against a scan-only app
"""

import os
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tablestore import Direction, Row


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any receiptscan import so the default settings never see real keys
os.environ["ACCESS_KEY_ID"] = "test-access-key-id"
os.environ["ACCESS_KEY_SECRET"] = "test-access-key-secret"
os.environ["TABLESTORE_INSTANCE"] = "receipt-test"
os.environ["LOG_LEVEL"] = "WARNING"

from receiptscan.config import Settings  # noqa: E402
from receiptscan.main import create_app  # noqa: E402
from receiptscan.services.ocr_base import OCRService  # noqa: E402
from receiptscan.services.receipt_store import ReceiptStore  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════

class FakeOCRService(OCRService):
    """
    OCRService returning `data`, or raising `error` when set.

    Every image it receives is recorded in `calls`.
    """

    def __init__(self, data: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.data = data if data is not None else {}
        self.error = error
        self.calls: List[str] = []

    async def recognize_receipt(self, image_base64: str) -> Dict[str, Any]:
        self.calls.append(image_base64)
        if self.error is not None:
            raise self.error
        return dict(self.data)

    @property
    def is_configured(self) -> bool:
        return True


class FakeTablestoreClient:
    """
    Minimal in-memory OTSClient: rows keyed by (user_id, timestamp).

    get_range honors direction and limit the way the real service does for a
    single-partition scan; start/end bounds are only used for the user id.
    """

    VERSION = 1700000000000

    def __init__(self):
        self.rows: Dict[Tuple[str, int], List[Tuple[str, Any]]] = {}
        self.put_calls: List[Tuple[str, Row, Any]] = []
        self.range_calls: List[Dict[str, Any]] = []
        self.error: Optional[Exception] = None

    def put_row(self, table_name, row, condition):
        if self.error is not None:
            raise self.error
        self.put_calls.append((table_name, row, condition))
        keys = dict(row.primary_key)
        self.rows[(keys["user_id"], keys["timestamp"])] = list(row.attribute_columns)
        return ("consumed", None)

    def get_range(
        self,
        table_name,
        direction,
        inclusive_start_primary_key,
        exclusive_end_primary_key,
        columns_to_get=None,
        limit=None,
        max_version=None,
    ):
        if self.error is not None:
            raise self.error
        self.range_calls.append({
            "table_name": table_name,
            "direction": direction,
            "start": inclusive_start_primary_key,
            "end": exclusive_end_primary_key,
            "columns_to_get": columns_to_get,
            "limit": limit,
            "max_version": max_version,
        })
        user_id = inclusive_start_primary_key[0][1]
        timestamps = sorted(
            (ts for (uid, ts) in self.rows if uid == user_id),
            reverse=direction == Direction.BACKWARD,
        )
        if limit is not None:
            timestamps = timestamps[:limit]
        rows = [
            Row(
                [("user_id", user_id), ("timestamp", ts)],
                [(name, value, self.VERSION) for name, value in self.rows[(user_id, ts)]],
            )
            for ts in timestamps
        ]
        return ("consumed", None, rows, None)


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_ocr():
    """OCR fake that recognizes a complete receipt by default."""
    return FakeOCRService(
        data={"ShopName": "Cafe X", "Amount": "12.50", "PaymentMethod": "Card"}
    )


@pytest.fixture
def fake_ots():
    return FakeTablestoreClient()


@pytest.fixture
def sync_settings():
    return Settings(
        access_key_id="test-access-key-id",
        access_key_secret="test-access-key-secret",
        sync_enabled=True,
        tablestore_instance="receipt-test",
        tablestore_table="receipts",
    )


@pytest.fixture
def scan_settings():
    return Settings(
        access_key_id="test-access-key-id",
        access_key_secret="test-access-key-secret",
        sync_enabled=False,
    )


@pytest.fixture
def receipt_store(sync_settings, fake_ots):
    return ReceiptStore(sync_settings, client=fake_ots)


@pytest_asyncio.fixture
async def sync_client(sync_settings, fake_ocr, receipt_store):
    """
    HTTPX AsyncClient for a scan-and-sync app wired to the fakes.

    Usage:
        async def test_sync(sync_client):
            response = await sync_client.get("/sync", params={"userId": "u1"})
    """
    app = create_app(sync_settings, ocr_service=fake_ocr, receipt_store=receipt_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def scan_client(scan_settings, fake_ocr):
    """HTTPX AsyncClient for a scan-only app wired to the OCR fake."""
    app = create_app(scan_settings, ocr_service=fake_ocr)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
