"""
ReceiptScan Backend: Receipt Store (Tablestore persistence)
===========================================================

What:  Writes receipt rows and reads a user's most recent receipts.
How:   put_row with an IGNORE existence condition for writes; a BACKWARD
       get_range over the user's whole key range for reads, bounded by the
       configured page limit.
Who:   Called by ReceiptService (scan-and-sync mode only).

Query plan (GET /sync):
    start (inclusive): (user_id, INF_MAX)
    end   (exclusive): (user_id, INF_MIN)
    direction:         BACKWARD → newest timestamp first
    limit:             sync_page_limit (≤ 100), one page, continuation ignored
"""

import logging
from typing import Any, List, Optional

from starlette.concurrency import run_in_threadpool
from tablestore import (
    INF_MAX,
    INF_MIN,
    Condition,
    Direction,
    OTSClient,
    RowExistenceExpectation,
)

from receiptscan.config import Settings
from receiptscan.exceptions import StoreError
from receiptscan.models.receipt import (
    COL_AMOUNT,
    COL_PAYMENT_METHOD,
    COL_SHOP_NAME,
    PK_TIMESTAMP,
    PK_USER_ID,
    ReceiptRecord,
)
from receiptscan.storage import create_ots_client

logger = logging.getLogger(__name__)

# Hard ceiling for a single sync page
MAX_SYNC_PAGE = 100


class ReceiptStore:
    """
    Tablestore-backed receipt history keyed by (user_id, timestamp).

    The OTSClient is created on first use unless one is injected.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[OTSClient] = None,
    ):
        self.settings = settings
        self.table_name = settings.tablestore_table
        self.page_limit = min(settings.sync_page_limit, MAX_SYNC_PAGE)
        self._client = client

    @property
    def client(self) -> OTSClient:
        if self._client is None:
            self._client = create_ots_client(self.settings)
        return self._client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.credentials_configured

    async def put_receipt(self, user_id: str, record: ReceiptRecord) -> Any:
        """
        Insert the record as row (user_id, record.timestamp).

        The write is unconditional: a row with the same key is overwritten.

        Returns:
            The consumed capacity reported by Tablestore.

        Raises:
            StoreError: put_row failed; the message is the raw upstream message.
        """
        row = record.to_row(user_id)
        condition = Condition(RowExistenceExpectation.IGNORE)

        try:
            consumed, _ = await run_in_threadpool(
                self.client.put_row, self.table_name, row, condition
            )
        except Exception as e:
            logger.error(
                "put_row failed for user=%s timestamp=%s: %s",
                user_id,
                record.timestamp,
                str(e),
                exc_info=True,
            )
            raise StoreError(
                message=str(e),
                context={"operation": "put_row", "table": self.table_name},
            ) from e

        logger.info("Stored receipt for user=%s timestamp=%s", user_id, record.timestamp)
        return consumed

    async def list_recent(self, user_id: str) -> List[ReceiptRecord]:
        """
        Return up to `page_limit` receipts for the user, newest first.

        Raises:
            StoreError: get_range failed; the message is the raw upstream message.
        """
        inclusive_start = [(PK_USER_ID, user_id), (PK_TIMESTAMP, INF_MAX)]
        exclusive_end = [(PK_USER_ID, user_id), (PK_TIMESTAMP, INF_MIN)]

        try:
            _, _, rows, _ = await run_in_threadpool(
                self.client.get_range,
                self.table_name,
                Direction.BACKWARD,
                inclusive_start,
                exclusive_end,
                columns_to_get=[COL_SHOP_NAME, COL_AMOUNT, COL_PAYMENT_METHOD],
                limit=self.page_limit,
                max_version=1,
            )
        except Exception as e:
            logger.error("get_range failed for user=%s: %s", user_id, str(e), exc_info=True)
            raise StoreError(
                message=str(e),
                context={"operation": "get_range", "table": self.table_name},
            ) from e

        records = [ReceiptRecord.from_row(row) for row in (rows or [])[: self.page_limit]]
        logger.info("Loaded %d receipts for user=%s", len(records), user_id)
        return records
