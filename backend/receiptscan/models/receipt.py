"""
ReceiptScan Backend: Receipt Record Model
=========================================

What:  Domain entity for one scanned receipt and its Tablestore row mapping.
How:   A dataclass carrying the normalized OCR fields; `to_row()` / `from_row()`
       translate between the entity and a `tablestore.Row`.
Who:   Built by ReceiptService from OCR output; written and read by ReceiptStore.

Table layout (wide-column, Tablestore):

    primary key            │ attribute columns
    ───────────────────────┼──────────────────────────────────────────
    user_id   (STRING)     │ shop_name       (STRING)
    timestamp (INTEGER, ms)│ amount          (STRING)
                           │ payment_method  (STRING)

    Rows under one user_id are ordered by timestamp, so a BACKWARD range
    scan from INF_MAX to INF_MIN yields the newest receipts first.

Lifecycle:
    1. Created in memory from the OCR response
    2. Optionally persisted as a row (sync mode)
    3. Never updated, never deleted
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from tablestore import Row

# Placeholder for any field the OCR response leaves absent or falsy
NOT_AVAILABLE = "N/A"

# Primary key columns
PK_USER_ID = "user_id"
PK_TIMESTAMP = "timestamp"

# Attribute columns
COL_SHOP_NAME = "shop_name"
COL_AMOUNT = "amount"
COL_PAYMENT_METHOD = "payment_method"


def normalize_field(value: Any) -> str:
    """
    Replace a missing/falsy OCR field with the "N/A" sentinel.

    Empty strings and absent values are treated alike. Truthy non-string
    values (e.g. a numeric Amount) are passed through as text, never parsed.
    """
    if not value:
        return NOT_AVAILABLE
    if isinstance(value, str):
        return value
    return str(value)


def current_timestamp_ms() -> int:
    """Milliseconds since the epoch, used as the second half of the row key."""
    return int(time.time() * 1000)


@dataclass
class ReceiptRecord:
    """
    One normalized receipt.

    `timestamp` is assigned only when the record is persisted; records from
    scan-only mode keep it as None.
    """

    shop_name: str = NOT_AVAILABLE
    amount: str = NOT_AVAILABLE
    payment_method: str = NOT_AVAILABLE
    timestamp: Optional[int] = None

    @classmethod
    def from_ocr_data(cls, data: Optional[Dict[str, Any]]) -> "ReceiptRecord":
        """Build a record from the OCR `Data` object, normalizing each field independently."""
        data = data or {}
        return cls(
            shop_name=normalize_field(data.get("ShopName")),
            amount=normalize_field(data.get("Amount")),
            payment_method=normalize_field(data.get("PaymentMethod")),
        )

    @classmethod
    def from_row(cls, row: Row) -> "ReceiptRecord":
        """
        Build a record from a Tablestore row returned by get_range.

        Attribute columns arrive as (name, value, version) tuples; they are
        folded into a name → value dict, and absent columns become "N/A".
        """
        keys = {name: value for name, value in row.primary_key}
        columns = {column[0]: column[1] for column in row.attribute_columns or []}
        return cls(
            shop_name=normalize_field(columns.get(COL_SHOP_NAME)),
            amount=normalize_field(columns.get(COL_AMOUNT)),
            payment_method=normalize_field(columns.get(COL_PAYMENT_METHOD)),
            timestamp=keys.get(PK_TIMESTAMP),
        )

    def to_row(self, user_id: str) -> Row:
        """Row keyed by (user_id, timestamp) with the three attribute columns."""
        if self.timestamp is None:
            raise ValueError("ReceiptRecord needs a timestamp before it can be stored")
        primary_key = [(PK_USER_ID, user_id), (PK_TIMESTAMP, self.timestamp)]
        attribute_columns = [
            (COL_SHOP_NAME, self.shop_name),
            (COL_AMOUNT, self.amount),
            (COL_PAYMENT_METHOD, self.payment_method),
        ]
        return Row(primary_key, attribute_columns)
