"""
ReceiptScan Backend: Receipt Record Unit Tests
==============================================

What:  Field normalization and the Tablestore row mapping of ReceiptRecord.
"""

import pytest
from tablestore import Row

from receiptscan.models.receipt import (
    NOT_AVAILABLE,
    ReceiptRecord,
    current_timestamp_ms,
    normalize_field,
)


class TestNormalizeField:

    @pytest.mark.parametrize("value", [None, "", 0, [], {}])
    def test_falsy_becomes_sentinel(self, value):
        assert normalize_field(value) == NOT_AVAILABLE

    def test_text_passes_through(self):
        assert normalize_field("Cafe X") == "Cafe X"

    def test_number_is_kept_as_text(self):
        """Amounts are never parsed; a numeric OCR value is passed through as text."""
        assert normalize_field(12.5) == "12.5"


class TestFromOcrData:

    def test_all_fields_present(self):
        record = ReceiptRecord.from_ocr_data(
            {"ShopName": "Cafe X", "Amount": "12.50", "PaymentMethod": "Cash"}
        )
        assert record.shop_name == "Cafe X"
        assert record.amount == "12.50"
        assert record.payment_method == "Cash"
        assert record.timestamp is None

    def test_fields_are_normalized_independently(self):
        """Shop name present + amount absent → only amount falls back to N/A."""
        record = ReceiptRecord.from_ocr_data({"ShopName": "Cafe X", "PaymentMethod": "Card"})
        assert record.shop_name == "Cafe X"
        assert record.amount == NOT_AVAILABLE
        assert record.payment_method == "Card"

    def test_empty_string_treated_as_missing(self):
        record = ReceiptRecord.from_ocr_data({"ShopName": "", "Amount": "3.00"})
        assert record.shop_name == NOT_AVAILABLE
        assert record.amount == "3.00"

    def test_no_data_object(self):
        record = ReceiptRecord.from_ocr_data(None)
        assert (record.shop_name, record.amount, record.payment_method) == (
            NOT_AVAILABLE, NOT_AVAILABLE, NOT_AVAILABLE,
        )


class TestRowMapping:

    def test_to_row_layout(self):
        record = ReceiptRecord("Cafe X", "12.50", "Card", timestamp=1700000000123)
        row = record.to_row("u1")

        assert row.primary_key == [("user_id", "u1"), ("timestamp", 1700000000123)]
        assert row.attribute_columns == [
            ("shop_name", "Cafe X"),
            ("amount", "12.50"),
            ("payment_method", "Card"),
        ]

    def test_to_row_requires_timestamp(self):
        with pytest.raises(ValueError, match="timestamp"):
            ReceiptRecord("Cafe X", "12.50", "Card").to_row("u1")

    def test_from_row_folds_attribute_columns(self):
        row = Row(
            [("user_id", "u1"), ("timestamp", 42)],
            [("shop_name", "Cafe X", 1), ("amount", "9.99", 1), ("payment_method", "Cash", 1)],
        )
        record = ReceiptRecord.from_row(row)

        assert record == ReceiptRecord("Cafe X", "9.99", "Cash", timestamp=42)

    def test_from_row_missing_column_defaults(self):
        row = Row([("user_id", "u1"), ("timestamp", 42)], [("shop_name", "Cafe X", 1)])
        record = ReceiptRecord.from_row(row)

        assert record.shop_name == "Cafe X"
        assert record.amount == NOT_AVAILABLE
        assert record.payment_method == NOT_AVAILABLE
        assert record.timestamp == 42


def test_current_timestamp_is_milliseconds():
    ts = current_timestamp_ms()
    assert isinstance(ts, int)
    # Milliseconds since epoch are 13 digits until the year 2286
    assert len(str(ts)) == 13
