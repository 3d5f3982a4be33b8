"""
ReceiptScan Backend: Receipt Service (Business Logic Orchestrator)
==================================================================

What:  Coordinates validate → OCR → normalize → (store) for POST /, and the
       history read for GET /sync.
How:   Composes an OCRService and, in sync mode, a ReceiptStore. Both are
       injected; the service itself holds no per-request state.
Who:   Called by the scan and sync route handlers.

Orchestration Flow (POST /):
    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────────┐
    │ Validate │───▶│   OCR    │───▶│  Normalize  │───▶│ Store (sync) │
    └──────────┘    └──────────┘    └─────────────┘    └──────────────┘

    Each step is awaited before the next starts. On failure:
    - Validation → ValidationError (400), nothing upstream is called
    - Anything later → UpstreamServiceError (500) carrying the raw message
"""

import logging
from typing import List, Optional

from receiptscan.exceptions import (
    NotFoundError,
    ReceiptScanError,
    UpstreamServiceError,
    ValidationError,
)
from receiptscan.models.receipt import ReceiptRecord, current_timestamp_ms
from receiptscan.schemas.receipt import ReceiptResponse, SyncedReceiptResponse
from receiptscan.services.ocr_base import OCRService
from receiptscan.services.receipt_store import ReceiptStore

logger = logging.getLogger(__name__)

SCAN_REQUIRED_MESSAGE = "Image base64 required"
SYNC_REQUIRED_MESSAGE = "image and userId required"
SYNC_USER_REQUIRED_MESSAGE = "userId required"


def required_fields_message(sync_enabled: bool) -> str:
    """400 message for a scan request missing its required fields."""
    return SYNC_REQUIRED_MESSAGE if sync_enabled else SCAN_REQUIRED_MESSAGE


class ReceiptService:
    """
    Business logic for receipt scanning and history.

    Responsibilities:
        - scan(): validate → recognize → normalize → persist (sync mode)
        - list_receipts(): newest-first history for one user (sync mode)

    Error Handling Strategy:
        Upstream services raise their own UpstreamServiceError subclasses,
        which propagate untouched. Any other exception raised after
        validation is logged and wrapped in UpstreamServiceError so the
        client always receives `{"error": <message>}` with status 500.
    """

    def __init__(self, ocr_service: OCRService, store: Optional[ReceiptStore] = None):
        self.ocr_service = ocr_service
        self.store = store

    @property
    def sync_enabled(self) -> bool:
        return self.store is not None

    async def scan(self, image: Optional[str], user_id: Optional[str] = None) -> ReceiptResponse:
        """
        Recognize a receipt image and, in sync mode, store the result.

        Args:
            image: Base64 image from the request body
            user_id: Owner of the record (required in sync mode, ignored otherwise)

        Returns:
            ReceiptResponse with shopName, amount and paymentMethod. The storage
            timestamp is not included.

        Raises:
            ValidationError: Missing/empty image, or userId in sync mode
            UpstreamServiceError: OCR or store failure
        """
        if self.sync_enabled:
            if not image or not user_id:
                raise ValidationError(message=SYNC_REQUIRED_MESSAGE)
        elif not image:
            raise ValidationError(message=SCAN_REQUIRED_MESSAGE, field="image")

        try:
            data = await self.ocr_service.recognize_receipt(image)
            record = ReceiptRecord.from_ocr_data(data)

            if self.sync_enabled:
                record.timestamp = current_timestamp_ms()
                await self.store.put_receipt(user_id, record)

            return ReceiptResponse.from_record(record)

        except ReceiptScanError:
            raise
        except Exception as e:
            logger.error("Unexpected error in scan: %s", str(e), exc_info=True)
            raise UpstreamServiceError(
                message=str(e),
                context={"error_type": type(e).__name__},
            ) from e

    async def list_receipts(self, user_id: Optional[str]) -> List[SyncedReceiptResponse]:
        """
        Most recent receipts of one user, newest first, at most one page.

        Raises:
            NotFoundError: Service runs in scan-only mode. Only direct callers
                reach this; the /sync route is not mounted in that mode.
            ValidationError: Missing/empty userId
            StoreError: Range read failed
        """
        if not self.sync_enabled:
            raise NotFoundError()
        if not user_id:
            raise ValidationError(message=SYNC_USER_REQUIRED_MESSAGE, field="userId")

        try:
            records = await self.store.list_recent(user_id)
            return [SyncedReceiptResponse.from_record(record) for record in records]
        except ReceiptScanError:
            raise
        except Exception as e:
            logger.error("Unexpected error in list_receipts: %s", str(e), exc_info=True)
            raise UpstreamServiceError(
                message=str(e),
                context={"error_type": type(e).__name__},
            ) from e
