"""
ReceiptScan Backend: Sync Route Handler
=======================================

What:  GET /sync?userId=<id>, a user's receipt history, newest first.
How:   Delegates to ReceiptService.list_receipts(); one Tablestore page of at
       most 100 rows, no continuation token.
Who:   Called by the scanner UI when it opens on a new device.

Only mounted in sync mode; in scan-only mode the path falls through to the
405 handler.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from receiptscan.dependencies import get_receipt_service
from receiptscan.schemas.receipt import ErrorResponse, SyncedReceiptResponse
from receiptscan.services.receipt_service import ReceiptService

router = APIRouter(tags=["Sync"])


@router.get(
    "/sync",
    response_model=List[SyncedReceiptResponse],
    responses={
        200: {"description": "Newest-first receipts (max 100)"},
        400: {"description": "Missing userId", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="List a user's receipts",
)
async def sync_receipts(
    user_id: Optional[str] = Query(
        default=None,
        alias="userId",
        description="Owner whose receipts are returned",
    ),
    service: ReceiptService = Depends(get_receipt_service),
) -> List[SyncedReceiptResponse]:
    return await service.list_receipts(user_id)
