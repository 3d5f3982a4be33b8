"""
ReceiptScan Backend: Scan Route Handler
=======================================

What:  POST / (any path in scan-only mode), recognize a base64 receipt image.
How:   Parses the JSON body into ScanRequest and delegates to ReceiptService.
Who:   Called by the scanner UI after the user takes a photo.

Request Flow:
    1. Client sends {"image": "<base64>", "userId": "<id>"} (userId in sync mode)
    2. ReceiptService validates, calls OCR, normalizes, stores (sync mode)
    3. Return 200 {shopName, amount, paymentMethod}

Error responses (handled by global exception handlers):
    HTTP 400: Missing image / userId, or a body that is not a JSON object
    HTTP 500: OCR or Tablestore failure, body carries the upstream message
"""

import logging

from fastapi import APIRouter, Depends, Request

from receiptscan.dependencies import get_receipt_service
from receiptscan.schemas.receipt import ErrorResponse, ReceiptResponse, ScanRequest
from receiptscan.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Scan"])


@router.post(
    "/",
    response_model=ReceiptResponse,
    responses={
        200: {"description": "Receipt recognized", "model": ReceiptResponse},
        400: {"description": "Missing image or userId", "model": ErrorResponse},
        500: {"description": "OCR or storage failure", "model": ErrorResponse},
    },
    summary="Scan a receipt image",
    description=(
        "Submit a base64-encoded receipt image. Returns shop name, amount and "
        "payment method; any field the OCR service cannot read is 'N/A'. In sync "
        "mode the result is also stored under the given userId."
    ),
)
async def scan_receipt(
    payload: ScanRequest,
    request: Request,
    service: ReceiptService = Depends(get_receipt_service),
) -> ReceiptResponse:
    logger.info(
        "[%s] Received scan request: image=%d chars, user=%s",
        getattr(request.state, "request_id", ""),
        len(payload.image or ""),
        payload.user_id or "-",
    )
    return await service.scan(image=payload.image, user_id=payload.user_id)


# Scan-only deployments accept the scan on any path, not just "/".
any_path_router = APIRouter(tags=["Scan"])
any_path_router.add_api_route(
    "/{path:path}",
    scan_receipt,
    methods=["POST"],
    response_model=ReceiptResponse,
    include_in_schema=False,
)
