"""
ReceiptScan Backend: Health Check Route
=======================================

What:  GET /health for container and load balancer probes.
How:   Reports configuration state of the OCR and Tablestore clients; neither
       service is called.

Status levels:
    - healthy:   credentials present for every enabled dependency
    - degraded:  credentials missing; scans will fail with 500
"""

import time

from fastapi import APIRouter, Depends

from receiptscan import __version__
from receiptscan.dependencies import get_receipt_service
from receiptscan.schemas.receipt import HealthResponse
from receiptscan.services.receipt_service import ReceiptService

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    service: ReceiptService = Depends(get_receipt_service),
) -> HealthResponse:
    ocr_status = "configured" if service.ocr_service.is_configured else "unconfigured"

    if service.store is None:
        store_status = "disabled"
    elif service.store.is_configured:
        store_status = "configured"
    else:
        store_status = "unconfigured"

    overall = "healthy"
    if ocr_status == "unconfigured" or store_status == "unconfigured":
        overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        mode="sync" if service.sync_enabled else "scan",
        ocr=ocr_status,
        store=store_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
