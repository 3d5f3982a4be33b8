"""
ReceiptScan Backend: FastAPI Dependencies
=========================================

What:  Resolves the per-application service handles for route handlers.
How:   create_app() stores the services on `app.state`; these functions read
       them back through the current request, so tests can build an app with
       fake services instead of patching module globals.
"""

from fastapi import Request

from receiptscan.services.receipt_service import ReceiptService


def get_receipt_service(request: Request) -> ReceiptService:
    return request.app.state.receipt_service
