"""
ReceiptScan Backend: Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for the error scenarios of the API.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return `{"error": <message>}` JSON bodies with the right status code.
Who:   Raised by services and routes; caught by global handlers.

Exception Hierarchy:
    ReceiptScanError (base)
    ├── ValidationError          → 400 Bad Request (missing image / userId)
    ├── NotFoundError            → 404 Not Found (sync mode, unmatched route)
    ├── MethodNotAllowedError    → 405 Method Not Allowed (scan-only mode)
    └── UpstreamServiceError     → 500 Internal Server Error
        ├── OCRServiceError      (recognition call failed)
        └── StoreError           (Tablestore write or range read failed)

Upstream errors keep the raw upstream message: the API surfaces it verbatim
in the 500 body. Transient and permanent failures are not distinguished and
nothing is retried.
"""

from typing import Any, Dict, Optional


class ReceiptScanError(Exception):
    """
    Base exception for all ReceiptScan application errors.

    Attributes:
        message:  Error description returned in the `error` field of the response
        context:  Additional debug info (logged, NOT returned to the client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ReceiptScanError):
    """
    Raised when client input fails validation.

    When:    Missing or empty `image`, missing `userId` in sync mode,
             body that is not a JSON object.
    HTTP:    400 Bad Request

    Example response:
        {"error": "image and userId required"}
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ReceiptScanError):
    """
    Raised for any method/path combination the sync-mode API does not serve.

    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Not found",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class MethodNotAllowedError(ReceiptScanError):
    """
    Raised for anything other than POST/OPTIONS in scan-only mode.

    HTTP:    405 Method Not Allowed
    """

    status_code = 405

    def __init__(
        self,
        message: str = "Method not allowed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class UpstreamServiceError(ReceiptScanError):
    """
    Raised when a vendor SDK call fails.

    What:    OCR recognition, row write or range read raised an exception.
    HTTP:    500 Internal Server Error, body carries the raw upstream message.
    """

    def __init__(
        self,
        message: str = "Upstream service call failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class OCRServiceError(UpstreamServiceError):
    """The OCR capability failed or returned an unreadable payload."""


class StoreError(UpstreamServiceError):
    """The Tablestore write or range read failed."""
