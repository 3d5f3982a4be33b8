"""
ReceiptScan Backend: Pydantic Request/Response Schemas
======================================================

What:  Pydantic models defining the API contract with the receipt scanner UI.
How:   FastAPI uses these models to parse request bodies, serialize responses
       (camelCase aliases on the wire), and generate the OpenAPI document.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from receiptscan.models.receipt import ReceiptRecord


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ScanRequest(BaseModel):
    """
    What:  Body of POST /.
    How:   Both fields are optional at the schema level; presence rules depend
           on the deployment mode and are enforced by ReceiptService so that
           the error message matches the mode.
    """
    image: Optional[str] = Field(default=None, description="Base64-encoded receipt image")
    user_id: Optional[str] = Field(
        default=None,
        alias="userId",
        description="Owner of the receipt history (required in sync mode)",
    )

    model_config = {"populate_by_name": True}

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Any) -> Optional[str]:
        """userId is an opaque key: truthy non-strings (e.g. 42) are stringified, falsy ones count as missing."""
        if v is None or isinstance(v, str):
            return v
        if not v:
            return None
        return str(v)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ReceiptResponse(BaseModel):
    """
    What:  Fields extracted from one receipt, returned by POST /.
    Note:  The storage timestamp is deliberately not part of this shape.
    """
    shop_name: str = Field(alias="shopName", description="Shop name or 'N/A'")
    amount: str = Field(description="Total amount as recognized, or 'N/A'")
    payment_method: str = Field(alias="paymentMethod", description="Payment method or 'N/A'")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, record: ReceiptRecord) -> "ReceiptResponse":
        return cls(
            shop_name=record.shop_name,
            amount=record.amount,
            payment_method=record.payment_method,
        )


class SyncedReceiptResponse(ReceiptResponse):
    """
    What:  One entry of the GET /sync array, newest first.
    """
    timestamp: int = Field(description="Write time in milliseconds since epoch")

    @classmethod
    def from_record(cls, record: ReceiptRecord) -> "SyncedReceiptResponse":
        return cls(
            shop_name=record.shop_name,
            amount=record.amount,
            payment_method=record.payment_method,
            timestamp=record.timestamp,
        )


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every non-2xx response.

    Example:
        {"error": "Image base64 required"}
    """
    error: str = Field(description="Human-readable error message")


class HealthResponse(BaseModel):
    """
    What:  Health check response; reports configuration state only.
    """
    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    mode: str = Field(description="Deployment mode: scan, sync")
    ocr: str = Field(description="OCR client: configured, unconfigured")
    store: str = Field(description="Tablestore client: configured, unconfigured, disabled")
    uptime_seconds: float = Field(description="Seconds since service started")
