"""
ReceiptScan Backend: Application Configuration
==============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a module-level `settings` object.
Who:   Imported by main.py (app factory) and by the storage/service layers.
When:  Loaded once at module import time; validated before the app starts.

Deployment modes:
    SYNC_ENABLED=false  → scan-only: POST / returns OCR fields, nothing is stored
    SYNC_ENABLED=true   → scan-and-sync: POST / also writes a Tablestore row,
                          GET /sync returns the user's most recent receipts
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have development defaults except the credential pair,
    which must be provided for any upstream call to succeed.
    """

    # ── Alibaba Cloud credentials ─────────────────────────────────────────
    # Shared by the OCR client and the Tablestore client.
    access_key_id: str = Field(default="", description="AccessKey ID")
    access_key_secret: str = Field(default="", description="AccessKey secret")

    # ── OCR ───────────────────────────────────────────────────────────────
    ocr_region_id: str = Field(default="ap-southeast-1")
    ocr_endpoint: str = Field(default="ocr.ap-southeast-1.aliyuncs.com")
    ocr_api_version: str = Field(default="2019-12-30")
    ocr_action: str = Field(default="RecognizeReceipt")

    # ── Sync (Tablestore) ─────────────────────────────────────────────────
    sync_enabled: bool = Field(default=True)
    tablestore_region: str = Field(default="ap-southeast-1")
    tablestore_instance: str = Field(default="receipt-scanner")
    tablestore_table: str = Field(default="receipts")
    tablestore_endpoint: Optional[str] = Field(
        default=None,
        description="Explicit endpoint URL; derived from instance and region when unset",
    )

    # Upper bound of rows returned by GET /sync (single page, no continuation)
    sync_page_limit: int = Field(default=100, ge=1, le=100)

    @property
    def tablestore_endpoint_url(self) -> str:
        """Public endpoint of the configured instance, e.g. https://inst.ap-southeast-1.ots.aliyuncs.com"""
        if self.tablestore_endpoint:
            return self.tablestore_endpoint
        return f"https://{self.tablestore_instance}.{self.tablestore_region}.ots.aliyuncs.com"

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_allow_origin: str = Field(default="*")

    @property
    def cors_allow_methods(self) -> str:
        """Methods advertised in Access-Control-Allow-Methods for the active mode."""
        if self.sync_enabled:
            return "POST, GET, OPTIONS"
        return "POST, OPTIONS"

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }

    @property
    def credentials_configured(self) -> bool:
        return bool(self.access_key_id and self.access_key_secret)

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that critical settings are configured.
        When:  Called during app startup (lifespan).
        How:   Checks each required field and raises ValueError with guidance.
        """
        errors = []
        if not self.access_key_id:
            errors.append("ACCESS_KEY_ID is not set.")
        if not self.access_key_secret:
            errors.append("ACCESS_KEY_SECRET is not set.")
        if self.sync_enabled and not self.tablestore_instance:
            errors.append("TABLESTORE_INSTANCE is required when SYNC_ENABLED is true.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Default instance used by `receiptscan.main:app`; tests build their own.
settings = Settings()
