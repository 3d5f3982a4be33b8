"""
ReceiptScan Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the services for one deployment mode, registers
       middleware, exception handlers and routes, and returns the app.
Who:   Called by uvicorn (uvicorn receiptscan.main:app) and by the tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────────────────┐  │
    │  │  Req ID  │→│ Logging  │→│  CORS preamble      │  │
    │  └──────────┘ └──────────┘ └─────────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────┐ ┌──────────────────┐ ┌─────────────┐  │
    │  │ POST /   │ │ GET /sync (sync) │ │ GET /health │  │
    │  └──────────┘ └──────────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ Route→404/405 │ Upstream→500│   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Deployment modes (settings.sync_enabled):
    scan-only: POST to any path, anything else → 405 {"error": "Method not allowed"}
    sync:      POST /, GET /sync, anything else → 404 {"error": "Not found"}
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from receiptscan import __version__
from receiptscan.config import Settings, settings as default_settings
from receiptscan.exceptions import (
    MethodNotAllowedError,
    NotFoundError,
    ReceiptScanError,
    UpstreamServiceError,
    ValidationError,
)
from receiptscan.middleware.cors import CORSPreambleMiddleware, cors_headers
from receiptscan.middleware.logging import RequestLoggingMiddleware
from receiptscan.middleware.request_id import RequestIDMiddleware, request_id_var
from receiptscan.routes import health, scan, sync
from receiptscan.services.aliyun_ocr_service import AliyunOCRService
from receiptscan.services.ocr_base import OCRService
from receiptscan.services.receipt_service import ReceiptService, required_fields_message
from receiptscan.services.receipt_store import ReceiptStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    When:   Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # SDK transports log every request at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("tablestore").setLevel(logging.WARNING)
    logging.getLogger("aliyunsdkcore").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Validate credentials (logged, not fatal: /health reports degraded)
        3. Log the active mode and upstream targets

    Shutdown sequence:
        1. Log shutdown (SDK clients hold no resources that need closing)
    """
    config: Settings = app.state.settings

    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("ReceiptScan Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Scan requests will fail until the configuration is fixed.")

    logger.info("Mode: %s", "scan-and-sync" if config.sync_enabled else "scan-only")
    logger.info("OCR endpoint: %s (%s)", config.ocr_endpoint, config.ocr_action)
    if config.sync_enabled:
        logger.info(
            "Tablestore: %s / %s (page limit %d)",
            config.tablestore_instance,
            config.tablestore_table,
            config.sync_page_limit,
        )
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("ReceiptScan Backend shutting down...")
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI, config: Settings) -> None:
    """
    Register global exception handlers for `{"error": <message>}` responses.

    Handler hierarchy:
        ValidationError          → 400 (message names the missing field(s))
        RequestValidationError   → 400 (same message as a missing field)
        NotFoundError / 404      → 404 in sync mode, 405 in scan-only mode
        MethodNotAllowedError    → 405
        UpstreamServiceError     → 500 with the raw upstream message
        Exception (fallback)     → 500 with the exception message

    Every handler except the last runs inside the middleware stack, so the
    CORS headers are present on these responses too. The fallback runs
    outside it and stamps the CORS and X-Request-ID headers itself.
    """

    fallback_headers = cors_headers(config.cors_allow_origin, config.cors_allow_methods)

    def route_miss() -> JSONResponse:
        if config.sync_enabled:
            error = NotFoundError()
        else:
            error = MethodNotAllowedError()
        return _error(error.status_code, error.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.info("[%s] Validation error: %s", rid, exc.message)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.info("[%s] Malformed request body: %s", rid, exc.errors())
        return _error(400, required_fields_message(config.sync_enabled))

    @app.exception_handler(UpstreamServiceError)
    async def handle_upstream_error(request: Request, exc: UpstreamServiceError):
        rid = request_id_var.get("")
        logger.error("[%s] Upstream error: %s | Context: %s", rid, exc.message, exc.context)
        return _error(exc.status_code, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return route_miss()

    @app.exception_handler(ReceiptScanError)
    async def handle_app_error(request: Request, exc: ReceiptScanError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return route_miss()
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Runs in ServerErrorMiddleware, outside the CORS and request-ID middleware
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = _error(500, str(exc))
        response.headers.update(fallback_headers)
        if rid:
            response.headers["X-Request-ID"] = rid
        return response


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    ocr_service: Optional[OCRService] = None,
    receipt_store: Optional[ReceiptStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use; the environment-loaded default when None.
        ocr_service: OCR implementation; AliyunOCRService when None.
        receipt_store: Store for sync mode; a Tablestore-backed ReceiptStore
            when None. Ignored in scan-only mode.

    SDK clients are created lazily by the services on their first call, so
    building the app never touches the network.
    """
    config = config or default_settings

    if ocr_service is None:
        ocr_service = AliyunOCRService(config)
    if config.sync_enabled:
        store = receipt_store or ReceiptStore(config)
    else:
        store = None

    app = FastAPI(
        title="ReceiptScan API",
        description=(
            "Receipt OCR proxy: submit a base64 receipt image, get shop name, "
            "amount and payment method back; optionally keep a per-user history."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.receipt_service = ReceiptService(ocr_service=ocr_service, store=store)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS preamble → routes
    app.add_middleware(
        CORSPreambleMiddleware,
        allow_origin=config.cors_allow_origin,
        allow_methods=config.cors_allow_methods,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, config)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(scan.router)
    if config.sync_enabled:
        app.include_router(sync.router)
    app.include_router(health.router)
    if not config.sync_enabled:
        app.include_router(scan.any_path_router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
