"""
ReceiptScan Backend: Application Package
========================================

What: Receipt OCR proxy with optional per-user history sync.
Who:  Imported by uvicorn (`receiptscan.main:app`), pytest and the routes.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← POST /, GET /sync, GET /health
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← validate → OCR → normalize → store
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← ReceiptRecord + pydantic contracts
    ├─────────────────────────────────────┤
    │        Storage (Tablestore)         │  ← OTSClient factory and dependencies
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
