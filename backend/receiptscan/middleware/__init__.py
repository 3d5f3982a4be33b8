# Middleware package init
"""
ReceiptScan Backend: Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS preamble] → Route Handler

    1. Request ID: Generate correlation ID for logging and tracing
    2. Logging: Log request details with the generated request ID
    3. CORS preamble: Answer OPTIONS immediately, stamp CORS headers on
       every other response (errors included)
"""
