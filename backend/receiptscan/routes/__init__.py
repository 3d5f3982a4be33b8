# Routes package init
"""
ReceiptScan Backend: API Routes Package
=======================================

Route Inventory:
    - scan.py:    POST /              (recognize a receipt, store it in sync mode)
    - sync.py:    GET  /sync          (newest-first receipt history, sync mode only)
    - health.py:  GET  /health        (configuration health check)

Routes handle HTTP concerns only; the workflow lives in ReceiptService.
"""
