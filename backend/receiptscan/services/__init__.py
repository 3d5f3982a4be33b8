# Services package init
"""
ReceiptScan Backend: Services Layer
===================================

Service Inventory:
    - OCRService (abstract): Interface for receipt recognition providers
    - AliyunOCRService: Alibaba Cloud OCR RecognizeReceipt implementation
    - ReceiptStore: Tablestore row writes and newest-first range reads
    - ReceiptService: Orchestrates validate → OCR → normalize → store
"""
