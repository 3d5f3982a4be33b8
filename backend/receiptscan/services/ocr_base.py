"""
ReceiptScan Backend: Abstract OCR Service Interface
===================================================

What:  Abstract base class defining the contract for receipt recognition.
How:   Concrete implementations inherit from OCRService and implement
       recognize_receipt().
Who:   Called by ReceiptService during the scan workflow; faked in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class OCRService(ABC):
    """
    Abstract interface for receipt field extraction from images.

    Contract:
        - recognize_receipt() accepts a base64 image and returns the raw `Data`
          object of the recognition result (ShopName, Amount, PaymentMethod,
          each possibly absent)
        - Implementation-specific errors are wrapped in OCRServiceError
        - Normalization to "N/A" is NOT the implementation's job

    Implementations:
        - AliyunOCRService: Alibaba Cloud OCR RecognizeReceipt
    """

    @abstractmethod
    async def recognize_receipt(self, image_base64: str) -> Dict[str, Any]:
        """
        Extract structured receipt fields from an image.

        Args:
            image_base64: Base64-encoded image exactly as sent by the client.

        Returns:
            Dict with the recognized fields. Empty dict when the service
            returned no `Data` object. Never None.

        Raises:
            OCRServiceError: When the call fails or the payload is unreadable.
        """
        ...

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials are present; no network call is made."""
        ...
