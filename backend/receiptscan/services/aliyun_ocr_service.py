"""
ReceiptScan Backend: Alibaba Cloud OCR Service Implementation
=============================================================

What:  Concrete OCR service calling the Alibaba Cloud OCR `RecognizeReceipt` action.
How:   Builds an RPC CommonRequest (domain, version, action, ImageBase64 body
       parameter), sends it through a long-lived AcsClient, and returns the
       `Data` object of the JSON response.
Who:   Instantiated once per application by create_app(); called by
       ReceiptService for each scan request.

Execution model:
    The aliyunsdkcore client is blocking, so each call runs in Starlette's
    threadpool and the request coroutine awaits it. Request signing and
    transport timeouts are left to the SDK; there is no retry layer here.
"""

import json
import logging
import time
import uuid
from typing import Any, Dict, Optional

from aliyunsdkcore.client import AcsClient
from aliyunsdkcore.request import CommonRequest
from starlette.concurrency import run_in_threadpool

from receiptscan.config import Settings
from receiptscan.exceptions import OCRServiceError
from receiptscan.services.ocr_base import OCRService

logger = logging.getLogger(__name__)


class AliyunOCRService(OCRService):
    """
    Alibaba Cloud OCR implementation of OCRService.

    The AcsClient is created on first use from the configured credential
    pair and region, then reused for every request.
    """

    def __init__(self, settings: Settings, client: Optional[AcsClient] = None):
        self.settings = settings
        self._client = client

        logger.info(
            "AliyunOCRService initialized with endpoint=%s, version=%s, action=%s",
            settings.ocr_endpoint,
            settings.ocr_api_version,
            settings.ocr_action,
        )

    @property
    def client(self) -> AcsClient:
        if self._client is None:
            self._client = AcsClient(
                self.settings.access_key_id,
                self.settings.access_key_secret,
                self.settings.ocr_region_id,
            )
        return self._client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or self.settings.credentials_configured

    async def recognize_receipt(self, image_base64: str) -> Dict[str, Any]:
        """
        Send the image to RecognizeReceipt and return the `Data` object.

        Flow:
            1. Build and send the RPC request (threadpool)
            2. Decode the JSON body
            3. Return body["Data"], or {} when absent

        Raises:
            OCRServiceError: SDK/transport failure or non-JSON response body.
                The message is the raw upstream message.
        """
        # Short id to correlate the start/finish/failure lines of one call
        call_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        logger.info(
            "[%s] Starting %s for image of %d base64 chars",
            call_id,
            self.settings.ocr_action,
            len(image_base64),
        )

        try:
            body = await run_in_threadpool(self._send_request, image_base64)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                "[%s] OCR call failed after %.0fms: %s",
                call_id,
                duration_ms,
                str(e),
                exc_info=True,
            )
            raise OCRServiceError(
                message=str(e),
                context={"call_id": call_id, "error_type": type(e).__name__},
            ) from e

        data = self._parse_response(body, call_id)

        logger.info(
            "[%s] OCR completed in %.0fms, fields=%s",
            call_id,
            (time.time() - start_time) * 1000,
            sorted(data.keys()),
        )
        return data

    def _send_request(self, image_base64: str) -> bytes:
        request = CommonRequest()
        request.set_accept_format("json")
        request.set_domain(self.settings.ocr_endpoint)
        request.set_method("POST")
        request.set_protocol_type("https")
        request.set_version(self.settings.ocr_api_version)
        request.set_action_name(self.settings.ocr_action)
        request.add_body_params("ImageBase64", image_base64)
        return self.client.do_action_with_exception(request)

    @staticmethod
    def _parse_response(body: Any, call_id: str) -> Dict[str, Any]:
        """Decode the response body and pull out the `Data` object."""
        if isinstance(body, (bytes, bytearray)):
            body = body.decode("utf-8")
        try:
            payload = json.loads(body) if isinstance(body, str) else body
        except ValueError as e:
            logger.error("[%s] OCR response is not valid JSON: %s", call_id, str(e))
            raise OCRServiceError(
                message=f"Invalid OCR response: {e}",
                context={"call_id": call_id},
            ) from e

        if not isinstance(payload, dict):
            raise OCRServiceError(
                message="Invalid OCR response: expected a JSON object",
                context={"call_id": call_id},
            )

        data = payload.get("Data") or {}
        if not isinstance(data, dict):
            raise OCRServiceError(
                message="Invalid OCR response: Data is not an object",
                context={"call_id": call_id},
            )
        return data
