import base64
from typing import Any

import httpx

from app.logging.logger import Log
from app.ocr.base import BaseOCRClient
from app.ocr.exceptions import OCRNetworkError, OCRProviderError, OCRResultError


class MistralOCRClient(BaseOCRClient):
    """OCR adapter for the Mistral document OCR HTTP API."""

    OCR_PATH = "/v1/ocr"

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        timeout_seconds: int,
        base_url: str = "https://api.mistral.ai",
        include_images: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._include_images = include_images
        self._client = httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    def extract_text_from_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        encoded = base64.b64encode(pdf_bytes).decode("ascii")
        payload = {
            "model": self._model,
            "document": {
                "type": "document_url",
                "document_url": f"data:application/pdf;base64,{encoded}",
            },
            "include_image_base64": self._include_images,
        }
        Log.info(
            "Calling OCR provider",
            model=self._model,
            buffer_size=len(pdf_bytes),
            operation="mistral_ocr",
        )
        try:
            response = self._client.post(self.OCR_PATH, json=payload)
        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            raise OCRNetworkError(f"OCR provider network error: {exc}") from exc
        except httpx.HTTPError as exc:
            raise OCRNetworkError(f"OCR provider transport error: {exc}") from exc

        if not response.is_success:
            message = _error_message(response)
            raise OCRProviderError(
                f"Failed to extract text from PDF: {message}",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise OCRResultError("OCR provider returned invalid JSON") from exc
        if not isinstance(result, dict) or not isinstance(result.get("pages"), list):
            raise OCRResultError("OCR provider response has no pages")

        Log.info(
            "OCR provider call completed",
            pages_processed=len(result["pages"]),
            operation="mistral_ocr",
        )
        return result

    def close(self) -> None:
        self._client.close()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or "Unknown error"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        for key in ("message", "detail"):
            if body.get(key):
                return str(body[key])
    return "Unknown error"
