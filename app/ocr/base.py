from abc import ABC, abstractmethod
from typing import Any


class BaseOCRClient(ABC):
    """Contract for all OCR engine adapters."""

    @abstractmethod
    def extract_text_from_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        """Run OCR over a PDF and return the page-indexed response.

        The response has the provider shape:
            {"pages": [{"index": 0, "markdown": "...", "images": [...],
                        "dimensions": {"dpi": ..., "width": ..., "height": ...}}],
             "usage_info": {...}}
        Page indices are 0-based. Each image carries id, top_left_x,
        top_left_y, bottom_right_x, bottom_right_y and image_base64.

        Raises:
            OCRError: if extraction fails for any reason.
        """
