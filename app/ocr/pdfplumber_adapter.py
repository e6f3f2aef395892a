import io
from typing import Any

import pdfplumber

from app.ocr.base import BaseOCRClient
from app.ocr.exceptions import OCRError


class PdfPlumberOCRClient(BaseOCRClient):
    """Local engine: reads the PDF text layer with pdfplumber. Extracts no images."""

    def extract_text_from_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                pages = [
                    {
                        "index": index,
                        "markdown": (page.extract_text() or "").strip(),
                        "images": [],
                        "dimensions": {
                            "dpi": 72,
                            "width": int(page.width),
                            "height": int(page.height),
                        },
                    }
                    for index, page in enumerate(pdf.pages)
                ]
        except Exception as exc:
            raise OCRError(f"pdfplumber extraction failed: {exc}") from exc
        return {
            "pages": pages,
            "model": "pdfplumber",
            "usage_info": {"pages_processed": len(pages), "doc_size_bytes": len(pdf_bytes)},
        }
