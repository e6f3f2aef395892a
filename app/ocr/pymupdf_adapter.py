import base64
from typing import Any

import pymupdf

from app.ocr.base import BaseOCRClient
from app.ocr.exceptions import OCRError

PDF_POINTS_DPI = 72


class PyMuPdfOCRClient(BaseOCRClient):
    """Local engine: reads the PDF text layer and embedded images with PyMuPDF.

    Produces the same response shape as the remote provider, so scanned pages
    without a text layer come back with empty markdown.
    """

    def __init__(self, include_images: bool = True) -> None:
        self._include_images = include_images

    def extract_text_from_pdf(self, pdf_bytes: bytes) -> dict[str, Any]:
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [
                    self._read_page(doc, index, page)
                    for index, page in enumerate(doc)
                ]
        except OCRError:
            raise
        except Exception as exc:
            raise OCRError(f"pymupdf extraction failed: {exc}") from exc
        return {
            "pages": pages,
            "model": "pymupdf",
            "usage_info": {"pages_processed": len(pages), "doc_size_bytes": len(pdf_bytes)},
        }

    def _read_page(self, doc: Any, index: int, page: Any) -> dict[str, Any]:
        images = self._read_images(doc, index, page) if self._include_images else []
        return {
            "index": index,
            "markdown": page.get_text("text").strip(),
            "images": images,
            "dimensions": {
                "dpi": PDF_POINTS_DPI,
                "width": int(page.rect.width),
                "height": int(page.rect.height),
            },
        }

    def _read_images(self, doc: Any, index: int, page: Any) -> list[dict[str, Any]]:
        images: list[dict[str, Any]] = []
        for info in page.get_image_info(xrefs=True):
            xref = info.get("xref", 0)
            if not xref:
                # Inline images have no xref and cannot be extracted on their own.
                continue
            extracted = doc.extract_image(xref)
            ext = extracted.get("ext", "png")
            encoded = base64.b64encode(extracted["image"]).decode("ascii")
            x0, y0, x1, y1 = info["bbox"]
            images.append(
                {
                    "id": f"img-{index}-{len(images)}.{ext}",
                    "top_left_x": round(x0),
                    "top_left_y": round(y0),
                    "bottom_right_x": round(x1),
                    "bottom_right_y": round(y1),
                    "image_base64": f"data:image/{ext};base64,{encoded}",
                }
            )
        return images


def read_pdf_metadata(pdf_bytes: bytes) -> dict[str, Any]:
    """Return the PDF info dictionary (title, author, producer, ...) and page count."""
    try:
        with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
            info = {key: value for key, value in (doc.metadata or {}).items() if value}
            return {"info": info, "pageCount": doc.page_count}
    except Exception as exc:
        raise OCRError(f"pymupdf metadata read failed: {exc}") from exc
