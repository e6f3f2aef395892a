from datetime import datetime, timezone
from typing import Any

from app.ocr.exceptions import OCRResultError
from app.ocr.models import BoundingBox, PageDimensions, ProcessedImage, ProcessedOCRPage, ProcessedOCRResult

PAGE_SEPARATOR = "\n\n---\n\n"


def process_ocr_result(raw: dict[str, Any]) -> ProcessedOCRResult:
    """Normalize a provider response into 1-based pages and a flat image list.

    Pure apart from processed_at: the same input always yields the same
    pages, images, full_text and page_offsets.

    Raises:
        OCRResultError: if the payload has no page list or a page lacks its index.
    """
    raw_pages = raw.get("pages") if isinstance(raw, dict) else None
    if not isinstance(raw_pages, list):
        raise OCRResultError("OCR response has no pages")

    pages: list[ProcessedOCRPage] = []
    images: list[ProcessedImage] = []
    for raw_page in raw_pages:
        page = _to_page(raw_page)
        pages.append(page)
        images.extend(_to_images(page))

    full_text, page_offsets = _join_pages(pages)
    return ProcessedOCRResult(
        total_pages=len(pages),
        full_text=full_text,
        pages=pages,
        images=images,
        processed_at=datetime.now(timezone.utc),
        page_offsets=page_offsets,
    )


def _to_page(raw_page: Any) -> ProcessedOCRPage:
    if not isinstance(raw_page, dict) or not isinstance(raw_page.get("index"), int):
        raise OCRResultError("OCR page is missing its index")
    dimensions = raw_page.get("dimensions")
    return ProcessedOCRPage(
        page_number=raw_page["index"] + 1,
        markdown=raw_page.get("markdown") or "",
        images=list(raw_page.get("images") or []),
        dimensions=PageDimensions.from_dict(dimensions) if dimensions else None,
    )


def _to_images(page: ProcessedOCRPage) -> list[ProcessedImage]:
    return [
        ProcessedImage(
            id=raw_image.get("id", ""),
            page_number=page.page_number,
            image_index=image_index,
            bounding_box=BoundingBox(
                top_left_x=raw_image.get("top_left_x", 0),
                top_left_y=raw_image.get("top_left_y", 0),
                bottom_right_x=raw_image.get("bottom_right_x", 0),
                bottom_right_y=raw_image.get("bottom_right_y", 0),
            ),
            base64_data=raw_image.get("image_base64") or "",
        )
        for image_index, raw_image in enumerate(page.images)
    ]


def _join_pages(pages: list[ProcessedOCRPage]) -> tuple[str, list[int]]:
    offsets: list[int] = []
    position = 0
    for index, page in enumerate(pages):
        if index:
            position += len(PAGE_SEPARATOR)
        offsets.append(position)
        position += len(page.markdown)
    return PAGE_SEPARATOR.join(page.markdown for page in pages), offsets
