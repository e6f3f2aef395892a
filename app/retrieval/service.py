from bisect import bisect_right

from app.documents.models import DocumentImage, DocumentSummary, DocumentURLs, SearchMatch
from app.logging.logger import Log
from app.ocr.models import ProcessedOCRResult
from app.storage import layout
from app.storage.base import StoredObject
from app.storage.gateway import DocumentStorage

SEARCH_CONTEXT_CHARS = 100
PAGE_DELIMITER = "---"


class RetrievalService:
    """Read-only views over the stored OCR artifacts of a document.

    Absence is reported as None, never raised.
    """

    def __init__(self, storage: DocumentStorage) -> None:
        self._storage = storage

    def get_ocr_results(self, document_id: str) -> ProcessedOCRResult | None:
        payload = self._storage.get_json(layout.full_result_path(document_id))
        if payload is None:
            Log.debug("No OCR result", document_id=document_id)
            return None
        return ProcessedOCRResult.from_dict(payload)

    def get_extracted_text(self, document_id: str) -> str | None:
        return self._storage.get_text(layout.extracted_text_path(document_id))

    def get_page_content(self, document_id: str, page_number: int) -> str | None:
        return self._storage.get_text(layout.page_path(document_id, page_number))

    def get_original_file(self, document_id: str, file_name: str) -> StoredObject | None:
        return self._storage.get_file(layout.original_file_path(document_id, file_name))

    def get_document_images(self, document_id: str) -> list[DocumentImage] | None:
        result = self.get_ocr_results(document_id)
        if result is None or not result.images:
            return None
        return [
            DocumentImage(
                id=image.id,
                page_number=image.page_number,
                image_index=image.image_index,
                path=layout.image_path(document_id, image.page_number, image.image_index),
                bounding_box=image.bounding_box,
            )
            for image in result.images
        ]

    def get_image(self, document_id: str, page_number: int, image_index: int) -> str | None:
        """Return the stored base64 payload of one image."""
        return self._storage.get_text(layout.image_path(document_id, page_number, image_index))

    def get_document_summary(self, document_id: str) -> DocumentSummary | None:
        result = self.get_ocr_results(document_id)
        if result is None:
            return None
        return DocumentSummary(
            has_text=bool(result.full_text.strip()),
            has_images=bool(result.images),
            page_count=result.total_pages,
            image_count=len(result.images),
            text_length=len(result.full_text),
        )

    def search_document_text(self, document_id: str, query: str) -> list[SearchMatch] | None:
        """Case-insensitive substring scan of the document's full text.

        Each match carries up to SEARCH_CONTEXT_CHARS characters of context on
        each side and the page it falls on. Returns None when the document has
        no extracted text.
        """
        result = self.get_ocr_results(document_id)
        if result is not None:
            text, page_offsets = result.full_text, result.page_offsets
        else:
            text, page_offsets = self.get_extracted_text(document_id), []
        if not text:
            Log.info("No text to search", document_id=document_id)
            return None

        needle = query.lower()
        haystack = text.lower()
        matches: list[SearchMatch] = []
        position = haystack.find(needle)
        while position != -1:
            start = max(0, position - SEARCH_CONTEXT_CHARS)
            end = min(len(text), position + len(query) + SEARCH_CONTEXT_CHARS)
            matches.append(
                SearchMatch(
                    page_number=page_for_offset(text, position, page_offsets),
                    context=text[start:end],
                    match_index=position,
                )
            )
            position = haystack.find(needle, position + 1)

        Log.info(
            "Searched document text",
            document_id=document_id,
            query=query,
            matches=len(matches),
        )
        return matches


def page_for_offset(text: str, offset: int, page_offsets: list[int]) -> int:
    """Map a character offset in full text to its 1-based page number.

    Uses recorded page start offsets when available; otherwise estimates by
    counting page delimiters before the offset.
    """
    if page_offsets:
        return max(1, bisect_right(page_offsets, offset))
    return max(1, len(text[:offset].split(PAGE_DELIMITER)))


def generate_document_urls(document_id: str, prefix: str = "/api") -> DocumentURLs:
    base = f"{prefix}/documents/{document_id}"
    return DocumentURLs(
        document_url=f"{base}/file",
        text_url=f"{base}/text",
        ocr_url=f"{base}/ocr",
        status_url=f"{base}/ocr/status",
        images_url=f"{base}/images",
    )
