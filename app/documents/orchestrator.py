import uuid
from datetime import datetime, timezone
from typing import Any

from app.config.settings import Settings
from app.documents import validation
from app.documents.exceptions import NotFoundError, ValidationError
from app.documents.models import (
    Document,
    DocumentImage,
    DocumentSummary,
    OCRStatus,
    OCRStatusReport,
    SearchMatch,
    UploadedFile,
    UploadResult,
)
from app.logging.logger import Log
from app.metadata.store import MetadataStore
from app.ocr.models import ProcessedOCRResult
from app.ocr.pymupdf_adapter import read_pdf_metadata
from app.processor.processor import Processor
from app.retrieval.service import RetrievalService, generate_document_urls
from app.storage.base import StoredObject
from app.storage.gateway import DocumentStorage
from app.worker.dispatcher import OCRJobDispatcher


class DocumentOrchestrator:
    """Drives the upload pipeline and the document lifecycle operations.

    Lifecycle: not_started -> processing -> completed | failed, and
    failed -> processing on retry. Upload never fails because OCR failed;
    the error is recorded on the document instead.
    """

    def __init__(
        self,
        settings: Settings,
        storage: DocumentStorage,
        metadata_store: MetadataStore,
        retrieval: RetrievalService,
        processor: Processor,
        dispatcher: OCRJobDispatcher,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._metadata_store = metadata_store
        self._retrieval = retrieval
        self._processor = processor
        self._dispatcher = dispatcher

    def upload_document(self, file: UploadedFile | None) -> UploadResult:
        """Validate, store the original, record metadata and dispatch OCR.

        Raises:
            ValidationError: if the file, its name or the environment is invalid.
                Nothing is persisted in that case.
        """
        if file is None:
            raise ValidationError("No file provided")
        validation.validate_file(file, self._settings.max_file_size_bytes)
        validation.validate_environment(self._settings)
        validation.validate_file_name(file.name)
        validation.validate_buffer(file.data, self._settings.min_file_size_bytes)

        document_id = str(uuid.uuid4())
        Log.info(
            "Upload started",
            document_id=document_id,
            name=file.name,
            size=file.size,
            operation="upload_document",
        )
        path = self._storage.store_file(
            document_id,
            file.name,
            file.data,
            validation.PDF_CONTENT_TYPE,
        )
        self._metadata_store.create_metadata(
            Document(
                id=document_id,
                name=file.name,
                size=file.size,
                path=path,
                upload_date=datetime.now(timezone.utc),
            )
        )

        self._dispatcher.dispatch(document_id)

        document = self._metadata_store.get_metadata(document_id)
        Log.info(
            "Upload completed",
            document_id=document_id,
            status=document.status.value,
            page_count=document.page_count,
            operation="upload_document",
        )
        return UploadResult(
            document_id=document_id,
            name=document.name,
            size=document.size,
            page_count=document.page_count,
            status=document.status,
            urls=generate_document_urls(document_id, self._settings.api_prefix),
        )

    def get_documents(self) -> list[Document]:
        return self._metadata_store.get_all_metadata()

    def get_document(self, document_id: str) -> Document:
        validation.validate_document_id(document_id)
        return self._metadata_store.get_metadata(document_id)

    def delete_document(self, document_id: str) -> int:
        """Delete the document and every derived artifact. Returns the key count."""
        document = self.get_document(document_id)
        deleted = self._storage.delete_document(document.id)
        self._metadata_store.forget(document.id)
        return deleted

    def get_ocr_status(self, document_id: str) -> OCRStatusReport:
        document = self.get_document(document_id)
        if document.status == OCRStatus.COMPLETED:
            return OCRStatusReport(
                status=document.status,
                total_pages=document.page_count,
                processed_at=document.processed_at,
                has_images=document.image_count > 0,
            )
        return OCRStatusReport(status=document.status, error=document.ocr_error)

    def retry_ocr_processing(self, document_id: str) -> Document:
        """Re-run OCR synchronously over the stored original.

        Previous OCR artifacts are removed before the engine is called.
        Failures are recorded on the document and re-raised.
        """
        document = self.get_document(document_id)
        Log.info("Retrying OCR", document_id=document.id, operation="retry_ocr")
        self._metadata_store.clear_ocr_error(document.id)
        context = self._processor.process(document.id)
        return context.document or self._metadata_store.get_metadata(document.id)

    def get_document_ocr(self, document_id: str) -> ProcessedOCRResult:
        self.get_document(document_id)
        result = self._retrieval.get_ocr_results(document_id)
        if result is None:
            raise NotFoundError("OCR results not available")
        return result

    def get_document_extracted_text(self, document_id: str) -> str:
        self.get_document(document_id)
        text = self._retrieval.get_extracted_text(document_id)
        if text is None:
            raise NotFoundError("Extracted text not available")
        return text

    def get_document_page(self, document_id: str, page_number: Any) -> str:
        validation.validate_document_id(document_id)
        validation.validate_page_number(page_number)
        content = self._retrieval.get_page_content(document_id, page_number)
        if content is None:
            raise NotFoundError(f"Page {page_number} not found")
        return content

    def get_document_images(self, document_id: str) -> list[DocumentImage]:
        self.get_document(document_id)
        images = self._retrieval.get_document_images(document_id)
        if images is None:
            raise NotFoundError("No images found for document")
        return images

    def get_document_image(self, document_id: str, page_number: Any, image_index: Any) -> str:
        validation.validate_document_id(document_id)
        validation.validate_page_number(page_number)
        if isinstance(image_index, bool) or not isinstance(image_index, int) or image_index < 0:
            raise ValidationError("Image index must be a non-negative integer")
        data = self._retrieval.get_image(document_id, page_number, image_index)
        if data is None:
            raise NotFoundError("Image not found")
        return data

    def get_original_file(self, document_id: str) -> tuple[Document, StoredObject]:
        document = self.get_document(document_id)
        stored = self._retrieval.get_original_file(document.id, document.name)
        if stored is None:
            raise NotFoundError("Original PDF file not found")
        return document, stored

    def get_pdf_metadata(self, document_id: str) -> dict[str, Any]:
        _, stored = self.get_original_file(document_id)
        return read_pdf_metadata(stored.data)

    def search_document(self, document_id: str, query: str | None) -> list[SearchMatch]:
        validation.validate_document_id(document_id)
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        matches = self._retrieval.search_document_text(document_id, query)
        if matches is None:
            raise NotFoundError("Extracted text not available")
        return matches

    def get_document_summary(self, document_id: str) -> DocumentSummary:
        validation.validate_document_id(document_id)
        summary = self._retrieval.get_document_summary(document_id)
        if summary is None:
            raise NotFoundError("OCR results not available")
        return summary
