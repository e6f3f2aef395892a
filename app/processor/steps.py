from app.documents.exceptions import NotFoundError
from app.logging.logger import Log
from app.metadata.store import MetadataStore
from app.ocr.base import BaseOCRClient
from app.ocr.transformer import process_ocr_result
from app.processor.pipeline import PipelineContext, PipelineStep
from app.retrieval.service import RetrievalService
from app.storage import layout
from app.storage.gateway import DocumentStorage

PAGES_SUB_PATH = f"{layout.OCR_DIR}/pages"
IMAGES_SUB_PATH = f"{layout.OCR_DIR}/images"


class MarkProcessingStep(PipelineStep):
    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def run(self, context: PipelineContext) -> PipelineContext:
        context.document = self._metadata_store.mark_processing(context.document_id)
        Log.info("Document marked as processing", document_id=context.document_id)
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def run(self, context: PipelineContext) -> PipelineContext:
        self._metadata_store.set_ocr_error(context.document_id, context.error_message)
        Log.error(
            "Document marked as failed",
            document_id=context.document_id,
            error=context.error_message,
        )
        return context


class LoadOriginalStep(PipelineStep):
    def __init__(self, metadata_store: MetadataStore, retrieval: RetrievalService) -> None:
        self._metadata_store = metadata_store
        self._retrieval = retrieval

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.document or self._metadata_store.get_metadata(context.document_id)
        stored = self._retrieval.get_original_file(context.document_id, document.name)
        if stored is None:
            raise NotFoundError("Original PDF file not found")
        context.document = document
        context.raw_bytes = stored.data
        Log.info(
            "Loaded original file",
            document_id=context.document_id,
            size=len(stored.data),
        )
        return context


class ClearPreviousResultsStep(PipelineStep):
    def __init__(self, storage: DocumentStorage) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        self._storage.delete_ocr_results(context.document_id)
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, ocr_client: BaseOCRClient) -> None:
        self._ocr_client = ocr_client

    def run(self, context: PipelineContext) -> PipelineContext:
        context.raw_result = self._ocr_client.extract_text_from_pdf(context.raw_bytes)
        Log.info(
            "OCR extraction completed",
            document_id=context.document_id,
            pages=len(context.raw_result.get("pages", [])),
        )
        return context


class TransformResultStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        context.result = process_ocr_result(context.raw_result)
        return context


class PersistResultsStep(PipelineStep):
    """Writes full-result.json, extracted-text.md, one file per page and per image."""

    def __init__(self, storage: DocumentStorage) -> None:
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.result is None:
            raise ValueError("PipelineContext.result must be set before persist")
        document_id = context.document_id
        result = context.result

        self._storage.store_json(
            document_id,
            layout.FULL_RESULT_FILE,
            result.to_dict(),
            sub_path=layout.OCR_DIR,
        )
        self._storage.store_text(
            document_id,
            layout.EXTRACTED_TEXT_FILE,
            result.full_text,
            sub_path=layout.OCR_DIR,
        )
        for page in result.pages:
            self._storage.store_text(
                document_id,
                layout.page_file_name(page.page_number),
                page.markdown,
                sub_path=PAGES_SUB_PATH,
            )
        for image in result.images:
            self._storage.store_text(
                document_id,
                layout.image_file_name(image.page_number, image.image_index),
                image.base64_data,
                content_type="text/plain",
                sub_path=IMAGES_SUB_PATH,
            )
        Log.info(
            "Persisted OCR artifacts",
            document_id=document_id,
            pages=len(result.pages),
            images=len(result.images),
        )
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, metadata_store: MetadataStore) -> None:
        self._metadata_store = metadata_store

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.result is None:
            raise ValueError("PipelineContext.result must be set before completion")
        context.document = self._metadata_store.mark_completed(
            context.document_id,
            page_count=context.result.total_pages,
            image_count=len(context.result.images),
            processed_at=context.result.processed_at,
        )
        Log.info(
            "Document marked as completed",
            document_id=context.document_id,
            page_count=context.result.total_pages,
        )
        return context
