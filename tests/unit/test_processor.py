from datetime import datetime, timezone
from typing import Any
from unittest.mock import MagicMock

import pytest

from app.documents.exceptions import NotFoundError
from app.documents.models import Document, OCRStatus
from app.metadata.store import MetadataStore
from app.ocr.exceptions import OCRProviderError
from app.processor.pipeline import PipelineContext
from app.processor.processor import Processor, build_processor
from app.processor.steps import (
    ClearPreviousResultsStep,
    ExtractTextStep,
    LoadOriginalStep,
    MarkCompletedStep,
    MarkFailedStep,
    MarkProcessingStep,
    PersistResultsStep,
    TransformResultStep,
)
from app.retrieval.service import RetrievalService
from app.storage import layout
from app.storage.base import StoredObject
from app.storage.gateway import DocumentStorage

DOCUMENT_ID = "3f2b8c1e-4d5a-4b6c-8e7f-9a0b1c2d3e4f"


def _make_document() -> Document:
    return Document(
        id=DOCUMENT_ID,
        name="report.pdf",
        size=2048,
        path=layout.original_file_path(DOCUMENT_ID, "report.pdf"),
        upload_date=datetime(2025, 1, 1, tzinfo=timezone.utc),
    )


def _make_pipeline(
    raw_ocr_response: dict[str, Any],
) -> tuple[Processor, MagicMock, MagicMock, MagicMock, MagicMock]:
    storage = MagicMock(spec=DocumentStorage)
    metadata_store = MagicMock(spec=MetadataStore)
    retrieval = MagicMock(spec=RetrievalService)
    ocr_client = MagicMock()

    metadata_store.mark_processing.return_value = _make_document()
    retrieval.get_original_file.return_value = StoredObject(key="k", data=b"%PDF-fake")
    ocr_client.extract_text_from_pdf.return_value = raw_ocr_response

    steps = [
        MarkProcessingStep(metadata_store),
        LoadOriginalStep(metadata_store, retrieval),
        ClearPreviousResultsStep(storage),
        ExtractTextStep(ocr_client),
        TransformResultStep(),
        PersistResultsStep(storage),
        MarkCompletedStep(metadata_store),
    ]
    processor = Processor(steps=steps, failed_step=MarkFailedStep(metadata_store))
    return processor, storage, metadata_store, retrieval, ocr_client


class TestProcessorPipeline:
    def test_runs_all_steps_and_persists_outputs(self, raw_ocr_response: dict[str, Any]) -> None:
        processor, storage, metadata_store, retrieval, ocr_client = _make_pipeline(raw_ocr_response)

        context = processor.process(DOCUMENT_ID)

        metadata_store.mark_processing.assert_called_once_with(DOCUMENT_ID)
        retrieval.get_original_file.assert_called_once_with(DOCUMENT_ID, "report.pdf")
        storage.delete_ocr_results.assert_called_once_with(DOCUMENT_ID)
        ocr_client.extract_text_from_pdf.assert_called_once_with(b"%PDF-fake")
        assert context.result is not None
        assert context.result.total_pages == 2
        metadata_store.mark_completed.assert_called_once_with(
            DOCUMENT_ID,
            page_count=2,
            image_count=2,
            processed_at=context.result.processed_at,
        )
        metadata_store.set_ocr_error.assert_not_called()

    def test_persists_every_artifact(self, raw_ocr_response: dict[str, Any]) -> None:
        processor, storage, *_ = _make_pipeline(raw_ocr_response)

        processor.process(DOCUMENT_ID)

        json_names = [call.args[1] for call in storage.store_json.call_args_list]
        text_names = [call.args[1] for call in storage.store_text.call_args_list]
        assert json_names == ["full-result.json"]
        assert text_names == [
            "extracted-text.md",
            "page-001.md",
            "page-002.md",
            "page-001-img-001.base64",
            "page-001-img-002.base64",
        ]
        image_call = storage.store_text.call_args_list[-1]
        assert image_call.kwargs["sub_path"] == "ocr/images"
        assert image_call.kwargs["content_type"] == "text/plain"

    def test_marks_failed_and_reraises_on_step_error(self, raw_ocr_response: dict[str, Any]) -> None:
        processor, storage, metadata_store, _retrieval, ocr_client = _make_pipeline(raw_ocr_response)
        ocr_client.extract_text_from_pdf.side_effect = OCRProviderError(
            "Failed to extract text from PDF: Invalid API key"
        )

        with pytest.raises(OCRProviderError, match="Invalid API key"):
            processor.process(DOCUMENT_ID)

        metadata_store.set_ocr_error.assert_called_once_with(
            DOCUMENT_ID,
            "Failed to extract text from PDF: Invalid API key",
        )
        storage.store_json.assert_not_called()
        metadata_store.mark_completed.assert_not_called()

    def test_missing_original_fails_the_document(self, raw_ocr_response: dict[str, Any]) -> None:
        processor, _storage, metadata_store, retrieval, ocr_client = _make_pipeline(raw_ocr_response)
        retrieval.get_original_file.return_value = None

        with pytest.raises(NotFoundError, match="Original PDF file not found"):
            processor.process(DOCUMENT_ID)

        ocr_client.extract_text_from_pdf.assert_not_called()
        metadata_store.set_ocr_error.assert_called_once_with(DOCUMENT_ID, "Original PDF file not found")

    def test_clears_previous_results_before_calling_engine(self, raw_ocr_response: dict[str, Any]) -> None:
        processor, storage, metadata_store, _retrieval, ocr_client = _make_pipeline(raw_ocr_response)
        call_order: list[str] = []
        metadata_store.mark_processing.side_effect = lambda *_: (
            call_order.append("mark_processing"),
            _make_document(),
        )[1]
        storage.delete_ocr_results.side_effect = lambda *_: call_order.append("clear")
        ocr_client.extract_text_from_pdf.side_effect = lambda *_: (
            call_order.append("extract"),
            raw_ocr_response,
        )[1]

        processor.process(DOCUMENT_ID)

        assert call_order == ["mark_processing", "clear", "extract"]


class TestPersistResultsStep:
    def test_requires_result(self) -> None:
        step = PersistResultsStep(MagicMock(spec=DocumentStorage))
        with pytest.raises(ValueError, match="result must be set"):
            step.run(PipelineContext(document_id=DOCUMENT_ID))


class TestBuildProcessor:
    def test_runs_against_real_storage(
        self,
        storage: DocumentStorage,
        raw_ocr_response: dict[str, Any],
    ) -> None:
        metadata_store = MetadataStore(storage)
        metadata_store.create_metadata(_make_document())
        storage.store_file(DOCUMENT_ID, "report.pdf", b"%PDF-fake", "application/pdf")
        ocr_client = MagicMock()
        ocr_client.extract_text_from_pdf.return_value = raw_ocr_response
        processor = build_processor(
            storage,
            metadata_store,
            RetrievalService(storage),
            ocr_client=ocr_client,
        )

        processor.process(DOCUMENT_ID)

        document = metadata_store.get_metadata(DOCUMENT_ID)
        assert document.status == OCRStatus.COMPLETED
        assert document.page_count == 2
        assert storage.get_text(layout.page_path(DOCUMENT_ID, 2)) == "Second page mentions glucose again."
        assert storage.get_text(layout.image_path(DOCUMENT_ID, 1, 1)) == "data:image/jpeg;base64,BBBB"

    def test_requires_settings_or_client(self, storage: DocumentStorage) -> None:
        with pytest.raises(ValueError, match="settings are required"):
            build_processor(storage, MetadataStore(storage), RetrievalService(storage))
