from app.config.settings import Settings
from app.logging.logger import Log
from app.metadata.store import MetadataStore
from app.ocr.base import BaseOCRClient
from app.ocr.factory import OCRClientFactory
from app.processor.pipeline import PipelineContext, PipelineStep
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
from app.storage.gateway import DocumentStorage


class Processor:
    """Runs the OCR pipeline for one document.

    Pipeline: mark processing -> load original -> clear previous results ->
    extract -> transform -> persist -> mark completed. On any step failure the
    failed step records the error and the exception is re-raised.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, document_id: str) -> PipelineContext:
        Log.info("Processing document", document_id=document_id, operation="ocr_pipeline")
        context = PipelineContext(document_id=document_id)
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc) or exc.__class__.__name__
            self._failed_step.run(context)
            raise
        return context


def build_processor(
    storage: DocumentStorage,
    metadata_store: MetadataStore,
    retrieval: RetrievalService,
    settings: Settings | None = None,
    ocr_client: BaseOCRClient | None = None,
) -> Processor:
    """Build a Processor wired to the given storage and OCR engine.

    The OCR engine comes from settings unless one is passed explicitly.
    """
    if ocr_client is None:
        if settings is None:
            raise ValueError("settings are required when no OCR client is given")
        ocr_client = OCRClientFactory.create(settings)
    steps: list[PipelineStep] = [
        MarkProcessingStep(metadata_store),
        LoadOriginalStep(metadata_store, retrieval),
        ClearPreviousResultsStep(storage),
        ExtractTextStep(ocr_client),
        TransformResultStep(),
        PersistResultsStep(storage),
        MarkCompletedStep(metadata_store),
    ]
    return Processor(steps=steps, failed_step=MarkFailedStep(metadata_store))
