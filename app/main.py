import uvicorn
from fastapi import FastAPI

from app.api.app import create_app
from app.config.settings import Settings
from app.documents.orchestrator import DocumentOrchestrator
from app.logging.logger import Log
from app.metadata.store import MetadataStore
from app.ocr.base import BaseOCRClient
from app.processor.processor import build_processor
from app.retrieval.service import RetrievalService
from app.storage.base import BaseObjectStore
from app.storage.factory import ObjectStoreFactory
from app.storage.gateway import DocumentStorage
from app.worker.dispatcher import OCRJobDispatcher
from app.worker.job_runner import OCRJobRunner


def build_app(
    settings: Settings | None = None,
    store: BaseObjectStore | None = None,
    ocr_client: BaseOCRClient | None = None,
) -> FastAPI:
    """Wire storage -> metadata -> retrieval -> processor -> dispatcher -> HTTP app.

    The object store and OCR engine come from settings unless passed in.
    """
    settings = settings or Settings()
    storage = DocumentStorage(
        store or ObjectStoreFactory.create(settings),
        list_page_size=settings.storage_list_page_size,
    )
    metadata_store = MetadataStore(storage)
    retrieval = RetrievalService(storage)
    processor = build_processor(
        storage,
        metadata_store,
        retrieval,
        settings=settings,
        ocr_client=ocr_client,
    )
    dispatcher = OCRJobDispatcher.from_settings(OCRJobRunner(processor), settings)
    orchestrator = DocumentOrchestrator(
        settings=settings,
        storage=storage,
        metadata_store=metadata_store,
        retrieval=retrieval,
        processor=processor,
        dispatcher=dispatcher,
    )
    return create_app(settings, orchestrator, dispatcher)


def main() -> None:
    """Entry point: load settings -> configure logging -> build app -> serve."""
    settings = Settings()
    Log.configure(settings.log_level)
    Log.info(
        "Starting PDF OCR service",
        env=settings.app_env,
        storage_backend=settings.storage_backend,
        ocr_engine=settings.ocr_engine,
        processing_mode=settings.ocr_processing_mode,
    )
    app = build_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
