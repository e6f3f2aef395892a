from app.config.settings import Settings
from app.ocr.base import BaseOCRClient
from app.ocr.mistral_client_adapter import MistralOCRClient
from app.ocr.pdfplumber_adapter import PdfPlumberOCRClient
from app.ocr.pymupdf_adapter import PyMuPdfOCRClient


class OCRClientFactory:
    """Creates the correct OCR engine based on settings."""

    ENGINES = ("mistral", "pymupdf", "pdfplumber")

    @classmethod
    def create(cls, settings: Settings) -> BaseOCRClient:
        engine = settings.ocr_engine.lower()
        if engine == "mistral":
            return MistralOCRClient(
                api_key=settings.mistral_api_key,
                model=settings.mistral_ocr_model,
                timeout_seconds=settings.mistral_timeout_seconds,
                base_url=settings.mistral_base_url,
                include_images=settings.ocr_include_images,
            )
        if engine == "pymupdf":
            return PyMuPdfOCRClient(include_images=settings.ocr_include_images)
        if engine == "pdfplumber":
            return PdfPlumberOCRClient()
        raise ValueError(
            f"Unknown OCR engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
