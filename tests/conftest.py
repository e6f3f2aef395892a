import io
from pathlib import Path
from typing import Any

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from app.config.settings import Settings
from app.storage.gateway import DocumentStorage
from app.storage.local_adapter import LocalObjectStore


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def raw_ocr_response() -> dict[str, Any]:
    """Provider-shaped OCR response: two pages, two images on the first."""
    return {
        "pages": [
            {
                "index": 0,
                "markdown": "# Report\n\nGlucose level is normal.",
                "images": [
                    {
                        "id": "img-0.jpeg",
                        "top_left_x": 10,
                        "top_left_y": 20,
                        "bottom_right_x": 110,
                        "bottom_right_y": 220,
                        "image_base64": "data:image/jpeg;base64,AAAA",
                    },
                    {
                        "id": "img-1.jpeg",
                        "top_left_x": 200,
                        "top_left_y": 20,
                        "bottom_right_x": 300,
                        "bottom_right_y": 120,
                        "image_base64": "data:image/jpeg;base64,BBBB",
                    },
                ],
                "dimensions": {"dpi": 200, "width": 1700, "height": 2200},
            },
            {
                "index": 1,
                "markdown": "Second page mentions glucose again.",
                "images": [],
                "dimensions": {"dpi": 200, "width": 1700, "height": 2200},
            },
        ],
        "model": "mistral-ocr-latest",
        "usage_info": {"pages_processed": 2, "doc_size_bytes": 2048},
    }


@pytest.fixture()
def local_store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "objects")


@pytest.fixture()
def storage(local_store: LocalObjectStore) -> DocumentStorage:
    return DocumentStorage(local_store)


@pytest.fixture()
def local_settings(tmp_path: Path) -> Settings:
    """Settings for a local-disk store, the PyMuPDF engine and inline OCR."""
    return Settings(
        storage_backend="local",
        local_storage_root=str(tmp_path / "objects"),
        ocr_engine="pymupdf",
        ocr_processing_mode="inline",
        mistral_api_key="",
    )
