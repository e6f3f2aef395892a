import os
import uuid
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.main import build_app
from app.storage.minio_adapter import MinioObjectStore


def _local_settings(root: Path, mode: str) -> Settings:
    return Settings(
        storage_backend="local",
        local_storage_root=str(root),
        ocr_engine="pymupdf",
        ocr_processing_mode=mode,
        ocr_worker_threads=2,
    )


@pytest.fixture
def inline_client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """HTTP client over local storage and the PyMuPDF engine, OCR run in-request."""
    with TestClient(build_app(_local_settings(tmp_path, "inline"))) as client:
        yield client


@pytest.fixture
def background_client(tmp_path: Path) -> Generator[TestClient, None, None]:
    """Same stack with OCR on the worker pool; leaving the block drains the pool."""
    with TestClient(build_app(_local_settings(tmp_path, "background"))) as client:
        yield client


@pytest.fixture
def minio_store() -> MinioObjectStore:
    endpoint = os.environ.get("MINIO_ENDPOINT")
    if not endpoint:
        pytest.skip("MinIO not configured. Set MINIO_ENDPOINT and credentials to run.")
    settings = Settings()
    store = MinioObjectStore(
        endpoint=endpoint,
        bucket_name=settings.minio_bucket_name or "pdf-ocr-test",
        access_key=settings.minio_access_key,
        secret_key=settings.minio_secret_key,
        secure=settings.minio_secure,
        region=settings.minio_region,
    )
    try:
        store.list("documents/", max_keys=1)
    except Exception as e:
        pytest.skip(f"MinIO not available: {e}")
    return store


@pytest.fixture
def minio_document_id() -> str:
    return str(uuid.uuid4())
