"""Stateless input guards for the document pipeline.

Every check raises ValidationError with a message safe to return to clients.
"""

import re
from typing import Any

from app.config.settings import Settings
from app.documents.exceptions import ValidationError
from app.documents.models import UploadedFile

PDF_CONTENT_TYPE = "application/pdf"
ACCEPTED_CONTENT_TYPES = frozenset({PDF_CONTENT_TYPE})
MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
MAX_FILE_NAME_LENGTH = 255

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_DANGEROUS_CHARS_RE = re.compile(r'[<>:"/\\|?*]')
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f]")
_RESERVED_NAME_RE = re.compile(r"^(CON|PRN|AUX|NUL|COM[1-9]|LPT[1-9])(\.|$)", re.IGNORECASE)

# Engines that run locally and need no provider credential.
_LOCAL_OCR_ENGINES = frozenset({"pymupdf", "pdfplumber"})


def validate_file(
    file: UploadedFile | None,
    max_size_bytes: int = MAX_FILE_SIZE_BYTES,
) -> None:
    if file is None:
        raise ValidationError("No file provided")
    if file.content_type not in ACCEPTED_CONTENT_TYPES:
        raise ValidationError("Invalid file type. Only PDF files are accepted")
    if file.size > max_size_bytes:
        limit_mb = max_size_bytes // (1024 * 1024)
        raise ValidationError(f"File size exceeds the maximum limit of {limit_mb}MB")
    if file.size == 0:
        raise ValidationError("File is empty")


def validate_document_id(document_id: Any) -> None:
    if document_id is None or document_id == "":
        raise ValidationError("Document ID is required")
    if not isinstance(document_id, str):
        raise ValidationError("Document ID must be a string")
    if not _UUID_RE.match(document_id):
        raise ValidationError("Invalid document ID format")


def validate_page_number(page_number: Any, max_pages: int | None = None) -> None:
    if isinstance(page_number, bool) or not isinstance(page_number, int):
        raise ValidationError("Page number must be an integer")
    if page_number < 1:
        raise ValidationError("Page number must be greater than 0")
    if max_pages is not None and page_number > max_pages:
        raise ValidationError(
            f"Page number {page_number} exceeds document page count of {max_pages}"
        )


def validate_file_name(file_name: str | None) -> None:
    if not file_name:
        raise ValidationError("File name is required")
    if _DANGEROUS_CHARS_RE.search(file_name) or _CONTROL_CHARS_RE.search(file_name):
        raise ValidationError("File name contains invalid characters")
    if len(file_name) > MAX_FILE_NAME_LENGTH:
        raise ValidationError(
            f"File name is too long (maximum {MAX_FILE_NAME_LENGTH} characters)"
        )
    if _RESERVED_NAME_RE.match(file_name):
        raise ValidationError("File name is reserved and cannot be used")
    # Covers "." and "..", which would resolve to a directory of the document.
    if file_name.endswith((".", " ")):
        raise ValidationError("File name cannot end with a dot or space")


def validate_environment(settings: Settings) -> None:
    """Reject configurations that cannot store files or reach the OCR provider."""
    backend = settings.storage_backend.lower()
    if backend == "minio":
        if not settings.minio_endpoint or not settings.minio_bucket_name:
            raise ValidationError("PDF storage is not configured")
    elif backend == "local":
        if not settings.local_storage_root:
            raise ValidationError("PDF storage is not configured")
    else:
        raise ValidationError("PDF storage is not configured")

    engine = settings.ocr_engine.lower()
    if engine not in _LOCAL_OCR_ENGINES and not settings.mistral_api_key:
        raise ValidationError("OCR service is not configured")


def validate_buffer(buffer: bytes | None, min_size: int | None = None) -> None:
    if buffer is None:
        raise ValidationError("Buffer is required")
    if len(buffer) == 0:
        raise ValidationError("Buffer is empty")
    if min_size and len(buffer) < min_size:
        raise ValidationError(f"Buffer is too small (minimum {min_size} bytes required)")


def validate_content_type(
    content_type: str | None,
    allowed_types: list[str] | None = None,
) -> None:
    if not content_type:
        raise ValidationError("Content type is required")
    if allowed_types is not None and content_type not in allowed_types:
        raise ValidationError(f"Content type '{content_type}' is not allowed")
