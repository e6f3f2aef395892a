"""Canonical key layout for everything stored about a document.

documents/{id}/original/{filename}
documents/{id}/metadata.json
documents/{id}/ocr/full-result.json
documents/{id}/ocr/extracted-text.md
documents/{id}/ocr/pages/page-{NNN}.md
documents/{id}/ocr/images/page-{NNN}-img-{NNN}.base64
"""

DOCUMENTS_ROOT = "documents"
ORIGINAL_DIR = "original"
OCR_DIR = "ocr"
METADATA_FILE = "metadata.json"
FULL_RESULT_FILE = "full-result.json"
EXTRACTED_TEXT_FILE = "extracted-text.md"


def pad(number: int) -> str:
    return f"{number:03d}"


def document_path(document_id: str) -> str:
    return f"{DOCUMENTS_ROOT}/{document_id}"


def document_prefix(document_id: str) -> str:
    return f"{document_path(document_id)}/"


def original_file_path(document_id: str, file_name: str) -> str:
    return f"{document_path(document_id)}/{ORIGINAL_DIR}/{file_name}"


def metadata_path(document_id: str) -> str:
    return f"{document_path(document_id)}/{METADATA_FILE}"


def ocr_prefix(document_id: str) -> str:
    return f"{document_path(document_id)}/{OCR_DIR}/"


def full_result_path(document_id: str) -> str:
    return f"{document_path(document_id)}/{OCR_DIR}/{FULL_RESULT_FILE}"


def extracted_text_path(document_id: str) -> str:
    return f"{document_path(document_id)}/{OCR_DIR}/{EXTRACTED_TEXT_FILE}"


def page_file_name(page_number: int) -> str:
    return f"page-{pad(page_number)}.md"


def page_path(document_id: str, page_number: int) -> str:
    return f"{document_path(document_id)}/{OCR_DIR}/pages/{page_file_name(page_number)}"


def image_file_name(page_number: int, image_index: int) -> str:
    """Image files are numbered from 1 while image_index is 0-based."""
    return f"page-{pad(page_number)}-img-{pad(image_index + 1)}.base64"


def image_path(document_id: str, page_number: int, image_index: int) -> str:
    return (
        f"{document_path(document_id)}/{OCR_DIR}/images/"
        f"{image_file_name(page_number, image_index)}"
    )


def document_id_from_prefix(prefix: str) -> str | None:
    """Extract {id} from a first-level prefix such as 'documents/{id}/'."""
    parts = prefix.strip("/").split("/")
    if len(parts) >= 2 and parts[0] == DOCUMENTS_ROOT and parts[1]:
        return parts[1]
    return None
