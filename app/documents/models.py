from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from app.ocr.models import BoundingBox


class OCRStatus(str, Enum):
    NOT_STARTED = "not_started"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class UploadedFile:
    """A file received from a client, before anything is persisted."""

    name: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Document:
    """Identity and lifecycle record stored as documents/{id}/metadata.json."""

    id: str
    name: str
    size: int
    path: str
    upload_date: datetime
    page_count: int = 0
    status: OCRStatus = OCRStatus.NOT_STARTED
    ocr_error: str | None = None
    processed_at: datetime | None = None
    image_count: int = 0
    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys; ocrError is omitted when unset."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "size": self.size,
            "pageCount": self.page_count,
            "uploadDate": self.upload_date.isoformat(),
            "path": self.path,
            "status": self.status.value,
            "imageCount": self.image_count,
            "version": self.version,
        }
        if self.processed_at is not None:
            data["processedAt"] = self.processed_at.isoformat()
        if self.ocr_error is not None:
            data["ocrError"] = self.ocr_error
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        processed_at = data.get("processedAt")
        return cls(
            id=data["id"],
            name=data["name"],
            size=int(data.get("size", 0)),
            path=data["path"],
            upload_date=datetime.fromisoformat(data["uploadDate"]),
            page_count=int(data.get("pageCount", 0)),
            status=_infer_status(data),
            ocr_error=data.get("ocrError"),
            processed_at=datetime.fromisoformat(processed_at) if processed_at else None,
            image_count=int(data.get("imageCount", 0)),
            version=int(data.get("version", 0)),
        )


def _infer_status(data: dict[str, Any]) -> OCRStatus:
    # Records written before the status field existed carry only pageCount/ocrError.
    raw = data.get("status")
    if raw:
        return OCRStatus(raw)
    if data.get("ocrError"):
        return OCRStatus.FAILED
    if int(data.get("pageCount", 0)) > 0:
        return OCRStatus.COMPLETED
    return OCRStatus.NOT_STARTED


@dataclass(frozen=True)
class DocumentURLs:
    document_url: str
    text_url: str
    ocr_url: str
    status_url: str
    images_url: str

    def to_dict(self) -> dict[str, str]:
        return {
            "documentUrl": self.document_url,
            "textUrl": self.text_url,
            "ocrUrl": self.ocr_url,
            "statusUrl": self.status_url,
            "imagesUrl": self.images_url,
        }


@dataclass(frozen=True)
class UploadResult:
    document_id: str
    name: str
    size: int
    page_count: int
    status: OCRStatus
    urls: DocumentURLs

    def to_dict(self) -> dict[str, Any]:
        return {
            "documentId": self.document_id,
            "name": self.name,
            "size": self.size,
            "pageCount": self.page_count,
            "status": self.status.value,
            "url": self.urls.document_url,
            "textUrl": self.urls.text_url,
            "ocrUrl": self.urls.ocr_url,
            "statusUrl": self.urls.status_url,
            "imagesUrl": self.urls.images_url,
        }


@dataclass(frozen=True)
class OCRStatusReport:
    status: OCRStatus
    total_pages: int | None = None
    processed_at: datetime | None = None
    has_images: bool | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": self.status.value}
        if self.total_pages is not None:
            data["totalPages"] = self.total_pages
        if self.processed_at is not None:
            data["processedAt"] = self.processed_at.isoformat()
        if self.has_images is not None:
            data["hasImages"] = self.has_images
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class DocumentImage:
    id: str
    page_number: int
    image_index: int
    path: str
    bounding_box: BoundingBox

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "pageNumber": self.page_number,
            "imageIndex": self.image_index,
            "path": self.path,
            "boundingBox": self.bounding_box.to_dict(),
        }


@dataclass(frozen=True)
class DocumentSummary:
    has_text: bool
    has_images: bool
    page_count: int
    image_count: int
    text_length: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "hasText": self.has_text,
            "hasImages": self.has_images,
            "pageCount": self.page_count,
            "imageCount": self.image_count,
            "textLength": self.text_length,
        }


@dataclass(frozen=True)
class SearchMatch:
    page_number: int
    context: str
    match_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "context": self.context,
            "matchIndex": self.match_index,
        }
