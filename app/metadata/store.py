import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any

from app.documents.exceptions import NotFoundError
from app.documents.models import Document, OCRStatus
from app.logging.logger import Log
from app.storage import layout
from app.storage.gateway import DocumentStorage


class MetadataStore:
    """Reads and writes documents/{id}/metadata.json.

    Every write is a read-merge-write that bumps `version`. Writes for the
    same document id are serialized through a per-id lock, so there is a
    single writer per document inside the process.
    """

    def __init__(self, storage: DocumentStorage) -> None:
        self._storage = storage
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def create_metadata(self, document: Document) -> Document:
        with self._document_lock(document.id):
            created = replace(document, version=1)
            self._write(created)
        Log.info(
            "Created metadata",
            document_id=document.id,
            name=document.name,
            size=document.size,
        )
        return created

    def get_metadata(self, document_id: str) -> Document:
        """Fetch the metadata record.

        Raises:
            NotFoundError: if the document has no metadata.json.
        """
        payload = self._storage.get_json(layout.metadata_path(document_id))
        if payload is None:
            raise NotFoundError("Document not found")
        return Document.from_dict(payload)

    def update_metadata(self, document_id: str, **changes: Any) -> Document:
        """Merge field changes into the stored record and write it back.

        Setting ocr_error or processed_at to None removes the key from the
        stored JSON.
        """
        with self._document_lock(document_id):
            current = self.get_metadata(document_id)
            updated = replace(current, version=current.version + 1, **changes)
            self._write(updated)
        Log.debug(
            "Updated metadata",
            document_id=document_id,
            fields=",".join(sorted(changes)),
            version=updated.version,
        )
        return updated

    def update_page_count(self, document_id: str, page_count: int) -> Document:
        return self.update_metadata(document_id, page_count=page_count)

    def set_ocr_error(self, document_id: str, message: str) -> Document:
        Log.warning("Recording OCR error", document_id=document_id, error=message)
        return self.update_metadata(
            document_id,
            ocr_error=message,
            status=OCRStatus.FAILED,
        )

    def clear_ocr_error(self, document_id: str) -> Document:
        return self.update_metadata(document_id, ocr_error=None)

    def mark_processing(self, document_id: str) -> Document:
        return self.update_metadata(
            document_id,
            status=OCRStatus.PROCESSING,
            ocr_error=None,
        )

    def mark_completed(
        self,
        document_id: str,
        page_count: int,
        image_count: int,
        processed_at: datetime,
    ) -> Document:
        return self.update_metadata(
            document_id,
            status=OCRStatus.COMPLETED,
            page_count=page_count,
            image_count=image_count,
            processed_at=processed_at,
            ocr_error=None,
        )

    def mark_failed(self, document_id: str, message: str) -> Document:
        return self.set_ocr_error(document_id, message)

    def get_all_metadata(self) -> list[Document]:
        """Return every readable record, newest upload first.

        Records that cannot be fetched or parsed are logged and skipped.
        """
        documents: list[Document] = []
        for prefix in self._storage.iter_prefixes(f"{layout.DOCUMENTS_ROOT}/"):
            document_id = layout.document_id_from_prefix(prefix)
            if document_id is None:
                continue
            try:
                documents.append(self.get_metadata(document_id))
            except Exception as exc:
                Log.warning(
                    "Skipping unreadable metadata",
                    document_id=document_id,
                    error=exc,
                )
        documents.sort(key=lambda document: document.upload_date, reverse=True)
        Log.info("Listed documents", document_count=len(documents))
        return documents

    def forget(self, document_id: str) -> None:
        """Drop the writer lock of a document whose objects are gone."""
        with self._locks_guard:
            self._locks.pop(document_id, None)

    def document_exists(self, document_id: str) -> bool:
        return self._storage.get_file(layout.metadata_path(document_id)) is not None

    def _write(self, document: Document) -> None:
        self._storage.store_json(document.id, layout.METADATA_FILE, document.to_dict())

    @contextmanager
    def _document_lock(self, document_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(document_id, threading.Lock())
        with lock:
            yield
