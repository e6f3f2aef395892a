import json
from collections.abc import Iterator
from typing import Any

from app.logging.logger import Log
from app.storage import layout
from app.storage.base import BaseObjectStore, ListResult, StoredObject


class DocumentStorage:
    """Byte/JSON/text access to the object store, namespaced under documents/{id}/.

    Every read is a live fetch; nothing is cached.
    """

    def __init__(self, store: BaseObjectStore, list_page_size: int = 1000) -> None:
        self._store = store
        self._list_page_size = list_page_size

    def store_file(
        self,
        document_id: str,
        file_name: str,
        data: bytes,
        content_type: str,
        sub_path: str = layout.ORIGINAL_DIR,
    ) -> str:
        path = self._build_path(document_id, file_name, sub_path)
        self._store.put(path, data, content_type)
        Log.info(
            "Stored file",
            document_id=document_id,
            path=path,
            size=len(data),
            content_type=content_type,
        )
        return path

    def store_json(
        self,
        document_id: str,
        file_name: str,
        payload: Any,
        sub_path: str = "",
    ) -> str:
        path = self._build_path(document_id, file_name, sub_path)
        body = json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        self._store.put(path, body, "application/json")
        Log.debug("Stored JSON", document_id=document_id, path=path)
        return path

    def store_text(
        self,
        document_id: str,
        file_name: str,
        text: str,
        content_type: str = "text/markdown",
        sub_path: str = "",
    ) -> str:
        path = self._build_path(document_id, file_name, sub_path)
        self._store.put(path, text.encode("utf-8"), content_type)
        Log.debug(
            "Stored text",
            document_id=document_id,
            path=path,
            text_length=len(text),
        )
        return path

    def get_file(self, path: str) -> StoredObject | None:
        stored = self._store.get(path)
        if stored is None:
            Log.debug("Object not found", path=path)
        return stored

    def get_json(self, path: str) -> Any | None:
        stored = self.get_file(path)
        if stored is None:
            return None
        return json.loads(stored.data.decode("utf-8"))

    def get_text(self, path: str) -> str | None:
        stored = self.get_file(path)
        if stored is None:
            return None
        return stored.data.decode("utf-8")

    def list_objects(
        self,
        prefix: str,
        delimiter: str | None = None,
        start_after: str | None = None,
    ) -> ListResult:
        """Return one page of keys under prefix; check `truncated` for more."""
        result = self._store.list(
            prefix,
            delimiter=delimiter,
            start_after=start_after,
            max_keys=self._list_page_size,
        )
        Log.debug(
            "Listed objects",
            prefix=prefix,
            object_count=len(result.keys),
            prefix_count=len(result.prefixes),
            truncated=result.truncated,
        )
        return result

    def iter_keys(self, prefix: str) -> Iterator[str]:
        """Yield every key under prefix, following pagination."""
        start_after: str | None = None
        while True:
            page = self.list_objects(prefix, start_after=start_after)
            yield from page.keys
            if not page.truncated:
                return
            start_after = page.next_start_after

    def iter_prefixes(self, prefix: str, delimiter: str = "/") -> Iterator[str]:
        """Yield every first-level prefix under prefix, following pagination.

        S3 repeats a prefix on the next page while keys after start_after still
        fall under it, so a prefix equal to the last one yielded is skipped.
        """
        start_after: str | None = None
        last: str | None = None
        while True:
            page = self.list_objects(prefix, delimiter=delimiter, start_after=start_after)
            for name in page.prefixes:
                if name != last:
                    yield name
                    last = name
            if not page.truncated:
                return
            start_after = page.next_start_after

    def delete_file(self, path: str) -> None:
        self._store.delete(path)
        Log.debug("Deleted object", path=path)

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key under prefix and return how many were deleted."""
        keys = list(self.iter_keys(prefix))
        for key in keys:
            self.delete_file(key)
        return len(keys)

    def delete_document(self, document_id: str) -> int:
        deleted = self.delete_prefix(layout.document_prefix(document_id))
        Log.info("Deleted document objects", document_id=document_id, files_deleted=deleted)
        return deleted

    def delete_ocr_results(self, document_id: str) -> int:
        deleted = self.delete_prefix(layout.ocr_prefix(document_id))
        if deleted:
            Log.info(
                "Cleared previous OCR results",
                document_id=document_id,
                files_deleted=deleted,
            )
        return deleted

    @staticmethod
    def _build_path(document_id: str, file_name: str, sub_path: str) -> str:
        base = layout.document_path(document_id)
        if sub_path:
            return f"{base}/{sub_path}/{file_name}"
        return f"{base}/{file_name}"
