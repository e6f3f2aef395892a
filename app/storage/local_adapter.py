from __future__ import annotations

import mimetypes
import os
import tempfile
from pathlib import Path

from app.storage.base import BaseObjectStore, ListResult, StoredObject
from app.storage.exceptions import StorageError

_CONTENT_TYPES = {
    ".md": "text/markdown",
    ".base64": "text/plain",
    ".json": "application/json",
    ".pdf": "application/pdf",
}
# In-flight writes; never reported as keys.
_PARTIAL_SUFFIX = ".part"


def guess_content_type(key: str) -> str:
    suffix = Path(key).suffix.lower()
    if suffix in _CONTENT_TYPES:
        return _CONTENT_TYPES[suffix]
    guessed, _ = mimetypes.guess_type(key)
    return guessed or "application/octet-stream"


class LocalObjectStore(BaseObjectStore):
    """Object store adapter backed by a directory tree: key a/b/c -> {root}/a/b/c."""

    def __init__(self, root: Path) -> None:
        self._root = root.resolve()

    def put(self, key: str, data: bytes, content_type: str) -> None:
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._write_atomic(path, data)
        except OSError as exc:
            raise StorageError(f"Failed to store {key}: {exc}") from exc

    def get(self, key: str) -> StoredObject | None:
        path = self._resolve(key)
        if not path.is_file():
            return None
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {key}: {exc}") from exc
        return StoredObject(key=key, data=data, content_type=guess_content_type(key))

    def list(
        self,
        prefix: str,
        delimiter: str | None = None,
        start_after: str | None = None,
        max_keys: int = 1000,
    ) -> ListResult:
        entries: dict[str, bool] = {}
        for key in self._all_keys():
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if delimiter and delimiter in rest:
                rolled = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                entries[rolled] = True
            else:
                entries[key] = False

        ordered = sorted(entries)
        if start_after is not None:
            ordered = [name for name in ordered if name > start_after]

        page = ordered[:max_keys]
        truncated = len(ordered) > max_keys
        return ListResult(
            keys=[name for name in page if not entries[name]],
            prefixes=[name for name in page if entries[name]],
            truncated=truncated,
            next_start_after=page[-1] if truncated and page else None,
        )

    def delete(self, key: str) -> None:
        path = self._resolve(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {key}: {exc}") from exc
        self._prune_empty_dirs(path.parent)

    def _all_keys(self) -> list[str]:
        if not self._root.exists():
            return []
        return [
            path.relative_to(self._root).as_posix()
            for path in self._root.rglob("*")
            if path.is_file() and not path.name.endswith(_PARTIAL_SUFFIX)
        ]

    @staticmethod
    def _write_atomic(path: Path, data: bytes) -> None:
        """Write to a sibling temp file and rename it over path, so readers see old or new bytes."""
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=_PARTIAL_SUFFIX)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(tmp_name, path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _resolve(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if path == self._root or self._root not in path.parents:
            raise StorageError(f"Key escapes storage root: {key}")
        return path

    def _prune_empty_dirs(self, directory: Path) -> None:
        while directory != self._root and self._root in directory.parents:
            try:
                directory.rmdir()
            except OSError:
                return
            directory = directory.parent
