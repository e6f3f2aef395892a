import io

from minio import Minio
from minio.error import S3Error

from app.logging.logger import Log
from app.storage.base import BaseObjectStore, ListResult, StoredObject
from app.storage.exceptions import StorageError

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject"})


class MinioObjectStore(BaseObjectStore):
    """Object store adapter over a MinIO / S3-compatible bucket."""

    def __init__(
        self,
        *,
        endpoint: str,
        bucket_name: str,
        access_key: str | None = None,
        secret_key: str | None = None,
        secure: bool = False,
        region: str | None = None,
    ) -> None:
        if not endpoint:
            raise StorageError("MinIO endpoint must be configured")
        if not bucket_name:
            raise StorageError("MinIO bucket name must be configured")
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key or None,
            secret_key=secret_key or None,
            secure=secure,
            region=region or None,
        )
        self._bucket = bucket_name
        self._bucket_checked = False
        Log.info(
            "MinIO client initialized",
            endpoint=endpoint,
            bucket=bucket_name,
            secure=secure,
        )

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self._ensure_bucket()
        try:
            self._client.put_object(
                bucket_name=self._bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error as exc:
            raise StorageError(f"Failed to store {key}: {exc}") from exc

    def get(self, key: str) -> StoredObject | None:
        try:
            response = self._client.get_object(bucket_name=self._bucket, object_name=key)
        except S3Error as exc:
            if exc.code in _MISSING_CODES or exc.code == "NoSuchBucket":
                return None
            raise StorageError(f"Failed to read {key}: {exc}") from exc
        try:
            data = response.read()
            content_type = response.headers.get("Content-Type", "application/octet-stream")
        finally:
            response.close()
            response.release_conn()
        return StoredObject(key=key, data=data, content_type=content_type)

    def list(
        self,
        prefix: str,
        delimiter: str | None = None,
        start_after: str | None = None,
        max_keys: int = 1000,
    ) -> ListResult:
        if delimiter not in (None, "/"):
            raise StorageError(f"Unsupported list delimiter '{delimiter}'")
        keys: list[str] = []
        prefixes: list[str] = []
        last_name: str | None = None
        truncated = False
        try:
            objects = self._client.list_objects(
                bucket_name=self._bucket,
                prefix=prefix,
                recursive=delimiter is None,
                start_after=start_after,
            )
            for obj in objects:
                if len(keys) + len(prefixes) >= max_keys:
                    truncated = True
                    break
                name = obj.object_name
                if obj.is_dir:
                    prefixes.append(name)
                else:
                    keys.append(name)
                last_name = name
        except S3Error as exc:
            if exc.code == "NoSuchBucket":
                return ListResult()
            raise StorageError(f"Failed to list {prefix}: {exc}") from exc
        return ListResult(
            keys=keys,
            prefixes=prefixes,
            truncated=truncated,
            next_start_after=last_name if truncated else None,
        )

    def delete(self, key: str) -> None:
        try:
            self._client.remove_object(bucket_name=self._bucket, object_name=key)
        except S3Error as exc:
            if exc.code in _MISSING_CODES or exc.code == "NoSuchBucket":
                return
            raise StorageError(f"Failed to delete {key}: {exc}") from exc

    def _ensure_bucket(self) -> None:
        if self._bucket_checked:
            return
        try:
            if not self._client.bucket_exists(bucket_name=self._bucket):
                self._client.make_bucket(bucket_name=self._bucket)
                Log.info("Created MinIO bucket", bucket=self._bucket)
        except S3Error as exc:
            raise StorageError(f"Failed to prepare bucket {self._bucket}: {exc}") from exc
        self._bucket_checked = True
