from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseObjectStore
from app.storage.exceptions import UnsupportedStorageBackendError
from app.storage.local_adapter import LocalObjectStore
from app.storage.minio_adapter import MinioObjectStore


class ObjectStoreFactory:
    """Creates the configured object store adapter."""

    BACKENDS = ("minio", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStore:
        backend = settings.storage_backend.lower()
        if backend == "minio":
            return MinioObjectStore(
                endpoint=settings.minio_endpoint,
                bucket_name=settings.minio_bucket_name,
                access_key=settings.minio_access_key,
                secret_key=settings.minio_secret_key,
                secure=settings.minio_secure,
                region=settings.minio_region,
            )
        if backend == "local":
            return LocalObjectStore(Path(settings.local_storage_root))
        raise UnsupportedStorageBackendError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
