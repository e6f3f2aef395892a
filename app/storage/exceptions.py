class StorageError(Exception):
    """Raised when the object store fails for a reason other than a missing key."""


class UnsupportedStorageBackendError(StorageError):
    """Raised when settings name a storage backend with no adapter."""
