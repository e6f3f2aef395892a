from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class StoredObject:
    key: str
    data: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ListResult:
    """One page of a prefix listing.

    When truncated is True, pass next_start_after back to fetch the next page.
    """

    keys: list[str] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    truncated: bool = False
    next_start_after: str | None = None


class BaseObjectStore(ABC):
    """Contract for key-addressed blob store adapters."""

    @abstractmethod
    def put(self, key: str, data: bytes, content_type: str) -> None:
        """Write data under key, replacing any existing object."""

    @abstractmethod
    def get(self, key: str) -> StoredObject | None:
        """Return the object stored under key, or None if absent.

        Raises:
            StorageError: on any backend failure other than absence.
        """

    @abstractmethod
    def list(
        self,
        prefix: str,
        delimiter: str | None = None,
        start_after: str | None = None,
        max_keys: int = 1000,
    ) -> ListResult:
        """List keys under prefix in lexicographic order, at most max_keys per page.

        With a delimiter, keys containing the delimiter after the prefix are
        rolled up into `prefixes` (each ending with the delimiter).
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key. Deleting an absent key is not an error."""
