"""Base interface for storage backends."""

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Abstract content storage: read blobs by URI, write blobs and get a URI back."""

    @abstractmethod
    def get(self, uri: str) -> bytes:
        """Return the bytes stored at *uri*.

        Raises:
            FileNotFoundError: If nothing is stored at *uri*.
        """
        pass

    @abstractmethod
    def put(self, data: bytes, *, mime_type: str | None = None) -> str:
        """Store *data* and return the URI it can be read back from."""
        pass
