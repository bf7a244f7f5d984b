"""Storage adapters for task inputs and generated content."""

from nexus_gemini.adapters.storage.base import StorageBackend
from nexus_gemini.adapters.storage.file import FileStorage

__all__ = [
    "StorageBackend",
    "FileStorage",
]
