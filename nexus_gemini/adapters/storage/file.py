"""File-based, content-addressable storage backend."""

import contextlib
import hashlib
import logging
import mimetypes
import os
from pathlib import Path
from urllib.parse import urlparse

from nexus_gemini.adapters.storage.base import StorageBackend

logger = logging.getLogger(__name__)

URI_SCHEME = "nexus"


class FileStorage(StorageBackend):
    """Store blobs under ``base_path`` keyed by their SHA-256 digest.

    Blobs live at ``<base>/<digest[:2]>/<digest><ext>`` and are addressed as
    ``nexus:///<digest[:2]>/<digest><ext>``; storing the same bytes twice
    yields the same URI.
    """

    def __init__(self, base_path: str | Path):
        """
        Initialize file storage.

        Args:
            base_path: Base directory for stored blobs
        """
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _safe_path(self, relative: str) -> Path:
        """Resolve relative within base_path and ensure it doesn't escape."""
        resolved = (self.base_path / relative.lstrip("/")).resolve()
        if self.base_path.resolve() not in resolved.parents:
            raise ValueError(f"Security: path traversal detected for {relative!r}")
        return resolved

    def _path_for(self, uri: str) -> Path:
        parsed = urlparse(uri)
        if parsed.scheme != URI_SCHEME:
            raise ValueError(f"Unsupported storage URI {uri!r}, expected scheme {URI_SCHEME!r}")
        return self._safe_path(parsed.path)

    def get(self, uri: str) -> bytes:
        path = self._path_for(uri)
        if not path.is_file():
            raise FileNotFoundError(f"No blob stored at {uri}")
        return path.read_bytes()

    def put(self, data: bytes, *, mime_type: str | None = None) -> str:
        digest = hashlib.sha256(data).hexdigest()
        extension = (mimetypes.guess_extension(mime_type) if mime_type else None) or ""
        relative = f"{digest[:2]}/{digest}{extension}"
        path = self._safe_path(relative)
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_name(path.name + ".tmp")
            try:
                tmp.write_bytes(data)
                os.replace(tmp, path)
            except OSError:
                with contextlib.suppress(OSError):
                    os.unlink(tmp)
                raise
            logger.debug("Stored %d bytes at %s", len(data), path)
        return f"{URI_SCHEME}:///{relative}"
