"""Tests for the content-addressable FileStorage backend."""

import pytest

from nexus_gemini.adapters.storage import FileStorage


def test_put_then_get(tmp_path):
    storage = FileStorage(tmp_path)

    uri = storage.put(b"image-bytes", mime_type="image/png")

    assert uri.startswith("nexus:///")
    assert uri.endswith(".png")
    assert storage.get(uri) == b"image-bytes"


def test_same_content_same_uri(tmp_path):
    storage = FileStorage(tmp_path)

    assert storage.put(b"same") == storage.put(b"same")
    assert storage.put(b"same") != storage.put(b"other")


def test_unknown_blob_raises(tmp_path):
    storage = FileStorage(tmp_path)

    with pytest.raises(FileNotFoundError):
        storage.get("nexus:///00/0000.bin")


def test_foreign_scheme_rejected(tmp_path):
    storage = FileStorage(tmp_path)

    with pytest.raises(ValueError, match="Unsupported storage URI"):
        storage.get("gs://bucket/file.jpg")


def test_path_traversal_rejected(tmp_path):
    storage = FileStorage(tmp_path / "blobs")

    with pytest.raises(ValueError, match="path traversal"):
        storage.get("nexus:///../outside.txt")
