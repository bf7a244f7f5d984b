"""Shared fixtures: a local run context and a mocked Gemini client."""

from unittest.mock import MagicMock

import pytest
from google import genai

from nexus_gemini.adapters.storage import FileStorage
from nexus_gemini.core.run_context import RunContext


@pytest.fixture
def storage(tmp_path):
    return FileStorage(tmp_path / "storage")


@pytest.fixture
def run_context(storage):
    return RunContext(storage=storage, task_id="test_task")


@pytest.fixture
def client_factory(monkeypatch):
    """Replace ``genai.Client`` with a factory returning one shared mock client."""
    client = MagicMock(name="genai_client")
    factory = MagicMock(name="Client", return_value=client)
    monkeypatch.setattr(genai, "Client", factory)
    return factory


@pytest.fixture
def client(client_factory):
    return client_factory.return_value
