"""
Nexus Gemini - Gemini API tasks for the Nexus orchestration framework.

Copyright (c) 2026 Nexus Team
Licensed under Apache 2.0
"""

__version__ = "0.1.0"

from nexus_gemini.adapters.storage import FileStorage, StorageBackend
from nexus_gemini.core.errors import (
    GeminiTaskError,
    TaskValidationError,
    VideoGenerationError,
    VideoGenerationTimeoutError,
)
from nexus_gemini.core.run_context import Counter, RunContext
from nexus_gemini.plugins import register_plugins
from nexus_gemini.tasks import (
    ChatCompletion,
    GeminiTask,
    MultimodalCompletion,
    StructuredOutputCompletion,
    TextCompletion,
    VideoGeneration,
)

__all__ = [
    # Version
    "__version__",
    # Tasks
    "GeminiTask",
    "TextCompletion",
    "ChatCompletion",
    "StructuredOutputCompletion",
    "MultimodalCompletion",
    "VideoGeneration",
    # Run context
    "RunContext",
    "Counter",
    "StorageBackend",
    "FileStorage",
    # Errors
    "GeminiTaskError",
    "TaskValidationError",
    "VideoGenerationError",
    "VideoGenerationTimeoutError",
    # Plugins
    "register_plugins",
]
