"""Core models, errors and run context of nexus-gemini."""

from nexus_gemini.core.errors import (
    GeminiTaskError,
    TaskValidationError,
    VideoGenerationError,
    VideoGenerationTimeoutError,
)
from nexus_gemini.core.models import (
    ChatMessage,
    ChatMessageType,
    Citation,
    CitationMetadata,
    CompletionOutput,
    Content,
    GeneratedImage,
    MultimodalOutput,
    Prediction,
    SafetyRating,
    StructuredOutput,
    TaskState,
    VideoOutput,
)
from nexus_gemini.core.run_context import Counter, RunContext

__all__ = [
    "GeminiTaskError",
    "TaskValidationError",
    "VideoGenerationError",
    "VideoGenerationTimeoutError",
    "ChatMessage",
    "ChatMessageType",
    "Citation",
    "CitationMetadata",
    "CompletionOutput",
    "Content",
    "GeneratedImage",
    "MultimodalOutput",
    "Prediction",
    "SafetyRating",
    "StructuredOutput",
    "TaskState",
    "VideoOutput",
    "Counter",
    "RunContext",
]
