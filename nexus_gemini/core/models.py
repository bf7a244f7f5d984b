"""Output records produced by the Gemini tasks.

Each record is a plain reflection of fields from the ``google-genai`` response
types. Fields the API omits stay ``None`` (or empty), nothing is inferred.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from nexus_gemini.core.errors import TaskValidationError


class TaskState(Enum):
    """Final state a task reports to the orchestrator."""

    SUCCESS = "success"
    WARNING = "warning"


class ChatMessageType(Enum):
    """Author of a chat message."""

    USER = "user"
    AI = "ai"
    SYSTEM = "system"


def enum_value(value: Any) -> str | None:
    """Return the wire value of an SDK enum (``"SAFETY"``), or ``None``."""
    if value is None:
        return None
    return str(getattr(value, "value", value))


@dataclass
class SafetyRating:
    """Safety rating of a candidate for one harm category."""

    category: str | None
    probability: str | None
    blocked: bool = False

    @classmethod
    def of(cls, rating: Any) -> "SafetyRating":
        return cls(
            category=enum_value(rating.category),
            probability=enum_value(rating.probability),
            blocked=bool(rating.blocked),
        )


@dataclass
class Citation:
    """Source attribution for a segment of generated content."""

    uri: str | None = None
    title: str | None = None
    license: str | None = None
    start_index: int | None = None
    end_index: int | None = None


@dataclass
class CitationMetadata:
    """All citations reported for a candidate."""

    citations: list[Citation] = field(default_factory=list)

    @classmethod
    def of(cls, metadata: Any) -> "CitationMetadata":
        return cls(
            citations=[
                Citation(
                    uri=citation.uri,
                    title=citation.title,
                    license=citation.license,
                    start_index=citation.start_index,
                    end_index=citation.end_index,
                )
                for citation in metadata.citations or []
            ]
        )


def content_text(content: Any) -> str:
    """Concatenate the text parts of an SDK ``Content`` ("" when there are none)."""
    if content is None or not content.parts:
        return ""
    return "".join(part.text for part in content.parts if part.text)


@dataclass
class Prediction:
    """One candidate answer with its safety and citation annotations."""

    content: str = ""
    safety_ratings: list[SafetyRating] | None = None
    citation_metadata: CitationMetadata | None = None

    @classmethod
    def of(cls, candidate: Any) -> "Prediction":
        ratings = candidate.safety_ratings
        citations = candidate.citation_metadata
        return cls(
            content=content_text(candidate.content),
            safety_ratings=[SafetyRating.of(rating) for rating in ratings] if ratings is not None else None,
            citation_metadata=CitationMetadata.of(citations) if citations is not None else None,
        )


def _reject_unknown_keys(value: dict, allowed: tuple[str, ...], what: str) -> None:
    unknown = sorted(str(key) for key in value if key not in allowed)
    if unknown:
        raise TaskValidationError(
            f"Unknown properties for {what}: {', '.join(unknown)} (expected: {', '.join(allowed)})"
        )


@dataclass
class ChatMessage:
    """A single message of a chat conversation."""

    type: ChatMessageType
    content: str

    @classmethod
    def of(cls, value: Any) -> "ChatMessage":
        """Build a message from a plain string (user message) or a mapping."""
        if isinstance(value, ChatMessage):
            return value
        if isinstance(value, str):
            return cls(ChatMessageType.USER, value)
        if isinstance(value, dict):
            _reject_unknown_keys(value, ("type", "content"), "chat message")
            message_type = str(value.get("type", ChatMessageType.USER.value)).strip().lower()
            return cls(ChatMessageType(message_type), value.get("content", ""))
        raise TypeError(f"Unsupported chat message: {type(value).__name__}")


@dataclass
class Content:
    """A multimodal content item.

    ``content`` is text when ``mime_type`` is unset, otherwise a storage URI
    whose bytes are sent with that MIME type.
    """

    content: str
    mime_type: str | None = None
    role: str = "user"

    @classmethod
    def of(cls, value: Any) -> "Content":
        if isinstance(value, Content):
            return value
        if isinstance(value, str):
            return cls(content=value)
        if isinstance(value, dict):
            _reject_unknown_keys(value, ("content", "mime_type", "role"), "content item")
            return cls(
                content=value.get("content"),
                mime_type=value.get("mime_type"),
                role=value.get("role") or "user",
            )
        raise TypeError(f"Unsupported content item: {type(value).__name__}")


@dataclass
class GeneratedImage:
    """An image produced by the model and written to storage."""

    uri: str
    mime_type: str | None = None


@dataclass
class CompletionOutput:
    """Output of text and chat completion."""

    predictions: list[Prediction] = field(default_factory=list)


@dataclass
class StructuredOutput:
    """Output of structured JSON completion: raw JSON text fragments."""

    predictions: list[str] = field(default_factory=list)


@dataclass
class MultimodalOutput:
    """Output of multimodal completion."""

    text: str | None = None
    safety_ratings: list[SafetyRating] = field(default_factory=list)
    blocked: bool = False
    finish_reason: str | None = None
    images: list[GeneratedImage] | None = None

    @property
    def final_state(self) -> TaskState:
        return TaskState.WARNING if self.blocked else TaskState.SUCCESS


@dataclass
class VideoOutput:
    """Output of video generation."""

    video_uri: str | None = None
    mime_type: str | None = None
    metadata: dict[str, Any] | None = None
