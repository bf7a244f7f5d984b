"""Exceptions raised by nexus-gemini tasks."""


class GeminiTaskError(Exception):
    """Base class for task failures raised by this package."""


class TaskValidationError(GeminiTaskError, ValueError):
    """Raised when task properties are missing or out of range.

    Always raised before any request is sent to the Gemini API.
    """


class VideoGenerationError(GeminiTaskError):
    """Raised when a video operation completes without a usable video."""


class VideoGenerationTimeoutError(VideoGenerationError, TimeoutError):
    """Raised when a video operation is still running after the configured timeout."""
