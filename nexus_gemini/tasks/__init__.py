"""Gemini tasks: text, chat, structured, multimodal completion and video generation."""

from nexus_gemini.tasks.base import GeminiTask
from nexus_gemini.tasks.chat_completion import ChatCompletion
from nexus_gemini.tasks.multimodal_completion import MultimodalCompletion
from nexus_gemini.tasks.structured_output_completion import StructuredOutputCompletion
from nexus_gemini.tasks.text_completion import TextCompletion
from nexus_gemini.tasks.video_generation import VideoGeneration

TASK_TYPES: tuple[type[GeminiTask], ...] = (
    TextCompletion,
    ChatCompletion,
    StructuredOutputCompletion,
    MultimodalCompletion,
    VideoGeneration,
)

TASKS_BY_NAME: dict[str, type[GeminiTask]] = {task_type.plugin_name: task_type for task_type in TASK_TYPES}


def normalize_task_name(name: str) -> str:
    """Normalize task type names (``TEXT_COMPLETION`` -> ``text-completion``)."""
    return name.strip().lower().replace("_", "-")


def get_task_type(name: str) -> type[GeminiTask] | None:
    """Return the task class registered under *name*, or ``None``."""
    return TASKS_BY_NAME.get(normalize_task_name(name))


__all__ = [
    "GeminiTask",
    "TextCompletion",
    "ChatCompletion",
    "StructuredOutputCompletion",
    "MultimodalCompletion",
    "VideoGeneration",
    "TASK_TYPES",
    "TASKS_BY_NAME",
    "get_task_type",
    "normalize_task_name",
]
