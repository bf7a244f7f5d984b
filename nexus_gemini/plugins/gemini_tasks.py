"""Plugin entry point: register the Gemini tasks with the orchestrator's registry."""

from typing import Any

from nexus_gemini import __version__
from nexus_gemini.tasks import TASK_TYPES


def register_plugins(registry: Any, kind: Any = "task") -> None:
    """Register every Gemini task through the host's ``register_factory``.

    Args:
        registry: The orchestrator's plugin registry.
        kind: Plugin kind to register under, as the host defines it.
    """
    for task_type in TASK_TYPES:
        registry.register_factory(
            kind=kind,
            name=task_type.plugin_name,
            version=__version__,
            factory=task_type.from_config,
            description=task_type.description,
        )
