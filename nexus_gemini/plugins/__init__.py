"""Plugin entry point for the orchestrator."""

from nexus_gemini.plugins.gemini_tasks import register_plugins

__all__ = [
    "register_plugins",
]
