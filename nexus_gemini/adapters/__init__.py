"""Adapters for the services the orchestrator provides to tasks."""
