"""YAML-based task definition loader.

A task definition is a YAML mapping naming the task plugin and its
properties::

    id: describe_image
    type: multimodal-completion
    api_key: "{{ gemini_api_key }}"
    model: gemini-2.5-flash
    contents:
      - content: Can you describe this image?
      - content: "{{ image }}"
        mime_type: image/jpeg

:class:`TaskDefinitionLoader` validates the document and instantiates the task
class named by ``type``.
"""

from __future__ import annotations

import logging
import os
import re
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from nexus_gemini.tasks.base import GeminiTask

logger = logging.getLogger(__name__)

#: Environment variable used when a definition does not set ``api_key``.
API_KEY_ENV_VAR = "GEMINI_API_KEY"

_ISO_DURATION = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$",
    re.IGNORECASE,
)
_SHORT_DURATION = re.compile(r"^(?P<amount>\d+(?:\.\d+)?)\s*(?P<unit>ms|s|m|h|d)$", re.IGNORECASE)
_SHORT_UNITS = {"ms": "milliseconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(value: Any) -> timedelta:
    """Parse a duration from a ``timedelta``, a number of seconds, or a string.

    Strings may be ISO-8601 (``PT5M``, ``PT1H30M``), short form (``90s``,
    ``5m``, ``2h``) or a plain number of seconds.

    Raises:
        ValueError: If *value* cannot be read as a duration.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value).strip()
    try:
        return timedelta(seconds=float(text))
    except ValueError:
        pass

    short = _SHORT_DURATION.match(text)
    if short:
        unit = _SHORT_UNITS[short.group("unit").lower()]
        return timedelta(**{unit: float(short.group("amount"))})

    iso = _ISO_DURATION.match(text)
    if iso and text.upper() not in ("P", "PT"):
        parts = {name: float(amount) for name, amount in iso.groupdict().items() if amount}
        return timedelta(**parts)

    raise ValueError(f"Invalid duration: {value!r}")


class TaskDefinitionLoader:
    """Load and validate task definitions from YAML.

    Example usage::

        task = TaskDefinitionLoader.load("tasks/describe.yaml")

        errors = TaskDefinitionLoader.validate_dict(data)
    """

    @staticmethod
    def load(yaml_path: str | Path) -> GeminiTask:
        """Load a task from a YAML file.

        Raises:
            FileNotFoundError: When *yaml_path* does not exist.
            ValueError: On YAML parse failure or schema errors.
        """
        path = Path(yaml_path)
        if not path.exists():
            raise FileNotFoundError(f"Task YAML not found: {yaml_path}")

        with path.open("r", encoding="utf-8") as fh:
            try:
                data = yaml.safe_load(fh)
            except yaml.YAMLError as exc:
                raise ValueError(f"Failed to parse YAML from {yaml_path}: {exc}") from exc

        return TaskDefinitionLoader.load_from_dict(data)

    @staticmethod
    def load_from_dict(data: Any) -> GeminiTask:
        """Instantiate a task from an already-parsed definition."""
        from nexus_gemini.tasks import get_task_type

        errors = TaskDefinitionLoader.validate_dict(data)
        if errors:
            raise ValueError("Invalid task definition: " + "; ".join(errors))

        config = {key: value for key, value in data.items() if key != "type"}
        if not config.get("api_key") and os.environ.get(API_KEY_ENV_VAR):
            logger.debug("Using %s for task %s", API_KEY_ENV_VAR, config.get("id", ""))
            config["api_key"] = os.environ[API_KEY_ENV_VAR]

        return get_task_type(data["type"]).from_config(config)

    @staticmethod
    def validate_dict(data: Any) -> list[str]:
        """Return a list of schema errors (empty when the definition is valid)."""
        from nexus_gemini.tasks import TASKS_BY_NAME, get_task_type

        if not isinstance(data, dict):
            return [f"Task definition must be a mapping, got {type(data).__name__}"]

        errors: list[str] = []
        task_type = data.get("type")
        if not task_type or not isinstance(task_type, str):
            errors.append("'type' is required")
        elif get_task_type(task_type) is None:
            known = ", ".join(sorted(TASKS_BY_NAME))
            errors.append(f"Unknown task type {task_type!r} (known: {known})")

        task_id = data.get("id")
        if task_id is not None and not isinstance(task_id, str):
            errors.append("'id' must be a string")
        return errors
