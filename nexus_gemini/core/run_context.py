"""Per-execution context handed to every task by the orchestrator.

The orchestrator owns templating, storage and metrics. This module defines the
small surface the tasks rely on, together with a local implementation used by
the CLI and the tests.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from nexus_gemini.adapters.storage.base import StorageBackend
from nexus_gemini.core.config import parse_duration
from nexus_gemini.core.errors import TaskValidationError
from nexus_gemini.core.utils.logging_filters import SecretRedactingFilter

logger = logging.getLogger(__name__)

Renderer = Callable[[Any, dict[str, Any]], Any]


def identity_renderer(value: Any, _variables: dict[str, Any]) -> Any:
    return value


_VARIABLE = re.compile(r"\{\{\s*([\w.\-]+)\s*\}\}")


def variable_renderer(value: Any, variables: dict[str, Any]) -> Any:
    """Substitute ``{{ name }}`` placeholders in strings with *variables* values.

    A string made of a single placeholder is replaced by the variable itself,
    keeping its type. Unknown names raise :class:`TaskValidationError`.
    """
    if not isinstance(value, str):
        return value

    def lookup(name: str) -> Any:
        if name not in variables:
            raise TaskValidationError(f"Unknown variable {name!r}")
        return variables[name]

    whole = _VARIABLE.fullmatch(value.strip())
    if whole:
        return lookup(whole.group(1))
    return _VARIABLE.sub(lambda match: str(lookup(match.group(1))), value)


class _RedactingAdapter(logging.LoggerAdapter):
    """Logger adapter that redacts the secrets of one run context."""

    def __init__(self, logger: logging.Logger, extra: dict[str, Any], redaction: SecretRedactingFilter):
        super().__init__(logger, extra)
        self.redaction = redaction

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        super().log(level, self.redaction.redact(msg), *self.redaction.redact(args), **kwargs)


@dataclass(frozen=True)
class Counter:
    """A counter metric emitted by a task."""

    name: str
    value: int | float
    tags: dict[str, str] = field(default_factory=dict)


class RunContext:
    """Rendering, storage, metrics and logging for one task execution.

    Args:
        storage: Storage service used to read inputs and write generated blobs.
        variables: Values made available to the renderer.
        renderer: Host expression evaluator, ``(value, variables) -> value``.
            Defaults to returning values unchanged.
        task_id: Identifier attached to every log record.
    """

    def __init__(
        self,
        storage: StorageBackend,
        variables: dict[str, Any] | None = None,
        renderer: Renderer | None = None,
        task_id: str = "",
    ):
        self.storage = storage
        self.variables = dict(variables or {})
        self.task_id = task_id
        self.metrics: list[Counter] = []
        self._renderer = renderer or identity_renderer
        self._logger = logging.getLogger(f"nexus_gemini.task.{task_id}" if task_id else "nexus_gemini.task")
        self._redaction = SecretRedactingFilter()

    @property
    def logger(self) -> logging.LoggerAdapter:
        return _RedactingAdapter(self._logger, {"task_id": self.task_id}, self._redaction)

    def add_secret(self, secret: Any) -> None:
        """Keep *secret* out of everything logged through :attr:`logger`."""
        self._redaction.add_secret(secret)

    def metric(self, counter: Counter) -> None:
        self.metrics.append(counter)
        logger.debug("Metric %s=%s tags=%s", counter.name, counter.value, counter.tags)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, value: Any) -> Any:
        """Render a property value; lists and dicts are rendered element-wise."""
        if value is None:
            return None
        if isinstance(value, list):
            return [self.render(item) for item in value]
        if isinstance(value, dict):
            return {key: self.render(item) for key, item in value.items()}
        return self._renderer(value, self.variables)

    def render_str(self, value: Any, default: str | None = None, *, required: str | None = None) -> str | None:
        rendered = self.render(value)
        if rendered is None or rendered == "":
            if required:
                raise TaskValidationError(f"{required} is required")
            return default
        return str(rendered)

    def render_int(self, value: Any, default: int | None = None, *, required: str | None = None) -> int | None:
        rendered = self.render_str(value, required=required)
        if rendered is None:
            return default
        try:
            return int(rendered)
        except ValueError as exc:
            raise TaskValidationError(f"{required or 'value'} must be an integer, got {rendered!r}") from exc

    def render_bool(self, value: Any, default: bool = False) -> bool:
        rendered = self.render(value)
        if rendered is None or rendered == "":
            return default
        if isinstance(rendered, bool):
            return rendered
        return str(rendered).strip().lower() in ("true", "1", "yes", "on")

    def render_duration(self, value: Any, default: timedelta | None = None) -> timedelta | None:
        rendered = self.render(value)
        if rendered is None or rendered == "":
            return default
        try:
            return parse_duration(rendered)
        except ValueError as exc:
            raise TaskValidationError(str(exc)) from exc

    def render_list(self, value: Any, *, required: str | None = None) -> list[Any]:
        rendered = self.render(value)
        if not rendered:
            if required:
                raise TaskValidationError(f"{required} must not be empty")
            return []
        if not isinstance(rendered, list):
            rendered = [rendered]
        return rendered
