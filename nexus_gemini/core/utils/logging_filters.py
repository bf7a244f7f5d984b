"""Reusable logging filters and setup helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

REDACTED = "[REDACTED_SECRET]"


class SecretRedactingFilter(logging.Filter):
    """Redact sensitive values (API keys) from log messages and args.

    Secrets can be added after the filter is attached, so a run context can
    register the API key once it has been rendered.
    """

    def __init__(self, secrets: Iterable[str] = ()):
        super().__init__()
        self._secrets: list[str] = []
        for secret in secrets:
            self.add_secret(secret)

    def add_secret(self, secret: Any) -> None:
        value = str(secret) if secret is not None else ""
        if value and value not in self._secrets:
            self._secrets.append(value)

    def redact(self, value: Any) -> Any:
        """Return *value* with every registered secret replaced."""
        if isinstance(value, str):
            redacted = value
            for secret in self._secrets:
                redacted = redacted.replace(secret, REDACTED)
            return redacted
        if isinstance(value, tuple):
            return tuple(self.redact(item) for item in value)
        if isinstance(value, list):
            return [self.redact(item) for item in value]
        if isinstance(value, dict):
            return {key: self.redact(item) for key, item in value.items()}
        return value

    def filter(self, record: logging.LogRecord) -> bool:
        if self._secrets:
            record.msg = self.redact(record.msg)
            record.args = self.redact(record.args)
        return True


def install_secret_redaction(secrets: Iterable[str], target_logger: logging.Logger | None = None) -> None:
    """Attach secret redaction filter to all handlers of target logger."""
    logger = target_logger or logging.getLogger()
    redaction_filter = SecretRedactingFilter(secrets)
    for handler in logger.handlers:
        handler.addFilter(redaction_filter)
