"""Shared properties and helpers of the Gemini tasks."""

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, ClassVar

from google import genai
from google.genai import types

from nexus_gemini.core.errors import TaskValidationError
from nexus_gemini.core.run_context import Counter, RunContext

logger = logging.getLogger(__name__)

CANDIDATE_TOKEN_COUNT = "candidate.token.count"
PROMPT_TOKEN_COUNT = "prompt.token.count"
TOTAL_TOKEN_COUNT = "total.token.count"


@dataclass
class GeminiTask:
    """Base class of every task calling the Gemini API.

    Property values are rendered through the :class:`RunContext` when the task
    runs, so they may hold host expressions instead of literal values.

    Attributes:
        id: Task identifier within the flow.
        api_key: Gemini API key; render it from a secret.
        model: Gemini model identifier (e.g. ``gemini-2.5-flash``). It must
            support the requested input type.
    """

    plugin_name: ClassVar[str] = ""
    description: ClassVar[str] = ""

    id: str = ""
    api_key: Any = None
    model: Any = None

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "GeminiTask":
        """Build a task from a plain mapping of property names to values."""
        known = {field.name for field in dataclasses.fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise TaskValidationError(f"Unknown properties for {cls.__name__}: {', '.join(unknown)}")
        return cls(**config)

    def run(self, run_context: RunContext) -> Any:
        raise NotImplementedError

    def render_model(self, run_context: RunContext) -> str:
        return run_context.render_str(self.model, required="model")

    def build_client(self, run_context: RunContext) -> genai.Client:
        """Create an API-key authenticated client."""
        api_key = run_context.render_str(self.api_key, required="api_key")
        run_context.add_secret(api_key)
        return genai.Client(api_key=api_key)

    def send_metrics(
        self,
        run_context: RunContext,
        usage: Iterable[types.GenerateContentResponseUsageMetadata | None],
    ) -> None:
        """Emit token counters summed over every response of this execution."""
        usage = [metadata for metadata in usage if metadata is not None]
        run_context.metric(Counter(CANDIDATE_TOKEN_COUNT, sum(m.candidates_token_count or 0 for m in usage)))
        run_context.metric(Counter(PROMPT_TOKEN_COUNT, sum(m.prompt_token_count or 0 for m in usage)))
        run_context.metric(Counter(TOTAL_TOKEN_COUNT, sum(m.total_token_count or 0 for m in usage)))


def first_candidate(response: types.GenerateContentResponse) -> types.Candidate | None:
    return response.candidates[0] if response.candidates else None
