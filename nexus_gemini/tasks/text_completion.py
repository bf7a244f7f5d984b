"""Text completion with the Gemini API.

See https://ai.google.dev/gemini-api/docs/text-generation.
"""

import contextlib
from dataclasses import dataclass
from typing import Any

from nexus_gemini.core.models import CompletionOutput, Prediction
from nexus_gemini.core.run_context import RunContext
from nexus_gemini.tasks.base import GeminiTask


@dataclass
class TextCompletion(GeminiTask):
    """Complete a single prompt and return every candidate as a prediction."""

    plugin_name = "text-completion"
    description = "Complete text using the Gemini client"

    prompt: Any = None

    def run(self, run_context: RunContext) -> CompletionOutput:
        model = self.render_model(run_context)
        prompt = run_context.render_str(self.prompt, required="prompt")

        with contextlib.closing(self.build_client(run_context)) as client:
            response = client.models.generate_content(model=model, contents=prompt)

        self.send_metrics(run_context, [response.usage_metadata])
        return CompletionOutput(predictions=[Prediction.of(candidate) for candidate in response.candidates or []])
