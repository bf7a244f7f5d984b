"""Structured JSON output with the Gemini API.

See https://ai.google.dev/gemini-api/docs/structured-output.
"""

import contextlib
from dataclasses import dataclass
from typing import Any

from google.genai import types

from nexus_gemini.core.models import StructuredOutput
from nexus_gemini.core.run_context import RunContext
from nexus_gemini.tasks.base import GeminiTask, first_candidate

APPLICATION_JSON = "application/json"


@dataclass
class StructuredOutputCompletion(GeminiTask):
    """Complete a prompt constrained by a JSON response schema.

    ``json_response_schema`` is an OpenAPI-style schema as accepted by the
    Gemini API; type names are case-insensitive (``"object"`` or
    ``"OBJECT"``). A schema that cannot be parsed fails the task before the
    request is sent.
    """

    plugin_name = "structured-output-completion"
    description = "Generate structured JSON output using the Gemini client"

    prompt: Any = None
    json_response_schema: Any = None

    def run(self, run_context: RunContext) -> StructuredOutput:
        model = self.render_model(run_context)
        prompt = run_context.render_str(self.prompt, required="prompt")
        schema = run_context.render_str(self.json_response_schema, required="json_response_schema")

        config = types.GenerateContentConfig(
            response_mime_type=APPLICATION_JSON,
            response_schema=types.Schema.model_validate_json(schema),
        )

        with contextlib.closing(self.build_client(run_context)) as client:
            response = client.models.generate_content(model=model, contents=prompt, config=config)

        self.send_metrics(run_context, [response.usage_metadata])

        candidate = first_candidate(response)
        parts = candidate.content.parts if candidate and candidate.content else None
        return StructuredOutput(predictions=[part.text for part in parts or [] if part.text is not None])
