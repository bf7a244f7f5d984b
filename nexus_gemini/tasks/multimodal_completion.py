"""Multimodal completion with the Gemini API.

See https://ai.google.dev/gemini-api/docs/text-generation#multimodal-input.
"""

import contextlib
from dataclasses import dataclass
from typing import Any

from google.genai import types

from nexus_gemini.core.models import (
    Content,
    GeneratedImage,
    MultimodalOutput,
    SafetyRating,
    content_text,
    enum_value,
)
from nexus_gemini.core.run_context import RunContext
from nexus_gemini.tasks.base import GeminiTask, first_candidate

_BLOCKING_FINISH_REASONS = {
    types.FinishReason.SAFETY: "safety",
    types.FinishReason.RECITATION: "recitation",
}


@dataclass
class MultimodalCompletion(GeminiTask):
    """Complete a prompt mixing text with images, audio, video or documents.

    Each item of ``contents`` is either text, or (when ``mime_type`` is set) a
    storage URI whose bytes are sent inline with that MIME type. Images the
    model returns are written to storage and listed in the output.
    """

    plugin_name = "multimodal-completion"
    description = "Multimodal completion using the Gemini client"

    contents: Any = None

    def run(self, run_context: RunContext) -> MultimodalOutput:
        model = self.render_model(run_context)
        contents = [
            self.to_gemini_content(run_context, Content.of(item))
            for item in run_context.render_list(self.contents, required="contents")
        ]

        with contextlib.closing(self.build_client(run_context)) as client:
            response = client.models.generate_content(model=model, contents=contents)

        self.send_metrics(run_context, [response.usage_metadata])

        candidate = first_candidate(response)
        if candidate is None:
            return self._prompt_output(run_context, response)

        output = MultimodalOutput(
            finish_reason=enum_value(candidate.finish_reason),
            safety_ratings=[SafetyRating.of(rating) for rating in candidate.safety_ratings or []],
        )

        reason = _BLOCKING_FINISH_REASONS.get(candidate.finish_reason)
        if reason:
            run_context.logger.warning("Content response has been blocked for %s reason", reason)
            output.blocked = True
            return output

        output.text = content_text(candidate.content)
        output.images = self._store_images(run_context, candidate.content) or None
        return output

    @staticmethod
    def to_gemini_content(run_context: RunContext, content: Content) -> types.Content:
        """Translate a content item into an SDK ``Content`` with a single part."""
        rendered = run_context.render_str(content.content, required="contents.content")
        mime_type = run_context.render_str(content.mime_type)
        role = run_context.render_str(content.role, default="user")

        if mime_type:
            part = types.Part.from_bytes(data=run_context.storage.get(rendered), mime_type=mime_type)
        else:
            part = types.Part.from_text(text=rendered)
        return types.Content(role=role, parts=[part])

    @staticmethod
    def _store_images(run_context: RunContext, content: types.Content | None) -> list[GeneratedImage]:
        images = []
        for part in (content.parts if content else None) or []:
            blob = part.inline_data
            if blob is None or not blob.data:
                continue
            uri = run_context.storage.put(blob.data, mime_type=blob.mime_type)
            run_context.logger.info("Stored generated %s at %s", blob.mime_type, uri)
            images.append(GeneratedImage(uri=uri, mime_type=blob.mime_type))
        return images

    @staticmethod
    def _prompt_output(run_context: RunContext, response: types.GenerateContentResponse) -> MultimodalOutput:
        """Output for a response without candidates, blocked when the prompt was."""
        feedback = response.prompt_feedback
        block_reason = feedback.block_reason if feedback else None
        if block_reason:
            run_context.logger.warning("Prompt has been blocked: %s", enum_value(block_reason))
            return MultimodalOutput(
                blocked=True,
                finish_reason=enum_value(block_reason),
                safety_ratings=[SafetyRating.of(rating) for rating in feedback.safety_ratings or []],
            )
        return MultimodalOutput(text="")
