"""Multi-turn chat completion with the Gemini API."""

import contextlib
from dataclasses import dataclass
from typing import Any

from google.genai import types

from nexus_gemini.core.errors import TaskValidationError
from nexus_gemini.core.models import ChatMessage, ChatMessageType, CompletionOutput, Prediction
from nexus_gemini.core.run_context import RunContext
from nexus_gemini.tasks.base import GeminiTask, first_candidate

USER_ROLE = "user"
MODEL_ROLE = "model"


@dataclass
class ChatCompletion(GeminiTask):
    """Hold a conversation with the model, one request per user message.

    Messages are processed in order: ``SYSTEM`` messages become the system
    instruction, ``AI`` messages are replayed as model turns, and every
    ``USER`` message is sent along with the conversation so far. The model's
    reply is kept in the conversation for the following user messages.
    """

    plugin_name = "chat-completion"
    description = "Complete a chat using the Gemini client"

    messages: Any = None
    system_instruction: Any = None

    def run(self, run_context: RunContext) -> CompletionOutput:
        model = self.render_model(run_context)
        messages = [
            self._render_message(run_context, ChatMessage.of(message))
            for message in run_context.render_list(self.messages, required="messages")
        ]
        if not any(message.type == ChatMessageType.USER for message in messages):
            raise TaskValidationError("messages must contain at least one USER message")

        instructions = [run_context.render_str(self.system_instruction)]
        instructions += [message.content for message in messages if message.type == ChatMessageType.SYSTEM]
        system_instruction = "\n".join(text for text in instructions if text)
        config = types.GenerateContentConfig(system_instruction=system_instruction) if system_instruction else None

        history: list[types.Content] = []
        responses: list[types.GenerateContentResponse] = []
        with contextlib.closing(self.build_client(run_context)) as client:
            for message in messages:
                if message.type == ChatMessageType.SYSTEM:
                    continue
                role = USER_ROLE if message.type == ChatMessageType.USER else MODEL_ROLE
                history.append(types.Content(role=role, parts=[types.Part.from_text(text=message.content)]))
                if role == MODEL_ROLE:
                    continue

                response = client.models.generate_content(model=model, contents=list(history), config=config)
                responses.append(response)
                candidate = first_candidate(response)
                if candidate is not None and candidate.content is not None:
                    history.append(candidate.content)
                run_context.logger.debug("Chat turn %d answered", len(responses))

        self.send_metrics(run_context, [response.usage_metadata for response in responses])
        return CompletionOutput(
            predictions=[
                Prediction.of(candidate)
                for response in responses
                for candidate in response.candidates or []
            ]
        )

    @staticmethod
    def _render_message(run_context: RunContext, message: ChatMessage) -> ChatMessage:
        return ChatMessage(message.type, run_context.render_str(message.content, required="messages.content"))
