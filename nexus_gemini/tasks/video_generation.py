"""Video generation with Veo through the Gemini API.

Video generation is a long-running operation: the request returns an
operation handle that is polled every second until it is done or until the
configured timeout elapses.

Without Vertex AI the generated video is downloaded to ``download_file_path``.
With Vertex AI (``vertex_ai: true`` plus ``project`` and ``location``) the
video is written by the service to ``output_gcs_uri``.
"""

import contextlib
import time
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Any

from google import genai
from google.genai import errors, types

from nexus_gemini.core.errors import TaskValidationError, VideoGenerationError, VideoGenerationTimeoutError
from nexus_gemini.core.models import VideoOutput
from nexus_gemini.core.run_context import RunContext
from nexus_gemini.tasks.base import GeminiTask

FILE_NAME_TEMPLATE = "genai_video_{date}.mp4"
DEFAULT_DURATION_SECONDS = 10
MIN_DURATION_SECONDS = 1
MAX_DURATION_SECONDS = 60
POLL_INTERVAL_SECONDS = 1.0
DEFAULT_TIMEOUT = timedelta(minutes=5)


@dataclass
class VideoGeneration(GeminiTask):
    """Generate a 1-60s video from a text prompt.

    Defaults: 10s duration, 5 minutes timeout, no audio, one video.
    """

    plugin_name = "video-generation"
    description = "Generate video with Veo via Gemini"

    prompt: Any = None
    negative_prompt: Any = None
    duration_in_seconds: Any = DEFAULT_DURATION_SECONDS
    include_audio: Any = False
    timeout: Any = DEFAULT_TIMEOUT
    seed: Any = None
    number_of_videos: Any = 1
    vertex_ai: Any = False
    output_gcs_uri: Any = None
    project: Any = None
    location: Any = None
    download_file_path: Any = None

    def run(self, run_context: RunContext) -> VideoOutput:
        duration = run_context.render_int(self.duration_in_seconds, DEFAULT_DURATION_SECONDS)
        vertex_ai = run_context.render_bool(self.vertex_ai)
        output_gcs_uri = run_context.render_str(self.output_gcs_uri)
        # The default applies only when the property is absent; an explicit empty path is invalid.
        if self.download_file_path is None:
            download_file_path = FILE_NAME_TEMPLATE.format(date=int(time.time() * 1000))
        else:
            download_file_path = run_context.render_str(self.download_file_path)
        self.validate_inputs(duration, download_file_path, output_gcs_uri, vertex_ai)

        model = self.render_model(run_context)
        prompt = run_context.render_str(self.prompt, required="prompt")
        timeout = run_context.render_duration(self.timeout, DEFAULT_TIMEOUT)

        run_context.logger.info("Starting video generation with prompt: %s", prompt)

        with contextlib.closing(self.build_video_client(run_context, vertex_ai)) as client:
            operation = client.models.generate_videos(
                model=model,
                prompt=prompt,
                config=self.to_generate_videos_config(run_context, vertex_ai, duration, output_gcs_uri),
            )
            operation = self.poll_until_complete(client, operation, timeout, run_context)
            video = self.extract_generated_video(operation)

            if not vertex_ai:
                self.download_video(client, video, download_file_path, run_context)

        return VideoOutput(
            video_uri=video.uri,
            mime_type=video.mime_type,
            metadata=operation.metadata,
        )

    @staticmethod
    def validate_inputs(
        duration: int,
        download_file_path: str | None,
        output_gcs_uri: str | None,
        vertex_ai: bool,
    ) -> None:
        """Reject invalid combinations before any request is sent."""
        if duration < MIN_DURATION_SECONDS or duration > MAX_DURATION_SECONDS:
            raise TaskValidationError(
                f"Duration must be between {MIN_DURATION_SECONDS} and {MAX_DURATION_SECONDS} seconds"
            )
        if vertex_ai and not output_gcs_uri:
            raise TaskValidationError("output_gcs_uri is required when using Vertex AI.")
        if not vertex_ai and not download_file_path:
            raise TaskValidationError("download_file_path is required when not using Vertex AI.")

    def build_video_client(self, run_context: RunContext, vertex_ai: bool) -> genai.Client:
        if not vertex_ai:
            return self.build_client(run_context)
        return genai.Client(
            vertexai=True,
            project=run_context.render_str(self.project, required="project"),
            location=run_context.render_str(self.location, required="location"),
        )

    def to_generate_videos_config(
        self,
        run_context: RunContext,
        vertex_ai: bool,
        duration: int,
        output_gcs_uri: str | None,
    ) -> types.GenerateVideosConfig:
        settings: dict[str, Any] = {"number_of_videos": run_context.render_int(self.number_of_videos, 1)}
        seed = run_context.render_int(self.seed)
        if seed is not None:
            settings["seed"] = seed
        negative_prompt = run_context.render_str(self.negative_prompt)
        if negative_prompt and negative_prompt.strip():
            settings["negative_prompt"] = negative_prompt

        # Duration, audio and GCS output are only honoured by Vertex AI.
        if vertex_ai:
            settings["duration_seconds"] = duration
            settings["generate_audio"] = run_context.render_bool(self.include_audio)
            settings["output_gcs_uri"] = output_gcs_uri
        return types.GenerateVideosConfig(**settings)

    @staticmethod
    def poll_until_complete(
        client: genai.Client,
        operation: types.GenerateVideosOperation,
        timeout: timedelta,
        run_context: RunContext,
    ) -> types.GenerateVideosOperation:
        """Refresh *operation* every second until done, failing after *timeout*."""
        start = time.monotonic()
        limit = timeout.total_seconds()

        while not operation.done:
            if time.monotonic() - start > limit:
                raise VideoGenerationTimeoutError(f"Video generation timed out after {timeout}.")
            time.sleep(POLL_INTERVAL_SECONDS)
            run_context.logger.info("Waiting for operation to complete...")
            operation = client.operations.get(operation)
        return operation

    @staticmethod
    def extract_generated_video(operation: types.GenerateVideosOperation) -> types.Video:
        if operation.response is None:
            raise VideoGenerationError(
                "No video was generated. Possible reasons: content policy violations or model limitations. "
                f"Error: {operation.error}"
            )
        videos = operation.response.generated_videos or []
        video = videos[0].video if videos else None
        if video is None:
            raise VideoGenerationError("No video generated")
        if not video.uri:
            raise VideoGenerationError("Generated video URI is null or empty")
        return video

    @staticmethod
    def download_video(client: genai.Client, video: types.Video, path: str, run_context: RunContext) -> None:
        """Download *video* to *path*; download errors are logged, not raised."""
        try:
            data = client.files.download(file=video)
        except errors.APIError as exc:
            run_context.logger.error("An error occurred while downloading the video: %s", exc)
            return

        target = Path(path)
        if target.parent != Path("."):
            target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        run_context.logger.info("Downloaded video to %s", target)
