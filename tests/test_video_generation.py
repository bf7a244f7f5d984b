"""Tests for VideoGeneration."""

from datetime import timedelta
from types import SimpleNamespace

import pytest
from google.genai import errors, types

from nexus_gemini.core.errors import TaskValidationError, VideoGenerationError, VideoGenerationTimeoutError
from nexus_gemini.core.run_context import RunContext, variable_renderer
from nexus_gemini.tasks import VideoGeneration
from nexus_gemini.tasks import video_generation

VIDEO_URI = "https://generativelanguage.googleapis.com/v1beta/files/abc:download"


class FakeClock:
    """Stands in for time.monotonic/time.sleep; sleeping advances the clock."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr(video_generation.time, "monotonic", fake.monotonic)
    monkeypatch.setattr(video_generation.time, "sleep", fake.sleep)
    return fake


def _operation(done, uri=VIDEO_URI, response=True, error=None):
    result = None
    if response:
        videos = [SimpleNamespace(video=types.Video(uri=uri, mime_type="video/mp4"))] if uri is not None else []
        result = SimpleNamespace(generated_videos=videos)
    return SimpleNamespace(
        name="operations/123",
        done=done,
        response=result if done else None,
        error=error,
        metadata={"model": "veo-3.0-generate-preview"},
    )


def _task(**overrides):
    config = {
        "id": "video",
        "api_key": "key-123",
        "model": "veo-3.0-generate-preview",
        "prompt": "a simple animation of a bouncing ball",
    }
    config.update(overrides)
    return VideoGeneration.from_config(config)


@pytest.mark.parametrize("duration", [0, -5, 61, 120])
def test_duration_out_of_range_fails_before_any_call(run_context, client_factory, duration):
    with pytest.raises(TaskValidationError, match="Duration must be between 1 and 60 seconds"):
        _task(duration_in_seconds=duration, vertex_ai=True, output_gcs_uri="gs://bucket/").run(run_context)
    client_factory.assert_not_called()


def test_duration_checked_even_without_prompt(run_context, client_factory):
    with pytest.raises(TaskValidationError, match="Duration must be between"):
        _task(prompt=None, duration_in_seconds=0).run(run_context)


def test_vertex_ai_requires_output_gcs_uri(run_context, client_factory):
    with pytest.raises(TaskValidationError, match="output_gcs_uri is required"):
        _task(vertex_ai=True, project="proj", location="us-central1").run(run_context)
    client_factory.assert_not_called()


@pytest.mark.parametrize("download_file_path", ["", "{{ empty }}"])
def test_empty_download_path_fails_without_vertex_ai(storage, client_factory, download_file_path):
    run_context = RunContext(storage=storage, variables={"empty": ""}, renderer=variable_renderer)

    with pytest.raises(TaskValidationError, match="download_file_path is required"):
        _task(download_file_path=download_file_path).run(run_context)
    client_factory.assert_not_called()


def test_default_download_path_when_absent(run_context, client, clock, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    client.models.generate_videos.return_value = _operation(done=True)
    client.files.download.return_value = b"mp4-bytes"

    _task().run(run_context)

    downloaded = list(tmp_path.glob("genai_video_*.mp4"))
    assert len(downloaded) == 1
    assert downloaded[0].read_bytes() == b"mp4-bytes"


def test_generates_and_downloads_video(run_context, client_factory, client, clock, tmp_path):
    target = tmp_path / "out" / "video.mp4"
    client.models.generate_videos.return_value = _operation(done=False)
    client.operations.get.side_effect = [_operation(done=False), _operation(done=True)]
    client.files.download.return_value = b"mp4-bytes"

    output = _task(
        download_file_path=str(target),
        negative_prompt="barking, dogs",
        seed=42,
        duration_in_seconds=5,
    ).run(run_context)

    client_factory.assert_called_once_with(api_key="key-123")
    kwargs = client.models.generate_videos.call_args.kwargs
    assert kwargs["model"] == "veo-3.0-generate-preview"
    assert kwargs["prompt"] == "a simple animation of a bouncing ball"
    config = kwargs["config"]
    assert config.number_of_videos == 1
    assert config.seed == 42
    assert config.negative_prompt == "barking, dogs"
    # Only honoured by Vertex AI
    assert config.duration_seconds is None
    assert config.output_gcs_uri is None

    assert client.operations.get.call_count == 2
    assert clock.sleeps == [1.0, 1.0]
    assert target.read_bytes() == b"mp4-bytes"
    assert output.video_uri == VIDEO_URI
    assert output.mime_type == "video/mp4"
    assert output.metadata == {"model": "veo-3.0-generate-preview"}


def test_vertex_ai_routing(run_context, client_factory, client, clock):
    client.models.generate_videos.return_value = _operation(done=True, uri="gs://bucket/videos/sample_0.mp4")

    output = _task(
        api_key=None,
        vertex_ai=True,
        project="my-project",
        location="us-central1",
        output_gcs_uri="gs://bucket/videos/",
        duration_in_seconds=8,
        include_audio=True,
    ).run(run_context)

    client_factory.assert_called_once_with(vertexai=True, project="my-project", location="us-central1")
    config = client.models.generate_videos.call_args.kwargs["config"]
    assert config.duration_seconds == 8
    assert config.generate_audio is True
    assert config.output_gcs_uri == "gs://bucket/videos/"
    client.operations.get.assert_not_called()
    client.files.download.assert_not_called()
    assert output.video_uri == "gs://bucket/videos/sample_0.mp4"


def test_polling_times_out(run_context, client, clock, tmp_path):
    client.models.generate_videos.return_value = _operation(done=False)
    client.operations.get.return_value = _operation(done=False)

    with pytest.raises(VideoGenerationTimeoutError, match="timed out"):
        _task(timeout="PT3S", download_file_path=str(tmp_path / "v.mp4")).run(run_context)

    # Polls while elapsed <= 3s, then gives up before a fourth refresh
    assert client.operations.get.call_count == 4
    assert clock.now == 4.0


def test_timeout_accepts_timedelta(run_context, client, clock, tmp_path):
    client.models.generate_videos.return_value = _operation(done=False)
    client.operations.get.return_value = _operation(done=False)

    with pytest.raises(TimeoutError):
        _task(timeout=timedelta(seconds=1), download_file_path=str(tmp_path / "v.mp4")).run(run_context)
    assert client.operations.get.call_count == 2


def test_operation_without_response_fails(run_context, client, clock, tmp_path):
    operation = _operation(done=True, response=False, error={"code": 3, "message": "prompt rejected"})
    client.models.generate_videos.return_value = operation

    with pytest.raises(VideoGenerationError, match="prompt rejected"):
        _task(download_file_path=str(tmp_path / "v.mp4")).run(run_context)


def test_operation_without_videos_fails(run_context, client, clock, tmp_path):
    client.models.generate_videos.return_value = _operation(done=True, uri=None)

    with pytest.raises(VideoGenerationError, match="No video generated"):
        _task(download_file_path=str(tmp_path / "v.mp4")).run(run_context)


def test_video_without_uri_fails(run_context, client, clock, tmp_path):
    client.models.generate_videos.return_value = _operation(done=True, uri="")

    with pytest.raises(VideoGenerationError, match="URI is null or empty"):
        _task(download_file_path=str(tmp_path / "v.mp4")).run(run_context)


def test_download_error_is_logged_not_raised(run_context, client, clock, tmp_path, caplog):
    target = tmp_path / "v.mp4"
    client.models.generate_videos.return_value = _operation(done=True)
    client.files.download.side_effect = errors.APIError(500, {"error": {"message": "download failed"}})

    output = _task(download_file_path=str(target)).run(run_context)

    assert output.video_uri == VIDEO_URI
    assert not target.exists()
    assert "An error occurred while downloading the video" in caplog.text


def test_api_errors_propagate(run_context, client, clock, tmp_path):
    client.models.generate_videos.side_effect = errors.ClientError(
        400, {"error": {"message": "API key not valid. Please pass a valid API key."}}
    )

    with pytest.raises(errors.ClientError, match="API key not valid"):
        _task(download_file_path=str(tmp_path / "v.mp4")).run(run_context)
    client.close.assert_called_once()


def test_client_is_closed(run_context, client, clock, tmp_path):
    client.models.generate_videos.return_value = _operation(done=True)
    client.files.download.return_value = b""

    _task(download_file_path=str(tmp_path / "v.mp4")).run(run_context)

    client.close.assert_called_once()
