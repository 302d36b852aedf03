"""
Tests for merge and stored media endpoints.
"""
import pytest
from unittest.mock import AsyncMock, patch
from fastapi import status

from shared.errors import ProcessExitError, ProcessSpawnError, ValidationError
from shared.models.merge import MergeResult


@pytest.fixture
def merge_files():
    return {
        "video": ("clip.MP4", b"video-bytes", "video/mp4"),
        "audio": ("narration.mp3", b"audio-bytes", "audio/mpeg"),
    }


@pytest.fixture
def merged_result():
    return MergeResult(
        content=b"merged-mp4",
        tempo_ratio=1.25,
        atempo_chain=[0.8],
        filter_expression="atempo=0.800000"
    )


class TestMergeAv:
    """Tests for POST /api/merge-av."""

    def test_success(self, client, merge_files, merged_result):
        """Test the merged MP4 is returned as an uncached attachment."""
        with patch("api_gateway.routes.merge.merge", AsyncMock(return_value=merged_result)):
            response = client.post(
                "/api/merge-av",
                files=merge_files,
                data={"videoDuration": "10", "audioDuration": "8"}
            )

        assert response.status_code == status.HTTP_200_OK
        assert response.content == b"merged-mp4"
        assert response.headers["content-type"] == "video/mp4"
        assert response.headers["cache-control"] == "no-store"
        assert 'filename="output-with-voiceover.mp4"' in response.headers["content-disposition"]

    def test_request_built_from_form(self, client, merge_files, merged_result):
        """Test durations are parsed and extensions taken from filenames."""
        mock_merge = AsyncMock(return_value=merged_result)
        with patch("api_gateway.routes.merge.merge", mock_merge):
            client.post(
                "/api/merge-av",
                files=merge_files,
                data={"videoDuration": "10.5", "audioDuration": "not-a-number"}
            )

        merge_request = mock_merge.call_args[0][0]
        assert merge_request.video_bytes == b"video-bytes"
        assert merge_request.audio_bytes == b"audio-bytes"
        assert merge_request.video_duration == 10.5
        assert merge_request.audio_duration is None
        assert merge_request.video_extension == ".mp4"
        assert merge_request.audio_extension == ".mp3"

    def test_durations_optional(self, client, merge_files, merged_result):
        """Test durations may be omitted entirely."""
        mock_merge = AsyncMock(return_value=merged_result)
        with patch("api_gateway.routes.merge.merge", mock_merge):
            response = client.post("/api/merge-av", files=merge_files)

        assert response.status_code == status.HTTP_200_OK
        assert mock_merge.call_args[0][0].video_duration is None

    def test_missing_audio(self, client):
        """Test a missing file is a 400 input error."""
        with patch("api_gateway.routes.merge.merge", AsyncMock()) as mock_merge:
            response = client.post(
                "/api/merge-av",
                files={"video": ("clip.mp4", b"video-bytes", "video/mp4")}
            )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Missing video or audio file", "code": "invalid_input"}
        mock_merge.assert_not_called()

    def test_empty_payload(self, client, merge_files):
        """Test input errors from the merge carry no fallback."""
        with patch(
            "api_gateway.routes.merge.merge",
            AsyncMock(side_effect=ValidationError("The video file is empty"))
        ):
            response = client.post("/api/merge-av", files=merge_files)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "fallback" not in response.json()

    def test_failure_offers_unmerged_fallback(self, client, merge_files):
        """Test a failed merge returns retrievable unmerged inputs."""
        error = ProcessExitError(
            "ffmpeg failed (code 1): Invalid data found when processing input",
            exit_code=1,
            diagnostics="Invalid data found when processing input"
        )
        with patch("api_gateway.routes.merge.merge", AsyncMock(side_effect=error)):
            response = client.post("/api/merge-av", files=merge_files)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        body = response.json()
        assert body["error"].startswith("Failed to merge: ffmpeg failed (code 1)")
        assert body["code"] == "transcode_failed"
        assert body["fallback"]["guidance"]

        video = client.get(body["fallback"]["video_url"])
        audio = client.get(body["fallback"]["audio_url"])
        assert video.status_code == status.HTTP_200_OK
        assert video.content == b"video-bytes"
        assert video.headers["content-type"] == "video/mp4"
        assert audio.content == b"audio-bytes"
        assert audio.headers["content-type"] == "audio/mpeg"
        assert 'filename="clip.MP4"' in video.headers["content-disposition"]

    def test_fallback_with_non_latin_filename(self, client):
        """Test unmerged media stays downloadable when the upload name is not latin-1."""
        files = {
            "video": ("演示.mp4", b"video-bytes", "video/mp4"),
            "audio": ("旁白.mp3", b"audio-bytes", "audio/mpeg"),
        }
        error = ProcessExitError("ffmpeg failed (code 1): boom", exit_code=1, diagnostics="boom")
        with patch("api_gateway.routes.merge.merge", AsyncMock(side_effect=error)):
            response = client.post("/api/merge-av", files=files)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        video = client.get(response.json()["fallback"]["video_url"])

        assert video.status_code == status.HTTP_200_OK
        assert video.content == b"video-bytes"
        disposition = video.headers["content-disposition"]
        assert disposition.startswith("inline;")
        assert 'filename="__.mp4"' in disposition
        assert "filename*=UTF-8''%E6%BC%94%E7%A4%BA.mp4" in disposition

    def test_engine_unavailable(self, client, merge_files):
        """Test a missing ffmpeg is a 503 with fallback."""
        with patch(
            "api_gateway.routes.merge.merge",
            AsyncMock(side_effect=ProcessSpawnError("FFmpeg not found (ffmpeg)."))
        ):
            response = client.post("/api/merge-av", files=merge_files)

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["code"] == "engine_unavailable"
        assert "fallback" in response.json()


class TestGetMedia:
    """Tests for GET /api/media/{kind}/{key}."""

    def test_unknown_key(self, client):
        """Test unknown media is a 404."""
        response = client.get("/api/media/video/does-not-exist")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["code"] == "not_found"

    def test_unknown_kind(self, client):
        """Test kinds other than video/audio are rejected."""
        response = client.get("/api/media/image/abc")
        assert response.status_code == 422


class TestApplication:
    """Tests for application-wide behavior."""

    def test_request_id_generated(self, client):
        """Test every response carries a request id."""
        response = client.get("/api/media/video/missing")
        assert response.headers["X-Request-ID"]

    def test_request_id_echoed(self, client):
        """Test a caller-supplied request id is echoed back."""
        response = client.get("/api/media/video/missing", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    @patch("api_gateway.routes.health.check_ffmpeg_available", return_value=True)
    def test_health(self, mock_check, client):
        """Test health reports ffmpeg availability."""
        response = client.get("/api/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"
        assert response.json()["ffmpeg"] is True

    @patch("api_gateway.routes.health.check_ffmpeg_available", return_value=False)
    def test_health_degraded(self, mock_check, client):
        """Test health is degraded without ffmpeg."""
        response = client.get("/api/health")
        assert response.json()["status"] == "degraded"
        assert response.json()["ffmpeg"] is False
