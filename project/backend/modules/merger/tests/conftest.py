"""
Pytest fixtures for merger tests.
"""
import subprocess
from pathlib import Path

import pytest

from shared.models.merge import MergeRequest


def create_test_video(output_path: Path, duration: float = 1.0, width: int = 160, height: int = 120):
    """
    Create a small silent test-pattern video.

    Uses the built-in mpeg4 encoder so no optional codec library is needed.
    """
    cmd = [
        "ffmpeg",
        "-f", "lavfi",
        "-i", f"testsrc=size={width}x{height}:rate=25:duration={duration}",
        "-c:v", "mpeg4",
        "-pix_fmt", "yuv420p",
        "-an",
        "-y",
        str(output_path)
    ]
    subprocess.run(cmd, capture_output=True, timeout=30, check=True)


def create_test_audio(output_path: Path, duration: float = 1.0, frequency: int = 440):
    """Create a sine-tone WAV file."""
    cmd = [
        "ffmpeg",
        "-f", "lavfi",
        "-i", f"sine=frequency={frequency}:sample_rate=44100:duration={duration}",
        "-c:a", "pcm_s16le",
        "-y",
        str(output_path)
    ]
    subprocess.run(cmd, capture_output=True, timeout=30, check=True)


def probe_media_duration(media_path: Path) -> float:
    """Container duration via ffprobe (synchronous, for assertions)."""
    result = subprocess.run(
        [
            "ffprobe",
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(media_path)
        ],
        capture_output=True,
        text=True,
        check=True,
        timeout=10
    )
    return float(result.stdout.strip())


@pytest.fixture
def sample_request():
    """Create a merge request with fake payloads."""
    def _create_request(
        video_duration=10.0,
        audio_duration=8.0,
        video_bytes: bytes = b"fake video data",
        audio_bytes: bytes = b"fake audio data",
    ) -> MergeRequest:
        return MergeRequest(
            video_bytes=video_bytes,
            audio_bytes=audio_bytes,
            video_duration=video_duration,
            audio_duration=audio_duration,
            video_extension=".mp4",
            audio_extension=".mp3",
        )
    return _create_request


@pytest.fixture
def media_pair(tmp_path):
    """Factory returning (video_bytes, audio_bytes) with the given durations."""
    def _create_pair(video_duration: float, audio_duration: float, frequency: int = 440):
        video_path = tmp_path / f"video_{video_duration}_{frequency}.mp4"
        audio_path = tmp_path / f"audio_{audio_duration}_{frequency}.wav"
        create_test_video(video_path, duration=video_duration)
        create_test_audio(audio_path, duration=audio_duration, frequency=frequency)
        return video_path.read_bytes(), audio_path.read_bytes()
    return _create_pair


@pytest.fixture
def probe_duration():
    """Synchronous ffprobe duration reader for assertions."""
    return probe_media_duration
