"""
Pytest fixtures for voice tests.
"""
import httpx
import pytest

from modules.voice.client import VoiceClient

BASE_URL = "https://elevenlabs.test/v1"


@pytest.fixture
def voice_client_factory():
    """Build a VoiceClient whose HTTP calls go to the given handler."""
    def _create(handler):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return VoiceClient(
            http_client,
            "test-key",
            base_url=BASE_URL,
            default_voice_id="default-voice",
            model_id="eleven_multilingual_v2",
            output_format="mp3_44100_128"
        )

    return _create
