"""
Pytest fixtures for narration tests.
"""
from types import SimpleNamespace

import pytest
from unittest.mock import AsyncMock, MagicMock

from modules.narration.client import NarrationClient


@pytest.fixture
def fake_genai():
    """google-genai client stand-in exposing aio.models.generate_content."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    return client


@pytest.fixture
def narration_client(fake_genai):
    return NarrationClient(fake_genai, video_model="video-model", frame_model="frame-model")


@pytest.fixture
def gemini_reply():
    """Factory for a generate_content response with the given text."""
    def _reply(text):
        return SimpleNamespace(text=text)
    return _reply
