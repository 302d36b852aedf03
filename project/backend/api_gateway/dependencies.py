"""
FastAPI dependencies.

Per-application collaborators (media store, HTTP pool, AI clients) live on
app.state and are handed to routes here, so tests can override them.
"""

from fastapi import Request

from modules.narration import NarrationClient, create_narration_client
from modules.voice import VoiceClient, create_voice_client
from shared.logging import get_logger
from shared.media_store import MediaStore

logger = get_logger(__name__)


def get_media_store(request: Request) -> MediaStore:
    """Media store owned by this application instance."""
    return request.app.state.media_store


def get_voice_client(request: Request) -> VoiceClient:
    """
    Voice client over the application's shared HTTP pool.

    Raises:
        UpstreamUnavailableError: ELEVENLABS_API_KEY is not configured
    """
    return create_voice_client(request.app.state.http_client)


def get_narration_client(request: Request) -> NarrationClient:
    """
    Narration client, created on first use and kept for the app's lifetime.

    Raises:
        UpstreamUnavailableError: GEMINI_API_KEY is not configured
    """
    client = getattr(request.app.state, "narration_client", None)
    if client is None:
        client = create_narration_client()
        request.app.state.narration_client = client
        logger.info("Narration client initialized")
    return client
