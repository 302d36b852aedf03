"""
ElevenLabs integration for voice module.

VoiceClient does not own its HTTP connection pool: the caller passes an
httpx.AsyncClient and closes it.
"""
from typing import Any, Dict, List, Optional

import httpx

from shared.config import Settings, settings as default_settings
from shared.errors import (
    UpstreamResponseError,
    UpstreamUnavailableError,
    ValidationError,
    classify_upstream_error,
)
from shared.logging import get_logger
from shared.models.narration import Voice

logger = get_logger("voice.client")

SERVICE = "elevenlabs"
SERVICE_LABEL = "ElevenLabs"
MISSING_KEY_MESSAGE = "ElevenLabs API key not configured"


def _error_detail(response: httpx.Response) -> str:
    """Pull a readable detail out of an ElevenLabs error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()

    if not isinstance(body, dict):
        return str(body)
    for field in ("detail", "message", "error"):
        value = body.get(field)
        if not value:
            continue
        # detail is often {"status": ..., "message": ...}
        if isinstance(value, dict):
            return str(value.get("message") or value)
        return str(value)
    return ""


class VoiceClient:
    """Text-to-speech and voice catalog backed by ElevenLabs."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        *,
        base_url: Optional[str] = None,
        default_voice_id: Optional[str] = None,
        model_id: Optional[str] = None,
        output_format: Optional[str] = None
    ):
        self._http = http_client
        self._api_key = api_key
        self.base_url = (base_url or default_settings.elevenlabs_base_url).rstrip("/")
        self.default_voice_id = default_voice_id or default_settings.elevenlabs_default_voice_id
        self.model_id = model_id or default_settings.elevenlabs_model_id
        self.output_format = output_format or default_settings.elevenlabs_output_format

    async def list_voices(self) -> List[Voice]:
        """Fetch the voices available to this API key."""
        response = await self._request("GET", "/voices")
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamResponseError("Failed to fetch voices from ElevenLabs", service=SERVICE) from e

        items = payload.get("voices") if isinstance(payload, dict) else None
        voices = [
            self._to_voice(item)
            for item in items or []
            if isinstance(item, dict) and item.get("voice_id")
        ]
        logger.info("Fetched voices", extra={"voice_count": len(voices)})
        return voices

    async def synthesize(
        self,
        text: str,
        voice_id: Optional[str] = None,
        model_id: Optional[str] = None
    ) -> bytes:
        """
        Convert narration text to MP3 audio.

        Args:
            text: Transcript to speak (stripped before sending)
            voice_id: ElevenLabs voice (default: configured default voice)
            model_id: Synthesis model (default: configured model)

        Returns:
            MP3 bytes

        Raises:
            ValidationError: Blank text
            UpstreamServiceError: ElevenLabs rejected the request or failed
        """
        if not text or not text.strip():
            raise ValidationError("Missing text")
        text = text.strip()
        voice_id = voice_id or self.default_voice_id

        logger.info(
            "Generating audio",
            extra={"voice_id": voice_id, "model_id": model_id or self.model_id, "text_length": len(text)}
        )
        audio = await self._text_to_speech(text, voice_id, model_id)
        logger.info("Audio generated", extra={"voice_id": voice_id, "size_bytes": len(audio)})
        return audio

    async def preview(
        self,
        voice_id: str,
        text: str,
        model_id: Optional[str] = None
    ) -> bytes:
        """Speak a short sample with the given voice."""
        if not voice_id or not text or not text.strip():
            raise ValidationError("Missing voiceId or text")
        return await self._text_to_speech(text.strip(), voice_id, model_id)

    async def _text_to_speech(self, text: str, voice_id: str, model_id: Optional[str]) -> bytes:
        response = await self._request(
            "POST",
            f"/text-to-speech/{voice_id}",
            params={"output_format": self.output_format},
            json={"text": text, "model_id": model_id or self.model_id}
        )
        if not response.content:
            raise UpstreamResponseError("ElevenLabs returned empty audio", service=SERVICE)
        return response.content

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        headers = {"xi-api-key": self._api_key}
        try:
            response = await self._http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"ElevenLabs request timeout: {e}", extra={"path": path})
            raise UpstreamUnavailableError(
                "Request timeout: ElevenLabs API took too long to respond. Please try again.",
                service=SERVICE
            ) from e
        except httpx.RequestError as e:
            logger.error(f"ElevenLabs connection error: {e}", extra={"path": path})
            raise UpstreamUnavailableError(
                "Network error: Unable to connect to ElevenLabs API. Please check your internet connection.",
                service=SERVICE
            ) from e

        if response.is_success:
            return response

        detail = _error_detail(response)
        logger.error(
            f"ElevenLabs API error: {response.status_code}",
            extra={"path": path, "status_code": response.status_code, "error": detail[:500]}
        )
        raise classify_upstream_error(SERVICE, response.status_code, detail, service_label=SERVICE_LABEL)

    @staticmethod
    def _to_voice(item: Dict[str, Any]) -> Voice:
        return Voice(
            voice_id=item["voice_id"],
            name=item.get("name") or item["voice_id"],
            category=item.get("category"),
            labels=item.get("labels") or {},
            preview_url=item.get("preview_url")
        )


def create_voice_client(
    http_client: httpx.AsyncClient,
    config: Optional[Settings] = None
) -> VoiceClient:
    """
    Build a VoiceClient from settings.

    Raises:
        UpstreamUnavailableError: ELEVENLABS_API_KEY is not configured
    """
    config = config or default_settings
    if not config.elevenlabs_api_key:
        raise UpstreamUnavailableError(MISSING_KEY_MESSAGE, service=SERVICE)
    return VoiceClient(
        http_client,
        config.elevenlabs_api_key,
        base_url=config.elevenlabs_base_url,
        default_voice_id=config.elevenlabs_default_voice_id,
        model_id=config.elevenlabs_model_id,
        output_format=config.elevenlabs_output_format
    )
