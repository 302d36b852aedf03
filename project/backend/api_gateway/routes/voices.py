"""
Voice synthesis endpoints.

Lists voices and turns narration text into speech.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from pydantic import BaseModel, Field

from modules.voice import VoiceClient
from shared.logging import get_logger
from api_gateway.dependencies import get_voice_client

logger = get_logger(__name__)

router = APIRouter()


class GenerateAudioRequest(BaseModel):
    text: Optional[str] = None
    voice_id: Optional[str] = Field(None, alias="voiceId")


class PreviewVoiceRequest(BaseModel):
    voice_id: Optional[str] = Field(None, alias="voiceId")
    text: Optional[str] = None
    model_id: Optional[str] = Field(None, alias="modelId")


def _audio_response(audio: bytes) -> Response:
    return Response(content=audio, media_type="audio/mpeg")


@router.get("/voices")
async def list_voices(voice_client: VoiceClient = Depends(get_voice_client)):
    voices = await voice_client.list_voices()
    return {"voices": [voice.model_dump() for voice in voices]}


@router.post("/generate-audio")
async def generate_audio(
    body: GenerateAudioRequest,
    voice_client: VoiceClient = Depends(get_voice_client)
):
    """Synthesize the narration transcript as MP3."""
    audio = await voice_client.synthesize(body.text or "", voice_id=body.voice_id)
    return _audio_response(audio)


@router.post("/preview-voice")
async def preview_voice(
    body: PreviewVoiceRequest,
    voice_client: VoiceClient = Depends(get_voice_client)
):
    audio = await voice_client.preview(body.voice_id or "", body.text or "", model_id=body.model_id)
    return _audio_response(audio)
