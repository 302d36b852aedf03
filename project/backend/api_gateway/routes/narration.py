"""
Video understanding endpoints.

Generates a narration script for an uploaded video and describes frames.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, Field

from modules.narration import NarrationClient
from modules.narration.parser import decode_image_data_url
from shared.config import settings
from shared.errors import ValidationError
from shared.logging import get_logger
from shared.validation import parse_duration, validate_media_payload
from api_gateway.dependencies import get_narration_client

logger = get_logger(__name__)

router = APIRouter()


class FrameAnalysisRequest(BaseModel):
    image_data: Optional[str] = Field(None, alias="imageData", description="data:image/...;base64,... URL")
    prompt: Optional[str] = None


@router.post("/analyze-video")
async def analyze_video(
    video: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    language: str = Form("en"),
    language_name: str = Form("English", alias="languageName"),
    video_duration: Optional[str] = Form(None, alias="videoDuration"),
    narration_client: NarrationClient = Depends(get_narration_client)
):
    """
    Generate a timed narration script for a video.

    Returns:
        transcript, timestamps and the video's name, size and MIME type
    """
    if video is None or not prompt:
        raise ValidationError("Missing video file or prompt")

    video_bytes = await video.read()
    validate_media_payload(video_bytes, "video", settings.max_upload_size_mb)

    logger.info(
        "Video analysis requested",
        extra={"language": language, "language_name": language_name, "video_name": video.filename}
    )

    analysis = await narration_client.analyze_video(
        video_bytes,
        prompt,
        mime_type=video.content_type,
        language_name=language_name,
        video_duration=parse_duration(video_duration),
        video_name=video.filename
    )
    return {
        "transcript": analysis.script.transcript,
        "timestamps": [sentence.model_dump() for sentence in analysis.script.timestamps],
        "videoName": analysis.video_name,
        "videoSize": analysis.video_size,
        "videoType": analysis.video_type,
    }


@router.post("/analyze-frame")
async def analyze_frame(
    body: FrameAnalysisRequest,
    narration_client: NarrationClient = Depends(get_narration_client)
):
    """Describe one captured frame with respect to the narration goal."""
    if not body.image_data or not body.prompt:
        raise ValidationError("Missing imageData or prompt")

    image_bytes, mime_type = decode_image_data_url(body.image_data)
    analysis = await narration_client.analyze_frame(image_bytes, body.prompt, mime_type=mime_type)
    return {"analysis": analysis}
