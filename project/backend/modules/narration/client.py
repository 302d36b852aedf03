"""
Gemini integration for narration module.

NarrationClient wraps an explicitly constructed google-genai client; the API
layer builds one per application and tests inject a fake.
"""
import time
from typing import Optional

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from shared.config import Settings, settings as default_settings
from shared.errors import (
    UpstreamResponseError,
    UpstreamUnavailableError,
    classify_upstream_error,
)
from shared.logging import get_logger
from shared.models.narration import VideoAnalysis
from shared.validation import validate_prompt

from .parser import parse_narration_response
from .prompts import build_frame_prompt, build_narration_prompt

logger = get_logger("narration.client")

SERVICE = "gemini"
SERVICE_LABEL = "Gemini"
DEFAULT_VIDEO_MIME_TYPE = "video/mp4"
MISSING_KEY_MESSAGE = (
    "Gemini API key not configured. "
    "Please add GEMINI_API_KEY to your environment variables."
)


class NarrationClient:
    """Video and frame understanding backed by Gemini."""

    def __init__(
        self,
        client: genai.Client,
        video_model: Optional[str] = None,
        frame_model: Optional[str] = None
    ):
        self._client = client
        self.video_model = video_model or default_settings.gemini_video_model
        self.frame_model = frame_model or default_settings.gemini_frame_model

    async def analyze_video(
        self,
        video_bytes: bytes,
        goal: str,
        *,
        mime_type: Optional[str] = None,
        language_name: str = "English",
        video_duration: Optional[float] = None,
        video_name: Optional[str] = None
    ) -> VideoAnalysis:
        """
        Generate a timed narration script for a video.

        Args:
            video_bytes: Raw video file contents
            goal: What the narration should explain
            mime_type: Video MIME type (default: video/mp4)
            language_name: Language for the transcript
            video_duration: Video length in seconds, used to pace the script
            video_name: Original filename, echoed in the result

        Returns:
            VideoAnalysis with transcript, timestamps and video metadata

        Raises:
            ValidationError: Missing goal
            UpstreamServiceError: Gemini failed or returned unusable output
        """
        goal = validate_prompt(goal)
        mime_type = mime_type or DEFAULT_VIDEO_MIME_TYPE
        prompt = build_narration_prompt(goal, language_name, video_duration)

        logger.info(
            "Starting video analysis",
            extra={
                "model": self.video_model,
                "language": language_name,
                "video_name": video_name,
                "video_size": len(video_bytes),
                "video_duration": video_duration,
                "prompt_length": len(prompt)
            }
        )

        raw = await self._generate(self.video_model, prompt, video_bytes, mime_type)
        script = parse_narration_response(raw)

        logger.info(
            "Video analysis complete",
            extra={"transcript_length": len(script.transcript), "timestamps": len(script.timestamps)}
        )
        return VideoAnalysis(
            script=script,
            video_name=video_name,
            video_size=len(video_bytes),
            video_type=mime_type
        )

    async def analyze_frame(
        self,
        image_bytes: bytes,
        goal: str,
        *,
        mime_type: str = "image/jpeg"
    ) -> str:
        """Describe one frame with respect to the narration goal."""
        goal = validate_prompt(goal)
        logger.info(
            "Starting frame analysis",
            extra={"model": self.frame_model, "image_size": len(image_bytes)}
        )
        return await self._generate(self.frame_model, build_frame_prompt(goal), image_bytes, mime_type)

    async def _generate(self, model: str, prompt: str, data: bytes, mime_type: str) -> str:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_text(text=prompt),
                    types.Part.from_bytes(data=data, mime_type=mime_type),
                ]
            )
        ]

        start_time = time.time()
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents
            )
        except genai_errors.APIError as e:
            logger.error(
                f"Gemini API error: {e}",
                extra={"model": model, "upstream_status": e.code}
            )
            raise classify_upstream_error(
                SERVICE, e.code, e.message or str(e), service_label=SERVICE_LABEL
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Gemini unreachable: {e}", extra={"model": model})
            raise UpstreamUnavailableError(
                f"Failed to reach Gemini: {e}", service=SERVICE
            ) from e

        text = response.text
        logger.info(
            "Gemini response received",
            extra={
                "model": model,
                "response_length": len(text or ""),
                "duration": round(time.time() - start_time, 3)
            }
        )
        if not text:
            raise UpstreamResponseError("No response generated from Gemini API", service=SERVICE)
        return text


def create_narration_client(config: Optional[Settings] = None) -> NarrationClient:
    """
    Build a NarrationClient from settings.

    Raises:
        UpstreamUnavailableError: GEMINI_API_KEY is not configured
    """
    config = config or default_settings
    if not config.gemini_api_key:
        raise UpstreamUnavailableError(MISSING_KEY_MESSAGE, service=SERVICE)
    return NarrationClient(
        genai.Client(api_key=config.gemini_api_key),
        video_model=config.gemini_video_model,
        frame_model=config.gemini_frame_model
    )
