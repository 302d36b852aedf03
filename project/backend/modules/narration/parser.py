"""
Response parsing for narration module.
"""
import base64
import binascii
import json
import re
from typing import Tuple

from pydantic import ValidationError as PydanticValidationError

from shared.errors import UpstreamResponseError, ValidationError
from shared.logging import get_logger
from shared.models.narration import NarrationScript

logger = get_logger("narration.parser")

_FENCE_START = re.compile(r"^```(?:json)?\s*\n?", re.IGNORECASE)
_FENCE_END = re.compile(r"\n?```\s*$")

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

PARSE_ERROR_MESSAGE = (
    "Failed to parse Gemini response as JSON. "
    "The AI may not have followed the format instructions."
)


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding ```json / ``` markdown fence, if any."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        cleaned = _FENCE_START.sub("", cleaned)
        cleaned = _FENCE_END.sub("", cleaned)
    return cleaned.strip()


def parse_narration_response(raw: str) -> NarrationScript:
    """
    Parse the model output into a NarrationScript.

    Args:
        raw: Model text, optionally wrapped in a markdown code fence

    Returns:
        NarrationScript with a non-empty transcript

    Raises:
        UpstreamResponseError: Output is not JSON or lacks transcript/timestamps
    """
    try:
        data = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as e:
        logger.error(
            f"Narration response is not valid JSON: {e}",
            extra={"raw_response": raw[:500]}
        )
        raise UpstreamResponseError(PARSE_ERROR_MESSAGE, service="gemini") from e

    if not isinstance(data, dict) or not data.get("transcript") or "timestamps" not in data:
        logger.error("Narration response missing fields", extra={"raw_response": raw[:500]})
        raise UpstreamResponseError(PARSE_ERROR_MESSAGE, service="gemini")

    try:
        return NarrationScript(transcript=data["transcript"], timestamps=data["timestamps"] or [])
    except PydanticValidationError as e:
        logger.error(f"Narration response has invalid structure: {e}", extra={"raw_response": raw[:500]})
        raise UpstreamResponseError(PARSE_ERROR_MESSAGE, service="gemini") from e


def decode_image_data_url(image_data: str) -> Tuple[bytes, str]:
    """
    Decode a "data:<mime>;base64,<payload>" URL (or bare base64) into bytes.

    Returns:
        (image bytes, MIME type), defaulting to image/jpeg

    Raises:
        ValidationError: Payload missing or not valid base64
    """
    mime_type = DEFAULT_IMAGE_MIME_TYPE
    payload = image_data
    if image_data.startswith("data:") and "," in image_data:
        header, payload = image_data.split(",", 1)
        declared = header[len("data:"):].split(";", 1)[0]
        if declared:
            mime_type = declared

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValidationError("imageData is not valid base64 image data") from e
    if not data:
        raise ValidationError("Missing imageData or prompt")
    return data, mime_type
