"""
Validation utilities.

Shared validation utilities for common input validation tasks.
"""

import math
import os
from typing import Optional, Union

from shared.errors import ValidationError

MAX_EXTENSION_LENGTH = 10


def validate_media_payload(
    data: Optional[bytes],
    kind: str,
    max_size_mb: int = 500
) -> None:
    """
    Validate an uploaded media payload.

    Args:
        data: Raw file bytes (None if the field was missing)
        kind: "video" or "audio", used in error messages
        max_size_mb: Maximum payload size in MB (default: 500)

    Raises:
        ValidationError: If payload is missing, empty or too large
    """
    if data is None:
        raise ValidationError(f"Missing {kind} file")

    if len(data) == 0:
        raise ValidationError(f"The {kind} file is empty")

    validate_file_size(len(data), max_size_mb * 1024 * 1024)


def validate_file_size(
    file_size_bytes: int,
    max_size_bytes: int
) -> None:
    """
    Validate file size.

    Args:
        file_size_bytes: File size in bytes
        max_size_bytes: Maximum allowed size in bytes

    Raises:
        ValidationError: If file size exceeds maximum
    """
    if file_size_bytes < 0:
        raise ValidationError("File size cannot be negative")

    if file_size_bytes > max_size_bytes:
        max_size_mb = max_size_bytes / (1024 * 1024)
        file_size_mb = file_size_bytes / (1024 * 1024)
        raise ValidationError(
            f"File size ({file_size_mb:.2f} MB) exceeds maximum "
            f"of {max_size_mb:.2f} MB"
        )


def normalize_extension(value: Optional[str]) -> str:
    """
    Normalize a filename or bare extension to a safe ".ext" suffix.

    Accepts a filename ("clip.MP4") or a dotted extension (".mp4"). A name
    without a dot has no extension. Anything that is not a short
    alphanumeric extension collapses to "" so it can never escape the
    workspace directory.
    """
    if not value:
        return ""

    value = os.path.basename(value.strip())
    if "." not in value:
        return ""
    ext = value.rsplit(".", 1)[1].lower()

    if not ext or len(ext) > MAX_EXTENSION_LENGTH or not ext.isalnum() or not ext.isascii():
        return ""
    return f".{ext}"


def parse_duration(value: Union[str, float, int, None]) -> Optional[float]:
    """
    Parse an untrusted duration value.

    Blank or unparsable values become None. Non-finite numbers are passed
    through unchanged; the tempo calculator decides what to do with them.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)

    value = value.strip()
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def validate_prompt(
    prompt: Optional[str],
    max_length: int = 3000
) -> str:
    """
    Validate a narration goal prompt.

    Args:
        prompt: Prompt string to validate
        max_length: Maximum length in characters (default: 3000)

    Returns:
        The stripped prompt

    Raises:
        ValidationError: If prompt is invalid
    """
    if prompt is None or not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("Prompt is required")

    prompt = prompt.strip()
    if len(prompt) > max_length:
        raise ValidationError(
            f"Prompt must be at most {max_length} characters long "
            f"(current: {len(prompt)})"
        )
    return prompt


def is_positive_finite(value: Optional[float]) -> bool:
    """True when value is a finite number strictly greater than zero."""
    if value is None:
        return False
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False
