"""
Tempo ratio calculation for merger module.

Duration stretch needed for the narration to span the video, and the
atempo speed that realizes it.
"""
from typing import Optional

from shared.logging import get_logger
from shared.validation import is_positive_finite
from .config import IDENTITY_RATIO

logger = get_logger("merger.tempo")


def compute_tempo_ratio(
    video_duration: Optional[float],
    audio_duration: Optional[float]
) -> float:
    """
    Compute the atempo ratio video_duration / audio_duration.

    Degenerate input (missing, zero, negative, NaN or infinite on either side)
    yields 1.0: skipping the tempo correction beats failing the merge.

    Args:
        video_duration: Video duration in seconds
        audio_duration: Narration duration in seconds

    Returns:
        Finite ratio > 0
    """
    if is_positive_finite(video_duration) and is_positive_finite(audio_duration):
        ratio = video_duration / audio_duration
        # Extreme magnitudes can still overflow/underflow the division
        if is_positive_finite(ratio):
            return ratio

    logger.debug(
        "Durations unusable, no tempo correction",
        extra={"video_duration": video_duration, "audio_duration": audio_duration}
    )
    return IDENTITY_RATIO


def atempo_speed_for_ratio(ratio: float) -> float:
    """
    Playback speed that stretches the narration by ratio.

    ratio is the duration stretch (target / narration); atempo takes a speed,
    so a narration that must last 1.25x longer plays at 0.8x.
    """
    if not is_positive_finite(ratio):
        return IDENTITY_RATIO
    speed = 1.0 / ratio
    return speed if is_positive_finite(speed) else IDENTITY_RATIO
