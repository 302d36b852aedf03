"""
Merge data models.

Defines MergeRequest, MergeResult and the merge stage enum used by the
synchronization pipeline.
"""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from shared.validation import normalize_extension


class MergeStage(str, Enum):
    """Merge pipeline stages, in order. SUCCEEDED and FAILED are terminal."""
    RECEIVED = "received"
    INPUTS_PERSISTED = "inputs_persisted"
    RATIO_COMPUTED = "ratio_computed"
    CHAIN_BUILT = "chain_built"
    TRANSCODING = "transcoding"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class MergeRequest(BaseModel):
    """Video plus narration audio to be merged into one container.

    The caller owns the buffers; the merge only reads them.
    """

    video_bytes: bytes = Field(repr=False)
    audio_bytes: bytes = Field(repr=False)
    video_duration: Optional[float] = Field(
        None,
        description="Video duration in seconds (untrusted, may be missing, zero or NaN)"
    )
    audio_duration: Optional[float] = Field(
        None,
        description="Narration duration in seconds (untrusted, may be missing, zero or NaN)"
    )
    video_extension: str = Field("", description="Original video extension, e.g. '.mp4'")
    audio_extension: str = Field("", description="Original audio extension, e.g. '.mp3'")

    @field_validator("video_extension", "audio_extension", mode="before")
    @classmethod
    def normalize_ext(cls, v: Optional[str]) -> str:
        """Accept filenames or extensions, keep only a safe '.ext'."""
        return normalize_extension(v)


class MergeResult(BaseModel):
    """Merged MP4 plus the tempo correction that produced it."""

    content: bytes = Field(repr=False, description="MP4 container bytes")
    tempo_ratio: float = Field(..., gt=0, description="video_duration / audio_duration, or 1.0")
    atempo_chain: List[float] = Field(..., min_length=1)
    filter_expression: str

    @property
    def size_bytes(self) -> int:
        return len(self.content)
