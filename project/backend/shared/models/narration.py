"""
Narration data models.

Transcript and timed sentences produced by the video-understanding service,
and voices offered by the voice-synthesis service.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class TimedSentence(BaseModel):
    """One narration sentence anchored to a video timestamp."""
    time: str = Field(..., description="Timestamp in MM:SS")
    text: str


class NarrationScript(BaseModel):
    """Narration ready for text-to-speech."""
    transcript: str = Field(..., min_length=1, description="Clean transcript without timestamps")
    timestamps: List[TimedSentence] = Field(default_factory=list)


class VideoAnalysis(BaseModel):
    """Narration script plus the metadata of the analyzed video."""
    script: NarrationScript
    video_name: Optional[str] = None
    video_size: int = Field(..., ge=0, description="Video size in bytes")
    video_type: str = "video/mp4"


class Voice(BaseModel):
    """Voice offered by the voice-synthesis service."""
    voice_id: str
    name: str
    category: Optional[str] = None
    labels: Dict[str, Any] = Field(default_factory=dict)
    preview_url: Optional[str] = None
