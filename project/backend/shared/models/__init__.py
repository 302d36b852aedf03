"""
Data models for the narration pipeline.

This module exports all Pydantic models used across pipeline modules.
"""

from .merge import MergeRequest, MergeResult, MergeStage
from .narration import TimedSentence, NarrationScript, VideoAnalysis, Voice
from .media import MediaKind, StoredMedia

__all__ = [
    # Merge models
    "MergeRequest",
    "MergeResult",
    "MergeStage",
    # Narration models
    "TimedSentence",
    "NarrationScript",
    "VideoAnalysis",
    "Voice",
    # Media models
    "MediaKind",
    "StoredMedia",
]
