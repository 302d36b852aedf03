"""
Stored media models.

Unmerged inputs kept available when merging fails.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class MediaKind(str, Enum):
    """Media namespaces in the store."""
    VIDEO = "video"
    AUDIO = "audio"


class StoredMedia(BaseModel):
    """A media payload held by the media store."""
    key: str
    kind: MediaKind
    data: bytes = Field(repr=False)
    filename: Optional[str] = None
    content_type: str = "application/octet-stream"
