"""
Narration module exports.

Video understanding: turns a video and a goal prompt into a timed narration
script, and describes single frames.
"""

from .client import NarrationClient, create_narration_client
from .parser import parse_narration_response
from .prompts import build_narration_prompt, build_frame_prompt

__all__ = [
    "NarrationClient",
    "create_narration_client",
    "parse_narration_response",
    "build_narration_prompt",
    "build_frame_prompt",
]
