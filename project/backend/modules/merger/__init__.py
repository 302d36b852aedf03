"""
Merger module.

Synchronizes narration audio with a video: computes the tempo ratio, builds
the atempo chain, runs ffmpeg in an isolated workspace and returns one MP4.
"""

from modules.merger.process import merge, build_merge_command
from modules.merger.tempo import compute_tempo_ratio
from modules.merger.filter_chain import build_atempo_chain, format_atempo_filter

__all__ = [
    "merge",
    "build_merge_command",
    "compute_tempo_ratio",
    "build_atempo_chain",
    "format_atempo_filter",
]
