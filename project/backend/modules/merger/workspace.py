"""
Per-request workspace for merger module.

Stages the two inputs on disk for ffmpeg and removes everything on exit.
"""
import shutil
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

from shared.config import settings
from shared.logging import get_logger
from shared.validation import normalize_extension
from .config import INPUT_VIDEO_STEM, INPUT_AUDIO_STEM, OUTPUT_FILENAME

logger = get_logger("merger.workspace")


@dataclass(frozen=True)
class MergeWorkspace:
    """Stable file paths handed to the transcoding engine."""

    root: Path
    input_video_path: Path
    input_audio_path: Path
    output_path: Path

    def read_output(self) -> Optional[bytes]:
        """Merged output bytes, or None if ffmpeg did not produce the file."""
        if not self.output_path.exists():
            return None
        return self.output_path.read_bytes()


@asynccontextmanager
async def merge_workspace(
    video_bytes: bytes,
    audio_bytes: bytes,
    video_extension: str = "",
    audio_extension: str = "",
    prefix: Optional[str] = None,
) -> AsyncIterator[MergeWorkspace]:
    """
    Context manager for an isolated merge directory with automatic cleanup.

    Writes the inputs verbatim as input-video<ext> / input-audio<ext> and
    declares (without creating) output.mp4. The directory and its contents
    are removed on every exit path.

    Args:
        video_bytes: Raw video file contents
        audio_bytes: Raw audio file contents
        video_extension: Original video extension (".mp4"), may be empty
        audio_extension: Original audio extension (".mp3"), may be empty
        prefix: Temp directory prefix (default: settings.merge_temp_prefix)

    Yields:
        MergeWorkspace with the three paths
    """
    root = Path(tempfile.mkdtemp(prefix=prefix or settings.merge_temp_prefix))
    try:
        workspace = MergeWorkspace(
            root=root,
            input_video_path=root / f"{INPUT_VIDEO_STEM}{normalize_extension(video_extension)}",
            input_audio_path=root / f"{INPUT_AUDIO_STEM}{normalize_extension(audio_extension)}",
            output_path=root / OUTPUT_FILENAME,
        )
        workspace.input_video_path.write_bytes(video_bytes)
        workspace.input_audio_path.write_bytes(audio_bytes)

        logger.debug(
            "Merge workspace ready",
            extra={
                "workspace": str(root),
                "video_bytes": len(video_bytes),
                "audio_bytes": len(audio_bytes),
            }
        )
        yield workspace
    finally:
        shutil.rmtree(root, ignore_errors=True)
        logger.debug("Merge workspace removed", extra={"workspace": str(root)})
