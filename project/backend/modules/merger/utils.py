"""
Utility functions for merger module.

FFmpeg command execution, duration extraction, and availability checks.
"""
import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from shared.config import settings
from shared.errors import ProcessExitError, ProcessSpawnError, ProcessTimeoutError
from shared.logging import get_logger
from shared.validation import is_positive_finite

logger = get_logger("merger.utils")

FFMPEG_INSTALL_HINT = (
    "Please install FFmpeg:\n"
    "  macOS: brew install ffmpeg\n"
    "  Linux: apt-get install ffmpeg or yum install ffmpeg\n"
    "  Windows: Download from https://ffmpeg.org/"
)

STDERR_CHUNK_SIZE = 4096
FFPROBE_TIMEOUT = 10


@dataclass
class ProcessResult:
    """Outcome of one transcoding engine run."""

    exit_code: int
    diagnostics: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


def resolve_ffmpeg_binary(ffmpeg_path: Optional[str] = None) -> Optional[str]:
    """
    Resolve the FFmpeg executable on PATH (or an explicit path).

    Returns:
        Absolute path to the executable, or None if it cannot be found
    """
    return shutil.which(ffmpeg_path or settings.ffmpeg_path)


def check_ffmpeg_available(ffmpeg_path: Optional[str] = None) -> bool:
    """
    Check if FFmpeg is installed and available in PATH.

    Returns:
        True if FFmpeg is available, False otherwise
    """
    return resolve_ffmpeg_binary(ffmpeg_path) is not None


def compute_merge_timeout(video_duration: Optional[float]) -> Optional[float]:
    """
    Bounded wait for one merge: max(floor, factor * video_duration).

    Falls back to the default when the video duration is unknown. Returns
    None (wait forever) when the timeout factor is configured as 0.
    """
    if settings.merge_timeout_factor == 0:
        return None
    if not is_positive_finite(video_duration):
        return settings.merge_timeout_default_seconds
    return max(
        settings.merge_timeout_floor_seconds,
        settings.merge_timeout_factor * video_duration
    )


def _decode(chunks: List[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")


async def _drain_stderr(process: asyncio.subprocess.Process, chunks: List[bytes]) -> int:
    """Accumulate stderr until EOF, then wait for the exit status."""
    while True:
        chunk = await process.stderr.read(STDERR_CHUNK_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return await process.wait()


async def _terminate(process: asyncio.subprocess.Process) -> None:
    """Kill and reap a child that is still running."""
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


async def run_ffmpeg_command(
    cmd: List[str],
    timeout: Optional[float] = None
) -> ProcessResult:
    """
    Run an FFmpeg command once, without a shell.

    The first element names the executable; it is resolved on PATH before
    spawning. Stderr is accumulated incrementally for failure reporting.
    The child is always killed and reaped on timeout or cancellation.

    Args:
        cmd: FFmpeg command as list of strings
        timeout: Seconds to wait before killing the process (None: no limit)

    Returns:
        ProcessResult with exit code 0 and the collected diagnostics

    Raises:
        ProcessSpawnError: Executable missing or not startable
        ProcessExitError: Non-zero exit status
        ProcessTimeoutError: Did not finish within timeout
    """
    executable = resolve_ffmpeg_binary(cmd[0])
    if executable is None:
        logger.error("FFmpeg executable not found", extra={"ffmpeg_path": cmd[0]})
        raise ProcessSpawnError(f"FFmpeg not found ({cmd[0]}). {FFMPEG_INSTALL_HINT}")

    logger.info(
        f"Running FFmpeg command: {' '.join(cmd)}",
        extra={"command": cmd, "timeout": timeout}
    )

    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *cmd[1:],
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        logger.error(f"Failed to start FFmpeg: {e}", extra={"ffmpeg_path": executable})
        raise ProcessSpawnError(f"Failed to start FFmpeg ({executable}): {e}") from e

    stderr_chunks: List[bytes] = []
    try:
        exit_code = await asyncio.wait_for(
            _drain_stderr(process, stderr_chunks),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        diagnostics = _decode(stderr_chunks)
        logger.error(
            f"FFmpeg command timeout after {timeout}s",
            extra={"timeout": timeout, "error": diagnostics[-2000:]}
        )
        raise ProcessTimeoutError(
            f"FFmpeg command timeout after {timeout}s",
            timeout=timeout,
            diagnostics=diagnostics
        )
    finally:
        await _terminate(process)

    diagnostics = _decode(stderr_chunks)
    if exit_code != 0:
        logger.error(
            f"FFmpeg command failed (code {exit_code})",
            extra={"exit_code": exit_code, "error": diagnostics[-2000:], "command": cmd}
        )
        raise ProcessExitError(
            f"ffmpeg failed (code {exit_code}): {diagnostics.strip() or 'Unknown FFmpeg error'}",
            exit_code=exit_code,
            diagnostics=diagnostics
        )

    return ProcessResult(exit_code=exit_code, diagnostics=diagnostics)


async def get_media_duration(
    media_path: Path,
    ffprobe_path: Optional[str] = None
) -> Optional[float]:
    """
    Get container duration using ffprobe.

    Args:
        media_path: Path to video or audio file
        ffprobe_path: ffprobe executable (default: settings.ffprobe_path)

    Returns:
        Duration in seconds, or None if it cannot be determined
    """
    executable = shutil.which(ffprobe_path or settings.ffprobe_path)
    if executable is None:
        logger.warning("ffprobe not found, duration unknown", extra={"media_path": str(media_path)})
        return None

    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            "-v", "error",
            "-show_entries", "format=duration",
            "-of", "default=noprint_wrappers=1:nokey=1",
            str(media_path),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
    except OSError as e:
        logger.warning(f"Failed to start ffprobe: {e}", extra={"media_path": str(media_path)})
        return None

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=FFPROBE_TIMEOUT)
    except asyncio.TimeoutError:
        logger.warning("ffprobe timeout, duration unknown", extra={"media_path": str(media_path)})
        return None
    finally:
        await _terminate(process)

    if process.returncode != 0:
        return None
    try:
        duration = float(stdout.decode().strip())
    except ValueError:
        return None
    return duration if is_positive_finite(duration) else None
