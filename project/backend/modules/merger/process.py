"""
Main entry point for merger module.

Merges a video with an independently generated narration track: the audio is
time-stretched to the video's length, the video stream is copied untouched,
and the result is muxed into one MP4.

Stages: received -> inputs_persisted -> ratio_computed -> chain_built ->
transcoding -> succeeded | failed. Nothing is retried.
"""
import time
from typing import List, Optional

from shared.config import settings
from shared.errors import MergeError, PipelineError, ProcessSpawnError
from shared.logging import get_logger
from shared.models.merge import MergeRequest, MergeResult, MergeStage
from shared.validation import is_positive_finite, validate_media_payload

from .config import VIDEO_STREAM_MAP, AUDIO_STREAM_MAP, MIN_OUTPUT_SIZE_BYTES
from .filter_chain import build_atempo_chain, format_atempo_filter
from .tempo import atempo_speed_for_ratio, compute_tempo_ratio
from .utils import (
    FFMPEG_INSTALL_HINT,
    check_ffmpeg_available,
    compute_merge_timeout,
    get_media_duration,
    run_ffmpeg_command,
)
from .workspace import MergeWorkspace, merge_workspace

logger = get_logger("merger.process")


def build_merge_command(
    ffmpeg_path: str,
    workspace: MergeWorkspace,
    filter_expression: str,
    audio_codec: Optional[str] = None
) -> List[str]:
    """
    Build the ffmpeg argument list for one merge.

    Video is stream-copied from the first input, audio from the second input
    goes through the atempo chain and is re-encoded, and -shortest ends the
    output with the shorter stream so the video length is kept.
    """
    return [
        ffmpeg_path,
        "-y",
        "-nostdin",
        "-i", str(workspace.input_video_path),
        "-i", str(workspace.input_audio_path),
        "-filter:a", filter_expression,
        "-map", VIDEO_STREAM_MAP,
        "-map", AUDIO_STREAM_MAP,
        "-c:v", "copy",  # Copy video (no re-encoding)
        "-c:a", audio_codec or settings.merge_output_audio_codec,
        "-shortest",
        str(workspace.output_path),
    ]


def _log_stage(stage: MergeStage, **extra) -> None:
    log = logger.error if stage is MergeStage.FAILED else logger.info
    log(f"Merge stage: {stage.value}", extra={"stage": stage.value, **extra})


async def merge(
    request: MergeRequest,
    *,
    ffmpeg_path: Optional[str] = None,
    timeout: Optional[float] = None,
    probe_missing_durations: bool = True
) -> MergeResult:
    """
    Merge video with narration audio into a single MP4.

    Args:
        request: Video/audio payloads with their (untrusted) durations
        ffmpeg_path: FFmpeg executable (default: settings.ffmpeg_path)
        timeout: Seconds before ffmpeg is killed (default: derived from the
            video duration, see compute_merge_timeout)
        probe_missing_durations: Fill unknown durations with ffprobe

    Returns:
        MergeResult with MP4 bytes and the applied tempo correction

    Raises:
        ValidationError: Missing or oversized payload (nothing is staged)
        ProcessSpawnError: FFmpeg not installed or not startable
        ProcessExitError: FFmpeg exited non-zero (diagnostics attached)
        ProcessTimeoutError: FFmpeg exceeded the bounded wait
        MergeError: Any other merge failure
    """
    start_time = time.time()
    ffmpeg = ffmpeg_path or settings.ffmpeg_path
    _log_stage(
        MergeStage.RECEIVED,
        video_duration=request.video_duration,
        audio_duration=request.audio_duration
    )

    try:
        # Input errors are rejected before any workspace or process exists
        validate_media_payload(request.video_bytes, "video", settings.max_upload_size_mb)
        validate_media_payload(request.audio_bytes, "audio", settings.max_upload_size_mb)

        if not check_ffmpeg_available(ffmpeg):
            raise ProcessSpawnError(f"FFmpeg not found ({ffmpeg}). {FFMPEG_INSTALL_HINT}")

        async with merge_workspace(
            request.video_bytes,
            request.audio_bytes,
            request.video_extension,
            request.audio_extension,
        ) as workspace:
            _log_stage(MergeStage.INPUTS_PERSISTED, workspace=str(workspace.root))

            video_duration = request.video_duration
            audio_duration = request.audio_duration
            if probe_missing_durations:
                if not is_positive_finite(video_duration):
                    video_duration = await get_media_duration(workspace.input_video_path)
                if not is_positive_finite(audio_duration):
                    audio_duration = await get_media_duration(workspace.input_audio_path)

            ratio = compute_tempo_ratio(video_duration, audio_duration)
            _log_stage(
                MergeStage.RATIO_COMPUTED,
                tempo_ratio=ratio,
                video_duration=video_duration,
                audio_duration=audio_duration
            )

            speed = atempo_speed_for_ratio(ratio)
            chain = build_atempo_chain(speed)
            filter_expression = format_atempo_filter(chain)
            _log_stage(
                MergeStage.CHAIN_BUILT,
                atempo_speed=speed,
                atempo_filter=filter_expression,
                chain_length=len(chain)
            )

            cmd = build_merge_command(ffmpeg, workspace, filter_expression)
            effective_timeout = timeout if timeout is not None else compute_merge_timeout(video_duration)
            _log_stage(MergeStage.TRANSCODING, timeout=effective_timeout)
            await run_ffmpeg_command(cmd, timeout=effective_timeout)

            content = workspace.read_output()
            if content is None or len(content) < MIN_OUTPUT_SIZE_BYTES:
                raise MergeError(f"Merged output not created: {workspace.output_path.name}")

    except PipelineError as e:
        diagnostics = getattr(e, "diagnostics", "")
        _log_stage(
            MergeStage.FAILED,
            error=e.message,
            error_code=e.code,
            diagnostics=diagnostics[-2000:]
        )
        raise
    except OSError as e:
        _log_stage(MergeStage.FAILED, error=str(e))
        raise MergeError(f"Failed to merge: {e}") from e

    _log_stage(
        MergeStage.SUCCEEDED,
        size_bytes=len(content),
        merge_time=round(time.time() - start_time, 3)
    )
    return MergeResult(
        content=content,
        tempo_ratio=ratio,
        atempo_chain=chain,
        filter_expression=filter_expression
    )
