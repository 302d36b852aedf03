"""
Merge endpoint.

Muxes an uploaded video with its narration audio. When merging fails, the
unmerged inputs are kept in the media store and returned as a fallback.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from modules.merger import merge
from shared.errors import MergeError, ValidationError
from shared.logging import get_logger
from shared.media_store import MediaStore
from shared.models.media import MediaKind, StoredMedia
from shared.models.merge import MergeRequest
from shared.validation import parse_duration
from api_gateway.dependencies import get_media_store

logger = get_logger(__name__)

router = APIRouter()

OUTPUT_FILENAME = "output-with-voiceover.mp4"
FALLBACK_GUIDANCE = (
    "Automatic merging failed. Play the video and the narration audio together, "
    "or combine them in a video editor."
)


async def _store_fallback(
    request: Request,
    media_store: MediaStore,
    video: UploadFile,
    video_bytes: bytes,
    audio: UploadFile,
    audio_bytes: bytes
) -> dict:
    """Keep the unmerged inputs retrievable and describe where to get them."""
    key = uuid.uuid4().hex
    await media_store.put(StoredMedia(
        key=key,
        kind=MediaKind.VIDEO,
        data=video_bytes,
        filename=video.filename,
        content_type=video.content_type or "application/octet-stream"
    ))
    await media_store.put(StoredMedia(
        key=key,
        kind=MediaKind.AUDIO,
        data=audio_bytes,
        filename=audio.filename,
        content_type=audio.content_type or "application/octet-stream"
    ))
    return {
        "video_url": str(request.url_for("get_media", kind=MediaKind.VIDEO.value, key=key)),
        "audio_url": str(request.url_for("get_media", kind=MediaKind.AUDIO.value, key=key)),
        "guidance": FALLBACK_GUIDANCE,
    }


@router.post("/merge-av")
async def merge_av(
    request: Request,
    video: Optional[UploadFile] = File(None),
    audio: Optional[UploadFile] = File(None),
    video_duration: Optional[str] = Form(None, alias="videoDuration"),
    audio_duration: Optional[str] = Form(None, alias="audioDuration"),
    media_store: MediaStore = Depends(get_media_store)
):
    """
    Merge video with narration audio into one MP4.

    Args:
        video: Video file (stream-copied)
        audio: Narration audio (time-stretched to the video length)
        video_duration: Video duration in seconds, as reported by the client
        audio_duration: Audio duration in seconds, as reported by the client
        media_store: Store for the unmerged fallback

    Returns:
        MP4 attachment, or error JSON with a fallback object
    """
    if video is None or audio is None:
        raise ValidationError("Missing video or audio file")

    video_bytes = await video.read()
    audio_bytes = await audio.read()

    logger.info(
        "Merge requested",
        extra={
            "video_name": video.filename,
            "video_size": len(video_bytes),
            "audio_name": audio.filename,
            "audio_size": len(audio_bytes),
            "video_duration": video_duration,
            "audio_duration": audio_duration
        }
    )

    merge_request = MergeRequest(
        video_bytes=video_bytes,
        audio_bytes=audio_bytes,
        video_duration=parse_duration(video_duration),
        audio_duration=parse_duration(audio_duration),
        video_extension=video.filename or "",
        audio_extension=audio.filename or ""
    )

    try:
        result = await merge(merge_request)
    except MergeError as e:
        fallback = await _store_fallback(request, media_store, video, video_bytes, audio, audio_bytes)
        logger.warning(
            "Merge failed, serving unmerged inputs",
            extra={"error": e.message, "error_code": e.code, "fallback": fallback}
        )
        return JSONResponse(
            status_code=e.status_code,
            content={
                "error": f"Failed to merge: {e.message}",
                "code": e.code,
                "fallback": fallback,
            }
        )

    return Response(
        content=result.content,
        media_type="video/mp4",
        headers={
            "Content-Disposition": f'attachment; filename="{OUTPUT_FILENAME}"',
            "Cache-Control": "no-store",
        }
    )
