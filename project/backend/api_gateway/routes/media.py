"""
Stored media endpoint.

Serves the unmerged video and audio kept after a failed merge.
"""

import re
import urllib.parse

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from shared.errors import NotFoundError
from shared.media_store import MediaStore
from shared.models.media import MediaKind
from api_gateway.dependencies import get_media_store

router = APIRouter()


def content_disposition(filename: str, disposition: str = "inline") -> str:
    """Header value with an ASCII fallback name and the RFC 5987 UTF-8 name."""
    # Headers are encoded as latin-1, so the plain filename must stay ASCII
    safe_ascii = re.sub(r"[^0-9A-Za-z._-]", "_", filename) or "download"
    quoted_utf8 = urllib.parse.quote(filename)
    return f'{disposition}; filename="{safe_ascii}"; filename*=UTF-8\'\'{quoted_utf8}'


@router.get("/media/{kind}/{key}", name="get_media")
async def get_media(
    kind: MediaKind,
    key: str,
    media_store: MediaStore = Depends(get_media_store)
):
    media = await media_store.get(kind, key)
    if media is None:
        raise NotFoundError(f"No {kind.value} stored under {key}")

    headers = {"Cache-Control": "no-store"}
    if media.filename:
        headers["Content-Disposition"] = content_disposition(media.filename)
    return Response(content=media.data, media_type=media.content_type, headers=headers)
