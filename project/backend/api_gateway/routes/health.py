"""
Health endpoint.
"""

from fastapi import APIRouter

from modules.merger.utils import check_ffmpeg_available
from shared.config import settings

router = APIRouter()


@router.get("/health")
async def health_check():
    ffmpeg_available = check_ffmpeg_available()
    return {
        "status": "healthy" if ffmpeg_available else "degraded",
        "ffmpeg": ffmpeg_available,
        "environment": settings.environment,
    }
