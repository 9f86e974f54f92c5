"""
Settings API routes
"""

from fastapi import APIRouter
from config import settings

router = APIRouter()


@router.get("")
async def get_settings():
    """Get current settings (non-sensitive only)"""
    return {
        "uploads": {
            "max_video_bytes": settings.MAX_VIDEO_UPLOAD_BYTES,
            "max_thumbnail_bytes": settings.MAX_THUMBNAIL_UPLOAD_BYTES,
            "video_types": list(settings.ALLOWED_VIDEO_TYPES),
            "thumbnail_types": list(settings.ALLOWED_THUMBNAIL_TYPES)
        },
        "storage": {
            "backend": settings.STORAGE_BACKEND,
            "signed_url_ttl_seconds": settings.SIGNED_URL_TTL_SECONDS
        },
        "media": {
            "aspect_ratio_tolerance": settings.ASPECT_RATIO_TOLERANCE,
            "probe_timeout_seconds": settings.PROBE_TIMEOUT_SECONDS,
            "remux_timeout_seconds": settings.REMUX_TIMEOUT_SECONDS
        }
    }
