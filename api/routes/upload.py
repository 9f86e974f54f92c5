"""
Upload API routes
"""

from typing import AsyncGenerator
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from api.dependencies import get_container, get_current_user_id
from api.models import VideoResponse
from api.services.container import ServiceContainer
from orchestration.ingestion import UploadRequest, authorize_owner
from utils.errors import UploadTooLargeError, ValidationError

router = APIRouter()

# Allowance for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD_BYTES = 64 * 1024


class BoundedRequest(Request):
    """
    Request whose body stream stops once ``max_bytes`` have been received

    Covers bodies with no usable Content-Length (chunked transfer), so the
    multipart parser never spools more than the limit to disk.
    """

    def __init__(self, request: Request, max_bytes: int, video_id: str):
        super().__init__(request.scope, request.receive)
        self.max_bytes = max_bytes
        self.video_id = video_id

    async def stream(self) -> AsyncGenerator[bytes, None]:
        received = 0
        async for chunk in super().stream():
            received += len(chunk)
            if received > self.max_bytes:
                raise UploadTooLargeError(
                    f"Request body exceeds {self.max_bytes} bytes",
                    video_id=self.video_id
                )
            yield chunk


def check_content_length(request: Request, limit: int, video_id: str) -> None:
    """Reject an oversized request from its header, before any body is read"""
    declared = request.headers.get("content-length")
    if declared is None:
        return
    try:
        length = int(declared)
    except ValueError:
        raise ValidationError("Invalid Content-Length header", video_id=video_id)
    if length > limit + MULTIPART_OVERHEAD_BYTES:
        raise UploadTooLargeError(
            f"Request of {length} bytes exceeds limit of {limit}",
            video_id=video_id
        )


async def read_form_file(request: Request, field: str, video_id: str, limit: int) -> UploadFile:
    """Parse the multipart body, reading at most ``limit`` plus multipart overhead"""
    bounded = BoundedRequest(request, limit + MULTIPART_OVERHEAD_BYTES, video_id)
    form = await bounded.form()
    upload = form.get(field)
    if not isinstance(upload, UploadFile):
        await form.close()
        raise ValidationError(f"Unable to parse form file '{field}'", video_id=video_id)
    return upload


@router.post("/video_upload/{video_id}", response_model=VideoResponse)
async def upload_video(
    video_id: UUID,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container)
):
    """
    Upload the media for an existing video

    Multipart form with a single ``video`` part of type video/mp4. The file
    is remuxed for fast start, stored under an orientation prefix, and the
    record is returned with freshly signed URLs.
    """
    vid = str(video_id)
    orchestrator = container.orchestrator

    # Ownership and declared size are checked before the body is read
    authorize_owner(container.db, vid, user_id)
    check_content_length(request, orchestrator.max_upload_bytes, vid)

    video = await read_form_file(request, "video", vid, orchestrator.max_upload_bytes)
    try:
        return await container.video_service.upload_video(UploadRequest(
            stream=video.file,
            content_type=video.content_type,
            video_id=vid,
            user_id=user_id,
            size=video.size,
            filename=video.filename
        ))
    finally:
        await video.close()


@router.post("/thumbnail_upload/{video_id}", response_model=VideoResponse)
async def upload_thumbnail(
    video_id: UUID,
    request: Request,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container)
):
    """Upload a JPEG or PNG thumbnail (multipart ``thumbnail`` part)"""
    vid = str(video_id)
    service = container.video_service

    authorize_owner(container.db, vid, user_id)
    check_content_length(request, service.max_thumbnail_bytes, vid)

    thumbnail = await read_form_file(request, "thumbnail", vid, service.max_thumbnail_bytes)
    try:
        # One byte past the limit is enough to know it is too large
        data = await thumbnail.read(service.max_thumbnail_bytes + 1)
        return service.upload_thumbnail(vid, user_id, thumbnail.content_type, data)
    finally:
        await thumbnail.close()
