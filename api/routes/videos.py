"""
Video metadata API routes
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from api.dependencies import get_container, get_current_user_id
from api.models import VideoCreate, VideoList, VideoResponse
from api.services.container import ServiceContainer

router = APIRouter()


@router.post("", response_model=VideoResponse, status_code=status.HTTP_201_CREATED)
async def create_video(
    body: VideoCreate,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container)
):
    """Create a draft video; media is attached later via the upload routes"""
    return container.video_service.create_video(user_id, body.title, body.description)


@router.get("", response_model=VideoList)
async def list_videos(
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container)
):
    videos = container.video_service.list_videos(user_id)
    return VideoList(videos=videos, total=len(videos))


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(
    video_id: UUID,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container)
):
    return container.video_service.get_video(str(video_id), user_id)


@router.delete("/{video_id}")
async def delete_video(
    video_id: UUID,
    user_id: str = Depends(get_current_user_id),
    container: ServiceContainer = Depends(get_container)
):
    """
    Delete video metadata

    Stored objects are left in place.
    """
    container.video_service.delete_video(str(video_id), user_id)
    return {"message": "Video deleted successfully", "video_id": str(video_id)}
