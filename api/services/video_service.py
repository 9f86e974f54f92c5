"""
Video service: metadata CRUD, uploads and read-time URL signing
"""

import asyncio
import io
from typing import Any, Dict, List, Optional

from config.settings import (
    ALLOWED_THUMBNAIL_TYPES,
    MAX_THUMBNAIL_UPLOAD_BYTES,
    SIGNED_URL_TTL_SECONDS
)
from orchestration.ingestion import (
    IngestionOrchestrator,
    UploadRequest,
    authorize_owner,
    parse_media_type
)
from storage.key_namer import extension_for, generate_identifier
from storage.object_store import ObjectStore
from utils.database import Database
from utils.errors import (
    ConsistencyWarning,
    IngestError,
    UploadTooLargeError,
    ValidationError
)
from utils.logger import setup_logger

logger = setup_logger("video_service")


class VideoService:
    """Service layer between the routes and the database/object store"""

    def __init__(
        self,
        db: Database,
        store: ObjectStore,
        orchestrator: IngestionOrchestrator,
        signed_url_ttl: int = SIGNED_URL_TTL_SECONDS,
        max_thumbnail_bytes: int = MAX_THUMBNAIL_UPLOAD_BYTES
    ):
        self.db = db
        self.store = store
        self.orchestrator = orchestrator
        self.signed_url_ttl = signed_url_ttl
        self.max_thumbnail_bytes = max_thumbnail_bytes

    def to_response(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Turn a stored record into a response body

        Only keys are persisted; URLs are signed here, on every read.
        """
        thumbnail_key = record.get('thumbnail_key')
        video_key = record.get('video_key')
        return {
            'id': record['id'],
            'user_id': record['user_id'],
            'title': record['title'],
            'description': record.get('description'),
            'thumbnail_url': self.store.sign(thumbnail_key, self.signed_url_ttl) if thumbnail_key else None,
            'video_url': self.store.sign(video_key, self.signed_url_ttl) if video_key else None,
            'created_at': record['created_at'],
            'updated_at': record['updated_at']
        }

    def create_video(self, user_id: str, title: str,
                     description: Optional[str] = None) -> Dict[str, Any]:
        record = self.db.create_video(user_id, title, description)
        if record is None:
            raise IngestError("Couldn't create video")
        return self.to_response(record)

    def list_videos(self, user_id: str) -> List[Dict[str, Any]]:
        return [self.to_response(r) for r in self.db.list_videos(user_id)]

    def get_video(self, video_id: str, user_id: str) -> Dict[str, Any]:
        return self.to_response(authorize_owner(self.db, video_id, user_id))

    def delete_video(self, video_id: str, user_id: str) -> None:
        authorize_owner(self.db, video_id, user_id)
        if not self.db.delete_video(video_id):
            raise IngestError("Couldn't delete video", video_id=str(video_id))

    async def upload_video(self, request: UploadRequest) -> Dict[str, Any]:
        """Run the synchronous ingestion pipeline off the event loop"""
        loop = asyncio.get_running_loop()
        record = await loop.run_in_executor(None, self.orchestrator.ingest, request)
        return self.to_response(record)

    def upload_thumbnail(self, video_id: str, user_id: str,
                         content_type: Optional[str], data: bytes) -> Dict[str, Any]:
        """
        Store a thumbnail image and point the record at it

        Thumbnails are small enough to hold in memory, so no scratch file
        and no remux step.
        """
        record = authorize_owner(self.db, video_id, user_id)

        media_type = parse_media_type(content_type)
        if media_type not in ALLOWED_THUMBNAIL_TYPES:
            raise ValidationError(
                f"Invalid media type {media_type}, expected {', '.join(ALLOWED_THUMBNAIL_TYPES)}",
                video_id=str(video_id)
            )
        if len(data) > self.max_thumbnail_bytes:
            raise UploadTooLargeError(
                f"Thumbnail of {len(data)} bytes exceeds limit of {self.max_thumbnail_bytes}",
                video_id=str(video_id)
            )
        if not data:
            raise ValidationError("Thumbnail is empty", video_id=str(video_id))

        key = f"thumbnails/{generate_identifier()}.{extension_for(media_type)}"
        self.store.put(key, media_type, io.BytesIO(data))

        record['thumbnail_key'] = key
        if not self.db.update_video(record):
            raise ConsistencyWarning(
                "Thumbnail stored but metadata update failed",
                video_id=str(video_id),
                orphan_key=key
            )

        logger.info(f"Thumbnail for video {video_id} stored at {key}")
        return self.to_response(self.db.get_video(video_id) or record)
