"""
Video ingestion orchestrator

validate -> stage -> probe -> optimize -> name -> store -> record
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional, Sequence

from config.settings import (
    ALLOWED_VIDEO_TYPES,
    MAX_VIDEO_UPLOAD_BYTES,
    UPLOAD_CHUNK_SIZE
)
from media.aspect_classifier import AspectClassifier
from media.ffmpeg_processor import StreamOptimizer
from orchestration.graph_builder import build_ingestion_graph
from orchestration.nodes import IngestionDependencies
from orchestration.state_schema import IngestionStage, create_initial_state
from storage.key_namer import extension_for
from storage.object_store import ObjectStore
from utils.database import Database
from utils.errors import (
    AuthorizationError,
    NotFoundError,
    UploadTooLargeError,
    ValidationError
)
from utils.file_manager import ScratchFileManager
from utils.logger import setup_logger

logger = setup_logger("ingestion")


def parse_media_type(content_type: Optional[str]) -> str:
    """'Video/MP4; codecs=avc1' -> 'video/mp4'"""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if not media_type or "/" not in media_type:
        raise ValidationError("Unable to parse media type from request")
    return media_type


@dataclass
class UploadRequest:
    """One inbound upload; lives only for the duration of ingest()"""
    stream: BinaryIO
    content_type: Optional[str]
    video_id: str
    user_id: str
    size: Optional[int] = None
    filename: Optional[str] = None


def authorize_owner(db: Database, video_id: str, user_id: str) -> Dict[str, Any]:
    """
    Load a video record and check the caller owns it

    Raises:
        NotFoundError: no such video
        AuthorizationError: caller is not the owner of record
    """
    record = db.get_video(str(video_id))
    if record is None:
        raise NotFoundError(video_id=str(video_id))
    if str(record['user_id']) != str(user_id):
        raise AuthorizationError(video_id=str(video_id))
    return record


class IngestionOrchestrator:
    """Runs the ingestion pipeline for one upload at a time per call"""

    def __init__(
        self,
        db: Database,
        store: ObjectStore,
        classifier: Optional[AspectClassifier] = None,
        optimizer: Optional[StreamOptimizer] = None,
        *,
        max_upload_bytes: int = MAX_VIDEO_UPLOAD_BYTES,
        allowed_types: Sequence[str] = ALLOWED_VIDEO_TYPES,
        scratch_dir: Optional[Path] = None,
        chunk_size: int = UPLOAD_CHUNK_SIZE
    ):
        self.db = db
        self.store = store
        self.max_upload_bytes = max_upload_bytes
        self.allowed_types = tuple(allowed_types)
        self.scratch_dir = scratch_dir

        # Compiled once; each invoke() gets its own state
        self.graph = build_ingestion_graph(IngestionDependencies(
            classifier=classifier or AspectClassifier(),
            optimizer=optimizer or StreamOptimizer(),
            store=store,
            db=db,
            chunk_size=chunk_size
        ))

    def validate(self, request: UploadRequest) -> str:
        """
        Check media type and declared size

        Returns:
            Normalized media type

        Raises:
            ValidationError: unsupported media type
            UploadTooLargeError: declared size over the limit
        """
        media_type = parse_media_type(request.content_type)
        if media_type not in self.allowed_types:
            raise ValidationError(
                f"Invalid media type {media_type}, expected {', '.join(self.allowed_types)}",
                video_id=str(request.video_id)
            )

        if request.size is not None and request.size > self.max_upload_bytes:
            raise UploadTooLargeError(
                f"Upload of {request.size} bytes exceeds limit of {self.max_upload_bytes}",
                video_id=str(request.video_id)
            )
        return media_type

    def ingest(self, request: UploadRequest) -> Dict[str, Any]:
        """
        Ingest one upload

        Args:
            request: Upload body and identity

        Returns:
            Updated video record (``video_key`` holds the storage key)

        Raises:
            IngestError subclasses; scratch files are removed in every case
        """
        video_id = str(request.video_id)

        # Checked before any scratch file exists
        record = authorize_owner(self.db, video_id, request.user_id)
        media_type = self.validate(request)
        extension = extension_for(media_type)

        logger.info(f"Uploading video {video_id} by user {request.user_id}")
        start_time = datetime.now(timezone.utc)

        with ScratchFileManager(video_id, extension, base_dir=self.scratch_dir) as scratch:
            initial_state = create_initial_state(
                video_id=video_id,
                user_id=str(request.user_id),
                media_type=media_type,
                extension=extension,
                stream=request.stream,
                max_bytes=self.max_upload_bytes,
                raw_path=scratch.raw_path,
                optimized_path=scratch.optimized_path,
                record=record
            )
            final_state = self.graph.invoke(initial_state)

        self._log_attempt(final_state, start_time)

        error = final_state.get('error')
        if error is not None:
            raise error

        return final_state['record']

    def _log_attempt(self, state: Dict[str, Any], start_time: datetime) -> None:
        failed = state.get('stage') == IngestionStage.FAILED
        last_stage = state.get('failed_stage') if failed else state.get('stage')
        error = state.get('error')

        self.db.log_attempt(
            state['video_id'],
            status="failed" if failed else "done",
            last_stage=last_stage.value if last_stage else None,
            start_time=start_time,
            end_time=datetime.now(timezone.utc),
            storage_key=state.get('storage_key'),
            error_message=f"{type(error).__name__}: {error}" if error else None
        )
