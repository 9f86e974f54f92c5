"""
Service composition for the API

Built once in the lifespan handler and hung on ``app.state.container``.
Tests build their own with fakes and pass it to ``create_app``.
"""

from dataclasses import dataclass
from typing import Optional

from config.settings import JWT_SECRET
from media.aspect_classifier import AspectClassifier
from media.ffmpeg_processor import StreamOptimizer
from orchestration.ingestion import IngestionOrchestrator
from storage.object_store import ObjectStore, build_object_store
from api.services.video_service import VideoService
from utils.database import Database


@dataclass
class ServiceContainer:
    db: Database
    store: ObjectStore
    orchestrator: IngestionOrchestrator
    video_service: VideoService
    jwt_secret: str = JWT_SECRET


def build_container(
    db: Optional[Database] = None,
    store: Optional[ObjectStore] = None,
    classifier: Optional[AspectClassifier] = None,
    optimizer: Optional[StreamOptimizer] = None,
    jwt_secret: str = JWT_SECRET,
    **orchestrator_options
) -> ServiceContainer:
    """Wire the services together, defaulting each to its configured implementation"""
    db = db or Database()
    store = store or build_object_store()
    orchestrator = IngestionOrchestrator(
        db, store, classifier, optimizer, **orchestrator_options
    )
    return ServiceContainer(
        db=db,
        store=store,
        orchestrator=orchestrator,
        video_service=VideoService(db, store, orchestrator),
        jwt_secret=jwt_secret
    )
