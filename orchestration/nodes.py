from dataclasses import dataclass
from typing import Dict, Any

from config.settings import UPLOAD_CHUNK_SIZE
from media.aspect_classifier import AspectClassifier, Orientation
from media.ffmpeg_processor import StreamOptimizer
from orchestration.state_schema import (
    IngestionStage,
    IngestionState,
    failure_result,
    stage_result
)
from storage.key_namer import generate_storage_key
from storage.object_store import ObjectStore
from utils.database import Database
from utils.errors import (
    ConsistencyWarning,
    IngestError,
    StagingError,
    UploadTooLargeError,
    ValidationError
)
from utils.logger import PipelineLogger


@dataclass
class IngestionDependencies:
    classifier: AspectClassifier
    optimizer: StreamOptimizer
    store: ObjectStore
    db: Database
    chunk_size: int = UPLOAD_CHUNK_SIZE


class IngestionNodes:
    """
    Graph nodes for one ingestion pipeline

    Each node returns a partial state update. A classified failure is
    recorded in ``error`` and routes the graph to the failed node; anything
    unclassified propagates out of the graph.
    """

    def __init__(self, deps: IngestionDependencies):
        self.deps = deps

    def stage_upload(self, state: IngestionState) -> Dict[str, Any]:
        """Node: copy the upload body into the scratch raw file"""
        log = PipelineLogger("stage", state['video_id'])
        log.start("Staging upload")

        try:
            written = 0
            max_bytes = state['max_bytes']
            stream = state['stream']

            with open(state['raw_path'], 'wb') as out:
                while True:
                    chunk = stream.read(self.deps.chunk_size)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > max_bytes:
                        raise UploadTooLargeError(
                            f"Upload exceeds {max_bytes} bytes", video_id=state['video_id']
                        )
                    out.write(chunk)

            if written == 0:
                raise ValidationError("Uploaded video is empty", video_id=state['video_id'])

        except IngestError as e:
            log.error(f"Staging rejected: {e}")
            return failure_result(IngestionStage.STAGED, e)
        except OSError as e:
            log.error(f"Staging failed: {e}", exc_info=True)
            return failure_result(
                IngestionStage.STAGED,
                StagingError(video_id=state['video_id'])
            )

        log.success(f"Staged {written:,} bytes")
        return stage_result(state, IngestionStage.STAGED, bytes_staged=written)

    def probe_aspect(self, state: IngestionState) -> Dict[str, Any]:
        """Node: classify orientation; unmatched ratios degrade to OTHER"""
        log = PipelineLogger("probe", state['video_id'])
        log.start("Probing aspect ratio")

        try:
            aspect_ratio = self.deps.classifier.aspect_ratio(state['raw_path'])
        except IngestError as e:
            log.error(f"Probe failed: {e}")
            e.video_id = e.video_id or state['video_id']
            return failure_result(IngestionStage.PROBED, e)

        orientation = Orientation.from_aspect_ratio(aspect_ratio)

        log.success(f"Aspect ratio {aspect_ratio} -> {orientation.value}")
        return stage_result(
            state, IngestionStage.PROBED,
            aspect_ratio=aspect_ratio,
            orientation=orientation
        )

    def optimize_stream(self, state: IngestionState) -> Dict[str, Any]:
        """Node: fast start remux; failure is fatal, never falls back to the raw file"""
        log = PipelineLogger("optimize", state['video_id'])
        log.start("Remuxing for fast start")

        try:
            self.deps.optimizer.optimize(state['raw_path'], state['optimized_path'])
        except IngestError as e:
            log.error(f"Remux failed: {e}")
            e.video_id = e.video_id or state['video_id']
            return failure_result(IngestionStage.OPTIMIZED, e)

        log.success("Fast start file ready")
        return stage_result(state, IngestionStage.OPTIMIZED)

    def assign_key(self, state: IngestionState) -> Dict[str, Any]:
        """Node: derive the storage key"""
        key = generate_storage_key(state['orientation'], state['extension'])
        PipelineLogger("name", state['video_id']).info(f"Assigned key {key}")
        return stage_result(state, IngestionStage.NAMED, storage_key=str(key))

    def store_object(self, state: IngestionState) -> Dict[str, Any]:
        """Node: upload the optimized file to the object store"""
        log = PipelineLogger("store", state['video_id'])
        log.start(f"Uploading {state['storage_key']}")

        try:
            with open(state['optimized_path'], 'rb') as body:
                self.deps.store.put(state['storage_key'], state['media_type'], body)
        except IngestError as e:
            log.error(f"Upload failed: {e}")
            e.video_id = e.video_id or state['video_id']
            return failure_result(IngestionStage.STORED, e)
        except OSError as e:
            log.error(f"Could not read optimized file: {e}", exc_info=True)
            return failure_result(
                IngestionStage.STORED,
                StagingError("Unable to open fast start output video", video_id=state['video_id'])
            )

        log.success("Object stored")
        return stage_result(state, IngestionStage.STORED)

    def record_metadata(self, state: IngestionState) -> Dict[str, Any]:
        """Node: point the metadata record at the stored object"""
        log = PipelineLogger("record", state['video_id'])

        record = dict(state['record'])
        record['video_key'] = state['storage_key']

        if not self.deps.db.update_video(record):
            # The object is stored but unreferenced; no compensating delete
            log.error(f"Metadata update failed, orphaned object at {state['storage_key']}")
            return failure_result(
                IngestionStage.RECORDED,
                ConsistencyWarning(
                    video_id=state['video_id'],
                    orphan_key=state['storage_key']
                )
            )

        log.info("Metadata updated")
        return stage_result(state, IngestionStage.RECORDED, record=record)

    def complete(self, state: IngestionState) -> Dict[str, Any]:
        PipelineLogger("done", state['video_id']).success(
            f"Ingested as {state['storage_key']} ({state.get('bytes_staged', 0):,} bytes staged)"
        )
        return stage_result(state, IngestionStage.DONE)

    def failed(self, state: IngestionState) -> Dict[str, Any]:
        failed_stage = state.get('failed_stage')
        error = state.get('error')
        PipelineLogger("failed", state['video_id']).error(
            f"Pipeline failed at {failed_stage.value if failed_stage else 'unknown'}: "
            f"{type(error).__name__}: {error}"
        )
        return {"stage": IngestionStage.FAILED}
