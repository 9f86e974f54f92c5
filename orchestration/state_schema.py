from enum import Enum
from pathlib import Path
from typing import TypedDict, List, Dict, Optional, Any


class IngestionStage(str, Enum):
    """Linear upload lifecycle; FAILED is reachable from every stage and absorbing"""
    RECEIVED = "received"
    STAGED = "staged"
    PROBED = "probed"
    OPTIMIZED = "optimized"
    NAMED = "named"
    STORED = "stored"
    RECORDED = "recorded"
    DONE = "done"
    FAILED = "failed"


class IngestionState(TypedDict, total=False):
    """
    State passed between the nodes of the ingestion graph

    Holds one upload only; never shared between requests.
    """

    # Request
    video_id: str
    user_id: str
    media_type: str
    extension: str
    stream: Any                 # readable binary stream of the upload body
    max_bytes: int

    # Scratch files (owned and deleted by the orchestrator)
    raw_path: Path
    optimized_path: Path

    # Pipeline outputs
    bytes_staged: int
    aspect_ratio: Optional[str]
    orientation: Optional[Any]  # media.aspect_classifier.Orientation
    storage_key: Optional[str]
    record: Dict[str, Any]

    # Tracking
    stage: IngestionStage
    failed_stage: Optional[IngestionStage]
    error: Optional[Exception]
    completed_stages: List[str]


def create_initial_state(video_id: str, user_id: str, media_type: str, extension: str,
                         stream: Any, max_bytes: int, raw_path: Path,
                         optimized_path: Path, record: Dict[str, Any]) -> IngestionState:
    """
    Create the RECEIVED state for one upload

    Args:
        video_id: Target video record
        user_id: Authenticated owner
        media_type: Normalized media type (e.g. video/mp4)
        extension: File extension for the storage key
        stream: Upload body
        max_bytes: Size limit enforced while staging
        raw_path: Scratch path for the staged upload
        optimized_path: Scratch path for the fast start copy
        record: Current metadata record

    Returns:
        Initial state dictionary
    """
    return IngestionState(
        video_id=str(video_id),
        user_id=str(user_id),
        media_type=media_type,
        extension=extension,
        stream=stream,
        max_bytes=max_bytes,
        raw_path=raw_path,
        optimized_path=optimized_path,
        bytes_staged=0,
        aspect_ratio=None,
        orientation=None,
        storage_key=None,
        record=dict(record),
        stage=IngestionStage.RECEIVED,
        failed_stage=None,
        error=None,
        completed_stages=[]
    )


def stage_result(state: IngestionState, stage: IngestionStage, **outputs) -> Dict[str, Any]:
    """Partial state update marking ``stage`` as reached"""
    update = dict(outputs)
    update["stage"] = stage
    update["completed_stages"] = list(state.get("completed_stages", [])) + [stage.value]
    return update


def failure_result(stage: IngestionStage, error: Exception) -> Dict[str, Any]:
    """Partial state update recording which stage failed and why"""
    return {"failed_stage": stage, "error": error}
