# orchestration/__init__.py
"""
LangGraph orchestration for video ingestion
"""

from orchestration.state_schema import IngestionStage, IngestionState, create_initial_state
from orchestration.graph_builder import build_ingestion_graph
from orchestration.ingestion import (
    IngestionOrchestrator,
    UploadRequest,
    authorize_owner,
    parse_media_type
)

__all__ = [
    'IngestionStage',
    'IngestionState',
    'create_initial_state',
    'build_ingestion_graph',
    'IngestionOrchestrator',
    'UploadRequest',
    'authorize_owner',
    'parse_media_type'
]
