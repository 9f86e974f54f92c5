"""
FastAPI Backend for Tubely video ingestion
"""

from api.main import app, create_app
from api.models import (
    VideoCreate,
    VideoResponse,
    VideoList,
    ErrorResponse
)

__all__ = [
    'app',
    'create_app',
    'VideoCreate',
    'VideoResponse',
    'VideoList',
    'ErrorResponse'
]

__version__ = "1.0.0"
