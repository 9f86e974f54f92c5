# utils/__init__.py
"""
Utility functions and helpers
"""

from utils.logger import setup_logger, PipelineLogger
from utils.file_manager import ScratchFileManager
from utils.database import Database

__all__ = [
    'setup_logger',
    'PipelineLogger',
    'ScratchFileManager',
    'Database'
]
