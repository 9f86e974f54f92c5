# storage/__init__.py
"""
Storage key naming and object store backends
"""

from storage.key_namer import StorageKey, extension_for, generate_identifier, generate_storage_key
from storage.object_store import (
    LocalObjectStore,
    ObjectStore,
    S3ObjectStore,
    build_object_store,
    normalize_key
)

__all__ = [
    'StorageKey',
    'extension_for',
    'generate_identifier',
    'generate_storage_key',
    'LocalObjectStore',
    'ObjectStore',
    'S3ObjectStore',
    'build_object_store',
    'normalize_key'
]
