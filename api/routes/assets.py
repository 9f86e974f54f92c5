"""
Signed asset retrieval for the local storage backend
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from api.dependencies import get_container
from api.services.container import ServiceContainer
from storage.object_store import LocalObjectStore
from utils.errors import AuthorizationError, NotFoundError

router = APIRouter()


@router.get("/{key:path}")
async def get_asset(
    key: str,
    token: Optional[str] = None,
    container: ServiceContainer = Depends(get_container)
):
    """
    Serve a stored object to anyone holding a valid signed URL

    No bearer token here; the signature is the credential.
    """
    store = container.store
    if not isinstance(store, LocalObjectStore):
        raise NotFoundError("Assets are served by the object store")

    if not token or not store.verify(key, token):
        raise AuthorizationError("Invalid or expired asset signature")

    path = store.path_for(key)
    if not path.is_file():
        raise NotFoundError("Asset not found")

    return FileResponse(path=path)
