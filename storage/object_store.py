"""
Object storage gateway

Two backends share one contract:

- ``S3ObjectStore``: private bucket, short-lived SigV4 presigned GET URLs
- ``LocalObjectStore``: files under a directory, tokens signed with a shared
  secret and served by ``GET /api/v1/assets/{key}``

Signing is local computation only. It never checks that the object exists.
"""

import os
import re
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, BinaryIO, Dict, Optional
from urllib.parse import quote

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from jose import JWTError, jwt

from config import settings
from utils.errors import StorageError, StorageWriteError
from utils.logger import setup_logger

logger = setup_logger("object_store")

_KEY_ALLOWED_RE = re.compile(r"[A-Za-z0-9._\-/]+")


def normalize_key(key: str) -> str:
    """Reject keys that could escape the bucket/root or confuse URL tooling"""
    k = str(key or "").strip()
    if not k or k.startswith("/") or ".." in k or "//" in k:
        raise StorageError(f"Invalid storage key: {key!r}")
    if not _KEY_ALLOWED_RE.fullmatch(k):
        raise StorageError(f"Invalid storage key: {key!r}")
    return k


class ObjectStore(ABC):
    """Durable storage for uploaded media"""

    @abstractmethod
    def put(self, key: str, content_type: str, body: BinaryIO) -> None:
        """Write ``body`` under ``key``; raises StorageWriteError on failure"""

    @abstractmethod
    def sign(self, key: str, ttl_seconds: int = settings.SIGNED_URL_TTL_SECONDS) -> str:
        """Return a URL granting anonymous GET access until the TTL expires"""


class S3ObjectStore(ObjectStore):
    """Amazon S3 (or S3-compatible) backend"""

    def __init__(
        self,
        bucket: Optional[str] = None,
        *,
        region_name: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        client: Any = None,
    ):
        self.bucket = bucket or settings.S3_BUCKET
        if not self.bucket:
            raise StorageError("S3_BUCKET not configured")

        if client is None:
            client_kwargs: Dict[str, Any] = {
                "config": BotoConfig(
                    signature_version="s3v4",
                    retries={"max_attempts": 5, "mode": "standard"},
                    connect_timeout=3,
                    read_timeout=60,
                ),
                "region_name": region_name or settings.S3_REGION,
            }
            endpoint = endpoint_url or settings.S3_ENDPOINT_URL
            if endpoint:
                client_kwargs["endpoint_url"] = endpoint
            client = boto3.client("s3", **client_kwargs)

        self.client = client

    def put(self, key: str, content_type: str, body: BinaryIO) -> None:
        k = normalize_key(key)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=k,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"S3 put failed for {k}: {e}")
            raise StorageWriteError(f"Unable to upload {k} to bucket {self.bucket}") from e

        logger.info(f"Stored s3://{self.bucket}/{k}")

    def sign(self, key: str, ttl_seconds: int = settings.SIGNED_URL_TTL_SECONDS) -> str:
        k = normalize_key(key)
        try:
            return self.client.generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": k},
                ExpiresIn=int(ttl_seconds),
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to create presigned GET: {e}") from e


class LocalObjectStore(ObjectStore):
    """Filesystem backend for development and tests"""

    ALGORITHM = "HS256"

    def __init__(
        self,
        root: Optional[Path] = None,
        *,
        signing_secret: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self.root = Path(root or settings.ASSETS_DIR)
        self.root.mkdir(parents=True, exist_ok=True)
        self.signing_secret = signing_secret or settings.ASSET_SIGNING_SECRET
        self.base_url = (base_url or settings.PUBLIC_BASE_URL).rstrip("/")

    def path_for(self, key: str) -> Path:
        return self.root / normalize_key(key)

    def put(self, key: str, content_type: str, body: BinaryIO) -> None:
        destination = self.path_for(key)
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file, then rename so readers never see a partial object
            fd, tmp_name = tempfile.mkstemp(dir=destination.parent, prefix=".upload-")
            try:
                with os.fdopen(fd, "wb") as out:
                    while True:
                        chunk = body.read(settings.UPLOAD_CHUNK_SIZE)
                        if not chunk:
                            break
                        out.write(chunk)
                os.replace(tmp_name, destination)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Local put failed for {key}: {e}")
            raise StorageWriteError(f"Unable to store {key}") from e

        logger.info(f"Stored {destination} ({content_type})")

    def sign(self, key: str, ttl_seconds: int = settings.SIGNED_URL_TTL_SECONDS) -> str:
        k = normalize_key(key)
        payload = {"key": k, "exp": int(time.time()) + int(ttl_seconds)}
        token = jwt.encode(payload, self.signing_secret, algorithm=self.ALGORITHM)
        return f"{self.base_url}/api/v1/assets/{quote(k)}?token={token}"

    def verify(self, key: str, token: str) -> bool:
        """True if ``token`` was minted by sign() for ``key`` and has not expired"""
        try:
            payload = jwt.decode(token, self.signing_secret, algorithms=[self.ALGORITHM])
        except JWTError:
            return False
        return payload.get("key") == key


def build_object_store(backend: Optional[str] = None) -> ObjectStore:
    """Create the configured storage backend"""
    backend = (backend or settings.STORAGE_BACKEND).lower()
    if backend == "s3":
        return S3ObjectStore()
    if backend == "local":
        return LocalObjectStore()
    raise ValueError(f"Unknown storage backend: {backend}")
