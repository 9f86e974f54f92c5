# tests/test_object_store.py

import io
from urllib.parse import parse_qs, unquote, urlparse

import boto3
import pytest
from botocore.config import Config as BotoConfig
from botocore.stub import ANY, Stubber
from jose import JWTError, jwt

from config import settings
from storage.object_store import (
    LocalObjectStore,
    S3ObjectStore,
    build_object_store,
    normalize_key
)
from utils.errors import StorageError, StorageWriteError
from tests.conftest import BASE_URL

KEY = "landscape/" + "A" * 43 + ".mp4"


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=BotoConfig(signature_version="s3v4")
    )


def _token(url):
    return parse_qs(urlparse(url).query)["token"][0]


# ─────────────────────────────────────────────────────────────
# Key validation
# ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("key", ["", "/abs.mp4", "a/../b.mp4", "a//b.mp4", "sp ace.mp4", "q?.mp4"])
def test_normalize_key_rejects_unsafe(key):
    with pytest.raises(StorageError):
        normalize_key(key)


def test_normalize_key_accepts_storage_keys():
    assert normalize_key(KEY) == KEY
    assert normalize_key("thumbnails/abc_-1.png") == "thumbnails/abc_-1.png"


# ─────────────────────────────────────────────────────────────
# Local backend
# ─────────────────────────────────────────────────────────────

def test_local_put_writes_object(store):
    store.put(KEY, "video/mp4", io.BytesIO(b"movie bytes"))

    assert store.path_for(KEY).read_bytes() == b"movie bytes"
    # No temp files left next to the object
    assert [p.name for p in store.path_for(KEY).parent.iterdir()] == [KEY.split("/")[1]]


def test_local_sign_points_at_assets_route(store):
    url = store.sign(KEY, 300)
    parsed = urlparse(url)

    assert url.startswith(f"{BASE_URL}/api/v1/assets/")
    assert unquote(parsed.path) == f"/api/v1/assets/{KEY}"
    assert store.verify(KEY, _token(url))


def test_two_signatures_are_both_valid(store):
    first = store.sign(KEY, 300)
    second = store.sign(KEY, 600)

    assert store.verify(KEY, _token(first))
    assert store.verify(KEY, _token(second))


def test_signing_does_not_require_the_object(store):
    assert not store.path_for(KEY).exists()
    assert store.verify(KEY, _token(store.sign(KEY, 60)))


def test_expired_signature_is_rejected(store):
    url = store.sign(KEY, -30)
    assert not store.verify(KEY, _token(url))


def test_signature_is_bound_to_key_and_secret(store, tmp_path):
    token = _token(store.sign(KEY, 300))
    other = LocalObjectStore(tmp_path / "other", signing_secret="another-secret", base_url=BASE_URL)

    assert not store.verify("portrait/" + "A" * 43 + ".mp4", token)
    assert not other.verify(KEY, token)
    header, payload, _ = token.split(".")
    assert not store.verify(KEY, f"{header}.{payload}.{'A' * 43}")


def test_default_asset_secret_differs_from_jwt_secret(tmp_path):
    assert settings.ASSET_SIGNING_SECRET != settings.JWT_SECRET

    default = LocalObjectStore(tmp_path / "assets", base_url=BASE_URL)
    token = _token(default.sign(KEY, 300))

    assert default.verify(KEY, token)
    # The signature does not verify under the bearer token secret
    with pytest.raises(JWTError):
        jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])


def test_local_put_failure_is_a_write_error(store):
    # A directory where the object should go makes the rename fail
    store.path_for(KEY).mkdir(parents=True)

    with pytest.raises(StorageWriteError):
        store.put(KEY, "video/mp4", io.BytesIO(b"movie bytes"))


# ─────────────────────────────────────────────────────────────
# S3 backend
# ─────────────────────────────────────────────────────────────

def test_s3_presigned_url(s3_client):
    store = S3ObjectStore("tubely-test", client=s3_client)

    url = store.sign(KEY, 300)
    query = parse_qs(urlparse(url).query)

    assert "tubely-test" in url
    assert KEY in unquote(url)
    assert query["X-Amz-Expires"] == ["300"]
    assert "X-Amz-Signature" in query


def test_s3_store_builds_a_sigv4_client(monkeypatch):
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)
    monkeypatch.delenv("AWS_PROFILE", raising=False)

    store = S3ObjectStore(
        "tubely-test",
        region_name="us-east-1",
        endpoint_url="https://s3.us-east-1.amazonaws.com"
    )
    query = parse_qs(urlparse(store.sign(KEY, 120)).query)

    assert query["X-Amz-Algorithm"] == ["AWS4-HMAC-SHA256"]
    assert query["X-Amz-Expires"] == ["120"]
    assert "X-Amz-Signature" in query


def test_s3_put_sends_content_type(s3_client):
    store = S3ObjectStore("tubely-test", client=s3_client)

    with Stubber(s3_client) as stub:
        stub.add_response(
            "put_object",
            {"ETag": '"abc123"'},
            {"Bucket": "tubely-test", "Key": KEY, "Body": ANY, "ContentType": "video/mp4"}
        )
        store.put(KEY, "video/mp4", io.BytesIO(b"movie bytes"))
        stub.assert_no_pending_responses()


def test_s3_put_failure_is_a_write_error(s3_client):
    store = S3ObjectStore("tubely-test", client=s3_client)

    with Stubber(s3_client) as stub:
        stub.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
        with pytest.raises(StorageWriteError) as exc_info:
            store.put(KEY, "video/mp4", io.BytesIO(b"movie bytes"))

    assert exc_info.value.status_code == 500


def test_s3_requires_bucket(monkeypatch, s3_client):
    monkeypatch.setattr(settings, "S3_BUCKET", None)
    with pytest.raises(StorageError):
        S3ObjectStore(client=s3_client)


# ─────────────────────────────────────────────────────────────
# Factory
# ─────────────────────────────────────────────────────────────

def test_build_local_store(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "ASSETS_DIR", tmp_path / "assets")
    store = build_object_store("local")

    assert isinstance(store, LocalObjectStore)
    assert store.root == tmp_path / "assets"


def test_build_unknown_backend():
    with pytest.raises(ValueError):
        build_object_store("floppy")
