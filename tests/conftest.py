# tests/conftest.py

import shutil
import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.services.container import build_container
from media.aspect_classifier import AspectClassifier, Dimensions, Prober
from media.ffmpeg_processor import Remuxer, StreamOptimizer
from storage.object_store import LocalObjectStore
from utils.auth import create_access_token
from utils.database import Database
from utils.errors import RemuxError, StorageWriteError

TEST_SECRET = "unit-test-secret"
BASE_URL = "http://testserver"

# Bytes only need to look like an upload; the fakes never parse them
FAKE_MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 4096


# ─────────────────────────────────────────────────────────────
# Fakes
# ─────────────────────────────────────────────────────────────

class FakeProber(Prober):
    """Reports fixed dimensions; records which files were probed"""

    def __init__(self, width=1920, height=1080):
        self.width = width
        self.height = height
        self.calls = []

    def probe(self, path):
        self.calls.append(Path(path))
        return Dimensions(width=self.width, height=self.height)


class FakeRemuxer(Remuxer):
    """Copies input to output instead of running ffmpeg"""

    def __init__(self):
        self.calls = []
        self.fail = False

    def remux(self, input_path, output_path):
        self.calls.append((Path(input_path), Path(output_path)))
        if self.fail:
            raise RemuxError("simulated remux failure")
        shutil.copyfile(input_path, output_path)


class FailingStore(LocalObjectStore):
    """Local store whose writes always fail"""

    def put(self, key, content_type, body):
        raise StorageWriteError(f"simulated write failure for {key}")


# ─────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────

@pytest.fixture
def db(tmp_path):
    return Database(tmp_path / "tubely-test.db")


@pytest.fixture
def store(tmp_path):
    return LocalObjectStore(
        tmp_path / "assets",
        signing_secret=TEST_SECRET,
        base_url=BASE_URL
    )


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def remuxer():
    return FakeRemuxer()


@pytest.fixture
def scratch_dir(tmp_path):
    return tmp_path / "scratch"


@pytest.fixture
def container(db, store, prober, remuxer, scratch_dir):
    return build_container(
        db=db,
        store=store,
        classifier=AspectClassifier(prober),
        optimizer=StreamOptimizer(remuxer),
        jwt_secret=TEST_SECRET,
        scratch_dir=scratch_dir
    )


@pytest.fixture
def orchestrator(container):
    return container.orchestrator


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as c:
        yield c


@pytest.fixture
def owner_id():
    return str(uuid.uuid4())


@pytest.fixture
def video(db, owner_id):
    return db.create_video(owner_id, "Boots in the wild", "A short clip")


@pytest.fixture
def auth_headers():
    def _headers(user_id):
        token = create_access_token(user_id, secret=TEST_SECRET)
        return {"Authorization": f"Bearer {token}"}
    return _headers


def scratch_entries(scratch_dir):
    """Everything left under the scratch base directory"""
    if not scratch_dir.exists():
        return []
    return list(scratch_dir.iterdir())
