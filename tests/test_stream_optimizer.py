# tests/test_stream_optimizer.py

import json
import shutil
import subprocess

import pytest

from media.aspect_classifier import AspectClassifier, Orientation
from media.ffmpeg_processor import FFmpegRemuxer, Remuxer, StreamOptimizer
from utils.errors import RemuxError
from tests.conftest import FakeRemuxer

HAS_FFMPEG = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


class SilentRemuxer(Remuxer):
    """Claims success but writes nothing"""

    def remux(self, input_path, output_path):
        return None


def test_command_is_a_stream_copy_with_faststart():
    cmd = FFmpegRemuxer(binary="ffmpeg").build_command("in.mp4", "out.mp4")

    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-i") + 1] == "in.mp4"
    assert cmd[cmd.index("-c") + 1] == "copy"
    assert cmd[cmd.index("-movflags") + 1] == "faststart"
    assert cmd[-1] == "out.mp4"


def test_optimize_writes_output_and_keeps_input(tmp_path):
    source = tmp_path / "raw.mp4"
    source.write_bytes(b"fake video payload")
    remuxer = FakeRemuxer()

    result = StreamOptimizer(remuxer).optimize(source, tmp_path / "faststart.mp4")

    assert result == tmp_path / "faststart.mp4"
    assert result.read_bytes() == b"fake video payload"
    assert source.exists()
    assert remuxer.calls == [(source, result)]


def test_optimize_refuses_in_place(tmp_path):
    source = tmp_path / "raw.mp4"
    source.write_bytes(b"x")
    remuxer = FakeRemuxer()

    with pytest.raises(RemuxError):
        StreamOptimizer(remuxer).optimize(source, source)
    assert remuxer.calls == []


def test_remux_failure_propagates(tmp_path):
    source = tmp_path / "raw.mp4"
    source.write_bytes(b"x")
    remuxer = FakeRemuxer()
    remuxer.fail = True

    with pytest.raises(RemuxError) as exc_info:
        StreamOptimizer(remuxer).optimize(source, tmp_path / "out.mp4")
    assert exc_info.value.status_code == 500


def test_missing_output_is_a_failure(tmp_path):
    source = tmp_path / "raw.mp4"
    source.write_bytes(b"x")

    with pytest.raises(RemuxError):
        StreamOptimizer(SilentRemuxer()).optimize(source, tmp_path / "out.mp4")


def test_missing_ffmpeg_is_a_remux_error(tmp_path):
    source = tmp_path / "raw.mp4"
    source.write_bytes(b"x")
    optimizer = StreamOptimizer(FFmpegRemuxer(binary="tubely-no-such-ffmpeg"))

    with pytest.raises(RemuxError):
        optimizer.optimize(source, tmp_path / "out.mp4")


# ─────────────────────────────────────────────────────────────
# Real ffmpeg
# ─────────────────────────────────────────────────────────────

def _probe_stream(path):
    result = subprocess.run(
        ["ffprobe", "-v", "error", "-select_streams", "v:0",
         "-count_frames", "-show_streams", "-print_format", "json", str(path)],
        capture_output=True, text=True, check=True
    )
    return json.loads(result.stdout)["streams"][0]


@pytest.fixture
def sample_video(tmp_path):
    """Two second 16:9 clip with the index written after the media data"""
    path = tmp_path / "sample.mp4"
    subprocess.run(
        ["ffmpeg", "-y", "-v", "error",
         "-f", "lavfi", "-i", "testsrc=duration=2:size=320x180:rate=15",
         "-c:v", "mpeg4", str(path)],
        check=True, capture_output=True
    )
    return path


@pytest.mark.skipif(not HAS_FFMPEG, reason="ffmpeg/ffprobe not on PATH")
def test_remux_moves_index_and_preserves_stream(sample_video, tmp_path):
    raw = sample_video.read_bytes()
    assert raw.index(b"mdat") < raw.index(b"moov")

    output = StreamOptimizer().optimize(sample_video, tmp_path / "faststart.mp4")

    optimized = output.read_bytes()
    assert optimized.index(b"moov") < optimized.index(b"mdat")

    before, after = _probe_stream(sample_video), _probe_stream(output)
    assert after["nb_read_frames"] == before["nb_read_frames"]
    assert float(after["duration"]) == pytest.approx(float(before["duration"]), abs=0.01)


@pytest.mark.skipif(not HAS_FFMPEG, reason="ffmpeg/ffprobe not on PATH")
def test_ffprobe_classifies_real_file(sample_video):
    assert AspectClassifier().classify(sample_video) is Orientation.LANDSCAPE
