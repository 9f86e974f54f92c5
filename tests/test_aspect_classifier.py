# tests/test_aspect_classifier.py

import json

import pytest

from media.aspect_classifier import (
    AspectClassifier,
    FFprobeProber,
    Orientation,
    aspect_ratio_label
)
from utils.errors import ProbeError, ProbeToolError, ValidationError
from tests.conftest import FakeProber


@pytest.mark.parametrize("width,height,expected", [
    (1920, 1080, "16:9"),
    (1280, 720, "16:9"),
    (854, 480, "16:9"),
    (1080, 1920, "9:16"),
    (720, 1280, "9:16"),
    (1000, 1000, "other"),
    (1440, 1080, "other"),
    (2560, 1080, "other"),
])
def test_aspect_ratio_label(width, height, expected):
    assert aspect_ratio_label(width, height) == expected


def test_tolerance_is_configurable():
    # 1.75 is 0.028 away from 16/9
    assert aspect_ratio_label(1750, 1000) == "other"
    assert aspect_ratio_label(1750, 1000, tolerance=0.05) == "16:9"


@pytest.mark.parametrize("width,height", [(0, 1080), (1920, 0), (-1, 10)])
def test_non_positive_dimensions_rejected(width, height):
    with pytest.raises(ProbeError):
        aspect_ratio_label(width, height)


@pytest.mark.parametrize("width,height,orientation", [
    (1920, 1080, Orientation.LANDSCAPE),
    (1080, 1920, Orientation.PORTRAIT),
    (1000, 1000, Orientation.OTHER),
])
def test_classify(width, height, orientation, tmp_path):
    prober = FakeProber(width, height)
    classifier = AspectClassifier(prober)

    assert classifier.classify(tmp_path / "clip.mp4") == orientation
    assert prober.calls == [tmp_path / "clip.mp4"]


def test_unknown_label_maps_to_other():
    assert Orientation.from_aspect_ratio("4:3") is Orientation.OTHER
    assert Orientation.from_aspect_ratio("16:9") is Orientation.LANDSCAPE
    assert Orientation.LANDSCAPE.value == "landscape"


# ─────────────────────────────────────────────────────────────
# ffprobe output parsing
# ─────────────────────────────────────────────────────────────

def test_parse_output_picks_first_video_stream():
    stdout = json.dumps({
        "streams": [
            {"codec_type": "audio", "sample_rate": "48000"},
            {"codec_type": "video", "width": 1080, "height": 1920},
            {"codec_type": "video", "width": 320, "height": 240},
        ]
    })
    dims = FFprobeProber.parse_output(stdout)
    assert (dims.width, dims.height) == (1080, 1920)


@pytest.mark.parametrize("stdout", [
    "not json at all",
    json.dumps({"streams": []}),
    json.dumps({"streams": [{"codec_type": "audio"}]}),
    json.dumps({"streams": [{"codec_type": "video", "width": 0, "height": 720}]}),
    json.dumps({"streams": [{"codec_type": "video"}]}),
])
def test_parse_output_rejects_unusable_probe(stdout):
    with pytest.raises(ProbeError) as exc_info:
        FFprobeProber.parse_output(stdout)
    # Undecodable uploads are the client's problem
    assert isinstance(exc_info.value, ValidationError)
    assert exc_info.value.status_code == 400


def test_missing_ffprobe_is_a_tool_error(tmp_path):
    prober = FFprobeProber(binary="tubely-no-such-ffprobe")
    with pytest.raises(ProbeToolError) as exc_info:
        prober.probe(tmp_path / "clip.mp4")
    assert exc_info.value.status_code == 500
