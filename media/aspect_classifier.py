import json
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from config.settings import (
    FFPROBE_BINARY,
    PROBE_TIMEOUT_SECONDS,
    ASPECT_RATIO_TOLERANCE
)
from utils.errors import ProbeError, ProbeToolError
from utils.logger import setup_logger

logger = setup_logger("aspect_classifier")

LANDSCAPE_RATIO = 16 / 9
PORTRAIT_RATIO = 9 / 16


class Orientation(str, Enum):
    """Coarse orientation used as the storage key prefix"""
    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    OTHER = "other"

    @classmethod
    def from_aspect_ratio(cls, aspect_ratio: str) -> "Orientation":
        """Map an aspect ratio label to an orientation; anything unknown is OTHER"""
        if aspect_ratio == "16:9":
            return cls.LANDSCAPE
        if aspect_ratio == "9:16":
            return cls.PORTRAIT
        return cls.OTHER


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


def aspect_ratio_label(width: int, height: int,
                       tolerance: float = ASPECT_RATIO_TOLERANCE) -> str:
    """
    Classify a pixel geometry as "16:9", "9:16" or "other"

    Raises:
        ProbeError: if either dimension is not positive
    """
    if not width or not height or width <= 0 or height <= 0:
        raise ProbeError(f"Invalid video dimensions: {width}x{height}")

    ratio = width / height
    if abs(ratio - LANDSCAPE_RATIO) <= tolerance:
        return "16:9"
    if abs(ratio - PORTRAIT_RATIO) <= tolerance:
        return "9:16"
    return "other"


class Prober(ABC):
    """Reads the primary video stream's geometry from a local file"""

    @abstractmethod
    def probe(self, path: Union[str, Path]) -> Dimensions:
        ...


class FFprobeProber(Prober):
    """Prober backed by the ffprobe command line tool"""

    def __init__(self, binary: str = FFPROBE_BINARY, timeout: int = PROBE_TIMEOUT_SECONDS):
        self.binary = binary
        self.timeout = timeout

    def probe(self, path: Union[str, Path]) -> Dimensions:
        cmd = [
            self.binary,
            '-v', 'error',
            '-print_format', 'json',
            '-show_streams',
            str(path)
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise ProbeToolError(f"{self.binary} is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise ProbeToolError(f"{self.binary} timed out after {self.timeout}s") from e

        if result.returncode != 0:
            logger.error(f"ffprobe failed (rc={result.returncode}): {result.stderr.strip()[-500:]}")
            raise ProbeToolError(f"{self.binary} exited with status {result.returncode}")

        return self.parse_output(result.stdout)

    @staticmethod
    def parse_output(stdout: str) -> Dimensions:
        """Extract width/height of the first video stream from ffprobe JSON"""
        try:
            probe_data = json.loads(stdout)
        except (TypeError, ValueError) as e:
            raise ProbeError("ffprobe output is not valid JSON") from e

        video_stream = next(
            (s for s in probe_data.get('streams', []) if s.get('codec_type') == 'video'),
            None
        )
        if video_stream is None:
            raise ProbeError("No video stream found")

        width = video_stream.get('width')
        height = video_stream.get('height')
        if not isinstance(width, int) or not isinstance(height, int) or width <= 0 or height <= 0:
            raise ProbeError(f"Video stream has invalid dimensions: {width}x{height}")

        return Dimensions(width=width, height=height)


class AspectClassifier:
    """Probes a video file and maps its geometry to an Orientation"""

    def __init__(self, prober: Optional[Prober] = None,
                 tolerance: float = ASPECT_RATIO_TOLERANCE):
        self.prober = prober or FFprobeProber()
        self.tolerance = tolerance

    def aspect_ratio(self, path: Union[str, Path]) -> str:
        dims = self.prober.probe(path)
        return aspect_ratio_label(dims.width, dims.height, self.tolerance)

    def classify(self, path: Union[str, Path]) -> Orientation:
        """
        Classify a video file's orientation

        Args:
            path: Local video file

        Returns:
            LANDSCAPE, PORTRAIT, or OTHER for any unmatched ratio

        Raises:
            ProbeError: file has no readable video stream
            ProbeToolError: ffprobe unavailable or failed
        """
        label = self.aspect_ratio(path)
        orientation = Orientation.from_aspect_ratio(label)
        logger.debug(f"Classified {Path(path).name} as {label} ({orientation.value})")
        return orientation
