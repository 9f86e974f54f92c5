import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from config.settings import FFMPEG_BINARY, REMUX_TIMEOUT_SECONDS
from utils.errors import RemuxError
from utils.logger import setup_logger

logger = setup_logger("ffmpeg_processor")


class Remuxer(ABC):
    """Rewrites a container into a new file without re-encoding"""

    @abstractmethod
    def remux(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> None:
        ...


class FFmpegRemuxer(Remuxer):
    """Moves the moov atom to the front of an MP4 with a stream copy"""

    def __init__(self, binary: str = FFMPEG_BINARY, timeout: int = REMUX_TIMEOUT_SECONDS):
        self.binary = binary
        self.timeout = timeout

    def build_command(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> list:
        return [
            self.binary,
            '-y',
            '-v', 'error',
            '-i', str(input_path),
            '-map', '0',
            '-c', 'copy',               # No re-encoding
            '-movflags', 'faststart',   # Index before media data
            '-f', 'mp4',
            str(output_path)
        ]

    def remux(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> None:
        output_path = Path(output_path)
        cmd = self.build_command(input_path, output_path)

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise RemuxError(f"{self.binary} is not installed") from e
        except subprocess.TimeoutExpired as e:
            raise RemuxError(f"{self.binary} timed out after {self.timeout}s") from e

        if result.returncode != 0:
            logger.error(f"FFmpeg remux failed (rc={result.returncode}): {result.stderr.strip()[-500:]}")
            raise RemuxError(f"{self.binary} exited with status {result.returncode}")

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise RemuxError("Remux produced no output file")


class StreamOptimizer:
    """Produces a fast-start copy of a video on local scratch storage"""

    def __init__(self, remuxer: Optional[Remuxer] = None):
        self.remuxer = remuxer or FFmpegRemuxer()

    def optimize(self, input_path: Union[str, Path], output_path: Union[str, Path]) -> Path:
        """
        Relocate the container index ahead of the media payload

        Args:
            input_path: Staged upload (left untouched)
            output_path: Where the fast-start copy is written

        Returns:
            Path of the optimized file

        Raises:
            RemuxError: remux failed or no output was produced
        """
        input_path = Path(input_path)
        output_path = Path(output_path)

        if input_path.resolve() == output_path.resolve():
            raise RemuxError("Output path must differ from input path")

        self.remuxer.remux(input_path, output_path)

        if not output_path.exists():
            raise RemuxError("Remux produced no output file")

        logger.info(
            f"Fast start remux complete: {input_path.stat().st_size:,} -> "
            f"{output_path.stat().st_size:,} bytes"
        )
        return output_path
