"""
Scratch file management - per-upload temporary staging area
"""

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from config.settings import SCRATCH_DIR
from utils.logger import setup_logger

logger = setup_logger("file_manager")


class ScratchFileManager:
    """
    Owns the temporary files of a single upload

    Use as a context manager: the directory and everything in it is removed
    on exit, whether the pipeline succeeded or raised.

        with ScratchFileManager(video_id) as scratch:
            copy_upload(scratch.raw_path)
            remux(scratch.raw_path, scratch.optimized_path)
    """

    def __init__(self, video_id: str, extension: str = "mp4",
                 base_dir: Optional[Path] = None):
        self.video_id = video_id
        self.extension = extension
        self.base_dir = Path(base_dir) if base_dir else SCRATCH_DIR
        self.scratch_dir: Optional[Path] = None

    def __enter__(self) -> "ScratchFileManager":
        if self.base_dir is not None:
            self.base_dir.mkdir(parents=True, exist_ok=True)
        self.scratch_dir = Path(tempfile.mkdtemp(
            prefix=f"tubely-upload-{self.video_id}-",
            dir=self.base_dir
        ))
        logger.debug(f"Created scratch dir {self.scratch_dir}")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def raw_path(self) -> Path:
        return self._require_dir() / f"raw.{self.extension}"

    @property
    def optimized_path(self) -> Path:
        return self._require_dir() / f"faststart.{self.extension}"

    def _require_dir(self) -> Path:
        if self.scratch_dir is None:
            raise RuntimeError("Scratch space is not active")
        return self.scratch_dir

    def cleanup(self) -> None:
        """Delete the scratch directory (idempotent)"""
        if self.scratch_dir is None:
            return
        shutil.rmtree(self.scratch_dir, ignore_errors=True)
        if self.scratch_dir.exists():
            logger.warning(f"Scratch dir could not be fully removed: {self.scratch_dir}")
        else:
            logger.debug(f"Removed scratch dir {self.scratch_dir}")
        self.scratch_dir = None
