# media/__init__.py
"""
Video inspection and fast start remuxing
"""

from media.aspect_classifier import (
    AspectClassifier,
    Dimensions,
    FFprobeProber,
    Orientation,
    Prober,
    aspect_ratio_label
)
from media.ffmpeg_processor import FFmpegRemuxer, Remuxer, StreamOptimizer

__all__ = [
    'AspectClassifier',
    'Dimensions',
    'FFprobeProber',
    'Orientation',
    'Prober',
    'aspect_ratio_label',
    'FFmpegRemuxer',
    'Remuxer',
    'StreamOptimizer'
]
