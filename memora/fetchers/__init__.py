"""Fetchers module - media generation backends."""

from .base import BaseFetcher
from .audio import AudioFetcher
from .images import ImageFetcher, detect_image_format, parse_size

__all__ = [
    'BaseFetcher',
    'AudioFetcher',
    'ImageFetcher',
    'detect_image_format',
    'parse_size',
]
