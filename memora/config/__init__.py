"""Configuration module for Memora."""

from .settings import Config, data_dir
from .languages import LANGUAGES, FALLBACK_VOICE, language_name, voices_for

__all__ = [
    'Config',
    'data_dir',
    'LANGUAGES',
    'FALLBACK_VOICE',
    'language_name',
    'voices_for',
]
