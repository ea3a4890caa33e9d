"""Utils module."""

from .helpers import (
    ensure_dir,
    generate_id,
    to_base36,
)
from .parsing import TextParser
from .logger import setup_logger

__all__ = [
    'ensure_dir',
    'generate_id',
    'to_base36',
    'TextParser',
    'setup_logger',
]
