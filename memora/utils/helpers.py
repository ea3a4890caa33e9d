"""Utility functions."""

import random
import string
import time
from pathlib import Path

_BASE36 = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    """Encode a non-negative integer in base 36."""
    if number < 0:
        raise ValueError("number must be non-negative")
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """
    Generate a record identifier.
    
    Millisecond timestamp in base 36 followed by a random base-36 suffix.
    Unique enough for a single local store, not globally.
    """
    prefix = to_base36(int(time.time() * 1000))
    suffix = "".join(random.choice(_BASE36) for _ in range(11))
    return prefix + suffix


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)
