"""Data models for Memora."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..errors import RecordDecodeError

# Bump when the persisted layout changes; older records are upgraded on decode
SCHEMA_VERSION = 1


def now_iso() -> str:
    """Current time as an ISO-8601 string (UTC, millisecond precision)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Difficulty(Enum):
    """Difficulty tag of a word."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass
class FlashcardSet:
    """A named collection of words for one language pair."""

    id: str
    user_id: str
    name: str
    target_language: str
    definition_language: str
    created_at: str
    updated_at: str
    word_count: int = 0


@dataclass
class Word:
    """A single studied vocabulary card."""

    id: str
    set_id: str
    word: str
    definition: str
    created_at: str
    pronunciation: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    example: Optional[str] = None
    part_of_speech: Optional[str] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    correct_count: int = 0
    incorrect_count: int = 0
    last_studied: Optional[str] = None


@dataclass
class UploadedWord:
    """Raw entry captured from a file, before enrichment."""

    word: str
    definition: Optional[str] = None
    context: Optional[str] = None


@dataclass
class DefinitionResult:
    """Answer of a definition lookup."""

    definition: str
    pronunciation: Optional[str] = None
    part_of_speech: Optional[str] = None
    example: Optional[str] = None


@dataclass
class EnhancedWord:
    """Uploaded word plus everything the enrichment pipeline produced."""

    word: str
    definition: str
    pronunciation: str = ""
    context: Optional[str] = None
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    example: Optional[str] = None
    part_of_speech: Optional[str] = None


# ==================== Persisted schemas ====================

# attribute, persisted key, accepted types, required
_SET_FIELDS: Tuple[Tuple[str, str, tuple, bool], ...] = (
    ("id", "id", (str,), True),
    ("user_id", "userId", (str,), True),
    ("name", "name", (str,), True),
    ("target_language", "targetLanguage", (str,), True),
    ("definition_language", "definitionLanguage", (str,), True),
    ("created_at", "createdAt", (str,), True),
    ("updated_at", "updatedAt", (str,), True),
    ("word_count", "wordCount", (int,), False),
)

_WORD_FIELDS: Tuple[Tuple[str, str, tuple, bool], ...] = (
    ("id", "id", (str,), True),
    ("set_id", "setId", (str,), True),
    ("word", "word", (str,), True),
    ("definition", "definition", (str,), True),
    ("created_at", "createdAt", (str,), True),
    ("pronunciation", "pronunciation", (str,), False),
    ("audio_url", "audioUrl", (str,), False),
    ("image_url", "imageUrl", (str,), False),
    ("example", "example", (str,), False),
    ("part_of_speech", "partOfSpeech", (str,), False),
    ("difficulty", "difficulty", (str,), False),
    ("correct_count", "correctCount", (int,), False),
    ("incorrect_count", "incorrectCount", (int,), False),
    ("last_studied", "lastStudied", (str,), False),
)


def _encode(record: Any, fields) -> Dict[str, Any]:
    data: Dict[str, Any] = {"schemaVersion": SCHEMA_VERSION}
    for attr, key, _types, required in fields:
        value = getattr(record, attr)
        if isinstance(value, Enum):
            value = value.value
        if value is None and not required:
            continue
        data[key] = value
    return data


def _decode_fields(data: Any, fields, collection: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise RecordDecodeError(collection, "<record>", f"must be an object, got {type(data).__name__}")

    version = data.get("schemaVersion", 1)
    if not isinstance(version, int) or isinstance(version, bool):
        raise RecordDecodeError(collection, "schemaVersion", "must be an integer")
    if version > SCHEMA_VERSION:
        raise RecordDecodeError(collection, "schemaVersion", f"{version} is newer than supported {SCHEMA_VERSION}")

    kwargs: Dict[str, Any] = {}
    for attr, key, types, required in fields:
        if key not in data or data[key] is None:
            if required:
                raise RecordDecodeError(collection, key, "is missing")
            continue
        value = data[key]
        # bool is an int subclass; counters must be real integers
        if not isinstance(value, types) or (isinstance(value, bool) and int in types):
            expected = "/".join(t.__name__ for t in types)
            raise RecordDecodeError(collection, key, f"must be {expected}, got {type(value).__name__}")
        kwargs[attr] = value
    return kwargs


def encode_set(flashcard_set: FlashcardSet) -> Dict[str, Any]:
    """Serialize a set to its persisted layout."""
    return _encode(flashcard_set, _SET_FIELDS)


def decode_set(data: Any) -> FlashcardSet:
    """Build a set from its persisted layout, validating the shape."""
    kwargs = _decode_fields(data, _SET_FIELDS, "sets")
    return FlashcardSet(**kwargs)


def encode_word(word: Word) -> Dict[str, Any]:
    """Serialize a word to its persisted layout."""
    return _encode(word, _WORD_FIELDS)


def decode_word(data: Any) -> Word:
    """Build a word from its persisted layout, validating the shape."""
    kwargs = _decode_fields(data, _WORD_FIELDS, "words")
    if "difficulty" in kwargs:
        try:
            kwargs["difficulty"] = Difficulty(kwargs["difficulty"])
        except ValueError:
            raise RecordDecodeError("words", "difficulty", f"has unknown value {kwargs['difficulty']!r}")
    return Word(**kwargs)


def copy_record(record: Any, **changes: Any) -> Any:
    """Return a copy of a dataclass record with some fields changed."""
    return replace(record, **changes)
