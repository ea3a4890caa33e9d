"""Data models for Memora."""

from .records import (
    SCHEMA_VERSION,
    Difficulty,
    FlashcardSet,
    Word,
    UploadedWord,
    EnhancedWord,
    DefinitionResult,
    encode_set,
    decode_set,
    encode_word,
    decode_word,
    copy_record,
    now_iso,
)

__all__ = [
    'SCHEMA_VERSION',
    'Difficulty',
    'FlashcardSet',
    'Word',
    'UploadedWord',
    'EnhancedWord',
    'DefinitionResult',
    'encode_set',
    'decode_set',
    'encode_word',
    'decode_word',
    'copy_record',
    'now_iso',
]
