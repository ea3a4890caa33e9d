"""Memora - AI-enriched vocabulary flashcards"""

__version__ = "1.0.0"
__author__ = "Memora Team"

from .config import Config, LANGUAGES
from .models import FlashcardSet, Word, UploadedWord, EnhancedWord
from .services import RecordStore, VocabularyService, WordEnricher, StudyService

__all__ = [
    'Config',
    'LANGUAGES',
    'FlashcardSet',
    'Word',
    'UploadedWord',
    'EnhancedWord',
    'RecordStore',
    'VocabularyService',
    'WordEnricher',
    'StudyService',
]
