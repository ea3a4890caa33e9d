"""
Vocabulary Service - sets, words and the upload workflow.

Ties ingestion, enrichment and the record store together. The store is
injected and the acting user is passed into each call.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from ..config import language_name
from ..errors import EmptyResultError, NotFoundError, ValidationError
from ..models import Difficulty, EnhancedWord, FlashcardSet, Word, copy_record, now_iso
from ..utils.helpers import generate_id
from .ai_service import AIService
from .auth import User
from .enrichment import ProgressCallback, WordEnricher
from .ingestion import ingest_file
from .store import RecordStore

logger = logging.getLogger(__name__)

StepCallback = Callable[[str], None]

# Overall progress bands of an upload
PROGRESS_PARSING = 10
PROGRESS_PARSED = 30
PROGRESS_ENRICHED = 90
PROGRESS_DONE = 100


@dataclass
class UploadResult:
    """Outcome of a successful upload."""
    flashcard_set: FlashcardSet
    words: List[Word] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.words)


def default_set_name(target_language: str, today: Optional[datetime] = None) -> str:
    """Name given to sets created by an upload, e.g. "Spanish Words - 3/7/2025"."""
    today = today or datetime.now()
    return f"{language_name(target_language)} Words - {today.month}/{today.day}/{today.year}"


class VocabularyService:
    """
    Service for managing flashcard sets and their words.

    Usage:
        service = VocabularyService(store, ai_service, enricher)
        result = await service.upload_words(user, "words.csv", "es", "en")
    """

    def __init__(
        self,
        store: RecordStore,
        ai_service: Optional[AIService] = None,
        enricher: Optional[WordEnricher] = None
    ):
        """
        Initialize vocabulary service.

        Args:
            store: Record store for sets and words
            ai_service: Vision backend for image uploads
            enricher: Enrichment pipeline (only needed by upload_words)
        """
        self.store = store
        self.ai_service = ai_service
        self.enricher = enricher

    # ==================== Sets ====================

    def create_set(
        self,
        user: User,
        name: str,
        target_language: str,
        definition_language: str
    ) -> FlashcardSet:
        """
        Create an empty set.

        Raises:
            ValidationError: name or a language is missing
        """
        name = (name or "").strip()
        if not name or not target_language or not definition_language:
            raise ValidationError("Please fill in all required fields.")

        timestamp = now_iso()
        flashcard_set = FlashcardSet(
            id=generate_id(),
            user_id=user.id,
            name=name,
            target_language=target_language,
            definition_language=definition_language,
            created_at=timestamp,
            updated_at=timestamp,
            word_count=0,
        )
        self.store.save_set(flashcard_set)
        logger.info("Created set %r (%s -> %s)", name, target_language, definition_language)
        return flashcard_set

    def list_sets(self, user: User) -> List[FlashcardSet]:
        """Sets owned by the user."""
        return self.store.list_sets(user.id)

    def get_set(self, user: User, set_id: str) -> FlashcardSet:
        """
        Get one of the user's sets.

        Raises:
            NotFoundError: no such set, or it belongs to someone else
        """
        flashcard_set = self.store.get_set(set_id)
        if flashcard_set is None or flashcard_set.user_id != user.id:
            raise NotFoundError("Selected flashcard set not found.")
        return flashcard_set

    def list_words(self, user: User, set_id: str) -> List[Word]:
        """Words of one of the user's sets."""
        self.get_set(user, set_id)
        return self.store.list_words(set_id)

    def delete_set(self, user: User, set_id: str) -> int:
        """
        Delete a set and its words.

        Returns:
            Number of words removed
        """
        self.get_set(user, set_id)
        removed = self.store.delete_set(set_id)
        logger.info("Deleted set %s (%d words)", set_id, removed)
        return removed

    def refresh_word_count(self, user: User, set_id: str) -> FlashcardSet:
        """Recount a set's words after manual edits."""
        self.get_set(user, set_id)
        return self.store.refresh_word_count(set_id)

    # ==================== Upload ====================

    @staticmethod
    def build_words(set_id: str, enhanced: List[EnhancedWord]) -> List[Word]:
        """Fresh Word records for enriched entries."""
        return [
            Word(
                id=generate_id(),
                set_id=set_id,
                word=item.word,
                definition=item.definition,
                pronunciation=item.pronunciation or "",
                audio_url=item.audio_url,
                image_url=item.image_url,
                example=item.example,
                part_of_speech=item.part_of_speech,
                difficulty=Difficulty.MEDIUM,
                correct_count=0,
                incorrect_count=0,
                created_at=now_iso(),
            )
            for item in enhanced
        ]

    async def upload_words(
        self,
        user: User,
        file_path: Optional[str],
        target_language: Optional[str],
        definition_language: Optional[str],
        set_id: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
        on_step: Optional[StepCallback] = None
    ) -> UploadResult:
        """
        Import a file into a new or existing set.

        Everything before persistence either succeeds or aborts without
        writing. Once words are saved there is no rollback.

        Args:
            user: Owner of the set
            file_path: CSV or image file
            target_language: Language of the words
            definition_language: Language for definitions
            set_id: Existing set to append to; a new set is created when None
            on_progress: Overall progress 0..100
            on_step: Human-readable step label

        Raises:
            ValidationError: missing file or language
            NotFoundError: set_id unknown
            UnsupportedFormatError, ExtractionError: ingestion failed
            EmptyResultError: the file held no words
        """
        def progress(value: float) -> None:
            if on_progress:
                on_progress(value)

        def step(label: str) -> None:
            logger.info(label)
            if on_step:
                on_step(label)

        if self.enricher is None or self.ai_service is None:
            raise RuntimeError("upload_words needs an AI service and an enricher")
        if not file_path or not target_language or not definition_language:
            raise ValidationError("Please select a file and choose both languages.")
        if not Path(file_path).is_file():
            raise ValidationError(f"File not found: {file_path}")

        existing = self.get_set(user, set_id) if set_id else None

        step("Parsing file...")
        progress(PROGRESS_PARSING)
        uploaded = await ingest_file(file_path, self.ai_service)
        if not uploaded:
            raise EmptyResultError("No words found in the file.")
        progress(PROGRESS_PARSED)

        step(f"Enhancing {len(uploaded)} words with definitions and pronunciations...")
        band = PROGRESS_ENRICHED - PROGRESS_PARSED
        enhanced = await self.enricher.enhance_words(
            uploaded,
            target_language,
            definition_language,
            on_progress=lambda value: progress(PROGRESS_PARSED + value * band / 100),
        )
        progress(PROGRESS_ENRICHED)

        if existing is not None:
            # Re-read: the set may have been renamed or deleted while enriching
            flashcard_set = self.store.get_set(existing.id)
            if flashcard_set is None:
                raise NotFoundError("Selected flashcard set not found.")
        else:
            timestamp = now_iso()
            flashcard_set = self.store.save_set(FlashcardSet(
                id=generate_id(),
                user_id=user.id,
                name=default_set_name(target_language),
                target_language=target_language,
                definition_language=definition_language,
                created_at=timestamp,
                updated_at=timestamp,
                word_count=0,
            ))

        step("Saving words...")
        words = self.build_words(flashcard_set.id, enhanced)
        self.store.save_words(words)

        flashcard_set = self.store.save_set(copy_record(
            flashcard_set,
            word_count=(flashcard_set.word_count or 0) + len(words),
            updated_at=now_iso(),
        ))
        progress(PROGRESS_DONE)

        logger.info("Added %d words to %r", len(words), flashcard_set.name)
        return UploadResult(flashcard_set=flashcard_set, words=words)
