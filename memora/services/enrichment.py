"""
Word Enrichment Pipeline.

Each uploaded word gets a definition, pronunciation audio and an image.
Words are processed one after another, never concurrently: outbound API
traffic stays at one request at a time and progress rises monotonically.
"""

import logging
from typing import Callable, List, Optional, Protocol

from ..models import DefinitionResult, EnhancedWord, UploadedWord
from .dictionary import fallback_definition

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class DefinitionLookup(Protocol):
    async def lookup(self, word: str, target_language: str, definition_language: str) -> DefinitionResult:
        ...


class WordMedia(Protocol):
    async def generate_pronunciation_audio(self, word: str, language: str) -> Optional[str]:
        ...

    async def generate_word_image(self, word: str, definition: str) -> Optional[str]:
        ...


class WordEnricher:
    """
    Sequential enrichment of uploaded words.

    Usage:
        enricher = WordEnricher(DefinitionSource(ai), MediaService())
        enhanced = await enricher.enhance_words(words, "es", "en", on_progress=print)
    """

    def __init__(self, definitions: DefinitionLookup, media: WordMedia):
        self.definitions = definitions
        self.media = media

    async def enhance_word(
        self,
        uploaded: UploadedWord,
        target_language: str,
        definition_language: str
    ) -> EnhancedWord:
        """Run the three external calls for one word and merge the results."""
        definition = await self.definitions.lookup(uploaded.word, target_language, definition_language)
        audio_url = await self.media.generate_pronunciation_audio(uploaded.word, target_language)
        image_url = await self.media.generate_word_image(uploaded.word, definition.definition)

        return EnhancedWord(
            word=uploaded.word,
            definition=definition.definition,
            pronunciation=definition.pronunciation or "",
            context=uploaded.context,
            audio_url=audio_url,
            image_url=image_url,
            example=definition.example,
            part_of_speech=definition.part_of_speech,
        )

    @staticmethod
    def degraded(uploaded: UploadedWord) -> EnhancedWord:
        """Minimal record for a word whose enrichment failed."""
        return EnhancedWord(
            word=uploaded.word,
            definition=uploaded.definition or fallback_definition(uploaded.word),
            pronunciation="",
            context=uploaded.context,
        )

    async def enhance_words(
        self,
        words: List[UploadedWord],
        target_language: str,
        definition_language: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> List[EnhancedWord]:
        """
        Enrich every word, in input order.

        A failure on one word degrades that word only; the batch always
        yields exactly one entry per input.

        Args:
            words: Raw entries from ingestion
            target_language: Language of the words
            definition_language: Language for definitions
            on_progress: Receives (index + 1) / total * 100 after each word

        Returns:
            Enhanced words, same length and order as the input
        """
        total = len(words)
        enhanced: List[EnhancedWord] = []

        for index, uploaded in enumerate(words):
            try:
                enhanced.append(await self.enhance_word(uploaded, target_language, definition_language))
            except Exception:
                logger.warning("Error enhancing word %r, keeping minimal record", uploaded.word, exc_info=True)
                enhanced.append(self.degraded(uploaded))

            if on_progress:
                on_progress((index + 1) / total * 100)

        logger.info("Enhanced %d words (%s -> %s)", total, target_language, definition_language)
        return enhanced
