"""
Media Service - pronunciation audio and illustrative images for words.

Files are written to the media directory and referenced by path; a file that
already exists for the same input is reused instead of regenerated.
"""

import hashlib
import logging
from pathlib import Path
from typing import List, Optional

from ..config import Config, voices_for
from ..fetchers import AudioFetcher, ImageFetcher
from ..utils.helpers import ensure_dir

logger = logging.getLogger(__name__)

IMAGE_PROMPT_TEMPLATE = (
    'A simple, clear illustration representing the word "{word}" ({definition}). '
    "Educational style, clean background, suitable for language learning flashcards."
)


def _digest(*parts: str) -> str:
    return hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()[:16]


class MediaService:
    """
    Service for generating and managing media files.

    Usage:
        async with MediaService() as media:
            audio = await media.generate_pronunciation_audio("casa", "es")
            image = await media.generate_word_image("casa", "house")
    """

    def __init__(
        self,
        media_dir: Optional[str] = None,
        audio_fetcher: Optional[AudioFetcher] = None,
        image_fetcher: Optional[ImageFetcher] = None
    ):
        """
        Initialize media service.

        Args:
            media_dir: Directory for media files (defaults to Config.MEDIA_DIR)
            audio_fetcher: Speech backend (lazily created when None)
            image_fetcher: Image backend (lazily created when None)
        """
        self.media_dir = Path(media_dir or Config.MEDIA_DIR)
        self._audio_fetcher = audio_fetcher
        self._image_fetcher = image_fetcher

    @property
    def audio_fetcher(self) -> AudioFetcher:
        """Lazy-load audio fetcher."""
        if self._audio_fetcher is None:
            self._audio_fetcher = AudioFetcher()
        return self._audio_fetcher

    @property
    def image_fetcher(self) -> ImageFetcher:
        """Lazy-load image fetcher."""
        if self._image_fetcher is None:
            self._image_fetcher = ImageFetcher()
        return self._image_fetcher

    async def close(self) -> None:
        """Clean up all fetchers."""
        if self._image_fetcher:
            await self._image_fetcher.close()
            self._image_fetcher = None
        if self._audio_fetcher:
            await self._audio_fetcher.close()
            self._audio_fetcher = None

    async def __aenter__(self) -> "MediaService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    @staticmethod
    def file_exists(path: Path) -> bool:
        """Check if a media file exists and has content."""
        return path.exists() and path.stat().st_size > 100

    def get_audio_path(self, text: str, voice: str) -> Path:
        return self.media_dir / f"audio_{_digest(text, voice)}.mp3"

    def get_image_path(self, prompt: str, size: str, quality: str, index: int) -> Path:
        return self.media_dir / f"img_{_digest(prompt, size, quality)}_{index}.jpg"

    async def synthesize_speech(self, text: str, voice: str) -> Optional[str]:
        """
        Speak text with a given voice.

        Returns:
            Path of the MP3 file, or None on failure
        """
        output_path = self.get_audio_path(text, voice)
        if self.file_exists(output_path):
            return str(output_path)
        ensure_dir(str(self.media_dir))

        if await self.audio_fetcher.fetch(text, str(output_path), voice=voice):
            return str(output_path)
        return None

    async def generate_pronunciation_audio(self, word: str, language: str) -> Optional[str]:
        """Pronunciation of a word in its target language."""
        voice = voices_for(language)[0]
        audio = await self.synthesize_speech(word, voice)
        if audio is None:
            logger.warning("No pronunciation audio for %r (%s)", word, language)
        return audio

    async def generate_images(
        self,
        prompt: str,
        size: str = "1024x1024",
        quality: str = "medium",
        n: int = 1
    ) -> List[str]:
        """
        Generate up to n images for a prompt.

        Returns:
            Paths of the images that were produced (possibly empty)
        """
        ensure_dir(str(self.media_dir))
        paths: List[str] = []
        for index in range(n):
            output_path = self.get_image_path(prompt, size, quality, index)
            if self.file_exists(output_path):
                paths.append(str(output_path))
                continue
            # Distinct seeds so that n > 1 yields different pictures
            seed = int(_digest(prompt, str(index))[:8], 16)
            if await self.image_fetcher.fetch(prompt, str(output_path), size=size,
                                              quality=quality, seed=seed):
                paths.append(str(output_path))
        return paths

    async def generate_word_image(self, word: str, definition: str) -> Optional[str]:
        """Illustration for a word, keyed by its definition."""
        prompt = IMAGE_PROMPT_TEMPLATE.format(word=word, definition=definition)
        images = await self.generate_images(prompt, size="1024x1024", quality="medium", n=1)
        if not images:
            logger.warning("No image generated for %r", word)
            return None
        return images[0]
