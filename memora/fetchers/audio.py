"""Audio fetcher - pronunciation audio via Edge TTS."""

import logging
import os
from typing import Optional

import edge_tts

from ..config import FALLBACK_VOICE
from ..utils.parsing import TextParser
from .base import BaseFetcher

logger = logging.getLogger(__name__)

# Files smaller than this are treated as failed syntheses
MIN_AUDIO_BYTES = 100


class AudioFetcher(BaseFetcher):
    """Handle speech synthesis via Edge TTS."""
    
    def __init__(self, default_voice: str = FALLBACK_VOICE, rate: str = "-10%"):
        """
        Initialize audio fetcher.
        
        Args:
            default_voice: Voice used when fetch() gets none
            rate: Speaking rate adjustment; slightly slow suits learners
        """
        self.default_voice = default_voice
        self.rate = rate
    
    async def fetch(self, source: str, output_path: str, voice: Optional[str] = None,
                    volume: str = "+0%") -> bool:
        """
        Synthesize speech for text.
        
        Uses atomic write pattern: write to temp file, then rename.
        
        Args:
            source: Text to convert to speech
            output_path: Path to save MP3
            voice: Edge TTS voice name
            volume: Volume adjustment (e.g., "+0%", "+40%")
            
        Returns:
            True if successful, False otherwise
        """
        text = TextParser.clean_for_tts(source)
        if not text:
            return False
        
        selected_voice = voice or self.default_voice
        temp_path = None
        try:
            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
            temp_path = self.temp_path_for(output_path)
            
            communicate = edge_tts.Communicate(text, selected_voice, rate=self.rate, volume=volume)
            await communicate.save(temp_path)
            
            if os.path.exists(temp_path) and os.path.getsize(temp_path) > MIN_AUDIO_BYTES:
                os.replace(temp_path, output_path)
                temp_path = None
                return True
            
            logger.warning("Edge TTS produced no audio for %r (%s)", text, selected_voice)
            return False
        
        except Exception as e:
            error_msg = str(e)
            if "429" in error_msg or "Too Many Requests" in error_msg:
                logger.warning("TTS rate limit hit (429): %s", error_msg[:80])
            else:
                logger.warning("Error generating audio for %r: %s", text, error_msg[:80])
            return False
        
        finally:
            self.discard(temp_path)
