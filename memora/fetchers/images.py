"""Image fetcher - generate images via Pollinations API."""

import asyncio
import logging
import os
import urllib.parse
from typing import Dict, Optional

import aiofiles
import aiohttp

from ..config import Config
from .base import BaseFetcher

logger = logging.getLogger(__name__)


# Image format magic bytes for validation
IMAGE_MAGIC_BYTES = {
    b'\xff\xd8\xff': 'jpeg',      # JPEG
    b'\x89PNG': 'png',            # PNG
    b'GIF8': 'gif',               # GIF
}

# Smaller payloads are error pages or placeholders, not images
MIN_IMAGE_BYTES = 2000


def detect_image_format(content: bytes) -> Optional[str]:
    """Detect image format from magic bytes."""
    if not content or len(content) < 4:
        return None
    for magic, fmt in IMAGE_MAGIC_BYTES.items():
        if content.startswith(magic):
            return fmt
    # WebP is RIFF....WEBP
    if content[:4] == b'RIFF' and len(content) > 12 and content[8:12] == b'WEBP':
        return 'webp'
    return None


def parse_size(size: str) -> Dict[str, str]:
    """Turn "1024x1024" into width/height query parameters."""
    try:
        width, height = (int(part) for part in size.lower().split("x", 1))
    except ValueError:
        raise ValueError(f"Invalid image size {size!r}, expected WIDTHxHEIGHT")
    if width <= 0 or height <= 0:
        raise ValueError(f"Invalid image size {size!r}")
    return {"width": str(width), "height": str(height)}


class ImageFetcher(BaseFetcher):
    """Handle image generation via Pollinations API with session pooling."""
    
    def __init__(self, retries: Optional[int] = None):
        """
        Initialize image fetcher.
        
        Args:
            retries: Attempts per image (defaults to Config.RETRIES)
        """
        self.retries = retries or Config.RETRIES
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()
    
    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create a shared aiohttp session (connection pooling)."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                headers = {"User-Agent": "Memora/1.0"}
                if Config.POLLINATIONS_API_KEY:
                    headers["Authorization"] = f"Bearer {Config.POLLINATIONS_API_KEY}"
                timeout = aiohttp.ClientTimeout(total=Config.IMAGE_TIMEOUT)
                self._session = aiohttp.ClientSession(headers=headers, timeout=timeout)
            return self._session
    
    async def close(self) -> None:
        """Close the aiohttp session. Call this when done with the fetcher."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                self._session = None
    
    async def _save(self, content: bytes, output_path: str) -> None:
        """Atomic write: write to temp file, then rename."""
        temp_path = self.temp_path_for(output_path)
        try:
            os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
            async with aiofiles.open(temp_path, 'wb') as f:
                await f.write(content)
            os.replace(temp_path, output_path)
            temp_path = None
        finally:
            self.discard(temp_path)
    
    async def fetch(self, source: str, output_path: str, size: str = "1024x1024",
                    quality: str = "medium", seed: Optional[int] = None) -> bool:
        """
        Generate an image from prompt text.
        
        Args:
            source: Prompt text for image generation
            output_path: Path to save image
            size: "WIDTHxHEIGHT"
            quality: "high" turns on Pollinations prompt enhancement
            seed: Fixed seed, so that several images of one prompt differ
            
        Returns:
            True if successful, False otherwise
        """
        prompt = str(source).strip()
        if len(prompt) < 3:
            return False
        
        session = await self._get_session()
        url = f"{Config.POLLINATIONS_API_URL}/{urllib.parse.quote(prompt)}"
        params = {
            "model": Config.POLLINATIONS_IMAGE_MODEL,
            "nologo": "true",
            "enhance": "true" if quality == "high" else "false",
            **parse_size(size),
        }
        if seed is not None:
            params["seed"] = str(seed)
        
        for attempt in range(self.retries):
            try:
                async with session.get(url, params=params) as response:
                    if response.status == 200:
                        content = await response.read()
                        if detect_image_format(content) and len(content) > MIN_IMAGE_BYTES:
                            await self._save(content, output_path)
                            return True
                        logger.warning("Invalid image payload: %d bytes, magic %r", len(content), content[:4])
                    elif response.status == 401:
                        logger.error("Image API auth failed (401) - check POLLINATIONS_API_KEY")
                        return False
                    elif response.status == 429:
                        logger.warning("Image API rate limit (429), waiting...")
                        await asyncio.sleep(5 * (2 ** attempt))
                        continue
                    else:
                        logger.warning("Image API error %d", response.status)
            except asyncio.TimeoutError:
                logger.warning("Image API timeout (attempt %d/%d)", attempt + 1, self.retries)
            except aiohttp.ClientError as e:
                logger.warning("Image API request failed: %s", str(e)[:80])
            
            if attempt < self.retries - 1:
                await asyncio.sleep(2 ** attempt)
        
        return False
