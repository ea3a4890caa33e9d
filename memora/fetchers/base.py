"""Base fetcher class."""

import os
import uuid
from abc import ABC, abstractmethod


class BaseFetcher(ABC):
    """
    Abstract base class for media fetchers.
    
    A fetcher turns a source (text to speak, prompt to draw) into a file.
    Subclasses implement fetch() and optionally override close().
    """
    
    @abstractmethod
    async def fetch(self, source: str, output_path: str, **options) -> bool:
        """
        Fetch resource and save to path.
        
        Args:
            source: Text or prompt to process
            output_path: Path where to save the result
            **options: Fetcher-specific options (voice, size, ...)
            
        Returns:
            True if successful, False otherwise
        """
        pass
    
    async def close(self) -> None:
        """Close any open resources (sessions, connections, etc.)."""
        pass
    
    async def __aenter__(self) -> "BaseFetcher":
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
    
    @staticmethod
    def temp_path_for(output_path: str) -> str:
        """Unique sibling path for atomic writes."""
        return f"{output_path}.{uuid.uuid4().hex[:8]}.tmp"
    
    @staticmethod
    def discard(path: str) -> None:
        """Remove a leftover temp file, ignoring errors."""
        if path and os.path.exists(path):
            try:
                os.remove(path)
            except OSError:
                pass
