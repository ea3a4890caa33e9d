"""Global settings and configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# .env is looked up from the working directory, not the install location
load_dotenv(find_dotenv(usecwd=True))


def data_dir() -> Path:
    """Where user data lives: $MEMORA_HOME, else ~/.memora."""
    return Path(os.environ.get("MEMORA_HOME") or Path.home() / ".memora")


@dataclass
class Config:
    """Application-wide configuration."""
    
    # Definitions are looked up in the public dictionary for this language only
    DEFAULT_LANGUAGE: str = os.environ.get("MEMORA_DEFAULT_LANGUAGE", "en")
    DICTIONARY_API_URL: str = "https://api.dictionaryapi.dev/api/v2/entries"
    
    # AI text / vision provider (openai, anthropic, ollama, groq)
    AI_PROVIDER: str = os.environ.get("AI_PROVIDER", "openai")
    AI_MODEL: str = os.environ.get("AI_MODEL", "")
    AI_BASE_URL: str = os.environ.get("AI_BASE_URL", "")
    
    # Pollinations API Configuration
    # Get your API key from https://enter.pollinations.ai/
    # Store in environment variable or .env file: POLLINATIONS_API_KEY
    POLLINATIONS_API_KEY: str = os.environ.get("POLLINATIONS_API_KEY", "")
    POLLINATIONS_API_URL: str = "https://gen.pollinations.ai/image"
    POLLINATIONS_IMAGE_MODEL: str = os.environ.get("POLLINATIONS_IMAGE_MODEL", "flux")
    
    # Local profile used by the CLI identity provider
    USER_ID: str = os.environ.get("MEMORA_USER_ID", "local")
    USER_EMAIL: str = os.environ.get("MEMORA_USER_EMAIL", "local@memora.app")
    USER_NAME: str = os.environ.get("MEMORA_USER_NAME", "")
    
    # Network
    RETRIES: int = 3
    TIMEOUT: int = 30
    IMAGE_TIMEOUT: int = 90
    
    # User data, outside the install tree
    DATA_DIR: Path = data_dir()
    
    STORE_FILE: str = os.environ.get("MEMORA_STORE_FILE", str(DATA_DIR / "memora_store.json"))
    MEDIA_DIR: str = os.environ.get("MEMORA_MEDIA_DIR", str(DATA_DIR / "media"))
    LOG_FILE: str = os.environ.get("MEMORA_LOG_FILE", str(DATA_DIR / "memora.log"))
