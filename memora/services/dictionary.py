"""
Definition Source - dictionary lookup with an AI fallback.

English definitions come from the Free Dictionary API when it knows the
word; every other case asks the AI text generator for a JSON record.
"""

import asyncio
import json
import logging
import urllib.parse
from typing import Any, Dict, Optional

import aiohttp

from ..config import Config
from ..errors import AIServiceError
from ..models import DefinitionResult
from ..utils.parsing import TextParser
from .ai_service import AIService

logger = logging.getLogger(__name__)

DEFINITION_PROMPT = (
    'Provide a definition, pronunciation (IPA), part of speech, and example sentence '
    'for the {target} word "{word}" in {definition}. Format as JSON: '
    '{{"definition": "...", "pronunciation": "...", "partOfSpeech": "...", "example": "..."}}'
)


def fallback_definition(word: str) -> str:
    """Placeholder used whenever no definition could be obtained."""
    return f'Definition for "{word}"'


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def parse_dictionary_entry(word: str, payload: Any) -> DefinitionResult:
    """
    Pick the first meaning of a Free Dictionary API answer.

    Raises:
        ValueError: payload does not look like a dictionary answer
    """
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        raise ValueError("unexpected dictionary payload")
    entry = payload[0]

    pronunciation = _text(entry.get("phonetic"))
    if pronunciation is None:
        for phonetic in entry.get("phonetics") or []:
            if isinstance(phonetic, dict) and _text(phonetic.get("text")):
                pronunciation = _text(phonetic.get("text"))
                break

    meanings = entry.get("meanings") or []
    meaning: Dict[str, Any] = meanings[0] if meanings and isinstance(meanings[0], dict) else {}
    definitions = meaning.get("definitions") or []
    first: Dict[str, Any] = definitions[0] if definitions and isinstance(definitions[0], dict) else {}

    return DefinitionResult(
        definition=_text(first.get("definition")) or fallback_definition(word),
        pronunciation=pronunciation,
        part_of_speech=_text(meaning.get("partOfSpeech")),
        example=_text(first.get("example")),
    )


def parse_ai_definition(word: str, text: str) -> DefinitionResult:
    """
    Interpret the AI answer to DEFINITION_PROMPT.

    A JSON object maps onto the record; anything else becomes the
    definition text as-is.
    """
    cleaned = TextParser.strip_code_fences(text or "")
    try:
        parsed = json.loads(cleaned)
    except ValueError:
        parsed = None

    if isinstance(parsed, dict):
        return DefinitionResult(
            definition=_text(parsed.get("definition")) or fallback_definition(word),
            pronunciation=_text(parsed.get("pronunciation")),
            part_of_speech=_text(parsed.get("partOfSpeech")),
            example=_text(parsed.get("example")),
        )

    return DefinitionResult(definition=(text or "").strip() or fallback_definition(word))


class DefinitionSource:
    """
    Two-tier definition lookup.

    Usage:
        source = DefinitionSource(ai_service)
        result = await source.lookup("casa", "es", "en")
    """

    def __init__(
        self,
        ai_service: AIService,
        default_language: Optional[str] = None,
        api_url: Optional[str] = None
    ):
        """
        Initialize definition source.

        Args:
            ai_service: Text generator used for the fallback
            default_language: Definition language the dictionary serves
            api_url: Dictionary API base URL
        """
        self.ai_service = ai_service
        self.default_language = default_language or Config.DEFAULT_LANGUAGE
        self.api_url = api_url or Config.DICTIONARY_API_URL
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=Config.TIMEOUT)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "DefinitionSource":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def lookup_dictionary(self, word: str) -> Optional[DefinitionResult]:
        """
        Query the Free Dictionary API.

        Returns:
            Parsed entry, or None when the word is unknown or the call failed
        """
        url = f"{self.api_url}/{self.default_language}/{urllib.parse.quote(word)}"
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    logger.debug("Dictionary has no entry for %r (%d)", word, response.status)
                    return None
                payload = await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning("Dictionary lookup failed for %r: %s", word, e)
            return None

        try:
            return parse_dictionary_entry(word, payload)
        except ValueError as e:
            logger.warning("Dictionary answer for %r unusable: %s", word, e)
            return None

    async def lookup_ai(self, word: str, target_language: str, definition_language: str) -> DefinitionResult:
        """
        Ask the AI text generator for a structured definition.

        Raises:
            AIServiceError: the generator failed
        """
        prompt = DEFINITION_PROMPT.format(target=target_language, word=word, definition=definition_language)
        text = await self.ai_service.generate_text(prompt, max_tokens=200)
        return parse_ai_definition(word, text)

    async def lookup(self, word: str, target_language: str, definition_language: str) -> DefinitionResult:
        """
        Resolve a definition, never raising for remote failures.

        Args:
            word: Surface form to define
            target_language: Language of the word
            definition_language: Language the definition should be written in

        Returns:
            Definition record; the placeholder definition when nothing worked
        """
        if definition_language == self.default_language:
            result = await self.lookup_dictionary(word)
            if result is not None:
                return result

        try:
            return await self.lookup_ai(word, target_language, definition_language)
        except AIServiceError as e:
            logger.warning("AI definition failed for %r: %s", word, e.description)
            return DefinitionResult(definition=fallback_definition(word))
