"""Text cleanup shared by ingestion, the definition source and speech synthesis."""

import html
import re
import unicodedata
from typing import List


class TextParser:
    """
    Stateless text helpers.

    Uploaded words, model answers and speech input all pass through here so
    that the same word always ends up with the same code points.
    """

    TAG_PATTERN = re.compile(r'<[^>]+>')
    SPACES_PATTERN = re.compile(r'\s+')

    # ```json ... ``` wrapper that chat models like to add
    CODE_FENCE_PATTERN = re.compile(r'^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$', re.DOTALL)

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Compose text to NFC.

        "é" typed on one keyboard and "e" + combining accent from a photo
        OCR must compare equal.
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def split_lines(cls, text: str) -> List[str]:
        """Split text on any newline flavour, trimming each line and dropping blanks."""
        if not text:
            return []
        text = cls.normalize_unicode(text)
        return [line.strip() for line in text.splitlines() if line.strip()]

    @classmethod
    def strip_code_fences(cls, text: str) -> str:
        """Remove a surrounding Markdown code fence, if any."""
        if not text:
            return ""
        match = cls.CODE_FENCE_PATTERN.match(text)
        return match.group(1).strip() if match else text.strip()

    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """Plain single-spaced text for the speech engine (entities decoded, tags dropped)."""
        if not text:
            return ""
        text = cls.TAG_PATTERN.sub('', html.unescape(str(text)))
        text = cls.SPACES_PATTERN.sub(' ', text).strip()
        return cls.normalize_unicode(text)
