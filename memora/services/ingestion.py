"""
File Ingestion - turn uploaded files into raw word entries.

Two paths:
- CSV: word, optional definition, optional context per line
- Image: a vision model reads the picture and returns one word per line
"""

import base64
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import List, Optional

import aiofiles

from ..errors import AIServiceError, ExtractionError, UnsupportedFormatError
from ..models import UploadedWord
from ..utils.parsing import TextParser
from .ai_service import AIService, ImageInput

logger = logging.getLogger(__name__)

IMAGE_INSTRUCTION = (
    "Extract all words from this image. Return them as a simple list, one word per line. "
    "Only return the words, no other text."
)

CSV_EXTENSIONS = {".csv"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
SPREADSHEET_EXTENSIONS = {".xlsx", ".xls", ".ods"}


class FileKind(Enum):
    """How an uploaded file is ingested."""
    CSV = "csv"
    IMAGE = "image"


def detect_file_kind(path: str) -> FileKind:
    """
    Classify an upload by extension, then by guessed MIME type.

    Raises:
        UnsupportedFormatError: neither CSV nor a raster image
    """
    suffix = Path(path).suffix.lower()
    if suffix in SPREADSHEET_EXTENSIONS:
        raise UnsupportedFormatError("Excel files not yet supported. Please use CSV format.")
    if suffix in CSV_EXTENSIONS:
        return FileKind.CSV
    if suffix in IMAGE_EXTENSIONS:
        return FileKind.IMAGE

    mime, _ = mimetypes.guess_type(path)
    if mime == "text/csv":
        return FileKind.CSV
    if mime and mime.startswith("image/") and mime != "image/svg+xml":
        return FileKind.IMAGE

    raise UnsupportedFormatError("Unsupported file format. Please use CSV or image files.")


# ==================== CSV ====================

def split_csv_line(line: str) -> List[str]:
    """
    Split one CSV line on commas outside double quotes.

    A double quote toggles the quoted state and is consumed, which strips the
    surrounding quotes of a field. Escaped quotes ("") are not supported.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))

    return fields


def _optional(columns: List[str], index: int) -> Optional[str]:
    if index < len(columns):
        value = TextParser.normalize_unicode(columns[index].strip())
        return value or None
    return None


def parse_csv(content: str) -> List[UploadedWord]:
    """
    Parse CSV text into raw word entries.

    Column 0 is the word (required), column 1 an optional definition and
    column 2 optional context. Lines with an empty word are dropped.
    """
    words: List[UploadedWord] = []
    for line in content.split("\n"):
        line = line.strip()
        if not line:
            continue

        columns = split_csv_line(line)
        word = TextParser.normalize_unicode(columns[0].strip())
        if not word:
            continue

        words.append(UploadedWord(
            word=word,
            definition=_optional(columns, 1),
            context=_optional(columns, 2),
        ))
    return words


async def parse_spreadsheet_file(path: str) -> List[UploadedWord]:
    """
    Read and parse a spreadsheet upload. Only CSV is supported.

    Raises:
        UnsupportedFormatError: Excel/ODS or any non-CSV file
    """
    suffix = Path(path).suffix.lower()
    if suffix in SPREADSHEET_EXTENSIONS:
        raise UnsupportedFormatError("Excel files not yet supported. Please use CSV format.")
    if suffix not in CSV_EXTENSIONS:
        raise UnsupportedFormatError(f"'{suffix or path}' is not a CSV file.")

    async with aiofiles.open(path, "r", encoding="utf-8-sig") as f:
        content = await f.read()

    words = parse_csv(content)
    logger.info("Parsed %d words from %s", len(words), Path(path).name)
    return words


# ==================== Images ====================

def extract_words_from_text(text: str) -> List[UploadedWord]:
    """
    Turn vision output into raw words.

    Lines containing a space are phrases and are dropped.
    """
    return [UploadedWord(word=line) for line in TextParser.split_lines(text) if " " not in line]


async def extract_words_from_image(path: str, ai_service: AIService) -> List[UploadedWord]:
    """
    Read words from a photo with the vision model.

    An empty list means the model answered but found nothing usable.

    Raises:
        ExtractionError: the file could not be read or the model call failed
    """
    media_type = mimetypes.guess_type(path)[0] or "image/jpeg"
    try:
        async with aiofiles.open(path, "rb") as f:
            raw = await f.read()
        image = ImageInput(data=base64.b64encode(raw).decode("ascii"), media_type=media_type)
        text = await ai_service.extract_text_from_image(image, IMAGE_INSTRUCTION)
    except (OSError, AIServiceError) as e:
        logger.error("Error extracting text from image %s: %s", path, e)
        raise ExtractionError("Failed to extract text from image") from e

    words = extract_words_from_text(text)
    logger.info("Extracted %d words from %s", len(words), Path(path).name)
    return words


async def ingest_file(path: str, ai_service: AIService) -> List[UploadedWord]:
    """Dispatch an upload to the CSV or image path."""
    kind = detect_file_kind(path)
    if kind is FileKind.CSV:
        return await parse_spreadsheet_file(path)
    return await extract_words_from_image(path, ai_service)
