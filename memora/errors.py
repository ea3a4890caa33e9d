"""Exception hierarchy shared by the services layer.

Every error carries a short ``title`` and a human-readable ``description`` so
that the front end can report any failure through one notification channel.
"""

from typing import Optional


class MemoraError(Exception):
    """Base class for all application errors."""

    title: str = "Something went wrong"

    def __init__(self, description: str, title: Optional[str] = None):
        super().__init__(description)
        self.description = description
        if title:
            self.title = title


class ValidationError(MemoraError):
    """Required input is missing or invalid. Raised before any side effect."""

    title = "Missing Information"


class UnsupportedFormatError(MemoraError):
    """Uploaded file type is not CSV or a raster image."""

    title = "Upload Failed"


class ExtractionError(MemoraError):
    """The vision service could not turn an image into text."""

    title = "Upload Failed"


class EmptyResultError(MemoraError):
    """Ingestion finished but produced no words."""

    title = "Upload Failed"


class NotFoundError(MemoraError):
    """A referenced set or word does not exist."""

    title = "Not Found"


class AuthenticationError(MemoraError):
    """No user is signed in."""

    title = "Not Signed In"


class AIServiceError(MemoraError):
    """A remote AI provider returned an error or timed out."""

    title = "AI Service Error"


class PersistenceError(MemoraError):
    """The record store could not be read or written."""

    title = "Storage Error"


class RecordDecodeError(PersistenceError):
    """A persisted record does not match its schema."""

    def __init__(self, collection: str, field: str, reason: str):
        super().__init__(f"Invalid record in '{collection}': field '{field}' {reason}")
        self.collection = collection
        self.field = field
        self.reason = reason
