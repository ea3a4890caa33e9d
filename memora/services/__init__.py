"""Services layer for business logic separation."""

from .store import BaseKeyValueStore, JSONFileStore, MemoryStore, RecordStore, StoreChange
from .ai_service import AIService, AIProvider, AIConfig, ImageInput, create_ai_service
from .media_service import MediaService
from .dictionary import DefinitionSource, fallback_definition
from .ingestion import FileKind, detect_file_kind, ingest_file, parse_csv, split_csv_line
from .enrichment import WordEnricher
from .auth import AuthState, IdentityProvider, LocalIdentityProvider, User
from .vocabulary_service import UploadResult, VocabularyService, default_set_name
from .study_service import StudyService, StudySession

__all__ = [
    "BaseKeyValueStore",
    "JSONFileStore",
    "MemoryStore",
    "RecordStore",
    "StoreChange",
    "AIService",
    "AIProvider",
    "AIConfig",
    "ImageInput",
    "create_ai_service",
    "MediaService",
    "DefinitionSource",
    "fallback_definition",
    "FileKind",
    "detect_file_kind",
    "ingest_file",
    "parse_csv",
    "split_csv_line",
    "WordEnricher",
    "AuthState",
    "IdentityProvider",
    "LocalIdentityProvider",
    "User",
    "UploadResult",
    "VocabularyService",
    "default_set_name",
    "StudyService",
    "StudySession",
]
