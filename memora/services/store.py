"""
Record Store - persistence for flashcard sets and words.

Two fixed collections (sets, words) are kept as JSON arrays under fixed keys
of a key-value backend. The backend is swappable:
- JSONFileStore: a single JSON document on disk (local storage equivalent)
- MemoryStore: in-process dict, for tests and throwaway runs

Writes are read-modify-write of the whole collection and are not
transactional; a single writer at a time is assumed.
"""

import json
import logging
import os
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from ..errors import PersistenceError
from ..models import (
    FlashcardSet,
    Word,
    copy_record,
    decode_set,
    decode_word,
    encode_set,
    encode_word,
    now_iso,
)

logger = logging.getLogger(__name__)

SETS_KEY = "memora_flashcard_sets"
WORDS_KEY = "memora_words"


class BaseKeyValueStore(ABC):
    """
    Abstract string key-value storage.

    Mirrors the browser local storage contract: values are opaque strings.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get value for key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""
        pass


class MemoryStore(BaseKeyValueStore):
    """Dict-backed key-value store."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JSONFileStore(BaseKeyValueStore):
    """
    Key-value store persisted as one JSON document.

    Thread-safe within a process; every write is atomic (temp file + rename).
    """

    def __init__(self, path: str):
        """
        Initialize file store.

        Args:
            path: Path of the JSON document (created on first write)
        """
        self.path = Path(path)
        self._lock = Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read store file {self.path}: {e}")
        if not isinstance(data, dict):
            raise PersistenceError(f"Store file {self.path} is not a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        temp_file = f"{self.path}.{uuid.uuid4().hex[:8]}.tmp"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(temp_file, self.path)
        except OSError as e:
            if os.path.exists(temp_file):
                try:
                    os.remove(temp_file)
                except OSError:
                    pass
            raise PersistenceError(f"Cannot write store file {self.path}: {e}")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            self._write_all(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)


@dataclass(frozen=True)
class StoreChange:
    """Notification emitted after every write."""
    collection: str  # "sets" or "words"
    action: str      # "save", "update" or "delete"
    ids: tuple


ChangeCallback = Callable[[StoreChange], None]


class RecordStore:
    """
    CRUD over flashcard sets and words.

    Usage:
        store = RecordStore(JSONFileStore("data/memora_store.json"))
        unsubscribe = store.on_change(lambda change: print(change))
        store.save_set(flashcard_set)
        store.list_sets(user_id="u1")
    """

    def __init__(self, backend: BaseKeyValueStore):
        """
        Initialize record store.

        Args:
            backend: Key-value storage the collections are written to
        """
        self.backend = backend
        self._subscribers: List[ChangeCallback] = []

    # ==================== Change notifications ====================

    def on_change(self, callback: ChangeCallback) -> Callable[[], None]:
        """
        Register a callback for data changes.

        Args:
            callback: Called with a StoreChange after every write

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify_change(self, collection: str, action: str, ids: List[str]) -> None:
        change = StoreChange(collection=collection, action=action, ids=tuple(ids))
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception("Store change subscriber failed for %s", change)

    # ==================== Raw collections ====================

    def _load_collection(self, key: str) -> List[Dict[str, Any]]:
        raw = self.backend.get(key)
        if raw is None or raw == "":
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise PersistenceError(f"Collection '{key}' is not valid JSON: {e}")
        if not isinstance(data, list):
            raise PersistenceError(f"Collection '{key}' must be a JSON array")
        return data

    def _write_collection(self, key: str, records: List[Dict[str, Any]]) -> None:
        self.backend.set(key, json.dumps(records, ensure_ascii=False))

    def _read_sets(self) -> List[FlashcardSet]:
        return [decode_set(item) for item in self._load_collection(SETS_KEY)]

    def _read_words(self) -> List[Word]:
        return [decode_word(item) for item in self._load_collection(WORDS_KEY)]

    def _write_sets(self, sets: List[FlashcardSet]) -> None:
        self._write_collection(SETS_KEY, [encode_set(s) for s in sets])

    def _write_words(self, words: List[Word]) -> None:
        self._write_collection(WORDS_KEY, [encode_word(w) for w in words])

    # ==================== Sets ====================

    def save_set(self, flashcard_set: FlashcardSet) -> FlashcardSet:
        """
        Insert a set, or overwrite the record with the same id.

        Overwrites stamp updated_at with the current time.

        Returns:
            The record as persisted
        """
        sets = self._read_sets()
        stored = flashcard_set
        for index, existing in enumerate(sets):
            if existing.id == flashcard_set.id:
                stored = copy_record(flashcard_set, updated_at=now_iso())
                sets[index] = stored
                break
        else:
            sets.append(stored)

        self._write_sets(sets)
        self._notify_change("sets", "save", [stored.id])
        return stored

    def list_sets(self, user_id: Optional[str] = None) -> List[FlashcardSet]:
        """All sets in persisted order, optionally only those owned by user_id."""
        sets = self._read_sets()
        if user_id is not None:
            sets = [s for s in sets if s.user_id == user_id]
        return sets

    def get_set(self, set_id: str) -> Optional[FlashcardSet]:
        """Get a set by id."""
        for flashcard_set in self._read_sets():
            if flashcard_set.id == set_id:
                return flashcard_set
        return None

    def delete_set(self, set_id: str) -> int:
        """
        Delete a set and every word that references it.

        The two collections are written separately; a crash in between
        leaves orphaned words behind.

        Returns:
            Number of words removed with the set
        """
        sets = self._read_sets()
        self._write_sets([s for s in sets if s.id != set_id])

        words = self._read_words()
        kept = [w for w in words if w.set_id != set_id]
        removed = [w.id for w in words if w.set_id == set_id]
        self._write_words(kept)

        self._notify_change("sets", "delete", [set_id])
        if removed:
            self._notify_change("words", "delete", removed)
        logger.debug("Deleted set %s with %d words", set_id, len(removed))
        return len(removed)

    # ==================== Words ====================

    def save_words(self, words: List[Word]) -> None:
        """Upsert each word by id."""
        existing = self._read_words()
        index_by_id = {w.id: i for i, w in enumerate(existing)}

        for word in words:
            if word.id in index_by_id:
                existing[index_by_id[word.id]] = word
            else:
                index_by_id[word.id] = len(existing)
                existing.append(word)

        self._write_words(existing)
        self._notify_change("words", "save", [w.id for w in words])

    def list_words(self, set_id: Optional[str] = None) -> List[Word]:
        """All words, optionally only those of one set."""
        words = self._read_words()
        if set_id is not None:
            words = [w for w in words if w.set_id == set_id]
        return words

    def get_word(self, word_id: str) -> Optional[Word]:
        """Get a word by id."""
        for word in self._read_words():
            if word.id == word_id:
                return word
        return None

    def update_word(self, word: Word) -> bool:
        """
        Overwrite an existing word.

        Returns:
            False (and writes nothing) when no word has this id
        """
        words = self._read_words()
        for index, existing in enumerate(words):
            if existing.id == word.id:
                words[index] = word
                self._write_words(words)
                self._notify_change("words", "update", [word.id])
                return True
        return False

    def delete_word(self, word_id: str) -> bool:
        """Delete a word by id. Returns True if something was removed."""
        words = self._read_words()
        kept = [w for w in words if w.id != word_id]
        if len(kept) == len(words):
            return False
        self._write_words(kept)
        self._notify_change("words", "delete", [word_id])
        return True

    def refresh_word_count(self, set_id: str) -> Optional[FlashcardSet]:
        """
        Recompute a set's word count from the words collection.

        Returns:
            Updated set, or None if the set does not exist
        """
        flashcard_set = self.get_set(set_id)
        if flashcard_set is None:
            return None
        count = len(self.list_words(set_id))
        return self.save_set(copy_record(flashcard_set, word_count=count))
