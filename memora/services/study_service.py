"""
Study Service - flip-card sessions and learning statistics.
"""

import logging
import random
from typing import Any, Dict, List, Optional

import pandas as pd

from ..errors import NotFoundError, ValidationError
from ..models import Difficulty, Word, copy_record, now_iso
from .store import RecordStore

logger = logging.getLogger(__name__)


class StudySession:
    """
    State of one pass through a list of cards.

    The card is shown word-side first; flip() reveals the definition and
    answer() moves on to the next card.
    """

    def __init__(self, words: List[Word]):
        if not words:
            raise ValidationError("This set has no words to study yet.")
        self.words = list(words)
        self.index = 0
        self.is_flipped = False
        self.correct_count = 0
        self.answered_count = 0

    @property
    def total(self) -> int:
        return len(self.words)

    @property
    def is_complete(self) -> bool:
        return self.answered_count >= self.total

    @property
    def current(self) -> Optional[Word]:
        if self.is_complete:
            return None
        return self.words[self.index]

    @property
    def progress(self) -> float:
        """Position of the current card as a percentage."""
        return min(self.index + 1, self.total) / self.total * 100

    def flip(self) -> None:
        self.is_flipped = not self.is_flipped

    def answer(self, correct: bool) -> Word:
        """
        Record an answer for the current card and advance.

        Returns:
            The card that was answered
        """
        word = self.current
        if word is None:
            raise ValidationError("The study session is already complete.")

        self.answered_count += 1
        if correct:
            self.correct_count += 1
        if self.index < self.total - 1:
            self.index += 1
        self.is_flipped = False
        return word


class StudyService:
    """
    Study workflow over the record store.

    Usage:
        study = StudyService(store)
        session = study.start_session(set_id, shuffle=True)
        word = session.answer(True)
        study.record_answer(word.id, True)
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def start_session(self, set_id: str, shuffle: bool = False) -> StudySession:
        """Open a session over a set's words."""
        words = self.store.list_words(set_id)
        if shuffle:
            random.shuffle(words)
        return StudySession(words)

    def _get_word(self, word_id: str) -> Word:
        word = self.store.get_word(word_id)
        if word is None:
            raise NotFoundError(f"Word {word_id} not found.")
        return word

    def record_answer(self, word_id: str, correct: bool) -> Word:
        """Bump the word's correct or incorrect counter and stamp last_studied."""
        word = self._get_word(word_id)
        if correct:
            updated = copy_record(word, correct_count=word.correct_count + 1, last_studied=now_iso())
        else:
            updated = copy_record(word, incorrect_count=word.incorrect_count + 1, last_studied=now_iso())
        self.store.update_word(updated)
        return updated

    def set_difficulty(self, word_id: str, difficulty: Difficulty) -> Word:
        """Change a word's difficulty tag."""
        updated = copy_record(self._get_word(word_id), difficulty=difficulty)
        self.store.update_word(updated)
        return updated

    def get_statistics(
        self,
        set_id: Optional[str] = None,
        set_ids: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Learning statistics, optionally limited to one set or a group of sets.

        Args:
            set_id: Single set to report on
            set_ids: Restrict to these sets (e.g. every set a user owns)

        Returns:
            Dictionary with totals, accuracy (percent) and per-difficulty counts
        """
        words = self.store.list_words(set_id)
        if set_ids is not None:
            allowed = set(set_ids)
            words = [w for w in words if w.set_id in allowed]
        stats: Dict[str, Any] = {
            "total_words": len(words),
            "studied_words": 0,
            "correct": 0,
            "incorrect": 0,
            "accuracy": 0.0,
            "by_difficulty": {d.value: 0 for d in Difficulty},
        }
        if not words:
            return stats

        df = pd.DataFrame([
            {
                "difficulty": w.difficulty.value,
                "correct": w.correct_count,
                "incorrect": w.incorrect_count,
                "studied": w.last_studied is not None,
            }
            for w in words
        ])

        correct = int(df["correct"].sum())
        incorrect = int(df["incorrect"].sum())
        attempts = correct + incorrect

        stats["studied_words"] = int(df["studied"].sum())
        stats["correct"] = correct
        stats["incorrect"] = incorrect
        stats["accuracy"] = round(correct / attempts * 100, 1) if attempts else 0.0
        for difficulty, count in df["difficulty"].value_counts().items():
            stats["by_difficulty"][difficulty] = int(count)
        return stats
