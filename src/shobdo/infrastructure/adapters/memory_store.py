"""
In-memory ReviewStore — process-local dictionaries.

Useful for tests and throwaway sessions; nothing survives the process.
"""

import logging
from dataclasses import replace
from datetime import date

from shobdo.application.scheduler import is_due
from shobdo.domain.errors import StoreError
from shobdo.domain.models import DailyProgress, DueWord, ReviewState, Word
from shobdo.domain.ports import ReviewStore

logger = logging.getLogger(__name__)


def _created_key(word: Word) -> float:
    return word.created_at.timestamp() if word.created_at else float("-inf")


class InMemoryReviewStore(ReviewStore):
    def __init__(self):
        self.words: dict[str, tuple[str, Word]] = {}  # word_id -> (user_id, word)
        self.schedules: dict[str, tuple[str, ReviewState]] = {}  # schedule_id -> (word_id, state)
        self.progress: dict[tuple[str, date], DailyProgress] = {}
        self.writes: list[tuple[str, str]] = []  # (operation, key), in call order

    async def load_due_words(self, user_id: str, as_of: date) -> list[DueWord]:
        due: list[DueWord] = []
        for schedule_id, (word_id, state) in self.schedules.items():
            owner, word = self.words[word_id]
            if owner == user_id and is_due(state.next_review_date, as_of):
                due.append(DueWord(word=replace(word), schedule_id=schedule_id, state=state))
        due.sort(key=lambda d: _created_key(d.word))
        return due

    async def save_review_state(self, schedule_id: str, state: ReviewState) -> None:
        if schedule_id not in self.schedules:
            raise StoreError(f"Unknown schedule id: {schedule_id}")
        word_id, _ = self.schedules[schedule_id]
        self.schedules[schedule_id] = (word_id, state)
        self.writes.append(("review_state", schedule_id))

    async def update_word_difficulty(self, word_id: str, difficulty: str) -> None:
        if word_id not in self.words:
            raise StoreError(f"Unknown word id: {word_id}")
        owner, word = self.words[word_id]
        self.words[word_id] = (owner, replace(word, difficulty=difficulty))
        self.writes.append(("difficulty", word_id))

    async def get_daily_progress(self, user_id: str, day: date) -> DailyProgress | None:
        return self.progress.get((user_id, day))

    async def save_daily_progress(self, user_id: str, progress: DailyProgress) -> None:
        self.progress[(user_id, progress.date)] = progress
        self.writes.append(("daily_progress", progress.date.isoformat()))

    async def list_daily_progress(self, user_id: str, limit: int) -> list[DailyProgress]:
        records = [p for (owner, _), p in self.progress.items() if owner == user_id]
        records.sort(key=lambda p: p.date, reverse=True)
        return records[:limit]

    async def list_words(self, user_id: str) -> list[Word]:
        words = [w for owner, w in self.words.values() if owner == user_id]
        words.sort(key=_created_key, reverse=True)
        return words

    async def add_word(self, user_id: str, word: Word, state: ReviewState) -> str:
        schedule_id = f"sched_{word.id}"
        self.words[word.id] = (user_id, word)
        self.schedules[schedule_id] = (word.id, state)
        logger.debug(f"Stored {word.id} with schedule {schedule_id}")
        return schedule_id
