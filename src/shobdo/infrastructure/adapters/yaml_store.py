"""
YAML ReviewStore — Infrastructure adapter for a single local data file.

The document mirrors the three backend tables:

    words:            [{id, user_id, english_word, ...}]
    review_schedule:  [{id, word_id, user_id, next_review_date, ...}]
    daily_progress:   [{user_id, date, words_reviewed, ...}]

Every call re-reads the file, and rows that cannot be decoded raise
StoreError. Writes go through a temp file that is renamed over the original
so a crash never leaves a half-written document.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from shobdo.application.scheduler import is_due
from shobdo.domain.errors import StoreError
from shobdo.domain.models import DailyProgress, DueWord, ReviewState, Word
from shobdo.domain.ports import ReviewStore

from .rows import (
    decoding,
    progress_from_row,
    progress_to_row,
    state_from_row,
    state_to_row,
    word_from_row,
    word_to_row,
)

logger = logging.getLogger(__name__)

TABLES = ("words", "review_schedule", "daily_progress")


class YamlReviewStore(ReviewStore):
    def __init__(self, path: Path):
        self.path = Path(path)

    # ------------------------------------------------------------------
    # File I/O
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, list[dict[str, Any]]]:
        if not self.path.exists():
            return {table: [] for table in TABLES}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"{self.path} does not contain a mapping")
        return {table: list(data.get(table) or []) for table in TABLES}

    def _dump(self, data: dict[str, list[dict[str, Any]]]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(
                yaml.safe_dump(data, allow_unicode=True, sort_keys=False),
                encoding="utf-8",
            )
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Could not write {self.path}: {e}") from e

    # ------------------------------------------------------------------
    # ReviewStore
    # ------------------------------------------------------------------

    async def load_due_words(self, user_id: str, as_of: date) -> list[DueWord]:
        data = self._load()
        due: list[tuple[str, DueWord]] = []
        with decoding(str(self.path)):
            words = {w["id"]: w for w in data["words"] if w.get("user_id") == user_id}
            for row in data["review_schedule"]:
                word_row = words.get(row.get("word_id"))
                if word_row is None:
                    continue
                state = state_from_row(row)
                if is_due(state.next_review_date, as_of):
                    due_word = DueWord(
                        word=word_from_row(word_row), schedule_id=str(row["id"]), state=state
                    )
                    due.append((str(word_row.get("created_at") or ""), due_word))

        due.sort(key=lambda pair: pair[0])
        return [d for _, d in due]

    async def save_review_state(self, schedule_id: str, state: ReviewState) -> None:
        data = self._load()
        with decoding(str(self.path)):
            row = next((r for r in data["review_schedule"] if r.get("id") == schedule_id), None)
        if row is None:
            raise StoreError(f"Unknown schedule id: {schedule_id}")
        row.update(state_to_row(state))
        self._dump(data)

    async def update_word_difficulty(self, word_id: str, difficulty: str) -> None:
        data = self._load()
        with decoding(str(self.path)):
            row = next((r for r in data["words"] if r.get("id") == word_id), None)
        if row is None:
            raise StoreError(f"Unknown word id: {word_id}")
        row["difficulty"] = difficulty
        self._dump(data)

    async def get_daily_progress(self, user_id: str, day: date) -> DailyProgress | None:
        with decoding(str(self.path)):
            for record in self._user_progress(self._load(), user_id):
                if record.date == day:
                    return record
        return None

    async def save_daily_progress(self, user_id: str, progress: DailyProgress) -> None:
        data = self._load()
        new_row = progress_to_row(progress, user_id)
        rows = data["daily_progress"]
        with decoding(str(self.path)):
            for i, row in enumerate(rows):
                if row.get("user_id") == user_id and progress_from_row(row).date == progress.date:
                    rows[i] = new_row
                    break
            else:
                rows.append(new_row)
        self._dump(data)

    async def list_daily_progress(self, user_id: str, limit: int) -> list[DailyProgress]:
        with decoding(str(self.path)):
            records = self._user_progress(self._load(), user_id)
        records.sort(key=lambda p: p.date, reverse=True)
        return records[:limit]

    async def list_words(self, user_id: str) -> list[Word]:
        with decoding(str(self.path)):
            rows = [w for w in self._load()["words"] if w.get("user_id") == user_id]
            rows.sort(key=lambda w: str(w.get("created_at") or ""), reverse=True)
            return [word_from_row(w) for w in rows]

    async def add_word(self, user_id: str, word: Word, state: ReviewState) -> str:
        data = self._load()
        schedule_id = f"sched_{word.id}"
        data["words"].append(word_to_row(word, user_id))
        data["review_schedule"].append(
            {"id": schedule_id, "word_id": word.id, "user_id": user_id, **state_to_row(state)}
        )
        self._dump(data)
        logger.debug(f"Stored {word.id} in {self.path}")
        return schedule_id

    @staticmethod
    def _user_progress(data: dict[str, list[dict[str, Any]]], user_id: str) -> list[DailyProgress]:
        return [progress_from_row(r) for r in data["daily_progress"] if r.get("user_id") == user_id]
