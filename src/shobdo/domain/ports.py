"""
Ports (interfaces) for schedule persistence.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date

from .models import DailyProgress, DueWord, ReviewState, Word


class ReviewStore(ABC):
    """
    Port for reading and writing words, schedules and daily progress.

    Implementations:
        - InMemoryReviewStore: Process-local dictionaries.
        - YamlReviewStore: A single YAML document on disk.
        - PostgrestReviewStore: A PostgREST (Supabase) endpoint over HTTP.

    Adapters raise StoreError when the backing store cannot be reached or
    rejects a write.
    """

    @abstractmethod
    async def load_due_words(self, user_id: str, as_of: date) -> list[DueWord]:
        """
        Fetch every word whose schedule is due on or before ``as_of``.

        Returns:
            DueWord objects ordered by word creation time, oldest first.
        """
        pass

    @abstractmethod
    async def save_review_state(self, schedule_id: str, state: ReviewState) -> None:
        """Overwrite the schedule row with the given state."""
        pass

    @abstractmethod
    async def update_word_difficulty(self, word_id: str, difficulty: str) -> None:
        """Store the learner's latest difficulty label for a word."""
        pass

    @abstractmethod
    async def get_daily_progress(self, user_id: str, day: date) -> DailyProgress | None:
        pass

    @abstractmethod
    async def save_daily_progress(self, user_id: str, progress: DailyProgress) -> None:
        """Insert or replace the record for ``progress.date``."""
        pass

    @abstractmethod
    async def list_daily_progress(self, user_id: str, limit: int) -> list[DailyProgress]:
        """
        Fetch the most recent progress records.

        Returns:
            At most ``limit`` records, newest date first.
        """
        pass

    @abstractmethod
    async def list_words(self, user_id: str) -> list[Word]:
        """Fetch all of a user's words, newest first."""
        pass

    @abstractmethod
    async def add_word(self, user_id: str, word: Word, state: ReviewState) -> str:
        """
        Store a new word together with its initial schedule.

        Returns:
            The id of the created schedule row.
        """
        pass

    async def aclose(self) -> None:
        """Release connections held by the adapter. No-op by default."""
        return None
