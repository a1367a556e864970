"""
Learning session orchestrator.

Walks a learner through their due words one card at a time:

    LOADING -> IN_PROGRESS -> COMPLETED
            \\-> EMPTY

Persistence failures while rating are reported as notices and never block
the session; rewriting a schedule row later is always safe.
"""

import logging
from collections.abc import Callable
from datetime import date, datetime, timezone
from enum import Enum

from shobdo.domain.constants import DEFAULT_DIFFICULTY
from shobdo.domain.errors import SessionStateError, StoreError
from shobdo.domain.models import DIFFICULTIES, DailyProgress, DueWord, ReviewResult, SessionStats
from shobdo.domain.ports import ReviewStore

from .progress import ProgressService
from .scheduler import compute_next_review, difficulty_to_quality

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    EMPTY = "empty"
    COMPLETED = "completed"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class LearningSession:
    """
    One pass through a learner's due-word queue.

    The queue is fixed at ``start()``; replaying it means starting a new
    session. Each ``rate()`` awaits its writes before advancing, so a session
    never has more than one update in flight.
    """

    def __init__(
        self,
        store: ReviewStore,
        user_id: str,
        *,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = _utc_now,
        progress: ProgressService | None = None,
    ):
        """
        Args:
            store: The persistence port.
            user_id: Learner whose queue is loaded.
            today: Returns the session's calendar day.
            now: Returns the timestamp stored as ``last_reviewed_at``.
            progress: Optional custom progress service; built from ``store`` if omitted.
        """
        self._store = store
        self._user_id = user_id
        self._today = today
        self._now = now
        self._progress = progress or ProgressService(store)

        self.phase = SessionPhase.LOADING
        self.words: list[DueWord] = []
        self.current_index = 0
        self.show_answer = False
        self.stats = SessionStats()
        self.notices: list[str] = []
        self.daily_progress: DailyProgress | None = None

    @property
    def current_word(self) -> DueWord | None:
        if self.phase is not SessionPhase.IN_PROGRESS:
            return None
        return self.words[self.current_index]

    @property
    def total_reviewed(self) -> int:
        return self.stats.total

    async def start(self) -> SessionPhase:
        """
        Load the due set and enter IN_PROGRESS or EMPTY.

        Raises:
            SessionStateError: If the session was already started.
            StoreError: If the due words cannot be loaded.
        """
        if self.phase is not SessionPhase.LOADING:
            raise SessionStateError(f"Session already started (phase={self.phase.value})")

        self.words = await self._store.load_due_words(self._user_id, self._today())
        if not self.words:
            logger.info(f"No due words for {self._user_id}")
            self.phase = SessionPhase.EMPTY
        else:
            logger.info(f"Session started for {self._user_id} with {len(self.words)} due words")
            self.phase = SessionPhase.IN_PROGRESS
        return self.phase

    def flip(self) -> bool:
        """Toggle between the front and back of the current card."""
        self._require_in_progress("flip")
        self.show_answer = not self.show_answer
        return self.show_answer

    async def rate(self, difficulty: str) -> ReviewResult:
        """
        Score the current card, persist the new schedule and advance.

        Returns:
            The ReviewResult computed for the rated card.
        """
        self._require_in_progress("rate")
        due = self.words[self.current_index]

        quality = difficulty_to_quality(difficulty)
        # Unknown labels score as medium and are stored as medium.
        label = difficulty if difficulty in DIFFICULTIES else DEFAULT_DIFFICULTY
        result = compute_next_review(quality, due.state, self._today())
        new_state = result.to_state(reviewed_at=self._now())

        try:
            await self._store.save_review_state(due.schedule_id, new_state)
            due.state = new_state
        except StoreError as e:
            logger.warning(f"Failed to save schedule for '{due.word.english_word}': {e}")
            self.notices.append(f"Could not save the schedule for '{due.word.english_word}'.")

        try:
            await self._store.update_word_difficulty(due.word.id, label)
            due.word.difficulty = label
        except StoreError as e:
            logger.warning(f"Failed to update difficulty for '{due.word.english_word}': {e}")
            self.notices.append(f"Could not save the difficulty for '{due.word.english_word}'.")

        self.stats.record(label)
        logger.debug(
            f"Rated '{due.word.english_word}' {label} (q={quality}): "
            f"interval={result.new_interval_days} ef={result.new_ease_factor:.2f}"
        )

        self.current_index += 1
        if self.current_index == len(self.words):
            await self._complete()
        else:
            self.show_answer = False

        return result

    async def _complete(self) -> None:
        self.phase = SessionPhase.COMPLETED
        try:
            self.daily_progress = await self._progress.record_session(
                self._user_id, self._today(), self.total_reviewed
            )
        except StoreError as e:
            logger.warning(f"Failed to record daily progress: {e}")
            self.notices.append("Could not save today's progress.")
        logger.info(f"Session completed: {self.stats.as_dict()}")

    def _require_in_progress(self, action: str) -> None:
        if self.phase is not SessionPhase.IN_PROGRESS:
            raise SessionStateError(f"Cannot {action} while session is {self.phase.value}")
