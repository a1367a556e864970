"""
Domain models for vocabulary scheduling.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from .constants import DEFAULT_DIFFICULTY, INITIAL_EASE_FACTOR

Difficulty = Literal["easy", "medium", "hard"]
DIFFICULTIES: tuple[str, ...] = ("easy", "medium", "hard")


@dataclass(frozen=True)
class ReviewState:
    """
    SM-2 schedule for one learner-word pair.

    Attributes:
        next_review_date: Calendar day the word is due again.
        ease_factor: Interval growth multiplier, never below 1.3.
        interval_days: Days between the last and next review (0 before the first).
        repetitions: Consecutive successful reviews; reset on failure.
        last_reviewed_at: Informational only, not read by the scheduler.
    """

    next_review_date: date
    ease_factor: float = INITIAL_EASE_FACTOR
    interval_days: int = 0
    repetitions: int = 0
    last_reviewed_at: datetime | None = None


@dataclass(frozen=True)
class ReviewResult:
    """Output of one next-review calculation."""

    new_ease_factor: float
    new_interval_days: int
    new_repetitions: int
    next_review_date: date

    def to_state(self, reviewed_at: datetime | None = None) -> ReviewState:
        return ReviewState(
            next_review_date=self.next_review_date,
            ease_factor=self.new_ease_factor,
            interval_days=self.new_interval_days,
            repetitions=self.new_repetitions,
            last_reviewed_at=reviewed_at,
        )


@dataclass
class Word:
    id: str
    english_word: str
    bangla_meaning: str
    example_sentence: str | None = None
    pronunciation: str | None = None
    synonyms: list[str] = field(default_factory=list)
    antonyms: list[str] = field(default_factory=list)
    difficulty: str = DEFAULT_DIFFICULTY
    created_at: datetime | None = None


@dataclass
class DueWord:
    """A word together with the schedule row that made it due."""

    word: Word
    schedule_id: str
    state: ReviewState


@dataclass(frozen=True)
class DailyProgress:
    """Per-day aggregate, upserted by date."""

    date: date
    words_reviewed: int = 0
    words_learned: int = 0
    streak_count: int = 0


@dataclass
class SessionStats:
    """Ephemeral rating counters for one learning session."""

    easy: int = 0
    medium: int = 0
    hard: int = 0

    @property
    def total(self) -> int:
        return self.easy + self.medium + self.hard

    def record(self, difficulty: str) -> None:
        if difficulty not in DIFFICULTIES:
            # Unknown labels were scored as medium, count them that way too.
            difficulty = DEFAULT_DIFFICULTY
        setattr(self, difficulty, getattr(self, difficulty) + 1)

    def as_dict(self) -> dict[str, int]:
        return {"easy": self.easy, "medium": self.medium, "hard": self.hard}
