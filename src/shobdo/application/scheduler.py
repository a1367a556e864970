"""
SM-2 scheduler: quality mapping, next-review calculation and due checks.

This is a pure computation module with no I/O. Callers pass ``today``
explicitly so results never depend on the wall clock.

Quality ratings:
    0 - Complete blackout
    1 - Incorrect, but something was remembered
    2 - Incorrect, but the answer felt easy once shown
    3 - Correct with difficulty
    4 - Correct after hesitation
    5 - Perfect recall
"""

import math
from datetime import date, datetime, timedelta

from shobdo.domain.constants import (
    DEFAULT_QUALITY,
    DIFFICULTY_QUALITY,
    FAILED_INTERVAL_DAYS,
    FIRST_INTERVAL_DAYS,
    INITIAL_EASE_FACTOR,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    PASSING_QUALITY,
    SECOND_INTERVAL_DAYS,
)
from shobdo.domain.models import ReviewResult, ReviewState


def difficulty_to_quality(difficulty: str) -> int:
    """
    Convert a difficulty button to an SM-2 quality.

    hard = 1, medium = 3, easy = 5. Anything else scores as medium.
    """
    return DIFFICULTY_QUALITY.get(difficulty, DEFAULT_QUALITY)


def update_ease_factor(ease_factor: float, quality: int) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), floored at 1.3.

    Applied on every review, including failures.
    """
    miss = MAX_QUALITY - quality
    new_ease = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(MIN_EASE_FACTOR, new_ease)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_next_review(quality: int, state: ReviewState, today: date) -> ReviewResult:
    """
    Calculate the next review parameters for one rating.

    Args:
        quality: Rating from 0-5. Values outside that range are a caller error.
        state: Current schedule. Only ease, interval and repetitions are read.
        today: Day of the review. The new interval counts from here, not from
            the previous due date, so late reviews do not accumulate drift.

    Returns:
        ReviewResult with the new ease, interval, repetitions and due date.
    """
    if quality < PASSING_QUALITY:
        new_repetitions = 0
        new_interval = FAILED_INTERVAL_DAYS
    else:
        new_repetitions = state.repetitions + 1
        if new_repetitions == 1:
            new_interval = FIRST_INTERVAL_DAYS
        elif new_repetitions == 2:
            new_interval = SECOND_INTERVAL_DAYS
        else:
            # Uses the ease factor from before this review.
            new_interval = _round_half_up(state.interval_days * state.ease_factor)

    new_ease = update_ease_factor(state.ease_factor, quality)

    return ReviewResult(
        new_ease_factor=new_ease,
        new_interval_days=new_interval,
        new_repetitions=new_repetitions,
        next_review_date=_as_date(today) + timedelta(days=new_interval),
    )


def initial_review_state(today: date) -> ReviewState:
    """Schedule for a freshly added word: due tomorrow, no reviews yet."""
    return ReviewState(
        next_review_date=_as_date(today) + timedelta(days=1),
        ease_factor=INITIAL_EASE_FACTOR,
        interval_days=0,
        repetitions=0,
    )


def is_due(next_review_date: date | datetime, as_of: date | datetime) -> bool:
    """True when the review date, compared by calendar day, is on or before ``as_of``."""
    return _as_date(next_review_date) <= _as_date(as_of)


def _as_date(value: date | datetime) -> date:
    # datetime is a subclass of date, so check it first.
    if isinstance(value, datetime):
        return value.date()
    return value
