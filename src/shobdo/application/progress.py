"""
Daily progress aggregation and streak bookkeeping.

The pure helpers at the top compute records; ProgressService wires them to a
ReviewStore for the completion write and for dashboard summaries.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, timedelta

from shobdo.domain.constants import PROGRESS_WINDOW_DAYS, RECENT_WORDS_LIMIT
from shobdo.domain.models import DIFFICULTIES, DailyProgress, Word
from shobdo.domain.ports import ReviewStore

logger = logging.getLogger(__name__)


def compute_streak(prior_day: DailyProgress | None, today: date) -> int:
    """
    Streak for ``today``: yesterday's streak + 1, or 1 if yesterday has no record.
    """
    if prior_day is not None and prior_day.date == today - timedelta(days=1):
        return prior_day.streak_count + 1
    return 1


def merge_daily_progress(
    existing: DailyProgress | None,
    prior_day: DailyProgress | None,
    today: date,
    reviewed: int,
) -> DailyProgress:
    """
    Fold one finished session into today's record.

    A second session on the same day adds its reviews but keeps the larger
    streak, so the streak is not incremented twice.
    """
    new_streak = compute_streak(prior_day, today)

    if existing is None:
        return DailyProgress(
            date=today,
            words_reviewed=reviewed,
            words_learned=0,
            streak_count=new_streak,
        )

    return replace(
        existing,
        words_reviewed=existing.words_reviewed + reviewed,
        streak_count=max(existing.streak_count, new_streak),
    )


def fill_daily_series(
    records: list[DailyProgress], today: date, days: int = PROGRESS_WINDOW_DAYS
) -> list[DailyProgress]:
    """
    One record per calendar day ending at ``today``, oldest first.

    Days without a stored record are zero-filled.
    """
    by_date = {r.date: r for r in records}
    series = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        series.append(by_date.get(day, DailyProgress(date=day)))
    return series


def difficulty_breakdown(words: list[Word]) -> dict[str, int]:
    counts = {"total": len(words)}
    for label in DIFFICULTIES:
        counts[label] = sum(1 for w in words if w.difficulty == label)
    return counts


@dataclass
class ProgressSummary:
    """Dashboard view of a learner's progress."""

    total_words: int
    due_today: int
    reviewed_today: int
    current_streak: int
    total_reviewed: int  # over the window only
    daily: list[DailyProgress] = field(default_factory=list)
    difficulty: dict[str, int] = field(default_factory=dict)
    recent_words: list[Word] = field(default_factory=list)  # newest first

    @property
    def done_for_today(self) -> bool:
        return self.due_today == 0


class ProgressService:
    """
    Application service for daily progress records.

    Depends on the ReviewStore port only.
    """

    def __init__(self, store: ReviewStore, window_days: int = PROGRESS_WINDOW_DAYS):
        self._store = store
        self._window = window_days

    async def record_session(self, user_id: str, today: date, reviewed: int) -> DailyProgress:
        """
        Upsert today's record after a completed session.

        Raises:
            StoreError: If either read or the upsert fails.
        """
        existing = await self._store.get_daily_progress(user_id, today)
        prior_day = await self._store.get_daily_progress(user_id, today - timedelta(days=1))

        progress = merge_daily_progress(existing, prior_day, today, reviewed)
        await self._store.save_daily_progress(user_id, progress)

        logger.info(
            f"Recorded progress for {user_id} on {today}: "
            f"reviewed={progress.words_reviewed} streak={progress.streak_count}"
        )
        return progress

    async def summary(self, user_id: str, today: date) -> ProgressSummary:
        records = await self._store.list_daily_progress(user_id, self._window)
        words = await self._store.list_words(user_id)
        due = await self._store.load_due_words(user_id, today)

        series = fill_daily_series(records, today, self._window)
        # The latest stored record carries the streak, even if it is from an earlier day.
        latest = max(records, key=lambda r: r.date) if records else None
        today_record = next((r for r in records if r.date == today), None)

        return ProgressSummary(
            total_words=len(words),
            due_today=len(due),
            reviewed_today=today_record.words_reviewed if today_record else 0,
            current_streak=latest.streak_count if latest else 0,
            total_reviewed=sum(r.words_reviewed for r in series),
            daily=series,
            difficulty=difficulty_breakdown(words),
            recent_words=words[:RECENT_WORDS_LIMIT],
        )
