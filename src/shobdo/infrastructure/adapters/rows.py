"""
Row mapping shared by the file and REST adapters.

Rows use the column names of the ``words``, ``review_schedule`` and
``daily_progress`` tables; dates travel as ISO strings.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any

from shobdo.domain.constants import DEFAULT_DIFFICULTY, INITIAL_EASE_FACTOR
from shobdo.domain.errors import StoreError
from shobdo.domain.models import DailyProgress, ReviewState, Word


@contextmanager
def decoding(source: str) -> Iterator[None]:
    """Re-raise errors from malformed rows as StoreError."""
    try:
        yield
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        raise StoreError(f"Malformed row in {source}: {e!r}") from e


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Some backends return timestamps for date columns; keep the day part.
    return date.fromisoformat(str(value)[:10])


def _parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def word_to_row(word: Word, user_id: str) -> dict[str, Any]:
    return {
        "id": word.id,
        "user_id": user_id,
        "english_word": word.english_word,
        "bangla_meaning": word.bangla_meaning,
        "example_sentence": word.example_sentence,
        "pronunciation": word.pronunciation,
        "synonyms": list(word.synonyms) or None,
        "antonyms": list(word.antonyms) or None,
        "difficulty": word.difficulty,
        "created_at": _iso(word.created_at),
    }


def word_from_row(row: dict[str, Any]) -> Word:
    return Word(
        id=str(row["id"]),
        english_word=row["english_word"],
        bangla_meaning=row["bangla_meaning"],
        example_sentence=row.get("example_sentence"),
        pronunciation=row.get("pronunciation"),
        synonyms=list(row.get("synonyms") or []),
        antonyms=list(row.get("antonyms") or []),
        difficulty=row.get("difficulty") or DEFAULT_DIFFICULTY,
        created_at=_parse_datetime(row.get("created_at")),
    )


def state_to_row(state: ReviewState) -> dict[str, Any]:
    return {
        "next_review_date": _iso(state.next_review_date),
        "interval_days": state.interval_days,
        "ease_factor": state.ease_factor,
        "repetitions": state.repetitions,
        "last_reviewed_at": _iso(state.last_reviewed_at),
    }


def state_from_row(row: dict[str, Any]) -> ReviewState:
    ease = row.get("ease_factor")
    return ReviewState(
        next_review_date=_parse_date(row["next_review_date"]),
        ease_factor=float(ease) if ease is not None else INITIAL_EASE_FACTOR,
        interval_days=int(row.get("interval_days") or 0),
        repetitions=int(row.get("repetitions") or 0),
        last_reviewed_at=_parse_datetime(row.get("last_reviewed_at")),
    )


def progress_to_row(progress: DailyProgress, user_id: str) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "date": _iso(progress.date),
        "words_reviewed": progress.words_reviewed,
        "words_learned": progress.words_learned,
        "streak_count": progress.streak_count,
    }


def progress_from_row(row: dict[str, Any]) -> DailyProgress:
    return DailyProgress(
        date=_parse_date(row["date"]),
        words_reviewed=int(row.get("words_reviewed") or 0),
        words_learned=int(row.get("words_learned") or 0),
        streak_count=int(row.get("streak_count") or 0),
    )
