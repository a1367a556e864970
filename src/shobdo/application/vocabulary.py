"""Registering new words together with their first schedule."""

import logging
from datetime import date, datetime, timezone

from ulid import ULID

from shobdo.domain.models import Word
from shobdo.domain.ports import ReviewStore

from .scheduler import initial_review_state

logger = logging.getLogger(__name__)


def generate_word_id() -> str:
    """Generate a stable word ID using ULID."""
    return f"word_{ULID()}"


def _clean_list(values: list[str] | None) -> list[str]:
    return [v.strip() for v in (values or []) if v and v.strip()]


async def add_word(
    store: ReviewStore,
    user_id: str,
    english_word: str,
    bangla_meaning: str,
    today: date,
    *,
    example_sentence: str | None = None,
    pronunciation: str | None = None,
    synonyms: list[str] | None = None,
    antonyms: list[str] | None = None,
) -> Word:
    """
    Store a new word and schedule its first review for tomorrow.

    Raises:
        ValueError: If the word or its meaning is blank.
        StoreError: If the store rejects the write.
    """
    english_word = english_word.strip()
    bangla_meaning = bangla_meaning.strip()
    if not english_word or not bangla_meaning:
        raise ValueError("Both the word and its meaning are required")

    word = Word(
        id=generate_word_id(),
        english_word=english_word,
        bangla_meaning=bangla_meaning,
        example_sentence=(example_sentence or "").strip() or None,
        pronunciation=(pronunciation or "").strip() or None,
        synonyms=_clean_list(synonyms),
        antonyms=_clean_list(antonyms),
        created_at=datetime.now(timezone.utc),
    )
    state = initial_review_state(today)
    schedule_id = await store.add_word(user_id, word, state)

    logger.info(f"Added '{word.english_word}' ({word.id}), first review {state.next_review_date}")
    logger.debug(f"Schedule row {schedule_id} for {word.id}")
    return word
