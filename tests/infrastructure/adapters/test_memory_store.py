from datetime import date

import pytest

from shobdo.domain.errors import StoreError
from shobdo.domain.models import DailyProgress, ReviewState

TODAY = date(2026, 3, 10)


@pytest.mark.asyncio
async def test_loaded_words_are_copies(store, seed_word):
    await seed_word("alpha")
    (due,) = await store.load_due_words("u1", TODAY)
    due.word.difficulty = "hard"

    assert store.words["w_alpha"][1].difficulty == "medium"


@pytest.mark.asyncio
async def test_unknown_ids_raise_store_error(store):
    with pytest.raises(StoreError):
        await store.save_review_state("nope", ReviewState(next_review_date=TODAY))
    with pytest.raises(StoreError):
        await store.update_word_difficulty("nope", "easy")


@pytest.mark.asyncio
async def test_list_words_newest_first(store, seed_word):
    await seed_word("old", created_offset=0)
    await seed_word("new", created_offset=5)
    await seed_word("someone-else", user_id="u2", created_offset=9)

    assert [w.english_word for w in await store.list_words("u1")] == ["new", "old"]


@pytest.mark.asyncio
async def test_list_daily_progress_limit_and_order(store):
    for day in (8, 10, 9):
        await store.save_daily_progress("u1", DailyProgress(date=date(2026, 3, day), words_reviewed=day))

    records = await store.list_daily_progress("u1", limit=2)
    assert [r.date.day for r in records] == [10, 9]
