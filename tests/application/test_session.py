from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from shobdo.application.session import LearningSession, SessionPhase
from shobdo.domain.errors import SessionStateError, StoreError
from shobdo.domain.models import DailyProgress

TODAY = date(2026, 3, 10)
NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _session(store, user_id="u1"):
    return LearningSession(store, user_id, today=lambda: TODAY, now=lambda: NOW)


@pytest.mark.asyncio
async def test_empty_queue_is_terminal(store, seed_word):
    await seed_word("later", due_in=2)
    store.save_review_state = AsyncMock()

    session = _session(store)
    phase = await session.start()

    assert phase is SessionPhase.EMPTY
    assert session.current_word is None
    store.save_review_state.assert_not_called()
    with pytest.raises(SessionStateError):
        await session.rate("easy")


@pytest.mark.asyncio
async def test_start_loads_only_due_words_in_creation_order(store, seed_word):
    await seed_word("second", due_in=-1, created_offset=2)
    await seed_word("first", due_in=0, created_offset=1)
    await seed_word("future", due_in=1, created_offset=0)
    await seed_word("other-user", user_id="u2")

    session = _session(store)
    assert await session.start() is SessionPhase.IN_PROGRESS
    assert [d.word.english_word for d in session.words] == ["first", "second"]
    assert session.current_index == 0
    assert session.show_answer is False


@pytest.mark.asyncio
async def test_start_twice_rejected(store, seed_word):
    await seed_word("alpha")
    session = _session(store)
    await session.start()
    with pytest.raises(SessionStateError):
        await session.start()


@pytest.mark.asyncio
async def test_flip_toggles_only_show_answer(store, seed_word):
    await seed_word("alpha")
    session = _session(store)
    await session.start()

    assert session.flip() is True
    assert session.flip() is False
    assert session.current_index == 0
    assert session.stats.total == 0


@pytest.mark.asyncio
async def test_rate_persists_and_advances(store, seed_word):
    _, sched_a = await seed_word("alpha", created_offset=0)
    await seed_word("beta", created_offset=1)

    session = _session(store)
    await session.start()
    session.flip()

    result = await session.rate("easy")

    assert result.new_repetitions == 1
    assert result.next_review_date == TODAY + timedelta(days=1)
    _, saved = store.schedules[sched_a]
    assert saved.repetitions == 1
    assert saved.last_reviewed_at == NOW
    assert store.words["w_alpha"][1].difficulty == "easy"

    assert session.phase is SessionPhase.IN_PROGRESS
    assert session.current_index == 1
    assert session.show_answer is False
    assert session.current_word.word.english_word == "beta"


@pytest.mark.asyncio
async def test_three_word_session_end_to_end(store, seed_word):
    _, s1 = await seed_word("one", created_offset=0)
    _, s2 = await seed_word("two", created_offset=1)
    _, s3 = await seed_word("three", created_offset=2)

    session = _session(store)
    await session.start()
    for difficulty in ("easy", "medium", "hard"):
        session.flip()
        await session.rate(difficulty)

    assert session.phase is SessionPhase.COMPLETED
    assert session.stats.as_dict() == {"easy": 1, "medium": 1, "hard": 1}
    assert session.total_reviewed == 3

    schedule_writes = [key for op, key in store.writes if op == "review_state"]
    assert schedule_writes == [s1, s2, s3]
    assert store.writes[-1] == ("daily_progress", TODAY.isoformat())

    progress = store.progress[("u1", TODAY)]
    assert progress.words_reviewed == 3
    assert progress.streak_count == 1
    assert session.daily_progress == progress


@pytest.mark.asyncio
async def test_completion_extends_streak(store, seed_word):
    await seed_word("alpha")
    yesterday = TODAY - timedelta(days=1)
    store.progress[("u1", yesterday)] = DailyProgress(date=yesterday, words_reviewed=4, streak_count=6)

    session = _session(store)
    await session.start()
    await session.rate("medium")

    assert session.daily_progress.streak_count == 7


@pytest.mark.asyncio
async def test_schedule_write_failure_does_not_block(store, seed_word):
    await seed_word("alpha", created_offset=0)
    await seed_word("beta", created_offset=1)
    store.save_review_state = AsyncMock(side_effect=StoreError("offline"))

    session = _session(store)
    await session.start()
    await session.rate("hard")

    assert session.current_index == 1
    assert session.stats.hard == 1
    assert len(session.notices) == 1
    assert "alpha" in session.notices[0]
    # The difficulty write is independent and still happens.
    assert store.words["w_alpha"][1].difficulty == "hard"


@pytest.mark.asyncio
async def test_difficulty_write_failure_keeps_schedule(store, seed_word):
    _, sched = await seed_word("alpha")
    store.update_word_difficulty = AsyncMock(side_effect=StoreError("timeout"))

    session = _session(store)
    await session.start()
    await session.rate("easy")

    assert session.phase is SessionPhase.COMPLETED
    assert store.schedules[sched][1].repetitions == 1
    assert session.notices == ["Could not save the difficulty for 'alpha'."]


@pytest.mark.asyncio
async def test_progress_write_failure_still_completes(store, seed_word):
    await seed_word("alpha")
    store.save_daily_progress = AsyncMock(side_effect=StoreError("denied"))

    session = _session(store)
    await session.start()
    await session.rate("easy")

    assert session.phase is SessionPhase.COMPLETED
    assert session.daily_progress is None
    assert session.notices == ["Could not save today's progress."]


@pytest.mark.asyncio
async def test_load_failure_propagates():
    failing = AsyncMock()
    failing.load_due_words.side_effect = StoreError("no connection")

    session = _session(failing)
    with pytest.raises(StoreError):
        await session.start()
    assert session.phase is SessionPhase.LOADING


@pytest.mark.asyncio
async def test_unknown_difficulty_scored_as_medium(store, seed_word):
    await seed_word("alpha")
    session = _session(store)
    await session.start()

    result = await session.rate("meh")

    assert result.new_repetitions == 1
    assert session.stats.medium == 1
    assert store.words["w_alpha"][1].difficulty == "medium"


@pytest.mark.asyncio
async def test_flip_after_completion_rejected(store, seed_word):
    await seed_word("alpha")
    session = _session(store)
    await session.start()
    await session.rate("easy")

    with pytest.raises(SessionStateError):
        session.flip()
