from datetime import date, datetime, timedelta, timezone

import pytest

from shobdo.domain.models import ReviewState, Word
from shobdo.infrastructure.adapters.memory_store import InMemoryReviewStore

TODAY = date(2026, 3, 10)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def store():
    return InMemoryReviewStore()


@pytest.fixture
def seed_word(store):
    """Returns a coroutine that stores a word due ``due_in`` days from TODAY."""

    async def _seed(
        english: str,
        meaning: str = "অর্থ",
        *,
        user_id: str = "u1",
        due_in: int = 0,
        ease_factor: float = 2.5,
        interval_days: int = 0,
        repetitions: int = 0,
        created_offset: int = 0,
    ) -> tuple[Word, str]:
        word = Word(
            id=f"w_{english}",
            english_word=english,
            bangla_meaning=meaning,
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=created_offset),
        )
        state = ReviewState(
            next_review_date=TODAY + timedelta(days=due_in),
            ease_factor=ease_factor,
            interval_days=interval_days,
            repetitions=repetitions,
        )
        schedule_id = await store.add_word(user_id, word, state)
        return word, schedule_id

    return _seed


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/logs
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "SHOBDO_BACKEND",
        "SHOBDO_DATA_FILE",
        "SHOBDO_USER_ID",
        "SHOBDO_POSTGREST_URL",
        "SHOBDO_VERBOSE",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
