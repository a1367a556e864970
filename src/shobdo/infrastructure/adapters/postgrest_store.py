"""
PostgREST ReviewStore — Infrastructure adapter for a Supabase-style REST backend.

Talks to ``{url}/rest/v1/<table>`` with the project API key. The due-word
filter is pushed into the query; rows are re-checked locally with the same
predicate so a misconfigured embed never leaks future cards into a session.
"""

import logging
from datetime import date
from typing import Any

import httpx

from shobdo.application.scheduler import is_due
from shobdo.domain.constants import REQUEST_TIMEOUT
from shobdo.domain.errors import StoreError
from shobdo.domain.models import DailyProgress, DueWord, ReviewState, Word
from shobdo.domain.ports import ReviewStore

from .rows import (
    decoding,
    progress_from_row,
    progress_to_row,
    state_from_row,
    state_to_row,
    word_from_row,
    word_to_row,
)


class PostgrestReviewStore(ReviewStore):
    """Adapter for the ``words``, ``review_schedule`` and ``daily_progress`` tables."""

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.logger.debug(f"PostgrestReviewStore initialized with base_url={self.base_url}")

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["apikey"] = self._api_key
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PostgrestReviewStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = {"Prefer": prefer} if prefer else None
        try:
            resp = await self._get_client().request(
                method, f"/{table}", params=params, json=json, headers=headers
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {table} failed with HTTP {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise StoreError(f"{method} {table} failed: {e}") from e

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise StoreError(f"{method} {table} returned a non-JSON body: {resp.text[:200]}") from e

    # ------------------------------------------------------------------
    # ReviewStore
    # ------------------------------------------------------------------

    async def load_due_words(self, user_id: str, as_of: date) -> list[DueWord]:
        rows = await self._request(
            "GET",
            "words",
            params={
                "select": "*,review_schedule!inner(*)",
                "user_id": f"eq.{user_id}",
                "review_schedule.next_review_date": f"lte.{as_of.isoformat()}",
                "order": "created_at.asc",
            },
        )

        due: list[DueWord] = []
        with decoding("words"):
            for row in rows or []:
                schedules = row.get("review_schedule")
                # PostgREST embeds one-to-one relations as an object, one-to-many as a list.
                if isinstance(schedules, dict):
                    schedules = [schedules]
                if not schedules:
                    continue
                schedule = schedules[0]
                state = state_from_row(schedule)
                if not is_due(state.next_review_date, as_of):
                    self.logger.debug(
                        f"Dropping {row.get('id')}: not due until {state.next_review_date}"
                    )
                    continue
                due.append(
                    DueWord(word=word_from_row(row), schedule_id=str(schedule["id"]), state=state)
                )
        return due

    async def save_review_state(self, schedule_id: str, state: ReviewState) -> None:
        await self._request(
            "PATCH",
            "review_schedule",
            params={"id": f"eq.{schedule_id}"},
            json=state_to_row(state),
            prefer="return=minimal",
        )

    async def update_word_difficulty(self, word_id: str, difficulty: str) -> None:
        await self._request(
            "PATCH",
            "words",
            params={"id": f"eq.{word_id}"},
            json={"difficulty": difficulty},
            prefer="return=minimal",
        )

    async def get_daily_progress(self, user_id: str, day: date) -> DailyProgress | None:
        rows = await self._request(
            "GET",
            "daily_progress",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "date": f"eq.{day.isoformat()}",
                "limit": 1,
            },
        )
        if not rows:
            return None
        with decoding("daily_progress"):
            return progress_from_row(rows[0])

    async def save_daily_progress(self, user_id: str, progress: DailyProgress) -> None:
        await self._request(
            "POST",
            "daily_progress",
            params={"on_conflict": "user_id,date"},
            json=progress_to_row(progress, user_id),
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def list_daily_progress(self, user_id: str, limit: int) -> list[DailyProgress]:
        rows = await self._request(
            "GET",
            "daily_progress",
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "date.desc",
                "limit": limit,
            },
        )
        with decoding("daily_progress"):
            return [progress_from_row(r) for r in rows or []]

    async def list_words(self, user_id: str) -> list[Word]:
        rows = await self._request(
            "GET",
            "words",
            params={"select": "*", "user_id": f"eq.{user_id}", "order": "created_at.desc"},
        )
        with decoding("words"):
            return [word_from_row(r) for r in rows or []]

    async def add_word(self, user_id: str, word: Word, state: ReviewState) -> str:
        await self._request(
            "POST", "words", json=word_to_row(word, user_id), prefer="return=minimal"
        )
        created = await self._request(
            "POST",
            "review_schedule",
            json={"word_id": word.id, "user_id": user_id, **state_to_row(state)},
            prefer="return=representation",
        )
        if not created:
            raise StoreError(f"Schedule for {word.id} was not returned by the server")
        with decoding("review_schedule"):
            return str(created[0]["id"])
