"""shobdo CLI — word registration, due lists, learning sessions and progress."""

import asyncio
import json
import logging
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Annotated, Any

import typer

from shobdo.application.config import AppConfig, resolve_config
from shobdo.application.factory import get_review_store
from shobdo.application.log_setup import setup_logging
from shobdo.application.progress import ProgressService
from shobdo.application.scheduler import compute_next_review
from shobdo.application.session import LearningSession, SessionPhase
from shobdo.application.vocabulary import add_word
from shobdo.domain.errors import StoreError
from shobdo.domain.models import ReviewState

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="shobdo: spaced-repetition vocabulary trainer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage shobdo configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

RATING_KEYS = {
    "h": "hard",
    "hard": "hard",
    "m": "medium",
    "medium": "medium",
    "e": "easy",
    "easy": "easy",
}

DATE_FORMATS = ["%Y-%m-%d"]


def _resolve(ctx: typer.Context, **overrides: Any) -> AppConfig:
    """Merge global options with command overrides, then start file logging."""
    obj = ctx.obj or {}
    merged = {
        "backend": obj.get("backend"),
        "data_file": obj.get("data_file"),
        "user_id": obj.get("user_id"),
        "verbose": obj.get("verbose"),
        **overrides,
    }
    try:
        config = resolve_config(merged)
    except ValueError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(2) from e
    setup_logging(config)
    logger.debug(f"Resolved config: backend={config.backend} user={config.user_id}")
    return config


def _today() -> date:
    return date.today()


def _as_day(value: datetime | None) -> date:
    return value.date() if value else _today()


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="-v for info, -vv for debug. Defaults to the configured level.",
        ),
    ] = 0,
    backend: Annotated[
        str | None, typer.Option(help="Storage backend: yaml, postgrest, memory.")
    ] = None,
    data_file: Annotated[
        Path | None, typer.Option(help="YAML data file for the yaml backend.")
    ] = None,
    user: Annotated[str | None, typer.Option("--user", help="Learner id.")] = None,
):
    """Global settings for shobdo."""
    ctx.ensure_object(dict)
    # 0 means the flag was not given; keep the env or file setting.
    ctx.obj["verbose"] = verbose or None
    ctx.obj["backend"] = backend
    ctx.obj["data_file"] = data_file
    ctx.obj["user_id"] = user


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    word: Annotated[str, typer.Argument(help="English word.")],
    meaning: Annotated[str, typer.Argument(help="Bangla meaning.")],
    example: Annotated[str | None, typer.Option(help="Example sentence.")] = None,
    pronunciation: Annotated[str | None, typer.Option(help="Pronunciation hint.")] = None,
    synonym: Annotated[
        list[str] | None, typer.Option("--synonym", help="Synonym (repeatable).")
    ] = None,
    antonym: Annotated[
        list[str] | None, typer.Option("--antonym", help="Antonym (repeatable).")
    ] = None,
):
    """[bold green]Add[/bold green] a word; its first review is tomorrow."""
    config = _resolve(ctx)

    async def run():
        store = get_review_store(config)
        try:
            return await add_word(
                store,
                config.user_id,
                word,
                meaning,
                _today(),
                example_sentence=example,
                pronunciation=pronunciation,
                synonyms=synonym,
                antonyms=antonym,
            )
        finally:
            await store.aclose()

    try:
        created = asyncio.run(run())
    except ValueError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(2) from e
    except StoreError as e:
        typer.secho(f"Could not save the word: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    typer.secho(f"Added '{created.english_word}' ({created.id}).", fg="green")


@app.command()
def due(
    ctx: typer.Context,
    as_of: Annotated[
        datetime | None,
        typer.Option("--as-of", formats=DATE_FORMATS, help="Day to check. Defaults to today."),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List words due for review."""
    config = _resolve(ctx)
    day = _as_day(as_of)

    async def run():
        store = get_review_store(config)
        try:
            return await store.load_due_words(config.user_id, day)
        finally:
            await store.aclose()

    try:
        due_words = asyncio.run(run())
    except StoreError as e:
        typer.secho(f"Could not load due words: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "word_id": d.word.id,
                        "word": d.word.english_word,
                        "next_review_date": d.state.next_review_date.isoformat(),
                        "interval_days": d.state.interval_days,
                        "repetitions": d.state.repetitions,
                    }
                    for d in due_words
                ],
                indent=2,
            )
        )
        return

    if not due_words:
        typer.secho(f"Nothing due on {day}.", fg="green")
        return

    typer.echo(f"Due on {day}: {len(due_words)}")
    for d in due_words:
        typer.echo(f"  {d.word.english_word}  (scheduled {d.state.next_review_date})")


@app.command()
def learn(ctx: typer.Context):
    """Review today's due words one card at a time."""
    config = _resolve(ctx)

    async def run():
        store = get_review_store(config)
        session = LearningSession(store, config.user_id, today=_today)
        try:
            try:
                phase = await session.start()
            except StoreError as e:
                typer.secho(f"Could not load due words: {e}", fg="red", err=True)
                raise typer.Exit(1) from e

            if phase is SessionPhase.EMPTY:
                typer.secho("Nothing to review today. Add new words or come back later.", fg="green")
                return

            seen_notices = 0
            while session.phase is SessionPhase.IN_PROGRESS:
                card = session.current_word
                typer.echo(
                    f"\n[{session.current_index + 1}/{len(session.words)}] "
                    f"{card.word.english_word}"
                )
                if card.word.pronunciation:
                    typer.echo(f"  /{card.word.pronunciation}/")

                typer.prompt("Press Enter to show the answer", default="", show_default=False)
                session.flip()
                typer.secho(f"  {card.word.bangla_meaning}", bold=True)
                if card.word.example_sentence:
                    typer.echo(f"  e.g. {card.word.example_sentence}")
                if card.word.synonyms:
                    typer.echo(f"  synonyms: {', '.join(card.word.synonyms)}")

                difficulty = _prompt_rating()
                await session.rate(difficulty)

                for notice in session.notices[seen_notices:]:
                    typer.secho(notice, fg="yellow")
                seen_notices = len(session.notices)

            stats = session.stats
            typer.secho(f"\nSession complete: {session.total_reviewed} words reviewed.", fg="green")
            typer.echo(f"  easy: {stats.easy}  medium: {stats.medium}  hard: {stats.hard}")
            if session.daily_progress:
                typer.echo(f"  streak: {session.daily_progress.streak_count} day(s)")
        finally:
            await store.aclose()

    asyncio.run(run())


def _prompt_rating() -> str:
    while True:
        answer = typer.prompt("Rate [h]ard / [m]edium / [e]asy").strip().lower()
        difficulty = RATING_KEYS.get(answer)
        if difficulty:
            return difficulty
        typer.secho("Please answer h, m or e.", fg="yellow")


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show streak, daily reviews and difficulty breakdown."""
    config = _resolve(ctx)
    today = _today()

    async def run():
        store = get_review_store(config)
        try:
            return await ProgressService(store).summary(config.user_id, today)
        finally:
            await store.aclose()

    try:
        summary = asyncio.run(run())
    except StoreError as e:
        typer.secho(f"Could not load progress: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "total_words": summary.total_words,
                    "due_today": summary.due_today,
                    "done_for_today": summary.done_for_today,
                    "reviewed_today": summary.reviewed_today,
                    "current_streak": summary.current_streak,
                    "total_reviewed": summary.total_reviewed,
                    "daily": [
                        {"date": d.date.isoformat(), "words_reviewed": d.words_reviewed}
                        for d in summary.daily
                    ],
                    "difficulty": summary.difficulty,
                    "recent_words": [w.english_word for w in summary.recent_words],
                },
                indent=2,
            )
        )
        return

    typer.echo(
        f"Words: {summary.total_words}  Due today: {summary.due_today}"
        f"  Reviewed today: {summary.reviewed_today}  Streak: {summary.current_streak}"
    )
    if summary.done_for_today:
        typer.secho("Done for today.", fg="green")
    typer.echo("\nLast days:")
    for d in summary.daily:
        typer.echo(f"  {d.date}  {'#' * d.words_reviewed} {d.words_reviewed}")
    breakdown = summary.difficulty
    typer.echo(
        f"\neasy: {breakdown.get('easy', 0)}  medium: {breakdown.get('medium', 0)}"
        f"  hard: {breakdown.get('hard', 0)}"
    )
    if summary.recent_words:
        typer.echo("\nRecent words:")
        for w in summary.recent_words:
            typer.echo(f"  {w.english_word}  {w.bangla_meaning}")


@app.command()
def simulate(
    quality: Annotated[int, typer.Option(min=0, max=5, help="Recall quality, 0-5.")],
    ease: Annotated[float, typer.Option(help="Current ease factor.")] = 2.5,
    interval: Annotated[int, typer.Option(min=0, help="Current interval in days.")] = 0,
    repetitions: Annotated[int, typer.Option(min=0, help="Consecutive successes.")] = 0,
    today: Annotated[
        datetime | None,
        typer.Option(formats=DATE_FORMATS, help="Review day. Defaults to today."),
    ] = None,
):
    """Run one scheduling step and print the result as JSON."""
    day = _as_day(today)
    state = ReviewState(
        next_review_date=day,
        ease_factor=ease,
        interval_days=interval,
        repetitions=repetitions,
    )
    result = compute_next_review(quality, state, day)
    typer.echo(
        json.dumps(
            {
                "new_ease_factor": round(result.new_ease_factor, 4),
                "new_interval_days": result.new_interval_days,
                "new_repetitions": result.new_repetitions,
                "next_review_date": result.next_review_date.isoformat(),
            },
            indent=2,
        )
    )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    if d.get("postgrest_api_key"):
        d["postgrest_api_key"] = "***"
    typer.echo(json.dumps(d, indent=2))
