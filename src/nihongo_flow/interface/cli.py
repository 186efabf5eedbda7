"""nihongo-flow CLI: review sessions, listings, progress and configuration."""

import asyncio
import json
import logging
import random
import sys
from pathlib import Path
from typing import Annotated

import typer

from nihongo_flow.application.config import AppConfig, log_level, resolve_config
from nihongo_flow.domain.constants import JLPT_LEVELS
from nihongo_flow.domain.errors import EventAppendError, ItemNotFoundError
from nihongo_flow.domain.models import Category, LearningStage, Outcome, SessionConfig

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="nihongo-flow: Japanese study cards with spaced repetition.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage nihongo-flow configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

OUTCOME_KEYS = {
    "1": Outcome.FORGOT,
    "2": Outcome.HARD,
    "3": Outcome.EASY,
    "4": Outcome.MASTERED,
}


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option("--data-dir", help="Directory holding the CSV files.")
    ] = None,
    storage: Annotated[
        str | None, typer.Option(help="Storage backend: csv or memory.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for nihongo-flow."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "data_dir": data_dir,
        "storage": storage,
        # Each -v adds one level on top of the default (info)
        "verbose": 1 + verbose if verbose else None,
    }


def _resolve(ctx: typer.Context, **extra) -> AppConfig:
    overrides = dict((ctx.obj or {}).get("overrides", {}))
    overrides.update(extra)
    config = resolve_config(overrides)
    logging.getLogger().setLevel(log_level(config.verbose))
    return config


def _parse_level(value: str) -> str:
    level = value.strip().upper()
    if level not in JLPT_LEVELS:
        raise typer.BadParameter(
            f"Unknown JLPT level {value!r}. Choose from: {', '.join(JLPT_LEVELS)}"
        )
    return level


def _parse_assignments(values: list[str] | None) -> dict[str, str]:
    fields = {}
    for value in values or []:
        name, sep, content = value.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"Expected FIELD=VALUE, got {value!r}")
        fields[name.strip().replace("-", "_")] = content
    return fields


def _parse_category(value: str) -> Category:
    try:
        return Category(value.lower())
    except ValueError:
        choices = ", ".join(c.value for c in Category)
        raise typer.BadParameter(f"Unknown category {value!r}. Choose from: {choices}")


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


@app.command()
def review(
    ctx: typer.Context,
    category: Annotated[
        list[str] | None,
        typer.Option("--category", "-c", help="vocab, kanji or grammar. Repeatable."),
    ] = None,
    level: Annotated[
        list[str] | None, typer.Option("--level", "-l", help="JLPT level, e.g. N5. Repeatable.")
    ] = None,
    chapter: Annotated[list[str] | None, typer.Option(help="Chapter. Repeatable.")] = None,
    source: Annotated[list[str] | None, typer.Option(help="Source tag. Repeatable.")] = None,
    limit: Annotated[
        int | None, typer.Option(min=0, help="Maximum items (0 = all). Defaults to config.")
    ] = None,
    seed: Annotated[int | None, typer.Option(help="Shuffle seed for a repeatable order.")] = None,
):
    """[bold green]Review[/bold green] a shuffled session of cards."""
    from nihongo_flow.application.factory import get_collection_provider, get_event_log
    from nihongo_flow.application.review_session import ReviewSession, SessionState
    from nihongo_flow.application.session_builder import build_session, load_collections

    config = _resolve(ctx)
    categories = [_parse_category(c) for c in category] if category else list(Category)
    session_config = SessionConfig(
        categories=frozenset(categories),
        levels=frozenset(_parse_level(v) for v in level or []),
        chapters=frozenset(chapter or []),
        sources=frozenset(source or []),
        limit=config.session_limit if limit is None else limit,
    )

    async def run():
        collections = await load_collections(
            get_collection_provider(config), session_config.categories
        )
        result = build_session(collections, session_config, random.Random(seed))
        if result.is_empty:
            typer.secho("No items matched the session criteria.", fg="yellow")
            raise typer.Exit(1)

        session = ReviewSession(get_event_log(config))
        session.start(result.items)
        total = len(result.items)

        while session.state is SessionState.IN_PROGRESS:
            card = session.current
            typer.echo("")
            typer.secho(
                f"[{session.cursor + 1}/{total}] {card.category.value}"
                f" {card.item.jlpt} ch.{card.item.chapter}".rstrip(),
                fg="cyan",
            )
            typer.secho(card.front, bold=True)

            answer = typer.prompt("Enter to flip, q to quit", default="", show_default=False)
            if answer.strip().lower() == "q":
                session.exit()
                typer.secho("Session abandoned.", fg="yellow")
                return
            session.flip()
            typer.echo(card.back)

            # Stay on this card until the log accepts the answer
            while True:
                outcome = _ask_outcome()
                if outcome is None:
                    session.exit()
                    typer.secho("Session abandoned.", fg="yellow")
                    return
                try:
                    await session.submit(outcome)
                    break
                except EventAppendError as e:
                    typer.secho(f"Could not save this answer: {e}", fg="red")

        summary = session.summary
        typer.echo("")
        typer.secho("Session complete", fg="green", bold=True)
        typer.echo(f"Accuracy: {summary.accuracy}%  Reviewed: {summary.total}")
        for cat, tally in summary.breakdown.items():
            typer.echo(f"  {cat.value:<8} {tally.correct}/{tally.total} ({tally.accuracy}%)")

    asyncio.run(run())


def _ask_outcome() -> Outcome | None:
    while True:
        answer = typer.prompt("1=forgot 2=hard 3=easy 4=mastered q=quit").strip().lower()
        if answer == "q":
            return None
        if answer in OUTCOME_KEYS:
            return OUTCOME_KEYS[answer]
        typer.secho(f"Unknown choice {answer!r}.", fg="yellow")


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@app.command("list")
def list_items(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="vocab, kanji or grammar.")],
    level: Annotated[str | None, typer.Option(help="JLPT level filter.")] = None,
    stage: Annotated[
        str | None, typer.Option(help="new, learning, review or mastered.")
    ] = None,
    search: Annotated[
        str | None, typer.Option("--search", "-s", help="Text, kana or romaji query.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List items with their learning stage and mastery."""
    from nihongo_flow.application.catalog import list_with_progress
    from nihongo_flow.application.factory import get_collection_provider, get_event_log

    cat = _parse_category(category)
    level = _parse_level(level) if level else None
    try:
        stage_filter = LearningStage(stage.lower()) if stage else None
    except ValueError:
        raise typer.BadParameter(f"Unknown stage {stage!r}")
    config = _resolve(ctx)

    async def run():
        items = await get_collection_provider(config).list_items(cat)
        events = await get_event_log(config).list_events(category=cat)
        return list_with_progress(
            cat, items, events, level=level, stage=stage_filter, query=search
        )

    entries = asyncio.run(run())

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": e.item.id,
                        "front": e.item.front,
                        "back": e.item.back,
                        "jlpt": e.item.jlpt,
                        "chapter": e.item.chapter,
                        "stage": e.progress.stage.value,
                        "mastery": e.progress.mastery,
                    }
                    for e in entries
                ],
                ensure_ascii=False,
                indent=2,
            )
        )
        return

    if not entries:
        typer.secho("No items found.", fg="yellow")
        return
    for e in entries:
        typer.echo(
            f"{e.item.id:>4}  {e.item.front:<12} {e.item.jlpt:<3} "
            f"{e.progress.stage.value:<9} {e.progress.mastery:>3}%"
        )


@app.command()
def sources(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="vocab, kanji or grammar.")],
):
    """Show the distinct source tags used in a collection."""
    from nihongo_flow.application.factory import get_collection_provider

    cat = _parse_category(category)
    config = _resolve(ctx)
    tags = asyncio.run(get_collection_provider(config).list_distinct_sources(cat))
    if not tags:
        typer.secho("No source tags.", fg="yellow")
        return
    for tag in sorted(tags):
        typer.echo(tag)


@app.command()
def progress(
    ctx: typer.Context,
    days: Annotated[
        int, typer.Option(min=1, help="Days of review activity to show, newest last.")
    ] = 7,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Learned counts, stage distribution, streak and daily activity."""
    from nihongo_flow.application.factory import get_collection_provider, get_event_log
    from nihongo_flow.application.progress import ProgressService

    config = _resolve(ctx)
    service = ProgressService(get_collection_provider(config), get_event_log(config))

    async def run():
        learned = await service.learned_counts()
        stages = {c: await service.stage_counts(c) for c in Category}
        streak = await service.current_streak()
        activity = await service.daily_activity(days=days)
        return learned, stages, streak, activity

    learned, stages, streak, activity = asyncio.run(run())

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "streak": streak,
                    "categories": {
                        p.category.value: {
                            "total": p.total_items,
                            "learned": p.learned,
                            "stages": {s.value: n for s, n in stages[p.category].items()},
                        }
                        for p in learned
                    },
                    "activity": [
                        {"day": a.day.isoformat(), "count": a.count} for a in activity
                    ],
                },
                indent=2,
            )
        )
        return

    typer.echo(f"Streak: {streak} day(s)")
    for p in learned:
        counts = "  ".join(f"{s.value}={n}" for s, n in stages[p.category].items())
        typer.echo(f"{p.category.value:<8} learned {p.learned}/{p.total_items}  {counts}")
    typer.echo("Activity:")
    for a in activity:
        typer.echo(f"  {a.day.isoformat()}  {a.count}")


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


def _collection_service(config: AppConfig):
    from nihongo_flow.application.collection_service import CollectionService
    from nihongo_flow.application.factory import get_collection_provider, get_event_log

    return CollectionService(get_collection_provider(config), get_event_log(config))


FIELD_HELP = "FIELD=VALUE assignment, e.g. meaning=Cat. Repeatable. Separate examples with |."


@app.command()
def add(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="vocab, kanji or grammar.")],
    fields: Annotated[list[str], typer.Option("--set", "-s", help=FIELD_HELP)],
):
    """Add an item to a collection."""
    cat = _parse_category(category)
    values = _parse_assignments(fields)
    config = _resolve(ctx)

    try:
        item = asyncio.run(_collection_service(config).add(cat, values))
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--set")
    typer.secho(f"Added {cat.value} item {item.id}: {item.front}", fg="green")


@app.command()
def edit(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="vocab, kanji or grammar.")],
    item_id: Annotated[str, typer.Argument(help="Item id.")],
    fields: Annotated[list[str], typer.Option("--set", "-s", help=FIELD_HELP)],
):
    """Change fields of an existing item."""
    cat = _parse_category(category)
    values = _parse_assignments(fields)
    config = _resolve(ctx)

    try:
        item = asyncio.run(_collection_service(config).edit(cat, item_id, values))
    except ItemNotFoundError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--set")
    typer.secho(f"Updated {cat.value} item {item.id}: {item.front}", fg="green")


@app.command()
def delete(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="vocab, kanji or grammar.")],
    item_ids: Annotated[list[str], typer.Argument(help="Item ids.")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Skip the confirmation prompt.")
    ] = False,
):
    """Delete items from a collection. Their review history is kept."""
    cat = _parse_category(category)
    if not force:
        typer.confirm(f"Delete {cat.value} item(s) {', '.join(item_ids)}?", abort=True)

    config = _resolve(ctx)
    removed = asyncio.run(_collection_service(config).delete(cat, item_ids))
    if removed == 0:
        typer.secho("No matching items.", fg="yellow")
        raise typer.Exit(1)
    typer.echo(f"Deleted {removed} item(s).")


@app.command()
def reset(
    ctx: typer.Context,
    category: Annotated[str, typer.Argument(help="vocab, kanji or grammar.")],
    item_id: Annotated[str, typer.Argument(help="Item id.")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Skip the confirmation prompt.")
    ] = False,
):
    """Clear the review history of one item."""
    cat = _parse_category(category)
    if not force:
        typer.confirm(f"Clear all reviews of {cat.value} item {item_id}?", abort=True)

    config = _resolve(ctx)
    try:
        removed = asyncio.run(_collection_service(config).reset_history(cat, item_id))
    except ItemNotFoundError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)
    typer.echo(f"Removed {removed} review(s).")


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8787,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("nihongo_flow.server:app", host=host, port=port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


def main():
    app()
