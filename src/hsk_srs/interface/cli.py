"""hsk-srs CLI — save words, review them and inspect due queues."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import typer

from hsk_srs.application.config import resolve_config
from hsk_srs.application.factory import build_service
from hsk_srs.application.importer import WordListError, load_word_list
from hsk_srs.application.review_engine import quality_for_rating
from hsk_srs.application.service import SchedulerService
from hsk_srs.domain.cards.models import Card, ProgressSummary
from hsk_srs.domain.errors import SrsError
from hsk_srs.infrastructure.adapters.records import card_to_record

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="hsk-srs: spaced-repetition scheduler for HSK vocabulary.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage hsk-srs configuration.")
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


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _service(ctx: typer.Context) -> SchedulerService:
    obj = ctx.ensure_object(dict)
    if "service" not in obj:
        config = resolve_config(obj.get("overrides"))
        obj["service"] = build_service(config)
    return obj["service"]


def _summary_dict(summary: ProgressSummary) -> dict[str, int]:
    return {
        "new": summary.new_count,
        "learning": summary.learning_count,
        "mastered": summary.mastered_count,
        "total": summary.total,
    }


def _card_line(card: Card) -> str:
    gloss = card.en or card.vi
    pinyin = f" [{card.pinyin}]" if card.pinyin else ""
    return f"{card.key}{pinyin}  {gloss}".rstrip()


def _parse_quality(rating: str) -> int:
    if rating.isdigit():
        return int(rating)
    return quality_for_rating(rating)


def _fail(error: Exception) -> None:
    typer.secho(str(error), fg="red", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding the card and lookup files.")
    ] = None,
    backend: Annotated[str | None, typer.Option(help="Storage backend: json, memory.")] = None,
    strict_levels: Annotated[
        bool | None,
        typer.Option("--strict-levels/--lenient-levels", help="Reject unrecognized level tags."),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for hsk-srs."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "data_dir": data_dir,
        "backend": backend,
        "strict_levels": strict_levels,
        "verbose": verbose,
    }
    if verbose > 1:
        logging.getLogger().setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def save(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Word to save, e.g. 你好.")],
    level: Annotated[str | None, typer.Option(help="HSK level: 1-6, 7-9, hsk3...")] = None,
    pinyin: Annotated[str, typer.Option(help="Pinyin reading.")] = "",
    vi: Annotated[str, typer.Option(help="Vietnamese meaning.")] = "",
    en: Annotated[str, typer.Option(help="English meaning.")] = "",
):
    """[bold green]Save[/bold green] a word for review."""
    try:
        created = _service(ctx).save_word(key, level, pinyin=pinyin, vi=vi, en=en)
    except (SrsError, ValueError) as e:
        _fail(e)

    if created:
        typer.secho(f"Saved '{key}'.", fg="green")
    else:
        typer.secho(f"'{key}' is already saved.", fg="yellow")


@app.command()
def lookup(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Word that was looked up.")],
):
    """Record a manual dictionary lookup (used to decide friction on save)."""
    try:
        count = _service(ctx).record_lookup(key)
    except ValueError as e:
        _fail(e)
    typer.echo(f"'{key}' looked up {count} time(s).")


@app.command()
def review(
    ctx: typer.Context,
    key: Annotated[str, typer.Argument(help="Saved word.")],
    rating: Annotated[
        str, typer.Argument(help="again, hard, good, easy, or a raw quality 1-5.")
    ],
    json_output: Annotated[bool, typer.Option("--json", help="Output the card as JSON.")] = False,
):
    """Record a completed review and reschedule the card."""
    try:
        card = _service(ctx).review(key, _parse_quality(rating))
    except (SrsError, ValueError) as e:
        _fail(e)

    if json_output:
        typer.echo(json.dumps(card_to_record(card), ensure_ascii=False, indent=2))
    else:
        typer.echo(
            f"'{card.key}': next review in {card.interval} day(s) "
            f"({card.next_review:%Y-%m-%d %H:%M} UTC)"
        )


@app.command()
def queue(
    ctx: typer.Context,
    level: Annotated[str, typer.Argument(help="HSK level: 1-6, 7-9, hsk3...")],
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List the cards of a level that are due now."""
    try:
        cards = _service(ctx).due_queue(level)
    except SrsError as e:
        _fail(e)

    if json_output:
        typer.echo(
            json.dumps([card_to_record(c) for c in cards], ensure_ascii=False, indent=2)
        )
        return

    if not cards:
        typer.secho("No cards due.", fg="green")
        return
    typer.echo(f"Due: {len(cards)}")
    for card in cards:
        typer.echo(f"  {_card_line(card)}")


@app.command()
def stats(
    ctx: typer.Context,
    level: Annotated[
        str | None, typer.Argument(help="HSK level. Omit for every level.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show New / Learning / Mastered counts."""
    service = _service(ctx)
    try:
        if level is None:
            summaries = service.overview()
        else:
            summaries = {service.normalize_level(level): service.analytics(level)}
    except SrsError as e:
        _fail(e)

    data: dict[str, Any] = {tag: _summary_dict(s) for tag, s in summaries.items()}
    if json_output:
        payload: dict[str, Any] = {"levels": data}
        if level is None:
            payload["due"] = service.due_count()
        typer.echo(json.dumps(payload, indent=2))
        return

    for tag, counts in data.items():
        if level is None and counts["total"] == 0:
            continue
        typer.echo(
            f"HSK {tag}: new {counts['new']}  learning {counts['learning']}"
            f"  mastered {counts['mastered']}  total {counts['total']}"
        )
    if level is None:
        typer.echo(f"Due today: {service.due_count()}")


@app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="YAML word list.")],
):
    """Save every word of a YAML word list."""
    try:
        entries = load_word_list(path)
        result = _service(ctx).import_words(entries)
    except (WordListError, SrsError) as e:
        _fail(e)

    typer.secho(f"Imported {len(result.created)} word(s).", fg="green")
    if result.skipped:
        typer.secho(f"Already saved: {len(result.skipped)}", fg="yellow")


@app.command()
def serve(
    ctx: typer.Context,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    config = resolve_config(ctx.obj.get("overrides") if ctx.obj else None)
    uvicorn.run(
        "hsk_srs.server:app",
        host=host or config.host,
        port=port or config.port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = resolve_config(ctx.obj.get("overrides") if ctx.obj else None)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
