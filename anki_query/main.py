# Path: anki_query/main.py
#!/usr/bin/env python3
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Any, Callable, List, Optional

import typer
from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from typer.core import TyperGroup

from anki_query.core.config import settings
from anki_query.core.anki_detector import list_profiles, resolve_collection_path
from anki_query.core.errors import AnkiQueryError, UsageError
from anki_query.core.logging_config import setup_logging
from anki_query.models import CollectionConfig
from anki_query.services import CardService, SortKey, StatsService
from anki_query.utils.dates import parse_date_bound

logger = logging.getLogger(__name__)

PROG_NAME = "anki-query"

# typer may run on a vendored click, so the usage error class comes from the core module its group is built on
_click_core = sys.modules[next(c for c in TyperGroup.__mro__ if c.__name__ == "Group").__module__]
ClickUsageError = _click_core.UsageError


def _print_usage(ctx: typer.Context) -> None:
    """Usage text listing every command with its positional arguments."""
    group = ctx.command
    lines = [f"Usage: {PROG_NAME} [OPTIONS] COMMAND [ARGS]...", "", "Commands:"]

    for name in group.list_commands(ctx):
        cmd = group.get_command(ctx, name)
        args = " ".join(
            f"<{p.name}>" if p.required else f"[{p.name}]"
            for p in cmd.params if p.param_type_name == "argument"
        )
        lines.append(f"  {name:<9} {args:<34} {cmd.get_short_help_str(limit=60)}")

    typer.echo("\n".join(lines))


class CommandGroup(TyperGroup):
    """Every usage problem ends with exit code 1; unknown commands print the usage text."""

    def resolve_command(self, ctx: typer.Context, args: List[str]):
        cmd_name = args[0] if args else None
        if cmd_name and not cmd_name.startswith("-") and self.get_command(ctx, cmd_name) is None:
            typer.echo(f"Unknown command: {cmd_name}", err=True)
            _print_usage(ctx)
            ctx.exit(1)
        return super().resolve_command(ctx, args)

    def make_context(self, info_name, args, parent=None, **extra) -> typer.Context:
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except ClickUsageError as e:
            e.exit_code = 1
            raise

    def invoke(self, ctx: typer.Context) -> Any:
        try:
            return super().invoke(ctx)
        except ClickUsageError as e:
            e.exit_code = 1
            raise


app = typer.Typer(
    name=PROG_NAME,
    help="Inspect and edit a local Anki collection (search, add, archive, review stats).",
    add_completion=False,
    cls=CommandGroup,
)
err_console = Console(stderr=True)

# --- Helpers ---

def _to_jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


def _collection_config(ctx: typer.Context) -> CollectionConfig:
    """Build the accessor config: CLI options first, then settings."""
    opts = ctx.obj or {}
    collection: Optional[Path] = opts.get("collection")
    profile: Optional[str] = opts.get("profile")

    if collection is None and profile is None:
        collection, profile = settings.COLLECTION_PATH, settings.ANKI_PROFILE

    path = resolve_collection_path(settings.ANKI_BASE_DIR, profile=profile, collection=collection)
    logger.debug(f"Using collection: {path}")

    return CollectionConfig(
        collection_path=path,
        inbox_deck=settings.INBOX_DECK,
        archive_deck=settings.ARCHIVE_DECK,
        default_note_type=settings.DEFAULT_NOTE_TYPE,
        search_limit=settings.SEARCH_LIMIT,
        note_type_fields=settings.NOTE_TYPE_FIELDS,
    )


def _run(action: Callable[[], Any]) -> None:
    """
    Chạy một thao tác rồi in kết quả dạng JSON ra stdout.
    Có lỗi thì chỉ in ra stderr và thoát với code 1.
    """
    try:
        result = action()
    except UsageError as e:
        err_console.print(f"[bold red]❌ Usage error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except AnkiQueryError as e:
        err_console.print(f"[bold red]❌ Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except sqlite3.Error as e:
        logger.debug("Database failure", exc_info=True)
        err_console.print(f"[bold red]❌ Storage error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except Exception as e:
        logger.exception("Command failed")
        err_console.print(f"[bold red]❌ Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    typer.echo(json.dumps(_to_jsonable(result), indent=2, ensure_ascii=False))


def _optional(value: Optional[str]) -> Optional[str]:
    return value or None

# --- Callback ---

@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Anki profile name"),
    collection: Optional[Path] = typer.Option(None, "--collection", "-c", help="Path to a collection.anki2 file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs"),
) -> None:
    log_level = "DEBUG" if verbose else "WARNING"
    setup_logging(log_level)
    logger.debug(f"App initialized with log level: {log_level}")

    ctx.obj = {"profile": profile, "collection": collection}

    if ctx.invoked_subcommand is None:
        _print_usage(ctx)
        raise typer.Exit(code=1)

# --- Commands ---

@app.command()
def search(
    ctx: typer.Context,
    keyword: Optional[str] = typer.Argument(None, help="Substring to look for in note fields"),
    deck: Optional[str] = typer.Argument(None, help="Exact deck name"),
    sort_by: SortKey = typer.Option(SortKey.LAST_REVIEW_TIME, "--sort-by", "-s"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Max results"),
    min_reviews: int = typer.Option(0, "--min-reviews", min=0),
    ease: Optional[int] = typer.Option(None, "--ease", min=1, max=4, help="Ease of the last review"),
    field: Optional[List[str]] = typer.Option(None, "--field", "-f", help="Field to return (repeatable)"),
    ascending: bool = typer.Option(False, "--ascending", help="Sort ascending (unreviewed cards stay last)"),
) -> None:
    """Search cards with their review statistics."""
    _run(lambda: CardService(_collection_config(ctx)).search(
        keyword=_optional(keyword),
        deck=_optional(deck),
        sort_by=sort_by,
        limit=limit,
        min_review_count=min_reviews,
        ease_factor=ease,
        fields_to_return=field or ("front", "back"),
        descending=not ascending,
    ))


@app.command()
def add(
    ctx: typer.Context,
    deck: Optional[str] = typer.Argument(None, help="Target deck (default: inbox deck)"),
    front: Optional[str] = typer.Argument(None, help="Front field"),
    back: Optional[str] = typer.Argument(None, help="Back field"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Note type name"),
) -> None:
    """Add a new note and card."""
    def action():
        if not front:
            raise UsageError(f"Usage: {PROG_NAME} add [deck] [front] [back]")
        return CardService(_collection_config(ctx)).add_card(
            deck=_optional(deck),
            fields={"Front": front, "Back": back or ""},
            model_name=model,
        )

    _run(action)


@app.command()
def archive(
    ctx: typer.Context,
    card_id: int = typer.Argument(..., help="Card id"),
) -> None:
    """Move a card into the archive deck."""
    _run(lambda: CardService(_collection_config(ctx)).archive_card(card_id))


@app.command()
def metrics(
    ctx: typer.Context,
    deck: Optional[str] = typer.Argument(None, help="Deck name"),
    start_date: Optional[str] = typer.Argument(None, help="Epoch ms or YYYY-MM-DD"),
    end_date: Optional[str] = typer.Argument(None, help="Epoch ms or YYYY-MM-DD (inclusive)"),
) -> None:
    """Review statistics, optionally by deck and date range."""
    _run(lambda: StatsService(_collection_config(ctx)).get_review_metrics(
        start_date=parse_date_bound(start_date),
        end_date=parse_date_bound(end_date, end=True),
        deck=_optional(deck),
    ))


@app.command()
def overview(ctx: typer.Context) -> None:
    """Counts of cards, decks, notes and reviews."""
    _run(lambda: StatsService(_collection_config(ctx)).get_overview())


@app.command()
def reviews(ctx: typer.Context) -> None:
    """Review statistics over the whole collection."""
    _run(lambda: StatsService(_collection_config(ctx)).get_review_metrics())


@app.command()
def decks(ctx: typer.Context) -> None:
    """Card counts per deck and queue."""
    _run(lambda: StatsService(_collection_config(ctx)).get_deck_details())


@app.command()
def find(
    ctx: typer.Context,
    keyword: str = typer.Argument(..., help="Substring to look for in note fields"),
    limit: int = typer.Option(50, "--limit", "-l", min=1),
    offset: int = typer.Option(0, "--offset", min=0),
    deck: Optional[str] = typer.Option(None, "--deck", "-d"),
    case_sensitive: bool = typer.Option(False, "--case-sensitive"),
) -> None:
    """Paginated keyword search returning every note field."""
    _run(lambda: CardService(_collection_config(ctx)).find_cards_by_keyword(
        keyword,
        limit=limit,
        offset=offset,
        deck=_optional(deck),
        case_sensitive=case_sensitive,
    ))


@app.command()
def profiles() -> None:
    """List Anki profiles that have a collection."""
    _run(lambda: list_profiles(settings.ANKI_BASE_DIR))


def main() -> None:
    app()

if __name__ == "__main__":
    main()
