"""mneme CLI — inspect and exercise the scheduler on deck record files."""

import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from mneme.application.config import SchedulerConfig, resolve_config
from mneme.application.scheduler import Scheduler
from mneme.application.stats import DeckStatsService
from mneme.domain.errors import InvalidParametersError, MnemeError
from mneme.infrastructure.adapters.card_record import dump_deck, load_deck, to_record

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mneme: FSRS spaced-repetition scheduler.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage mneme configuration.")
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

_LEVELS = {0: logging.WARNING, 1: logging.INFO}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _config(ctx: typer.Context) -> SchedulerConfig:
    overrides = (ctx.obj or {}).get("overrides", {})
    try:
        return resolve_config(overrides)
    except ValidationError as e:
        typer.secho(f"Invalid configuration:\n{e}", fg="red", err=True)
        raise typer.Exit(1) from None


def _scheduler(ctx: typer.Context) -> Scheduler:
    try:
        return Scheduler(_config(ctx).to_parameters())
    except InvalidParametersError as e:
        typer.secho(f"Invalid scheduler parameters: {e}", fg="red", err=True)
        raise typer.Exit(1) from None


def _parse_now(now: str | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(now.replace("Z", "+00:00"))
    except ValueError:
        typer.secho(f"Invalid --now timestamp: {now}", fg="red", err=True)
        raise typer.Exit(1) from None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _load(deck: Path) -> dict:
    try:
        return load_deck(deck)
    except ValueError as e:
        typer.secho(f"Could not read deck: {e}", fg="red", err=True)
        raise typer.Exit(1) from None


def _require_card(cards: dict, card_id: str, deck: Path):
    if card_id not in cards:
        typer.secho(f"Card '{card_id}' not found in {deck}", fg="red", err=True)
        raise typer.Exit(1)
    return cards[card_id]


def _jsonable(value):
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, IntEnum):
        return value.name
    return value


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    retention: Annotated[
        float | None, typer.Option(help="Desired retention (0.7-0.99).")
    ] = None,
    maximum_interval: Annotated[
        int | None, typer.Option(help="Longest interval in days.")
    ] = None,
    fuzz: Annotated[
        bool | None, typer.Option("--fuzz/--no-fuzz", help="Spread long intervals.")
    ] = None,
):
    """Global settings for mneme."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {
        "desired_retention": retention,
        "maximum_interval": maximum_interval,
        "enable_fuzzing": fuzz,
        "verbose": verbose,
    }
    logging.getLogger().setLevel(_LEVELS.get(verbose, logging.DEBUG))


# ---------------------------------------------------------------------------
# Card commands
# ---------------------------------------------------------------------------


@app.command()
def new(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (YAML or JSON).")],
    card_id: Annotated[str, typer.Argument(help="Id of the card to add.")],
    now: Annotated[str | None, typer.Option(help="ISO timestamp; defaults to now.")] = None,
):
    """Add a [bold]new[/bold] card to a deck file."""
    cards = _load(deck)
    if card_id in cards:
        typer.secho(f"Card '{card_id}' already exists in {deck}", fg="yellow")
        raise typer.Exit(1)

    cards[card_id] = _scheduler(ctx).create_initial_state(_parse_now(now))
    dump_deck(deck, cards)
    typer.secho(f"Added '{card_id}' to {deck}", fg="green")


@app.command()
def review(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (YAML or JSON).")],
    card_id: Annotated[str, typer.Argument(help="Id of the reviewed card.")],
    rating: Annotated[str, typer.Argument(help="again, hard, good, easy (or 1-4).")],
    now: Annotated[str | None, typer.Option(help="ISO timestamp; defaults to now.")] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Print the result without saving.")
    ] = False,
):
    """[bold green]Review[/bold green] a card and write back its new memory-state."""
    cards = _load(deck)
    card = _require_card(cards, card_id, deck)

    try:
        updated = _scheduler(ctx).review(card, rating, _parse_now(now))
    except MnemeError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(1) from None

    typer.echo(json.dumps({card_id: to_record(updated)}, indent=2))

    if not dry_run:
        cards[card_id] = updated
        dump_deck(deck, cards)


@app.command()
def preview(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (YAML or JSON).")],
    card_id: Annotated[str, typer.Argument(help="Id of the card to preview.")],
    now: Annotated[str | None, typer.Option(help="ISO timestamp; defaults to now.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show what each rating would do to a card."""
    cards = _load(deck)
    card = _require_card(cards, card_id, deck)
    outcomes = _scheduler(ctx).preview(card, _parse_now(now))

    if json_output:
        typer.echo(
            json.dumps(
                {
                    rating.name: {
                        "card": to_record(outcome.card),
                        "log": {k: _jsonable(v) for k, v in asdict(outcome.log).items()},
                    }
                    for rating, outcome in outcomes.items()
                },
                indent=2,
            )
        )
        return

    for rating, outcome in outcomes.items():
        result = outcome.card
        typer.echo(
            f"{rating.name:<6} -> {result.state.name:<10} "
            f"due {result.due.isoformat()}  "
            f"({result.scheduled_days}d, S={result.stability:.2f}, D={result.difficulty:.2f})"
        )


# ---------------------------------------------------------------------------
# Deck commands
# ---------------------------------------------------------------------------


@app.command()
def due(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (YAML or JSON).")],
    limit: Annotated[int | None, typer.Option(help="Maximum number of cards.")] = None,
    now: Annotated[str | None, typer.Option(help="ISO timestamp; defaults to now.")] = None,
):
    """List due cards, earliest first."""
    cards = _load(deck)
    service = DeckStatsService(_scheduler(ctx))
    ids = service.due_cards(cards, _parse_now(now), limit=limit)

    if not ids:
        typer.secho("No cards due.", fg="yellow")
        return
    for card_id in ids:
        typer.echo(f"{card_id}\t{cards[card_id].due.isoformat()}")


@app.command()
def stats(
    ctx: typer.Context,
    deck: Annotated[Path, typer.Argument(help="Deck file (YAML or JSON).")],
    now: Annotated[str | None, typer.Option(help="ISO timestamp; defaults to now.")] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Summarize a deck: counts per state, due and overdue."""
    cards = _load(deck)
    service = DeckStatsService(_scheduler(ctx))
    summary = service.deck_stats(cards, _parse_now(now))

    if json_output:
        typer.echo(json.dumps(asdict(summary), indent=2))
        return

    typer.echo(
        f"Total: {summary.total}  New: {summary.new}  Learning: {summary.learning}"
        f"  Review: {summary.review}"
    )
    typer.echo(f"Due: {summary.due}  Overdue: {summary.overdue}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _config(ctx)
    typer.echo(json.dumps(config.model_dump(), indent=2))
