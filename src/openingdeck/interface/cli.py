"""openingdeck CLI: practice opening repertoires stored in PGN files."""

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated

import typer

from openingdeck.application.config import AppConfig, resolve_config
from openingdeck.application.factory import get_deck_store
from openingdeck.application.practice_session import PracticeSession, Prompt, move_label
from openingdeck.application.review_scheduler import card_status
from openingdeck.domain.errors import OpeningDeckError, ResetAborted
from openingdeck.domain.models import DeckKey, Grade
from openingdeck.infrastructure.pgn_tree import load_game_tree

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="openingdeck: spaced-repetition practice for chess openings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage openingdeck configuration.")
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

VERBOSITY_LEVELS = {0: logging.ERROR, 1: logging.WARNING, 2: logging.INFO}

PgnArg = Annotated[Path, typer.Argument(help="PGN file holding the repertoire.")]
GameOpt = Annotated[int, typer.Option("--game", "-g", help="Game number in the file (0-based).")]
DataDirOpt = Annotated[Path | None, typer.Option(help="Directory where decks are stored.")]


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
):
    """Global settings for openingdeck."""
    ctx.ensure_object(dict)
    # Each -v raises the configured level by one step
    verbosity = resolve_config().verbose + verbose
    ctx.obj["verbose"] = verbosity
    logging.getLogger("openingdeck").setLevel(log_level(verbosity))


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def log_level(verbosity: int) -> int:
    return VERBOSITY_LEVELS.get(verbosity, logging.DEBUG)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _format_time(moment: datetime | None) -> str:
    if moment is None:
        return "-"
    return moment.astimezone().strftime("%Y-%m-%d %H:%M")


@contextmanager
def _session(
    pgn: Path, game: int, data_dir: Path | None, random: bool = False
) -> Iterator[tuple[AppConfig, PracticeSession]]:
    """Open a practice session for one game, turning domain errors into exit codes."""
    try:
        config = resolve_config({"data_dir": data_dir})
        tree, headers = load_game_tree(pgn, game)
        store = get_deck_store(config)
        key = DeckKey(file=str(pgn.resolve()), game=game)
        session = PracticeSession(
            store,
            key,
            tree,
            side=headers.side,
            start=headers.start,
            random=random or config.random_review,
        )
        session.start_session()
        try:
            yield config, session
        finally:
            session.close()
    except OpeningDeckError as e:
        typer.secho(f"Error: {e}", fg="red", err=True)
        raise typer.Exit(1) from e


def _echo_prompt(prompt: Prompt) -> None:
    typer.echo(f"Position: {prompt.card.fen}")
    typer.echo(f"Find: {prompt.move_label} ?")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def stats(pgn: PgnArg, game: GameOpt = 0, data_dir: DataDirOpt = None):
    """Show practiced, due and unseen counts."""
    with _session(pgn, game, data_dir) as (_, session):
        s = session.stats(_now())
        if s.total == 0:
            typer.echo("No positions to practice. Add variations for your side to the game.")
            return
        typer.echo(f"Practiced: {s.practiced}")
        typer.echo(f"Due: {s.due}")
        typer.echo(f"Unseen: {s.unseen}")
        typer.echo(f"Total: {s.total}")
        if not s.has_work:
            typer.echo(f"All positions practiced. Next due: {_format_time(s.next_due)}")


@app.command("next")
def next_position(
    pgn: PgnArg,
    game: GameOpt = 0,
    data_dir: DataDirOpt = None,
    random: Annotated[bool, typer.Option("--random", help="Pick any position.")] = False,
):
    """Show the next position to practice."""
    with _session(pgn, game, data_dir, random) as (_, session):
        prompt = session.next(_now())
        if prompt is None:
            typer.secho("Nothing due right now.", fg="yellow")
            return
        _echo_prompt(prompt)


@app.command()
def answer(
    move: Annotated[str, typer.Argument(help="Your move in SAN, e.g. Nf3.")],
    pgn: PgnArg,
    game: GameOpt = 0,
    data_dir: DataDirOpt = None,
):
    """Answer the next due position."""
    with _session(pgn, game, data_dir) as (_, session):
        now = _now()
        if session.next(now) is None:
            typer.secho("Nothing due right now.", fg="yellow")
            return
        expected = session.reveal()
        if session.answer(move, now):
            typer.secho("Correct!", fg="green")
            if session.current is not None:
                _echo_prompt(session.current)
        else:
            typer.secho(f"Wrong. Expected {expected}.", fg="red")


@app.command()
def skip(pgn: PgnArg, game: GameOpt = 0, data_dir: DataDirOpt = None):
    """Skip the next due position and show the one after it."""
    with _session(pgn, game, data_dir) as (_, session):
        now = _now()
        if session.next(now) is None:
            typer.secho("Nothing due right now.", fg="yellow")
            return
        prompt = session.skip(now)
        if prompt is None:
            typer.echo("Skipped. Nothing else is due.")
        else:
            _echo_prompt(prompt)


@app.command()
def grade(
    fen: Annotated[str, typer.Argument(help="FEN of the position to grade.")],
    value: Annotated[int, typer.Argument(help="1=Again, 2=Hard, 3=Good, 4=Easy.")],
    pgn: PgnArg,
    game: GameOpt = 0,
    data_dir: DataDirOpt = None,
):
    """Record a self-assessed grade for a position."""
    with _session(pgn, game, data_dir) as (_, session):
        index = session.store.index_of(session.key, fen)
        if index is None:
            typer.secho("Position is not in the deck.", fg="red", err=True)
            raise typer.Exit(1)
        try:
            deck = session.store.record_grade(session.key, index, value, _now())
        except ValueError as e:
            typer.secho(f"Error: {e}", fg="red", err=True)
            raise typer.Exit(2) from e
        typer.echo(f"Next due: {_format_time(deck.positions[index].schedule.due)}")


@app.command()
def reset(
    pgn: PgnArg,
    game: GameOpt = 0,
    data_dir: DataDirOpt = None,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt.")] = False,
):
    """Discard all practice data for this game and rebuild it."""
    with _session(pgn, game, data_dir) as (_, session):

        def confirm() -> bool:
            if yes:
                return True
            typer.echo(f"This resets all practice data for {pgn.name}. This cannot be undone.")
            return typer.confirm("Reset?", default=False)

        try:
            deck = session.store.reset(
                session.key, session.tree, session.side, session.start, confirm=confirm
            )
        except ResetAborted as e:
            typer.echo("Cancelled.")
            raise typer.Exit(1) from e
        typer.secho(f"Reset. {len(deck.positions)} positions to practice.", fg="green")


@app.command()
def positions(pgn: PgnArg, game: GameOpt = 0, data_dir: DataDirOpt = None):
    """List every practice position with its status and due date."""
    with _session(pgn, game, data_dir) as (_, session):
        deck = session.deck
        if not deck.positions:
            typer.echo("No positions yet.")
            return
        now = _now()
        index = session.store.position_index(session.key, session.tree)
        for card in deck.positions:
            node = session.tree.node_at(index.get(card.fen, ()))
            label = move_label(node.half_moves)
            typer.echo(
                f"{label} {card.answer}\t{card_status(card, now)}\t"
                f"{_format_time(card.schedule.due)}"
            )


@app.command()
def logs(pgn: PgnArg, game: GameOpt = 0, data_dir: DataDirOpt = None):
    """Show the grading history."""
    with _session(pgn, game, data_dir) as (_, session):
        entries = session.deck.logs
        if not entries:
            typer.echo("No logs yet.")
            return
        for entry in entries:
            outcome = "Success" if entry.rating == Grade.EASY else "Fail"
            typer.echo(f"{Grade(entry.rating).name}\t{outcome}\t{_format_time(entry.due)}\t{entry.fen}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


if __name__ == "__main__":
    app()
