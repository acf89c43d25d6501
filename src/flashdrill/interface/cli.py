"""flashdrill CLI: review, stats, reset, serve and config commands."""

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Annotated

import typer

from flashdrill.application.config import resolve_config
from flashdrill.domain.exceptions import CatalogError

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdrill: spaced-repetition flashcard drills.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage flashdrill configuration.")
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

LOG_LEVELS = {0: logging.ERROR, 1: logging.WARNING, 2: logging.INFO}


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for flashdrill."""
    logging.getLogger("flashdrill").setLevel(LOG_LEVELS.get(verbose + 1, logging.DEBUG))


def _load_session(catalog: Path | None, state_file: Path | None, **overrides):
    from flashdrill.application.factory import build_study_session

    config = resolve_config({"catalog_file": catalog, "state_file": state_file, **overrides})
    try:
        return config, build_study_session(config)
    except CatalogError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(1) from e


CatalogOption = Annotated[
    Path | None, typer.Option("--catalog", "-c", help="YAML/JSON card catalog.")
]
StateOption = Annotated[
    Path | None, typer.Option("--state-file", help="Where review state is stored.")
]


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    catalog: CatalogOption = None,
    state_file: StateOption = None,
    shuffle: Annotated[
        bool | None,
        typer.Option("--shuffle/--no-shuffle", help="Shuffle cards of equal priority."),
    ] = None,
    miss_delay: Annotated[
        float | None, typer.Option(help="Seconds to study a missed card before moving on.")
    ] = None,
):
    """[bold green]Review[/bold green] the cards that are due."""
    config, session = _load_session(
        catalog,
        state_file,
        shuffle_catalog=shuffle,
        miss_delay_seconds=miss_delay,
    )

    session.start()
    try:
        while (card := session.current_card()) is not None:
            snap = session.progress_snapshot()
            typer.echo(f"\nCard {snap.current} of {snap.total}  ({len(session.queue)} left)")
            typer.secho(card.front, bold=True)
            typer.prompt("Press Enter to flip", default="", show_default=False)
            typer.secho(card.back, fg="cyan", bold=True)

            if typer.confirm("Did you get it right?", default=True):
                session.answer_correct()
                continue

            result = session.answer_incorrect()
            if result is None:
                break
            pending, feedback = result
            typer.secho(f"\n{feedback.title}", fg="yellow", bold=True)
            typer.echo(feedback.message)
            time.sleep(config.miss_delay_seconds)
            session.commit_miss(pending)
    except (KeyboardInterrupt, typer.Abort):
        typer.echo("\nSession interrupted.")
        raise typer.Exit(130) from None
    finally:
        session.close()

    typer.secho("\nAll reviews for today are done. Come back tomorrow!", fg="green")


@app.command()
def stats(
    catalog: CatalogOption = None,
    state_file: StateOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show review statistics for the catalog."""
    _, session = _load_session(catalog, state_file)
    totals = session.global_stats()
    known = session.scheduler.all_stats()

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "total_cards": totals.total_cards,
                    "mastered_cards": totals.mastered_cards,
                    "review_due_count": totals.review_due_count,
                    "cards": [
                        {
                            "id": card.id,
                            "front": card.front,
                            "repetitions": known[card.id].repetitions,
                            "ease_factor": round(known[card.id].ease_factor, 2),
                            "interval_days": known[card.id].interval_days,
                            "correct_attempts": known[card.id].correct_attempts,
                            "total_attempts": known[card.id].total_attempts,
                        }
                        for card in sorted(session.cards, key=lambda c: c.id)
                        if card.id in known
                    ],
                },
                indent=2,
            )
        )
        return

    typer.echo(
        f"Tracked: {totals.total_cards}  Mastered: {totals.mastered_cards}"
        f"  Due: {totals.review_due_count}"
    )
    for card in sorted(session.cards, key=lambda c: c.id):
        s = known.get(card.id)
        if s is None:
            typer.echo(f"  {card.front}: new")
            continue
        typer.echo(
            f"  {card.front}: {s.correct_attempts}/{s.total_attempts} correct, "
            f"interval {s.interval_days}d, ease {s.ease_factor:.2f}"
        )


@app.command()
def reset(
    catalog: CatalogOption = None,
    state_file: StateOption = None,
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation.")
    ] = False,
):
    """Forget all review history and today's progress."""
    if not force and not typer.confirm("Reset all progress?", default=False):
        raise typer.Exit()

    _, session = _load_session(catalog, state_file)
    session.reset_all()
    session.close()
    typer.secho("Progress reset.", fg="green")


@app.command()
def serve(
    catalog: CatalogOption = None,
    state_file: StateOption = None,
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8787,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP review server."""
    import uvicorn

    # The server resolves its own config, so hand paths over via the environment
    if catalog is not None:
        os.environ["FLASHDRILL_CATALOG_FILE"] = str(catalog.expanduser().resolve())
    if state_file is not None:
        os.environ["FLASHDRILL_STATE_FILE"] = str(state_file.expanduser().resolve())

    uvicorn.run("flashdrill.server:app", host=host, port=port, reload=reload)


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
