from __future__ import annotations

import logging
from typing import Optional

import typer

from inventory_seeder.config import ConfigurationError, Settings, load_settings
from inventory_seeder.ingest import provision_only, seed_database
from inventory_seeder.logging_utils import setup_logging


app = typer.Typer(add_completion=False, help="Seed MongoDB Atlas with synthetic inventory items")


def _load_settings_or_exit() -> Settings:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    setup_logging(settings.log_level)
    return settings


@app.command()
def health() -> None:
    """Health check to verify config + logging works."""
    settings = _load_settings_or_exit()
    log = logging.getLogger("inventory_seeder.health")

    log.info("Environment variables validated successfully")
    log.info("Model: %s", settings.openai_model)
    log.info("Embedding model: %s (%d dims)", settings.openai_embedding_model, settings.embedding_dimensions)
    log.info("Target: %s.%s", settings.mongodb_database, settings.mongodb_collection)
    log.info("Vector index: %s", settings.vector_index_name)
    log.info("Batch size: %d, pause: %d ms", settings.batch_size, settings.batch_pause_ms)

    typer.echo("OK")


@app.command()
def version() -> None:
    """Print version and exit."""
    typer.echo("inventory-seeder 0.1.0")


@app.command()
def provision() -> None:
    """
    Ensure the collection exists and recreate its vector search index.
    """
    settings = _load_settings_or_exit()
    log = logging.getLogger("inventory_seeder.provision")

    try:
        created = provision_only(settings)
    except Exception as e:
        log.exception("Provisioning failed: %s", e)
        typer.secho(f"FAILED: {type(e).__name__}: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    if not created:
        typer.secho("Vector index was not created", fg=typer.colors.YELLOW)
        raise typer.Exit(code=1)

    typer.secho("OK", fg=typer.colors.GREEN)


@app.command()
def seed(
    count: Optional[int] = typer.Option(None, "--count", min=1, help="Number of items to generate (default: SEED_ITEM_COUNT)"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", min=1, help="Items per batch (default: BATCH_SIZE)"),
    pause_ms: Optional[int] = typer.Option(None, "--pause-ms", min=0, help="Pause between batches in ms (default: BATCH_PAUSE_MS)"),
    keep_going: bool = typer.Option(False, "--keep-going", help="Continue with the next item when one fails"),
) -> None:
    """
    Replace the collection's contents with freshly generated, embedded items.
    """
    settings = _load_settings_or_exit()

    report = seed_database(
        settings,
        count=count,
        batch_size=batch_size,
        pause_s=pause_ms / 1000.0 if pause_ms is not None else None,
        stop_on_error=not keep_going,
    )

    typer.echo(report.as_dict())

    if not report.ok:
        typer.secho(f"FAILED: {report.error}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho("OK", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
