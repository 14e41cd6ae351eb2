"""roundsapi CLI entry point."""

import logging

import click

from roundsapi.config import AppConfig


@click.group()
def cli():
    """roundsapi - contest round data service CLI."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Interface to bind.")
@click.option("--port", default=8000, show_default=True, type=int, help="Port to listen on.")
@click.option("--reload", is_flag=True, default=False, help="Restart on code changes.")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    log_level = AppConfig.from_env().log_level.lower()
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "roundsapi.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# Register subcommand groups
from roundsapi.cli.catalog_cmd import catalog  # noqa: E402
from roundsapi.cli.db_cmd import db  # noqa: E402
from roundsapi.cli.token_cmd import token  # noqa: E402

cli.add_command(catalog)
cli.add_command(db)
cli.add_command(token)
