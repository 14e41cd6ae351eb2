"""Database CLI commands."""

from pathlib import Path

import click

from roundsapi.errors import UnavailableError
from roundsapi.persistence.config import DatabaseConfig
from roundsapi.persistence.sqlalchemy_access import SQLAlchemyDataAccess

SCHEMA_FILE = Path(__file__).resolve().parent.parent / "persistence" / "schema.sql"


@click.group()
def db():
    """Database commands."""
    pass


@db.command()
@click.option(
    "--url",
    default=None,
    help="Database URL (default: ROUNDSAPI_DATABASE_URL / DATABASE_URL).",
)
def init(url: str | None):
    """Create the reference schema in the configured database."""
    config = DatabaseConfig(url) if url else DatabaseConfig.from_env()
    data_access = SQLAlchemyDataAccess(config)
    data_access.connect()
    try:
        count = data_access.apply_script(SCHEMA_FILE.read_text())
    except UnavailableError as e:
        click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
        raise SystemExit(1)
    finally:
        data_access.close()
    click.echo(f"Applied {count} statement(s) to {config.dialect} database.")
