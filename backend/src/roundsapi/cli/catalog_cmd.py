"""Catalog CLI commands - validate endpoint definitions."""

from pathlib import Path

import click

from roundsapi.catalog.loader import CATALOG_DIR, EndpointCatalog
from roundsapi.catalog.validator import validate_catalog_dir, validate_yaml_file
from roundsapi.config import AppConfig
from roundsapi.engine import EndpointService, register_builtin_handlers
from roundsapi.persistence.config import DatabaseConfig
from roundsapi.persistence.sqlalchemy_access import SQLAlchemyDataAccess
from roundsapi.validation import register_builtin_validators


@click.group()
def catalog():
    """Endpoint catalog commands."""
    pass


@catalog.command()
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
@click.option(
    "--path",
    "target_path",
    default=None,
    type=click.Path(exists=True, path_type=Path),
    help="Validate a single endpoint YAML file instead of the whole catalog.",
)
def validate(strict: bool, target_path: Path | None):
    """Validate endpoint YAML files against the JSON Schema, then load them."""
    if target_path is not None:
        issues = validate_yaml_file(target_path)
    else:
        issues = validate_catalog_dir(CATALOG_DIR)

    errors = [i for i in issues if i.severity == "error"]
    warnings = [i for i in issues if i.severity == "warning"]

    for issue in issues:
        colour = "red" if issue.severity == "error" else "yellow"
        click.echo(click.style(str(issue), fg=colour))

    if errors or (strict and warnings):
        click.echo(
            click.style(
                f"\n{len(errors)} schema error(s), {len(warnings)} warning(s) found",
                fg="red",
                bold=True,
            )
        )
        raise SystemExit(1)

    if warnings:
        click.echo(click.style(f"{len(warnings)} warning(s) found.", fg="yellow"))

    # Semantic validation only runs for the whole catalog
    if target_path is None:
        register_builtin_validators()
        register_builtin_handlers()
        loaded = EndpointCatalog(CATALOG_DIR)
        try:
            loaded.load_all()
            # Cross-checks handlers, query templates and transforms
            EndpointService(
                loaded,
                SQLAlchemyDataAccess(DatabaseConfig("sqlite://")),
                AppConfig(database=DatabaseConfig("sqlite://")),
            )
        except ValueError as e:
            click.echo(click.style(f"\nSemantic validation failed: {e}", fg="red"), err=True)
            raise SystemExit(1)

        click.echo(f"\nLoaded {len(loaded.endpoints)} endpoints:")
        for name in loaded.list_endpoints():
            endpoint = loaded.get(name)
            click.echo(
                f"  ✓ {name} ({endpoint.kind}, {endpoint.access.value}, "
                f"{len(endpoint.fields)} fields)"
            )

    click.echo(click.style("\nCatalog is valid.", fg="green", bold=True))
