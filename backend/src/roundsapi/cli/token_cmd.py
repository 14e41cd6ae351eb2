"""Token CLI commands - mint bearer tokens for local use."""

import click

from roundsapi.auth.jwt_service import JWTService
from roundsapi.auth.permissions import ROLE_HIERARCHY
from roundsapi.config import AppConfig


@click.group()
def token():
    """Bearer token commands."""
    pass


@token.command()
@click.argument("user_id")
@click.option(
    "--role",
    type=click.Choice(sorted(ROLE_HIERARCHY)),
    default="member",
    show_default=True,
)
@click.option("--ttl", type=int, default=None, help="Lifetime in seconds.")
def issue(user_id: str, role: str, ttl: int | None):
    """Print a token for USER_ID signed with ROUNDSAPI_SECRET_KEY."""
    service = JWTService(AppConfig.from_env().secret_key)
    click.echo(service.issue_token(user_id, role=role, ttl=ttl))
