"""FastAPI dependencies for authentication."""

from fastapi import Request

from roundsapi.auth.middleware import get_user_context
from roundsapi.auth.types import UserContext


def get_current_user(request: Request) -> UserContext | None:
    """Dependency to get the current user context.

    This is a soft dependency - returns None if not authenticated. Access
    levels are enforced per endpoint by the service layer.
    """
    return get_user_context(request)
