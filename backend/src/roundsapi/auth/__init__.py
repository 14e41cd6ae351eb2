"""Authentication and endpoint access control."""

from roundsapi.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)
from roundsapi.auth.dependencies import get_current_user
from roundsapi.auth.middleware import AuthMiddleware, get_user_context
from roundsapi.auth.permissions import ROLE_HIERARCHY, Access, check_access
from roundsapi.auth.types import TokenClaims, UserContext

__all__ = [
    "Access",
    "AuthMiddleware",
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "ROLE_HIERARCHY",
    "TokenClaims",
    "TokenExpiredError",
    "UserContext",
    "check_access",
    "get_current_user",
    "get_user_context",
]
