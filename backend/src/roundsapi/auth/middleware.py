"""Authentication middleware for FastAPI."""

import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from roundsapi.auth.jwt_service import JWTError, JWTService
from roundsapi.auth.types import UserContext

logger = logging.getLogger(__name__)


def _user_id(raw: str) -> int | str:
    return int(raw) if raw.isdigit() else raw


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware that extracts the bearer token and sets the user context.

    If no token is present or the token is invalid, user_context is None.
    The middleware does NOT reject requests - endpoints decide through their
    access level whether an anonymous caller is acceptable.
    """

    def __init__(self, app, jwt_service: JWTService):
        super().__init__(app)
        self._jwt_service = jwt_service

    async def dispatch(self, request: Request, call_next) -> Response:
        request.state.user_context = None

        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header[7:]  # Remove "Bearer " prefix
            try:
                claims = self._jwt_service.decode_token(token)
            except JWTError as e:
                logger.info("Ignoring bearer token: %s", e)
            else:
                request.state.user_context = UserContext(
                    user_id=_user_id(claims.user_id),
                    roles=(claims.role,) if claims.role else (),
                )

        return await call_next(request)


def get_user_context(request: Request) -> UserContext | None:
    """Get the user context from the request state.

    Returns:
        UserContext if a valid token was presented, None otherwise
    """
    return getattr(request.state, "user_context", None)
