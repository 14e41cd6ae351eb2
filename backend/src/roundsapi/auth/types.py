"""Type definitions for authentication."""

from dataclasses import dataclass, field


@dataclass
class TokenClaims:
    """Claims embedded in a bearer token.

    Attributes:
        user_id: The caller's user ID
        role: The caller's role ("member" or "admin")
        exp: Token expiration timestamp
        iat: Token issued-at timestamp
    """

    user_id: str
    role: str | None = None
    exp: int = 0
    iat: int = 0


@dataclass(frozen=True)
class UserContext:
    """The identified caller of one request.

    Attributes:
        user_id: Caller ID; numeric IDs are kept as int
        roles: Roles held by the caller
    """

    user_id: int | str
    roles: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles
