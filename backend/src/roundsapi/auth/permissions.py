"""Endpoint access levels."""

from enum import Enum

from roundsapi.auth.types import UserContext
from roundsapi.errors import ForbiddenError, UnauthenticatedError

# Role hierarchy - higher number = more permissions
ROLE_HIERARCHY = {
    "member": 1,
    "admin": 2,
}

UNAUTHORIZED_MESSAGE = "Authorized access only."
NON_ADMIN_MESSAGE = "Admin access only."
MEMBER_ONLY_MESSAGE = "Only logged in user can access to this endpoint."


class Access(Enum):
    """Who may call an endpoint."""

    PUBLIC = "public"
    MEMBER = "member"
    ADMIN = "admin"


def role_level(user: UserContext | None) -> int:
    """Highest role level the caller holds, 0 when anonymous."""
    if user is None:
        return 0
    # Any identified caller is at least a member
    return max([ROLE_HIERARCHY["member"], *(ROLE_HIERARCHY.get(r, 0) for r in user.roles)])


def check_access(access: Access, user: UserContext | None) -> None:
    """Raise unless the caller satisfies the endpoint's access level.

    Raises:
        UnauthenticatedError: Member/admin endpoint called anonymously
        ForbiddenError: Admin endpoint called by a non-admin
    """
    if access == Access.PUBLIC:
        return
    if user is None:
        message = MEMBER_ONLY_MESSAGE if access == Access.MEMBER else UNAUTHORIZED_MESSAGE
        raise UnauthenticatedError(message)
    if access == Access.ADMIN and role_level(user) < ROLE_HIERARCHY["admin"]:
        raise ForbiddenError(NON_ADMIN_MESSAGE)
