"""Role-based authorization gate."""

from collections.abc import Iterable
from dataclasses import dataclass
from uuid import UUID

from src.identity.core.exceptions import ForbiddenError, UnauthenticatedError
from src.identity.models.enums import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """The identity behind a validated session token."""

    user_id: UUID
    role: Role
    session_id: UUID | None = None


def authorize(principal: Principal | None, required_roles: Iterable[Role]) -> Principal:
    """Allow or deny a principal for a set of roles.

    Pure function: no I/O, no state. Returns the principal when allowed.

    Raises:
        UnauthenticatedError: No principal is present.
        ForbiddenError: The principal's role is not one of required_roles.
    """
    if principal is None:
        raise UnauthenticatedError()

    allowed = frozenset(required_roles)
    if principal.role not in allowed:
        names = ", ".join(sorted(role.value for role in allowed))
        raise ForbiddenError(f"Requires role: {names}")
    return principal
