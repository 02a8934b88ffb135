"""Access to the identity and roles of the current caller.

Services depend on the small ``AuthorizationContext`` interface rather
than on Flask or JWT helpers directly, so they can be exercised with any
identity source. ``JwtAuthorizationContext`` is the implementation used
by the HTTP routes.
"""
from __future__ import annotations

from typing import Optional

from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity, verify_jwt_in_request

from .models import Role, User

ROLES_CLAIM = "roles"


class AuthorizationContext:
    """Identity of the caller on whose behalf a service runs."""

    def current_user_login(self) -> Optional[str]:
        raise NotImplementedError

    def current_user_has_role(self, role: Role) -> bool:
        raise NotImplementedError


class JwtAuthorizationContext(AuthorizationContext):
    """Read the caller from the JWT attached to the current request.

    The token identity is the user's login and the ``roles`` claim lists
    role names. A request without a token has no login and no roles.
    """

    def current_user_login(self) -> Optional[str]:
        verify_jwt_in_request(optional=True)
        return get_jwt_identity()

    def current_user_has_role(self, role: Role) -> bool:
        verify_jwt_in_request(optional=True)
        return role.value in get_jwt().get(ROLES_CLAIM, [])


class StaticAuthorizationContext(AuthorizationContext):
    """A fixed caller, for scripts and jobs that run outside a request."""

    def __init__(self, login: Optional[str] = None, roles: tuple[Role, ...] = ()) -> None:
        self.login = login
        self.roles = set(roles)

    def current_user_login(self) -> Optional[str]:
        return self.login

    def current_user_has_role(self, role: Role) -> bool:
        return role in self.roles


def issue_access_token(user: User) -> str:
    """Create a JWT for ``user`` carrying its login and role."""
    return create_access_token(identity=user.login, additional_claims={ROLES_CLAIM: [user.role.value]})
