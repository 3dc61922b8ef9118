"""Built-in guards for the workforce application.

Each guard reads the shared ``Session`` and carries its own fallback.
They are peers: combine them in a ``GuardChain`` under capability tags::

    session = Session()
    chain = GuardChain([
        ("guest", GuestOnlyGuard(session)),
        ("authenticated", AuthenticationGuard(session)),
        ("admin", RoleGuard(session, {UserRole.HR_PORTAL})),
    ])
"""

from collections.abc import Iterable

from waypoint.guards.protocol import GuardDecision, NavigationContext
from waypoint.guards.roles import PermissionAction, UserRole, has_permission
from waypoint.guards.session import Session


class AuthenticationGuard:
    """Allow signed-in users; send everyone else to the login screen."""

    __slots__ = ("fallback", "session")

    def __init__(self, session: Session, fallback: str = "/login") -> None:
        self.session = session
        self.fallback = fallback

    def evaluate(self, context: NavigationContext) -> GuardDecision:
        if self.session.is_authenticated:
            return GuardDecision.allow()
        return GuardDecision.deny(self.fallback)


class GuestOnlyGuard:
    """Keep signed-in users off the splash and login screens."""

    __slots__ = ("fallback", "session")

    def __init__(self, session: Session, fallback: str = "/home") -> None:
        self.session = session
        self.fallback = fallback

    def evaluate(self, context: NavigationContext) -> GuardDecision:
        if self.session.is_authenticated:
            return GuardDecision.deny(self.fallback)
        return GuardDecision.allow()


class RoleGuard:
    """Allow users whose role is in *roles*.

    Assumes authentication already passed; an anonymous user has no role
    and is denied.
    """

    __slots__ = ("fallback", "roles", "session")

    def __init__(
        self,
        session: Session,
        roles: Iterable[UserRole],
        fallback: str = "/home",
    ) -> None:
        self.session = session
        self.roles = frozenset(roles)
        self.fallback = fallback

    def evaluate(self, context: NavigationContext) -> GuardDecision:
        if self.session.user.role in self.roles:
            return GuardDecision.allow()
        return GuardDecision.deny(self.fallback)


class PermissionGuard:
    """Allow users whose role grants *action* on *resource*."""

    __slots__ = ("action", "fallback", "resource", "session")

    def __init__(
        self,
        session: Session,
        resource: str,
        action: PermissionAction = PermissionAction.VIEW,
        fallback: str = "/home",
    ) -> None:
        self.session = session
        self.resource = resource
        self.action = action
        self.fallback = fallback

    def evaluate(self, context: NavigationContext) -> GuardDecision:
        role = self.session.user.role
        if role is not None and has_permission(role, self.resource, self.action):
            return GuardDecision.allow()
        return GuardDecision.deny(self.fallback)
