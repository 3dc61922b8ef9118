"""Guards: capability-tagged access checks and their ordered chain.

Usage::

    from waypoint.guards import AuthenticationGuard, GuardChain, RoleGuard, Session, UserRole

    session = Session()
    chain = GuardChain([
        ("authenticated", AuthenticationGuard(session)),
        ("admin", RoleGuard(session, {UserRole.HR_PORTAL})),
    ])
"""

from waypoint.guards.builtin import (
    AuthenticationGuard,
    GuestOnlyGuard,
    PermissionGuard,
    RoleGuard,
)
from waypoint.guards.chain import GuardChain
from waypoint.guards.protocol import Guard, GuardDecision, NavigationContext
from waypoint.guards.roles import PermissionAction, UserRole, has_permission
from waypoint.guards.session import AnonymousUser, Session, SessionUser, User

__all__ = [
    "AnonymousUser",
    "AuthenticationGuard",
    "GuardChain",
    "Guard",
    "GuardDecision",
    "GuestOnlyGuard",
    "NavigationContext",
    "PermissionAction",
    "PermissionGuard",
    "RoleGuard",
    "Session",
    "SessionUser",
    "User",
    "UserRole",
    "has_permission",
]
