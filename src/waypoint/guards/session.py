"""Session state read by the built-in guards.

The session holds the signed-in user. Every change (login, logout, user
update) notifies the session's ``ChangeSignal`` so an attached
``NavigationController`` re-checks the current location. This is how a
session that expires mid-screen forces a redirect to the login screen.

Usage::

    session = Session()
    nav.attach(session.changed)

    await session.login(SessionUser(id="e-1001", role=UserRole.EMPLOYEE))
    await session.logout()   # current screen re-evaluated, lands on /login
"""

import threading
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from waypoint.guards.roles import UserRole
from waypoint.navigation.signals import ChangeSignal


@runtime_checkable
class User(Protocol):
    """Minimal user protocol.

    Any object with ``id``, ``is_authenticated`` and ``role`` satisfies
    this. Applications bring their own user model.
    """

    @property
    def id(self) -> str: ...

    @property
    def is_authenticated(self) -> bool: ...

    @property
    def role(self) -> UserRole | None: ...


@dataclass(frozen=True, slots=True)
class AnonymousUser:
    """Sentinel for a signed-out session.

    Returned by ``Session.user`` when nobody is signed in, so guards never
    need a ``None`` check.
    """

    id: str = ""
    is_authenticated: bool = False
    role: UserRole | None = None


@dataclass(frozen=True, slots=True)
class SessionUser:
    """A signed-in user."""

    id: str
    role: UserRole = UserRole.EMPLOYEE
    is_authenticated: bool = True


_ANONYMOUS = AnonymousUser()


class Session:
    """Mutable holder for the current user.

    Reads are lock-protected snapshots, so guards may run concurrently
    with a login or logout on another task or thread.
    """

    __slots__ = ("_lock", "_user", "changed")

    def __init__(self, user: User | None = None, *, changed: ChangeSignal | None = None) -> None:
        self._lock = threading.Lock()
        self._user: User = user if user is not None else _ANONYMOUS
        self.changed: ChangeSignal = changed or ChangeSignal()

    @property
    def user(self) -> User:
        with self._lock:
            return self._user

    @property
    def is_authenticated(self) -> bool:
        return self.user.is_authenticated

    async def login(self, user: User) -> None:
        """Sign *user* in and notify listeners."""
        await self._set(user)

    async def logout(self) -> None:
        """Sign out and notify listeners."""
        await self._set(_ANONYMOUS)

    async def update(self, user: User) -> None:
        """Replace the signed-in user (e.g. after a role change) and notify."""
        await self._set(user)

    async def _set(self, user: User) -> None:
        with self._lock:
            self._user = user
        await self.changed.notify()
