"""Shared fixtures for waypoint tests.

Provides recording/slow guard doubles and a fully wired engine over the
workforce route table.
"""

import anyio
import pytest

from waypoint.config import EngineConfig
from waypoint.engine import Engine
from waypoint.guards import (
    AuthenticationGuard,
    GuardDecision,
    GuestOnlyGuard,
    NavigationContext,
    RoleGuard,
    Session,
    SessionUser,
    UserRole,
)
from waypoint.navigation.controller import NavigationController
from waypoint.routes import DEFAULT_ROUTES


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class RecordingGuard:
    """Guard returning a fixed decision and recording every call."""

    def __init__(self, allowed: bool = True, fallback: str | None = None) -> None:
        self.allowed = allowed
        self.fallback = fallback
        self.calls: list[str] = []

    def evaluate(self, context: NavigationContext) -> GuardDecision:
        self.calls.append(context.target_location)
        if self.allowed:
            return GuardDecision.allow()
        return GuardDecision.deny(self.fallback)


class GateGuard:
    """Async guard that blocks selected locations until released.

    ``entered`` fires when evaluation of a gated location starts, so a
    test can issue a competing request while this one is suspended.
    """

    def __init__(self, gated: set[str], fallback: str = "/login") -> None:
        self.gated = gated
        self.fallback = fallback
        self.entered = anyio.Event()
        self.release = anyio.Event()
        self.allowed = True

    async def evaluate(self, context: NavigationContext) -> GuardDecision:
        if context.target_location in self.gated:
            self.entered.set()
            await self.release.wait()
        if self.allowed:
            return GuardDecision.allow()
        return GuardDecision.deny(self.fallback)


@pytest.fixture
def session() -> Session:
    return Session()


@pytest.fixture
def employee() -> SessionUser:
    return SessionUser(id="e-1001", role=UserRole.EMPLOYEE)


@pytest.fixture
def admin() -> SessionUser:
    return SessionUser(id="hr-1", role=UserRole.HR_PORTAL)


@pytest.fixture
def engine(session: Session) -> Engine:
    """The workforce engine: guest, authenticated, then admin guards."""
    engine = Engine(EngineConfig(initial_location="/", debug=True))
    engine.routes(DEFAULT_ROUTES)
    engine.guard("guest", GuestOnlyGuard(session))
    engine.guard("authenticated", AuthenticationGuard(session))
    engine.guard("admin", RoleGuard(session, {UserRole.HR_PORTAL}))
    engine.attach(session.changed)
    return engine


@pytest.fixture
def nav(engine: Engine) -> NavigationController:
    return engine.start()
