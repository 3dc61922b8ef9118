"""Tests for waypoint.checks: static route/guard wiring validation."""

from conftest import RecordingGuard

from waypoint.checks import Severity, check_wiring
from waypoint.guards import (
    AuthenticationGuard,
    GuardChain,
    GuestOnlyGuard,
    RoleGuard,
    Session,
    UserRole,
)
from waypoint.routes import DEFAULT_ROUTES
from waypoint.routing.table import RouteTable


def _categories(result) -> list[str]:
    return [issue.category for issue in result.issues]


class TestCheckWiring:
    def test_default_wiring_has_no_errors(self) -> None:
        session = Session()
        chain = GuardChain(
            [
                ("guest", GuestOnlyGuard(session)),
                ("authenticated", AuthenticationGuard(session)),
                ("admin", RoleGuard(session, {UserRole.HR_PORTAL})),
            ]
        )
        result = check_wiring(RouteTable.from_declarations(DEFAULT_ROUTES), chain)
        assert result.ok
        assert result.routes_checked == len(DEFAULT_ROUTES)
        assert result.guards_checked == 3
        # Guest and authenticated guards point at each other's routes.
        assert _categories(result) == ["fallback-cycle"]
        assert result.warnings[0].severity is Severity.WARNING
        assert "OK with 1 warning(s)" in result.summary()

    def test_unguarded_tag(self) -> None:
        table = RouteTable.from_declarations([("home", "/home", ["authenticated"])])
        result = check_wiring(table, GuardChain())
        assert not result.ok
        assert result.errors[0].category == "unguarded-tag"
        assert result.errors[0].route == "home"
        assert "FAILED: 1 error(s)" in result.summary()

    def test_unused_guard(self) -> None:
        table = RouteTable.from_declarations([("home", "/home")])
        result = check_wiring(table, GuardChain([("admin", RecordingGuard())]))
        assert result.ok
        assert _categories(result) == ["unused-guard"]

    def test_fallback_not_found(self) -> None:
        table = RouteTable.from_declarations([("home", "/home", ["auth"])])
        guard = RecordingGuard(allowed=False, fallback="/login")
        result = check_wiring(table, GuardChain([("auth", guard)]))
        assert _categories(result) == ["fallback-not-found"]
        assert not result.ok

    def test_self_guarded_fallback(self) -> None:
        table = RouteTable.from_declarations(
            [("home", "/home", ["auth"]), ("login", "/login", ["auth"])]
        )
        guard = RecordingGuard(allowed=False, fallback="/login")
        result = check_wiring(table, GuardChain([("auth", guard)]))
        assert "self-guarded-fallback" in _categories(result)
        assert not result.ok

    def test_guard_without_fallback_attribute_is_skipped(self) -> None:
        class Bare:
            def evaluate(self, context):
                raise NotImplementedError

        table = RouteTable.from_declarations([("home", "/home", ["auth"])])
        result = check_wiring(table, GuardChain([("auth", Bare())]))
        assert result.issues == []
        assert result.summary().endswith("OK")
