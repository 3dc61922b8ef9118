"""Tests for the built-in guards, the session, and the permission matrix."""

import pytest

from waypoint.guards import (
    AnonymousUser,
    AuthenticationGuard,
    GuestOnlyGuard,
    NavigationContext,
    PermissionAction,
    PermissionGuard,
    RoleGuard,
    Session,
    SessionUser,
    User,
    UserRole,
    has_permission,
)
from waypoint.routing.route import RouteDefinition

ROUTE = RouteDefinition.create("home", "/home", {"authenticated"})
CONTEXT = NavigationContext.build(target_location="/home", route=ROUTE)


def _signed_in(role: UserRole = UserRole.EMPLOYEE) -> Session:
    return Session(SessionUser(id="e-1001", role=role))


class TestSession:
    def test_anonymous_by_default(self) -> None:
        session = Session()
        assert not session.is_authenticated
        assert isinstance(session.user, AnonymousUser)
        assert session.user.role is None

    def test_users_satisfy_protocol(self) -> None:
        assert isinstance(SessionUser(id="1"), User)
        assert isinstance(AnonymousUser(), User)

    @pytest.mark.anyio
    async def test_login_logout_notify(self) -> None:
        session = Session()
        calls: list[bool] = []
        session.changed.add_listener(lambda: calls.append(session.is_authenticated))

        await session.login(SessionUser(id="e-1001"))
        assert session.is_authenticated
        await session.logout()
        assert not session.is_authenticated
        assert calls == [True, False]

    @pytest.mark.anyio
    async def test_update_replaces_user(self) -> None:
        session = _signed_in()
        await session.update(SessionUser(id="e-1001", role=UserRole.HR_PORTAL))
        assert session.user.role is UserRole.HR_PORTAL


class TestAuthenticationGuard:
    def test_allows_signed_in(self) -> None:
        assert AuthenticationGuard(_signed_in()).evaluate(CONTEXT).allowed

    def test_denies_anonymous_to_login(self) -> None:
        decision = AuthenticationGuard(Session()).evaluate(CONTEXT)
        assert not decision.allowed
        assert decision.fallback == "/login"

    def test_custom_fallback(self) -> None:
        decision = AuthenticationGuard(Session(), fallback="/").evaluate(CONTEXT)
        assert decision.fallback == "/"


class TestGuestOnlyGuard:
    def test_allows_anonymous(self) -> None:
        assert GuestOnlyGuard(Session()).evaluate(CONTEXT).allowed

    def test_sends_signed_in_home(self) -> None:
        decision = GuestOnlyGuard(_signed_in()).evaluate(CONTEXT)
        assert decision.fallback == "/home"


class TestRoleGuard:
    def test_allows_listed_role(self) -> None:
        guard = RoleGuard(_signed_in(UserRole.HR_PORTAL), {UserRole.HR_PORTAL})
        assert guard.evaluate(CONTEXT).allowed

    def test_denies_other_role(self) -> None:
        guard = RoleGuard(_signed_in(), [UserRole.HR_PORTAL, UserRole.PAYROLL_PORTAL])
        decision = guard.evaluate(CONTEXT)
        assert not decision.allowed
        assert decision.fallback == "/home"

    def test_denies_anonymous(self) -> None:
        assert not RoleGuard(Session(), {UserRole.EMPLOYEE}).evaluate(CONTEXT).allowed


class TestPermissionGuard:
    def test_employee_may_create_leave_request(self) -> None:
        guard = PermissionGuard(_signed_in(), "leave.request", PermissionAction.CREATE)
        assert guard.evaluate(CONTEXT).allowed

    def test_employee_may_not_approve(self) -> None:
        guard = PermissionGuard(_signed_in(), "leave.request", PermissionAction.APPROVE)
        assert guard.evaluate(CONTEXT).fallback == "/home"

    def test_anonymous_denied(self) -> None:
        assert not PermissionGuard(Session(), "attendance").evaluate(CONTEXT).allowed


class TestHasPermission:
    @pytest.mark.parametrize("action", list(PermissionAction))
    def test_hr_portal_may_do_everything(self, action: PermissionAction) -> None:
        assert has_permission(UserRole.HR_PORTAL, "payroll.run", action)

    def test_payroll_owns_attendance(self) -> None:
        assert has_permission(UserRole.PAYROLL_PORTAL, "attendance.record", PermissionAction.DELETE)
        assert not has_permission(UserRole.PAYROLL_PORTAL, "team", PermissionAction.EDIT)
        assert has_permission(UserRole.PAYROLL_PORTAL, "team", PermissionAction.VIEW)

    def test_branch_manager(self) -> None:
        role = UserRole.BRANCH_MANAGER
        assert has_permission(role, "leave.request", PermissionAction.APPROVE)
        assert has_permission(role, "team.roster", PermissionAction.EDIT)
        assert not has_permission(role, "payroll", PermissionAction.EDIT)
        assert not has_permission(role, "team", PermissionAction.DELETE)

    def test_employee(self) -> None:
        role = UserRole.EMPLOYEE
        assert has_permission(role, "attendance", PermissionAction.VIEW)
        assert has_permission(role, "profile", PermissionAction.EDIT)
        assert not has_permission(role, "team", PermissionAction.EDIT)
        assert not has_permission(role, "leave.request", PermissionAction.DELETE)
