"""User roles and the role-to-permission matrix.

Resources are dotted names (``"attendance.record"``, ``"leave.request"``);
prefix checks let a role own a whole feature area.
"""

from enum import Enum


class UserRole(Enum):
    """Roles in the workforce application, least to most privileged."""

    EMPLOYEE = "employee"
    BRANCH_MANAGER = "branch_manager"
    PAYROLL_PORTAL = "payroll_portal"
    HR_PORTAL = "hr_portal"


class PermissionAction(Enum):
    VIEW = "view"
    CREATE = "create"
    EDIT = "edit"
    DELETE = "delete"
    APPROVE = "approve"


def has_permission(role: UserRole, resource: str, action: PermissionAction) -> bool:
    """Return whether *role* may perform *action* on *resource*.

    - HR portal: everything.
    - Payroll portal: everything on attendance and payroll, view elsewhere.
    - Branch manager: view and approve anything, edit team and leave.
    - Employee: view anything, edit own profile, create leave requests.
    """
    if role is UserRole.HR_PORTAL:
        return True

    if role is UserRole.PAYROLL_PORTAL:
        if resource.startswith(("attendance", "payroll")):
            return True
        return action is PermissionAction.VIEW

    if role is UserRole.BRANCH_MANAGER:
        if action in (PermissionAction.VIEW, PermissionAction.APPROVE):
            return True
        return action is PermissionAction.EDIT and resource.startswith(("team", "leave"))

    if action is PermissionAction.VIEW:
        return True
    if action is PermissionAction.EDIT and resource == "profile":
        return True
    return action is PermissionAction.CREATE and resource == "leave.request"
