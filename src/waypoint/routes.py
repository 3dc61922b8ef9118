"""Route declarations for the workforce application.

Locations are grouped by feature. ``DEFAULT_ROUTES`` is the static table
loaded once at startup::

    engine = Engine()
    engine.routes(DEFAULT_ROUTES)

Capability tags:

- ``guest``: only while signed out (splash, login)
- ``authenticated``: any signed-in user
- ``admin``: HR portal administrators, checked after ``authenticated``
"""

from waypoint.routing.route import RouteDefinition

GUEST = "guest"
AUTHENTICATED = "authenticated"
ADMIN = "admin"

# Core
SPLASH = "/"
LOGIN = "/login"
HOME = "/home"

# Attendance
QR_SCANNER = "/attendance/scan"
ATTENDANCE_HISTORY = "/attendance/history"
ATTENDANCE_DETAIL = "/attendance/history/{attendance_id}"

# Time management
LEAVE_REQUEST = "/time/leave-request"
LEAVE_HISTORY = "/time/leave-history"

# Employee profile
EMPLOYEE_PROFILE = "/employee/profile"
EMPLOYEE_PROFILE_BY_ID = "/employee/{id}"
EDIT_PROFILE = "/employee/profile/edit"

# Admin
ADMIN_DASHBOARD = "/admin/dashboard"
ADMIN_SETTINGS = "/admin/settings"
GENERATE_QR = "/admin/generate-qr"

# Diagnostics
ROUTING_TEST = "/test/routing"


def _route(name: str, path: str, *requires: str) -> RouteDefinition:
    return RouteDefinition.create(name, path, requires)


DEFAULT_ROUTES: tuple[RouteDefinition, ...] = (
    _route("splash", SPLASH, GUEST),
    _route("login", LOGIN, GUEST),
    _route("home", HOME, AUTHENTICATED),
    _route("qr_scanner", QR_SCANNER, AUTHENTICATED),
    _route("attendance_history", ATTENDANCE_HISTORY, AUTHENTICATED),
    _route("attendance_detail", ATTENDANCE_DETAIL, AUTHENTICATED),
    _route("leave_request", LEAVE_REQUEST, AUTHENTICATED),
    _route("leave_history", LEAVE_HISTORY, AUTHENTICATED),
    _route("employee_profile", EMPLOYEE_PROFILE, AUTHENTICATED),
    _route("edit_profile", EDIT_PROFILE, AUTHENTICATED),
    _route("profile", EMPLOYEE_PROFILE_BY_ID, AUTHENTICATED),
    _route("admin_dashboard", ADMIN_DASHBOARD, AUTHENTICATED, ADMIN),
    _route("admin_settings", ADMIN_SETTINGS, AUTHENTICATED, ADMIN),
    _route("generate_qr", GENERATE_QR, AUTHENTICATED, ADMIN),
    _route("routing_test", ROUTING_TEST),
)
