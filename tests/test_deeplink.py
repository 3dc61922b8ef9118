"""Tests for waypoint.routing.deeplink."""

import pytest

from waypoint.errors import RouteNotFoundError
from waypoint.routes import DEFAULT_ROUTES
from waypoint.routing.deeplink import parse_deep_link
from waypoint.routing.table import RouteTable


@pytest.fixture
def table() -> RouteTable:
    return RouteTable.from_declarations(DEFAULT_ROUTES)


class TestParseDeepLink:
    def test_plain_path(self, table: RouteTable) -> None:
        link = parse_deep_link(table, "/employee/42")
        assert link.name == "profile"
        assert link.parameters == {"id": "42"}
        assert link.location == "/employee/42"
        assert link.query == {}

    def test_round_trips_with_build_location(self, table: RouteTable) -> None:
        location = table.build_location("profile", {"id": 42})
        link = parse_deep_link(table, location)
        assert link.name == "profile"
        assert link.parameters == {"id": "42"}

    def test_query_is_captured(self, table: RouteTable) -> None:
        link = parse_deep_link(table, "/employee/42?tab=leave&empty=")
        assert link.query == {"tab": "leave", "empty": ""}
        assert link.location == "/employee/42"

    def test_https_host_ignored(self, table: RouteTable) -> None:
        link = parse_deep_link(table, "https://hr.example.com/time/leave-request")
        assert link.name == "leave_request"

    def test_custom_scheme_with_host(self, table: RouteTable) -> None:
        link = parse_deep_link(table, "hrconnect://app/employee/7")
        assert link.parameters == {"id": "7"}

    def test_custom_scheme_without_path(self, table: RouteTable) -> None:
        link = parse_deep_link(table, "hrconnect://home")
        assert link.name == "home"

    def test_custom_scheme_host_is_not_a_segment(self, table: RouteTable) -> None:
        link = parse_deep_link(table, "hrconnect://attendance/home")
        assert link.location == "/home"

    def test_surrounding_whitespace(self, table: RouteTable) -> None:
        assert parse_deep_link(table, "  /home  ").name == "home"

    def test_empty(self, table: RouteTable) -> None:
        with pytest.raises(RouteNotFoundError, match="Empty"):
            parse_deep_link(table, "   ")

    def test_unmatched(self, table: RouteTable) -> None:
        with pytest.raises(RouteNotFoundError):
            parse_deep_link(table, "hrconnect://app/payroll/export")

    def test_malformed(self, table: RouteTable) -> None:
        with pytest.raises(RouteNotFoundError):
            parse_deep_link(table, "http://[::1/home")
