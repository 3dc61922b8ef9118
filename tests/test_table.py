"""Tests for waypoint.routing.table: parsing, matching, duplicates, reverse routing."""

import pytest

from waypoint.errors import ConfigurationError, DuplicateRouteError, RouteNotFoundError
from waypoint.routes import DEFAULT_ROUTES
from waypoint.routing.route import RouteDefinition
from waypoint.routing.table import RouteTable, normalize_location, parse_path, split_location


def _table(*routes: tuple[str, str]) -> RouteTable:
    return RouteTable.from_declarations(routes)


class TestParsePath:
    def test_root(self) -> None:
        assert parse_path("/") == []

    def test_static_and_param(self) -> None:
        segments = parse_path("/employee/{id}")
        assert [s.value for s in segments] == ["employee", "{id}"]
        assert segments[1].is_param
        assert segments[1].param_name == "id"
        assert segments[1].param_type == "str"

    def test_typed_param(self) -> None:
        segments = parse_path("/attendance/{id:int}")
        assert segments[1].param_type == "int"

    def test_angle_brackets_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="<param>"):
            parse_path("/employee/<id>")

    def test_unnamed_placeholder_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="unnamed"):
            parse_path("/employee/{}")

    def test_unknown_converter_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="uuid"):
            parse_path("/employee/{id:uuid}")

    def test_path_placeholder_must_be_last(self) -> None:
        with pytest.raises(ConfigurationError, match="last segment"):
            parse_path("/files/{rest:path}/edit")


class TestLocationHelpers:
    def test_normalize(self) -> None:
        assert normalize_location("/home/") == "/home"
        assert normalize_location("home") == "/home"
        assert normalize_location("/home?tab=1#top") == "/home"
        assert normalize_location("") == "/"
        assert normalize_location("//employee//42") == "/employee/42"

    def test_normalize_keeps_encoding(self) -> None:
        assert normalize_location("/employee/a%20b") == "/employee/a%20b"

    def test_split_decodes(self) -> None:
        assert split_location("/employee/a%20b?x=1") == ["employee", "a b"]


class TestMatching:
    def test_static_match(self) -> None:
        table = _table(("home", "/home"))
        match = table.resolve("/home")
        assert match.route.name == "home"
        assert match.params == {}
        assert match.location == "/home"

    def test_root_match(self) -> None:
        table = _table(("splash", "/"), ("home", "/home"))
        assert table.resolve("/").route.name == "splash"
        assert table.resolve("").route.name == "splash"

    def test_param_binding(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        match = table.resolve("/employee/42")
        assert match.route.name == "profile"
        assert match.params == {"id": "42"}

    def test_trailing_slash_and_query_ignored(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        match = table.resolve("/employee/42/?tab=leave")
        assert match.params == {"id": "42"}
        assert match.location == "/employee/42"

    def test_no_match(self) -> None:
        table = _table(("home", "/home"))
        with pytest.raises(RouteNotFoundError) as exc_info:
            table.resolve("/nowhere/")
        assert exc_info.value.location == "/nowhere"

    def test_segment_count_must_match(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        with pytest.raises(RouteNotFoundError):
            table.resolve("/employee/42/extra")
        with pytest.raises(RouteNotFoundError):
            table.resolve("/employee")

    def test_int_converter_filters(self) -> None:
        table = _table(("detail", "/attendance/{id:int}"))
        assert table.resolve("/attendance/7").params == {"id": "7"}
        with pytest.raises(RouteNotFoundError):
            table.resolve("/attendance/seven")

    def test_path_converter_captures_rest(self) -> None:
        table = _table(("files", "/files/{rest:path}"))
        assert table.resolve("/files/a/b/c").params == {"rest": "a/b/c"}

    def test_encoded_param_is_decoded(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        assert table.resolve("/employee/a%20b").params == {"id": "a b"}


class TestSpecificity:
    def test_literal_beats_placeholder_regardless_of_order(self) -> None:
        table = _table(("profile", "/employee/{id}"), ("employee_profile", "/employee/profile"))
        assert table.resolve("/employee/profile").route.name == "employee_profile"
        assert table.resolve("/employee/42").route.name == "profile"

    def test_fewer_placeholders_win(self) -> None:
        table = _table(("both", "/{a}/{b}"), ("one", "/team/{b}"))
        assert table.resolve("/team/x").route.name == "one"
        assert table.resolve("/other/x").route.name == "both"

    def test_registration_order_breaks_ties(self) -> None:
        table = _table(("first", "/{a}/list"), ("second", "/team/{b}"))
        assert table.resolve("/team/list").route.name == "first"

    def test_default_routes(self) -> None:
        table = RouteTable.from_declarations(DEFAULT_ROUTES)
        assert table.resolve("/employee/profile").route.name == "employee_profile"
        assert table.resolve("/employee/profile/edit").route.name == "edit_profile"
        assert table.resolve("/employee/42").route.name == "profile"
        assert table.resolve("/attendance/history/9").params == {"attendance_id": "9"}


class TestRegistration:
    def test_duplicate_name(self) -> None:
        with pytest.raises(DuplicateRouteError, match="home"):
            _table(("home", "/home"), ("home", "/dashboard"))

    def test_duplicate_pattern(self) -> None:
        with pytest.raises(DuplicateRouteError):
            _table(("home", "/home"), ("dashboard", "/home/"))

    def test_duplicate_shape_with_different_names(self) -> None:
        with pytest.raises(DuplicateRouteError, match="collides"):
            _table(("profile", "/employee/{id}"), ("employee", "/employee/{user}"))

    def test_different_converters_do_not_collide(self) -> None:
        table = _table(("by_int", "/item/{id:int}"), ("by_str", "/item/{slug}"))
        assert table.resolve("/item/5").route.name == "by_int"
        assert table.resolve("/item/abc").route.name == "by_str"

    def test_duplicate_is_configuration_error(self) -> None:
        assert issubclass(DuplicateRouteError, ConfigurationError)

    def test_register_after_compile(self) -> None:
        table = _table(("home", "/home"))
        with pytest.raises(RuntimeError, match="after compilation"):
            table.register(RouteDefinition.create("other", "/other"))

    def test_mapping_and_tuple_declarations(self) -> None:
        table = RouteTable.from_declarations(
            [
                {"name": "home", "path": "/home", "requires": ["authenticated"]},
                ("login", "/login", ("guest",)),
                ("routing_test", "/test/routing"),
                RouteDefinition.create("splash", "/"),
            ]
        )
        assert table.get("home").requires == frozenset({"authenticated"})
        assert table.get("login").requires == frozenset({"guest"})
        assert table.get("routing_test").requires == frozenset()
        assert [r.name for r in table] == ["home", "login", "routing_test", "splash"]

    def test_mapping_missing_key(self) -> None:
        with pytest.raises(ConfigurationError, match="path"):
            RouteTable.from_declarations([{"name": "home"}])

    def test_unsupported_declaration(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported"):
            RouteTable.from_declarations(["/home"])  # type: ignore[list-item]

    def test_container_protocol(self) -> None:
        table = _table(("home", "/home"), ("login", "/login"))
        assert len(table) == 2
        assert "home" in table
        assert "nope" not in table
        assert table.compiled

    def test_get_unknown(self) -> None:
        with pytest.raises(RouteNotFoundError):
            _table(("home", "/home")).get("nope")


class TestBuildLocation:
    def test_static(self) -> None:
        assert _table(("home", "/home")).build_location("home") == "/home"

    def test_root(self) -> None:
        assert _table(("splash", "/")).build_location("splash") == "/"

    def test_params(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        assert table.build_location("profile", {"id": 42}) == "/employee/42"

    def test_params_are_encoded(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        location = table.build_location("profile", {"id": "a b&c"})
        assert location == "/employee/a%20b%26c"
        assert table.resolve(location).params == {"id": "a b&c"}

    def test_query(self) -> None:
        table = _table(("history", "/time/leave-history"))
        location = table.build_location("history", query={"year": 2024})
        assert location == "/time/leave-history?year=2024"

    def test_missing_param(self) -> None:
        table = _table(("profile", "/employee/{id}"))
        with pytest.raises(ValueError, match="requires parameter 'id'"):
            table.build_location("profile")

    def test_extra_param(self) -> None:
        table = _table(("home", "/home"))
        with pytest.raises(ValueError, match="no parameters named tab"):
            table.build_location("home", {"tab": "x"})

    def test_converter_mismatch(self) -> None:
        table = _table(("detail", "/attendance/{id:int}"))
        with pytest.raises(ValueError, match="does not match"):
            table.build_location("detail", {"id": "seven"})

    def test_unknown_name(self) -> None:
        with pytest.raises(RouteNotFoundError):
            _table(("home", "/home")).build_location("nope")
