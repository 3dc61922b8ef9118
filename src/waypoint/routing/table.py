"""Route table with specificity-ordered location matching.

Routes are registered while the engine is being set up and the table is
frozen when the engine starts. Matching is deterministic: when several
patterns match a location, the one with the fewest placeholder segments
wins, then the one registered first.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias
from urllib.parse import quote, unquote, urlencode

from waypoint.errors import ConfigurationError, DuplicateRouteError, RouteNotFoundError
from waypoint.routing.route import ParamType, PathSegment, RouteDefinition, RouteMatch

logger = logging.getLogger("waypoint.routing")

_FLASK_PARAM = re.compile(r"<[^>]*>")

# A route declaration as written in a static table: a RouteDefinition,
# a mapping with name/path/requires keys, or a (name, path[, requires]) tuple.
RouteDeclaration: TypeAlias = RouteDefinition | Mapping[str, Any] | tuple[Any, ...]


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route pattern into segments.

    Examples::

        "/home"                  -> [PathSegment("home")]
        "/employee/{id}"         -> [PathSegment("employee"), PathSegment("{id}", is_param=True, ...)]
        "/attendance/{id:int}"   -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
        "/docs/{rest:path}"      -> [..., PathSegment("{rest:path}", is_param=True, param_type="path")]
    """
    if _FLASK_PARAM.search(path):
        msg = (
            f"Route pattern {path!r} uses <param> placeholders. "
            "Use {param} or {param:type} instead."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    parts = [part for part in path.strip("/").split("/") if part]
    for index, part in enumerate(parts):
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue

        inner = part[1:-1]
        if ":" in inner:
            param_name, param_type = inner.split(":", 1)
        else:
            param_name = inner
            param_type = "str"

        if not param_name:
            msg = f"Route pattern {path!r} has an unnamed placeholder."
            raise ConfigurationError(msg)
        try:
            kind = ParamType(param_type)
        except ValueError:
            msg = (
                f"Route pattern {path!r} uses unknown placeholder type {param_type!r}. "
                f"Available: {', '.join(t.value for t in ParamType)}"
            )
            raise ConfigurationError(msg) from None
        if kind is ParamType.PATH and index != len(parts) - 1:
            msg = f"Route pattern {path!r}: a path placeholder must be the last segment."
            raise ConfigurationError(msg)

        segments.append(
            PathSegment(
                value=part,
                is_param=True,
                param_name=param_name,
                param_type=param_type,
            )
        )
    return segments


def split_location(location: str) -> list[str]:
    """Split a location into URL-decoded path parts, dropping query and fragment."""
    path = location.split("#", 1)[0].split("?", 1)[0]
    return [unquote(part) for part in path.split("/") if part]


def normalize_location(location: str) -> str:
    """Return the canonical form of *location*.

    ``"/home/"``, ``"home"`` and ``"/home?tab=1"`` all normalize to ``"/home"``.
    Percent-encoding is preserved so the result can be resolved again.
    """
    path = location.split("#", 1)[0].split("?", 1)[0]
    return "/" + "/".join(part for part in path.split("/") if part)


@dataclass(frozen=True, slots=True)
class _CompiledRoute:
    """A route plus its parsed segments."""

    route: RouteDefinition
    segments: tuple[PathSegment, ...]
    order: int

    @property
    def param_count(self) -> int:
        return sum(1 for seg in self.segments if seg.is_param)

    @property
    def catch_all(self) -> bool:
        return bool(self.segments) and self.segments[-1].kind is ParamType.PATH

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.param_count, self.order)

    def match(self, parts: list[str]) -> dict[str, str] | None:
        """Match decoded path *parts*, returning bound params or ``None``."""
        if self.catch_all:
            if len(parts) < len(self.segments):
                return None
        elif len(parts) != len(self.segments):
            return None

        params: dict[str, str] = {}
        for index, seg in enumerate(self.segments):
            if seg.is_param and seg.kind is ParamType.PATH:
                params[seg.param_name or "path"] = "/".join(parts[index:])
                return params

            part = parts[index]
            if not seg.is_param:
                if part != seg.value:
                    return None
                continue

            if not seg.kind.accepts(part):
                return None
            params[seg.param_name or ""] = part
        return params


class RouteTable:
    """Registry of route definitions with deterministic matching.

    Usage::

        table = RouteTable()
        table.register(RouteDefinition.create("home", "/home", {"authenticated"}))
        table.register(RouteDefinition.create("profile", "/employee/{id}", {"authenticated"}))
        table.compile()
        match = table.resolve("/employee/42")
        match.route.name      # "profile"
        match.params["id"]    # "42"
    """

    __slots__ = ("_by_name", "_by_shape", "_compiled", "_ordered")

    def __init__(self) -> None:
        self._by_name: dict[str, _CompiledRoute] = {}
        self._by_shape: dict[tuple[str, ...], _CompiledRoute] = {}
        # Kept sorted by (placeholder count, registration order)
        self._ordered: list[_CompiledRoute] = []
        self._compiled = False

    @classmethod
    def from_declarations(cls, declarations: Iterable[RouteDeclaration]) -> RouteTable:
        """Build and compile a table from a static declaration list.

        Each entry is a ``RouteDefinition``, a mapping with ``name``,
        ``path`` and optional ``requires`` keys, or a tuple
        ``(name, path)`` / ``(name, path, requires)``.
        """
        table = cls()
        for declaration in declarations:
            table.register(_to_definition(declaration))
        table.compile()
        return table

    def register(self, route: RouteDefinition) -> None:
        """Add a route. Must be called before ``compile()``.

        Raises ``DuplicateRouteError`` if the name is taken, or if a route
        with the same pattern shape (same literals, placeholders in the
        same positions with the same converters) already exists.
        """
        if self._compiled:
            msg = "Cannot register routes after compilation."
            raise RuntimeError(msg)

        if route.name in self._by_name:
            existing = self._by_name[route.name].route
            msg = f"Route name {route.name!r} is already registered for {existing.path!r}."
            raise DuplicateRouteError(msg)

        segments = tuple(parse_path(route.path))
        shape = tuple(seg.shape for seg in segments)
        if shape in self._by_shape:
            existing = self._by_shape[shape].route
            msg = (
                f"Route pattern {route.path!r} ({route.name!r}) collides with "
                f"{existing.path!r} ({existing.name!r})."
            )
            raise DuplicateRouteError(msg)

        compiled = _CompiledRoute(
            route=route,
            segments=segments,
            order=len(self._by_name),
        )
        self._by_name[route.name] = compiled
        self._by_shape[shape] = compiled
        self._ordered.append(compiled)
        self._ordered.sort(key=lambda c: c.sort_key)
        logger.debug("Registered route %s -> %s %s", route.name, route.path, sorted(route.requires))

    def compile(self) -> None:
        """Freeze the table. No more routes can be registered."""
        self._compiled = True

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def routes(self) -> list[RouteDefinition]:
        """All registered routes, in registration order."""
        return [compiled.route for compiled in self._by_name.values()]

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[RouteDefinition]:
        return iter(self.routes)

    def get(self, name: str) -> RouteDefinition:
        """Return the route registered under *name*.

        Raises ``RouteNotFoundError`` if no route has that name.
        """
        try:
            return self._by_name[name].route
        except KeyError:
            raise RouteNotFoundError(name, f"No route named {name!r}") from None

    def resolve(self, location: str) -> RouteMatch:
        """Match *location* against the registered patterns.

        Returns a ``RouteMatch`` on success.
        Raises ``RouteNotFoundError`` if no pattern matches.
        """
        parts = split_location(location)
        for compiled in self._ordered:
            params = compiled.match(parts)
            if params is not None:
                return RouteMatch(
                    route=compiled.route,
                    params=params,
                    location=normalize_location(location),
                    segments=compiled.segments,
                )
        raise RouteNotFoundError(normalize_location(location))

    def build_location(
        self,
        name: str,
        params: Mapping[str, object] | None = None,
        query: Mapping[str, object] | None = None,
    ) -> str:
        """Build a location for the route named *name* (reverse routing).

        Parameter values are stringified and percent-encoded. *query*, when
        given, is appended as a query string.

        Raises ``RouteNotFoundError`` for an unknown name and ``ValueError``
        for missing, unexpected, or malformed parameters.
        """
        try:
            compiled = self._by_name[name]
        except KeyError:
            raise RouteNotFoundError(name, f"No route named {name!r}") from None

        params = dict(params or {})
        parts: list[str] = []
        for seg in compiled.segments:
            if not seg.is_param:
                parts.append(seg.value)
                continue

            key = seg.param_name or ""
            if key not in params:
                msg = f"Route {name!r} requires parameter {key!r}."
                raise ValueError(msg)
            value = str(params.pop(key))
            if not seg.kind.accepts(value):
                msg = f"Parameter {key!r}={value!r} does not match {seg.param_type!r}."
                raise ValueError(msg)
            parts.append(quote(value, safe="/" if seg.kind is ParamType.PATH else ""))

        if params:
            msg = f"Route {name!r} has no parameters named {', '.join(sorted(params))}."
            raise ValueError(msg)

        location = "/" + "/".join(parts)
        if query:
            location = f"{location}?{urlencode({k: str(v) for k, v in query.items()})}"
        return location


def _to_definition(declaration: RouteDeclaration) -> RouteDefinition:
    if isinstance(declaration, RouteDefinition):
        return declaration
    if isinstance(declaration, Mapping):
        try:
            return RouteDefinition.create(
                declaration["name"],
                declaration["path"],
                declaration.get("requires", ()),
            )
        except KeyError as exc:
            msg = f"Route declaration {dict(declaration)!r} is missing {exc.args[0]!r}."
            raise ConfigurationError(msg) from None
    if isinstance(declaration, tuple) and len(declaration) in (2, 3):
        return RouteDefinition.create(*declaration)
    msg = f"Unsupported route declaration: {declaration!r}"
    raise ConfigurationError(msg)
