"""RouteDefinition and RouteMatch frozen dataclasses."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class ParamType(Enum):
    """Placeholder types a pattern may declare with ``{name:type}``.

    ``path`` swallows the rest of the location and is only valid as the
    final segment; the table handles that when matching.
    """

    STR = "str"
    INT = "int"
    PATH = "path"

    def accepts(self, value: str) -> bool:
        """Whether a decoded location segment can bind to this placeholder."""
        if not value:
            return False
        if self is ParamType.INT:
            return value.isascii() and value.isdigit()
        return self is ParamType.PATH or "/" not in value

    def convert(self, value: str) -> str | int:
        return int(value) if self is ParamType.INT else value


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static:  ``/home``       (is_param=False)
    Param:   ``/{id}``       (is_param=True, param_name="id")
    Typed:   ``/{id:int}``   (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"

    @property
    def kind(self) -> ParamType:
        return ParamType(self.param_type)

    @property
    def shape(self) -> str:
        """Segment identity ignoring the placeholder name."""
        if self.is_param:
            return "{:" + self.param_type + "}"
        return self.value


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A frozen route definition.

    ``requires`` holds the capability tags whose guards must approve a
    navigation to this route. An empty set means always navigable.
    """

    name: str
    path: str
    requires: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def create(cls, name: str, path: str, requires: Iterable[str] = ()) -> RouteDefinition:
        """Build a definition, normalizing *requires* into a frozenset."""
        return cls(name=name, path=path, requires=frozenset(requires))

    @property
    def is_guarded(self) -> bool:
        return bool(self.requires)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful location match."""

    route: RouteDefinition
    params: dict[str, str]
    location: str
    segments: tuple[PathSegment, ...] = ()

    def typed_params(self) -> dict[str, str | int]:
        """Return ``params`` converted to each placeholder's declared type.

        Raises ``ValueError`` if a value does not fit its type.
        """
        kinds = {s.param_name: s.kind for s in self.segments if s.is_param}
        typed: dict[str, str | int] = {}
        for name, value in self.params.items():
            kind = kinds.get(name, ParamType.STR)
            if not kind.accepts(value):
                msg = f"Parameter {name!r}={value!r} is not a valid {kind.value}."
                raise ValueError(msg)
            typed[name] = kind.convert(value)
        return typed
