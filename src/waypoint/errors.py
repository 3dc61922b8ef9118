"""Waypoint exception hierarchy.

Shared across the route table, guard chain, resolver, and controller so
every module raises and catches the same types.

Two families:

- ``ConfigurationError``: the route table or guard wiring is wrong.
  Raised at startup (fail closed) or the first time a broken guard is hit.
- ``NavigationError``: a single navigation attempt failed. The stack is
  left untouched and the error is surfaced to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass


class WaypointError(Exception):
    """Base for all waypoint-specific errors."""


class ConfigurationError(WaypointError):
    """Raised when engine configuration is invalid.

    Typically raised while the route table is built or the engine freezes.
    """


class DuplicateRouteError(ConfigurationError):
    """Two registrations share a name or a pattern shape."""


class GuardConfigurationError(ConfigurationError):
    """A guard denied navigation without supplying a fallback location."""


class NavigationError(WaypointError):
    """Base for errors that fail one navigation attempt."""


class RouteNotFoundError(NavigationError):
    """No registered pattern matches the requested location."""

    def __init__(self, location: str, detail: str = "") -> None:
        self.location = location
        super().__init__(detail or f"No route matches {location!r}")


class RedirectLoopError(NavigationError):
    """The fallback chain revisited a location or exceeded the hop cap.

    ``chain`` lists every location visited, in order, ending with the
    location that closed the loop.
    """

    def __init__(self, chain: tuple[str, ...], detail: str = "") -> None:
        self.chain = chain
        default_detail = "Redirect loop: " + " -> ".join(chain)
        super().__init__(detail or default_detail)


@dataclass(frozen=True, slots=True)
class NavigationFailure:
    """Renderable error state for a navigation that could not complete.

    Kept on the controller until the next successful commit so the UI
    layer can show a not-found or misconfiguration screen.
    """

    location: str
    error: NavigationError | ConfigurationError
    kind: str = "error"

    @classmethod
    def from_error(
        cls, location: str, error: NavigationError | ConfigurationError
    ) -> NavigationFailure:
        if isinstance(error, RouteNotFoundError):
            kind = "not_found"
        elif isinstance(error, RedirectLoopError):
            kind = "redirect_loop"
        else:
            kind = "configuration"
        return cls(location=location, error=error, kind=kind)

    def __str__(self) -> str:
        return f"{self.kind}: {self.error}"
