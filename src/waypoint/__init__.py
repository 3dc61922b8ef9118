"""Waypoint: guarded navigation engine for the workforce mobile client.

Decides, for every requested navigation, whether it is permitted, where
it should land after guard redirects, and how the navigation stack
changes.

Basic usage::

    from waypoint import Engine, EngineConfig
    from waypoint.guards import AuthenticationGuard, GuestOnlyGuard, Session
    from waypoint.routes import DEFAULT_ROUTES

    session = Session()
    engine = Engine(EngineConfig(initial_location="/"))
    engine.routes(DEFAULT_ROUTES)
    engine.guard("guest", GuestOnlyGuard(session))
    engine.guard("authenticated", AuthenticationGuard(session))
    engine.attach(session.changed)

    nav = engine.start()
    await nav.navigate_to("/home")     # anonymous: lands on /login
"""

__version__ = "0.1.0"
__all__ = [
    "ChangeSignal",
    "ConfigurationError",
    "DuplicateRouteError",
    "Engine",
    "EngineConfig",
    "EngineState",
    "GuardChain",
    "GuardConfigurationError",
    "GuardDecision",
    "NavigationContext",
    "NavigationController",
    "NavigationError",
    "NavigationEvent",
    "NavigationFailure",
    "NavigationOutcome",
    "NavigationResult",
    "RedirectLoopError",
    "RedirectResolver",
    "ResultSlot",
    "RouteDefinition",
    "RouteNotFoundError",
    "RouteTable",
    "WaypointError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import waypoint`` fast while providing a clean top-level API.
    """
    if name == "Engine":
        from waypoint.engine import Engine

        return Engine

    if name == "EngineConfig":
        from waypoint.config import EngineConfig

        return EngineConfig

    if name == "NavigationController":
        from waypoint.navigation.controller import NavigationController

        return NavigationController

    if name == "RedirectResolver":
        from waypoint.resolver import RedirectResolver

        return RedirectResolver

    if name == "RouteDefinition":
        from waypoint.routing.route import RouteDefinition

        return RouteDefinition

    if name == "RouteTable":
        from waypoint.routing.table import RouteTable

        return RouteTable

    if name in ("GuardChain", "GuardDecision", "NavigationContext"):
        from waypoint import guards as _guards

        return getattr(_guards, name)

    if name in ("EngineState", "NavigationOutcome", "NavigationResult", "ResultSlot"):
        from waypoint.navigation import state as _state

        return getattr(_state, name)

    if name == "NavigationEvent":
        from waypoint.navigation.events import NavigationEvent

        return NavigationEvent

    if name == "ChangeSignal":
        from waypoint.navigation.signals import ChangeSignal

        return ChangeSignal

    if name in (
        "ConfigurationError",
        "DuplicateRouteError",
        "GuardConfigurationError",
        "NavigationError",
        "NavigationFailure",
        "RedirectLoopError",
        "RouteNotFoundError",
        "WaypointError",
    ):
        from waypoint import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
