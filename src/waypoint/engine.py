"""Waypoint engine: setup-time builder for the navigation controller.

Mutable during setup (routes, guards, observers, signals).
Frozen when ``engine.start()`` is first called.
"""

import logging
import threading
from typing import TypeAlias
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from waypoint.config import EngineConfig
from waypoint.errors import ConfigurationError, RouteNotFoundError
from waypoint.guards.chain import GuardChain
from waypoint.guards.protocol import Guard
from waypoint.navigation.controller import NavigationController
from waypoint.navigation.events import NavigationSink, check_sink
from waypoint.navigation.signals import ChangeSignal
from waypoint.resolver import RedirectResolver
from waypoint.routing.route import RouteDefinition
from waypoint.routing.table import RouteDeclaration, RouteTable

logger = logging.getLogger("waypoint.engine")

GuardFactory: TypeAlias = Callable[[], Guard]


@dataclass(slots=True)
class _PendingGuard:
    """A guard instance or factory waiting to be placed in the chain."""

    tag: str
    guard: Guard | None = None
    factory: GuardFactory | None = None
    environments: frozenset[str] | None = None

    def applies_to(self, environment: str) -> bool:
        return self.environments is None or environment in self.environments

    def build(self) -> Guard:
        if self.guard is not None:
            return self.guard
        if self.factory is None:
            msg = f"Guard for {self.tag!r} has neither an instance nor a factory."
            raise ConfigurationError(msg)
        return self.factory()


class Engine:
    """The navigation engine.

    Usage::

        session = Session()
        engine = Engine(EngineConfig(initial_location="/"))
        engine.routes(DEFAULT_ROUTES)
        engine.guard("guest", GuestOnlyGuard(session))
        engine.guard("authenticated", AuthenticationGuard(session))
        engine.provide("admin", lambda: RoleGuard(session, {UserRole.HR_PORTAL}))
        engine.attach(session.changed)

        nav = engine.start()
        await nav.navigate_to("/home")

    Guards run in the order they were registered, across ``guard()`` and
    ``provide()`` calls alike.

    Thread safety:
        Setup is single-threaded. ``start()`` uses a Lock + double-check so
        exactly one controller is built even if called concurrently.
    """

    __slots__ = (
        "_controller",
        "_freeze_lock",
        "_frozen",
        "_observers",
        "_pending_guards",
        "_pending_routes",
        "_signals",
        "config",
    )

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config: EngineConfig = config or EngineConfig()
        self._pending_routes: list[RouteDeclaration] = []
        self._pending_guards: list[_PendingGuard] = []
        self._observers: list[NavigationSink] = []
        self._signals: list[ChangeSignal] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._controller: NavigationController | None = None

    # -- Setup --

    def route(self, name: str, path: str, requires: Iterable[str] = ()) -> None:
        """Declare a route."""
        self._check_not_frozen()
        self._pending_routes.append(RouteDefinition.create(name, path, requires))

    def routes(self, declarations: Iterable[RouteDeclaration]) -> None:
        """Declare many routes from a static table."""
        self._check_not_frozen()
        self._pending_routes.extend(declarations)

    def guard(self, tag: str, guard: Guard) -> None:
        """Register an already-constructed guard for capability *tag*."""
        self._check_not_frozen()
        if not callable(getattr(guard, "evaluate", None)):
            msg = f"{type(guard).__name__} has no evaluate() method and cannot guard {tag!r}."
            raise ConfigurationError(msg)
        self._pending_guards.append(_PendingGuard(tag=tag, guard=guard))

    def provide(
        self,
        tag: str,
        factory: GuardFactory,
        environments: Iterable[str] | None = None,
    ) -> None:
        """Register a guard factory for *tag*.

        The factory is called once at start, and only if
        ``config.environment`` is in *environments* (``None`` = all)::

            engine.provide("admin", lambda: RoleGuard(session, {UserRole.HR_PORTAL}), ["prod"])
            engine.provide("admin", lambda: RoleGuard(session, UserRole), ["dev"])
        """
        self._check_not_frozen()
        self._pending_guards.append(
            _PendingGuard(
                tag=tag,
                factory=factory,
                environments=frozenset(environments) if environments is not None else None,
            )
        )

    def add_observer(self, sink: NavigationSink) -> None:
        """Receive a ``NavigationEvent`` after every committed transition."""
        self._check_not_frozen()
        self._observers.append(check_sink(sink))

    def attach(self, signal: ChangeSignal) -> None:
        """Re-check the current location whenever *signal* fires."""
        self._check_not_frozen()
        self._signals.append(signal)

    # -- Runtime --

    def start(self) -> NavigationController:
        """Freeze the engine and return its navigation controller.

        Subsequent calls return the same controller.
        """
        if self._controller is not None:
            return self._controller
        with self._freeze_lock:
            if self._controller is None:
                self._controller = self._freeze()
        return self._controller

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def controller(self) -> NavigationController:
        if self._controller is None:
            msg = "Engine has not been started. Call engine.start() first."
            raise RuntimeError(msg)
        return self._controller

    # -- Internal --

    def _freeze(self) -> NavigationController:
        """Compile routes and guards into a controller.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Route table (fails closed on duplicates)
        table = RouteTable.from_declarations(self._pending_routes)

        # 2. Guard chain, in registration order
        environment = self.config.environment
        entries: list[tuple[str, Guard]] = []
        for pending in self._pending_guards:
            if not pending.applies_to(environment):
                continue
            entries.append((pending.tag, pending.build()))
        chain = GuardChain(entries, default_fallback=self.config.default_fallback)

        # 3. The initial location must exist
        try:
            table.resolve(self.config.initial_location)
        except RouteNotFoundError:
            msg = (
                f"Initial location {self.config.initial_location!r} matches no "
                "registered route."
            )
            raise ConfigurationError(msg) from None

        unguarded = {
            tag for route in table.routes for tag in route.requires if tag not in chain.tags
        }
        if unguarded:
            logger.warning("Capability tags with no guard: %s", ", ".join(sorted(unguarded)))

        # 4. Controller
        resolver = RedirectResolver(table, chain, self.config)
        controller = NavigationController(resolver, self.config, observers=self._observers)
        for signal in self._signals:
            controller.attach(signal)

        self._frozen = True
        logger.debug(
            "Engine started: %d routes, %d guards, environment=%s",
            len(table),
            len(chain),
            environment,
        )
        return controller

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the engine after it has started. "
                "Register routes, guards, and observers before calling engine.start()."
            )
            raise RuntimeError(msg)
