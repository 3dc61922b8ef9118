"""Redirect resolution: follow guard fallbacks to a permitted location.

Starting from the requested location, each hop matches the location
against the route table and runs the guard chain. An allowed hop ends
resolution; a denied hop continues at the guard's fallback.

Loop detection is the property everything else relies on. A fallback
that revisits an earlier location raises ``RedirectLoopError``, and an
independent hop cap (route count + 1 by default) bounds the loop even if
visited tracking were somehow bypassed. A misconfigured fallback surfaces
as an error for that navigation, never as a hang.
"""

import logging
from dataclasses import dataclass
from typing import Any

import anyio

from waypoint.config import EngineConfig
from waypoint.errors import RedirectLoopError
from waypoint.guards.chain import GuardChain
from waypoint.guards.protocol import NavigationContext
from waypoint.routing.route import RouteMatch
from waypoint.routing.table import RouteTable, normalize_location

logger = logging.getLogger("waypoint.navigation")


@dataclass(frozen=True, slots=True)
class Resolution:
    """Where a navigation request lands.

    ``redirects`` lists every location that was denied on the way, in
    order; it is empty when the requested location was allowed directly.
    """

    requested: str
    location: str
    match: RouteMatch
    redirects: tuple[str, ...] = ()

    @property
    def redirected(self) -> bool:
        return bool(self.redirects)


class RedirectResolver:
    """Compute the canonical destination for a requested location.

    Usage::

        resolver = RedirectResolver(table, chain)
        resolution = await resolver.resolve("/admin/dashboard")
        resolution.location   # "/login" for an anonymous session
    """

    __slots__ = ("_chain", "_config", "_table")

    def __init__(
        self,
        table: RouteTable,
        chain: GuardChain,
        config: EngineConfig | None = None,
    ) -> None:
        self._table = table
        self._chain = chain
        self._config = config or EngineConfig()

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def chain(self) -> GuardChain:
        return self._chain

    @property
    def max_hops(self) -> int:
        if self._config.max_redirects is not None:
            return self._config.max_redirects
        return len(self._table) + 1

    async def resolve(
        self,
        location: str,
        *,
        extra: Any = None,
        cancel: anyio.Event | None = None,
    ) -> Resolution:
        """Resolve *location* to the location the user may actually see.

        Raises ``RouteNotFoundError`` if any hop matches no route (not
        retried), ``RedirectLoopError`` on a cycle or when the hop cap is
        exceeded, and ``GuardConfigurationError`` for a denial without a
        fallback.
        """
        requested = normalize_location(location)
        current = requested
        visited: list[str] = []

        for _ in range(self.max_hops):
            match = self._table.resolve(current)
            context = NavigationContext.build(
                target_location=current,
                route=match.route,
                parameters=match.params,
                extra=extra,
                cancel=cancel,
            )
            decision = await self._chain.evaluate(match.route, context)
            if decision.allowed:
                if self._config.debug and visited:
                    logger.debug("Resolved %s via %s", current, " -> ".join(visited))
                return Resolution(
                    requested=requested,
                    location=current,
                    match=match,
                    redirects=tuple(visited),
                )

            # GuardChain guarantees a fallback on denial.
            next_location = normalize_location(decision.fallback or "")
            if next_location == current or next_location in visited:
                raise RedirectLoopError((*visited, current, next_location))

            if self._config.debug:
                logger.debug("Redirect %s -> %s (%s)", current, next_location, match.route.name)
            visited.append(current)
            current = next_location

        chain = (*visited, current)
        raise RedirectLoopError(
            chain,
            f"Redirect limit of {self.max_hops} hops exceeded: " + " -> ".join(chain),
        )
