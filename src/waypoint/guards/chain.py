"""Ordered composition of guards.

The chain holds ``(tag, guard)`` pairs in registration order. For a given
route, only guards whose tag the route requires run, and they run in chain
order, one at a time. The first denial wins and later guards are never
invoked.

Order is a contract, not an implementation detail: register the
authentication guard before authorization guards so an anonymous user is
sent to the login screen rather than to an "access denied" fallback::

    chain = GuardChain([
        ("authenticated", AuthenticationGuard(session)),
        ("admin", RoleGuard(session, {UserRole.HR_PORTAL})),
    ])
"""

import logging
from collections.abc import Iterable

from waypoint._internal.sync_async import maybe_await
from waypoint.errors import GuardConfigurationError
from waypoint.guards.protocol import Guard, GuardDecision, NavigationContext
from waypoint.routing.route import RouteDefinition

logger = logging.getLogger("waypoint.guards")


class GuardChain:
    """Immutable, ordered list of tagged guards.

    ``default_fallback`` is used when a guard raises and has no
    ``fallback`` attribute of its own.
    """

    __slots__ = ("_default_fallback", "_entries")

    def __init__(
        self,
        entries: Iterable[tuple[str, Guard]] = (),
        *,
        default_fallback: str | None = None,
    ) -> None:
        self._entries: tuple[tuple[str, Guard], ...] = tuple(entries)
        self._default_fallback = default_fallback

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[tuple[str, Guard], ...]:
        return self._entries

    @property
    def tags(self) -> frozenset[str]:
        """Every tag that has at least one guard."""
        return frozenset(tag for tag, _ in self._entries)

    def guards_for(self, route: RouteDefinition) -> list[tuple[str, Guard]]:
        """Return the guards *route* requires, in chain order."""
        return [(tag, guard) for tag, guard in self._entries if tag in route.requires]

    async def evaluate(self, route: RouteDefinition, context: NavigationContext) -> GuardDecision:
        """Run the guards *route* requires and return the combined decision.

        Raises ``GuardConfigurationError`` when a guard denies without a
        fallback (or raises with no fallback available).
        """
        for tag, guard in self.guards_for(route):
            decision = await self._evaluate_one(tag, guard, context)
            if decision.allowed:
                continue
            if not decision.fallback:
                msg = (
                    f"Guard {type(guard).__name__} ({tag!r}) denied "
                    f"{context.target_location!r} without a fallback location."
                )
                raise GuardConfigurationError(msg)
            logger.debug(
                "Guard %s (%s) denied %s -> %s",
                type(guard).__name__,
                tag,
                context.target_location,
                decision.fallback,
            )
            return decision
        return GuardDecision.allow()

    async def _evaluate_one(
        self, tag: str, guard: Guard, context: NavigationContext
    ) -> GuardDecision:
        try:
            decision = await maybe_await(guard.evaluate(context))
        except Exception:
            # A failing guard never defaults to allowed.
            fallback = getattr(guard, "fallback", None) or self._default_fallback
            logger.warning(
                "Guard %s (%s) failed on %s; treating as denied -> %s",
                type(guard).__name__,
                tag,
                context.target_location,
                fallback,
                exc_info=True,
            )
            return GuardDecision.deny(fallback)

        if not isinstance(decision, GuardDecision):
            msg = (
                f"Guard {type(guard).__name__} ({tag!r}) returned "
                f"{type(decision).__name__}, expected GuardDecision."
            )
            raise GuardConfigurationError(msg)
        return decision
