"""Guard protocol, GuardDecision, and NavigationContext.

A guard is any object with an ``evaluate`` method matching::

    def evaluate(self, context: NavigationContext) -> GuardDecision: ...
    # or
    async def evaluate(self, context: NavigationContext) -> GuardDecision: ...

No base class required. The engine checks the shape, not the lineage.
Guards are peers; an authentication guard and an authorization guard are
independent objects combined by ``GuardChain``.

Guards must be safe to call repeatedly and concurrently with themselves:
no exclusive mutable state across calls unless synchronized internally.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Protocol, runtime_checkable

import anyio

from waypoint.routing.route import RouteDefinition


@dataclass(frozen=True, slots=True)
class GuardDecision:
    """Outcome of a guard evaluation.

    ``fallback`` is the location to redirect to when ``allowed`` is false.
    A denial without a fallback is a configuration error, reported by the
    chain as ``GuardConfigurationError``.
    """

    allowed: bool
    fallback: str | None = None

    @classmethod
    def allow(cls) -> GuardDecision:
        return _ALLOW

    @classmethod
    def deny(cls, fallback: str | None) -> GuardDecision:
        return cls(allowed=False, fallback=fallback)


_ALLOW = GuardDecision(allowed=True)


@dataclass(frozen=True, slots=True)
class NavigationContext:
    """Everything a guard may inspect about one navigation request.

    Built once per resolution hop and never mutated. ``cancel`` is the
    caller-supplied cancellation signal; long-running guards should check
    ``cancelled`` (or await ``cancel.wait()``) and stop early.
    """

    target_location: str
    route: RouteDefinition
    parameters: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    extra: Any = None
    cancel: anyio.Event | None = None

    @classmethod
    def build(
        cls,
        target_location: str,
        route: RouteDefinition,
        parameters: Mapping[str, str] | None = None,
        extra: Any = None,
        cancel: anyio.Event | None = None,
    ) -> NavigationContext:
        """Build a context with a read-only copy of *parameters*."""
        return cls(
            target_location=target_location,
            route=route,
            parameters=MappingProxyType(dict(parameters or {})),
            extra=extra,
            cancel=cancel,
        )

    @property
    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()


@runtime_checkable
class Guard(Protocol):
    """Protocol for navigation guards.

    Accepts both sync and async implementations::

        class AdminGuard:
            fallback = "/home"

            def evaluate(self, context: NavigationContext) -> GuardDecision:
                if session.user.role is UserRole.HR_PORTAL:
                    return GuardDecision.allow()
                return GuardDecision.deny(self.fallback)

    The optional ``fallback`` attribute is used when ``evaluate`` raises:
    a failing guard is treated as a denial, never as an allow.
    """

    def evaluate(
        self, context: NavigationContext
    ) -> GuardDecision | Awaitable[GuardDecision]: ...
