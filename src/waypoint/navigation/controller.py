"""Navigation controller: the engine's public API.

Owns the navigation stack. Every guarded transition (navigate, replace,
signal re-check) first runs redirect resolution, then commits.

Concurrency model:
    Single writer. Commits are short synchronous critical sections under
    a lock, with no await between the "is this request still current?"
    check and the mutation.

    Guard evaluation may suspend. Each guarded transition runs inside its
    own ``anyio.CancelScope``; starting a newer transition cancels the
    scope of the one in flight (last request wins). The superseded call
    returns a slot settled ``CANCELLED`` and never touches the stack.

    ChangeSignal firings that arrive while a transition is in flight are
    coalesced into one pending re-check, run against the settled state
    once the in-flight transition finishes.

    A caller-supplied ``cancel`` event is the only other cancellation
    path. The engine imposes no timeout on guards.
"""

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, TypeAlias

import anyio

from waypoint.config import EngineConfig
from waypoint.errors import ConfigurationError, NavigationError, NavigationFailure
from waypoint.navigation.events import (
    NavigationAction,
    NavigationCause,
    NavigationEvent,
    NavigationSink,
    check_sink,
    deliver,
)
from waypoint.navigation.signals import ChangeSignal
from waypoint.navigation.state import (
    EngineState,
    NavigationEntry,
    NavigationOutcome,
    ResultSlot,
)
from waypoint.resolver import RedirectResolver, Resolution
from waypoint.routing.deeplink import parse_deep_link
from waypoint.routing.table import RouteTable, normalize_location

logger = logging.getLogger("waypoint.navigation")

_Committed: TypeAlias = tuple[
    ResultSlot | None, list[tuple[str, str, NavigationCause, NavigationAction]]
]


@dataclass(slots=True)
class _InFlight:
    """The transition currently awaiting guard evaluation."""

    generation: int
    scope: anyio.CancelScope
    cause: NavigationCause


class NavigationController:
    """Navigation stack plus the guarded operations that change it.

    Usage::

        nav = NavigationController(RedirectResolver(table, chain), config)

        slot = await nav.navigate_to("/leave/request")
        ...
        nav.pop({"submitted": True})
        result = await slot.wait()   # NavigationResult(COMPLETED, {...})

    Normally built by ``Engine.start()`` rather than by hand.
    """

    __slots__ = (
        "_config",
        "_failure",
        "_generation",
        "_inflight",
        "_lock",
        "_observers",
        "_refresh_pending",
        "_resolver",
        "_signals",
        "_stack",
    )

    def __init__(
        self,
        resolver: RedirectResolver,
        config: EngineConfig | None = None,
        *,
        observers: Iterable[NavigationSink] = (),
    ) -> None:
        self._resolver = resolver
        self._config: EngineConfig = config or EngineConfig()
        self._lock = threading.Lock()
        self._stack: list[NavigationEntry] = [self._root_entry()]
        self._generation = 0
        self._inflight: _InFlight | None = None
        self._refresh_pending = False
        self._failure: NavigationFailure | None = None
        self._observers: tuple[NavigationSink, ...] = tuple(map(check_sink, observers))
        self._signals: list[ChangeSignal] = []

    # -- State accessors --

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def resolver(self) -> RedirectResolver:
        return self._resolver

    @property
    def table(self) -> RouteTable:
        return self._resolver.table

    @property
    def current_location(self) -> str:
        with self._lock:
            return self._stack[-1].location

    @property
    def current_entry(self) -> NavigationEntry:
        with self._lock:
            return self._stack[-1]

    @property
    def can_pop(self) -> bool:
        with self._lock:
            return len(self._stack) > 1

    @property
    def stack(self) -> tuple[str, ...]:
        """Locations on the stack, root first."""
        with self._lock:
            return tuple(entry.location for entry in self._stack)

    @property
    def state(self) -> EngineState:
        with self._lock:
            return EngineState(
                current_location=self._stack[-1].location,
                stack=tuple(entry.location for entry in self._stack),
            )

    @property
    def failure(self) -> NavigationFailure | None:
        """Error state of the last failed navigation, until the next success."""
        return self._failure

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    # -- Wiring --

    def add_observer(self, sink: NavigationSink) -> None:
        check_sink(sink)
        with self._lock:
            self._observers = (*self._observers, sink)

    def remove_observer(self, sink: NavigationSink) -> None:
        with self._lock:
            self._observers = tuple(s for s in self._observers if s != sink)

    def attach(self, signal: ChangeSignal) -> None:
        """Re-check the current location whenever *signal* fires."""
        signal.add_listener(self.refresh)
        self._signals.append(signal)

    def detach(self, signal: ChangeSignal) -> None:
        signal.remove_listener(self.refresh)
        if signal in self._signals:
            self._signals.remove(signal)

    # -- Guarded operations --

    async def navigate_to(
        self,
        location: str,
        extra: Any = None,
        *,
        cancel: anyio.Event | None = None,
    ) -> ResultSlot:
        """Push the resolved location and return its result slot.

        The slot settles when the entry is popped. If the resolved
        location is already current and nothing can be popped, nothing is
        pushed and an already-settled ``NO_RESULT`` slot is returned.

        Raises ``RouteNotFoundError``, ``RedirectLoopError`` or
        ``GuardConfigurationError``; the stack is untouched in every case.
        """
        return await self._user_transition(NavigationAction.PUSH, location, extra, cancel)

    async def replace_to(
        self,
        location: str,
        extra: Any = None,
        *,
        cancel: anyio.Event | None = None,
    ) -> ResultSlot:
        """Replace the top entry with the resolved location.

        The replaced entry's slot settles ``NO_RESULT``: a replaced screen
        can never receive a pop result.
        """
        return await self._user_transition(NavigationAction.REPLACE, location, extra, cancel)

    async def open_deep_link(
        self,
        url: str,
        extra: Any = None,
        *,
        cancel: anyio.Event | None = None,
    ) -> ResultSlot:
        """Navigate to an externally supplied URL.

        The query string, if any, becomes ``extra`` unless *extra* is
        given. An unparseable or unmatched link raises
        ``RouteNotFoundError``, like any unknown location.
        """
        try:
            link = parse_deep_link(self._resolver.table, url)
        except NavigationError as exc:
            self._failure = NavigationFailure.from_error(url, exc)
            raise
        if extra is None and link.query:
            extra = link.query
        return await self.navigate_to(link.location, extra, cancel=cancel)

    async def refresh(self) -> None:
        """Re-run redirect resolution for the current location.

        Installed as the listener for attached ``ChangeSignal``s. If the
        current location is no longer permitted, the top entry is replaced
        with wherever resolution now lands. While another transition is in
        flight the re-check is queued instead. Resolution errors are
        recorded in ``failure`` and logged, never raised to the signal.
        """
        if self._inflight is not None:
            self._refresh_pending = True
            return

        while True:
            base = self.current_entry
            try:
                slot = await self._transition(
                    NavigationAction.REPLACE,
                    base.location,
                    extra=base.extra,
                    cancel=None,
                    cause=NavigationCause.SIGNAL,
                    base=base,
                )
            except (NavigationError, ConfigurationError) as exc:
                logger.warning("Re-check of %s failed: %s", base.location, exc)
                return
            # None: the stack moved while guards ran; check the new top.
            if slot is not None:
                return

    # -- Unguarded operations --

    def pop(self, result: Any = None) -> None:
        """Pop the top entry, settling its slot with *result*.

        At the root entry this is a no-op.
        """
        with self._lock:
            if len(self._stack) <= 1:
                return
            entry = self._stack.pop()
            to_location = self._stack[-1].location
            observers = self._observers
        entry.slot.complete(result)
        self._emit(
            observers,
            entry.location,
            to_location,
            NavigationCause.USER,
            NavigationAction.POP,
        )

    def pop_until(self, location: str) -> None:
        """Pop until *location* is current or only the root entry is left.

        A location that is not on the stack pops everything down to the
        root; it is never an error.
        """
        target = normalize_location(location)
        popped: list[tuple[NavigationEntry, str]] = []
        with self._lock:
            while len(self._stack) > 1 and self._stack[-1].location != target:
                entry = self._stack.pop()
                popped.append((entry, self._stack[-1].location))
            observers = self._observers

        for entry, to_location in popped:
            entry.slot.complete(None)
            self._emit(
                observers,
                entry.location,
                to_location,
                NavigationCause.USER,
                NavigationAction.POP,
            )

    def clear_history(self) -> None:
        """Drop every entry below the top, making the top the new root."""
        with self._lock:
            dropped = self._stack[:-1]
            del self._stack[:-1]
        for entry in reversed(dropped):
            entry.slot.discard()

    def reset(self) -> None:
        """Return to a single root entry at the configured initial location.

        Every discarded slot settles ``NO_RESULT`` and any in-flight
        transition is superseded. A re-check queued behind that transition
        runs against the fresh root once the superseded call unwinds.
        """
        with self._lock:
            self._generation += 1
            inflight, self._inflight = self._inflight, None
            discarded = self._stack
            self._stack = [self._root_entry()]
            from_location = discarded[-1].location
            to_location = self._stack[0].location
            observers = self._observers
            self._failure = None

        if inflight is not None:
            inflight.scope.cancel()
        for entry in reversed(discarded):
            entry.slot.discard()
        self._emit(
            observers,
            from_location,
            to_location,
            NavigationCause.USER,
            NavigationAction.RESET,
        )

    # -- Internal --

    async def _user_transition(
        self,
        action: NavigationAction,
        location: str,
        extra: Any,
        cancel: anyio.Event | None,
    ) -> ResultSlot:
        slot = await self._transition(
            action, location, extra=extra, cancel=cancel, cause=NavigationCause.USER
        )
        if slot is None:
            msg = f"{action.value} to {location!r} committed without a result slot"
            raise RuntimeError(msg)
        return slot

    def _root_entry(self) -> NavigationEntry:
        return NavigationEntry(location=normalize_location(self._config.initial_location))

    async def _transition(
        self,
        action: NavigationAction,
        location: str,
        *,
        extra: Any,
        cancel: anyio.Event | None,
        cause: NavigationCause,
        base: NavigationEntry | None = None,
    ) -> ResultSlot | None:
        requested = normalize_location(location)
        scope = anyio.CancelScope()
        with self._lock:
            self._generation += 1
            generation = self._generation
            previous, self._inflight = self._inflight, _InFlight(generation, scope, cause)

        if previous is not None:
            previous.scope.cancel()
            if previous.cause is NavigationCause.SIGNAL:
                # A superseded re-check still has to happen afterwards.
                self._refresh_pending = True
            logger.debug("Navigation superseded by request for %s", requested)

        resolution: Resolution | None = None
        try:
            if cancel is None or not cancel.is_set():
                with scope:
                    resolution = await self._resolve(requested, extra, cancel, scope)
        except (NavigationError, ConfigurationError) as exc:
            if not self._release(generation):
                await self._drain_refresh()
                return ResultSlot.settled(NavigationOutcome.CANCELLED)
            self._failure = NavigationFailure.from_error(requested, exc)
            logger.info("Navigation to %s failed: %s", requested, exc)
            await self._drain_refresh()
            raise
        except BaseException:
            self._release(generation)
            raise

        committed: _Committed | None = None
        with self._lock:
            if self._inflight is not None and self._inflight.generation == generation:
                self._inflight = None
            if resolution is not None and generation == self._generation:
                committed = self._commit(action, resolution, extra, cause, base)
            observers = self._observers

        if committed is None:
            logger.debug("Navigation to %s cancelled", requested)
            # Re-checks queued behind a cancelled or reset request still run.
            await self._drain_refresh()
            return ResultSlot.settled(NavigationOutcome.CANCELLED)

        slot, events = committed
        self._failure = None
        for from_location, to_location, event_cause, event_action in events:
            self._emit(observers, from_location, to_location, event_cause, event_action)
        await self._drain_refresh()
        return slot

    async def _resolve(
        self,
        location: str,
        extra: Any,
        cancel: anyio.Event | None,
        scope: anyio.CancelScope,
    ) -> Resolution | None:
        if cancel is None:
            return await self._resolver.resolve(location, extra=extra)

        # Resolve in a child task so errors are captured here instead of
        # surfacing as an exception group from the task group.
        outcome: dict[str, Any] = {}

        async def run() -> None:
            try:
                outcome["resolution"] = await self._resolver.resolve(
                    location, extra=extra, cancel=cancel
                )
            except (NavigationError, ConfigurationError) as exc:
                outcome["error"] = exc
            finally:
                tg.cancel_scope.cancel()

        async def watch() -> None:
            await cancel.wait()
            logger.debug("Navigation to %s cancelled by caller", location)
            scope.cancel()

        async with anyio.create_task_group() as tg:
            tg.start_soon(watch)
            tg.start_soon(run)

        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("resolution")

    def _commit(
        self,
        action: NavigationAction,
        resolution: Resolution,
        extra: Any,
        cause: NavigationCause,
        base: NavigationEntry | None,
    ) -> _Committed:
        """Apply a resolved transition. Caller holds ``_lock``."""
        top = self._stack[-1]
        if cause is NavigationCause.USER and resolution.redirected:
            cause = NavigationCause.REDIRECT
        entry = NavigationEntry(
            location=resolution.location,
            parameters=MappingProxyType(dict(resolution.match.params)),
            extra=extra,
        )

        if cause is NavigationCause.SIGNAL:
            if top is not base:
                return None, []
            if resolution.location == top.location:
                return top.slot, []

        elif action is NavigationAction.PUSH:
            if resolution.location == top.location and len(self._stack) == 1:
                return ResultSlot.settled(NavigationOutcome.NO_RESULT), []
            self._stack.append(entry)
            self._log_commit(action, top.location, entry.location, cause)
            return entry.slot, [(top.location, entry.location, cause, action)]

        self._stack[-1] = entry
        top.slot.discard()
        action = NavigationAction.REPLACE
        self._log_commit(action, top.location, entry.location, cause)
        return entry.slot, [(top.location, entry.location, cause, action)]

    def _release(self, generation: int) -> bool:
        """Clear the in-flight marker if it is ours; report if still current."""
        with self._lock:
            if self._inflight is not None and self._inflight.generation == generation:
                self._inflight = None
            return generation == self._generation

    async def _drain_refresh(self) -> None:
        if self._refresh_pending and self._inflight is None:
            self._refresh_pending = False
            await self.refresh()

    def _log_commit(
        self,
        action: NavigationAction,
        from_location: str,
        to_location: str,
        cause: NavigationCause,
    ) -> None:
        if self._config.debug:
            logger.debug("%s %s -> %s (%s)", action.value, from_location, to_location, cause.value)

    @staticmethod
    def _emit(
        observers: tuple[NavigationSink, ...],
        from_location: str,
        to_location: str,
        cause: NavigationCause,
        action: NavigationAction,
    ) -> None:
        if not observers:
            return
        deliver(
            NavigationEvent(
                from_location=from_location,
                to_location=to_location,
                cause=cause,
                action=action,
            ),
            observers,
        )

    def __repr__(self) -> str:
        return f"<NavigationController at {self.current_location!r} depth={len(self._stack)}>"
