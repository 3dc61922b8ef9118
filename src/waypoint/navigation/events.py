"""Navigation observation events.

Small opt-in event channel for committed transitions. Applications register
sinks to forward events to logs or analytics. Delivery is synchronous and
best-effort: a failing sink is logged and never fails the navigation.
Sinks are plain callables; ``async def`` sinks are rejected when added.
"""

import inspect
import logging
from typing import TypeAlias
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from time import time


class NavigationCause(Enum):
    """Why a transition happened."""

    USER = "user"
    REDIRECT = "redirect"
    SIGNAL = "signal"


class NavigationAction(Enum):
    """How the stack changed."""

    PUSH = "push"
    REPLACE = "replace"
    POP = "pop"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class NavigationEvent:
    """A committed transition."""

    from_location: str
    to_location: str
    cause: NavigationCause
    action: NavigationAction
    timestamp: float = field(default_factory=time)


NavigationSink: TypeAlias = Callable[[NavigationEvent], None]


_log = logging.getLogger("waypoint.navigation")


def check_sink(sink: NavigationSink) -> NavigationSink:
    """Return *sink* unchanged, or raise ``TypeError`` if it cannot be called synchronously."""
    if not callable(sink):
        msg = f"Navigation observer {sink!r} is not callable."
        raise TypeError(msg)
    if inspect.iscoroutinefunction(sink) or inspect.iscoroutinefunction(
        getattr(type(sink), "__call__", None)
    ):
        msg = (
            f"Navigation observer {sink!r} is async. Observers are called "
            "synchronously; schedule async work from a plain callable instead."
        )
        raise TypeError(msg)
    return sink


def deliver(event: NavigationEvent, sinks: tuple[NavigationSink, ...]) -> None:
    """Hand *event* to every sink. Sink failures are logged and swallowed."""
    for sink in sinks:
        try:
            sink(event)
        except Exception:
            _log.exception("Navigation observer %r failed for %s", sink, event)


class LoggingSink:
    """Forward navigation events to a logger.

    Usage::

        engine.add_observer(LoggingSink())
    """

    __slots__ = ("level", "logger")

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.logger = logger or _log
        self.level = level

    def __call__(self, event: NavigationEvent) -> None:
        self.logger.log(
            self.level,
            "%s %s -> %s (%s)",
            event.action.value,
            event.from_location,
            event.to_location,
            event.cause.value,
        )
