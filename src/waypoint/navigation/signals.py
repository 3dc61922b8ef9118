"""ChangeSignal: external-state observer that forces a re-check.

When state that guards depend on changes (session expired, role revoked),
the owner of that state calls ``await signal.notify()``. Every listener
runs in registration order. An attached ``NavigationController`` re-runs
redirect resolution against its current location and, if the answer
changed, replaces the current screen.

Listeners may be sync or async. A failing listener is logged and does not
stop the remaining ones; the notifier never sees the error.
"""

import logging
import threading
from collections.abc import Callable
from typing import Any, TypeAlias

from waypoint._internal.sync_async import maybe_await

logger = logging.getLogger("waypoint.navigation")

Listener: TypeAlias = Callable[[], Any]


class ChangeSignal:
    """Listenable change notifier.

    Usage::

        signal = ChangeSignal()
        signal.add_listener(nav.refresh)
        await signal.notify()
    """

    __slots__ = ("_listeners", "_lock")

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def add_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        """Remove *listener*. Removing an unknown listener is a no-op."""
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    async def notify(self) -> None:
        """Call every listener once, in registration order."""
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                await maybe_await(listener())
            except Exception:
                logger.exception("ChangeSignal listener %r failed", listener)
