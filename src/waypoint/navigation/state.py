"""Navigation stack state: entries, result slots, and snapshots.

A ``ResultSlot`` is the handle ``navigate_to`` gives back to its caller.
It settles exactly once:

- ``COMPLETED`` when the entry is popped (with the pop result, maybe None)
- ``NO_RESULT`` when the entry is replaced or discarded by ``reset``, or
  when the navigation was a no-op
- ``CANCELLED`` when a newer request superseded it or the caller cancelled
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

import anyio


class NavigationOutcome(Enum):
    COMPLETED = "completed"
    NO_RESULT = "no_result"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class NavigationResult:
    """Settled value of a ``ResultSlot``."""

    outcome: NavigationOutcome
    value: Any = None

    @property
    def cancelled(self) -> bool:
        return self.outcome is NavigationOutcome.CANCELLED


class ResultSlot:
    """Single-assignment result handle.

    The first ``settle`` wins; later calls are ignored and return False.
    ``await slot.wait()`` blocks until settled.

    The wake-up event is created lazily inside ``wait()`` so slots can be
    built outside a running event loop (the root entry is created that way).
    """

    __slots__ = ("_event", "_result")

    def __init__(self) -> None:
        self._result: NavigationResult | None = None
        self._event: anyio.Event | None = None

    @classmethod
    def settled(cls, outcome: NavigationOutcome, value: Any = None) -> ResultSlot:
        slot = cls()
        slot.settle(outcome, value)
        return slot

    @property
    def done(self) -> bool:
        return self._result is not None

    @property
    def result(self) -> NavigationResult | None:
        """The settled result, or ``None`` while pending."""
        return self._result

    @property
    def outcome(self) -> NavigationOutcome | None:
        return self._result.outcome if self._result is not None else None

    @property
    def cancelled(self) -> bool:
        return self.outcome is NavigationOutcome.CANCELLED

    def settle(self, outcome: NavigationOutcome, value: Any = None) -> bool:
        if self._result is not None:
            return False
        self._result = NavigationResult(outcome=outcome, value=value)
        if self._event is not None:
            self._event.set()
        return True

    def complete(self, value: Any = None) -> bool:
        return self.settle(NavigationOutcome.COMPLETED, value)

    def discard(self) -> bool:
        return self.settle(NavigationOutcome.NO_RESULT)

    def cancel(self) -> bool:
        return self.settle(NavigationOutcome.CANCELLED)

    async def wait(self) -> NavigationResult:
        while self._result is None:
            if self._event is None:
                self._event = anyio.Event()
            await self._event.wait()
        return self._result

    def __repr__(self) -> str:
        state = self._result.outcome.value if self._result is not None else "pending"
        return f"<ResultSlot {state}>"


@dataclass(slots=True)
class NavigationEntry:
    """One screen on the navigation stack."""

    location: str
    parameters: MappingProxyType[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    extra: Any = None
    slot: ResultSlot = field(default_factory=ResultSlot)


@dataclass(frozen=True, slots=True)
class EngineState:
    """Immutable snapshot of the navigation state."""

    current_location: str
    stack: tuple[str, ...]

    @property
    def depth(self) -> int:
        return len(self.stack)
