"""Engine configuration.

EngineConfig is a frozen dataclass: immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

# Environment presets. Development turns on redirect diagnostics.
_PRESETS: dict[str, dict[str, Any]] = {
    "dev": {"debug": True},
    "prod": {"debug": False},
}


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Navigation engine configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = EngineConfig(initial_location="/splash", debug=True)
    """

    # Root entry of the navigation stack, and the target of reset()
    initial_location: str = "/"

    # Redirect hop cap. None = number of registered routes + 1
    max_redirects: int | None = None

    # Log every redirect hop and commit at DEBUG level
    debug: bool = False

    # Selects which provided guard factories are built ("dev" / "prod")
    environment: str = "dev"

    # Fallback for guards that raise and carry no fallback of their own
    default_fallback: str | None = None

    @classmethod
    def for_environment(cls, environment: str, **overrides: Any) -> EngineConfig:
        """Return the preset for *environment* with *overrides* applied.

        Unknown environments get the plain defaults::

            EngineConfig.for_environment("prod", initial_location="/login")
        """
        values = {**_PRESETS.get(environment, {}), **overrides}
        return cls(environment=environment, **values)

    def with_overrides(self, **overrides: Any) -> EngineConfig:
        """Return a copy with *overrides* applied."""
        return replace(self, **overrides)
