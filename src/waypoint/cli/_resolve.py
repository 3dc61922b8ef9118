"""Locating the navigation engine named on the command line.

``waypoint routes myapp.nav:engine`` names a module and an attribute in
it. The attribute may be an ``Engine`` (started here), a running
``NavigationController``, or a zero-argument factory returning either.
Without ``:attribute`` the module's ``engine`` is used.
"""

import importlib
import sys
from typing import TypeAlias

from waypoint.engine import Engine
from waypoint.errors import ConfigurationError
from waypoint.navigation.controller import NavigationController

DEFAULT_ATTRIBUTE = "engine"

Target: TypeAlias = Engine | NavigationController


def find_target(spec: str) -> Target:
    """Import the engine or controller that *spec* points at.

    Raises ``ImportError``/``AttributeError`` for a bad module or name and
    ``TypeError`` when the object is neither kind (nor a factory for one).
    """
    module_name, _, attr = spec.partition(":")
    target = getattr(importlib.import_module(module_name), attr or DEFAULT_ATTRIBUTE)
    if not isinstance(target, Engine | NavigationController) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"{spec!r}: factory raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(target, Engine | NavigationController):
        msg = (
            f"{spec!r} is a {type(target).__name__}; expected a waypoint Engine "
            "or NavigationController"
        )
        raise TypeError(msg)
    return target


def open_controller(spec: str) -> NavigationController:
    """Locate *spec* and start it if needed. Any failure exits with code 1."""
    try:
        target = find_target(spec)
        return target.start() if isinstance(target, Engine) else target
    except (ImportError, AttributeError, TypeError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
