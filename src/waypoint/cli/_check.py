"""``waypoint check``: route and guard wiring validation.

Opens the engine named by an import string and runs the
static wiring checks. Exits with code 1 if errors are found.
"""

import argparse

from waypoint.checks import check_wiring
from waypoint.cli._resolve import open_controller


def run_check(args: argparse.Namespace) -> None:
    """Validate route/guard wiring for an engine."""
    nav = open_controller(args.engine)
    result = check_wiring(nav.table, nav.resolver.chain)
    print(result.summary())
    if not result.ok:
        raise SystemExit(1)
