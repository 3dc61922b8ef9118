"""``waypoint routes`` and ``waypoint resolve``.

``routes`` prints the route table. ``resolve`` runs one location through
the guard chain, exactly as a navigation would, and prints where it lands.
"""

import argparse
import sys
from functools import partial

import anyio

from waypoint.cli._resolve import open_controller
from waypoint.errors import ConfigurationError, NavigationError
from waypoint.routing.deeplink import parse_deep_link


def run_routes(args: argparse.Namespace) -> None:
    """List registered routes: NAME, PATH, and required capability tags."""
    nav = open_controller(args.engine)
    routes = nav.table.routes
    if not routes:
        print("No routes registered.")
        return

    rows = [(route.name, route.path, ", ".join(sorted(route.requires)) or "-") for route in routes]

    max_name = max(max(len(r[0]) for r in rows), 4)  # "NAME" header
    max_path = max(max(len(r[1]) for r in rows), 4)  # "PATH" header

    fmt = f"{{:<{max_name}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("NAME", "PATH", "REQUIRES"))
    sep_len = max_name + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for name, path, requires in rows:
        print(fmt.format(name, path, requires))


def run_resolve(args: argparse.Namespace) -> None:
    """Resolve ``args.location`` through the guards and print the outcome."""
    nav = open_controller(args.engine)
    try:
        link = parse_deep_link(nav.table, args.location)
        resolution = anyio.run(partial(nav.resolver.resolve, link.location))
    except (NavigationError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    route = resolution.match.route
    print(f"requested: {resolution.requested}")
    for hop in resolution.redirects:
        print(f"  denied:  {hop}")
    print(f"lands on:  {resolution.location} ({route.name})")
    for key, value in sorted(resolution.match.params.items()):
        print(f"  {key} = {value}")
