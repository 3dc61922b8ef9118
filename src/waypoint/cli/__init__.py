"""Waypoint CLI: route listing, resolution preview, and wiring checks.

Entry point registered as ``waypoint`` in ``pyproject.toml``::

    [project.scripts]
    waypoint = "waypoint.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``waypoint`` command."""
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Waypoint: guarded navigation engine tooling.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- waypoint routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("engine", help="Import string (e.g. myapp.nav:engine)")

    # -- waypoint resolve -------------------------------------------------
    resolve_parser = subparsers.add_parser(
        "resolve", help="Show where a location lands after guards and redirects"
    )
    resolve_parser.add_argument("engine", help="Import string (e.g. myapp.nav:engine)")
    resolve_parser.add_argument("location", help="Location or deep link to resolve")

    # -- waypoint check ---------------------------------------------------
    check_parser = subparsers.add_parser("check", help="Validate route and guard wiring")
    check_parser.add_argument("engine", help="Import string (e.g. myapp.nav:engine)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from waypoint.cli._routes import run_routes

        run_routes(args)
    elif args.command == "resolve":
        from waypoint.cli._routes import run_resolve

        run_resolve(args)
    elif args.command == "check":
        from waypoint.cli._check import run_check

        run_check(args)
