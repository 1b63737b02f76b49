"""Crooner CLI — serve an app, list its routes.

Entry point registered as ``crooner`` in ``pyproject.toml``::

    [project.scripts]
    crooner = "crooner.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``crooner`` command."""
    parser = argparse.ArgumentParser(
        prog="crooner",
        description="Crooner — a small, route-first web framework for ASGI.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- crooner run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve an app with pounce")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("-p", "--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "-e",
        "--environment",
        default=None,
        help="Environment name (sets CROONER_ENV before the app is imported)",
    )
    run_parser.add_argument("--reload", action="store_true", help="Restart on code changes")

    # -- crooner routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from crooner.cli._run import run

        run(args)
    elif args.command == "routes":
        from crooner.cli._routes import list_routes

        list_routes(args)
