"""``crooner run`` — serve an app with pounce."""

import argparse
import os
import sys

from crooner.cli._resolve import resolve_app


def run(args: argparse.Namespace) -> None:
    if args.environment:
        os.environ["CROONER_ENV"] = args.environment
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from crooner.server.dev import run_server

    app._ensure_frozen()
    run_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        environment=app.config.environment,
        reload=args.reload or app.config.reload,
        reload_dirs=app.config.reload_dirs,
        app_path=args.app if args.reload else None,
    )
