"""``crooner routes`` — list registered routes in dispatch order."""

import argparse
import sys

from crooner.cli._resolve import resolve_app


def list_routes(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows: list[tuple[str, str, str]] = []
    for method, routes in app.definition.routes.items():
        for route in routes:
            if route.discard_body:
                continue
            handler_name = getattr(route.handler, "__name__", str(route.handler))
            if route.guards:
                handler_name += f" [{len(route.guards)} guards]"
            rows.append((method, str(route.pattern), handler_name))

    if not rows:
        print("No routes registered.")
        return

    max_method = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))
    fmt = f"{{:<{max_method}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    print("-" * min(max_method + max_path + 4 + max(len(r[2]) for r in rows), 80))
    for row in rows:
        print(fmt.format(*row))
