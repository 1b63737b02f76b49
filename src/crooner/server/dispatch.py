"""Route dispatch — filters, route walk, handler invocation.

For each request:

1. Every filter runs, in declaration order, unconditionally.
2. Routes registered for the request method are tried in declaration
   order against the raw request path.
3. On a match, the decoded captures are merged over the query/form
   parameters into a fresh dict, and the route's guards run against it.
4. The first route whose guards all accept has its handler invoked and
   its result normalized; later routes are not considered.

A rejected guard or ``pass_route()`` moves on to the next route with
the parameters the request started with.
"""

import logging
from typing import TYPE_CHECKING

from crooner._internal.invoke import call_with_context
from crooner.control import Halt, Pass
from crooner.errors import NotFound
from crooner.routing.guards import evaluate_guards
from crooner.routing.pattern import build_params
from crooner.server.normalize import apply_result, run_handler

if TYPE_CHECKING:
    from crooner.context import RequestContext

logger = logging.getLogger("crooner.server")


def _not_found(ctx: RequestContext) -> NotFound:
    return NotFound(f"No route matches {ctx.request.method} {ctx.request.path!r}")


async def run_filters(ctx: RequestContext) -> None:
    for filter_ in ctx.definition.filters:
        await call_with_context(filter_, ctx)


async def dispatch(ctx: RequestContext) -> None:
    """Load parameters, run filters, then invoke the first accepting route.

    Raises ``NotFound`` when no route matches and accepts.
    """
    request = ctx.request
    ctx.params = await request.params()
    await run_filters(ctx)

    routes = ctx.definition.routes_for(request.method)
    if not routes:
        raise _not_found(ctx)

    original = ctx.params
    for route in routes:
        captures = route.pattern.captures(request.raw_path)
        if captures is None:
            continue

        ctx.params = {**original, **build_params(route.param_names, captures)}
        ctx.route = route
        try:
            if not await evaluate_guards(route.guards, ctx):
                logger.debug("guard rejected %s for %s", route, request.path)
                continue
            await run_handler(ctx, route.handler)
        except Pass:
            logger.debug("passed %s for %s", route, request.path)
            continue

        if route.discard_body:
            ctx.response.body = []
        return

    ctx.params = original
    ctx.route = None
    raise _not_found(ctx)


async def route_request(ctx: RequestContext) -> None:
    """``dispatch`` plus the control signals that escape it.

    A ``halt()`` from a filter or guard becomes the response; a
    ``pass_route()`` outside any route is a ``NotFound``.
    """
    try:
        await dispatch(ctx)
    except Halt as signal:
        await apply_result(ctx, signal.value)
    except Pass:
        raise _not_found(ctx) from None
