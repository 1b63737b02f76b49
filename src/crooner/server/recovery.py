"""Error recovery policy.

Wraps ``route_request`` and maps failures to registered recovery
handlers. Reached exactly once per request, in this order:

1. ``NotFound``: status 404 and a default body are set first, then the
   handler registered for ``NotFound`` (if any) runs on top of them.
2. Any other ``Exception``: recorded on the context; re-raised when
   ``raise_errors`` is on; otherwise status 500 and the handler for the
   most specific registered class in its MRO (``Exception`` being the
   catch-all) runs.
3. Afterwards, a final status >= 400 with a handler registered for that
   exact code runs that handler too.

A failure inside a recovery handler is fatal: it is raised as
``RecoveryFailure`` and never recovered again.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from crooner._internal.types import ErrorKind, RecoveryHandler
from crooner.control import Pass
from crooner.errors import NotFound, RecoveryFailure
from crooner.server.dispatch import route_request
from crooner.server.normalize import run_handler

if TYPE_CHECKING:
    from crooner.context import RequestContext

logger = logging.getLogger("crooner.server")

NOT_FOUND_BODY = "<h1>Not Found</h1>"
INTERNAL_ERROR_BODY = "<h1>Internal Server Error</h1>"


def lookup_handler(
    errors: Mapping[ErrorKind, RecoveryHandler],
    kind: type[BaseException],
    root: type[BaseException],
) -> RecoveryHandler | None:
    """Find the handler for *kind*, walking its MRO up to *root*."""
    for klass in kind.__mro__:
        handler = errors.get(klass)
        if handler is not None:
            return handler
        if klass is root:
            break
    return None


async def recover(ctx: RequestContext, handler: RecoveryHandler) -> None:
    """Run a recovery handler through the normal result pipeline."""
    try:
        await run_handler(ctx, handler)
    except (Exception, Pass) as exc:
        name = getattr(handler, "__qualname__", repr(handler))
        msg = f"recovery handler {name} failed while handling {ctx.error!r}"
        raise RecoveryFailure(msg) from exc


async def serve(ctx: RequestContext) -> None:
    """Dispatch the request and apply the recovery policy."""
    errors = ctx.definition.errors
    request = ctx.request
    response = ctx.response

    try:
        await route_request(ctx)
    except NotFound as exc:
        ctx.error = exc
        logger.debug("404 %s %s: %s", request.method, request.path, exc.detail)
        response.status = exc.status
        response.body = [NOT_FOUND_BODY]
        handler = lookup_handler(errors, type(exc), NotFound)
        if handler is not None:
            await recover(ctx, handler)
    except Exception as exc:
        ctx.error = exc
        if ctx.config.raise_errors:
            raise
        logger.exception("500 %s %s", request.method, request.path)
        response.status = 500
        handler = lookup_handler(errors, type(exc), Exception)
        if handler is not None:
            await recover(ctx, handler)

    if response.status >= 400:
        handler = errors.get(response.status)
        if handler is not None:
            await recover(ctx, handler)
