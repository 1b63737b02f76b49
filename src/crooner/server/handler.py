"""ASGI handler — translates ASGI scope/messages to crooner types.

The only component that touches raw ASGI directly. Converts the scope
to a typed ``Request``, runs it through the middleware chain into the
dispatcher, and sends the sealed response back through ASGI send().
"""

from contextvars import Token

from crooner._internal.asgi import Receive, Scope, Send
from crooner.context import RequestContext, context_var
from crooner.definition import Definition
from crooner.http.request import Request
from crooner.http.response import AnyResponse
from crooner.middleware.protocol import Middleware, Next
from crooner.server.recovery import serve
from crooner.server.sender import send_any


def _chain(middleware: tuple[Middleware, ...], endpoint: Next) -> Next:
    """Wrap *endpoint* so the first middleware is the outermost."""
    handler = endpoint
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Middleware = mw, _next: Next = handler) -> AnyResponse:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(scope: Scope, receive: Receive, send: Send, *, definition: Definition) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    async def endpoint(request: Request) -> AnyResponse:
        ctx = RequestContext(request=request, definition=definition)
        token: Token[RequestContext] = context_var.set(ctx)
        try:
            await serve(ctx)
        finally:
            context_var.reset(token)
        return ctx.response.finish()

    handler = _chain(definition.middleware, endpoint)
    response = await handler(Request.from_asgi(scope, receive))
    await send_any(response, send, head=scope["method"] == "HEAD")
