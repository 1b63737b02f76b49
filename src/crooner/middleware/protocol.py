"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> AnyResponse: ...

No base class required. ``next`` runs the rest of the chain (and
finally the dispatcher) and returns a sealed ``Response`` or
``StreamingResponse``; both share the ``.with_header()`` /
``.with_status()`` API, so middleware can adjust either uniformly.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from crooner.http.request import Request
from crooner.http.response import AnyResponse

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Protocol for crooner middleware.

    Accepts both functions and callable objects::

        async def timing(request: Request, next: Next) -> AnyResponse:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
