"""Per-request state and the ContextVar that exposes it.

A ``RequestContext`` is created for each request by the ASGI handler,
handed to every filter, guard, handler and recovery handler, and
dropped when the response is sealed. It is never shared between
requests.

``ContextVar`` is task-local under asyncio and thread-local under
free-threading, so ``get_context()`` always returns the caller's own
request. Module helpers (``crooner.helpers``) rely on it.
"""

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from crooner.http.request import Request
from crooner.http.response import MutableResponse

if TYPE_CHECKING:
    from crooner.config import AppConfig
    from crooner.definition import Definition
    from crooner.routing.route import Route


@dataclass(slots=True, eq=False)
class RequestContext:
    """Everything known about the request being served.

    ``params`` holds query and form parameters until a route matches;
    from then on it is the matched route's parameters merged on top.
    ``error`` is the failure being recovered, if any.
    """

    request: Request
    definition: Definition
    response: MutableResponse = field(default_factory=MutableResponse)
    params: dict[str, Any] = field(default_factory=dict)
    route: Route | None = None
    error: BaseException | None = None
    _session: dict[str, Any] | None = field(default=None, repr=False)

    @property
    def config(self) -> AppConfig:
        return self.definition.config

    @property
    def session(self) -> dict[str, Any]:
        """The signed-cookie session when sessions are enabled.

        Without the session middleware this is a plain dict that lives
        as long as the request.
        """
        if self._session is None:
            from crooner.middleware.sessions import get_session

            try:
                self._session = get_session()
            except LookupError:
                self._session = {}
        return self._session


context_var: ContextVar[RequestContext] = ContextVar("crooner_context")
"""The current request context. Set by the ASGI handler before dispatch."""


def get_context() -> RequestContext:
    """Return the current request context.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get()


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request.
    """
    return context_var.get().request
