"""Route table — per-application ordered routes, keyed by HTTP method.

Order is significant: routes are tried first-declared, first-tried.
Tables are copied, never shared, when an application is derived.
"""

from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType

from crooner._internal.types import Guard, Handler
from crooner.routing.pattern import compile_path
from crooner.routing.route import Route


class RouteTable:
    """Mutable during setup; frozen into read-only tuples by ``freeze()``.

    Usage::

        table = RouteTable()
        table.register("GET", "/hello/:name", (), hello)
        table.routes_for("HEAD")  # synthetic HEAD route for the GET
    """

    __slots__ = ("_routes",)

    def __init__(self) -> None:
        self._routes: dict[str, list[Route]] = {}

    def register(
        self,
        method: str,
        path_spec: object,
        guards: Sequence[Guard],
        handler: Handler,
    ) -> Route:
        """Append a route for *method* and return it.

        A ``GET`` also registers a ``HEAD`` route at the same path with the
        same guards, answering with the GET handler's status and headers
        and an empty body.
        """
        method = method.upper()
        pattern = compile_path(path_spec)
        route = Route(method, pattern, handler, tuple(guards))
        self._routes.setdefault(method, []).append(route)
        if method == "GET":
            head = Route("HEAD", pattern, handler, tuple(guards), discard_body=True)
            self._routes.setdefault("HEAD", []).append(head)
        return route

    def routes_for(self, method: str) -> Sequence[Route]:
        """Routes for *method* in declaration order (empty if none)."""
        return tuple(self._routes.get(method, ()))

    @property
    def methods(self) -> tuple[str, ...]:
        return tuple(self._routes)

    def __iter__(self) -> Iterator[Route]:
        for routes in self._routes.values():
            yield from routes

    def __len__(self) -> int:
        return sum(len(routes) for routes in self._routes.values())

    def copy(self) -> RouteTable:
        """A new table with new per-method lists holding the same routes."""
        clone = RouteTable()
        clone._routes = {method: list(routes) for method, routes in self._routes.items()}
        return clone

    def freeze(self) -> Mapping[str, tuple[Route, ...]]:
        """Read-only snapshot used by the dispatcher."""
        return MappingProxyType(
            {method: tuple(routes) for method, routes in self._routes.items()}
        )
