"""Control signals — ``halt`` and ``pass_route``.

Both are non-local exits confined to a single request. They derive from
``BaseException`` so an application's ``except Exception`` never
swallows them:

- ``Pass`` is caught by the dispatcher at the per-route boundary and
  resumes the route walk, exactly like a rejected guard.
- ``Halt`` is caught where a handler is invoked; its value is normalized
  like an ordinary return value.

Usage::

    from crooner import halt, pass_route

    @app.get("/admin")
    def admin(request):
        if not request.headers.get("authorization"):
            halt(401, "who are you?")
        return "welcome"

    @app.get("/:name")
    def by_name(name):
        if name == "static":
            pass_route()
        return name
"""

from typing import Any, NoReturn


class Halt(BaseException):  # noqa: N818
    """Stop the current handler and use ``value`` as its result."""

    def __init__(self, value: Any = None) -> None:
        super().__init__(value)
        self.value = value


class Pass(BaseException):  # noqa: N818
    """Treat the current route as non-matching and try the next one."""


def halt(*response: Any) -> NoReturn:
    """Halt the handler immediately.

    ``halt()`` yields ``None``, ``halt(value)`` yields *value* and
    ``halt(a, b, ...)`` yields the tuple ``(a, b, ...)``.
    """
    if not response:
        raise Halt(None)
    if len(response) == 1:
        raise Halt(response[0])
    raise Halt(tuple(response))


def pass_route() -> NoReturn:
    """Skip the current route and continue matching."""
    raise Pass
