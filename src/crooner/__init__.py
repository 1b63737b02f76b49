"""Crooner — a small, route-first web framework for ASGI.

Routes are declared against path patterns and tried in order; the first
one whose pattern and guards accept a request handles it. Handlers
return plain values (strings, status tuples, iterables) that crooner
turns into responses.

Basic usage::

    from crooner import App

    app = App()

    @app.get("/hello/:name")
    def hello(name):
        return f"Hello {name}"

    app.run()

Sessions (``pip install crooner[sessions]``)::

    app.set(sessions=True, secret_key="s3cr3t")
"""

# Declare free-threading support (PEP 703)
_Py_mod_gil = 0

__version__ = "0.9.0"
__all__ = [
    "Alias",
    "AnyResponse",
    "App",
    "AppConfig",
    "ConfigurationError",
    "CroonerError",
    "Halt",
    "Middleware",
    "Next",
    "NotFound",
    "Pass",
    "Request",
    "RequestContext",
    "Response",
    "StreamingResponse",
    "get_context",
    "get_request",
    "halt",
    "pass_route",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import crooner`` fast while providing a clean top-level API.
    """
    if name == "App":
        from crooner.app import App

        return App

    if name == "AppConfig":
        from crooner.config import AppConfig

        return AppConfig

    if name == "Request":
        from crooner.http.request import Request

        return Request

    if name in ("AnyResponse", "Response", "StreamingResponse"):
        from crooner.http import response as _resp

        return getattr(_resp, name)

    if name == "Alias":
        from crooner.server.normalize import Alias

        return Alias

    if name in ("Halt", "Pass", "halt", "pass_route"):
        from crooner import control as _control

        return getattr(_control, name)

    if name in ("Middleware", "Next"):
        from crooner.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("RequestContext", "get_context", "get_request"):
        from crooner import context as _ctx

        return getattr(_ctx, name)

    if name in ("ConfigurationError", "CroonerError", "NotFound"):
        from crooner import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
